from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from chatlog_studio.blocks import IMAGE_TAG


DIVIDER_PATTERN = re.compile(r"^(?:-{3,}|={3,}|\*{3,})$")
HEADING_PATTERN = re.compile(r"^(#{1,3})\s+(.*)$")
USER_MARKER = "<<"
AI_MARKER = ">>"


class LineKind(str, Enum):
    DIVIDER = "divider"
    HEADING = "heading"
    USER = "user"
    AI = "ai"
    NARRATION = "narration"


class LineTag(str, Enum):
    """What the previous line looked like, for the spacing lookback."""

    DIVIDER = "divider"
    HEADING = "heading"
    USER = "user"
    AI = "ai"
    NARRATION = "narration"
    IMAGE = "image"


@dataclass(frozen=True)
class ClassifiedLine:
    kind: LineKind
    text: str = ""
    level: int = 0


def classify(raw_line: str) -> ClassifiedLine:
    line = raw_line.strip()

    if DIVIDER_PATTERN.match(line):
        return ClassifiedLine(LineKind.DIVIDER)

    heading = HEADING_PATTERN.match(line)
    if heading:
        return ClassifiedLine(LineKind.HEADING, heading.group(2).strip(), len(heading.group(1)))

    if line.startswith(USER_MARKER):
        return ClassifiedLine(LineKind.USER, line[len(USER_MARKER) :].strip())

    if line.startswith(AI_MARKER):
        return ClassifiedLine(LineKind.AI, line[len(AI_MARKER) :].strip())

    return ClassifiedLine(LineKind.NARRATION, line)


def is_image_only(text: str) -> bool:
    return IMAGE_TAG.search(text) is not None and not IMAGE_TAG.sub("", text).strip()


def line_tag(line: ClassifiedLine) -> LineTag:
    if line.kind is LineKind.NARRATION and is_image_only(line.text):
        return LineTag.IMAGE
    return LineTag(line.kind.value)
