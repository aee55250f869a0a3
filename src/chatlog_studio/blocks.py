from __future__ import annotations

import json
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Iterable, Sequence


IMAGE_TAG = re.compile(r"<img\s+[^>]*?(?<![\w-])src=\"([^\"]+)\"[^>]*>", re.IGNORECASE)
LINE_SPLIT = re.compile(r"\r?\n")


class TranscriptLoadError(RuntimeError):
    pass


@dataclass(frozen=True)
class ContentBlock:
    id: int
    title: str
    content: str
    collapsible: bool = False
    collapsed: bool = False


def has_image(text: str) -> bool:
    return IMAGE_TAG.search(text) is not None


def is_contentful(block: ContentBlock) -> bool:
    return bool(block.content.strip()) or has_image(block.content)


def split_lines(content: str) -> list[str]:
    return [line for line in LINE_SPLIT.split(content) if line.strip()]


class BlockIds:
    """Monotonic id allocator; ids already taken are never handed out again."""

    def __init__(self, start: int = 0) -> None:
        self._next = start

    def reserve(self, value: int) -> int:
        self._next = max(self._next, value + 1)
        return value

    def allocate(self) -> int:
        value = self._next
        self._next += 1
        return value


def block_from_dict(data: dict[str, Any], ids: BlockIds, *, default_title: str = "") -> ContentBlock:
    content = data.get("content", "")
    if not isinstance(content, str):
        raise TranscriptLoadError("Block 'content' must be a string")
    raw_id = data.get("id")
    if isinstance(raw_id, int) and not isinstance(raw_id, bool):
        block_id = ids.reserve(raw_id)
    else:
        block_id = ids.allocate()
    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        title = default_title or f"Block {block_id + 1}"
    return ContentBlock(
        id=block_id,
        title=title,
        content=content,
        collapsible=bool(data.get("collapsible", False)),
        collapsed=bool(data.get("collapsed", False)),
    )


def _blocks_from_json(path: Path, ids: BlockIds) -> list[ContentBlock]:
    try:
        payload: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise TranscriptLoadError(f"Invalid JSON in {path}: {e}") from e
    if isinstance(payload, dict):
        payload = payload.get("blocks")
    if not isinstance(payload, list):
        raise TranscriptLoadError(f"{path} must hold a list of blocks or an object with a 'blocks' list")
    blocks: list[ContentBlock] = []
    for idx, item in enumerate(payload):
        if not isinstance(item, dict):
            raise TranscriptLoadError(f"{path}: block #{idx} is not an object")
        blocks.append(block_from_dict(item, ids))
    return blocks


def load_blocks(paths: Sequence[str | Path], *, collapsible: bool = False) -> list[ContentBlock]:
    ids = BlockIds()
    blocks: list[ContentBlock] = []
    for p in paths:
        path = Path(p).expanduser()
        if not path.exists():
            raise TranscriptLoadError(f"File not found: {path}")
        try:
            if path.suffix.lower() == ".json":
                blocks.extend(_blocks_from_json(path, ids))
            else:
                text = path.read_text(encoding="utf-8")
                blocks.append(block_from_dict({"content": text}, ids, default_title=path.stem))
        except OSError as e:
            raise TranscriptLoadError(f"Cannot read {path}: {e}") from e
    if collapsible:
        blocks = [_as_collapsible(b) for b in blocks]
    return blocks


def _as_collapsible(block: ContentBlock) -> ContentBlock:
    return block if block.collapsible else replace(block, collapsible=True)


def blocks_from_texts(texts: Iterable[str]) -> list[ContentBlock]:
    ids = BlockIds()
    return [block_from_dict({"content": text}, ids) for text in texts]
