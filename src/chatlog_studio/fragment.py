from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence, Union

from chatlog_studio.colors import format_number


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Element:
    """One tag of rendered output.

    ``attrs`` and ``style`` are ordered pairs so both writers emit them in the
    same order. A boolean attribute is stored with an empty value.
    """

    tag: str
    attrs: tuple[tuple[str, str], ...] = ()
    style: tuple[tuple[str, str], ...] = ()
    children: tuple[Node, ...] = field(default=())

    def style_text(self) -> str:
        return " ".join(f"{name}: {value};" for name, value in self.style)

    def all_attrs(self) -> list[tuple[str, str]]:
        pairs = list(self.attrs)
        if self.style:
            pairs.append(("style", self.style_text()))
        return pairs

    def iter(self) -> Iterable[Node]:
        yield self
        for child in self.children:
            if isinstance(child, Element):
                yield from child.iter()
            else:
                yield child


Node = Union[Element, Text]


def el(
    tag: str,
    style: Sequence[tuple[str, str] | None] = (),
    children: Sequence[Node] = (),
    attrs: Sequence[tuple[str, str]] = (),
) -> Element:
    # ``None`` entries let builders drop optional declarations inline.
    return Element(
        tag=tag,
        attrs=tuple(attrs),
        style=tuple(decl for decl in style if decl is not None),
        children=tuple(children),
    )


def text(value: str) -> Text:
    return Text(value)


def merge_text(nodes: Iterable[Node]) -> list[Node]:
    out: list[Node] = []
    for node in nodes:
        if isinstance(node, Text):
            if not node.value:
                continue
            if out and isinstance(out[-1], Text):
                out[-1] = Text(out[-1].value + node.value)
                continue
        out.append(node)
    return out


def px(value: float) -> str:
    return f"{format_number(value)}px"


def em(value: float) -> str:
    return f"{format_number(value)}em"


def pct(value: float) -> str:
    return f"{format_number(value)}%"
