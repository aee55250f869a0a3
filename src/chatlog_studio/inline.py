from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence, Union

from chatlog_studio.blocks import IMAGE_TAG
from chatlog_studio.config import StyleConfig
from chatlog_studio.fragment import Element, Node, Text, el, merge_text, pct, px
from chatlog_studio.writers import to_html


class InlineMode(str, Enum):
    FULL = "full"
    BUBBLE = "bubble"


@dataclass(frozen=True)
class Placeholder:
    """Stand-in for an already built fragment; ``index`` points into the side table."""

    index: int


Atom = Union[str, Placeholder]

QUOTE_PAD = ("padding", "0.1em 0.4em")
QUOTE_RADIUS = ("border-radius", "4px")

DIALOGUE_QUOTES = (('"', '"'), ("“", "”"))
THOUGHT_QUOTES = (("'", "'"), ("‘", "’"))


class _SideTable:
    def __init__(self) -> None:
        self._nodes: list[Node] = []

    def hold(self, node: Node) -> Placeholder:
        self._nodes.append(node)
        return Placeholder(len(self._nodes) - 1)

    def restore(self, atoms: Sequence[Atom]) -> list[Node]:
        nodes: list[Node] = []
        for atom in atoms:
            if isinstance(atom, Placeholder):
                nodes.append(self._nodes[atom.index])
            else:
                nodes.append(Text(atom))
        return merge_text(nodes)


def image_container(src: str, config: StyleConfig) -> Element:
    img_style = [
        ("max-width", pct(config.image_max_width)),
        ("height", "auto"),
        ("border-radius", px(config.image_radius)),
        (
            ("border", f"{px(config.image_border_width)} solid {config.image_border_color}")
            if config.image_border_width > 0
            else None
        ),
        ("box-shadow", "0 4px 12px rgba(0, 0, 0, 0.15)") if config.image_shadow else None,
    ]
    image = el("img", img_style, attrs=[("src", src), ("alt", "")])
    return el("div", [("text-align", config.image_align), ("margin", "1em 0")], [image])


def _extract_images(text: str, config: StyleConfig, table: _SideTable) -> list[Atom]:
    atoms: list[Atom] = []
    pos = 0
    for match in IMAGE_TAG.finditer(text):
        atoms.extend(text[pos : match.start()])
        atoms.append(table.hold(image_container(match.group(1), config)))
        pos = match.end()
    atoms.extend(text[pos:])
    return atoms


def _is_pair(atoms: Sequence[Atom], i: int, ch: str) -> bool:
    return i + 1 < len(atoms) and atoms[i] == ch and atoms[i + 1] == ch


def _replace_bold(
    atoms: list[Atom], table: _SideTable, make: Callable[[list[Node]], Element]
) -> list[Atom]:
    out: list[Atom] = []
    i = 0
    n = len(atoms)
    while i < n:
        if _is_pair(atoms, i, "*"):
            # Non-greedy: the first closing pair after at least one content atom.
            j = next((k for k in range(i + 3, n - 1) if _is_pair(atoms, k, "*")), None)
            if j is not None:
                out.append(table.hold(make(table.restore(atoms[i + 2 : j]))))
                i = j + 2
                continue
        out.append(atoms[i])
        i += 1
    return out


def _replace_delimited(
    atoms: list[Atom],
    table: _SideTable,
    opener: str,
    closer: str,
    make: Callable[[list[Node]], Element],
    *,
    keep_delimiters: bool = False,
) -> list[Atom]:
    out: list[Atom] = []
    i = 0
    n = len(atoms)
    while i < n:
        if atoms[i] == opener:
            j = next((k for k in range(i + 1, n) if atoms[k] == closer), None)
            if j is not None and j > i + 1:
                inner = atoms[i + 1 : j]
                if keep_delimiters:
                    inner = [opener, *inner, closer]
                out.append(table.hold(make(table.restore(inner))))
                i = j + 1
                continue
        out.append(atoms[i])
        i += 1
    return out


def _span_makers(mode: InlineMode, config: StyleConfig) -> dict[str, Callable[[list[Node]], Element]]:
    if mode is InlineMode.BUBBLE:
        return {
            "bold": lambda nodes: el("strong", [("font-weight", "bold")], nodes),
            "italic": lambda nodes: el("em", [("font-style", "italic")], nodes),
        }
    return {
        "bold": lambda nodes: el("strong", [("font-weight", "bold"), ("color", config.bold_color)], nodes),
        "italic": lambda nodes: el("em", [("font-style", "italic"), ("color", config.italic_color)], nodes),
        "dialogue": lambda nodes: el(
            "span",
            [("color", config.dialogue_color), ("background", config.dialogue_bg_color), QUOTE_PAD, QUOTE_RADIUS],
            nodes,
        ),
        "thought": lambda nodes: el(
            "span",
            [
                ("font-style", "italic"),
                ("color", config.thought_color),
                ("background", config.thought_bg_color),
                QUOTE_PAD,
                QUOTE_RADIUS,
            ],
            nodes,
        ),
    }


def resolve_nodes(text: str, mode: InlineMode, config: StyleConfig) -> list[Node]:
    """Turn one line of transcript text into inline fragment nodes.

    Images are pulled out first; everything else stays plain text, so the
    writers escape it no matter what the later markup steps do. Each recognized
    span becomes a placeholder and its contents are frozen at that point.
    """
    table = _SideTable()
    makers = _span_makers(mode, config)

    atoms = _extract_images(text, config, table)
    atoms = _replace_bold(atoms, table, makers["bold"])
    atoms = _replace_delimited(atoms, table, "*", "*", makers["italic"])

    if mode is InlineMode.FULL:
        for opener, closer in DIALOGUE_QUOTES:
            atoms = _replace_delimited(atoms, table, opener, closer, makers["dialogue"], keep_delimiters=True)
        for opener, closer in THOUGHT_QUOTES:
            atoms = _replace_delimited(atoms, table, opener, closer, makers["thought"], keep_delimiters=True)

    return table.restore(atoms)


def resolve(text: str, mode: InlineMode, config: StyleConfig) -> str:
    return "".join(to_html(node) for node in resolve_nodes(text, mode, config))
