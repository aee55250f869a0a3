from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

from bs4 import NavigableString, Tag
from textual.app import App, ComposeResult
from textual.containers import Vertical
from textual.widgets import Footer, Header, Input, Static, Tree
from textual.widgets.tree import TreeNode

from chatlog_studio.blocks import TranscriptLoadError, load_blocks
from chatlog_studio.config import ConfigLoadError, load_config
from chatlog_studio.transcript import render_preview_tree


STYLE_SUMMARY_LIMIT = 60
TEXT_LIMIT = 200


@dataclass(frozen=True)
class TreeEntry:
    label: str
    search_text: str
    children: list[TreeEntry] = field(default_factory=list)
    is_text: bool = False


def _shorten(value: str, limit: int) -> str:
    value = " ".join(value.split())
    return value if len(value) <= limit else value[: limit - 1] + "…"


def _element_label(tag: Tag) -> str:
    parts = [tag.name]
    for name, value in tag.attrs.items():
        if name == "style":
            continue
        parts.append(f"{name}={value}" if value else name)
    style = tag.attrs.get("style")
    if style:
        parts.append(f"[{_shorten(str(style), STYLE_SUMMARY_LIMIT)}]")
    return " ".join(parts)


def build_tree_model(tag: Tag | None) -> TreeEntry | None:
    """Mirror a live preview tree as plain entries: one per element, leaves for text."""
    if tag is None:
        return None
    children: list[TreeEntry] = []
    for child in tag.children:
        if isinstance(child, NavigableString):
            if not child.strip():
                continue
            children.append(TreeEntry(label=_shorten(str(child), TEXT_LIMIT), search_text=str(child).lower(), is_text=True))
        elif isinstance(child, Tag):
            entry = build_tree_model(child)
            if entry is not None:
                children.append(entry)
    own = " ".join([tag.name, str(tag.attrs.get("style", ""))]).lower()
    return TreeEntry(label=_element_label(tag), search_text=own, children=children)


def filter_model(entry: TreeEntry | None, query: str) -> TreeEntry | None:
    """Keep entries matching ``query`` plus the ancestors that lead to them."""
    if entry is None:
        return None
    q = (query or "").strip().lower()
    if not q:
        return entry
    if q in entry.search_text:
        return entry
    kept = [c for c in (filter_model(child, q) for child in entry.children) if c is not None]
    if not kept:
        return None
    return TreeEntry(label=entry.label, search_text=entry.search_text, children=kept, is_text=entry.is_text)


def count_elements(entry: TreeEntry | None) -> int:
    if entry is None or entry.is_text:
        return 0
    return 1 + sum(count_elements(c) for c in entry.children)


def _add_entry(parent: TreeNode[Any], entry: TreeEntry) -> None:
    if entry.is_text or not entry.children:
        parent.add_leaf(entry.label)
        return
    node = parent.add(entry.label, expand=True)
    for child in entry.children:
        _add_entry(node, child)


class PreviewTreeApp(App):
    BINDINGS = [
        ("q", "quit", "Quit"),
        ("/", "focus_search", "Filter"),
        ("r", "reload", "Reload"),
    ]

    def __init__(
        self,
        *,
        paths: Sequence[Path],
        config_path: Path | None = None,
        collapsible: bool = False,
    ) -> None:
        super().__init__()
        self._paths = list(paths)
        self._config_path = config_path
        self._collapsible = collapsible
        self._model: TreeEntry | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical():
            yield Static(f"Inputs: {', '.join(str(p) for p in self._paths)}", id="inputs")
            yield Input(placeholder="Filter by tag, style or text…", id="query")
            yield Tree("Fragment", id="tree")
        yield Footer()

    async def on_mount(self) -> None:
        self.action_reload()

    def action_reload(self) -> None:
        try:
            config = load_config(self._config_path)
            blocks = load_blocks(self._paths, collapsible=self._collapsible)
        except (ConfigLoadError, TranscriptLoadError) as e:
            self.exit(message=str(e))
            return
        self._model = build_tree_model(render_preview_tree(blocks, config))
        self._refresh_tree()

    def _refresh_tree(self) -> None:
        query = self.query_one("#query", Input).value
        shown = filter_model(self._model, query)

        tree = self.query_one("#tree", Tree)
        tree.clear()
        root = tree.root
        if shown is None:
            root.label = "Fragment (empty)" if self._model is None else "Fragment (no matches)"
            return
        for child in shown.children:
            _add_entry(root, child)
        root.label = f"{shown.label}  ({count_elements(shown)}/{count_elements(self._model)} elements shown)"
        root.expand()

    def on_input_changed(self, _event: Input.Changed) -> None:
        self._refresh_tree()

    def action_focus_search(self) -> None:
        self.query_one("#query", Input).focus()


def run_tui(
    *,
    paths: Sequence[Path],
    config_path: Path | None = None,
    collapsible: bool = False,
) -> None:
    app = PreviewTreeApp(paths=paths, config_path=config_path, collapsible=collapsible)
    app.run()
