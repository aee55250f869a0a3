from __future__ import annotations

import html
from typing import Any

from bs4 import BeautifulSoup, NavigableString, Tag

from chatlog_studio.fragment import Element, Node, Text


VOID_TAGS = frozenset({"br", "hr", "img"})
BLOCK_TAGS = frozenset({"details", "div", "hr", "p", "section", "summary"})

# Written verbatim; the image pattern only captures values without quotes.
RAW_ATTRS = frozenset({"src"})


def _attr_html(name: str, value: str) -> str:
    if value == "":
        return f" {name}"
    if name in RAW_ATTRS:
        return f' {name}="{value}"'
    return f' {name}="{html.escape(value, quote=True)}"'


def _is_block(node: Node) -> bool:
    return isinstance(node, Element) and node.tag in BLOCK_TAGS


def _node_html(node: Node) -> str:
    if isinstance(node, Text):
        return html.escape(node.value, quote=False)
    attrs = "".join(_attr_html(name, value) for name, value in node.all_attrs())
    if node.tag in VOID_TAGS:
        return f"<{node.tag}{attrs}>"
    parts = [_node_html(child) for child in node.children]
    sep = "\n" if parts and all(_is_block(child) for child in node.children) else ""
    return f"<{node.tag}{attrs}>{sep}{sep.join(parts)}{sep}</{node.tag}>"


def to_html(node: Node | None) -> str:
    if node is None:
        return ""
    return _node_html(node)


def _live_node(soup: BeautifulSoup, node: Node) -> Tag | NavigableString:
    if isinstance(node, Text):
        return NavigableString(node.value)
    tag = soup.new_tag(node.tag, attrs=dict(node.all_attrs()))
    for child in node.children:
        tag.append(_live_node(soup, child))
    return tag


def to_live_tree(node: Node | None) -> Tag | None:
    """Build the preview tree as real tag objects, without going through markup."""
    if node is None:
        return None
    soup = BeautifulSoup("", "html.parser")
    root = _live_node(soup, node)
    soup.append(root)
    return root


def parse_html(markup: str) -> Tag | None:
    soup = BeautifulSoup(markup, "html.parser")
    return soup.find(True)


def tree_signature(node: Any) -> Any:
    """Whitespace-insensitive structural summary of a BeautifulSoup node.

    Adjacent strings are merged and whitespace-only strings dropped, so a
    parsed string and a tree built directly compare equal when they describe
    the same document.
    """
    if node is None:
        return None
    if isinstance(node, NavigableString):
        return str(node)
    children: list[Any] = []
    pending = ""
    for child in node.children:
        if isinstance(child, NavigableString):
            pending += str(child)
            continue
        if pending.strip():
            children.append(pending)
        pending = ""
        children.append(tree_signature(child))
    if pending.strip():
        children.append(pending)
    attrs = tuple(sorted((k, " ".join(v) if isinstance(v, list) else v) for k, v in node.attrs.items()))
    return (node.name, attrs, tuple(children))
