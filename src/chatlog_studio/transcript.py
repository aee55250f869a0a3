from __future__ import annotations

import tempfile
import webbrowser
from pathlib import Path
from typing import Sequence

from bs4 import Tag
from jinja2 import Environment, PackageLoader
from markupsafe import Markup

from chatlog_studio.blocks import ContentBlock, is_contentful
from chatlog_studio.compose import compose
from chatlog_studio.config import StyleConfig
from chatlog_studio.writers import to_html, to_live_tree


_jinja_env = Environment(
    loader=PackageLoader("chatlog_studio", "templates"),
    autoescape=True,
)


def get_template(name: str):
    return _jinja_env.get_template(name)


def render_fragment_html(blocks: Sequence[ContentBlock], config: StyleConfig | None = None) -> str:
    return to_html(compose(blocks, config or StyleConfig()))


def render_preview_tree(blocks: Sequence[ContentBlock], config: StyleConfig | None = None) -> Tag | None:
    return to_live_tree(compose(blocks, config or StyleConfig()))


def generate_preview_page(
    blocks: Sequence[ContentBlock],
    config: StyleConfig | None,
    output_dir: str | Path,
    *,
    title: str = "Chat log preview",
) -> Path:
    config = config or StyleConfig()
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    fragment = compose(blocks, config)
    tree = to_live_tree(fragment)
    page = get_template("preview.html").render(
        title=config.header_title or title,
        # The live tree is built from escaped text nodes, so its markup is safe to embed.
        fragment=Markup(str(tree)) if tree is not None else "",
        source=to_html(fragment),
        block_count=sum(1 for b in blocks if is_contentful(b)),
    )
    path = output_dir / "index.html"
    path.write_text(page, encoding="utf-8")
    return path


def open_output(output_dir: str | Path) -> None:
    index = Path(output_dir) / "index.html"
    webbrowser.open(index.resolve().as_uri())


def default_output_dir() -> Path:
    tmp = Path(tempfile.mkdtemp(prefix="chatlog-studio-"))
    return tmp
