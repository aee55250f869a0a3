from __future__ import annotations

import logging
from typing import Sequence

from chatlog_studio.blocks import ContentBlock, is_contentful
from chatlog_studio.colors import (
    adjust_color,
    build_linear_gradient,
    build_radial_gradient,
    contrast_text_color,
    format_number,
    hex_to_rgba,
)
from chatlog_studio.config import StyleConfig
from chatlog_studio.fragment import Element, Node, el, em, px, text
from chatlog_studio.render import render_content


logger = logging.getLogger(__name__)

BADGE_RADIUS = {"pill": 20, "rounded": 6, "square": 0}
SECTION_MARKER = "▼"


def _badge(label: str, color: str, style: str, config: StyleConfig) -> Element:
    scale = config.badge_scale
    if style == "outline":
        paint = [("background", "transparent"), ("color", color), ("border", f"1px solid {color}")]
    elif style == "ghost":
        paint = [("background", hex_to_rgba(color, 0.12)), ("color", color), ("border", "1px solid transparent")]
    else:
        paint = [("background", color), ("color", contrast_text_color(color)), ("border", f"1px solid {color}")]
    return el(
        "span",
        [
            ("display", "inline-block"),
            ("padding", f"{px(6 * scale)} {px(12 * scale)}"),
            ("border-radius", px(BADGE_RADIUS[config.badge_shape] * scale)),
            ("font-size", em(0.75 * scale)),
            ("font-weight", "600"),
            ("margin", "0.25em"),
            *paint,
        ],
        [text(label)],
    )


def _badges(config: StyleConfig) -> list[Element]:
    # The sub-model badge is drawn outlined next to filled ones.
    sub_style = "outline" if config.badge_style == "filled" else config.badge_style
    specs = [
        (config.ai_model, config.badge_model_color, config.badge_style),
        (config.prompt_name, config.badge_prompt_color, config.badge_style),
        (config.sub_model, config.badge_sub_color, sub_style),
    ]
    return [_badge(label, color, style, config) for label, color, style in specs if label]


def _title(label: str, config: StyleConfig) -> Element:
    content: list[Node] = [text(label)]
    if config.char_link:
        content = [
            el(
                "a",
                [("color", "inherit"), ("text-decoration", "none")],
                content,
                attrs=[("href", config.char_link), ("target", "_blank")],
            )
        ]
    return el(
        "div",
        [("font-size", "1.5em"), ("font-weight", "800"), ("color", config.char_color), ("line-height", "1.3")],
        content,
    )


def has_header(config: StyleConfig) -> bool:
    return any(
        (config.header_title, config.char_name, config.ai_model, config.prompt_name, config.sub_model)
    )


def render_header(config: StyleConfig) -> Element:
    bg = config.bg_color
    children: list[Node] = []
    if config.header_title:
        if config.char_name:
            badge = _badge(config.char_name, config.char_color, config.badge_style, config)
            children.append(el("div", [("margin-bottom", "0.4em")], [badge]))
        children.append(_title(config.header_title, config))
    elif config.char_name:
        children.append(_title(config.char_name, config))

    badges = _badges(config)
    if badges:
        children.append(el("div", [("margin-top", "0.75em")], badges))

    return el(
        "div",
        [
            ("background", build_linear_gradient(135, adjust_color(bg, 12), adjust_color(bg, 6))),
            ("border", f"1px solid {adjust_color(bg, 25)}40"),
            ("border-radius", "12px"),
            ("padding", "1.5em"),
            ("margin-bottom", "2em"),
            ("text-align", "center"),
        ],
        children,
    )


def _label_color(config: StyleConfig) -> str:
    return config.section_label_color or adjust_color(config.text_color, -60)


def render_section(block: ContentBlock, index: int, config: StyleConfig) -> Element:
    lines = render_content(block.content, config)
    bg = config.bg_color
    if block.collapsible:
        summary = el(
            "summary",
            [
                ("padding", "0.75em 1em"),
                ("background", adjust_color(bg, int(config.collapsible_bg_shift))),
                ("cursor", "pointer"),
                ("font-weight", "600"),
            ],
            [text(f"{SECTION_MARKER} {block.title}")],
        )
        return el(
            "details",
            [
                ("border", f"1px solid {adjust_color(bg, 30)}"),
                ("border-radius", "8px"),
                ("margin", "1em 0"),
                ("overflow", "hidden"),
            ],
            [summary, el("div", [("padding", "1em")], lines)],
            attrs=[] if block.collapsed else [("open", "")],
        )

    label = el(
        "div",
        [
            ("font-size", "0.75em"),
            ("font-weight", "600"),
            ("text-transform", "uppercase"),
            ("letter-spacing", "0.1em"),
            ("color", _label_color(config)),
            ("margin-bottom", "1em"),
        ],
        [text(block.title)],
    )
    divider = (
        [
            ("border-top", f"1px solid {adjust_color(bg, 25)}"),
            ("padding-top", "1.5em"),
            ("margin-top", "2em"),
        ]
        if index > 0
        else []
    )
    return el("div", divider, [label, *lines])


def _container_background(config: StyleConfig) -> str:
    if not config.use_gradient_bg:
        return config.bg_color
    if config.bg_gradient_type == "radial":
        return build_radial_gradient(config.bg_color, config.bg_gradient_color)
    return build_linear_gradient(config.bg_gradient_angle, config.bg_color, config.bg_gradient_color)


def container_style(config: StyleConfig) -> list[tuple[str, str] | None]:
    border = None
    if config.border_width > 0:
        border = ("border", f"{px(config.border_width)} {config.border_style} {config.border_color}")
    shadow = None
    alpha = round(config.shadow_intensity / 100, 2)
    if config.box_shadow and alpha > 0:
        shadow = ("box-shadow", f"0 4px 24px rgba(0, 0, 0, {format_number(alpha)})")
    return [
        ("max-width", px(config.container_width)),
        ("margin", "0 auto"),
        ("padding", em(config.container_padding)),
        ("background", _container_background(config)),
        ("color", config.text_color),
        ("font-family", config.font_family),
        ("font-size", px(config.font_size)),
        ("line-height", format_number(config.line_height)),
        ("letter-spacing", em(config.letter_spacing)),
        ("border-radius", px(config.border_radius)),
        border,
        shadow,
        ("box-sizing", "border-box"),
    ]


def compose(blocks: Sequence[ContentBlock], config: StyleConfig) -> Element | None:
    """Assemble the whole fragment, or ``None`` when no block has content."""
    visible = [b for b in blocks if is_contentful(b)]
    logger.debug("Composing %d of %d blocks", len(visible), len(blocks))
    if not visible:
        return None

    children: list[Node] = []
    if has_header(config):
        children.append(render_header(config))

    if len(visible) == 1 and not visible[0].collapsible:
        children.extend(render_content(visible[0].content, config))
    else:
        children.extend(render_section(block, idx, config) for idx, block in enumerate(visible))

    return el("div", container_style(config), children)
