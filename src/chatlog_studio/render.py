from __future__ import annotations

from chatlog_studio.blocks import has_image, split_lines
from chatlog_studio.classify import ClassifiedLine, LineKind, LineTag, classify, line_tag
from chatlog_studio.colors import (
    adjust_color,
    apply_opacity,
    build_linear_gradient,
    contrast_text_color,
    format_number,
)
from chatlog_studio.config import StyleConfig
from chatlog_studio.fragment import Element, Node, el, em, pct, px, text
from chatlog_studio.inline import InlineMode, resolve_nodes


# level -> (font-size em, font-weight, margin-top em, margin-bottom em)
HEADING_PRESETS: dict[int, tuple[float, int, float, float]] = {
    1: (1.5, 800, 1.2, 0.6),
    2: (1.3, 700, 1.0, 0.5),
    3: (1.1, 600, 0.8, 0.4),
}

GAP_AFTER = frozenset({LineTag.NARRATION, LineTag.HEADING, LineTag.IMAGE})
TAIL_RADIUS = "0.25em"


def _gap(prev_tag: LineTag | None, config: StyleConfig) -> float:
    return config.turn_gap if prev_tag in GAP_AFTER else 0


def render_divider(config: StyleConfig) -> Element:
    return el(
        "hr",
        [
            ("border", "none"),
            ("border-top", f"{px(config.divider_width)} {config.divider_style} {config.divider_color}"),
            ("margin", "1.5em 0"),
        ],
    )


def render_heading(line: ClassifiedLine, prev_tag: LineTag | None, config: StyleConfig) -> Element:
    size, weight, top, bottom = HEADING_PRESETS.get(line.level, HEADING_PRESETS[3])
    return el(
        "div" if has_image(line.text) else "p",
        [
            ("font-size", em(size * config.heading_scale)),
            ("font-weight", str(weight)),
            ("color", config.heading_color),
            ("margin", f"{em(top + _gap(prev_tag, config))} 0 {em(bottom)} 0"),
            ("line-height", "1.4"),
        ],
        resolve_nodes(line.text, InlineMode.FULL, config),
    )


def _bubble_background(base: str, config: StyleConfig) -> str:
    opacity = config.bubble_opacity / 100
    if config.bubble_gradient:
        return build_linear_gradient(
            config.bubble_gradient_angle,
            apply_opacity(base, opacity),
            apply_opacity(adjust_color(base, int(config.bubble_gradient_shift)), opacity),
        )
    return apply_opacity(base, opacity)


def _bubble_border(is_user: bool, config: StyleConfig) -> tuple[str, str] | None:
    if config.bubble_border == "none" or config.bubble_border_width <= 0:
        return None
    value = f"{px(config.bubble_border_width)} solid {config.bubble_border_color}"
    if config.bubble_border == "side":
        return ("border-right" if is_user else "border-left", value)
    return ("border", value)


def render_bubble(line: ClassifiedLine, prev_tag: LineTag | None, config: StyleConfig) -> Element:
    is_user = line.kind is LineKind.USER
    base = config.user_bubble_color if is_user else config.ai_bubble_color
    r = px(config.bubble_radius)
    radius = f"{r} {r} {TAIL_RADIUS} {r}" if is_user else f"{r} {r} {r} {TAIL_RADIUS}"

    children: list[Node] = []
    if config.show_nametag:
        name = (config.user_name or "User") if is_user else (config.char_name or "AI")
        children.append(
            el(
                "span",
                [
                    ("display", "block"),
                    ("font-size", "0.75em"),
                    ("font-weight", "600"),
                    ("opacity", format_number(config.nametag_opacity / 100)),
                    ("margin-bottom", "0.25em"),
                    ("text-align", "right") if is_user else None,
                ],
                [text(name)],
            )
        )
    children.extend(resolve_nodes(line.text, InlineMode.BUBBLE, config))

    bubble = el(
        "div",
        [
            ("display", "inline-block"),
            ("max-width", pct(config.bubble_max_width)),
            ("padding", f"{em(config.bubble_padding * 0.75)} {em(config.bubble_padding)}"),
            ("border-radius", radius),
            ("background", _bubble_background(base, config)),
            ("color", contrast_text_color(base)),
            _bubble_border(is_user, config),
            ("text-align", "left"),
            ("word-break", config.word_break),
        ],
        children,
    )
    return el(
        "div",
        [
            ("text-align", "right" if is_user else "left"),
            ("margin", f"{em(_gap(prev_tag, config))} 0 {em(config.bubble_spacing)} 0"),
        ],
        [bubble],
    )


def render_narration(line: ClassifiedLine, config: StyleConfig) -> Element:
    return el(
        "div" if has_image(line.text) else "p",
        [
            ("margin", f"0 0 {em(config.paragraph_spacing)} 0"),
            ("text-align", config.text_align),
            ("word-break", config.word_break),
        ],
        resolve_nodes(line.text, InlineMode.FULL, config),
    )


def render_line(line: ClassifiedLine, prev_tag: LineTag | None, config: StyleConfig) -> Element:
    if line.kind is LineKind.DIVIDER:
        return render_divider(config)
    if line.kind is LineKind.HEADING:
        return render_heading(line, prev_tag, config)
    if line.kind in (LineKind.USER, LineKind.AI):
        return render_bubble(line, prev_tag, config)
    return render_narration(line, config)


def render_content(content: str, config: StyleConfig) -> list[Element]:
    """Render every non-blank line of a block, threading the lookback tag."""
    out: list[Element] = []
    prev_tag: LineTag | None = None
    for raw in split_lines(content):
        line = classify(raw)
        out.append(render_line(line, prev_tag, config))
        prev_tag = line_tag(line)
    return out
