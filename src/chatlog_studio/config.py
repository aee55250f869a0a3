from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

from chatlog_studio.colors import clamp_number, normalize_hex


logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "CHATLOG_STUDIO_CONFIG"

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class ConfigLoadError(RuntimeError):
    pass


def _color(default: str) -> Any:
    return field(default=default, metadata={"kind": "color"})


def _number(default: float, lo: float, hi: float) -> Any:
    return field(default=default, metadata={"kind": "number", "range": (lo, hi)})


def _choice(*choices: str) -> Any:
    return field(default=choices[0], metadata={"kind": "choice", "choices": choices})


def _flag(default: bool) -> Any:
    return field(default=default, metadata={"kind": "flag"})


def _text(default: str = "") -> Any:
    return field(default=default, metadata={"kind": "text"})


def camel_key(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def snake_key(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


@dataclass(frozen=True)
class StyleConfig:
    # Identity / header
    header_title: str = _text()
    char_name: str = _text()
    char_link: str = _text()
    user_name: str = _text()
    ai_model: str = _text()
    prompt_name: str = _text()
    sub_model: str = _text()

    # Text colors
    bg_color: str = _color("#ffffff")
    text_color: str = _color("#18181b")
    char_color: str = _color("#18181b")
    heading_color: str = _color("#18181b")
    bold_color: str = _color("#dc2626")
    italic_color: str = _color("#6366f1")
    dialogue_color: str = _color("#059669")
    dialogue_bg_color: str = _color("#ecfdf5")
    thought_color: str = _color("#7c3aed")
    thought_bg_color: str = _color("#f5f3ff")
    divider_color: str = _color("#e4e4e7")

    # Bubbles
    ai_bubble_color: str = _color("#f4f4f5")
    user_bubble_color: str = _color("#dbeafe")
    bubble_opacity: float = _number(100, 0, 100)
    bubble_gradient: bool = _flag(False)
    bubble_gradient_angle: float = _number(135, -360, 360)
    bubble_gradient_shift: float = _number(-16, -128, 128)
    bubble_radius: float = _number(16, 0, 48)
    bubble_padding: float = _number(1, 0.25, 3)
    bubble_max_width: float = _number(85, 30, 100)
    bubble_spacing: float = _number(0.5, 0, 4)
    bubble_border: str = _choice("none", "full", "side")
    bubble_border_width: float = _number(1, 0, 8)
    bubble_border_color: str = _color("#d4d4d8")
    show_nametag: bool = _flag(True)
    nametag_opacity: float = _number(70, 0, 100)

    # Layout and typography
    font_family: str = _text("Pretendard, sans-serif")
    font_size: float = _number(16, 10, 32)
    line_height: float = _number(1.8, 1, 3)
    letter_spacing: float = _number(0, -0.1, 0.5)
    container_width: float = _number(800, 280, 1600)
    container_padding: float = _number(2, 0, 6)
    border_radius: float = _number(16, 0, 64)
    text_align: str = _choice("justify", "left", "center", "right")
    word_break: str = _choice("keep-all", "normal", "break-all")
    paragraph_spacing: float = _number(1.2, 0, 4)
    turn_gap: float = _number(1.5, 0, 4)

    # Headings and dividers
    heading_scale: float = _number(1, 0.5, 2)
    divider_style: str = _choice("solid", "dashed", "dotted", "double")
    divider_width: float = _number(1, 1, 8)

    # Container
    use_gradient_bg: bool = _flag(False)
    bg_gradient_type: str = _choice("linear", "radial")
    bg_gradient_color: str = _color("#f4f4f5")
    bg_gradient_angle: float = _number(135, -360, 360)
    border_width: float = _number(0, 0, 16)
    border_style: str = _choice("solid", "dashed", "dotted", "double")
    border_color: str = _color("#e4e4e7")
    box_shadow: bool = _flag(True)
    shadow_intensity: float = _number(30, 0, 100)

    # Badges
    badge_model_color: str = _color("#18181b")
    badge_prompt_color: str = _color("#71717a")
    badge_sub_color: str = _color("#a1a1aa")
    badge_style: str = _choice("filled", "outline", "ghost")
    badge_shape: str = _choice("pill", "rounded", "square")
    badge_scale: float = _number(1, 0.5, 2)

    # Images
    image_align: str = _choice("center", "left", "right")
    image_max_width: float = _number(100, 10, 100)
    image_radius: float = _number(8, 0, 48)
    image_border_width: float = _number(0, 0, 8)
    image_border_color: str = _color("#e4e4e7")
    image_shadow: bool = _flag(False)

    # Sections
    # Empty means "derive from the text color".
    section_label_color: str = _color("")
    collapsible_bg_shift: float = _number(10, -64, 64)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> StyleConfig:
        """Build a record from a settings mapping, never raising.

        Keys may be snake_case or the editor's camelCase. Values that do not fit
        a field are coerced: colors fall back to the field default, numbers are
        clamped, unknown choices fall back to the first choice.
        """
        if not mapping:
            return cls()
        known = {f.name: f for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, raw in mapping.items():
            if not isinstance(key, str):
                continue
            name = key if key in known else snake_key(key)
            f = known.get(name)
            if f is None:
                logger.debug("Ignoring unknown config key %r", key)
                continue
            values[name] = raw
        return cls(**values)

    def __post_init__(self) -> None:
        # Direct construction gets the same coercion as a settings mapping.
        for f in fields(self):
            object.__setattr__(self, f.name, _coerce(f.metadata, getattr(self, f.name), f.default))

    def to_mapping(self) -> dict[str, Any]:
        return {camel_key(f.name): getattr(self, f.name) for f in fields(self)}

    def with_overrides(self, **overrides: Any) -> StyleConfig:
        return StyleConfig.from_mapping({**self.to_mapping(), **overrides})


def _coerce(meta: Mapping[str, Any], raw: Any, default: Any) -> Any:
    kind = meta.get("kind")
    if kind == "color":
        value = normalize_hex(raw, default)
    elif kind == "number":
        lo, hi = meta["range"]
        value = default if _is_blank(raw) else clamp_number(raw, lo, hi)
    elif kind == "choice":
        choices = meta["choices"]
        value = raw.strip().lower() if isinstance(raw, str) else raw
        if value not in choices:
            value = default
    elif kind == "flag":
        value = _coerce_flag(raw, default)
    else:
        value = raw if isinstance(raw, str) else ("" if raw is None else str(raw))
    if value != raw:
        logger.debug("Coerced config value %r -> %r", raw, value)
    return value


def _is_blank(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def _coerce_flag(raw: Any, default: bool) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return raw != 0
    if isinstance(raw, str):
        s = raw.strip().lower()
        if s in _TRUE_STRINGS:
            return True
        if s in _FALSE_STRINGS:
            return False
    return default


def load_config(path: str | Path | None) -> StyleConfig:
    if path is None:
        return StyleConfig()
    path = Path(path).expanduser()
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigLoadError(f"Cannot read config {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigLoadError(f"Invalid JSON in config {path}: {e}") from e
    if not isinstance(payload, dict):
        raise ConfigLoadError(f"Config {path} must contain a JSON object")
    # The editor's export wraps the record as {"settings": {...}}.
    settings = payload.get("settings", payload)
    if not isinstance(settings, dict):
        raise ConfigLoadError(f"Config {path}: 'settings' must be an object")
    return StyleConfig.from_mapping(settings)
