from __future__ import annotations

import math
import re
from typing import Any


HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{3})$")

DARK_TEXT = "#1a1a1a"
LIGHT_TEXT = "#f5f5f5"
CONTRAST_THRESHOLD = 128


def _to_float(value: Any) -> float | None:
    # bool is an int subclass; a toggle is never a size.
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def clamp_number(value: Any, lo: float, hi: float) -> float:
    number = _to_float(value)
    if number is None:
        return lo
    return min(hi, max(lo, number))


def normalize_angle(value: Any, fallback: float = 0) -> float:
    number = _to_float(value)
    if number is None or math.isinf(number):
        number = float(fallback)
    return number % 360


def format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.4f}".rstrip("0").rstrip(".")


def normalize_hex(value: Any, fallback: str = "#000000") -> str:
    if not isinstance(value, str):
        return fallback
    s = value.strip()
    if not HEX_COLOR.match(s):
        return fallback
    s = s.lower()
    if len(s) == 4:
        s = "#" + "".join(ch * 2 for ch in s[1:])
    return s


def _rgb(hex_color: str) -> tuple[int, int, int]:
    s = normalize_hex(hex_color)
    num = int(s[1:], 16)
    return (num >> 16) & 0xFF, (num >> 8) & 0xFF, num & 0xFF


def adjust_color(hex_color: str, amount: int) -> str:
    r, g, b = (min(255, max(0, c + int(amount))) for c in _rgb(hex_color))
    return f"#{r:02x}{g:02x}{b:02x}"


def luma(hex_color: str) -> float:
    r, g, b = _rgb(hex_color)
    return (r * 299 + g * 587 + b * 114) / 1000


def contrast_text_color(hex_color: str) -> str:
    """Pick a legible text color for the given background.

    Ties at exactly the threshold resolve to the light text color.
    """
    return DARK_TEXT if luma(hex_color) > CONTRAST_THRESHOLD else LIGHT_TEXT


def hex_to_rgba(hex_color: str, alpha: Any) -> str:
    r, g, b = _rgb(hex_color)
    a = clamp_number(alpha, 0, 1)
    return f"rgba({r}, {g}, {b}, {format_number(round(a, 3))})"


def apply_opacity(color: str, opacity: Any) -> str:
    if clamp_number(opacity, 0, 1) >= 1:
        return color
    return hex_to_rgba(color, opacity)


def build_linear_gradient(angle: Any, c1: str, c2: str) -> str:
    # Round before wrapping so 359.999 becomes 0, not 360.
    deg = format_number(round(normalize_angle(angle, 135), 2) % 360)
    return f"linear-gradient({deg}deg, {c1} 0%, {c2} 100%)"


def build_radial_gradient(c1: str, c2: str) -> str:
    return f"radial-gradient(circle, {c1} 0%, {c2} 100%)"
