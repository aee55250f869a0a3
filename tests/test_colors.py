from __future__ import annotations

import pytest

from chatlog_studio.colors import (
    DARK_TEXT,
    LIGHT_TEXT,
    adjust_color,
    apply_opacity,
    build_linear_gradient,
    build_radial_gradient,
    clamp_number,
    contrast_text_color,
    format_number,
    hex_to_rgba,
    luma,
    normalize_angle,
    normalize_hex,
)


def test_adjust_color_shifts_and_clamps_channels():
    assert adjust_color("#101010", 12) == "#1c1c1c"
    assert adjust_color("#fafafa", 12) == "#ffffff"
    assert adjust_color("#050505", -10) == "#000000"
    assert adjust_color("#ff0080", -16) == "#ef0070"


def test_contrast_text_color_picks_dark_on_light_and_light_on_dark():
    assert contrast_text_color("#ffffff") == DARK_TEXT
    assert contrast_text_color("#000000") == LIGHT_TEXT


def test_contrast_tie_resolves_to_light_text():
    assert luma("#808080") == 128
    assert contrast_text_color("#808080") == LIGHT_TEXT
    assert contrast_text_color("#818181") == DARK_TEXT


def test_hex_to_rgba_and_apply_opacity():
    assert hex_to_rgba("#ff0000", 0.5) == "rgba(255, 0, 0, 0.5)"
    assert hex_to_rgba("#ff0000", 7) == "rgba(255, 0, 0, 1)"
    assert apply_opacity("#ff0000", 1) == "#ff0000"
    assert apply_opacity("#ff0000", 1.5) == "#ff0000"
    assert apply_opacity("#ff0000", 0.25) == "rgba(255, 0, 0, 0.25)"


def test_gradients_normalize_angle():
    assert build_linear_gradient(-45, "#000000", "#ffffff") == "linear-gradient(315deg, #000000 0%, #ffffff 100%)"
    assert build_linear_gradient(720, "#000000", "#ffffff").startswith("linear-gradient(0deg,")
    assert build_linear_gradient("sideways", "#000000", "#ffffff").startswith("linear-gradient(135deg,")
    assert build_radial_gradient("#111111", "#222222") == "radial-gradient(circle, #111111 0%, #222222 100%)"


@pytest.mark.parametrize(
    "value, expected",
    [
        (5, 5),
        ("7.5", 7.5),
        (50, 10),
        (-3, 0),
        (float("nan"), 0),
        (True, 0),
        (None, 0),
        ("abc", 0),
    ],
)
def test_clamp_number(value, expected):
    assert clamp_number(value, 0, 10) == expected


def test_normalize_angle_fallbacks():
    assert normalize_angle(370) == 10
    assert normalize_angle(float("inf"), 90) == 90
    assert normalize_angle("x", 45) == 45


def test_normalize_hex():
    assert normalize_hex("#ABC") == "#aabbcc"
    assert normalize_hex(" #A1B2C3 ") == "#a1b2c3"
    assert normalize_hex("red", "#111111") == "#111111"
    assert normalize_hex("#12345", "#111111") == "#111111"
    assert normalize_hex(123, "#111111") == "#111111"


def test_format_number():
    assert format_number(1.0) == "1"
    assert format_number(0.30) == "0.3"
    assert format_number(1.5 * 1.1) == "1.65"
    assert format_number(-0.05) == "-0.05"


def test_gradient_angle_rounding_stays_below_full_turn():
    assert build_linear_gradient(359.999, "#000000", "#ffffff").startswith("linear-gradient(0deg,")
    assert build_linear_gradient(-0.001, "#000000", "#ffffff").startswith("linear-gradient(0deg,")
    assert build_linear_gradient(359.994, "#000000", "#ffffff").startswith("linear-gradient(359.99deg,")
