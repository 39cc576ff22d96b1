"""Tests for themes, roles and color utilities."""

import dataclasses

import pytest

from mdp_theme import (
    PLAIN,
    Role,
    StyleAttributes,
    Theme,
    adjust_brightness,
    available_themes,
    contrast_ratio,
    dim_style,
    get_theme,
    heading_role,
    hex_to_rgb,
    highlight_style,
    rgb_to_ansi,
    rgb_to_hex,
)


@pytest.mark.parametrize("name", available_themes())
def test_every_role_has_a_style(name):
    theme = get_theme(name)
    for role in Role:
        assert isinstance(theme.style_for(role), StyleAttributes)


def test_builtin_theme_names():
    assert available_themes() == ["monochrome", "one-dark", "solarized-osaka"]


def test_unknown_theme_lists_available_names():
    with pytest.raises(KeyError) as info:
        get_theme("neon")
    assert "solarized-osaka" in info.value.args[0]


def test_missing_roles_fall_back_to_text():
    text = StyleAttributes(color=(1, 2, 3))
    theme = Theme("sparse", {Role.TEXT: text, Role.LINK: StyleAttributes(underline=True)})
    assert theme.style_for(Role.RULE) == text
    assert theme.style_for(Role.LINK).underline


def test_empty_theme_is_plain():
    theme = Theme("bare")
    assert theme.style_for(Role.HEADING3) == PLAIN


def test_theme_cannot_be_mutated():
    theme = get_theme("solarized-osaka")
    with pytest.raises(dataclasses.FrozenInstanceError):
        theme.name = "other"
    with pytest.raises(TypeError):
        theme.styles[Role.TEXT] = PLAIN


def test_heading_role_is_clamped():
    assert heading_role(0) == Role.HEADING1
    assert heading_role(3) == Role.HEADING3
    assert heading_role(9) == Role.HEADING6


def test_union_keeps_own_colors_and_adds_flags():
    base = StyleAttributes(color=(10, 20, 30), bold=True)
    other = StyleAttributes(color=(200, 0, 0), italic=True, strikethrough=True)
    merged = base.union(other)
    assert merged.color == (10, 20, 30)
    assert merged.bold and merged.italic and merged.strikethrough
    assert not merged.underline


def test_color_conversions():
    assert rgb_to_hex((255, 0, 16)) == "#ff0010"
    assert hex_to_rgb("#ff0010") == (255, 0, 16)
    assert rgb_to_ansi((1, 2, 3)) == "\033[38;2;1;2;3m"
    assert rgb_to_ansi((1, 2, 3), background=True) == "\033[48;2;1;2;3m"
    with pytest.raises(ValueError):
        hex_to_rgb("#fff")


def test_brightness_and_derived_styles():
    assert adjust_brightness((100, 200, 250), 20) == (120, 240, 255)
    assert adjust_brightness((100, 200, 250), -50) == (50, 100, 125)

    style = StyleAttributes(color=(100, 100, 100))
    assert dim_style(style).color == (70, 70, 70)
    bright = highlight_style(style)
    assert bright.color == (120, 120, 120)
    assert bright.bold
    assert dim_style(PLAIN) == PLAIN


def test_contrast_ratio_bounds():
    assert contrast_ratio((0, 0, 0), (255, 255, 255)) == pytest.approx(21.0)
    assert contrast_ratio((50, 50, 50), (50, 50, 50)) == pytest.approx(1.0)


def test_builtin_themes_are_readable():
    for name in available_themes():
        assert get_theme(name).validate()


def test_low_contrast_theme_warns(caplog):
    theme = Theme("murky", {Role.TEXT: StyleAttributes(color=(40, 40, 40))},
                  code_background=(30, 30, 30))
    with caplog.at_level("WARNING", logger="mdp_theme"):
        assert not theme.validate()
    assert "murky" in caplog.text
