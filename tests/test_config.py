"""Tests for configuration validation, environment overrides and reload."""

import logging

import pytest

from mdp_config import (
    CacheConfig,
    ConfigurationManager,
    LoggingConfig,
    RenderConfig,
    SystemConfig,
    configure_logging,
    get_config,
    register_config_callback,
    reload_config,
    unregister_config_callback,
)


def test_defaults_validate():
    config = SystemConfig()
    assert config.validate()
    assert config.theme == "solarized-osaka"
    assert config.render.indent_width == 2
    assert config.render.quote_marker == "│ "


@pytest.mark.parametrize("render", [
    RenderConfig(indent_width=0),
    RenderConfig(width=-1),
    RenderConfig(rule_ratio=0),
    RenderConfig(rule_ratio=1.5),
    RenderConfig(bullet_glyphs=()),
    RenderConfig(rule_glyph=""),
])
def test_invalid_render_config(render):
    with pytest.raises(ValueError):
        render.validate()


def test_invalid_cache_and_logging_config():
    with pytest.raises(ValueError):
        CacheConfig(default_size=0).validate()
    with pytest.raises(ValueError):
        LoggingConfig(level="CHATTY").validate()


def test_rule_width_is_ratio_of_width_capped():
    assert RenderConfig(width=80).rule_width() == 64
    assert RenderConfig(width=200).rule_width() == 100
    assert RenderConfig(width=1).rule_width() == 1


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("MDP_THEME", "one-dark")
    monkeypatch.setenv("MDP_INDENT_WIDTH", "4")
    monkeypatch.setenv("MDP_WIDTH", "100")
    monkeypatch.setenv("MDP_CACHE_SIZE", "50")
    monkeypatch.setenv("MDP_DEBUG", "yes")

    config = ConfigurationManager._apply_environment_overrides(SystemConfig())

    assert config.theme == "one-dark"
    assert config.render.indent_width == 4
    assert config.render.width == 100
    assert config.cache.default_size == 50
    assert config.debug_mode
    assert config.logging.level == "DEBUG"


def test_invalid_environment_value_raises(monkeypatch):
    monkeypatch.setenv("MDP_INDENT_WIDTH", "0")
    with pytest.raises(ValueError):
        ConfigurationManager._apply_environment_overrides(SystemConfig())


def test_manager_is_a_singleton():
    assert ConfigurationManager() is ConfigurationManager()


def test_failed_reload_keeps_previous_config():
    before = get_config()
    calls = []

    def callback(old, new):
        calls.append((old, new))

    register_config_callback(callback)
    try:
        assert not reload_config(SystemConfig(render=RenderConfig(indent_width=-2)))
    finally:
        unregister_config_callback(callback)

    assert get_config() is before
    assert calls == []


def test_successful_reload_notifies_callbacks():
    before = get_config()
    calls = []

    def callback(old, new):
        calls.append((old, new))

    register_config_callback(callback)
    replacement = SystemConfig(theme="monochrome")
    try:
        assert reload_config(replacement)
        assert get_config() is replacement
    finally:
        unregister_config_callback(callback)
        reload_config(before)

    assert calls == [(before, replacement)]
    assert get_config() is before


def test_configure_logging_installs_one_handler():
    root = logging.getLogger()
    previous_level = root.level
    try:
        first = configure_logging(LoggingConfig(level="INFO"))
        second = configure_logging(LoggingConfig(level="ERROR"))
        assert first is second
        assert root.handlers.count(first) == 1
        assert root.level == logging.ERROR
    finally:
        root.setLevel(previous_level)
