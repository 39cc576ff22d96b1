"""Shared fixtures for the mdp test suite."""

from typing import Iterable, Optional

import pytest

from mdp_config import RenderConfig
from mdp_output import StyledBuffer
from mdp_render import MarkdownRenderer, render_markdown
from mdp_theme import Theme, get_theme


@pytest.fixture
def render_config() -> RenderConfig:
    # Fixed width so rules do not depend on the terminal running the tests
    return RenderConfig(width=80)


@pytest.fixture
def mono() -> Theme:
    return get_theme("monochrome")


@pytest.fixture
def solarized() -> Theme:
    return get_theme("solarized-osaka")


@pytest.fixture
def render_source(mono, render_config):
    """Render Markdown source and return (plain lines, buffer, renderer)"""

    def render(source: str, theme: Optional[Theme] = None, config: Optional[RenderConfig] = None):
        buffer = StyledBuffer()
        renderer = render_markdown(source, theme or mono, buffer, config or render_config)
        return buffer.plain_lines(), buffer, renderer

    return render


@pytest.fixture
def render_stream(mono, render_config):
    """Render a hand-built event list and return (plain lines, renderer)"""

    def render(events: Iterable, theme: Optional[Theme] = None) -> tuple:
        buffer = StyledBuffer()
        renderer = MarkdownRenderer(theme or mono, buffer, render_config)
        renderer.render(events)
        return buffer.plain_lines(), renderer

    return render
