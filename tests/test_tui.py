"""Tests for the browser's file tree grouping."""

from pathlib import Path

from mdp_tui import FILES_KEY, MarkdownBrowser, directory_layout
from mdp_config import RenderConfig
from mdp_finder import FinderConfig
from mdp_theme import get_theme


def test_directory_layout_groups_by_parent():
    paths = [Path("a.md"), Path("docs/b.md"), Path("docs/api/c.md"), Path("z.md")]
    layout = directory_layout(paths)

    assert layout[FILES_KEY] == [Path("a.md"), Path("z.md")]
    assert layout["docs"][FILES_KEY] == [Path("docs/b.md")]
    assert layout["docs"]["api"][FILES_KEY] == [Path("docs/api/c.md")]


def test_empty_layout():
    assert directory_layout([]) == {FILES_KEY: []}


def test_browser_holds_explicit_theme_and_config(tmp_path):
    theme = get_theme("one-dark")
    config = RenderConfig(width=60)
    app = MarkdownBrowser(theme, config, FinderConfig(hidden=True), tmp_path)

    assert app.md_theme is theme
    assert app.render_config is config
    assert app.finder_config.hidden
    assert app.current_file is None
