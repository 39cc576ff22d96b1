#!/usr/bin/env python3
"""
📝 MDP Markdown Previewer - Interactive Browser
===============================================
Copyright (c) 2025 PNGN-Tec LLC

Two-Pane Terminal Browser
=========================
Left pane: tree of the Markdown files found under the working directory.
Right pane: scrollable preview. The selected file is rendered by the same
engine the one-shot CLI uses, into a StyledBuffer, and shown as rich Text.
A status bar at the bottom reports the file, its line count, or errors.

Keys
====
    up/down, j/k   move in the file tree, scroll in the preview
    enter          open the selected file and focus the preview
    tab            toggle focus between tree and preview
    g / G          preview top / bottom
    r              rescan files
    q / escape     quit
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Static, Tree

from mdp_config import RenderConfig
from mdp_finder import FinderConfig, find_markdown_files
from mdp_output import StyledBuffer, style_to_rich
from mdp_parser import MarkdownFileError, read_markdown_file
from mdp_render import render_markdown
from mdp_theme import Role, Theme, dim_style, highlight_style, rgb_to_hex
from mdp_width import clear_default_cache

# Configure logging
logger = logging.getLogger('mdp_tui')

# Nested directory name -> subtree; files are stored under FILES_KEY
FILES_KEY = ""


def directory_layout(paths: List[Path]) -> Dict:
    """
    Group relative paths into nested directory dicts.

    Example:
        [a.md, docs/b.md] -> {"": [a.md], "docs": {"": [docs/b.md]}}
    """
    layout: Dict = {FILES_KEY: []}
    for path in paths:
        node = layout
        for part in path.parts[:-1]:
            node = node.setdefault(part, {FILES_KEY: []})
        node[FILES_KEY].append(path)
    return layout


def _border_color(theme: Theme, role: Role, fallback: str) -> str:
    color = theme.style_for(role).color
    return rgb_to_hex(color) if color is not None else fallback


class MarkdownBrowser(App):
    """File tree plus rendered preview"""

    CSS = """
    #files {
        width: 32;
        border: round grey;
    }
    #preview {
        width: 1fr;
        border: round grey;
        padding: 0 1;
    }
    #status {
        height: 1;
        dock: bottom;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
        Binding("escape", "quit", "Quit", show=False),
        Binding("tab", "toggle_focus", "Focus", show=True, priority=True),
        Binding("r", "rescan", "Rescan", show=True),
        Binding("g", "preview_top", "Top", show=False),
        Binding("G", "preview_bottom", "Bottom", show=False),
        Binding("j", "move_down", "Down", show=False),
        Binding("k", "move_up", "Up", show=False),
    ]

    TITLE = "mdp"

    def __init__(self,
                 theme: Theme,
                 render_config: RenderConfig,
                 finder_config: Optional[FinderConfig] = None,
                 root: Path = Path(".")):
        super().__init__()
        self.md_theme = theme
        self.render_config = render_config
        self.finder_config = finder_config or FinderConfig()
        self.root = Path(root)
        self.current_file: Optional[Path] = None
        self.buffer = StyledBuffer()

    def compose(self) -> ComposeResult:
        with Horizontal(id="main-container"):
            yield Tree(self.root.resolve().name or str(self.root), id="files")
            with VerticalScroll(id="preview"):
                yield Static("", id="preview-text")
        yield Static("", id="status")

    def on_mount(self) -> None:
        self.populate_tree()
        self.query_one("#files", Tree).focus()
        self._update_borders()

    # ------------------------------------------------------------------
    # File tree
    # ------------------------------------------------------------------

    def populate_tree(self):
        tree = self.query_one("#files", Tree)
        tree.clear()
        paths = find_markdown_files(self.root, self.finder_config)

        directory_style = style_to_rich(dim_style(self.md_theme.style_for(Role.TEXT)))

        def add(node, layout: Dict):
            for name in sorted(key for key in layout if key != FILES_KEY):
                label = Text(f"{name}/", style=directory_style)
                add(node.add(label, expand=False), layout[name])
            for path in layout[FILES_KEY]:
                node.add_leaf(path.name, data=path)

        add(tree.root, directory_layout(paths))
        tree.root.expand()
        self.set_status(f"{len(paths)} Markdown files")

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        path = event.node.data
        if path is None:
            return
        self.load_file(self.root / path)
        self.query_one("#preview", VerticalScroll).focus()
        self._update_borders()

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------

    def load_file(self, path: Path):
        """Render a file into the preview pane"""
        preview = self.query_one("#preview-text", Static)
        self.buffer.clear()
        try:
            source = read_markdown_file(path)
        except MarkdownFileError as e:
            logger.info(f"Cannot preview {path}: {e}")
            preview.update("")
            self.set_status(f"Error: {e}", error=True)
            return

        render_markdown(source, self.md_theme, self.buffer, self.render_config)
        self.current_file = path
        preview.update(self.buffer.to_rich_text())
        self.query_one("#preview", VerticalScroll).scroll_home(animate=False)
        self.set_status(f" • {self.buffer.line_count():,} lines", title=str(path))

    def set_status(self, message: str, error: bool = False, title: str = ""):
        """Show a message in the status bar, optionally led by a bold title"""
        role = Role.STATUS_ERROR if error else Role.STATUS
        style = self.md_theme.style_for(role)
        text = Text()
        if title:
            text.append(title, style=style_to_rich(highlight_style(style)))
        text.append(message, style=style_to_rich(style))
        self.query_one("#status", Static).update(text)

    def _preview_focused(self) -> bool:
        return self.focused is self.query_one("#preview", VerticalScroll)

    def _update_borders(self):
        focus = _border_color(self.md_theme, Role.FOCUS_BORDER, "white")
        idle = _border_color(self.md_theme, Role.BORDER, "grey")
        preview_focused = self._preview_focused()
        self.query_one("#files", Tree).styles.border = ("round", idle if preview_focused else focus)
        self.query_one("#preview", VerticalScroll).styles.border = \
            ("round", focus if preview_focused else idle)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def action_toggle_focus(self):
        if self._preview_focused():
            self.query_one("#files", Tree).focus()
        else:
            self.query_one("#preview", VerticalScroll).focus()
        self._update_borders()

    def action_rescan(self):
        clear_default_cache()
        self.populate_tree()

    def action_preview_top(self):
        self.query_one("#preview", VerticalScroll).scroll_home(animate=False)

    def action_preview_bottom(self):
        self.query_one("#preview", VerticalScroll).scroll_end(animate=False)

    def action_move_down(self):
        if self._preview_focused():
            self.query_one("#preview", VerticalScroll).scroll_down(animate=False)
        else:
            self.query_one("#files", Tree).action_cursor_down()

    def action_move_up(self):
        if self._preview_focused():
            self.query_one("#preview", VerticalScroll).scroll_up(animate=False)
        else:
            self.query_one("#files", Tree).action_cursor_up()


def run_browser(finder_config: FinderConfig,
                theme: Theme,
                render_config: RenderConfig,
                root: Path = Path(".")):
    """Run the browser until the user quits"""
    MarkdownBrowser(theme, render_config, finder_config, root).run()
