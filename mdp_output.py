#!/usr/bin/env python3
"""
📝 MDP Markdown Previewer - Output Sinks
========================================
Copyright (c) 2025 PNGN-Tec LLC

Styled Output System
====================
The renderer hands every piece of output to a sink as an immutable
StyledRun. Sinks never call back into the renderer and the renderer never
asks which sink it is talking to.

Sinks
=====
- AnsiStreamSink: Serializes runs straight to a text stream with ANSI
  style codes (stdout mode). Keeps no history, writes forward only.
- StyledBuffer: Retains runs grouped by line so a viewport can page
  through them without re-rendering (browser mode). Converts to
  rich.text.Text for display in textual widgets.

Terminal Safety
===============
Document text may contain raw escape sequences or control characters.
AnsiStreamSink strips them before writing so a previewed file can never
drive the terminal.
"""

import re
import logging
from dataclasses import dataclass
from typing import List, Optional, TextIO

from rich.style import Style
from rich.text import Text

from mdp_theme import StyleAttributes, PLAIN, rgb_to_ansi, rgb_to_hex

# Configure logging
logger = logging.getLogger('mdp_output')


@dataclass(frozen=True)
class StyledRun:
    """Text plus resolved style; line_break ends the line after the text"""
    text: str
    style: StyleAttributes = PLAIN
    line_break: bool = False


# ============================================================================
# ANSI CODES AND UTILITIES
# ============================================================================

class ANSI:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    ITALIC = "\033[3m"
    UNDERLINE = "\033[4m"
    REVERSE = "\033[7m"
    STRIKE = "\033[9m"


_ANSI_ESCAPE = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')


def sanitize_terminal_input(text: str) -> str:
    """Remove escape sequences and control characters (tabs survive)."""
    text = _ANSI_ESCAPE.sub('', text)
    return ''.join(char for char in text if char == '\t' or (ord(char) >= 32 and ord(char) != 0x7F))


def style_to_ansi(style: StyleAttributes) -> str:
    """ANSI escape prefix for a style ('' for a plain style)"""
    codes = []
    if style.bold:
        codes.append(ANSI.BOLD)
    if style.italic:
        codes.append(ANSI.ITALIC)
    if style.underline:
        codes.append(ANSI.UNDERLINE)
    if style.strikethrough:
        codes.append(ANSI.STRIKE)
    if style.color is not None:
        codes.append(rgb_to_ansi(style.color))
    if style.background is not None:
        codes.append(rgb_to_ansi(style.background, background=True))
    return ''.join(codes)


def style_to_rich(style: StyleAttributes) -> Style:
    """Equivalent rich Style"""
    return Style(
        color=rgb_to_hex(style.color) if style.color is not None else None,
        bgcolor=rgb_to_hex(style.background) if style.background is not None else None,
        bold=style.bold,
        italic=style.italic,
        underline=style.underline,
        strike=style.strikethrough,
    )


# ============================================================================
# SINK CONTRACT
# ============================================================================

class OutputSink:
    """
    Receiver of styled runs, in emission order.

    Subclasses implement _write() and newline(); accept() is shared so both
    sinks treat the line_break flag identically.
    """

    def accept(self, run: StyledRun):
        if run.text:
            self._write(run)
        if run.line_break:
            self.newline()

    def _write(self, run: StyledRun):
        raise NotImplementedError

    def newline(self):
        raise NotImplementedError


class AnsiStreamSink(OutputSink):
    """Write runs to a text stream as they arrive."""

    def __init__(self, stream: TextIO, color: bool = True):
        self.stream = stream
        self.color = color

    def _write(self, run: StyledRun):
        text = sanitize_terminal_input(run.text)
        if not text:
            return
        prefix = style_to_ansi(run.style) if self.color else ''
        if prefix:
            self.stream.write(f"{prefix}{text}{ANSI.RESET}")
        else:
            self.stream.write(text)

    def newline(self):
        self.stream.write("\n")


class StyledBuffer(OutputSink):
    """
    Line-addressable store of styled runs.

    The line currently being built is included in line_count() and lines()
    once it holds any run.
    """

    def __init__(self):
        self._lines: List[List[StyledRun]] = []
        self._current: List[StyledRun] = []

    def _write(self, run: StyledRun):
        # line_break is carried by line boundaries inside the buffer
        self._current.append(StyledRun(run.text, run.style))

    def newline(self):
        self._lines.append(self._current)
        self._current = []

    def _all_lines(self) -> List[List[StyledRun]]:
        if self._current:
            return self._lines + [self._current]
        return self._lines

    def line_count(self) -> int:
        return len(self._lines) + (1 if self._current else 0)

    def lines(self, start: int = 0, count: Optional[int] = None) -> List[List[StyledRun]]:
        """Slice of lines for a viewport starting at line `start`"""
        start = max(0, start)
        all_lines = self._all_lines()
        if count is None:
            return all_lines[start:]
        return all_lines[start:start + max(0, count)]

    def plain_lines(self) -> List[str]:
        return [''.join(run.text for run in line) for line in self._all_lines()]

    def plain_text(self) -> str:
        return '\n'.join(self.plain_lines())

    def to_rich_text(self, start: int = 0, count: Optional[int] = None) -> Text:
        """Convert a range of lines into a single rich Text"""
        text = Text()
        for index, line in enumerate(self.lines(start, count)):
            if index:
                text.append("\n")
            for run in line:
                text.append(run.text, style=style_to_rich(run.style))
        return text

    def clear(self):
        self._lines = []
        self._current = []
