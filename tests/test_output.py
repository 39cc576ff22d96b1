"""Tests for the ANSI stream sink and the styled buffer."""

import io

from rich.text import Text

from mdp_output import (
    ANSI,
    AnsiStreamSink,
    StyledBuffer,
    StyledRun,
    sanitize_terminal_input,
    style_to_ansi,
    style_to_rich,
)
from mdp_theme import PLAIN, StyleAttributes

RED_BOLD = StyleAttributes(color=(255, 0, 0), bold=True)


def test_sanitize_strips_escapes_and_controls():
    assert sanitize_terminal_input("a\x1b[31mred\x1b[0m\x07b") == "aredb"
    assert sanitize_terminal_input("tab\there") == "tab\there"


def test_style_to_ansi():
    assert style_to_ansi(PLAIN) == ""
    assert style_to_ansi(RED_BOLD) == ANSI.BOLD + "\033[38;2;255;0;0m"


def test_style_to_rich():
    style = style_to_rich(StyleAttributes(color=(0, 128, 255), italic=True, strikethrough=True))
    assert style.color.name == "#0080ff"
    assert style.italic
    assert style.strike
    assert not style.bold


def test_ansi_sink_writes_styles_and_line_breaks():
    stream = io.StringIO()
    sink = AnsiStreamSink(stream, color=True)
    sink.accept(StyledRun("hi", RED_BOLD, line_break=True))
    sink.accept(StyledRun("plain"))
    sink.newline()
    assert stream.getvalue() == f"{ANSI.BOLD}\033[38;2;255;0;0mhi{ANSI.RESET}\nplain\n"


def test_ansi_sink_without_color_and_unsafe_text():
    stream = io.StringIO()
    sink = AnsiStreamSink(stream, color=False)
    sink.accept(StyledRun("x\x1b[2Jy", RED_BOLD))
    assert stream.getvalue() == "xy"


def test_buffer_lines_and_viewport():
    buffer = StyledBuffer()
    for number in range(5):
        buffer.accept(StyledRun(f"line {number}", line_break=True))
    buffer.accept(StyledRun("tail"))

    assert buffer.line_count() == 6
    assert buffer.plain_lines()[-1] == "tail"
    assert [run.text for line in buffer.lines(2, 2) for run in line] == ["line 2", "line 3"]
    assert buffer.lines(10) == []
    assert all(not run.line_break for line in buffer.lines() for run in line)


def test_buffer_to_rich_text():
    buffer = StyledBuffer()
    buffer.accept(StyledRun("a", RED_BOLD))
    buffer.accept(StyledRun("b"))
    buffer.newline()
    buffer.accept(StyledRun("c"))

    text = buffer.to_rich_text()
    assert isinstance(text, Text)
    assert text.plain == "ab\nc"
    assert buffer.plain_text() == "ab\nc"
    assert buffer.to_rich_text(1).plain == "c"

    buffer.clear()
    assert buffer.line_count() == 0
