"""Tests for table buffering and layout."""

from mdp_config import RenderConfig
from mdp_events import Alignment
from mdp_output import StyledRun
from mdp_table import PendingTable, marker_width, separator_marker
from mdp_theme import Role, get_theme


def build(header, rows, alignments=None):
    alignments = alignments or [Alignment.NONE] * len(header)
    table = PendingTable()
    table.start_head()
    for text, alignment in zip(header, alignments):
        table.start_cell(alignment)
        table.push(StyledRun(text))
        table.end_cell()
    table.end_head()
    for row in rows:
        table.start_row()
        for text in row:
            table.start_cell()
            if text:
                table.push(StyledRun(text))
            table.end_cell()
        table.end_row()
    return table


def plain(lines):
    return [''.join(run.text for run in line) for line in lines]


def test_layout_with_alignments():
    table = build(["Name", "Qty"], [["apple", "3"], ["kiwi", "12"]],
                  [Alignment.LEFT, Alignment.RIGHT])
    lines = plain(table.layout(get_theme("monochrome"), RenderConfig()))
    assert lines == [
        "| Name  | Qty |",
        "| :---- | --: |",
        "| apple |   3 |",
        "| kiwi  |  12 |",
    ]


def test_center_alignment_puts_odd_space_right():
    table = build(["Title"], [["ab"]], [Alignment.CENTER])
    lines = plain(table.layout(get_theme("monochrome"), RenderConfig()))
    assert lines[1] == "| :---: |"
    assert lines[2] == "|  ab   |"


def test_short_and_long_body_rows_match_header():
    table = build(["a", "b"], [["1"], ["1", "2", "3"]])
    table.finish()
    assert all(len(row) == 2 for row in table.rows)
    assert table.defects == 2

    lines = plain(table.layout(get_theme("monochrome"), RenderConfig()))
    assert lines[2] == "| 1 |   |"
    assert lines[3] == "| 1 | 2 |"


def test_column_width_is_widest_cell():
    table = build(["h", "wide header"], [["a long cell", "x"], ["你好", ""]])
    config = RenderConfig()
    assert table.column_widths(config) == [11, 11]
    assert build(["x"], []).column_widths(config) == [1]


def test_narrow_column_widens_only_for_its_marker():
    config = RenderConfig()
    assert marker_width(Alignment.NONE, config) == 1
    assert marker_width(Alignment.LEFT, config) == 2
    assert marker_width(Alignment.CENTER, config) == 3

    table = build(["a", "b", "c"], [["1", "2", "3"]],
                  [Alignment.NONE, Alignment.RIGHT, Alignment.CENTER])
    assert table.column_widths(config) == [1, 2, 3]
    lines = plain(table.layout(get_theme("monochrome"), config))
    assert lines == [
        "| a |  b |  c  |",
        "| - | -: | :-: |",
        "| 1 |  2 |  3  |",
    ]


def test_body_alignment_never_overrides_header():
    table = PendingTable()
    table.start_head()
    table.start_cell(Alignment.RIGHT)
    table.push(StyledRun("n"))
    table.end_head()
    table.start_row()
    table.start_cell(Alignment.LEFT)
    table.push(StyledRun("1"))
    table.end_row()

    assert table.alignments == [Alignment.RIGHT]
    assert table.defects == 1
    lines = plain(table.layout(get_theme("monochrome"), RenderConfig()))
    assert lines[2] == "|  1 |"


def test_first_row_becomes_header_without_head():
    table = PendingTable()
    table.start_row()
    table.push(StyledRun("only"))
    table.end_row()
    assert plain(table.layout(get_theme("monochrome"), RenderConfig()))[0] == "| only |"


def test_empty_header_promotes_first_body_row():
    table = PendingTable()
    table.start_head()
    table.end_head()
    table.start_row()
    table.start_cell(Alignment.RIGHT)
    table.push(StyledRun("a"))
    table.end_row()
    table.start_row()
    table.start_cell()
    table.push(StyledRun("bc"))
    table.end_row()

    lines = plain(table.layout(get_theme("monochrome"), RenderConfig()))
    assert lines == ["|  a |", "| -: |", "| bc |"]
    assert table.defects == 1


def test_empty_table_has_no_lines():
    assert PendingTable().layout(get_theme("monochrome"), RenderConfig()) == []


def test_header_and_border_styles():
    theme = get_theme("solarized-osaka")
    table = build(["h"], [["b"]])
    header, separator, body = table.layout(theme, RenderConfig())

    header_style = theme.style_for(Role.TABLE_HEADER)
    border_style = theme.style_for(Role.TABLE_BORDER)
    assert [run for run in header if run.text == "h"][0].style.bold
    assert [run for run in header if run.text == "h"][0].style.color == header_style.color
    assert all(run.style == border_style for run in separator)
    assert body[0].style == border_style


def test_separator_marker_templates():
    config = RenderConfig()
    assert separator_marker(Alignment.NONE, 5, config) == "-----"
    assert separator_marker(Alignment.LEFT, 5, config) == ":----"
    assert separator_marker(Alignment.RIGHT, 3, config) == "--:"
    assert separator_marker(Alignment.CENTER, 3, config) == ":-:"
