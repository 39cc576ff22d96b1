"""Tests for the markdown-it token adapter and file reading."""

import pytest

import mdp_events as ev
from mdp_parser import (
    MarkdownFileError,
    normalize_line_endings,
    parse_events,
    read_markdown_file,
)


def kinds(events, event_class=ev.Start):
    return [type(event.kind) for event in events if isinstance(event, event_class)]


def test_heading_events():
    assert list(parse_events("## Hi\n")) == [
        ev.Start(ev.Heading(2)),
        ev.Text("Hi"),
        ev.End(ev.Heading(2)),
    ]


def test_every_start_has_a_matching_end():
    source = (
        "# T\n\n> quote *em* **strong** ~~del~~\n\n"
        "1. one\n2. two\n   - nested\n\n"
        "| a | b |\n|:-|-:|\n| 1 | 2 |\n\n"
        "```py\ncode\n```\n\n[link](http://x.io) ![img](p.png)\n"
    )
    events = list(parse_events(source))
    depth = 0
    for event in events:
        if isinstance(event, ev.Start):
            depth += 1
        elif isinstance(event, ev.End):
            depth -= 1
        assert depth >= 0
    assert depth == 0
    assert sorted(kinds(events), key=lambda k: k.__name__) == \
        sorted(kinds(events, ev.End), key=lambda k: k.__name__)


def test_tight_list_hides_paragraphs():
    events = list(parse_events("- a\n- b\n"))
    assert ev.Start(ev.Paragraph()) not in events
    assert events[0] == ev.Start(ev.List(False, None))
    assert ev.Start(ev.ListItem(None)) in events


def test_ordered_list_start():
    events = list(parse_events("7. seven\n8. eight\n"))
    assert events[0] == ev.Start(ev.List(True, 7))


def test_ordered_list_starting_at_zero():
    assert list(parse_events("0. zero\n1. one\n"))[0] == ev.Start(ev.List(True, 0))
    assert list(parse_events("1. one\n"))[0] == ev.Start(ev.List(True, 1))


def test_task_items():
    events = list(parse_events("- [x] done\n- [ ] todo\n"))
    assert ev.Start(ev.ListItem(True)) in events
    assert ev.Start(ev.ListItem(False)) in events
    texts = [event.text for event in events if isinstance(event, ev.Text)]
    assert texts == ["done", "todo"]
    assert not any(isinstance(event, ev.HtmlEntity) for event in events)


def test_table_alignment_and_structure():
    events = list(parse_events("| a | b | c |\n|:--|:-:|--:|\n| 1 | 2 | 3 |\n"))
    cells = [event.kind.alignment for event in events
             if isinstance(event, ev.Start) and isinstance(event.kind, ev.TableCell)]
    assert cells == [ev.Alignment.LEFT, ev.Alignment.CENTER, ev.Alignment.RIGHT] * 2
    assert kinds(events).count(ev.TableHead) == 1
    assert kinds(events).count(ev.TableRow) == 1


def test_code_blocks():
    events = list(parse_events("```Rust extra\nfn x() {}\n```\n\n    indented\n"))
    assert events[:3] == [
        ev.Start(ev.CodeBlock("Rust extra")),
        ev.Text("fn x() {}\n"),
        ev.End(ev.CodeBlock("Rust extra")),
    ]
    assert ev.Start(ev.CodeBlock(None)) in events
    assert ev.Text("indented\n") in events


def test_entities_reach_the_renderer_encoded():
    events = list(parse_events("a &copy; b\n"))
    text = ''.join(event.text for event in events if isinstance(event, ev.Text))
    assert text == "a &copy; b"


def test_inline_markup():
    events = list(parse_events("*e* **s** ~~d~~ `c` [t](http://x.io \"T\") ![alt](i.png)\n"))
    started = kinds(events)
    for kind in (ev.Emphasis, ev.Strong, ev.Strikethrough, ev.Link, ev.Image):
        assert kind in started
    assert ev.Code("c") in events
    assert ev.Start(ev.Link("http://x.io", "T")) in events
    assert ev.Start(ev.Image("i.png", "alt")) in events


def test_image_alt_text_drops_markup():
    events = list(parse_events("![alt *e* `c` \\& x](i.png)\n"))
    assert ev.Start(ev.Image("i.png", "alt e c &amp; x")) in events
    texts = [event for event in events if isinstance(event, ev.Text)]
    assert texts == []


def test_breaks_and_rule():
    events = list(parse_events("a\nb  \nc\n\n***\n"))
    assert ev.SoftBreak() in events
    assert ev.HardBreak() in events
    assert ev.Rule() in events


def test_html_block_lines():
    events = list(parse_events("<div>\nhi\n</div>\n"))
    assert events == [
        ev.Start(ev.Paragraph()),
        ev.HtmlEntity("<div>"),
        ev.HardBreak(),
        ev.HtmlEntity("hi"),
        ev.HardBreak(),
        ev.HtmlEntity("</div>"),
        ev.End(ev.Paragraph()),
    ]


def test_footnotes():
    events = list(parse_events("Text[^n].\n\n[^n]: Note.\n"))
    assert ev.FootnoteReference("n") in events
    assert ev.Start(ev.FootnoteDefinition("n")) in events


def test_normalize_line_endings():
    assert normalize_line_endings("a\r\nb\rc\n") == "a\nb\nc\n"


def test_read_markdown_file(tmp_path):
    path = tmp_path / "doc.md"
    path.write_bytes("\ufeff# Hi\r\nthere\r\n".encode("utf-8"))
    assert read_markdown_file(path) == "# Hi\nthere\n"


def test_read_missing_file(tmp_path):
    with pytest.raises(MarkdownFileError, match="no such file"):
        read_markdown_file(tmp_path / "missing.md")


def test_read_directory(tmp_path):
    with pytest.raises(MarkdownFileError, match="not a regular file"):
        read_markdown_file(tmp_path)


def test_read_invalid_utf8(tmp_path):
    path = tmp_path / "bad.md"
    path.write_bytes(b"ok \xff\xfe")
    with pytest.raises(MarkdownFileError, match="UTF-8") as info:
        read_markdown_file(path)
    assert info.value.path == path
