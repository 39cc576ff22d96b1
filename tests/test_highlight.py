"""Tests for code block highlighting."""

import pytest

from mdp_highlight import CodeHighlighter, normalize_language, role_for_token
from mdp_theme import Role, get_theme
from pygments.token import Comment, Keyword, Name, Text


def reassemble(runs):
    return ''.join(run.text + ("\n" if run.line_break else "") for run in runs)


@pytest.fixture
def highlighter():
    return CodeHighlighter()


@pytest.mark.parametrize("language, code", [
    ("python", "def f(x):\n\treturn x  # done\n"),
    ("python", "s = 'unterminated\n"),
    ("rust", "fn main() {\n    println!(\"hi\");\n}"),
    ("js", "const a = `tpl ${b}`;\n\n\n"),
    (None, "  indented\n    code\n"),
    ("nosuchlang", "keep   me\nexactly\n"),
    ("python", "\n\n"),
])
def test_highlighting_preserves_every_character(highlighter, language, code):
    runs = highlighter.highlight(language, code, get_theme("solarized-osaka"))
    assert reassemble(runs) == code


def test_runs_do_not_contain_newlines(highlighter):
    runs = highlighter.highlight("python", "a = 1\nb = 2\n", get_theme("one-dark"))
    assert all("\n" not in run.text for run in runs)
    assert sum(run.line_break for run in runs) == 2


def test_unknown_language_is_one_plain_run(highlighter):
    theme = get_theme("solarized-osaka")
    runs = highlighter.highlight("nosuchlang", "x = 1", theme)
    assert len(runs) == 1
    assert runs[0].style == theme.style_for(Role.CODE_BLOCK)
    assert highlighter.stats['plain'] == 1


def test_known_language_colors_comments(highlighter):
    theme = get_theme("solarized-osaka")
    runs = highlighter.highlight("python", "# note\nx = 1\n", theme)
    comment = [run for run in runs if "note" in run.text]
    assert comment
    assert comment[0].style == theme.style_for(Role.CODE_COMMENT)
    assert highlighter.stats['highlighted'] == 1


def test_empty_code_has_no_runs(highlighter):
    assert highlighter.highlight("python", "", get_theme("monochrome")) == []


def test_aliases_and_registration(highlighter):
    assert highlighter.is_supported("sh")
    assert highlighter.is_supported("Python")
    assert not highlighter.is_supported("mylang")
    assert not highlighter.is_supported(None)

    highlighter.register_language("mylang", "python")
    assert highlighter.is_supported("mylang")


@pytest.mark.parametrize("info, expected", [
    ("python", "python"),
    ("Python {linenos=true}", "python"),
    ("{.rust}", "rust"),
    ("   ", None),
    (None, None),
])
def test_normalize_language(info, expected):
    assert normalize_language(info) == expected


def test_role_for_token():
    assert role_for_token(Comment.Single) == Role.CODE_COMMENT
    assert role_for_token(Keyword.Constant) == Role.CODE_KEYWORD
    assert role_for_token(Name.Function) == Role.CODE_FUNCTION
    assert role_for_token(Text) == Role.CODE_BLOCK
