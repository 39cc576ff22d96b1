#!/usr/bin/env python3
"""
📝 MDP Markdown Previewer - Parser Adapter
==========================================
Copyright (c) 2025 PNGN-Tec LLC

Markdown Tokenization
=====================
Wraps markdown-it-py (CommonMark plus GFM tables and strikethrough, with
the tasklists and footnote plugins from mdit-py-plugins) and flattens its
nested token list into the ParseEvent sequence the renderer consumes.

Token Mapping
=============
- heading_open/close           -> Heading(level)
- paragraph_open/close         -> Paragraph (omitted when hidden in tight lists)
- blockquote_open/close        -> BlockQuote
- bullet/ordered_list_open     -> List(ordered, start)
- list_item_open               -> ListItem(task) using the tasklists checkbox
- fence / code_block           -> CodeBlock(language) + Text + End
- table / thead / tr / th / td -> Table, TableHead, TableRow, TableCell
- hr                           -> Rule
- html_block                   -> Paragraph of HtmlEntity lines
- footnote_open/close          -> FootnoteDefinition(label)
- inline children              -> Text, Code, HtmlEntity, breaks, Emphasis,
                                  Strong, Strikethrough, Link, Image,
                                  FootnoteReference

Entities
========
The built-in entity rule is disabled so references reach the renderer
encoded and are decoded exactly once, by mdp_entity.

Module Interface
================
- create_parser(): Configured MarkdownIt instance
- parse_events(): Markdown source to a ParseEvent iterator
- normalize_line_endings(): CRLF and CR to LF
- read_markdown_file(): Read a UTF-8 Markdown file
"""

import logging
import re
from pathlib import Path
from typing import Iterator, List, Optional, Set, Union

from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.tasklists import tasklists_plugin

import mdp_events as ev

# Configure logging
logger = logging.getLogger('mdp_parser')

_ALIGN = re.compile(r'text-align:\s*(left|center|right)')
_ALIGNMENTS = {
    'left': ev.Alignment.LEFT,
    'center': ev.Alignment.CENTER,
    'right': ev.Alignment.RIGHT,
}

# Block tokens whose open/close pair maps onto a single BlockKind
_SIMPLE_BLOCKS = {
    'blockquote': ev.BlockQuote,
    'table': ev.Table,
    'thead': ev.TableHead,
    'strong': ev.Strong,
    'em': ev.Emphasis,
    's': ev.Strikethrough,
}

# Wrappers that carry no structure of their own
_IGNORED = {'tbody_open', 'tbody_close', 'footnote_block_open',
            'footnote_block_close', 'footnote_anchor'}


class MarkdownFileError(Exception):
    """A Markdown file could not be read as UTF-8 text"""

    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = Path(path)
        self.reason = reason


# ============================================================================
# PARSER CONSTRUCTION
# ============================================================================

def create_parser() -> MarkdownIt:
    """CommonMark with tables, strikethrough, task lists and footnotes"""
    parser = (
        MarkdownIt("commonmark")
        .enable(["table", "strikethrough"])
        .use(tasklists_plugin)
        .use(footnote_plugin)
    )
    # Keep references encoded and escapes separate for mdp_entity
    parser.disable(["entity", "text_join"], ignoreInvalid=True)
    return parser


_parser: Optional[MarkdownIt] = None


def _get_parser() -> MarkdownIt:
    global _parser
    if _parser is None:
        _parser = create_parser()
    return _parser


def normalize_line_endings(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def read_markdown_file(path: Union[str, Path]) -> str:
    """
    Read a Markdown file as UTF-8 with normalized line endings.

    Raises:
        MarkdownFileError: Missing, not a file, unreadable or not UTF-8
    """
    path = Path(path)
    if not path.exists():
        raise MarkdownFileError(path, "no such file")
    if not path.is_file():
        raise MarkdownFileError(path, "not a regular file")

    try:
        data = path.read_bytes()
    except OSError as e:
        raise MarkdownFileError(path, e.strerror or str(e)) from e

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MarkdownFileError(path, f"not valid UTF-8 (byte {e.start})") from e

    return normalize_line_endings(text.lstrip("\ufeff"))


# ============================================================================
# TOKEN STREAM ADAPTER
# ============================================================================

def parse_events(source: str) -> Iterator[ev.ParseEvent]:
    """
    Parse Markdown and yield ParseEvents in document order.

    Args:
        source: Markdown text

    Yields:
        ParseEvent values; every Start has a matching End
    """
    tokens = _get_parser().parse(normalize_line_endings(source))
    return _TokenAdapter(tokens).events()


def _alignment(token: Token) -> ev.Alignment:
    match = _ALIGN.search(str(token.attrGet("style") or ""))
    if match is None:
        return ev.Alignment.NONE
    return _ALIGNMENTS[match.group(1)]


def _footnote_label(token: Token) -> str:
    meta = token.meta or {}
    label = meta.get("label")
    if label:
        return str(label)
    return str(meta.get("id", 0) + 1)


def _alt_text(token: Token) -> str:
    """Plain text of an image label, markup removed (`![a *b*](x)` -> `a b`)"""
    parts = []
    for child in token.children or []:
        if child.type == 'text_special' and child.content == "&":
            parts.append("&amp;")
        elif child.type in ('text', 'text_special', 'code_inline'):
            parts.append(child.content)
        elif child.type in ('softbreak', 'hardbreak'):
            parts.append(" ")
        elif child.type == 'image':
            parts.append(_alt_text(child))
    return "".join(parts)


class _TokenAdapter:
    """Walks block and inline tokens keeping a stack of open kinds"""

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.open_kinds: List[ev.BlockKind] = []
        self.skip: Set[int] = set()
        self.in_thead = False

    def _start(self, kind: ev.BlockKind) -> ev.Start:
        self.open_kinds.append(kind)
        return ev.Start(kind)

    def _end(self) -> ev.End:
        return ev.End(self.open_kinds.pop())

    def events(self) -> Iterator[ev.ParseEvent]:
        for index, token in enumerate(self.tokens):
            yield from self._block(index, token)

    def _block(self, index: int, token: Token) -> Iterator[ev.ParseEvent]:
        kind = token.type

        if kind in _IGNORED:
            return
        if kind == 'inline':
            yield from self._inline(token.children or [])
        elif kind == 'paragraph_open':
            if not token.hidden:
                yield self._start(ev.Paragraph())
        elif kind == 'paragraph_close':
            if not token.hidden:
                yield self._end()
        elif kind == 'heading_open':
            yield self._start(ev.Heading(int(token.tag[1:])))
        elif kind in ('bullet_list_open', 'ordered_list_open'):
            ordered = kind == 'ordered_list_open'
            start = None
            if ordered:
                value = token.attrGet("start")
                start = int(value) if value is not None else 1
            yield self._start(ev.List(ordered, start))
        elif kind == 'list_item_open':
            yield self._start(ev.ListItem(self._task_state(index, token)))
        elif kind in ('fence', 'code_block'):
            language = (token.info.strip() or None) if kind == "fence" else None
            yield self._start(ev.CodeBlock(language))
            if token.content:
                yield ev.Text(token.content)
            yield self._end()
        elif kind == 'hr':
            yield ev.Rule()
        elif kind == 'html_block':
            yield from self._html_block(token.content)
        elif kind == 'thead_open':
            self.in_thead = True
            yield self._start(ev.TableHead())
        elif kind == 'thead_close':
            self.in_thead = False
            yield self._end()
        elif kind == 'tr_open':
            if not self.in_thead:
                yield self._start(ev.TableRow())
        elif kind == 'tr_close':
            if not self.in_thead:
                yield self._end()
        elif kind in ('th_open', 'td_open'):
            yield self._start(ev.TableCell(_alignment(token)))
        elif kind == 'footnote_open':
            yield self._start(ev.FootnoteDefinition(_footnote_label(token)))
        elif kind.endswith('_open') and kind[:-5] in _SIMPLE_BLOCKS:
            yield self._start(_SIMPLE_BLOCKS[kind[:-5]]())
        elif kind.endswith('_close'):
            if self.open_kinds:
                yield self._end()
        else:
            logger.debug(f"Skipping unsupported block token {kind}")

    def _task_state(self, index: int, token: Token) -> Optional[bool]:
        """Checked state from the tasklists checkbox, which is then skipped"""
        if "task-list-item" not in str(token.attrGet("class") or ""):
            return None
        for following in self.tokens[index + 1:]:
            if following.type == 'inline':
                for child in following.children or []:
                    if child.type == 'html_inline' and 'task-list-item-checkbox' in child.content:
                        self.skip.add(id(child))
                        return 'checked="checked"' in child.content
                return None
        return None

    def _html_block(self, content: str) -> Iterator[ev.ParseEvent]:
        lines = content.rstrip("\n").split("\n")
        yield self._start(ev.Paragraph())
        for number, line in enumerate(lines):
            if number:
                yield ev.HardBreak()
            if line:
                yield ev.HtmlEntity(line)
        yield self._end()

    def _inline(self, children: List[Token]) -> Iterator[ev.ParseEvent]:
        strip_next = False
        for child in children:
            kind = child.type

            if id(child) in self.skip:
                strip_next = True
                continue

            if kind == 'text':
                text = child.content.lstrip() if strip_next else child.content
                strip_next = False
                if text:
                    yield ev.Text(text)
                continue
            strip_next = False

            if kind == 'text_special':
                # An escaped '&' must stay literal through entity decoding
                text = "&amp;" if child.content == "&" else child.content
                yield ev.Text(text)
            elif kind == 'code_inline':
                yield ev.Code(child.content)
            elif kind == 'html_inline':
                yield ev.HtmlEntity(child.content)
            elif kind == 'softbreak':
                yield ev.SoftBreak()
            elif kind == 'hardbreak':
                yield ev.HardBreak()
            elif kind == 'link_open':
                yield self._start(ev.Link(str(child.attrGet("href") or ""),
                                          str(child.attrGet("title") or "")))
            elif kind == 'image':
                yield self._start(ev.Image(str(child.attrGet("src") or ""), _alt_text(child)))
                yield self._end()
            elif kind == 'footnote_ref':
                yield ev.FootnoteReference(_footnote_label(child))
            elif kind.endswith('_open') and kind[:-5] in _SIMPLE_BLOCKS:
                yield self._start(_SIMPLE_BLOCKS[kind[:-5]]())
            elif kind.endswith('_close'):
                if self.open_kinds:
                    yield self._end()
            else:
                logger.debug(f"Skipping unsupported inline token {kind}")
