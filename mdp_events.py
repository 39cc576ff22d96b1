#!/usr/bin/env python3
"""
📝 MDP Markdown Previewer - Parse Event Model
=============================================
Copyright (c) 2025 PNGN-Tec LLC

Structural Event Types
======================
The rendering engine consumes a flat, ordered sequence of parse events.
Every event and every block kind is a small frozen dataclass, so a
document can be described (and tested) as a plain list of values.

Events
======
- Start(kind) / End(kind): Open and close a block or inline construct
- Text(text): Literal text (entity references still encoded)
- Code(text): Inline code span contents
- HtmlEntity(text): Raw inline HTML or a standalone entity
- SoftBreak / HardBreak: Line breaks inside a paragraph
- Rule: Thematic break
- FootnoteReference(label): [^label] in running text

Block Kinds
===========
Heading, Paragraph, BlockQuote, List, ListItem, CodeBlock, Table,
TableHead, TableRow, TableCell, Emphasis, Strong, Strikethrough, Link,
Image, FootnoteDefinition.

End events match open frames by kind class only: End(List()) closes the
innermost List frame whatever its ordered/start fields.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class Alignment(Enum):
    """Table column alignment"""
    NONE = "none"
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


# ============================================================================
# BLOCK KINDS
# ============================================================================

@dataclass(frozen=True)
class Heading:
    level: int = 1


@dataclass(frozen=True)
class Paragraph:
    pass


@dataclass(frozen=True)
class BlockQuote:
    pass


@dataclass(frozen=True)
class List:
    ordered: bool = False
    start: Optional[int] = None


@dataclass(frozen=True)
class ListItem:
    # None for a plain item, True/False for a checked/unchecked task
    task: Optional[bool] = None


@dataclass(frozen=True)
class CodeBlock:
    language: Optional[str] = None


@dataclass(frozen=True)
class Table:
    pass


@dataclass(frozen=True)
class TableHead:
    pass


@dataclass(frozen=True)
class TableRow:
    pass


@dataclass(frozen=True)
class TableCell:
    alignment: Alignment = Alignment.NONE


@dataclass(frozen=True)
class Emphasis:
    pass


@dataclass(frozen=True)
class Strong:
    pass


@dataclass(frozen=True)
class Strikethrough:
    pass


@dataclass(frozen=True)
class Link:
    destination: str = ""
    title: str = ""


@dataclass(frozen=True)
class Image:
    destination: str = ""
    alt: str = ""


@dataclass(frozen=True)
class FootnoteDefinition:
    label: str = ""


BlockKind = Union[Heading, Paragraph, BlockQuote, List, ListItem, CodeBlock,
                  Table, TableHead, TableRow, TableCell, Emphasis, Strong,
                  Strikethrough, Link, Image, FootnoteDefinition]


# ============================================================================
# EVENTS
# ============================================================================

@dataclass(frozen=True)
class Start:
    kind: BlockKind


@dataclass(frozen=True)
class End:
    kind: BlockKind


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Code:
    text: str


@dataclass(frozen=True)
class HtmlEntity:
    text: str


@dataclass(frozen=True)
class SoftBreak:
    pass


@dataclass(frozen=True)
class HardBreak:
    pass


@dataclass(frozen=True)
class Rule:
    pass


@dataclass(frozen=True)
class FootnoteReference:
    label: str


ParseEvent = Union[Start, End, Text, Code, HtmlEntity, SoftBreak, HardBreak,
                   Rule, FootnoteReference]
