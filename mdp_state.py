#!/usr/bin/env python3
"""
📝 MDP Markdown Previewer - Render State
========================================
Copyright (c) 2025 PNGN-Tec LLC

Nesting Context for One Render
==============================
RenderState is created fresh for every document and owned by exactly one
MarkdownRenderer.render() call. It holds:

- The stack of open frames (innermost last)
- Per-list ordinal counters (one per List frame, never shared)
- Pending item markers waiting for the item's first line
- Line bookkeeping (at line start, last line blank, any output yet)
- The PendingTable while a table is open

Indentation
===========
Each open List frame contributes config.indent_width columns and each open
BlockQuote frame contributes the width of one quote marker. All other
frames contribute nothing. The renderer writes exactly this many
columns of prefix on continuation lines and narrows rules by it.

Recovery
========
find(kind) locates the innermost open frame of a kind class. The renderer
closes every frame above and including it, innermost first; when no such
frame is open the End event is ignored.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Type

import mdp_events as ev
from mdp_config import RenderConfig
from mdp_output import StyledRun
from mdp_table import PendingTable
from mdp_width import get_width

# Configure logging
logger = logging.getLogger('mdp_state')

INLINE_KINDS = (ev.Emphasis, ev.Strong, ev.Strikethrough)


@dataclass
class Frame:
    """One open structural construct"""
    kind: ev.BlockKind
    # Next ordinal for ordered List frames
    ordinal: Optional[int] = None
    # Item/footnote marker not yet written (emitted with the first line)
    marker: Optional[List[StyledRun]] = None
    # Raw text gathered by Link, Image and CodeBlock frames
    collected: List[str] = field(default_factory=list)

    def is_a(self, kind_class: Type) -> bool:
        return isinstance(self.kind, kind_class)


class RenderState:
    """Mutable context threaded through one render"""

    def __init__(self, config: RenderConfig):
        self.config = config
        self.stack: List[Frame] = []
        self.table: Optional[PendingTable] = None

        # Line bookkeeping
        self.at_line_start = True
        self.has_output = False
        self.last_line_blank = False
        # Set when a container opened and its first block needs no blank line
        self.container_fresh = False

    # ------------------------------------------------------------------
    # Stack operations
    # ------------------------------------------------------------------

    @staticmethod
    def make_frame(kind: ev.BlockKind) -> Frame:
        frame = Frame(kind)
        if isinstance(kind, ev.List) and kind.ordered:
            frame.ordinal = kind.start if kind.start is not None else 1
        return frame

    def push(self, frame: Frame):
        self.stack.append(frame)

    def find(self, kind_class: Type) -> int:
        """Index of the innermost frame of this kind class, or -1"""
        for index in range(len(self.stack) - 1, -1, -1):
            if self.stack[index].is_a(kind_class):
                return index
        return -1

    def innermost(self, kind_class: Type) -> Optional[Frame]:
        index = self.find(kind_class)
        return self.stack[index] if index >= 0 else None

    def is_open(self, kind_class: Type) -> bool:
        return self.find(kind_class) >= 0

    # ------------------------------------------------------------------
    # Derived context
    # ------------------------------------------------------------------

    def list_depth(self) -> int:
        return sum(1 for frame in self.stack if frame.is_a(ev.List))

    def indent_width(self) -> int:
        width = 0
        quote_width = get_width(self.config.quote_marker)
        for frame in self.stack:
            if frame.is_a(ev.List):
                width += self.config.indent_width
            elif frame.is_a(ev.BlockQuote):
                width += quote_width
        return width

    def inline_frames(self) -> List[Frame]:
        return [frame for frame in self.stack if frame.is_a(INLINE_KINDS)]

    def next_ordinal(self) -> Optional[int]:
        """Consume the enclosing ordered list's ordinal (None if unordered)"""
        frame = self.innermost(ev.List)
        if frame is None or frame.ordinal is None:
            return None
        ordinal = frame.ordinal
        frame.ordinal += 1
        return ordinal

    def in_table(self) -> bool:
        return self.table is not None

    def code_frame(self) -> Optional[Frame]:
        return self.innermost(ev.CodeBlock)
