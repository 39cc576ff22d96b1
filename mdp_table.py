#!/usr/bin/env python3
"""
📝 MDP Markdown Previewer - Table Accumulator
=============================================
Copyright (c) 2025 PNGN-Tec LLC

Table Buffering and Layout
==========================
Column widths depend on every row, so a table is buffered whole between
Start(Table) and End(Table) and only then laid out.

Rules
=====
- The header row fixes the column count and the column alignments
- Body rows are padded with empty cells or truncated to the header's count
- A body cell's own alignment is checked against the header, never used
- Column width is the widest cell (in terminal columns) of the column,
  header included; only a column narrower than its separator marker
  (":-:" for centered) is widened to fit the marker
- A table whose header row is missing or has no cells promotes its first
  body row to header

Output Shape
============
    | Name  | Qty |
    | :---- | --: |
    | apple |   3 |
"""

import logging
from typing import List, Optional

from mdp_config import RenderConfig
from mdp_events import Alignment
from mdp_output import StyledRun
from mdp_theme import Role, Theme, PLAIN
from mdp_width import get_widths, split_padding

# Configure logging
logger = logging.getLogger('mdp_table')

Cell = List[StyledRun]
Row = List[Cell]


def cell_width(cell: Cell) -> int:
    return sum(get_widths([run.text for run in cell]))


class PendingTable:
    """
    One table under construction.

    Cells collect runs from push(); the renderer resolves styles before
    runs arrive here, so the table only arranges them.
    """

    def __init__(self):
        self.alignments: List[Alignment] = []
        self.header: Optional[Row] = None
        self.rows: List[Row] = []
        self._in_head = False
        self._row: Optional[Row] = None
        self._cell: Optional[Cell] = None
        self._cell_alignment = Alignment.NONE
        self.defects = 0

    @property
    def column_count(self) -> int:
        return len(self.header) if self.header is not None else 0

    @property
    def in_header(self) -> bool:
        return self._in_head or not self.header

    # ------------------------------------------------------------------
    # Structure events
    # ------------------------------------------------------------------

    def start_head(self):
        self._in_head = True
        self._row = []

    def end_head(self):
        self._finish_row()
        self._in_head = False

    def start_row(self):
        if self._row is not None and self._row:
            # A row nested in the head (or an unterminated row) ends here
            self._finish_row()
        self._row = []

    def end_row(self):
        self._finish_row()

    def start_cell(self, alignment: Alignment = Alignment.NONE):
        if self._row is None:
            self._row = []
        if self._cell is not None:
            self.end_cell()
        self._cell = []
        self._cell_alignment = alignment

    def end_cell(self):
        if self._cell is None:
            return
        if self._row is None:
            self._row = []
        self._row.append(self._cell)

        if self.in_header:
            self.alignments.append(self._cell_alignment)
        else:
            column = len(self._row) - 1
            if column < self.column_count and self._cell_alignment != self.alignments[column] \
                    and self._cell_alignment != Alignment.NONE:
                logger.debug(f"Body cell alignment {self._cell_alignment.value} differs from "
                             f"column {column} alignment {self.alignments[column].value}")
                self.defects += 1
        self._cell = None

    def push(self, run: StyledRun):
        """Append a run to the open cell (opening one if needed)"""
        if self._cell is None:
            self.start_cell()
        self._cell.append(run)

    def _finish_row(self):
        if self._cell is not None:
            self.end_cell()
        row, self._row = self._row, None
        if row is None:
            return

        if not self.header:
            if self.header is not None:
                logger.debug("Header row has no cells, promoting the first body row")
                self.defects += 1
            self.header = row
            return

        count = self.column_count
        if len(row) != count:
            logger.debug(f"Body row has {len(row)} cells, header has {count}")
            self.defects += 1
        row = row[:count] + [[] for _ in range(count - len(row))]
        self.rows.append(row)

    def finish(self):
        """Close anything left open (End(Table) without End(TableRow))"""
        if self._row is not None or self._cell is not None:
            self._finish_row()
        self._in_head = False

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def column_widths(self, config: RenderConfig) -> List[int]:
        widths = [max(marker_width(alignment, config), cell_width(cell))
                  for alignment, cell in zip(self.alignments, self.header or [])]
        for row in self.rows:
            for column, cell in enumerate(row):
                widths[column] = max(widths[column], cell_width(cell))
        return widths

    def layout(self, theme: Theme, config: RenderConfig) -> List[List[StyledRun]]:
        """
        Arrange the buffered table into output lines.

        Returns:
            Lines of runs (no line breaks); empty when no row was seen
        """
        self.finish()
        if not self.header:
            return []

        widths = self.column_widths(config)
        border = theme.style_for(Role.TABLE_BORDER)
        header_style = theme.style_for(Role.TABLE_HEADER)

        lines = [self._layout_row(_restyle(self.header, header_style), widths, border, config)]

        markers = [StyledRun(separator_marker(alignment, width, config), border)
                   for alignment, width in zip(self.alignments, widths)]
        lines.append(self._join(markers, border, config))

        for row in self.rows:
            lines.append(self._layout_row(row, widths, border, config))
        return lines

    def _layout_row(self, row: Row, widths: List[int], border, config: RenderConfig) -> List[StyledRun]:
        cells = []
        for column, cell in enumerate(row):
            cells.append(_pad_cell(cell, widths[column], self.alignments[column]))
        return self._join_cells(cells, border, config)

    @staticmethod
    def _join(runs: List[StyledRun], border, config: RenderConfig) -> List[StyledRun]:
        return PendingTable._join_cells([[run] for run in runs], border, config)

    @staticmethod
    def _join_cells(cells: List[Cell], border, config: RenderConfig) -> List[StyledRun]:
        separator = config.table_separator
        line = [StyledRun(f"{separator} ", border)]
        for column, cell in enumerate(cells):
            if column:
                line.append(StyledRun(f" {separator} ", border))
            line.extend(cell)
        line.append(StyledRun(f" {separator}", border))
        return line


def separator_marker(alignment: Alignment, width: int, config: RenderConfig) -> str:
    """Stretch the configured alignment marker to the column width"""
    template = {
        Alignment.LEFT: config.align_left,
        Alignment.CENTER: config.align_center,
        Alignment.RIGHT: config.align_right,
    }.get(alignment, config.align_none)

    left = template.startswith(':')
    right = len(template) > 1 and template.endswith(':')
    dashes = max(1, width - left - right)
    return (':' if left else '') + '-' * dashes + (':' if right else '')


def marker_width(alignment: Alignment, config: RenderConfig) -> int:
    """Narrowest separator marker for an alignment: its colons plus one dash"""
    return len(separator_marker(alignment, 0, config))


def _restyle(row: Row, style) -> Row:
    """Header cells take the header color and add its flags"""
    restyled = []
    for cell in row:
        restyled.append([
            StyledRun(run.text, run.style.union(style).with_color(style.color or run.style.color))
            for run in cell
        ])
    return restyled


def _pad_cell(cell: Cell, width: int, alignment: Alignment) -> Cell:
    left, right = split_padding(cell_width(cell), width, alignment.value)

    padded = []
    if left:
        padded.append(StyledRun(' ' * left, PLAIN))
    padded.extend(cell)
    if right:
        padded.append(StyledRun(' ' * right, PLAIN))
    return padded
