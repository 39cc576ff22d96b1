#!/usr/bin/env python3
"""
📝 MDP Markdown Previewer - Markdown Renderer
=============================================
Copyright (c) 2025 PNGN-Tec LLC

Event-Driven Rendering Engine
=============================
MarkdownRenderer consumes parse events one at a time, strictly in order,
and writes StyledRuns to an OutputSink. It is a single finite-state
consumer: every event class and every block kind maps to one handler in
a dispatch table, and all nesting context lives in a RenderState created
fresh for each document.

Core Features
=============
- Headings with optional '#' markers, one blank line between blocks
- Nested lists with per-list ordinals, depth-cycled bullets, task boxes
- Block quotes rendered as one marker per nesting level on every line
- Tables buffered whole, then laid out with per-column alignment
- Fenced code highlighted through pygments, with optional fence lines
- Links and images shown with their destination in trailing parentheses
- Footnote references and definitions
- Entity decoding for all Text and HtmlEntity payloads

Style Composition
=================
A text run's flags are the union of every open Emphasis/Strong/
Strikethrough frame plus the block role (heading, link, image or text).
The color comes from the block role; in plain text the innermost inline
frame's color is used instead.

Defect Tolerance
================
- End(K) closes every frame down to the innermost K frame
- End(K) with no open K frame is ignored
- Frames still open at the end of the stream are closed in order
Each absorbed defect is logged at DEBUG and counted in get_stats().

Module Interface
================
- MarkdownRenderer: Renderer bound to a theme, sink and config
  - render(): Render a complete event sequence
  - get_stats(): Render timing and defect statistics
- render_events(): One-shot render of an event sequence
- render_markdown(): Parse Markdown source and render it
"""

import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

import mdp_events as ev
from mdp_config import RenderConfig, get_render_config
from mdp_entity import decode
from mdp_highlight import CodeHighlighter, get_default_highlighter, normalize_language
from mdp_output import OutputSink, StyledRun
from mdp_state import Frame, RenderState
from mdp_table import PendingTable
from mdp_theme import Role, StyleAttributes, Theme, heading_role

# Configure logging
logger = logging.getLogger('mdp_render')

FENCE = "```"


class MarkdownRenderer:
    """
    Stateful event consumer producing styled terminal output.

    The renderer itself holds only the theme, sink, config and statistics;
    per-document state is created by render() and discarded afterwards.
    """

    def __init__(self,
                 theme: Theme,
                 sink: OutputSink,
                 config: Optional[RenderConfig] = None,
                 highlighter: Optional[CodeHighlighter] = None):
        self.theme = theme
        self.sink = sink
        self.config = config or get_render_config()
        self.highlighter = highlighter or get_default_highlighter()
        self.state = RenderState(self.config)

        # Statistics
        self.render_times: List[float] = []
        self.events_processed = 0
        self.defects_recovered = 0

        self._event_handlers: Dict[type, Callable[[Any], None]] = {
            ev.Start: self._on_start,
            ev.End: self._on_end,
            ev.Text: self._on_text,
            ev.Code: self._on_code,
            ev.HtmlEntity: self._on_text,
            ev.SoftBreak: self._on_soft_break,
            ev.HardBreak: self._on_hard_break,
            ev.Rule: self._on_rule,
            ev.FootnoteReference: self._on_footnote_reference,
        }
        self._start_handlers: Dict[type, Callable[[Frame], None]] = {
            ev.Heading: self._start_heading,
            ev.Paragraph: self._start_paragraph,
            ev.BlockQuote: self._start_block_quote,
            ev.List: self._start_list,
            ev.ListItem: self._start_list_item,
            ev.CodeBlock: self._start_code_block,
            ev.Table: self._start_table,
            ev.TableHead: self._start_table_head,
            ev.TableRow: self._start_table_row,
            ev.TableCell: self._start_table_cell,
            ev.FootnoteDefinition: self._start_footnote_definition,
        }
        self._close_handlers: Dict[type, Callable[[Frame], None]] = {
            ev.Heading: self._close_line,
            ev.Paragraph: self._close_line,
            ev.ListItem: self._close_list_item,
            ev.CodeBlock: self._close_code_block,
            ev.Table: self._close_table,
            ev.TableHead: self._close_table_head,
            ev.TableRow: self._close_table_row,
            ev.TableCell: self._close_table_cell,
            ev.Link: self._close_link,
            ev.Image: self._close_image,
            ev.FootnoteDefinition: self._close_line,
        }

    # ========================================================================
    # PUBLIC API
    # ========================================================================

    def render(self, events: Iterable[ev.ParseEvent]):
        """
        Render a whole document.

        Args:
            events: Parse events in document order
        """
        start_time = time.time()
        self.state = RenderState(self.config)

        for event in events:
            self.feed(event)
        self.finish()

        render_time = (time.time() - start_time) * 1000
        self.render_times.append(render_time)
        logger.debug(f"Rendered {self.events_processed} events in {render_time:.2f}ms")

    def feed(self, event: ev.ParseEvent):
        """Process a single event"""
        self.events_processed += 1
        handler = self._event_handlers.get(type(event))
        if handler is None:
            logger.debug(f"Ignoring unknown event {event!r}")
            return
        handler(event)

    def finish(self):
        """Close frames left open by the event stream and end the last line"""
        leftovers = len(self.state.stack)
        if leftovers:
            logger.debug(f"Closing {leftovers} frames left open at end of stream")
            self.defects_recovered += leftovers
        self._close_down_to(0)
        self._end_line()

    def get_stats(self) -> Dict[str, Any]:
        """Get render statistics"""
        stats = {
            'renders_completed': len(self.render_times),
            'events_processed': self.events_processed,
            'defects_recovered': self.defects_recovered,
            'highlighter': dict(self.highlighter.stats),
        }
        if self.render_times:
            stats['avg_render_time'] = sum(self.render_times) / len(self.render_times)
            stats['min_render_time'] = min(self.render_times)
            stats['max_render_time'] = max(self.render_times)
        return stats

    # ========================================================================
    # EVENT HANDLERS
    # ========================================================================

    def _on_start(self, event: ev.Start):
        # Handlers run before the push so separation lines use the outer nesting
        frame = self.state.make_frame(event.kind)
        handler = self._start_handlers.get(type(event.kind))
        if handler is not None:
            handler(frame)
        self.state.push(frame)

    def _on_end(self, event: ev.End):
        name = type(event.kind).__name__
        index = self.state.find(type(event.kind))
        if index < 0:
            logger.debug(f"Ignoring End({name}) with no open frame")
            self.defects_recovered += 1
            return
        unclosed = len(self.state.stack) - index - 1
        if unclosed:
            logger.debug(f"End({name}) closed {unclosed} unclosed inner frames")
            self.defects_recovered += unclosed
        self._close_down_to(index)

    def _close_down_to(self, index: int):
        """Close frames innermost first; each is closed while still on the stack"""
        while len(self.state.stack) > index:
            self._close(self.state.stack[-1])
            self.state.stack.pop()

    def _close(self, frame: Frame):
        handler = self._close_handlers.get(type(frame.kind))
        if handler is not None:
            handler(frame)

    def _on_text(self, event: Union[ev.Text, ev.HtmlEntity]):
        code = self.state.code_frame()
        if code is not None:
            code.collected.append(event.text)
            return
        self._emit_inline(decode(event.text), self._text_style())

    def _on_code(self, event: ev.Code):
        code = self.state.code_frame()
        if code is not None:
            code.collected.append(event.text)
            return
        self._emit_inline(event.text, self._inline_code_style())

    def _on_soft_break(self, event: ev.SoftBreak):
        code = self.state.code_frame()
        if code is not None:
            code.collected.append("\n")
            return
        self._emit_inline(" ", self._text_style())

    def _on_hard_break(self, event: ev.HardBreak):
        code = self.state.code_frame()
        if code is not None:
            code.collected.append("\n")
            return
        if self.state.in_table() or self._collecting_frame() is not None:
            self._emit_inline(" ", self._text_style())
            return
        self._newline()

    def _on_rule(self, event: ev.Rule):
        self._begin_block()
        # Indented rules shrink so they stay within the terminal
        room = self.config.terminal_width() - self.state.indent_width()
        rule = self.config.rule_glyph * max(1, min(self.config.rule_width(), room))
        self._write(rule, self.theme.style_for(Role.RULE))
        self._end_line()

    def _on_footnote_reference(self, event: ev.FootnoteReference):
        self._emit_inline(f"[^{event.label}]", self.theme.style_for(Role.LINK))

    # ========================================================================
    # BLOCK STARTS
    # ========================================================================

    def _start_heading(self, frame: Frame):
        self._begin_block()
        if self.config.show_heading_markers:
            level = min(max(frame.kind.level, 1), 6)
            self._write("#" * level + " ", self.theme.heading_style(level))

    def _start_paragraph(self, frame: Frame):
        if self.state.in_table():
            return
        self._begin_block()

    def _start_block_quote(self, frame: Frame):
        self._begin_block()
        self.state.container_fresh = True

    def _start_list(self, frame: Frame):
        if self.state.find(ev.ListItem) >= 0:
            # Nested list: starts on its own line, no blank line
            self._end_line()
        else:
            self._begin_block()
        self.state.container_fresh = True

    def _start_list_item(self, frame: Frame):
        self._end_line()
        self.state.container_fresh = True

        marker_style = self.theme.style_for(Role.LIST_MARKER)
        ordinal = self.state.next_ordinal()
        task = frame.kind.task

        if ordinal is not None:
            marker = f"{ordinal}. "
            if task is not None:
                marker += self._task_box(task) + " "
        elif task is not None:
            marker = self._task_box(task) + " "
        else:
            glyphs = self.config.bullet_glyphs
            depth = max(self.state.list_depth(), 1)
            marker = glyphs[(depth - 1) % len(glyphs)] + " "
        frame.marker = [StyledRun(marker, marker_style)]

    def _task_box(self, checked: bool) -> str:
        return self.config.task_checked if checked else self.config.task_unchecked

    def _start_code_block(self, frame: Frame):
        self._begin_block()

    def _start_table(self, frame: Frame):
        self._begin_block()
        self.state.table = PendingTable()

    def _start_table_head(self, frame: Frame):
        if self.state.table is not None:
            self.state.table.start_head()

    def _start_table_row(self, frame: Frame):
        if self.state.table is not None:
            self.state.table.start_row()

    def _start_table_cell(self, frame: Frame):
        if self.state.table is not None:
            self.state.table.start_cell(frame.kind.alignment)

    def _start_footnote_definition(self, frame: Frame):
        self._begin_block()
        self.state.container_fresh = True
        frame.marker = [StyledRun(f"[^{frame.kind.label}]: ", self.theme.style_for(Role.DELIMITER))]

    # ========================================================================
    # BLOCK CLOSES
    # ========================================================================

    def _close_line(self, frame: Frame):
        if self.state.in_table():
            return
        self._flush_marker(frame)
        self._end_line()

    def _close_list_item(self, frame: Frame):
        # An empty item still shows its marker
        self._flush_marker(frame)
        self._end_line()

    def _flush_marker(self, frame: Frame):
        if frame.marker is not None and self.state.at_line_start:
            self._write_prefix()
            self.state.last_line_blank = False
            self.state.has_output = True

    def _close_code_block(self, frame: Frame):
        code = ''.join(frame.collected)
        if code.endswith("\n"):
            code = code[:-1]
        language = normalize_language(frame.kind.language)
        delimiter = self.theme.style_for(Role.DELIMITER)

        if self.config.show_code_fences:
            self._write(FENCE + (language or ""), delimiter)
            self._newline()

        for run in self.highlighter.highlight(language, code, self.theme):
            self._write(run.text, run.style)
            if run.line_break:
                self._newline()
        self._end_line()

        if self.config.show_code_fences:
            self._write(FENCE, delimiter)
            self._end_line()

    def _close_table(self, frame: Frame):
        table, self.state.table = self.state.table, None
        if table is None:
            return
        self.defects_recovered += table.defects
        for line in table.layout(self.theme, self.config):
            for run in line:
                self._write(run.text, run.style)
            self._end_line()

    def _close_table_head(self, frame: Frame):
        if self.state.table is not None:
            self.state.table.end_head()

    def _close_table_row(self, frame: Frame):
        if self.state.table is not None:
            self.state.table.end_row()

    def _close_table_cell(self, frame: Frame):
        if self.state.table is not None:
            self.state.table.end_cell()

    def _close_link(self, frame: Frame):
        destination = frame.kind.destination
        if not destination or ''.join(frame.collected) == destination:
            return
        if frame.kind.title:
            suffix = f' ({destination} "{frame.kind.title}")'
        else:
            suffix = f" ({destination})"
        self._write(suffix, self.theme.style_for(Role.DELIMITER))

    def _close_image(self, frame: Frame):
        alt = decode(frame.kind.alt) or ''.join(frame.collected) or self.config.image_placeholder
        style = self.theme.style_for(Role.IMAGE).union(self._inline_flags())
        self._write(alt, style)
        if frame.kind.destination:
            self._write(f" ({frame.kind.destination})", self.theme.style_for(Role.DELIMITER))

    # ========================================================================
    # STYLE RESOLUTION
    # ========================================================================

    def _inline_flags(self) -> StyleAttributes:
        flags = StyleAttributes()
        for frame in self.state.inline_frames():
            flags = flags.union(self.theme.style_for(_inline_role(frame)))
        return flags

    def _block_role(self) -> Role:
        for frame in reversed(self.state.stack):
            if frame.is_a(ev.Link):
                return Role.LINK
            if frame.is_a(ev.Heading):
                return heading_role(frame.kind.level)
        return Role.TEXT

    def _text_style(self) -> StyleAttributes:
        role = self._block_role()
        style = self.theme.style_for(role).union(self._inline_flags())
        if role == Role.TEXT:
            inline = self.state.inline_frames()
            if inline:
                innermost = self.theme.style_for(_inline_role(inline[-1]))
                if innermost.color is not None:
                    style = style.with_color(innermost.color)
        return style

    def _inline_code_style(self) -> StyleAttributes:
        if self.state.is_open(ev.Link):
            return self._text_style()
        return self.theme.style_for(Role.INLINE_CODE).union(self._inline_flags())

    # ========================================================================
    # OUTPUT PRIMITIVES
    # ========================================================================

    def _collecting_frame(self) -> Optional[Frame]:
        """Innermost open Image frame (its children become alt text)"""
        return self.state.innermost(ev.Image)

    def _emit_inline(self, text: str, style: StyleAttributes):
        """Write inline content, feeding any open Link/Image collectors"""
        if not text:
            return
        image = self._collecting_frame()
        if image is not None:
            image.collected.append(text)
            return
        link = self.state.innermost(ev.Link)
        if link is not None:
            link.collected.append(text)
        self._write(text, style)

    def _write(self, text: str, style: StyleAttributes):
        if not text:
            return
        if self.state.table is not None:
            self.state.table.push(StyledRun(text, style))
            return
        if self.state.at_line_start:
            self._write_prefix()
        self.sink.accept(StyledRun(text, style))
        self.state.has_output = True
        self.state.last_line_blank = False
        self.state.container_fresh = False

    def _prefix_runs(self, blank: bool = False) -> List[StyledRun]:
        """
        Runs that start a line at the current nesting.

        Blank lines keep only quote markers. Otherwise each List frame adds
        its indent, unless its item still owes a marker, which takes the
        indent's place.
        """
        runs = []
        quote = StyledRun(self.config.quote_marker, self.theme.style_for(Role.QUOTE_MARKER))
        stack = self.state.stack
        for index, frame in enumerate(stack):
            if frame.is_a(ev.BlockQuote):
                runs.append(quote)
            elif blank:
                continue
            elif frame.is_a(ev.List):
                following = stack[index + 1] if index + 1 < len(stack) else None
                if following is None or following.marker is None:
                    runs.append(StyledRun(" " * self.config.indent_width))
            elif frame.marker is not None:
                runs.extend(frame.marker)
        if blank and runs:
            runs[-1] = StyledRun(runs[-1].text.rstrip(), runs[-1].style)
        return runs

    def _write_prefix(self):
        for run in self._prefix_runs():
            self.sink.accept(run)
        for frame in self.state.stack:
            frame.marker = None
        self.state.at_line_start = False

    def _end_line(self):
        if not self.state.at_line_start:
            self.sink.newline()
            self.state.at_line_start = True

    def _newline(self):
        """Always end a line, writing the prefix first if the line is empty"""
        if self.state.at_line_start:
            self._write_prefix()
        self.sink.newline()
        self.state.at_line_start = True
        self.state.has_output = True
        self.state.last_line_blank = False
        self.state.container_fresh = False

    def _blank_line(self):
        for run in self._prefix_runs(blank=True):
            if run.text:
                self.sink.accept(run)
        self.sink.newline()
        self.state.at_line_start = True
        self.state.last_line_blank = True

    def _begin_block(self):
        """Start a block on a fresh line, one blank line after prior output"""
        self._end_line()
        if self.state.container_fresh:
            self.state.container_fresh = False
            return
        if self.state.has_output and not self.state.last_line_blank:
            self._blank_line()


def _inline_role(frame: Frame) -> Role:
    if frame.is_a(ev.Strong):
        return Role.STRONG
    if frame.is_a(ev.Emphasis):
        return Role.EMPHASIS
    return Role.STRIKETHROUGH


# ============================================================================
# ENTRY POINTS
# ============================================================================

def render_events(events: Iterable[ev.ParseEvent],
                  theme: Theme,
                  sink: OutputSink,
                  config: Optional[RenderConfig] = None) -> MarkdownRenderer:
    """Render an event sequence; returns the renderer for its statistics"""
    renderer = MarkdownRenderer(theme, sink, config)
    renderer.render(events)
    return renderer


def render_markdown(source: str,
                    theme: Theme,
                    sink: OutputSink,
                    config: Optional[RenderConfig] = None) -> MarkdownRenderer:
    """Parse Markdown source and render it to sink"""
    from mdp_parser import parse_events

    return render_events(parse_events(source), theme, sink, config)
