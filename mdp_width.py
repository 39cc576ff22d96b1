#!/usr/bin/env python3
"""
📝 MDP Markdown Previewer - Display Width Module
================================================
Copyright (c) 2025 PNGN-Tec LLC

Terminal Columns
================
Tables and line prefixes are aligned in terminal columns, not characters:
"你好" occupies four columns, a combining accent none. Every column count
the renderer relies on comes from here.

Measurement
===========
wcwidth gives per-character widths. Text containing control characters
makes wcswidth return -1; those characters are then skipped one by one and
contribute nothing.

Caching
=======
Table cells repeat a lot (borders, padding, short values), so results are
memoized in a bounded LRU keyed by the text. The bound is both an entry
count and a byte budget, sized by mdp_config.CacheConfig.

Module Interface
================
- WidthCalculator: Memoizing measurer with statistics
- get_width() / get_widths(): Shared calculator shortcuts
- split_padding(): Left/right fill for an alignment
- clear_default_cache(): Drop the shared calculator's entries
"""

import logging
import threading
from collections import OrderedDict
from typing import Dict, List, Optional, Tuple, Union

from wcwidth import wcswidth, wcwidth

from mdp_config import get_cache_config

# Configure logging
logger = logging.getLogger('mdp_width')


def _measure(text: str) -> Tuple[int, bool]:
    """Columns of text, and whether control characters had to be skipped"""
    columns = wcswidth(text)
    if columns >= 0:
        return columns, False
    return sum(max(0, wcwidth(char)) for char in text), True


class WidthCalculator:
    """
    Column counter with an LRU memo.

    Statistics live in `stats`; get_stats() adds the cache occupancy.
    """

    def __init__(self,
                 cache_size: Optional[int] = None,
                 cache_memory_mb: Optional[float] = None,
                 enable_cache: Optional[bool] = None):
        defaults = get_cache_config()
        self._max_entries = max(1, cache_size if cache_size is not None else defaults.default_size)
        budget_mb = cache_memory_mb if cache_memory_mb is not None else defaults.max_memory_mb
        self._max_bytes = int(budget_mb * 1024 * 1024)
        self._enabled = defaults.enable_caching if enable_cache is None else enable_cache

        self._memo: 'OrderedDict[str, int]' = OrderedDict()
        self._memo_bytes = 0
        self._lock = threading.Lock()

        self.stats = {
            'cache_hits': 0,
            'cache_misses': 0,
            'cache_evictions': 0,
            'calculations': 0,
            'control_chars_handled': 0,
        }
        logger.debug(f"Width memo: {self._max_entries} entries, {budget_mb}MB, "
                     f"enabled={self._enabled}")

    def get_width(self, text: str) -> int:
        """Terminal columns occupied by text"""
        if not text:
            return 0

        if self._enabled:
            with self._lock:
                known = self._memo.get(text)
                if known is not None:
                    self._memo.move_to_end(text)
                    self.stats['cache_hits'] += 1
                    return known
                self.stats['cache_misses'] += 1

        columns, had_controls = _measure(text)
        self.stats['calculations'] += 1
        if had_controls:
            self.stats['control_chars_handled'] += 1

        if self._enabled:
            self._remember(text, columns)
        return columns

    def get_widths(self, texts: List[str]) -> List[int]:
        return [self.get_width(text) for text in texts]

    def _remember(self, text: str, columns: int):
        size = len(text.encode('utf-8', errors='ignore'))
        with self._lock:
            while self._memo and (len(self._memo) >= self._max_entries
                                  or self._memo_bytes + size > self._max_bytes):
                oldest, _ = self._memo.popitem(last=False)
                self._memo_bytes -= len(oldest.encode('utf-8', errors='ignore'))
                self.stats['cache_evictions'] += 1
            self._memo[text] = columns
            self._memo_bytes += size

    def clear_cache(self):
        with self._lock:
            self._memo.clear()
            self._memo_bytes = 0

    def get_stats(self) -> Dict[str, Union[int, float, bool]]:
        """Counters plus cache_hit_rate, cache_entries and cache_memory_bytes"""
        stats: Dict[str, Union[int, float, bool]] = dict(self.stats)
        lookups = self.stats['cache_hits'] + self.stats['cache_misses']
        stats['cache_hit_rate'] = self.stats['cache_hits'] / lookups if lookups else 0.0
        with self._lock:
            stats['cache_entries'] = len(self._memo)
            stats['cache_memory_bytes'] = self._memo_bytes
        stats['cache_enabled'] = self._enabled
        return stats


# ============================================================================
# SHARED CALCULATOR
# ============================================================================

_shared: Optional[WidthCalculator] = None
_shared_lock = threading.Lock()


def _calculator() -> WidthCalculator:
    global _shared
    if _shared is None:
        with _shared_lock:
            if _shared is None:
                _shared = WidthCalculator()
    return _shared


def get_width(text: str) -> int:
    """
    Example:
        >>> get_width("你好")
        4
    """
    return _calculator().get_width(text)


def get_widths(texts: List[str]) -> List[int]:
    return _calculator().get_widths(texts)


def split_padding(columns: int, target: int, align: str = "left") -> Tuple[int, int]:
    """
    Spaces to put left and right of content to fill target columns.

    Content wider than target gets no padding. Centering puts the odd
    space on the right.
    """
    gap = max(0, target - columns)
    if align == "right":
        return gap, 0
    if align == "center":
        return gap // 2, gap - gap // 2
    return 0, gap


def clear_default_cache():
    if _shared is not None:
        _shared.clear_cache()
