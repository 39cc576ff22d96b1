#!/usr/bin/env python3
"""
📝 MDP Markdown Previewer - Code Block Highlighter
==================================================
Copyright (c) 2025 PNGN-Tec LLC

Syntax Highlighting System
==========================
Turns the body of a fenced code block into styled runs using pygments
lexers. Token types map onto the theme's code roles:

- Keyword                 -> CODE_KEYWORD
- Literal.String          -> CODE_STRING
- Comment                 -> CODE_COMMENT
- Literal.Number          -> CODE_NUMBER
- Name.Function / Class   -> CODE_FUNCTION
- Operator                -> CODE_OPERATOR
- everything else         -> CODE_BLOCK

Guarantees
==========
- Characters are never altered: joining the run texts (with '\\n' for
  each line_break) reproduces the input exactly
- Unknown or missing language tags produce plain CODE_BLOCK runs
- Lexer failures degrade to plain runs; nothing propagates

Module Interface
================
- CodeHighlighter: Lexer cache plus language alias registry
- highlight(): Module-level convenience using a shared highlighter
- register_language(): Add a tag alias to the shared highlighter
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional, Tuple

from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.token import Comment, Keyword, Name, Number, Operator, String, _TokenType
from pygments.util import ClassNotFound

from mdp_output import StyledRun
from mdp_theme import Role, Theme

# Configure logging
logger = logging.getLogger('mdp_highlight')

# Checked in order; the first containing token type wins
TOKEN_ROLES: Tuple[Tuple[_TokenType, Role], ...] = (
    (Comment, Role.CODE_COMMENT),
    (String, Role.CODE_STRING),
    (Number, Role.CODE_NUMBER),
    (Keyword, Role.CODE_KEYWORD),
    (Name.Function, Role.CODE_FUNCTION),
    (Name.Class, Role.CODE_FUNCTION),
    (Operator, Role.CODE_OPERATOR),
)

# Fence tags that pygments does not know under this spelling
DEFAULT_ALIASES = {
    "c++": "cpp",
    "golang": "go",
    "js": "javascript",
    "py3": "python",
    "sh": "bash",
    "shell": "bash",
    "yml": "yaml",
    "plaintext": "text",
}


def normalize_language(info: Optional[str]) -> Optional[str]:
    """First word of a fence info string, lowercased ('{.python}' -> 'python')"""
    if not info:
        return None
    words = info.strip().split()
    if not words:
        return None
    tag = words[0].strip('{}').lstrip('.').lower()
    return tag or None


def role_for_token(ttype: _TokenType) -> Role:
    for parent, role in TOKEN_ROLES:
        if ttype in parent:
            return role
    return Role.CODE_BLOCK


class CodeHighlighter:
    """
    Pygments-backed highlighter with a lexer cache.

    Lexers are cached per language tag (including misses) so repeated code
    blocks in the same language do not re-resolve lexers.
    """

    def __init__(self, aliases: Optional[Dict[str, str]] = None):
        self._aliases = dict(DEFAULT_ALIASES)
        if aliases:
            self._aliases.update(aliases)
        self._lexers: Dict[str, Optional[Lexer]] = {}
        self._lock = threading.Lock()
        self.stats = {
            'highlighted': 0,
            'plain': 0,
            'fallbacks': 0,
        }

    def register_language(self, tag: str, lexer_name: str):
        """Map a fence tag onto a pygments lexer name"""
        with self._lock:
            self._aliases[tag.lower()] = lexer_name
            self._lexers.pop(tag.lower(), None)

    def get_lexer(self, language: Optional[str]) -> Optional[Lexer]:
        tag = normalize_language(language)
        if tag is None:
            return None

        with self._lock:
            if tag in self._lexers:
                return self._lexers[tag]

            name = self._aliases.get(tag, tag)
            try:
                lexer = get_lexer_by_name(name, stripnl=False, ensurenl=False)
            except ClassNotFound:
                logger.debug(f"No lexer for language tag {tag!r}")
                lexer = None
            self._lexers[tag] = lexer
            return lexer

    def is_supported(self, language: Optional[str]) -> bool:
        return self.get_lexer(language) is not None

    def highlight(self, language: Optional[str], code: str, theme: Theme) -> List[StyledRun]:
        """
        Style a code block body.

        Args:
            language: Fence language tag (None for indented code)
            code: Raw code text
            theme: Theme supplying the code roles

        Returns:
            Runs covering code exactly; line_break marks each '\\n'
        """
        if not code:
            return []

        lexer = self.get_lexer(language)
        if lexer is None:
            self.stats['plain'] += 1
            return _split_lines([(code, Role.CODE_BLOCK)], theme)

        try:
            tokens = [(value, role_for_token(ttype)) for ttype, value in lexer.get_tokens(code)]
        except Exception as e:
            logger.debug(f"Lexer {lexer.name} failed: {e}")
            tokens = None

        if tokens is None or ''.join(value for value, _ in tokens) != code:
            self.stats['fallbacks'] += 1
            return _split_lines([(code, Role.CODE_BLOCK)], theme)

        self.stats['highlighted'] += 1
        return _split_lines(tokens, theme)


def _split_lines(pieces: Iterable[Tuple[str, Role]], theme: Theme) -> List[StyledRun]:
    """Break token values at newlines and merge same-role neighbours"""
    runs: List[StyledRun] = []
    pending_text = ''
    pending_role: Optional[Role] = None

    def flush(line_break: bool):
        nonlocal pending_text, pending_role
        if pending_text or line_break:
            style = theme.style_for(pending_role or Role.CODE_BLOCK)
            runs.append(StyledRun(pending_text, style, line_break))
        pending_text = ''
        pending_role = None

    for value, role in pieces:
        parts = value.split('\n')
        for index, part in enumerate(parts):
            if index:
                flush(line_break=True)
            if not part:
                continue
            if pending_role is not None and pending_role != role:
                flush(line_break=False)
            pending_text += part
            pending_role = role

    flush(line_break=False)
    return runs


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

_default_highlighter = CodeHighlighter()


def highlight(language: Optional[str], code: str, theme: Theme) -> List[StyledRun]:
    """Highlight with the shared highlighter"""
    return _default_highlighter.highlight(language, code, theme)


def register_language(tag: str, lexer_name: str):
    """Add a fence tag alias to the shared highlighter"""
    _default_highlighter.register_language(tag, lexer_name)


def get_default_highlighter() -> CodeHighlighter:
    return _default_highlighter
