#!/usr/bin/env python3
"""
📝 MDP Markdown Previewer - Entity Decoder
==========================================
Copyright (c) 2025 PNGN-Tec LLC

HTML Character Reference Decoding
=================================
Replaces named (``&copy;``) and numeric (``&#169;``, ``&#xA9;``) character
references with the characters they stand for. Anything that is not a
well-formed, known reference is passed through untouched.

Rules
=====
- Named references need the trailing ';' and must be HTML5 entity names
- Decimal references allow up to 8 digits, hex references up to 7
- Numeric references must name a Unicode scalar value: not NUL, not a
  surrogate, not above U+10FFFF
- Decoding repeats until the text is stable, so decode(decode(x)) == decode(x)
- Never raises, never drops characters of unrecognized references

Module Interface
================
- decode(): Decode all references in a string
"""

import re
import logging
from html.entities import html5

# Configure logging
logger = logging.getLogger('mdp_entity')

_REFERENCE = re.compile(
    r'&(?:#([0-9]{1,8})|#[xX]([0-9a-fA-F]{1,7})|([A-Za-z][A-Za-z0-9]{0,31}));'
)

MAX_CODEPOINT = 0x10FFFF


def _valid_codepoint(code: int) -> bool:
    if code == 0 or code > MAX_CODEPOINT:
        return False
    return not 0xD800 <= code <= 0xDFFF


def _replace(match: 're.Match') -> str:
    decimal, hexadecimal, name = match.groups()

    if name is not None:
        return html5.get(name + ';', match.group(0))

    code = int(decimal, 10) if decimal is not None else int(hexadecimal, 16)
    if not _valid_codepoint(code):
        return match.group(0)
    return chr(code)


def decode(text: str) -> str:
    """
    Decode HTML character references in text.

    Args:
        text: Raw text possibly containing references

    Returns:
        Text with every valid reference replaced by its character
    """
    if '&' not in text:
        return text

    # Each productive pass shortens the text, so this terminates
    decoded = _REFERENCE.sub(_replace, text)
    while decoded != text and '&' in decoded:
        text = decoded
        decoded = _REFERENCE.sub(_replace, text)
    return decoded
