# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""String helpers shared by the translation rules."""

import math
import re
from typing import Union

_NUMBER_RE = re.compile(r'^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?\s*$')


def is_number(text) -> bool:
    """True if ``text`` is a plain numeric literal (no names, no operators)."""
    if isinstance(text, bool):
        return False
    if isinstance(text, (int, float)):
        return math.isfinite(text)
    if not _NUMBER_RE.match(str(text)):
        return False
    # Literals such as 1e400 overflow to inf
    return math.isfinite(float(text))


def to_number(text) -> Union[int, float]:
    value = float(text)
    return int(value) if value.is_integer() else value


def format_number(value: Union[int, float]) -> str:
    """Render a number the way a Python literal is written: 3, -2, 0.5."""
    if isinstance(value, float):
        if math.isnan(value):
            return "float('nan')"
        if math.isinf(value):
            return "float('inf')" if value > 0 else "-float('inf')"
        if value.is_integer():
            value = int(value)
    return repr(value)


_ESCAPES = {'\\': '\\\\', "'": "\\'", '\n': '\\n', '\r': '\\r', '\t': '\\t'}


def _escape_char(ch: str) -> str:
    if ch in _ESCAPES:
        return _ESCAPES[ch]
    if ch.isprintable():
        return ch
    code = ord(ch)
    if code <= 0xff:
        return f'\\x{code:02x}'
    if code <= 0xffff:
        return f'\\u{code:04x}'
    return f'\\U{code:08x}'


def quote(text: str) -> str:
    """Encode ``text`` as a single-quoted Python string literal, escaping control characters."""
    return "'" + ''.join(_escape_char(ch) for ch in str(text)) + "'"


def prefix_lines(text: str, prefix: str) -> str:
    """Prepend ``prefix`` to every line of ``text``."""
    if not text:
        return text
    lines = text.split('\n')
    trailing = text.endswith('\n')
    if trailing:
        lines = lines[:-1]
    out = '\n'.join(prefix + line for line in lines)
    return out + '\n' if trailing else out
