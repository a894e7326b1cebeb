# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""
Result types returned by translation rules.

A rule returns a Statement for blocks that stand on their own line, an
Expression (text plus precedence rank) for value blocks, or NO_CODE when the
block handled its output itself, e.g. a procedure definition stored in the
function registry.
"""

from dataclasses import dataclass
from typing import Union

from mpyblocks.codegen.order import Order


@dataclass(frozen=True)
class Statement:
    """One or more complete lines, newline terminated."""
    code: str

    def __bool__(self) -> bool:
        return bool(self.code)


@dataclass(frozen=True)
class Expression:
    """Expression text and the rank of its outermost operator."""
    code: str
    order: int = Order.ATOMIC

    def __bool__(self) -> bool:
        return bool(self.code)


class _NoCode:
    """Marker for rules that emit nothing at the block's position."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return 'NO_CODE'


NO_CODE = _NoCode()

RuleOutput = Union[Statement, Expression, _NoCode]
