# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""Rule table and registration decorator."""

from typing import Callable, Dict

from mpyblocks.codegen.order import Order
from mpyblocks.codegen.output import Expression, Statement

# block type -> rule(block, ctx)
RULES: Dict[str, Callable] = {}


def rule(*block_types: str):
    """Decorator to register a translation rule for one or more block types."""
    def decorator(func):
        for block_type in block_types:
            RULES[block_type] = func
        return func
    return decorator


def no_generator_code_inline(block, ctx) -> Expression:
    """Used for value blocks without a translation."""
    return Expression('', Order.ATOMIC)


def no_generator_code_line(block, ctx) -> Statement:
    """Used for statement blocks without a translation."""
    return Statement('')
