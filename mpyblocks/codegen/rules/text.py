# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""Rules for text blocks."""

from mpyblocks.codegen.order import Order
from mpyblocks.codegen.output import Expression
from mpyblocks.codegen.rules.base import rule
from mpyblocks.codegen.text_utils import quote


@rule('text')
def text(block, ctx):
    return Expression(quote(block.get_field_value('TEXT', '')), Order.ATOMIC)


@rule('text_join')
def text_join(block, ctx):
    """Concatenate the ADD0..ADDn inputs, converting each to str."""
    count = int(block.mutation.get('items', 0)) or len(
        [inp for inp in block.inputs if inp.name.startswith('ADD')])
    if count == 0:
        return Expression("''", Order.ATOMIC)
    parts = [ctx.value_to_code(block, f'ADD{n}', Order.NONE, "''") for n in range(count)]
    if count == 1:
        return Expression(f'str({parts[0]})', Order.FUNCTION_CALL)
    return Expression(' + '.join(f'str({part})' for part in parts), Order.ADDITIVE)


@rule('text_length')
def text_length(block, ctx):
    value = ctx.value_to_code(block, 'VALUE', Order.NONE, "''")
    return Expression(f'len({value})', Order.FUNCTION_CALL)


@rule('text_isEmpty')
def text_is_empty(block, ctx):
    value = ctx.value_to_code(block, 'VALUE', Order.NONE, "''")
    return Expression(f'not len({value})', Order.LOGICAL_NOT)
