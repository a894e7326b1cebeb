# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""Rule for rescaling a 10-bit reading to another range."""

from mpyblocks.codegen.order import Order
from mpyblocks.codegen.output import Expression
from mpyblocks.codegen.rules.base import rule
from mpyblocks.config import FUNCTION_NAME_PLACEHOLDER


@rule('base_map')
def base_map(block, ctx):
    value = ctx.value_to_code(block, 'NUM', Order.NONE, '0')
    dmax = ctx.value_to_code(block, 'DMAX', Order.NONE, '0')
    i = ctx.config.INDENT
    helper = ctx.provide_function('map_range', [
        f'def {FUNCTION_NAME_PLACEHOLDER}(x, in_min, in_max, out_min, out_max):',
        f'{i}return int((x - in_min) * (out_max - out_min) / (in_max - in_min) + out_min)',
    ])
    return Expression(f'{helper}({value}, 0, 1024, 0, {dmax})', Order.FUNCTION_CALL)
