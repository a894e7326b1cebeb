# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""Rules for delays and timers, all backed by the ``time`` module."""

from mpyblocks.codegen.order import Order
from mpyblocks.codegen.output import Expression, Statement
from mpyblocks.codegen.rules.base import rule


@rule('time_delay')
def time_delay(block, ctx):
    delay = ctx.value_to_code(block, 'DELAY_TIME_MILI', Order.NONE, '0')
    ctx.add_module_import('time')
    return Statement(f'time.sleep_ms({delay})\n')


@rule('time_delaymicros')
def time_delaymicros(block, ctx):
    delay = ctx.value_to_code(block, 'DELAY_TIME_MICRO', Order.NONE, '0')
    ctx.add_module_import('time')
    return Statement(f'time.sleep_us({delay})\n')


@rule('time_millis')
def time_millis(block, ctx):
    ctx.add_module_import('time')
    return Expression('time.ticks_ms()', Order.FUNCTION_CALL)


@rule('time_micros')
def time_micros(block, ctx):
    ctx.add_module_import('time')
    return Expression('time.ticks_us()', Order.FUNCTION_CALL)


@rule('infinite_loop')
def infinite_loop(block, ctx):
    """Halt here forever."""
    return Statement('while True:\n' + ctx.pass_block())
