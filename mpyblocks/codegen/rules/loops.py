# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""
Rules for loop blocks.

The counting loop picks one of three shapes. Integer literal bounds become a
plain ``range``. Other literal bounds use a generator helper whose direction
is known up front. Bounds only known at run time are cached as floats and
the direction is chosen by a conditional expression over the two helpers.
"""

import re

from mpyblocks.codegen.errors import UnknownFieldValueError
from mpyblocks.codegen.order import Order
from mpyblocks.codegen.output import Statement
from mpyblocks.codegen.rules.base import rule
from mpyblocks.codegen.text_utils import format_number, is_number, to_number
from mpyblocks.config import FUNCTION_NAME_PLACEHOLDER

_SIMPLE_NAME = re.compile(r'^\w+$')


def _loop_body(block, ctx, name='DO'):
    branch = ctx.statement_to_code(block, name)
    return ctx.add_loop_trap(branch, block) or ctx.pass_block()


@rule('controls_repeat_ext', 'controls_repeat')
def controls_repeat(block, ctx):
    if block.has_field('TIMES'):
        repeats = str(block.get_field_value('TIMES'))
    else:
        repeats = ctx.value_to_code(block, 'TIMES', Order.NONE, '0')
    if is_number(repeats):
        repeats = str(int(float(repeats)))
    else:
        repeats = f'int({repeats})'
    counter = ctx.distinct_name('count')
    branch = _loop_body(block, ctx)
    return Statement(f'for {counter} in range({repeats}):\n{branch}')


@rule('controls_whileUntil')
def controls_while_until(block, ctx):
    mode = block.get_field_value('MODE', 'WHILE')
    if mode not in ('WHILE', 'UNTIL'):
        raise UnknownFieldValueError(block.type, 'MODE', mode)
    until = mode == 'UNTIL'
    condition = ctx.value_to_code(
        block, 'BOOL', Order.LOGICAL_NOT if until else Order.NONE, 'False')
    if until:
        condition = f'not {condition}'
    branch = _loop_body(block, ctx)
    return Statement(f'while {condition}:\n{branch}')


def _up_range(ctx):
    indent = ctx.config.INDENT
    return ctx.provide_function('upRange', [
        f'def {FUNCTION_NAME_PLACEHOLDER}(start, stop, step):',
        f'{indent}while start <= stop:',
        f'{indent * 2}yield start',
        f'{indent * 2}start += abs(step)',
    ])


def _down_range(ctx):
    indent = ctx.config.INDENT
    return ctx.provide_function('downRange', [
        f'def {FUNCTION_NAME_PLACEHOLDER}(start, stop, step):',
        f'{indent}while start >= stop:',
        f'{indent * 2}yield start',
        f'{indent * 2}start -= abs(step)',
    ])


def _static_range(ctx, start, end, step):
    """Range expression for literal bounds."""
    start, end, step = to_number(start), to_number(end), abs(to_number(step))
    if all(isinstance(v, int) for v in (start, end, step)):
        if start <= end:
            end += 1
            if start == 0 and step == 1:
                args = f'{end}'
            else:
                args = f'{start}, {end}'
            if step != 1:
                args += f', {step}'
        else:
            end -= 1
            args = f'{start}, {end}, -{step}'
        return f'range({args})'

    helper = _up_range(ctx) if start < end else _down_range(ctx)
    return f'{helper}({format_number(start)}, {format_number(end)}, {format_number(step)})'


@rule('controls_for')
def controls_for(block, ctx):
    variable = ctx.variable_name(block.get_field_value('VAR', 'i'))
    start = ctx.value_to_code(block, 'FROM', Order.NONE, '0')
    end = ctx.value_to_code(block, 'TO', Order.NONE, '0')
    step = ctx.value_to_code(block, 'BY', Order.NONE, '1')
    branch = _loop_body(block, ctx)

    if is_number(start) and is_number(end) and is_number(step):
        return Statement(f'for {variable} in {_static_range(ctx, start, end, step)}:\n{branch}')

    # Cache non-trivial bounds so they are evaluated once
    code = ''

    def cache(arg, suffix):
        nonlocal code
        if is_number(arg):
            return to_number(arg)
        if _SIMPLE_NAME.match(arg):
            return f'float({arg})'
        temp = ctx.distinct_name(variable + suffix)
        code += f'{temp} = float({arg})\n'
        return temp

    start_value = cache(start, '_start')
    end_value = cache(end, '_end')
    step_value = cache(step, '_inc')

    if isinstance(start_value, (int, float)) and isinstance(end_value, (int, float)):
        helper = _up_range(ctx) if start_value < end_value else _down_range(ctx)
        args = f'{format_number(start_value)}, {format_number(end_value)}, {_arg(step_value)}'
        sequence = f'{helper}({args})'
    else:
        args = f'{_arg(start_value)}, {_arg(end_value)}, {_arg(step_value)}'
        up, down = _up_range(ctx), _down_range(ctx)
        sequence = (f'({up} if {_arg(start_value)} <= {_arg(end_value)} '
                    f'else {down})({args})')

    code += f'for {variable} in {sequence}:\n{branch}'
    return Statement(code)


def _arg(value):
    return format_number(value) if isinstance(value, (int, float)) else value


@rule('controls_forEach')
def controls_for_each(block, ctx):
    variable = ctx.variable_name(block.get_field_value('VAR', 'item'))
    sequence = ctx.value_to_code(block, 'LIST', Order.RELATIONAL, '[]')
    branch = _loop_body(block, ctx)
    return Statement(f'for {variable} in {sequence}:\n{branch}')


@rule('controls_flow_statements')
def controls_flow_statements(block, ctx):
    flow = block.get_field_value('FLOW', 'BREAK')
    if flow == 'BREAK':
        return Statement('break\n')
    if flow == 'CONTINUE':
        return Statement('continue\n')
    raise UnknownFieldValueError(block.type, 'FLOW', flow)
