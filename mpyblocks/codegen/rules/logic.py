# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""Rules for conditionals and boolean logic."""

from mpyblocks.codegen.errors import UnknownFieldValueError
from mpyblocks.codegen.order import Order
from mpyblocks.codegen.output import Expression, Statement
from mpyblocks.codegen.rules.base import rule

COMPARISON_OPERATORS = {
    'EQ': '==',
    'NEQ': '!=',
    'LT': '<',
    'LTE': '<=',
    'GT': '>',
    'GTE': '>=',
}


@rule('controls_if', 'controls_ifelse')
def controls_if(block, ctx):
    """if / elif / else chain; the inputs IF0, DO0, IF1, DO1, ... and ELSE."""
    code = ''
    n = 0
    while True:
        condition = ctx.value_to_code(block, f'IF{n}', Order.NONE, 'False')
        branch = ctx.statement_to_code(block, f'DO{n}') or ctx.pass_block()
        code += ('if ' if n == 0 else 'elif ') + condition + ':\n' + branch
        n += 1
        if block.get_input(f'IF{n}') is None:
            break

    if block.get_input('ELSE') is not None or block.type == 'controls_ifelse':
        branch = ctx.statement_to_code(block, 'ELSE') or ctx.pass_block()
        code += 'else:\n' + branch
    return Statement(code)


@rule('logic_compare')
def logic_compare(block, ctx):
    op = block.get_field_value('OP', 'EQ')
    if op not in COMPARISON_OPERATORS:
        raise UnknownFieldValueError(block.type, 'OP', op)
    # Comparisons chain in Python, so operands must bind tighter
    left = ctx.value_to_code(block, 'A', Order.BITWISE_OR, '0')
    right = ctx.value_to_code(block, 'B', Order.BITWISE_OR, '0')
    return Expression(f'{left} {COMPARISON_OPERATORS[op]} {right}', Order.RELATIONAL)


@rule('logic_operation')
def logic_operation(block, ctx):
    op = block.get_field_value('OP', 'AND')
    if op not in ('AND', 'OR'):
        raise UnknownFieldValueError(block.type, 'OP', op)
    operator = op.lower()
    order = Order.LOGICAL_AND if operator == 'and' else Order.LOGICAL_OR
    left = ctx.value_to_code(block, 'A', order)
    right = ctx.value_to_code(block, 'B', order)
    if not left and not right:
        left = right = 'False'
    else:
        # Neutral element keeps the other operand's meaning
        neutral = 'True' if operator == 'and' else 'False'
        left = left or neutral
        right = right or neutral
    return Expression(f'{left} {operator} {right}', order)


@rule('logic_negate')
def logic_negate(block, ctx):
    value = ctx.value_to_code(block, 'BOOL', Order.LOGICAL_NOT, 'True')
    return Expression(f'not {value}', Order.LOGICAL_NOT)


@rule('logic_boolean')
def logic_boolean(block, ctx):
    value = block.get_field_value('BOOL', 'TRUE')
    if value not in ('TRUE', 'FALSE'):
        raise UnknownFieldValueError(block.type, 'BOOL', value)
    return Expression('True' if value == 'TRUE' else 'False', Order.ATOMIC)


@rule('logic_null')
def logic_null(block, ctx):
    return Expression('None', Order.ATOMIC)


@rule('logic_ternary')
def logic_ternary(block, ctx):
    condition = ctx.value_to_code(block, 'IF', Order.LOGICAL_OR, 'False')
    then = ctx.value_to_code(block, 'THEN', Order.LOGICAL_OR, 'None')
    otherwise = ctx.value_to_code(block, 'ELSE', Order.CONDITIONAL, 'None')
    return Expression(f'{then} if {condition} else {otherwise}', Order.CONDITIONAL)
