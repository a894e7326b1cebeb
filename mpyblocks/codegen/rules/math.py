# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""Rules for numbers and arithmetic."""

from mpyblocks.codegen.errors import UnknownFieldValueError
from mpyblocks.codegen.order import Order
from mpyblocks.codegen.output import Expression, Statement
from mpyblocks.codegen.rules.base import no_generator_code_inline, rule
from mpyblocks.codegen.text_utils import format_number
from mpyblocks.config import FUNCTION_NAME_PLACEHOLDER

# op -> (operator, precedence)
ARITHMETIC_OPERATORS = {
    'ADD': (' + ', Order.ADDITIVE),
    'MINUS': (' - ', Order.ADDITIVE),
    'MULTIPLY': (' * ', Order.MULTIPLICATIVE),
    'DIVIDE': (' / ', Order.MULTIPLICATIVE),
    'POWER': (' ** ', Order.EXPONENTIATION),
}

# op -> math module function, for operators that are a single call
SINGLE_FUNCTIONS = {
    'ROOT': 'math.sqrt',
    'LN': 'math.log',
    'LOG10': 'math.log10',
    'EXP': 'math.exp',
    'ROUNDUP': 'math.ceil',
    'ROUNDDOWN': 'math.floor',
}

DEFAULT_SINGLE_OPS = {
    'math_single': 'ROOT',
    'math_round': 'ROUND',
    'math_trig': 'SIN',
}

TRIG_FUNCTIONS = ('SIN', 'COS', 'TAN')
INVERSE_TRIG_FUNCTIONS = ('ASIN', 'ACOS', 'ATAN')

CONSTANTS = {
    'PI': ('math.pi', Order.MEMBER),
    'E': ('math.e', Order.MEMBER),
    'GOLDEN_RATIO': ('(1 + math.sqrt(5)) / 2', Order.MULTIPLICATIVE),
    'SQRT2': ('math.sqrt(2)', Order.MEMBER),
    'SQRT1_2': ('math.sqrt(1.0 / 2)', Order.MEMBER),
    'INFINITY': ("float('inf')", Order.ATOMIC),
}


@rule('math_number')
def math_number(block, ctx):
    code = format_number(float(block.get_field_value('NUM', 0)))
    return Expression(code, Order.UNARY_SIGN if code.startswith('-') else Order.ATOMIC)


@rule('math_arithmetic')
def math_arithmetic(block, ctx):
    op = block.get_field_value('OP', 'ADD')
    if op not in ARITHMETIC_OPERATORS:
        raise UnknownFieldValueError(block.type, 'OP', op)
    operator, order = ARITHMETIC_OPERATORS[op]
    if op == 'POWER':
        # ** is right-associative and binds tighter than a unary minus on its left
        left = ctx.value_to_code(block, 'A', Order.FUNCTION_CALL, '0')
        right = ctx.value_to_code(block, 'B', Order.UNARY_SIGN, '0')
    else:
        left = ctx.value_to_code(block, 'A', order, '0')
        right = ctx.value_to_code(block, 'B', order - 1, '0')
    return Expression(left + operator + right, order)


@rule('math_single', 'math_round', 'math_trig')
def math_single(block, ctx):
    op = block.get_field_value('OP', DEFAULT_SINGLE_OPS.get(block.type))

    if op == 'NEG':
        arg = ctx.value_to_code(block, 'NUM', Order.UNARY_SIGN, '0')
        return Expression('-' + arg, Order.UNARY_SIGN)
    if op == 'POW10':
        arg = ctx.value_to_code(block, 'NUM', Order.UNARY_SIGN, '0')
        return Expression(f'10 ** {arg}', Order.EXPONENTIATION)
    if op in ('ABS', 'ROUND'):
        arg = ctx.value_to_code(block, 'NUM', Order.NONE, '0')
        return Expression(f'{op.lower()}({arg})', Order.FUNCTION_CALL)

    if op in SINGLE_FUNCTIONS:
        arg = ctx.value_to_code(block, 'NUM', Order.NONE, '0')
        code, order = f'{SINGLE_FUNCTIONS[op]}({arg})', Order.FUNCTION_CALL
    elif op in TRIG_FUNCTIONS:
        arg = ctx.value_to_code(block, 'NUM', Order.MULTIPLICATIVE, '0')
        code, order = f'math.{op.lower()}({arg} / 180.0 * math.pi)', Order.FUNCTION_CALL
    elif op in INVERSE_TRIG_FUNCTIONS:
        arg = ctx.value_to_code(block, 'NUM', Order.NONE, '0')
        code, order = f'math.{op.lower()}({arg}) / math.pi * 180', Order.MULTIPLICATIVE
    else:
        raise UnknownFieldValueError(block.type, 'OP', op)
    ctx.add_module_import('math')
    return Expression(code, order)


@rule('math_constant')
def math_constant(block, ctx):
    constant = block.get_field_value('CONSTANT', 'PI')
    if constant not in CONSTANTS:
        raise UnknownFieldValueError(block.type, 'CONSTANT', constant)
    code, order = CONSTANTS[constant]
    if 'math.' in code:
        ctx.add_module_import('math')
    return Expression(code, order)


def _is_prime_helper(ctx):
    ctx.add_module_import('math')
    i = ctx.config.INDENT
    return ctx.provide_function('math_isPrime', [
        f'def {FUNCTION_NAME_PLACEHOLDER}(n):',
        f'{i}# https://en.wikipedia.org/wiki/Primality_test#Naive_methods',
        f'{i}# If n is not a number but a string, try parsing it.',
        f'{i}if not isinstance(n, (int, float)):',
        f'{i * 2}try:',
        f'{i * 3}n = float(n)',
        f'{i * 2}except (TypeError, ValueError):',
        f'{i * 3}return False',
        f'{i}if n == 2 or n == 3:',
        f'{i * 2}return True',
        f'{i}# False if n is negative, is 1, or not whole,',
        f'{i}# or if n is divisible by 2 or 3.',
        f'{i}if n <= 1 or n % 1 != 0 or n % 2 == 0 or n % 3 == 0:',
        f'{i * 2}return False',
        f'{i}# Check all the numbers of form 6k +/- 1, up to sqrt(n).',
        f'{i}for x in range(6, int(math.sqrt(n)) + 2, 6):',
        f'{i * 2}if n % (x - 1) == 0 or n % (x + 1) == 0:',
        f'{i * 3}return False',
        f'{i}return True',
    ])


@rule('math_number_property')
def math_number_property(block, ctx):
    prop = block.get_field_value('PROPERTY', 'EVEN')
    if prop == 'PRIME':
        number = ctx.value_to_code(block, 'NUMBER_TO_CHECK', Order.NONE, '0')
        return Expression(f'{_is_prime_helper(ctx)}({number})', Order.FUNCTION_CALL)
    if prop in ('POSITIVE', 'NEGATIVE'):
        number = ctx.value_to_code(block, 'NUMBER_TO_CHECK', Order.BITWISE_OR, '0')
        return Expression(f"{number} {'>' if prop == 'POSITIVE' else '<'} 0", Order.RELATIONAL)

    number = ctx.value_to_code(block, 'NUMBER_TO_CHECK', Order.MULTIPLICATIVE, '0')
    if prop == 'EVEN':
        code = f'{number} % 2 == 0'
    elif prop == 'ODD':
        code = f'{number} % 2 == 1'
    elif prop == 'WHOLE':
        code = f'{number} % 1 == 0'
    elif prop == 'DIVISIBLE_BY':
        divisor = ctx.value_to_code(block, 'DIVISOR', Order.MULTIPLICATIVE - 1, '0')
        code = f'{number} % {divisor} == 0'
    else:
        raise UnknownFieldValueError(block.type, 'PROPERTY', prop)
    return Expression(code, Order.RELATIONAL)


@rule('math_change')
def math_change(block, ctx):
    delta = ctx.value_to_code(block, 'DELTA', Order.NONE, '0')
    variable = ctx.variable_name(block.get_field_value('VAR', 'x'))
    return Statement(f'{variable} += {delta}\n')


@rule('math_modulo')
def math_modulo(block, ctx):
    dividend = ctx.value_to_code(block, 'DIVIDEND', Order.MULTIPLICATIVE, '0')
    divisor = ctx.value_to_code(block, 'DIVISOR', Order.MULTIPLICATIVE - 1, '0')
    return Expression(f'{dividend} % {divisor}', Order.MULTIPLICATIVE)


@rule('math_constrain')
def math_constrain(block, ctx):
    value = ctx.value_to_code(block, 'VALUE', Order.NONE, '0')
    low = ctx.value_to_code(block, 'LOW', Order.NONE, '0')
    high = ctx.value_to_code(block, 'HIGH', Order.NONE, 'float(\'inf\')')
    return Expression(f'min(max({value}, {low}), {high})', Order.FUNCTION_CALL)


@rule('math_random_int')
def math_random_int(block, ctx):
    ctx.add_module_import('random')
    low = ctx.value_to_code(block, 'FROM', Order.NONE, '0')
    high = ctx.value_to_code(block, 'TO', Order.NONE, '0')
    i = ctx.config.INDENT
    helper = ctx.provide_function('math_random_int', [
        f'def {FUNCTION_NAME_PLACEHOLDER}(a, b):',
        f'{i}if a > b:',
        f'{i * 2}# Swap a and b to ensure a is smaller.',
        f'{i * 2}a, b = b, a',
        f'{i}return random.randint(int(a), int(b))',
    ])
    return Expression(f'{helper}({low}, {high})', Order.FUNCTION_CALL)


@rule('math_random_float')
def math_random_float(block, ctx):
    ctx.add_module_import('random')
    return Expression('random.random()', Order.FUNCTION_CALL)


# Needs list support in the editor
rule('math_on_list')(no_generator_code_inline)
