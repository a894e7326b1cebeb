# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""Rules for variable access."""

from mpyblocks.codegen.errors import UnknownFieldValueError
from mpyblocks.codegen.order import Order
from mpyblocks.codegen.output import Expression, Statement
from mpyblocks.codegen.rules.base import rule

# Static type name -> Python conversion function
CASTS = {
    'SHORT_NUMBER': 'int',
    'NUMBER': 'int',
    'LARGE_NUMBER': 'int',
    'DECIMAL': 'float',
    'TEXT': 'str',
    'CHARACTER': 'str',
    'BOOLEAN': 'bool',
}


@rule('variables_get')
def variables_get(block, ctx):
    return Expression(ctx.variable_name(block.get_field_value('VAR', 'x')), Order.ATOMIC)


@rule('variables_set')
def variables_set(block, ctx):
    value = ctx.value_to_code(block, 'VALUE', Order.NONE, '0')
    variable = ctx.variable_name(block.get_field_value('VAR', 'x'))
    return Statement(f'{variable} = {value}\n')


@rule('variables_set_type')
def variables_set_type(block, ctx):
    type_name = block.get_field_value('VARIABLE_SETTYPE_TYPE', 'NUMBER')
    if type_name not in CASTS:
        raise UnknownFieldValueError(block.type, 'VARIABLE_SETTYPE_TYPE', type_name)
    value = ctx.value_to_code(block, 'VARIABLE_SETTYPE_INPUT', Order.NONE, '0')
    return Expression(f'{CASTS[type_name]}({value})', Order.FUNCTION_CALL)
