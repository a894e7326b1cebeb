# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""
Rules for user procedures and the setup/loop entry block.

Procedure definitions are not emitted where they sit on the canvas; they go
to the function registry and the rule returns NO_CODE.
"""

from typing import List

from mpyblocks.config import USER_SETUP_TAG
from mpyblocks.codegen.order import Order
from mpyblocks.codegen.output import NO_CODE, Expression, Statement
from mpyblocks.codegen.rules.base import rule

# Blocks that assign the variable named in their VAR field
ASSIGNING_BLOCKS = ('variables_set', 'math_change', 'controls_for', 'controls_forEach')


def _assigned_globals(block, ctx) -> List[str]:
    """Output names of module variables assigned inside a procedure body."""
    body = block.get_input_target_block('STACK')
    if body is None:
        return []
    arguments = set(block.arguments)
    names = []
    for child in body.get_descendants():
        if child.type not in ASSIGNING_BLOCKS or child.disabled:
            continue
        var = child.get_field_value('VAR')
        if not var or var in arguments:
            continue
        out = ctx.variable_name(var)
        if out not in names:
            names.append(out)
    return names


@rule('procedures_defreturn', 'procedures_defnoreturn')
def procedures_def(block, ctx):
    indent = ctx.config.INDENT
    name = ctx.procedure_name(block.get_field_value('NAME', 'procedure'))
    branch = ctx.statement_to_code(block, 'STACK')
    if ctx.config.STATEMENT_PREFIX:
        branch = ctx.indent(ctx.inject_block_id(ctx.config.STATEMENT_PREFIX, block)) + branch
    if ctx.config.INFINITE_LOOP_TRAP:
        branch = ctx.indent(ctx.inject_block_id(ctx.config.INFINITE_LOOP_TRAP, block)) + branch

    return_value = ctx.value_to_code(block, 'RETURN', Order.NONE, '')
    if return_value:
        return_value = f'{indent}return {return_value}\n'
    elif not branch:
        branch = ctx.pass_block()

    assigned = _assigned_globals(block, ctx)
    if assigned:
        branch = f"{indent}global {', '.join(assigned)}\n" + branch

    args = ', '.join(ctx.variable_name(arg) for arg in block.arguments)
    code = f'def {name}({args}):\n{branch}{return_value}'
    ctx.add_user_function(name, ctx.scrub(block, code))
    return NO_CODE


def _call_arguments(block, ctx) -> str:
    return ', '.join(
        ctx.value_to_code(block, f'ARG{n}', Order.NONE, 'None')
        for n in range(len(block.arguments)))


@rule('procedures_callreturn')
def procedures_callreturn(block, ctx):
    name = ctx.procedure_name(block.get_field_value('NAME', 'procedure'))
    return Expression(f'{name}({_call_arguments(block, ctx)})', Order.FUNCTION_CALL)


@rule('procedures_callnoreturn')
def procedures_callnoreturn(block, ctx):
    name = ctx.procedure_name(block.get_field_value('NAME', 'procedure'))
    return Statement(f'{name}({_call_arguments(block, ctx)})\n')


@rule('procedures_ifreturn')
def procedures_ifreturn(block, ctx):
    condition = ctx.value_to_code(block, 'CONDITION', Order.NONE, 'False')
    code = f'if {condition}:\n'
    if block.has_return_value:
        value = ctx.value_to_code(block, 'VALUE', Order.NONE, 'None')
        code += f'{ctx.config.INDENT}return {value}\n'
    else:
        code += f'{ctx.config.INDENT}return\n'
    return Statement(code)


@rule('arduino_functions')
def arduino_functions(block, ctx):
    """Setup branch runs once from the setup section; loop branch forever."""
    setup_branch = ctx.statement_to_code(block, 'SETUP_FUNC', indent=False)
    if setup_branch:
        ctx.add_setup(USER_SETUP_TAG, setup_branch)

    loop_branch = ctx.statement_to_code(block, 'LOOP_FUNC')
    return Statement('while True:\n' + (loop_branch or ctx.pass_block()))
