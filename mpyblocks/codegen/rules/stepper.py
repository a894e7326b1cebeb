# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""
Rules for unipolar/bipolar stepper motors driven pin by pin.

A configured motor is a module-level dict holding its pin objects, the delay
between steps and the current index into the step sequence.
"""

from mpyblocks.codegen.errors import UnknownFieldValueError
from mpyblocks.codegen.order import Order
from mpyblocks.codegen.output import Statement
from mpyblocks.codegen.registry import PinType
from mpyblocks.codegen.rules.base import rule
from mpyblocks.codegen.text_utils import is_number, to_number
from mpyblocks.config import FUNCTION_NAME_PLACEHOLDER

TWO_WIRE_SEQUENCE = ((0, 1), (1, 1), (1, 0), (0, 0))
FOUR_WIRE_SEQUENCE = ((1, 0, 1, 0), (0, 1, 1, 0), (0, 1, 0, 1), (1, 0, 0, 1))

PIN_COUNTS = {'TWO': 2, 'FOUR': 4}


def _step_delay(steps: str, speed: str) -> str:
    """Microseconds between steps for ``speed`` rpm on a motor of ``steps`` per turn."""
    if is_number(steps) and is_number(speed) and to_number(steps) and to_number(speed):
        return str(int(60000000 / (to_number(steps) * to_number(speed))))
    return f'int(60000000 / ({steps} * {speed}))'


def stepper_object(ctx, name) -> str:
    return ctx.generated_name(f'stepper_{name}')


@rule('stepper_config')
def stepper_config(block, ctx):
    name = block.get_field_value('STEPPER_NAME', 'MyStepper')
    wires = block.get_field_value('STEPPER_NUMBER_OF_PINS', 'TWO')
    if wires not in PIN_COUNTS:
        raise UnknownFieldValueError(block.type, 'STEPPER_NUMBER_OF_PINS', wires)
    steps = ctx.value_to_code(block, 'STEPPER_STEPS', Order.MULTIPLICATIVE, '360')
    speed = ctx.value_to_code(block, 'STEPPER_SPEED', Order.MULTIPLICATIVE - 1, '90')

    pins = [block.get_field_value(f'STEPPER_PIN{n}', str(n))
            for n in range(1, PIN_COUNTS[wires] + 1)]
    for pin in pins:
        ctx.reserve_pin(block, pin, PinType.STEPPER, 'Stepper')

    ctx.add_from_import('machine', 'Pin')
    obj = stepper_object(ctx, name)
    pin_objects = ', '.join(f'Pin({pin}, Pin.OUT)' for pin in pins)
    ctx.add_declaration(
        f'stepper_{name}',
        f"{obj} = {{'pins': ({pin_objects},), 'delay_us': {_step_delay(steps, speed)}, "
        f"'position': 0}}",
        overwrite=True)
    return Statement('')


@rule('stepper_step')
def stepper_step(block, ctx):
    name = block.get_field_value('STEPPER_NAME', 'MyStepper')
    steps = ctx.value_to_code(block, 'STEPPER_STEPS', Order.NONE, '0')
    ctx.add_module_import('time')

    i = ctx.config.INDENT
    helper = ctx.provide_function('stepper_step', [
        f'def {FUNCTION_NAME_PLACEHOLDER}(stepper, steps):',
        f'{i}pins = stepper[\'pins\']',
        f'{i}if len(pins) == 2:',
        f'{i * 2}sequence = {TWO_WIRE_SEQUENCE!r}',
        f'{i}else:',
        f'{i * 2}sequence = {FOUR_WIRE_SEQUENCE!r}',
        f'{i}direction = 1 if steps > 0 else -1',
        f'{i}for _ in range(abs(int(steps))):',
        f'{i * 2}stepper[\'position\'] = (stepper[\'position\'] + direction) % len(sequence)',
        f'{i * 2}for pin, level in zip(pins, sequence[stepper[\'position\']]):',
        f'{i * 3}pin.value(level)',
        f'{i * 2}time.sleep_us(stepper[\'delay_us\'])',
    ])
    return Statement(f'{helper}({stepper_object(ctx, name)}, {steps})\n')
