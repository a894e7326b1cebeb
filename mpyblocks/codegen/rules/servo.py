# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""
Rules for hobby servos driven by a 50 Hz PWM signal.

A duty of 26 is 0 degrees and 123 is 180 degrees on the 10-bit duty scale.
"""

from mpyblocks.codegen.order import Order
from mpyblocks.codegen.output import Expression, Statement
from mpyblocks.codegen.registry import PinType
from mpyblocks.codegen.rules.base import rule
from mpyblocks.codegen.text_utils import is_number, to_number
from mpyblocks.config import FUNCTION_NAME_PLACEHOLDER

DUTY_MIN = 26
DUTY_SPAN = 97
MAX_ANGLE = 180


def angle_to_duty(angle) -> int:
    angle = min(max(to_number(angle), 0), MAX_ANGLE)
    return int(angle * DUTY_SPAN / MAX_ANGLE + DUTY_MIN)


def servo_object(ctx, pin) -> str:
    ctx.add_from_import('machine', 'Pin')
    ctx.add_from_import('machine', 'PWM')
    obj = ctx.generated_name(f'servo{pin}')
    ctx.add_declaration(f'servo_{pin}', f'{obj} = PWM(Pin({pin}, mode=Pin.OUT))\n{obj}.freq(50)')
    return obj


@rule('servo_write')
def servo_write(block, ctx):
    pin = block.get_field_value('SERVO_PIN', '2')
    angle = ctx.value_to_code(block, 'SERVO_ANGLE', Order.NONE, '90')
    ctx.reserve_pin(block, pin, PinType.SERVO, 'Servo Write')
    obj = servo_object(ctx, pin)

    if is_number(angle):
        duty = str(angle_to_duty(angle))
    else:
        i = ctx.config.INDENT
        helper = ctx.provide_function('servo_duty', [
            f'def {FUNCTION_NAME_PLACEHOLDER}(angle):',
            f'{i}angle = min(max(angle, 0), {MAX_ANGLE})',
            f'{i}return int(angle * {DUTY_SPAN} / {MAX_ANGLE} + {DUTY_MIN})',
        ])
        duty = f'{helper}({angle})'
    return Statement(f'{obj}.duty({duty})\n')


@rule('servo_read')
def servo_read(block, ctx):
    pin = block.get_field_value('SERVO_PIN', '2')
    ctx.reserve_pin(block, pin, PinType.SERVO, 'Servo Read')
    obj = servo_object(ctx, pin)
    return Expression(f'int(({obj}.duty() - {DUTY_MIN}) * {MAX_ANGLE} / {DUTY_SPAN})',
                      Order.FUNCTION_CALL)
