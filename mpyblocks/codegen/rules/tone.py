# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""Rules for square-wave tones on a PWM pin."""

from mpyblocks.codegen.order import Order
from mpyblocks.codegen.output import Statement
from mpyblocks.codegen.registry import PinType
from mpyblocks.codegen.rules.base import rule
from mpyblocks.codegen.rules.io import pwm_pin

# Half of the 10-bit duty range
TONE_DUTY = 512


@rule('io_tone')
def io_tone(block, ctx):
    pin = block.get_field_value('TONEPIN', '2')
    frequency = ctx.value_to_code(block, 'FREQUENCY', Order.NONE, '440')
    ctx.reserve_pin(block, pin, PinType.PWM, 'Tone Pin')
    obj = pwm_pin(ctx, pin)
    return Statement(f'{obj}.freq({frequency})\n{obj}.duty({TONE_DUTY})\n')


@rule('io_notone')
def io_notone(block, ctx):
    pin = block.get_field_value('TONEPIN', '2')
    ctx.reserve_pin(block, pin, PinType.PWM, 'Tone Pin')
    obj = pwm_pin(ctx, pin)
    return Statement(f'{obj}.duty(0)\n')
