# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""
Rules for digital, analogue and pulse I/O.

Each physical pin gets one module-level object, declared once per run under
a tag naming the pin and the way it is driven. The object name comes from
the name database so it cannot collide with user variables.
"""

from mpyblocks.codegen.errors import UnknownFieldValueError
from mpyblocks.codegen.order import Order
from mpyblocks.codegen.output import Expression, Statement
from mpyblocks.codegen.registry import PinType
from mpyblocks.codegen.rules.base import rule
from mpyblocks.codegen.text_utils import is_number, to_number

DEFAULT_PIN = '2'


def digital_pin(ctx, pin, mode: str) -> str:
    """
    Declare ``Pin(pin, Pin.<mode>)`` once and return its object name.

    Args:
        ctx: Generation context
        pin: Pin number as shown in the block field
        mode: 'OUT' or 'IN'
    """
    ctx.add_from_import('machine', 'Pin')
    obj = ctx.generated_name(f'pin{pin}')
    ctx.add_declaration(f'io_{pin}', f'{obj} = Pin({pin}, Pin.{mode})')
    return obj


def pwm_pin(ctx, pin) -> str:
    ctx.add_from_import('machine', 'Pin')
    ctx.add_from_import('machine', 'PWM')
    obj = ctx.generated_name(f'pwm{pin}')
    ctx.add_declaration(f'pwm_{pin}', f'{obj} = PWM(Pin({pin}))')
    return obj


def adc_pin(ctx, pin) -> str:
    ctx.add_from_import('machine', 'Pin')
    ctx.add_from_import('machine', 'ADC')
    obj = ctx.generated_name(f'adc{pin}')
    ctx.add_declaration(f'adc_{pin}', f'{obj} = ADC(Pin({pin}))')
    return obj


def _const(ctx) -> None:
    ctx.add_from_import('micropython', 'const')


@rule('io_digitalwrite')
def io_digitalwrite(block, ctx):
    pin = block.get_field_value('PIN', DEFAULT_PIN)
    state = ctx.value_to_code(block, 'STATE', Order.NONE, '0')
    ctx.reserve_pin(block, pin, PinType.OUTPUT, 'Digital Write')
    obj = digital_pin(ctx, pin, 'OUT')
    return Statement(f'{obj}.value({state})\n')


@rule('io_digitalread')
def io_digitalread(block, ctx):
    pin = block.get_field_value('PIN', DEFAULT_PIN)
    ctx.reserve_pin(block, pin, PinType.INPUT, 'Digital Read')
    obj = digital_pin(ctx, pin, 'IN')
    return Expression(f'{obj}.value()', Order.FUNCTION_CALL)


@rule('io_builtin_led')
def io_builtin_led(block, ctx):
    pin = block.get_field_value('BUILT_IN_LED', DEFAULT_PIN)
    state = ctx.value_to_code(block, 'STATE', Order.NONE, '0')
    ctx.reserve_pin(block, pin, PinType.OUTPUT, 'Set LED')
    _const(ctx)
    ctx.add_declaration('builtin_led', f'BUILT_IN_LED = const({pin})')
    obj = digital_pin(ctx, pin, 'OUT')
    return Statement(f'{obj}.value({state})\n')


@rule('io_highlow')
def io_highlow(block, ctx):
    state = block.get_field_value('STATE', 'HIGH')
    if state not in ('HIGH', 'LOW'):
        raise UnknownFieldValueError(block.type, 'STATE', state)
    _const(ctx)
    ctx.add_declaration('highlow', 'HIGH = const(1)\nLOW = const(0)')
    return Expression(state, Order.ATOMIC)


@rule('io_analogwrite')
def io_analogwrite(block, ctx):
    pin = block.get_field_value('PIN', DEFAULT_PIN)
    duty = ctx.value_to_code(block, 'NUM', Order.NONE, '0')
    ctx.reserve_pin(block, pin, PinType.PWM, 'Analogue Write')

    duty_max = ctx.config.PWM_DUTY_MAX
    if is_number(duty) and not 0 <= to_number(duty) <= duty_max:
        ctx.set_warning(block, f'The analogue value set must be between 0 and {duty_max}',
                        'pwm_value')
    else:
        ctx.set_warning(block, None, 'pwm_value')

    obj = pwm_pin(ctx, pin)
    return Statement(f'{obj}.duty({duty})\n')


@rule('io_analogread')
def io_analogread(block, ctx):
    pin = block.get_field_value('PIN', DEFAULT_PIN)
    ctx.reserve_pin(block, pin, PinType.INPUT, 'Analogue Read')
    obj = adc_pin(ctx, pin)
    return Expression(f'{obj}.read()', Order.FUNCTION_CALL)


def _pulse(block, ctx, with_timeout: bool) -> Expression:
    pin = block.get_field_value('PULSEPIN', DEFAULT_PIN)
    level = ctx.value_to_code(block, 'PULSETYPE', Order.NONE, '1')
    ctx.reserve_pin(block, pin, PinType.INPUT, 'Pulse Pin')
    ctx.add_from_import('machine', 'time_pulse_us')
    obj = digital_pin(ctx, pin, 'IN')
    args = f'{obj}, {level}'
    if with_timeout:
        args += ', ' + ctx.value_to_code(block, 'TIMEOUT', Order.NONE, '1000000')
    return Expression(f'time_pulse_us({args})', Order.FUNCTION_CALL)


@rule('io_pulsein')
def io_pulsein(block, ctx):
    return _pulse(block, ctx, with_timeout=False)


@rule('io_pulsetimeout')
def io_pulsetimeout(block, ctx):
    return _pulse(block, ctx, with_timeout=True)
