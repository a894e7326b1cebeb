# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

import pytest

from mpyblocks import Block, CodeGenerationError, InputType, UnknownFieldValueError, Workspace, generate, value_block
from mpyblocks.codegen.order import Order


def _code(ctx, block):
    return ctx.block_to_code(block).code


# ----------------------------------------------------------------------
# Logic
# ----------------------------------------------------------------------

def test_if_elif_else(ctx, blocks):
    block = Block('controls_if')
    block.set_input('IF0', blocks.boolean(True))
    block.set_input('DO0', blocks.set_var('a', blocks.num(1)), InputType.STATEMENT)
    block.set_input('IF1', blocks.boolean(False))
    block.set_input('DO1', None, InputType.STATEMENT)
    block.set_input('ELSE', blocks.set_var('a', blocks.num(3)), InputType.STATEMENT)
    assert _code(ctx, block) == (
        'if True:\n    a = 1\n'
        'elif False:\n    pass\n'
        'else:\n    a = 3\n'
    )


def test_comparisons_do_not_chain(ctx, blocks):
    inner = value_block('logic_compare', fields={'OP': 'LT'})
    inner.set_input('A', blocks.num(1))
    inner.set_input('B', blocks.num(2))
    outer = value_block('logic_compare', fields={'OP': 'EQ'})
    outer.set_input('A', inner)
    outer.set_input('B', blocks.boolean(True))
    code = _code(ctx, outer)
    assert code == '(1 < 2) == True'
    assert eval(code) is True


def test_logic_operation_defaults(ctx, blocks):
    both_missing = value_block('logic_operation', fields={'OP': 'AND'})
    assert _code(ctx, both_missing) == 'False and False'
    one_missing = value_block('logic_operation', fields={'OP': 'OR'})
    one_missing.set_input('A', blocks.var('ready'))
    assert _code(ctx, one_missing) == 'ready or False'


def test_negate_wraps_looser_operand(ctx, blocks):
    operation = value_block('logic_operation', fields={'OP': 'OR'})
    operation.set_input('A', blocks.var('a'))
    operation.set_input('B', blocks.var('b'))
    negate = value_block('logic_negate')
    negate.set_input('BOOL', operation)
    assert _code(ctx, negate) == 'not (a or b)'


def test_ternary(ctx, blocks):
    ternary = value_block('logic_ternary')
    ternary.set_input('IF', blocks.var('flag'))
    ternary.set_input('THEN', blocks.num(1))
    result = ctx.block_to_code(ternary)
    assert result.code == '1 if flag else None'
    assert result.order == Order.CONDITIONAL


def test_unknown_compare_operator(ctx):
    with pytest.raises(UnknownFieldValueError):
        _code(ctx, value_block('logic_compare', fields={'OP': 'SPACESHIP'}))


# ----------------------------------------------------------------------
# Math
# ----------------------------------------------------------------------

def test_math_number_rendering(ctx, blocks):
    assert _code(ctx, blocks.num('42')) == '42'
    assert _code(ctx, blocks.num('2.50')) == '2.5'
    assert ctx.block_to_code(blocks.num(-3)).order == Order.UNARY_SIGN
    assert _code(ctx, blocks.num('Infinity')) == "float('inf')"


def test_trig_converts_degrees(ctx, blocks):
    trig = value_block('math_trig', fields={'OP': 'SIN'})
    trig.set_input('NUM', blocks.arithmetic('ADD', blocks.num(45), blocks.num(45)))
    assert _code(ctx, trig) == 'math.sin((45 + 45) / 180.0 * math.pi)'
    assert 'math' in ctx.imports


def test_inverse_trig_and_rounding(ctx, blocks):
    acos = value_block('math_trig', fields={'OP': 'ACOS'})
    acos.set_input('NUM', blocks.num(0))
    assert _code(ctx, acos) == 'math.acos(0) / math.pi * 180'
    floor = value_block('math_round', fields={'OP': 'ROUNDDOWN'})
    floor.set_input('NUM', blocks.num(2.7))
    assert _code(ctx, floor) == 'math.floor(2.7)'
    neg = value_block('math_single', fields={'OP': 'NEG'})
    neg.set_input('NUM', blocks.num(-4))
    assert _code(ctx, neg) == '--4'
    assert eval(_code(ctx, neg)) == 4


def test_number_property(ctx, blocks):
    even = value_block('math_number_property', fields={'PROPERTY': 'EVEN'})
    even.set_input('NUMBER_TO_CHECK', blocks.arithmetic('ADD', blocks.var('n'), blocks.num(1)))
    assert _code(ctx, even) == '(n + 1) % 2 == 0'

    prime = value_block('math_number_property', fields={'PROPERTY': 'PRIME'})
    prime.set_input('NUMBER_TO_CHECK', blocks.num(7))
    assert _code(ctx, prime) == 'math_isPrime(7)'

    namespace = {}
    exec('import math\n' + ctx.functions.get('math_isPrime'), namespace)
    is_prime = namespace['math_isPrime']
    assert [n for n in range(30) if is_prime(n)] == [2, 3, 5, 7, 11, 13, 17, 19, 23, 29]
    assert is_prime('abc') is False


def test_modulo_and_constrain(ctx, blocks):
    modulo = value_block('math_modulo')
    modulo.set_input('DIVIDEND', blocks.num(17))
    modulo.set_input('DIVISOR', blocks.arithmetic('MULTIPLY', blocks.num(2), blocks.num(3)))
    assert _code(ctx, modulo) == '17 % (2 * 3)'

    constrain = value_block('math_constrain')
    constrain.set_input('VALUE', blocks.var('speed'))
    constrain.set_input('LOW', blocks.num(0))
    constrain.set_input('HIGH', blocks.num(100))
    assert _code(ctx, constrain) == 'min(max(speed, 0), 100)'


def test_random_int_helper(ctx, blocks):
    block = value_block('math_random_int')
    block.set_input('FROM', blocks.num(1))
    block.set_input('TO', blocks.num(6))
    assert _code(ctx, block) == 'math_random_int(1, 6)'
    assert 'random' in ctx.imports

    namespace = {}
    exec('import random\n' + ctx.functions.get('math_random_int'), namespace)
    assert all(1 <= namespace['math_random_int'](6, 1) <= 6 for _ in range(20))


def test_math_change(ctx, blocks):
    change = Block('math_change', fields={'VAR': 'total'})
    change.set_input('DELTA', blocks.num(2))
    assert _code(ctx, change) == 'total += 2\n'


# ----------------------------------------------------------------------
# Text and variables
# ----------------------------------------------------------------------

def test_text_quoting(ctx, blocks):
    code = _code(ctx, blocks.text("it's a\nback\\slash"))
    assert code == "'it\\'s a\\nback\\\\slash'"
    assert eval(code) == "it's a\nback\\slash"


def test_text_join_and_length(ctx, blocks):
    join = value_block('text_join', mutation={'items': 2})
    join.set_input('ADD0', blocks.text('n = '))
    join.set_input('ADD1', blocks.var('n'))
    assert _code(ctx, join) == "str('n = ') + str(n)"

    length = value_block('text_length')
    length.set_input('VALUE', join)
    assert _code(ctx, length) == "len(str('n = ') + str(n))"

    empty = value_block('text_isEmpty')
    assert _code(ctx, empty) == "not len('')"


def test_set_type_casts(ctx, blocks):
    cast = value_block('variables_set_type', fields={'VARIABLE_SETTYPE_TYPE': 'DECIMAL'})
    cast.set_input('VARIABLE_SETTYPE_INPUT', blocks.var('raw'))
    assert _code(ctx, cast) == 'float(raw)'


def test_statement_in_value_slot_is_rejected(ctx, blocks):
    setter = blocks.set_var('a', Block('time_delay'))
    with pytest.raises(CodeGenerationError):
        _code(ctx, setter)


# ----------------------------------------------------------------------
# Procedures
# ----------------------------------------------------------------------

def test_procedure_definition_and_call(blocks):
    body = blocks.chain(
        blocks.set_var('total', blocks.arithmetic('ADD', blocks.var('total'), blocks.var('amount'))),
        blocks.set_var('amount', blocks.num(0)),
    )
    definition = blocks.statement('procedures_defreturn', body, name='STACK',
                                  fields={'NAME': 'add to total'}, mutation={'arguments': ['amount']})
    definition.set_input('RETURN', blocks.var('total'))

    call = value_block('procedures_callreturn', fields={'NAME': 'add to total'},
                       mutation={'arguments': ['amount']})
    call.set_input('ARG0', blocks.num(5))
    use = blocks.set_var('result', call)
    use.y = 10

    code = generate(Workspace([definition, use])).code

    assert (
        'def add_to_total(amount):\n'
        '    global total\n'
        '    total = total + amount\n'
        '    amount = 0\n'
        '    return total\n'
    ) in code
    assert code.endswith('result = add_to_total(5)\n')
    assert code.index('def add_to_total') < code.index('# ---- main ----')


def test_empty_procedure_gets_pass(blocks):
    definition = Block('procedures_defnoreturn', fields={'NAME': 'noop'})
    call = Block('procedures_callnoreturn', fields={'NAME': 'noop'}, y=5)
    code = generate(Workspace([definition, call])).code
    assert 'def noop():\n    pass\n' in code
    assert code.endswith('noop()\n')


def test_if_return(ctx, blocks):
    with_value = Block('procedures_ifreturn', mutation={'has_return_value': True})
    with_value.set_input('CONDITION', blocks.var('done'))
    with_value.set_input('VALUE', blocks.num(1))
    assert _code(ctx, with_value) == 'if done:\n    return 1\n'
    bare = Block('procedures_ifreturn', mutation={'has_return_value': False})
    assert _code(ctx, bare) == 'if False:\n    return\n'


# ----------------------------------------------------------------------
# Hardware
# ----------------------------------------------------------------------

def test_digital_read_and_pin_objects(ctx):
    read = value_block('io_digitalread', fields={'PIN': '14'})
    assert _code(ctx, read) == 'pin14.value()'
    assert ctx.declarations.get('io_14') == 'pin14 = Pin(14, Pin.IN)'


def test_pin_object_name_avoids_user_variable(blocks):
    user = blocks.set_var('pin5', blocks.num(1))
    write = Block('io_digitalwrite', fields={'PIN': '5'}, y=10)
    code = generate(Workspace([user, write])).code
    assert 'pin5_2 = Pin(5, Pin.OUT)' in code
    assert code.endswith('pin5 = 1\npin5_2.value(0)\n')


def test_analog_write_range_warning(ctx, blocks):
    pwm = Block('io_analogwrite', fields={'PIN': '25'})
    pwm.set_input('NUM', blocks.num(2000))
    assert _code(ctx, pwm) == 'pwm25.duty(2000)\n'
    assert ctx.declarations.get('pwm_25') == 'pwm25 = PWM(Pin(25))'
    assert ctx.warnings[-1].tag == 'pwm_value'
    assert '1023' in ctx.warnings[-1].text


def test_analog_read_and_pulse(ctx, blocks):
    assert _code(ctx, value_block('io_analogread', fields={'PIN': '34'})) == 'adc34.read()'
    pulse = value_block('io_pulsetimeout', fields={'PULSEPIN': '12'})
    pulse.set_input('PULSETYPE', blocks.num(1))
    pulse.set_input('TIMEOUT', blocks.num(5000))
    assert _code(ctx, pulse) == 'time_pulse_us(pin12, 1, 5000)'
    assert 'machine.time_pulse_us' in ctx.imports


def test_builtin_led(ctx):
    led = Block('io_builtin_led', fields={'BUILT_IN_LED': '5'})
    assert _code(ctx, led) == 'pin5.value(0)\n'
    assert ctx.declarations.get('builtin_led') == 'BUILT_IN_LED = const(5)'


def test_servo(ctx, blocks):
    write = Block('servo_write', fields={'SERVO_PIN': '18'})
    write.set_input('SERVO_ANGLE', blocks.num(180))
    assert _code(ctx, write) == 'servo18.duty(123)\n'
    middle = Block('servo_write', fields={'SERVO_PIN': '18'})
    middle.set_input('SERVO_ANGLE', blocks.num(90))
    assert _code(ctx, middle) == 'servo18.duty(74)\n'
    assert ctx.declarations.get('servo_18') == 'servo18 = PWM(Pin(18, mode=Pin.OUT))\nservo18.freq(50)'

    dynamic = Block('servo_write', fields={'SERVO_PIN': '18'})
    dynamic.set_input('SERVO_ANGLE', blocks.var('angle'))
    assert _code(ctx, dynamic) == 'servo18.duty(servo_duty(angle))\n'

    read = value_block('servo_read', fields={'SERVO_PIN': '18'})
    assert _code(ctx, read) == 'int((servo18.duty() - 26) * 180 / 97)'
    assert len(ctx.declarations) == 1


def test_stepper(ctx, blocks):
    config = Block('stepper_config', fields={
        'STEPPER_NAME': 'arm', 'STEPPER_NUMBER_OF_PINS': 'FOUR',
        'STEPPER_PIN1': '1', 'STEPPER_PIN2': '2', 'STEPPER_PIN3': '3', 'STEPPER_PIN4': '4'})
    config.set_input('STEPPER_STEPS', blocks.num(200))
    config.set_input('STEPPER_SPEED', blocks.num(60))
    assert _code(ctx, config) == ''
    declaration = ctx.declarations.get('stepper_arm')
    assert declaration.startswith("stepper_arm = {'pins': (Pin(1, Pin.OUT), Pin(2, Pin.OUT), ")
    assert "'delay_us': 5000" in declaration

    step = Block('stepper_step', fields={'STEPPER_NAME': 'arm'})
    step.set_input('STEPPER_STEPS', blocks.num(-10))
    assert _code(ctx, step) == 'stepper_step(stepper_arm, -10)\n'
    assert '(1, 0, 1, 0)' in ctx.functions.get('stepper_step')


def test_tone(ctx, blocks):
    tone = Block('io_tone', fields={'TONEPIN': '26'})
    tone.set_input('FREQUENCY', blocks.num(440))
    assert _code(ctx, tone) == 'pwm26.freq(440)\npwm26.duty(512)\n'
    assert _code(ctx, Block('io_notone', fields={'TONEPIN': '26'})) == 'pwm26.duty(0)\n'


def test_map_and_serial(ctx, blocks):
    mapped = value_block('base_map')
    mapped.set_input('NUM', value_block('io_analogread', fields={'PIN': '34'}))
    mapped.set_input('DMAX', blocks.num(180))
    assert _code(ctx, mapped) == 'map_range(adc34.read(), 0, 1024, 0, 180)'

    printer = Block('serial_print', fields={'NEW_LINE': 'FALSE'})
    printer.set_input('CONTENT', mapped)
    assert _code(ctx, printer) == "print(map_range(adc34.read(), 0, 1024, 0, 180), end='')\n"


def test_time_blocks(ctx, blocks):
    assert _code(ctx, value_block('time_millis')) == 'time.ticks_ms()'
    delay = Block('time_delaymicros')
    delay.set_input('DELAY_TIME_MICRO', blocks.num(10))
    assert _code(ctx, delay) == 'time.sleep_us(10)\n'
    assert _code(ctx, Block('infinite_loop')) == 'while True:\n    pass\n'
    assert ctx.imports.values() == ['import time']


def test_stepper_speed_expression_keeps_grouping(ctx, blocks):
    speed = value_block('math_modulo')
    speed.set_input('DIVIDEND', blocks.var('r'))
    speed.set_input('DIVISOR', blocks.num(7))
    config = Block('stepper_config', fields={'STEPPER_NAME': 'arm'})
    config.set_input('STEPPER_STEPS', blocks.var('n'))
    config.set_input('STEPPER_SPEED', speed)
    _code(ctx, config)

    declaration = ctx.declarations.get('stepper_arm')
    assert "'delay_us': int(60000000 / (n * (r % 7)))" in declaration
    delay = declaration[declaration.index("'delay_us': ") + len("'delay_us': "):declaration.index(", 'position'")]
    assert eval(delay, {'n': 200, 'r': 10}) == 100000


@pytest.mark.parametrize('value', ['a\rb', 'tab\there', 'vt\x0bff\x0c', 'nel\x85end', 'sep\u2028x', 'bell\x07'])
def test_text_with_control_characters_compiles(blocks, value):
    printer = Block('serial_print')
    printer.set_input('CONTENT', blocks.text(value))
    code = generate(Workspace([printer])).code

    compile(code, '<generated>', 'exec')
    literal = code.splitlines()[-1][len('print('):-1]
    assert eval(literal) == value


@pytest.mark.parametrize('field, expected, order', [
    ('NaN', "float('nan')", Order.ATOMIC),
    ('1e400', "float('inf')", Order.ATOMIC),
    ('-1e400', "-float('inf')", Order.UNARY_SIGN),
    ('Infinity', "float('inf')", Order.ATOMIC),
])
def test_non_finite_numbers(ctx, blocks, field, expected, order):
    result = ctx.block_to_code(blocks.num(field))
    assert result.code == expected
    assert result.order == order
