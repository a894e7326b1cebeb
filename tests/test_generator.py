# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

import logging

import pytest

from mpyblocks import (
    Block,
    GenerationStateError,
    GeneratorConfig,
    InputType,
    MicropythonGenerator,
    UnknownFieldValueError,
    Workspace,
    apply_warnings,
    generate,
    value_block,
)
from mpyblocks.codegen.generator import merge_imports
from mpyblocks.codegen.output import Expression, Statement
from mpyblocks.codegen.rules import RULES
from mpyblocks.config import generator_config

BODY = generator_config.BODY_HEADER
SETUP = generator_config.SETUP_HEADER


def test_repeat_with_digital_write(blocks):
    write = Block('io_digitalwrite', fields={'PIN': '2'})
    write.set_input('STATE', value_block('io_highlow', fields={'STATE': 'HIGH'}))
    repeat = blocks.statement('controls_repeat_ext', write)
    repeat.set_input('TIMES', blocks.num(3))

    code = generate(Workspace([repeat])).code

    assert code.count('from machine import Pin\n') == 1
    assert code.count('Pin(2, Pin.OUT)') == 1
    assert 'pin2 = Pin(2, Pin.OUT)' in code
    assert 'for count in range(3):\n    pin2.value(HIGH)\n' in code
    assert code.index('pin2 = Pin(2, Pin.OUT)') < code.index(BODY)


def test_exact_program_layout(blocks):
    write = Block('io_digitalwrite', fields={'PIN': '2'})
    write.set_input('STATE', value_block('io_highlow', fields={'STATE': 'HIGH'}))
    repeat = blocks.statement('controls_repeat_ext', write)
    repeat.set_input('TIMES', blocks.num(3))

    assert generate(Workspace([repeat])).code == (
        'from micropython import const\n'
        'from machine import Pin\n'
        '\n'
        'HIGH = const(1)\n'
        'LOW = const(0)\n'
        'pin2 = Pin(2, Pin.OUT)\n'
        '\n'
        f'{BODY}\n'
        'for count in range(3):\n'
        '    pin2.value(HIGH)\n'
    )


def test_empty_workspace_has_only_body():
    assert generate(Workspace()).code == f'{BODY}\n'


def test_variables_are_predeclared(blocks):
    workspace = Workspace([blocks.chain(
        blocks.set_var('x', blocks.num(5)),
        blocks.set_var('ratio', blocks.num(0.5)),
        blocks.set_var('label', blocks.text('hi')),
    )])
    result = generate(workspace)
    assert 'x = 0\nratio = 0.0\nlabel = \'\'\n' in result.code
    assert "x = 5\nratio = 0.5\nlabel = 'hi'\n" in result.code
    assert result.code.index('x = 0') < result.code.index(BODY)


def test_user_variable_colliding_with_builtin(blocks):
    result = generate(Workspace([blocks.set_var('print', blocks.num(1))]))
    assert 'print_2 = 0\n' in result.code
    assert 'print_2 = 1\n' in result.code


def test_section_order(blocks):
    led = Block('io_digitalwrite', fields={'PIN': '4'})
    procedure = blocks.statement('procedures_defnoreturn', led, name='STACK',
                                 fields={'NAME': 'blink'})
    main = blocks.statement('arduino_functions', Block('procedures_callnoreturn', fields={'NAME': 'blink'}),
                            name='LOOP_FUNC', y=100)
    main.set_input('SETUP_FUNC', Block('serial_setup', fields={'SERIAL_ID': 'Serial0', 'SPEED': '9600'}),
                   InputType.STATEMENT)
    counter = blocks.set_var('n', blocks.num(0))
    counter.y = 50

    code = generate(Workspace([procedure, counter, main])).code

    markers = ['from machine import Pin', 'n = 0', 'pin4 = Pin(4, Pin.OUT)',
               'def blink():', SETUP, 'uart0 = UART(0, baudrate=9600)', BODY, 'while True:']
    positions = [code.index(marker) for marker in markers]
    assert positions == sorted(positions)
    assert '\n\n\n' not in code
    assert code.endswith('\n')


def test_user_setup_code_comes_last(blocks):
    main = Block('arduino_functions')
    main.set_input('SETUP_FUNC', blocks.chain(
        Block('serial_print', inputs=[]).set_input('CONTENT', blocks.text('ready')),
    ), InputType.STATEMENT)
    uart = Block('serial_setup', fields={'SERIAL_ID': '1', 'SPEED': '9600'}, y=-10)

    code = generate(Workspace([main, uart])).code
    setup = code[code.index(SETUP):code.index(BODY)]
    assert setup == f"{SETUP}\nuart1 = UART(1, baudrate=9600)\nprint('ready')\n\n"
    assert code.endswith(f'{BODY}\nwhile True:\n    pass\n')


def test_top_blocks_are_ordered_by_position(blocks):
    late = blocks.set_var('b', blocks.num(2))
    late.y = 20
    early = blocks.set_var('a', blocks.num(1))
    early.y = 10
    code = generate(Workspace([late, early])).code
    assert code.index('a = 1') < code.index('b = 2')


def test_naked_value_gets_own_line(blocks):
    code = generate(Workspace([blocks.arithmetic('ADD', blocks.num(1), blocks.num(2))])).code
    assert code.endswith(f'{BODY}\n1 + 2\n')


def test_comments_are_emitted(blocks):
    delay = Block('time_delay', comment='wait a bit')
    value = blocks.num(500)
    value.comment = 'half a second'
    delay.set_input('DELAY_TIME_MILI', value)
    code = generate(Workspace([delay])).code
    assert '# wait a bit\n# half a second\ntime.sleep_ms(500)\n' in code


def test_disabled_blocks_are_skipped(blocks):
    skipped = blocks.set_var('a', blocks.num(1))
    skipped.disabled = True
    code = generate(Workspace([blocks.chain(skipped, blocks.set_var('b', blocks.num(2)))])).code
    assert 'a = 1' not in code
    assert 'b = 2\n' in code


def test_unknown_block_type_falls_back(blocks, caplog):
    printer = Block('serial_print')
    printer.set_input('CONTENT', value_block('sensor_magic'))
    workspace = Workspace([blocks.chain(Block('robot_dance'), printer)])
    with caplog.at_level(logging.WARNING):
        code = generate(workspace).code
    assert code.endswith(f"{BODY}\nprint('')\n")
    assert "robot_dance" in caplog.text
    assert "sensor_magic" in caplog.text


def test_unknown_field_value_aborts():
    workspace = Workspace([Block('controls_flow_statements', fields={'FLOW': 'JUMP'})])
    with pytest.raises(UnknownFieldValueError, match='JUMP'):
        generate(workspace)


def test_context_is_unusable_after_finish(generator):
    ctx = generator.init(Workspace())
    generator.finish(ctx, '')
    with pytest.raises(GenerationStateError):
        ctx.add_import('time', 'import time')
    with pytest.raises(GenerationStateError):
        ctx.block_to_code(Block('time_millis', has_output=True))


def test_runs_do_not_share_state(generator, blocks):
    first = Workspace([Block('io_digitalwrite', fields={'PIN': '5'})])
    second = Workspace([Block('time_delay')])
    generator.generate(first)
    code = generator.generate(second).code
    assert 'Pin' not in code
    assert 'import time' in code


def test_register_rule_overrides_table(generator):
    generator.register_rule('custom_beep', lambda block, ctx: Statement('beep()\n'))
    code = generator.workspace_to_code(Workspace([Block('custom_beep')]))
    assert code.endswith(f'{BODY}\nbeep()\n')


def test_every_rule_runs_with_default_fields():
    workspace = Workspace()
    for n, block_type in enumerate(sorted(RULES)):
        workspace.add_top_block(Block(block_type, y=n))

    result = generate(workspace)

    assert isinstance(result.code, str)
    body_start = result.code.index(BODY)
    for marker in ('from machine import Pin', 'import time', 'def '):
        assert result.code.index(marker) < body_start


def test_custom_config():
    config = GeneratorConfig(INDENT='  ', BODY_HEADER='# main')
    code = MicropythonGenerator(config=config).workspace_to_code(
        Workspace([Block('controls_whileUntil')]))
    assert code == '# main\nwhile False:\n  pass\n'


def test_statement_prefix_and_loop_trap(blocks):
    config = GeneratorConfig(STATEMENT_PREFIX='highlight(%1)', INFINITE_LOOP_TRAP='check_timeout()')
    loop = blocks.statement('controls_whileUntil', Block('time_delay', id='d1'), id='w1')
    code = MicropythonGenerator(config=config).workspace_to_code(Workspace([loop]))
    assert code.endswith(
        f"{BODY}\n"
        "highlight('w1')\n"
        "while False:\n"
        "    check_timeout()\n"
        "    highlight('d1')\n"
        "    time.sleep_ms(0)\n"
        "    highlight('w1')\n"
    )


def test_warnings_are_events(blocks):
    write = Block('io_digitalwrite', fields={'PIN': '13'})
    read = Block('io_digitalread', fields={'PIN': '13'}, has_output=True)
    printer = Block('serial_print')
    printer.set_input('CONTENT', read)
    workspace = Workspace([blocks.chain(write, printer)])

    result = generate(workspace)

    active = result.active_warnings()
    assert active == {
        (read.id, 'Digital Read'): 'Pin 13 is needed for Digital Read as pin INPUT. Already used as OUTPUT.'
    }
    assert read.get_warning_text() is None
    apply_warnings(workspace, result.warnings)
    assert 'Already used as OUTPUT' in read.get_warning_text()
    assert write.get_warning_text() is None


def test_rule_output_types(ctx, blocks):
    assert isinstance(ctx.block_to_code(blocks.num(1)), Expression)
    assert isinstance(ctx.block_to_code(Block('time_delay')), Statement)


def test_from_imports_are_merged_per_module(blocks):
    analog = Block('io_analogwrite', fields={'PIN': '25'})
    analog.set_input('NUM', value_block('io_analogread', fields={'PIN': '34'}))
    workspace = Workspace([blocks.chain(Block('io_digitalwrite', fields={'PIN': '2'}), analog)])

    code = generate(workspace).code

    assert code.count('from machine import') == 1
    assert code.startswith('from machine import Pin, ADC, PWM\n')
    compile(code, '<generated>', 'exec')


def test_merge_imports_keeps_first_position():
    lines = ['import time', 'from machine import Pin', 'from micropython import const',
             'from machine import PWM', 'from machine import Pin']
    assert merge_imports(lines) == [
        'import time', 'from machine import Pin, PWM', 'from micropython import const']
