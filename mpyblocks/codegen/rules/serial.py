# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""Rules for serial output."""

from mpyblocks.codegen.order import Order
from mpyblocks.codegen.output import Statement
from mpyblocks.codegen.rules.base import rule

DEFAULT_BAUDRATE = '115200'


@rule('serial_print')
def serial_print(block, ctx):
    content = ctx.value_to_code(block, 'CONTENT', Order.NONE, "''")
    if block.get_field_value('NEW_LINE', 'TRUE') == 'TRUE':
        return Statement(f'print({content})\n')
    return Statement(f"print({content}, end='')\n")


@rule('serial_setup')
def serial_setup(block, ctx):
    """Configure a hardware UART; the last setup block for a port wins."""
    serial_id = str(block.get_field_value('SERIAL_ID', '0'))
    speed = block.get_field_value('SPEED', DEFAULT_BAUDRATE)
    # Editor ids look like 'Serial1'; bare numbers are accepted too
    if serial_id.startswith('Serial'):
        serial_id = serial_id[len('Serial'):]
    port = serial_id or '0'
    ctx.add_from_import('machine', 'UART')
    obj = ctx.generated_name(f'uart{port}')
    ctx.add_setup(f'serial_{port}', f'{obj} = UART({port}, baudrate={speed})', overwrite=True)
    return Statement('')
