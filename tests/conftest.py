# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

import pytest

from mpyblocks import Block, InputType, MicropythonGenerator, Workspace, value_block


class Blocks:
    """Shortcuts for building block graphs in tests."""

    @staticmethod
    def num(value):
        return value_block('math_number', fields={'NUM': value})

    @staticmethod
    def text(value):
        return value_block('text', fields={'TEXT': value})

    @staticmethod
    def var(name):
        return value_block('variables_get', fields={'VAR': name})

    @staticmethod
    def boolean(value=True):
        return value_block('logic_boolean', fields={'BOOL': 'TRUE' if value else 'FALSE'})

    @staticmethod
    def arithmetic(op, a=None, b=None):
        block = value_block('math_arithmetic', fields={'OP': op})
        if a is not None:
            block.set_input('A', a)
        if b is not None:
            block.set_input('B', b)
        return block

    @staticmethod
    def set_var(name, value=None):
        block = Block('variables_set', fields={'VAR': name})
        if value is not None:
            block.set_input('VALUE', value)
        return block

    @staticmethod
    def statement(block_type, body=None, name='DO', **kwargs):
        block = Block(block_type, **kwargs)
        if body is not None:
            block.set_input(name, body, InputType.STATEMENT)
        return block

    @staticmethod
    def chain(*blocks):
        """Link statement blocks through their next connections; returns the first."""
        for current, following in zip(blocks, blocks[1:]):
            current.set_next(following)
        return blocks[0]


@pytest.fixture
def blocks():
    return Blocks


@pytest.fixture
def generator():
    return MicropythonGenerator()


@pytest.fixture
def ctx(generator):
    """A fresh generation context for an empty workspace."""
    return generator.init(Workspace())
