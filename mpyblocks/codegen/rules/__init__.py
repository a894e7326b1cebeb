# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""
Translation rules, one module per block category.

Importing this package registers every rule in RULES.
"""

from mpyblocks.codegen.rules.base import RULES, rule, no_generator_code_inline, no_generator_code_line
from mpyblocks.codegen.rules import (  # noqa: F401
    colour,
    io,
    lists,
    logic,
    loops,
    map,
    math,
    procedures,
    serial,
    servo,
    stepper,
    text,
    time,
    tone,
    variables,
)

__all__ = ['RULES', 'rule', 'no_generator_code_inline', 'no_generator_code_line']
