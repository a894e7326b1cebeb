# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""
MicroPython code generation core.

The assembler lives in ``mpyblocks.codegen.generator``; rules receive a
``mpyblocks.codegen.context.GenerationContext``.
"""

from mpyblocks.codegen.errors import (
    CodeGenerationError,
    GenerationStateError,
    UnknownFieldValueError,
    WorkspaceError,
)
from mpyblocks.codegen.order import Order, wrap
from mpyblocks.codegen.output import NO_CODE, Expression, Statement

__all__ = [
    "CodeGenerationError",
    "GenerationStateError",
    "UnknownFieldValueError",
    "WorkspaceError",
    "Order",
    "wrap",
    "NO_CODE",
    "Expression",
    "Statement",
]
