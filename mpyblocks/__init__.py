# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""
mpyblocks - MicroPython code generation for block-based programs.

Walks a workspace of connected blocks and emits an equivalent MicroPython
program: imports, pre-declared variables, pin objects, helper functions, a
setup section and the main body.

Example:
    >>> from mpyblocks import Block, Workspace, generate
    >>> result = generate(Workspace([Block('controls_repeat_ext', fields={'TIMES': 3})]))
    >>> print(result.code)
"""

from mpyblocks.workspace import Block, BlockType, Input, InputType, StaticTyping, Workspace, value_block
from mpyblocks.codegen.errors import (
    CodeGenerationError,
    GenerationStateError,
    UnknownFieldValueError,
    WorkspaceError,
)
from mpyblocks.codegen.context import GenerationContext, WarningEvent
from mpyblocks.codegen.generator import GenerationResult, MicropythonGenerator, apply_warnings, generate
from mpyblocks.config import GeneratorConfig, generator_config, setup_logging

__version__ = "0.1.0"

__all__ = [
    "Block",
    "BlockType",
    "Input",
    "InputType",
    "StaticTyping",
    "Workspace",
    "value_block",
    "CodeGenerationError",
    "GenerationStateError",
    "UnknownFieldValueError",
    "WorkspaceError",
    "GenerationContext",
    "WarningEvent",
    "GenerationResult",
    "MicropythonGenerator",
    "apply_warnings",
    "generate",
    "GeneratorConfig",
    "generator_config",
    "setup_logging",
]
