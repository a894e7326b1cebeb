# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""Exceptions raised by the code generator."""


class CodeGenerationError(Exception):
    """A block graph that cannot be translated at all; aborts the run."""


class UnknownFieldValueError(CodeGenerationError):
    """A field holds a value outside the block definition's enumeration."""

    def __init__(self, block_type: str, field_name: str, value) -> None:
        super().__init__(f"Unknown value {value!r} for field '{field_name}' of block '{block_type}'.")
        self.block_type = block_type
        self.field_name = field_name
        self.value = value


class GenerationStateError(RuntimeError):
    """A generation context was used after it was finalized."""


class WorkspaceError(ValueError):
    """The block graph is malformed (cycles or blocks with two parents)."""
