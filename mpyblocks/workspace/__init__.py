# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""
Block graph model handed over by the editor.
"""

from mpyblocks.workspace.block import Block, Input, InputType, value_block
from mpyblocks.workspace.workspace import Workspace
from mpyblocks.workspace.static_typing import BlockType, StaticTyping

__all__ = [
    "Block",
    "Input",
    "InputType",
    "value_block",
    "Workspace",
    "BlockType",
    "StaticTyping",
]
