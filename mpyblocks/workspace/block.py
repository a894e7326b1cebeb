# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""
Block node model consumed by the code generator.

The visual editor owns the real blocks; these data classes are the read-only
view the generator walks. A block has named value and statement inputs, field
values, an optional next sibling, and an opaque identity.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple


class InputType(Enum):
    """Kind of connection an input slot accepts."""
    VALUE = 'value'
    STATEMENT = 'statement'
    DUMMY = 'dummy'


@dataclass(eq=False)
class Input:
    """A named slot on a block, optionally connected to a child block."""
    name: str
    type: InputType = InputType.VALUE
    block: Optional['Block'] = None


# Fields naming a variable on blocks that read or write one
VARIABLE_FIELD = 'VAR'


@dataclass(eq=False)
class Block:
    """
    One node of the authored program graph.

    Attributes:
        type: Block type tag, used to look up the translation rule
        id: Opaque identity, only used to address warnings
        fields: Field key -> current value
        inputs: Value/statement inputs in declaration order
        next_block: Following statement block, if any
        has_output: True for expression-producing blocks
        comment: Comment text attached to the block
        disabled: Disabled blocks are skipped during generation
        mutation: Shape data (procedure arguments, return flag, ...)
        x, y: Workspace position, orders the top-level blocks
    """
    type: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    fields: Dict[str, Any] = field(default_factory=dict)
    inputs: List[Input] = field(default_factory=list)
    next_block: Optional['Block'] = None
    has_output: bool = False
    comment: Optional[str] = None
    disabled: bool = False
    mutation: Dict[str, Any] = field(default_factory=dict)
    x: float = 0.0
    y: float = 0.0
    parent: Optional['Block'] = field(default=None, repr=False)
    parent_input: Optional[Input] = field(default=None, repr=False)
    warnings: Dict[str, str] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        for inp in self.inputs:
            if inp.block is not None:
                self._adopt(inp.block, inp)
        if self.next_block is not None:
            self._adopt(self.next_block, None)

    def _adopt(self, child: 'Block', inp: Optional[Input]) -> None:
        child.parent = self
        child.parent_input = inp

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def set_input(self, name: str, child: Optional['Block'],
                  input_type: InputType = InputType.VALUE) -> 'Block':
        """Connect ``child`` to the input ``name``, creating the input if needed."""
        inp = self.get_input(name)
        if inp is None:
            inp = Input(name, input_type)
            self.inputs.append(inp)
        inp.block = child
        if child is not None:
            self._adopt(child, inp)
        return self

    def set_next(self, child: Optional['Block']) -> 'Block':
        self.next_block = child
        if child is not None:
            self._adopt(child, None)
        return self

    # ------------------------------------------------------------------
    # Query surface
    # ------------------------------------------------------------------

    def get_field_value(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def has_field(self, name: str) -> bool:
        return name in self.fields

    def get_input(self, name: str) -> Optional[Input]:
        for inp in self.inputs:
            if inp.name == name:
                return inp
        return None

    def get_input_target_block(self, name: str) -> Optional['Block']:
        inp = self.get_input(name)
        return inp.block if inp is not None else None

    @property
    def input_list(self) -> List[Input]:
        return list(self.inputs)

    @property
    def is_inline(self) -> bool:
        """True when the block is plugged into a parent's value input."""
        return self.parent_input is not None and self.parent_input.type is InputType.VALUE

    @property
    def arguments(self) -> List[str]:
        """Argument names of procedure definition and call blocks."""
        return list(self.mutation.get('arguments', []))

    @property
    def has_return_value(self) -> bool:
        return bool(self.mutation.get('has_return_value', True))

    def get_vars(self) -> List[str]:
        """Variable names referenced directly by this block."""
        names = []
        var = self.get_field_value(VARIABLE_FIELD)
        if var:
            names.append(var)
        if self.type.startswith('procedures_def'):
            names.extend(self.arguments)
        return names

    def children(self) -> Iterator[Tuple[str, 'Block']]:
        """Yield (relation, child) pairs: connected inputs first, then next."""
        for inp in self.inputs:
            if inp.block is not None:
                yield inp.name, inp.block
        if self.next_block is not None:
            yield 'next', self.next_block

    def get_descendants(self) -> List['Block']:
        """This block and everything connected below it, in depth-first order."""
        found = []
        stack = [self]
        seen = set()
        while stack:
            block = stack.pop()
            if id(block) in seen:
                continue
            seen.add(id(block))
            found.append(block)
            stack.extend(reversed([child for _, child in block.children()]))
        return found

    # ------------------------------------------------------------------
    # Warning surface
    # ------------------------------------------------------------------

    def set_warning_text(self, text: Optional[str], tag: str) -> None:
        """Attach (or clear, with ``None``) the warning stored under ``tag``."""
        if text is None:
            self.warnings.pop(tag, None)
        else:
            self.warnings[tag] = text

    def get_warning_text(self) -> Optional[str]:
        if not self.warnings:
            return None
        return '\n'.join(self.warnings.values())


def value_block(block_type: str, **kwargs) -> Block:
    """Shortcut for an expression-producing block."""
    kwargs.setdefault('has_output', True)
    return Block(block_type, **kwargs)
