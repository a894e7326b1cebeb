# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""
Static type inference for workspace variables.

MicroPython is dynamically typed, but the generator pre-declares every
variable at module level so procedures and the main loop share it. The
inferred type decides the initializer of that declaration. Types come from
the value assigned by 'variables_set' blocks (and from loop counters), with
variables that depend on other variables resolved in dependency order.
"""

import logging
import re
from enum import Enum
from typing import Dict, List, Optional, Tuple

import networkx as nx

from mpyblocks.workspace.block import Block
from mpyblocks.workspace.workspace import Workspace

logger = logging.getLogger(__name__)


class BlockType(Enum):
    """Semantic type of a value produced by a block."""
    SHORT_NUMBER = 'Short Number'
    NUMBER = 'Number'
    LARGE_NUMBER = 'Large Number'
    DECIMAL = 'Decimal'
    TEXT = 'Text'
    CHARACTER = 'Character'
    BOOLEAN = 'Boolean'
    NULL = 'Null'
    UNDEF = 'Undefined'
    CHILD_BLOCK_MISSING = 'ChildBlockMissing'


# Widening order for numeric types
NUMERIC_TYPES: List[BlockType] = [
    BlockType.SHORT_NUMBER,
    BlockType.NUMBER,
    BlockType.LARGE_NUMBER,
    BlockType.DECIMAL,
]

PYTHON_INITIALIZERS: Dict[BlockType, str] = {
    BlockType.SHORT_NUMBER: '0',
    BlockType.NUMBER: '0',
    BlockType.LARGE_NUMBER: '0',
    BlockType.DECIMAL: '0.0',
    BlockType.TEXT: "''",
    BlockType.CHARACTER: "''",
    BlockType.BOOLEAN: 'False',
    BlockType.NULL: 'None',
    BlockType.UNDEF: 'None',
    # No block connected: default to a number, like an empty math slot
    BlockType.CHILD_BLOCK_MISSING: '0',
}

# Output types of blocks whose type does not depend on their inputs
OUTPUT_TYPES: Dict[str, BlockType] = {
    'logic_compare': BlockType.BOOLEAN,
    'logic_operation': BlockType.BOOLEAN,
    'logic_negate': BlockType.BOOLEAN,
    'logic_boolean': BlockType.BOOLEAN,
    'logic_null': BlockType.NULL,
    'math_number_property': BlockType.BOOLEAN,
    'math_modulo': BlockType.NUMBER,
    'math_round': BlockType.NUMBER,
    'math_single': BlockType.DECIMAL,
    'math_trig': BlockType.DECIMAL,
    'math_constant': BlockType.DECIMAL,
    'math_random_int': BlockType.NUMBER,
    'math_random_float': BlockType.DECIMAL,
    'text': BlockType.TEXT,
    'text_join': BlockType.TEXT,
    'text_length': BlockType.NUMBER,
    'text_isEmpty': BlockType.BOOLEAN,
    'io_digitalread': BlockType.NUMBER,
    'io_highlow': BlockType.NUMBER,
    'io_analogread': BlockType.NUMBER,
    'io_pulsein': BlockType.LARGE_NUMBER,
    'io_pulsetimeout': BlockType.LARGE_NUMBER,
    'time_millis': BlockType.LARGE_NUMBER,
    'time_micros': BlockType.LARGE_NUMBER,
    'servo_read': BlockType.NUMBER,
    'base_map': BlockType.NUMBER,
}

CAST_TYPES: Dict[str, BlockType] = {
    'SHORT_NUMBER': BlockType.SHORT_NUMBER,
    'NUMBER': BlockType.NUMBER,
    'LARGE_NUMBER': BlockType.LARGE_NUMBER,
    'DECIMAL': BlockType.DECIMAL,
    'TEXT': BlockType.TEXT,
    'CHARACTER': BlockType.CHARACTER,
    'BOOLEAN': BlockType.BOOLEAN,
}

_INT_RE = re.compile(r'^[+-]?\d+$')
_FLOAT_RE = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')

TYPE_WARNING_TAG = 'variable_type'

# Value inputs an assignment takes its type from
ASSIGNMENT_INPUTS: Dict[str, Tuple[str, ...]] = {
    'variables_set': ('VALUE',),
    'controls_for': ('FROM', 'TO', 'BY'),
}


def initializer_for(block_type: BlockType) -> str:
    """Python literal used to pre-declare a variable of ``block_type``."""
    return PYTHON_INITIALIZERS.get(block_type, 'None')


def identify_number(text) -> BlockType:
    """
    Classify a numeric literal.

    Integers inside the 16-bit signed range are NUMBER, larger ones
    LARGE_NUMBER, anything with a fraction or exponent DECIMAL.
    """
    text = str(text).strip()
    if _INT_RE.match(text):
        value = int(text)
        if value > 32767 or value < -32768:
            return BlockType.LARGE_NUMBER
        return BlockType.NUMBER
    if _FLOAT_RE.match(text) or text.lower() in ('inf', '-inf', 'infinity', '-infinity'):
        return BlockType.DECIMAL
    return BlockType.UNDEF


def _assigned_values(block: Block) -> List[Block]:
    """Blocks inside the value inputs of an assignment; loop bodies and siblings excluded."""
    values = []
    for name in ASSIGNMENT_INPUTS.get(block.type, ()):
        target = block.get_input_target_block(name)
        if target is not None:
            values.extend(target.get_descendants())
    return values


def widest_numeric(*types: BlockType) -> BlockType:
    numeric = [t for t in types if t in NUMERIC_TYPES]
    if not numeric:
        return BlockType.NUMBER
    return max(numeric, key=NUMERIC_TYPES.index)


class StaticTyping:
    """
    Infers one type per workspace variable.

    After ``collect_vars_with_types`` the ``warnings`` list holds
    (block, tag, text_or_None) triples: text for an assignment whose type
    conflicts with the variable's established type, None to clear a stale
    warning on a consistent assignment.
    """

    def __init__(self) -> None:
        self.warnings: List[Tuple[Block, str, Optional[str]]] = []
        self._procedures: Dict[str, Block] = {}

    def collect_vars_with_types(self, workspace: Workspace) -> Dict[str, BlockType]:
        self.warnings = []
        self._procedures = workspace.procedure_definitions()

        assignments: Dict[str, List[Block]] = {}
        for block in workspace.all_blocks():
            if block.type in ('variables_set', 'controls_for', 'controls_forEach', 'math_change'):
                name = block.get_field_value('VAR')
                if name:
                    assignments.setdefault(name, []).append(block)

        names = workspace.all_variables()
        order = self._resolution_order(names, assignments)

        var_types: Dict[str, BlockType] = {}
        for name in order:
            resolved: Optional[BlockType] = None
            for block in assignments.get(name, []):
                assigned = self._assignment_type(block, var_types)
                if assigned is BlockType.UNDEF:
                    continue
                if resolved is None:
                    resolved = assigned
                elif resolved in NUMERIC_TYPES and assigned in NUMERIC_TYPES:
                    resolved = widest_numeric(resolved, assigned)
                elif assigned is not resolved:
                    text = (f"Variable '{name}' is used as {resolved.value} "
                            f"but is assigned a {assigned.value} here.")
                    logger.warning(text)
                    self.warnings.append((block, TYPE_WARNING_TAG, text))
                    continue
                self.warnings.append((block, TYPE_WARNING_TAG, None))
            var_types[name] = resolved if resolved is not None else BlockType.UNDEF

        # Keep first-use order for the declarations
        return {name: var_types[name] for name in names}

    def _resolution_order(self, names: List[str],
                          assignments: Dict[str, List[Block]]) -> List[str]:
        """Order variables so that each is typed after the variables it is assigned from."""
        graph = nx.DiGraph()
        graph.add_nodes_from(names)
        for name, blocks in assignments.items():
            for block in blocks:
                for value in _assigned_values(block):
                    if value.type == 'variables_get':
                        source = value.get_field_value('VAR')
                        if source and source != name:
                            graph.add_edge(source, name)
        try:
            return list(nx.lexicographical_topological_sort(graph, key=names.index))
        except nx.NetworkXUnfeasible:
            logger.debug("Circular variable assignments, typing in workspace order")
            return list(names)

    def _assignment_type(self, block: Block, var_types: Dict[str, BlockType]) -> BlockType:
        if block.type == 'variables_set':
            return self.block_type(block.get_input_target_block('VALUE'), var_types)
        if block.type == 'controls_for':
            return widest_numeric(*(
                self.block_type(block.get_input_target_block(name), var_types)
                for name in ('FROM', 'TO', 'BY')))
        if block.type == 'math_change':
            return BlockType.NUMBER
        return BlockType.UNDEF

    def block_type(self, block: Optional[Block],
                   var_types: Optional[Dict[str, BlockType]] = None) -> BlockType:
        """Type of the value produced by ``block``."""
        var_types = var_types or {}
        if block is None:
            return BlockType.CHILD_BLOCK_MISSING

        kind = block.type
        if kind == 'math_number':
            return identify_number(block.get_field_value('NUM', '0'))
        if kind == 'variables_get':
            return var_types.get(block.get_field_value('VAR'), BlockType.UNDEF)
        if kind == 'variables_set_type':
            return CAST_TYPES.get(block.get_field_value('VARIABLE_SETTYPE_TYPE'), BlockType.UNDEF)
        if kind == 'math_arithmetic':
            if block.get_field_value('OP') == 'DIVIDE':
                return BlockType.DECIMAL
            return widest_numeric(
                self.block_type(block.get_input_target_block('A'), var_types),
                self.block_type(block.get_input_target_block('B'), var_types))
        if kind == 'math_constrain':
            return self.block_type(block.get_input_target_block('VALUE'), var_types)
        if kind == 'logic_ternary':
            return self.block_type(block.get_input_target_block('THEN'), var_types)
        if kind == 'procedures_callreturn':
            definition = self._procedures.get(block.get_field_value('NAME'))
            if definition is None or definition.get_input_target_block('RETURN') is None:
                return BlockType.UNDEF
            return self.block_type(definition.get_input_target_block('RETURN'), var_types)
        return OUTPUT_TYPES.get(kind, BlockType.UNDEF)
