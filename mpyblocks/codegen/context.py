# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""
Per-run generation state and the traversal helpers used by translation rules.

A GenerationContext is created by ``MicropythonGenerator.init`` and owns
everything one run writes to: the name database, the five code registries,
the pin table and the warning events. Rules receive it as their second
argument; nothing run-scoped lives on the generator itself, so separate
runs never share state.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Union

from mpyblocks.config import PIN_CONFLICT_WARNING, GeneratorConfig
from mpyblocks.codegen.errors import CodeGenerationError, GenerationStateError
from mpyblocks.codegen.names import NameDatabase, NameRealm
from mpyblocks.codegen.order import wrap
from mpyblocks.codegen.output import NO_CODE, Expression, RuleOutput, Statement
from mpyblocks.codegen.registry import CodeRegistry, FunctionRegistry, PinRegistry, PinType
from mpyblocks.codegen.text_utils import prefix_lines, quote
from mpyblocks.workspace.block import Block, InputType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WarningEvent:
    """Set (text) or clear (None) the warning ``tag`` on block ``block_id``."""
    block_id: str
    tag: str
    text: Optional[str]

    @property
    def cleared(self) -> bool:
        return self.text is None


class ContextState(Enum):
    INITIALIZED = 'initialized'
    FINALIZED = 'finalized'


class GenerationContext:
    """
    Mutable state of one generation run.

    Attributes:
        config: Generator configuration (indentation, section headers, ...)
        names: Distinct-name allocator shared by every realm
        imports, declarations, variables, setups: Code registries
        functions: Helper functions and user procedures
        pins: Pin usage table
        warnings: Warning events in emission order
        variable_types: Inferred type of each workspace variable
    """

    def __init__(self, rule_lookup: Callable[[Block], Callable],
                 config: GeneratorConfig) -> None:
        self._rule_lookup = rule_lookup
        self.config = config
        self.state = ContextState.INITIALIZED

        self.names = NameDatabase(config.reserved_words)
        self.imports = CodeRegistry('imports')
        self.declarations = CodeRegistry('declarations')
        self.variables = CodeRegistry('variables')
        self.setups = CodeRegistry('setups')
        self.functions = FunctionRegistry(self.names)
        self.pins = PinRegistry()
        self.warnings: List[WarningEvent] = []
        self.variable_types: Dict[str, object] = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self.state is ContextState.INITIALIZED

    def _check_open(self) -> None:
        if not self.is_open:
            raise GenerationStateError(
                "Generation context is finalized; call init() to start a new run.")

    def close(self) -> None:
        """Drop all run-scoped state; the context cannot be used afterwards."""
        for registry in (self.imports, self.declarations, self.variables,
                         self.setups, self.functions):
            registry.reset()
        self.pins.reset()
        self.names.reset()
        self.state = ContextState.FINALIZED

    # ------------------------------------------------------------------
    # Registries
    # ------------------------------------------------------------------

    def add_import(self, tag: str, code: str) -> bool:
        self._check_open()
        return self.imports.add(tag, code)

    def add_from_import(self, module: str, name: str) -> bool:
        """``from module import name``, tagged by the imported name."""
        return self.add_import(f'{module}.{name}', f'from {module} import {name}')

    def add_module_import(self, module: str) -> bool:
        return self.add_import(module, f'import {module}')

    def add_declaration(self, tag: str, code: str, overwrite: bool = False) -> bool:
        self._check_open()
        return self.declarations.add(tag, code, overwrite)

    def add_variable(self, tag: str, code: str, overwrite: bool = False) -> bool:
        self._check_open()
        return self.variables.add(tag, code, overwrite)

    def add_setup(self, tag: str, code: str, overwrite: bool = False) -> bool:
        self._check_open()
        return self.setups.add(tag, code, overwrite)

    def provide_function(self, preferred: str, code: Union[str, List[str]]) -> str:
        self._check_open()
        return self.functions.provide(preferred, code)

    def add_user_function(self, name: str, code: str) -> None:
        self._check_open()
        self.functions.add_user_function(name, code)

    # ------------------------------------------------------------------
    # Names
    # ------------------------------------------------------------------

    def variable_name(self, name: str) -> str:
        return self.names.get_name(name, NameRealm.VARIABLE)

    def procedure_name(self, name: str) -> str:
        return self.names.get_name(name, NameRealm.PROCEDURE)

    def generated_name(self, preferred: str) -> str:
        """Run-wide identifier for a generator-owned resource (pin objects, ...)."""
        return self.names.get_name(preferred, NameRealm.GENERATED)

    def distinct_name(self, preferred: str, realm: NameRealm = NameRealm.GENERATED) -> str:
        """A fresh identifier on every call (loop counters, temporaries)."""
        return self.names.get_distinct_name(preferred, realm)

    # ------------------------------------------------------------------
    # Pins and warnings
    # ------------------------------------------------------------------

    def set_warning(self, block: Block, text: Optional[str], tag: str) -> None:
        self.warnings.append(WarningEvent(block.id, tag, text))

    def reserve_pin(self, block: Block, pin, kind: PinType, warning_tag: str) -> bool:
        """
        Claim a pin for ``block`` and report a conflicting earlier claim.

        A conflict adds a warning event under ``warning_tag``; a successful
        claim clears it. Generation carries on either way.

        Returns:
            True on conflict
        """
        existing = self.pins.usage(pin)
        if self.pins.reserve(pin, kind):
            text = PIN_CONFLICT_WARNING.format(
                pin=pin, tag=warning_tag, kind=kind.value, existing=existing.value)
            logger.warning(text)
            self.set_warning(block, text, warning_tag)
            return True
        self.set_warning(block, None, warning_tag)
        return False

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def block_to_code(self, block: Optional[Block]) -> RuleOutput:
        """
        Translate ``block`` and, for statements, everything chained after it.

        Disabled blocks are skipped in favour of their next sibling.
        """
        self._check_open()
        if block is None:
            return NO_CODE
        if block.disabled:
            return self.block_to_code(block.next_block)

        rule = self._rule_lookup(block)
        result = rule(block, self)
        if result is NO_CODE:
            return NO_CODE
        if isinstance(result, Expression):
            return Expression(self.scrub(block, result.code), result.order)
        if isinstance(result, Statement):
            code = result.code
            if self.config.STATEMENT_PREFIX and code:
                code = self.inject_block_id(self.config.STATEMENT_PREFIX, block) + code
            return Statement(self.scrub(block, code))
        raise CodeGenerationError(
            f"Rule for block '{block.type}' returned {type(result).__name__}, "
            f"expected Statement, Expression or NO_CODE.")

    def value_to_code(self, block: Block, name: str, outer_order: int,
                      default: str = '') -> str:
        """
        Expression text of the value input ``name``.

        Args:
            block: Parent block
            name: Value input name
            outer_order: Loosest precedence the slot accepts
            default: Literal used when nothing (or nothing useful) is connected

        Raises:
            CodeGenerationError: If a statement block is connected
        """
        target = block.get_input_target_block(name)
        if target is None:
            return default
        result = self.block_to_code(target)
        if result is NO_CODE:
            return default
        if not isinstance(result, Expression):
            raise CodeGenerationError(
                f"Expecting an expression from block '{target.type}' "
                f"in input '{name}' of '{block.type}'.")
        if not result.code:
            return default
        return wrap(result.code, result.order, outer_order)

    def statement_to_code(self, block: Block, name: str, indent: bool = True) -> str:
        """
        Code of the statement chain connected to input ``name``.

        Raises:
            CodeGenerationError: If a value block is connected
        """
        target = block.get_input_target_block(name)
        result = self.block_to_code(target)
        if isinstance(result, Expression):
            raise CodeGenerationError(
                f"Expecting a statement from block '{target.type}' "
                f"in input '{name}' of '{block.type}'.")
        code = result.code if result else ''
        if code and indent:
            code = prefix_lines(code, self.config.INDENT)
        return code

    def scrub(self, block: Block, code: str) -> str:
        """Add the block's comments in front of ``code`` and its next siblings after it."""
        comment_code = ''
        if not block.is_inline:
            prefix = self.config.COMMENT_PREFIX
            if block.comment:
                comment_code += prefix_lines(block.comment, prefix) + '\n'
            for inp in block.inputs:
                if inp.type is InputType.VALUE and inp.block is not None:
                    nested = self.all_nested_comments(inp.block)
                    if nested:
                        comment_code += prefix_lines(nested, prefix)
        return comment_code + code + self._next_code(block)

    def _next_code(self, block: Block) -> str:
        result = self.block_to_code(block.next_block)
        if isinstance(result, Expression):
            raise CodeGenerationError(
                f"Expecting a statement after block '{block.type}', "
                f"got value block '{block.next_block.type}'.")
        return result.code if result else ''

    @staticmethod
    def all_nested_comments(block: Block) -> str:
        comments = [b.comment for b in block.get_descendants() if b.comment]
        return '\n'.join(comments) + '\n' if comments else ''

    def add_loop_trap(self, branch: str, block: Block) -> str:
        """Instrument a loop body with the configured trap and statement prefix."""
        if self.config.INFINITE_LOOP_TRAP:
            branch = prefix_lines(self.inject_block_id(self.config.INFINITE_LOOP_TRAP, block),
                                  self.config.INDENT) + branch
        if self.config.STATEMENT_PREFIX:
            branch += prefix_lines(self.inject_block_id(self.config.STATEMENT_PREFIX, block),
                                   self.config.INDENT)
        return branch

    def pass_block(self) -> str:
        """Indented placeholder for an empty block body."""
        return f'{self.config.INDENT}{self.config.PASS}\n'

    def indent(self, code: str) -> str:
        return prefix_lines(code, self.config.INDENT)

    @staticmethod
    def inject_block_id(template: str, block: Block) -> str:
        text = template.replace('%1', quote(block.id))
        return text if text.endswith('\n') else text + '\n'
