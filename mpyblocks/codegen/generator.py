# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""
Program assembler for MicroPython output.

MicropythonGenerator drives one run: ``init`` validates the workspace and
builds a fresh GenerationContext with every variable pre-declared,
``blocks_to_code`` walks the top blocks through the rule table, and
``finish`` linearizes the registries and the body into the final program.
``generate`` does all three and returns the program with the warnings the
run produced.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from mpyblocks.config import USER_SETUP_TAG, GeneratorConfig, generator_config
from mpyblocks.codegen.context import GenerationContext, WarningEvent
from mpyblocks.codegen.errors import CodeGenerationError
from mpyblocks.codegen.output import Expression
from mpyblocks.codegen.rules import RULES, no_generator_code_inline, no_generator_code_line
from mpyblocks.workspace.block import Block
from mpyblocks.workspace.static_typing import BlockType, StaticTyping, initializer_for
from mpyblocks.workspace.workspace import Workspace

logger = logging.getLogger(__name__)

_TRAILING_SPACE = re.compile(r'[ \t]+\n')
_FROM_IMPORT = re.compile(r'^from (\S+) import (.+)$')


def merge_imports(lines: List[str]) -> List[str]:
    """Fold ``from m import a`` lines into one line per module, at its first position."""
    merged: List[str] = []
    positions: Dict[str, int] = {}
    names: Dict[str, List[str]] = {}
    for line in lines:
        match = _FROM_IMPORT.match(line)
        if match is None:
            merged.append(line)
            continue
        module = match.group(1)
        if module not in positions:
            positions[module] = len(merged)
            names[module] = []
            merged.append(line)
        for name in match.group(2).split(','):
            name = name.strip()
            if name not in names[module]:
                names[module].append(name)
    for module, index in positions.items():
        merged[index] = f"from {module} import {', '.join(names[module])}"
    return merged


@dataclass
class GenerationResult:
    """Program text plus the side channels of one run."""
    code: str
    warnings: List[WarningEvent] = field(default_factory=list)
    variable_types: Dict[str, BlockType] = field(default_factory=dict)

    def active_warnings(self) -> Dict[tuple, str]:
        """Latest warning text per (block id, tag), cleared ones removed."""
        active: Dict[tuple, str] = {}
        for event in self.warnings:
            key = (event.block_id, event.tag)
            if event.cleared:
                active.pop(key, None)
            else:
                active[key] = event.text
        return active


class MicropythonGenerator:
    """
    Translates a workspace into a MicroPython program.

    The generator holds only the rule table and configuration; all run state
    lives in the GenerationContext returned by ``init``.
    """

    def __init__(self, rules: Optional[Dict[str, Callable]] = None,
                 config: Optional[GeneratorConfig] = None,
                 type_inference=None) -> None:
        self.rules: Dict[str, Callable] = dict(RULES if rules is None else rules)
        self.config = config or generator_config
        self.type_inference = type_inference or StaticTyping()

    def register_rule(self, block_type: str, rule: Callable) -> None:
        self.rules[block_type] = rule

    def rule_for(self, block: Block) -> Callable:
        """Rule for ``block``, or the matching no-op rule if its type has none."""
        rule = self.rules.get(block.type)
        if rule is not None:
            return rule
        logger.warning("No code generator for block type '%s', emitting nothing", block.type)
        return no_generator_code_inline if block.has_output else no_generator_code_line

    # ------------------------------------------------------------------
    # Run phases
    # ------------------------------------------------------------------

    def init(self, workspace: Workspace) -> GenerationContext:
        """
        Start a run: validate, infer variable types and pre-declare variables.

        Raises:
            WorkspaceError: If blocks form a cycle or share a parent
        """
        workspace.validate()
        logger.info("Generating MicroPython for %d top blocks", len(workspace.top_blocks()))
        ctx = GenerationContext(self.rule_for, self.config)

        var_types = self.type_inference.collect_vars_with_types(workspace)
        for block, tag, text in self.type_inference.warnings:
            ctx.set_warning(block, text, tag)
        ctx.variable_types = dict(var_types)

        for name, block_type in var_types.items():
            out = ctx.variable_name(name)
            ctx.add_variable(name, f'{out} = {initializer_for(block_type)}')
        return ctx

    def blocks_to_code(self, ctx: GenerationContext, workspace: Workspace) -> str:
        """Translate every top block, top to bottom, into the program body."""
        parts = []
        for block in workspace.top_blocks(ordered=True):
            result = ctx.block_to_code(block)
            if not result:
                continue
            code = result.code
            if isinstance(result, Expression):
                # Naked value block on the canvas
                code += '\n'
            parts.append(code)
        body = ''.join(parts)
        return _TRAILING_SPACE.sub('\n', body)

    def finish(self, ctx: GenerationContext, body: str) -> str:
        """
        Assemble the program and close the context.

        Section order: imports, variables, declarations, functions, setup,
        main body.
        """
        sections = [
            '\n'.join(merge_imports(ctx.imports.values())),
            '\n'.join(ctx.variables.values()),
            '\n'.join(ctx.declarations.values()),
            '\n\n'.join(code.rstrip() for code in ctx.functions.values()),
        ]

        user_setup = ctx.setups.pop(USER_SETUP_TAG)
        setup_lines = ctx.setups.values()
        if user_setup:
            setup_lines.append(user_setup.rstrip())
        if setup_lines:
            sections.append(self.config.SETUP_HEADER + '\n' + '\n'.join(setup_lines))

        sections.append(self.config.BODY_HEADER + '\n' + body)

        code = '\n\n'.join(s.rstrip() for s in sections if s.strip()) + '\n'
        ctx.close()
        logger.info("Generated %d lines of MicroPython", code.count('\n'))
        return code

    def generate(self, workspace: Workspace) -> GenerationResult:
        """Run init, traversal and finish; the context does not outlive the call."""
        ctx = self.init(workspace)
        try:
            body = self.blocks_to_code(ctx, workspace)
        except CodeGenerationError:
            logger.exception("Code generation aborted")
            ctx.close()
            raise
        warnings = list(ctx.warnings)
        variable_types = dict(ctx.variable_types)
        code = self.finish(ctx, body)
        return GenerationResult(code, warnings, variable_types)

    def workspace_to_code(self, workspace: Workspace) -> str:
        return self.generate(workspace).code


def generate(workspace: Workspace, config: Optional[GeneratorConfig] = None) -> GenerationResult:
    """Generate a program with the default rule table."""
    return MicropythonGenerator(config=config).generate(workspace)


def apply_warnings(workspace: Workspace, events: List[WarningEvent]) -> None:
    """Replay warning events onto the workspace blocks, in order."""
    blocks = {block.id: block for block in workspace.all_blocks()}
    for event in events:
        block = blocks.get(event.block_id)
        if block is None:
            logger.debug("Warning for unknown block %s dropped", event.block_id)
            continue
        block.set_warning_text(event.text, event.tag)
