# Copyright (c) 2025 Kutay Demir.
# Licensed under the PolyForm Shield License 1.0.0. See LICENSE file for details.

"""
Workspace container for block graphs.

A workspace holds the top-level blocks handed over by the editor. It offers
the traversal helpers the generator needs: ordered top blocks, every block
in depth-first order, the variable names in use, and a structural check that
the connections form a forest before any code is emitted.
"""

import logging
from typing import Dict, Iterable, List, Optional

import networkx as nx

from mpyblocks.codegen.errors import WorkspaceError
from mpyblocks.workspace.block import Block

logger = logging.getLogger(__name__)


class Workspace:
    """
    Ordered collection of top-level blocks.
    """

    def __init__(self, blocks: Optional[Iterable[Block]] = None) -> None:
        self._top_blocks: List[Block] = []
        for block in blocks or []:
            self.add_top_block(block)

    def add_top_block(self, block: Block) -> Block:
        self._top_blocks.append(block)
        return block

    def top_blocks(self, ordered: bool = False) -> List[Block]:
        """
        Return the top-level blocks.

        Args:
            ordered: Sort by workspace position (top to bottom, then left to right)
        """
        if ordered:
            return sorted(self._top_blocks, key=lambda b: (b.y, b.x))
        return list(self._top_blocks)

    def to_graph(self) -> nx.DiGraph:
        """
        Build a directed graph of block connections.

        Nodes are block ids carrying the block under the 'block' attribute;
        edges point from parent to child and carry the input name (or 'next')
        under 'relation'.
        """
        graph = nx.DiGraph()
        pending = list(self._top_blocks)
        while pending:
            block = pending.pop()
            if graph.nodes.get(block.id, {}).get('block') is not None:
                continue
            graph.add_node(block.id, block=block)
            for relation, child in block.children():
                graph.add_edge(block.id, child.id, relation=relation)
                pending.append(child)
        return graph

    def validate(self) -> nx.DiGraph:
        """
        Check that the blocks form a forest.

        Returns:
            The connection graph, for callers that want to reuse it

        Raises:
            WorkspaceError: If a block is reachable through a cycle or has
                more than one parent
        """
        graph = self.to_graph()
        try:
            cycle = nx.find_cycle(graph)
        except nx.NetworkXNoCycle:
            cycle = None
        if cycle:
            path = ' -> '.join(graph.nodes[u]['block'].type for u, _ in cycle)
            raise WorkspaceError(f"Block graph has a cycle: {path}")

        shared = [n for n, degree in graph.in_degree() if degree > 1]
        if shared:
            raise WorkspaceError(
                f"Blocks connected to more than one parent: {', '.join(sorted(shared))}")
        return graph

    def all_blocks(self) -> List[Block]:
        """Every block in the workspace, depth-first from each top block."""
        blocks = []
        for top in self.top_blocks(ordered=True):
            blocks.extend(top.get_descendants())
        return blocks

    def get_block_by_id(self, block_id: str) -> Optional[Block]:
        for block in self.all_blocks():
            if block.id == block_id:
                return block
        return None

    def all_variables(self) -> List[str]:
        """Distinct variable names used anywhere, in first-use order."""
        names: List[str] = []
        for block in self.all_blocks():
            for name in block.get_vars():
                if name not in names:
                    names.append(name)
        return names

    def procedure_definitions(self) -> Dict[str, Block]:
        """Map procedure name -> defining block."""
        definitions = {}
        for block in self.top_blocks(ordered=True):
            if block.type in ('procedures_defreturn', 'procedures_defnoreturn'):
                name = block.get_field_value('NAME')
                if name in definitions:
                    logger.warning("Procedure '%s' is defined more than once", name)
                    continue
                definitions[name] = block
        return definitions
