#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LinkWeaver v0.1.0

Scaffold path reconstruction: walk the linear chains of a scaffold graph
from their degree-1 termini and emit ordered, oriented contigs separated by
gaps.

Every chain alternates contig edges and link edges, so a walk from one
terminus crosses a contig (START->END is forward, END->START is reversed),
then a link, then the next contig, until it reaches the terminus at the
other end of the chain. Components without termini are cycles; they cannot
be linearised and are reported rather than dropped.

Author: LinkWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set

from ..errors import CyclicGraphError, MalformedGraphError
from .data_structures import (
    Assembly,
    GraphEdge,
    GraphNode,
    NodeEnd,
    Scaffold,
    ScaffoldContig,
    ScaffoldGap,
)
from .scaffold_graph_module import ScaffoldGraph

logger = logging.getLogger(__name__)

DEFAULT_GAP_LENGTH = 25


@dataclass
class ReconstructionResult:
    """Scaffolds recovered from a graph, plus any cyclic leftovers."""
    assembly: Assembly
    cyclic_components: List[List[str]] = field(default_factory=list)
    num_termini: int = 0

    @property
    def has_cycles(self) -> bool:
        return bool(self.cyclic_components)


class ScaffoldPathReconstructor:
    """
    Turn a linear scaffold graph into an Assembly.

    Args:
        default_gap_length: Gap length used when a link edge has no estimate
        use_estimated_gaps: Use link edges' gap estimates where present
        fail_on_cycles: Raise CyclicGraphError instead of reporting cycles
        logger: Logger to report to (defaults to the module logger)
    """

    def __init__(
        self,
        default_gap_length: int = DEFAULT_GAP_LENGTH,
        use_estimated_gaps: bool = True,
        fail_on_cycles: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        self.default_gap_length = default_gap_length
        self.use_estimated_gaps = use_estimated_gaps
        self.fail_on_cycles = fail_on_cycles
        self.logger = logger or logging.getLogger(__name__)

    def validate(self, graph: ScaffoldGraph) -> List[GraphNode]:
        """
        Check chain invariants and return the termini in node order.

        Raises:
            MalformedGraphError: A node has a degree other than 1 or 2, or the
                number of termini is odd
        """
        bad = [node for node in graph.nodes if graph.degree(node) not in (1, 2)]
        if bad:
            examples = ', '.join(f"{n} (degree {graph.degree(n)})" for n in bad[:5])
            raise MalformedGraphError(
                f"{len(bad)} graph node(s) do not have 1 or 2 edges, e.g. {examples}"
            )

        termini = [node for node in graph.nodes if graph.degree(node) == 1]
        if len(termini) % 2 != 0:
            raise MalformedGraphError(
                f"Found an odd number of scaffold ends ({len(termini)})"
            )
        return termini

    def reconstruct(self, graph: ScaffoldGraph) -> ReconstructionResult:
        """Walk every chain of ``graph``; the graph itself is left untouched."""
        work = graph.copy()
        termini = self.validate(work)
        self.logger.debug(f"Ends of scaffolds: {', '.join(str(t) for t in termini)}")

        remaining = list(termini)
        terminus_set: Set[GraphNode] = set(termini)
        assembly = Assembly()

        while remaining:
            start = remaining.pop(0)
            terminus_set.discard(start)
            scaffold = Scaffold()
            stop = self._cross_contig(work, start, scaffold)

            while stop not in terminus_set:
                link_edge = self._take_single_edge(work, stop)
                scaffold.append_gap(self._gap_for(link_edge))
                start = self._other_end(link_edge, stop)
                stop = self._cross_contig(work, start, scaffold)

            terminus_set.discard(stop)
            remaining.remove(stop)
            assembly.scaffolds.append(scaffold)

        cycles = self._leftover_components(work)
        if cycles:
            if self.fail_on_cycles:
                raise CyclicGraphError(cycles)
            for component in cycles:
                self.logger.warning(
                    f"Circular component of {len(component)} contigs was not scaffolded: "
                    f"{', '.join(component)}"
                )

        self.logger.info(
            f"Reconstructed {len(assembly)} scaffolds from {len(termini)} scaffold ends"
            + (f", {len(cycles)} circular components left unresolved" if cycles else "")
        )
        return ReconstructionResult(
            assembly=assembly,
            cyclic_components=cycles,
            num_termini=len(termini),
        )

    def _cross_contig(self, work: ScaffoldGraph, start: GraphNode, scaffold: Scaffold) -> GraphNode:
        """Consume the contig edge at ``start``, append the contig, return its far end."""
        edge = self._take_single_edge(work, start)
        stop = self._other_end(edge, start)
        if stop != start.partner():
            raise MalformedGraphError(
                f"Expected a contig edge from {start}, found an edge to {stop}; "
                f"every scaffold must alternate contigs and links"
            )
        scaffold.append_contig(ScaffoldContig(start.contig, reverse=start.end == NodeEnd.END))
        return stop

    @staticmethod
    def _take_single_edge(work: ScaffoldGraph, node: GraphNode) -> GraphEdge:
        edge_ids = work.edge_ids_of(node)
        if len(edge_ids) != 1:
            raise MalformedGraphError(
                f"Node {node} has {len(edge_ids)} unused edges where one was expected"
            )
        return work.remove_edge(edge_ids[0])

    @staticmethod
    def _other_end(edge: GraphEdge, node: GraphNode) -> GraphNode:
        try:
            return edge.other_node(node)
        except ValueError as e:
            raise MalformedGraphError(str(e)) from e

    def _gap_for(self, edge: GraphEdge) -> ScaffoldGap:
        if self.use_estimated_gaps and edge.gap is not None:
            return ScaffoldGap(edge.gap)
        return ScaffoldGap(self.default_gap_length)

    @staticmethod
    def _leftover_components(work: ScaffoldGraph) -> List[List[str]]:
        """Group edges never reached from a terminus into connected components."""
        if not work.edges:
            return []
        seen: Set[GraphNode] = set()
        components = []
        for node in work.nodes:
            if node in seen or not work.degree(node):
                continue
            stack = [node]
            contigs = set()
            seen.add(node)
            while stack:
                current = stack.pop()
                contigs.add(current.contig)
                for edge in work.edges_of(current):
                    for neighbour in (edge.node_a, edge.node_b):
                        if neighbour not in seen:
                            seen.add(neighbour)
                            stack.append(neighbour)
            components.append(sorted(contigs))
        return components

# LinkWeaver v0.1.0
# Any usage is subject to this software's license.
