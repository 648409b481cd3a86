#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LinkWeaver v0.1.0

Scaffold graph: an undirected adjacency-list graph with two nodes per
contig (START and END), a mandatory contig edge between them, and one link
edge per resolved contig pair.

Author: LinkWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .data_structures import (
    ContigLengths,
    EdgeKind,
    GraphEdge,
    GraphNode,
    NodeEnd,
    OrientationDecision,
)

logger = logging.getLogger(__name__)


def link_label(link_count: int, gap: Optional[int]) -> str:
    """Label of a link edge, e.g. '12links_dist-40'."""
    if gap is None:
        return f"{link_count}links"
    return f"{link_count}links_dist{gap}"


@dataclass
class ScaffoldGraph:
    """
    Undirected multigraph keyed by GraphNode.

    Edges are stored by integer id; ``adjacency`` maps every node to the ids
    of its incident edges in insertion order.
    """
    nodes: List[GraphNode] = field(default_factory=list)
    edges: Dict[int, GraphEdge] = field(default_factory=dict)
    adjacency: Dict[GraphNode, List[int]] = field(default_factory=dict)
    _next_edge_id: int = 0

    def add_node(self, node: GraphNode):
        if node not in self.adjacency:
            self.nodes.append(node)
            self.adjacency[node] = []

    def add_edge(self, edge: GraphEdge) -> int:
        """Add an edge, creating its endpoints if needed. Returns the edge id."""
        self.add_node(edge.node_a)
        self.add_node(edge.node_b)
        edge_id = self._next_edge_id
        self._next_edge_id += 1
        self.edges[edge_id] = edge
        self.adjacency[edge.node_a].append(edge_id)
        if edge.node_b != edge.node_a:
            self.adjacency[edge.node_b].append(edge_id)
        return edge_id

    def remove_edge(self, edge_id: int) -> GraphEdge:
        """Remove an edge from both endpoints' adjacency lists."""
        edge = self.edges.pop(edge_id)
        self.adjacency[edge.node_a].remove(edge_id)
        if edge.node_b != edge.node_a:
            self.adjacency[edge.node_b].remove(edge_id)
        return edge

    def edge_ids_of(self, node: GraphNode) -> List[int]:
        return list(self.adjacency.get(node, []))

    def edges_of(self, node: GraphNode) -> List[GraphEdge]:
        return [self.edges[eid] for eid in self.adjacency.get(node, [])]

    def degree(self, node: GraphNode) -> int:
        return len(self.adjacency.get(node, []))

    def contigs(self) -> List[str]:
        seen = []
        for node in self.nodes:
            if node.contig not in seen:
                seen.append(node.contig)
        return seen

    def link_edges(self) -> List[GraphEdge]:
        return [e for e in self.edges.values() if e.kind == EdgeKind.LINK]

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def copy(self) -> 'ScaffoldGraph':
        """Structural copy; edge objects are shared, adjacency lists are not."""
        return ScaffoldGraph(
            nodes=list(self.nodes),
            edges=dict(self.edges),
            adjacency={node: list(ids) for node, ids in self.adjacency.items()},
            _next_edge_id=self._next_edge_id,
        )


class ScaffoldGraphBuilder:
    """
    Build the scaffold graph from contig lengths and orientation decisions.

    Args:
        max_distance: End-proximity threshold; contigs shorter than twice this
            are flagged as short, since both of their ends are "near"
        logger: Logger to report to (defaults to the module logger)
    """

    def __init__(self, max_distance: int, logger: Optional[logging.Logger] = None):
        self.max_distance = max_distance
        self.logger = logger or logging.getLogger(__name__)

    def build(
        self,
        lengths: ContigLengths,
        decisions: Iterable[OrientationDecision],
    ) -> ScaffoldGraph:
        graph = ScaffoldGraph()

        for contig, length in lengths.items():
            graph.add_edge(GraphEdge(
                node_a=GraphNode(contig, NodeEnd.START),
                node_b=GraphNode(contig, NodeEnd.END),
                kind=EdgeKind.CONTIG,
                label=contig,
                short_contig=length < self.max_distance * 2,
            ))

        num_links = 0
        for decision in decisions:
            for contig in (decision.contig1, decision.contig2):
                if contig not in lengths:
                    raise ValueError(f"Decision references unknown contig {contig}")
            from_node = GraphNode.for_label(decision.contig1, decision.ends.first)
            to_node = GraphNode.for_label(decision.contig2, decision.ends.second)
            graph.add_edge(GraphEdge(
                node_a=from_node,
                node_b=to_node,
                kind=EdgeKind.LINK,
                label=link_label(decision.num_links, decision.gap),
                link_count=decision.num_links,
                gap=decision.gap,
            ))
            num_links += 1

        self.logger.info(
            f"Built scaffold graph with {graph.node_count} nodes "
            f"({len(lengths)} contigs) and {graph.edge_count} edges "
            f"({num_links} links between contigs)"
        )
        return graph

# LinkWeaver v0.1.0
# Any usage is subject to this software's license.
