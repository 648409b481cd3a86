#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LinkWeaver v0.1.0

Tests for scaffold path reconstruction.

Author: LinkWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import pytest

from linkweaver.assembly_core.data_structures import (
    EdgeKind,
    GraphEdge,
    GraphNode,
    NodeEnd,
    ScaffoldContig,
    ScaffoldGap,
)
from linkweaver.assembly_core.path_reconstructor_module import (
    DEFAULT_GAP_LENGTH,
    ScaffoldPathReconstructor,
)
from linkweaver.assembly_core.scaffold_graph_module import ScaffoldGraph
from linkweaver.errors import CyclicGraphError, MalformedGraphError


def make_graph(contigs, links=()):
    """
    Build a graph from contig names and (node, node, gap) link triples,
    e.g. ('aEND', 'bSTART', 120).
    """
    graph = ScaffoldGraph()
    for contig in contigs:
        graph.add_edge(GraphEdge(
            GraphNode(contig, NodeEnd.START),
            GraphNode(contig, NodeEnd.END),
            EdgeKind.CONTIG,
            label=contig,
        ))
    for node_a, node_b, gap in links:
        graph.add_edge(GraphEdge(
            GraphNode.parse(node_a),
            GraphNode.parse(node_b),
            EdgeKind.LINK,
            link_count=3,
            gap=gap,
        ))
    return graph


def entries(scaffold):
    return list(scaffold)


class TestLinearScaffolds:
    """Test reconstruction of linear chains."""

    def test_single_contig(self):
        result = ScaffoldPathReconstructor().reconstruct(make_graph(['a']))

        assert len(result.assembly) == 1
        assert entries(result.assembly.scaffolds[0]) == [ScaffoldContig('a')]
        assert result.num_termini == 2

    def test_single_join(self):
        graph = make_graph(['a', 'b'], [('aEND', 'bSTART', 120)])
        result = ScaffoldPathReconstructor().reconstruct(graph)

        assert len(result.assembly) == 1
        assert entries(result.assembly.scaffolds[0]) == [
            ScaffoldContig('a'), ScaffoldGap(120), ScaffoldContig('b'),
        ]

    def test_reversed_contig(self):
        graph = make_graph(['a', 'b'], [('aSTART', 'bSTART', 10)])
        (scaffold,) = ScaffoldPathReconstructor().reconstruct(graph).assembly

        assert entries(scaffold) == [
            ScaffoldContig('a', reverse=True), ScaffoldGap(10), ScaffoldContig('b'),
        ]

    def test_three_contigs_and_singleton(self):
        graph = make_graph(
            ['a', 'b', 'c', 'd'],
            [('aEND', 'bSTART', 600), ('bEND', 'cEND', 700)],
        )
        result = ScaffoldPathReconstructor().reconstruct(graph)

        assert len(result.assembly) == 2
        first, second = result.assembly
        assert entries(first) == [
            ScaffoldContig('a'), ScaffoldGap(600),
            ScaffoldContig('b'), ScaffoldGap(700),
            ScaffoldContig('c', reverse=True),
        ]
        assert entries(second) == [ScaffoldContig('d')]

    def test_every_contig_once(self):
        graph = make_graph(
            ['a', 'b', 'c', 'd', 'e'],
            [('aEND', 'cSTART', 1), ('cEND', 'eEND', 2), ('bSTART', 'dEND', 3)],
        )
        assembly = ScaffoldPathReconstructor().reconstruct(graph).assembly

        assert sorted(assembly.contig_names) == ['a', 'b', 'c', 'd', 'e']
        assert all(scaffold.is_valid() for scaffold in assembly)

    def test_graph_left_untouched(self):
        graph = make_graph(['a', 'b'], [('aEND', 'bSTART', 120)])
        ScaffoldPathReconstructor().reconstruct(graph)
        assert graph.edge_count == 3


class TestGapLengths:
    """Test which gap length each join gets."""

    def test_estimate_used(self):
        graph = make_graph(['a', 'b'], [('aEND', 'bSTART', -30)])
        (scaffold,) = ScaffoldPathReconstructor().reconstruct(graph).assembly
        assert scaffold.gaps == [ScaffoldGap(-30)]

    def test_default_without_estimate(self):
        graph = make_graph(['a', 'b'], [('aEND', 'bSTART', None)])
        (scaffold,) = ScaffoldPathReconstructor().reconstruct(graph).assembly
        assert scaffold.gaps == [ScaffoldGap(DEFAULT_GAP_LENGTH)]

    def test_estimates_disabled(self):
        graph = make_graph(['a', 'b'], [('aEND', 'bSTART', 120)])
        reconstructor = ScaffoldPathReconstructor(default_gap_length=50, use_estimated_gaps=False)
        (scaffold,) = reconstructor.reconstruct(graph).assembly
        assert scaffold.gaps == [ScaffoldGap(50)]


class TestMalformedGraphs:
    """Test rejection of graphs that are not linear chains."""

    def test_degree_three(self):
        graph = make_graph(
            ['a', 'b', 'c'],
            [('aEND', 'bSTART', 1), ('aEND', 'cSTART', 1)],
        )
        with pytest.raises(MalformedGraphError, match='1 or 2 edges'):
            ScaffoldPathReconstructor().reconstruct(graph)

    def test_isolated_node(self):
        graph = make_graph(['a'])
        graph.add_node(GraphNode('b', NodeEnd.START))
        with pytest.raises(MalformedGraphError):
            ScaffoldPathReconstructor().reconstruct(graph)

    def test_odd_number_of_ends(self):
        graph = make_graph(['a'])
        node = GraphNode('a', NodeEnd.END)
        graph.add_edge(GraphEdge(node, node, EdgeKind.LINK))
        with pytest.raises(MalformedGraphError, match='odd number'):
            ScaffoldPathReconstructor().validate(graph)

    def test_missing_contig_edge(self):
        graph = make_graph([], [('aEND', 'bSTART', 1)])
        with pytest.raises(MalformedGraphError, match='contig edge'):
            ScaffoldPathReconstructor().reconstruct(graph)


class TestCycles:
    """Test handling of circular components."""

    @staticmethod
    def _cyclic_graph():
        return make_graph(
            ['a', 'b', 'c'],
            [('aEND', 'bSTART', 1), ('bEND', 'aSTART', 1)],
        )

    def test_cycle_reported(self):
        result = ScaffoldPathReconstructor().reconstruct(self._cyclic_graph())

        assert result.has_cycles
        assert result.cyclic_components == [['a', 'b']]
        assert [s.contigs for s in result.assembly] == [[ScaffoldContig('c')]]

    def test_cycle_raises(self):
        with pytest.raises(CyclicGraphError) as excinfo:
            ScaffoldPathReconstructor(fail_on_cycles=True).reconstruct(self._cyclic_graph())
        assert excinfo.value.components == [['a', 'b']]

    def test_cycle_error_is_malformed_graph(self):
        assert issubclass(CyclicGraphError, MalformedGraphError)

# LinkWeaver v0.1.0
# Any usage is subject to this software's license.
