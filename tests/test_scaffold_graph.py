#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LinkWeaver v0.1.0

Tests for scaffold graph construction.

Author: LinkWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import pytest

from linkweaver.assembly_core.data_structures import (
    EdgeKind,
    EndLabel,
    EndPair,
    GraphEdge,
    GraphNode,
    NodeEnd,
    OrientationDecision,
)
from linkweaver.assembly_core.linkage_module import LinkageAggregator
from linkweaver.assembly_core.orientation_module import OrientationResolver, accepted_decisions
from linkweaver.assembly_core.scaffold_graph_module import (
    ScaffoldGraph,
    ScaffoldGraphBuilder,
    link_label,
)


def build_graph(links, lengths, max_distance, min_links=3, mean_insert_size=500):
    aggregator = LinkageAggregator()
    for link in links:
        aggregator.add_link(*link)
    resolver = OrientationResolver(max_distance, min_links, mean_insert_size)
    results = resolver.resolve_all(aggregator, lengths)
    return ScaffoldGraphBuilder(max_distance).build(lengths, accepted_decisions(results))


def edge_names(graph):
    return sorted(sorted((e.node_a.name, e.node_b.name)) for e in graph.edges.values())


TWO_LINKS = [
    ('contig2', 2500, '-', 'contig1', 100, '+'),
    ('contig2', 2501, '-', 'contig1', 10, '+'),
]
TWO_LENGTHS = {'contig1': 1000, 'contig2': 3000}


class TestScaffoldGraphBuilder:
    """Test graph construction from orientation decisions."""

    def test_one_join(self):
        graph = build_graph(TWO_LINKS, TWO_LENGTHS, 54000, min_links=0)

        assert graph.node_count == 4
        assert graph.edge_count == 3
        assert edge_names(graph) == [
            ['contig1END', 'contig1START'],
            ['contig1END', 'contig2START'],
            ['contig2END', 'contig2START'],
        ]

    def test_two_scaffolds(self):
        links = TWO_LINKS + [('contig3', 288, '+', 'contig4', 10, '-')]
        lengths = dict(TWO_LENGTHS, contig3=300, contig4=400)
        graph = build_graph(links, lengths, 54000, min_links=0)

        assert graph.node_count == 8
        assert graph.edge_count == 6
        assert ['contig3END', 'contig4START'] in edge_names(graph)

    def test_reads_too_far_from_ends(self):
        graph = build_graph(TWO_LINKS, TWO_LENGTHS, 10, min_links=0)

        assert graph.node_count == 4
        assert graph.edge_count == 2
        assert graph.link_edges() == []

    @pytest.mark.parametrize("min_links,expected_edges", [(1, 3), (2, 2), (3, 2)])
    def test_min_links(self, min_links, expected_edges):
        graph = build_graph(TWO_LINKS[:1], TWO_LENGTHS, 54000, min_links=min_links)
        assert graph.edge_count == expected_edges

    def test_default_min_links(self):
        aggregator = LinkageAggregator()
        aggregator.add_link(*TWO_LINKS[0])
        resolver = OrientationResolver(54000, 3, 500)
        decisions = accepted_decisions(resolver.resolve_all(aggregator, TWO_LENGTHS))
        assert ScaffoldGraphBuilder(54000).build(TWO_LENGTHS, decisions).edge_count == 2

    def test_unlinked_contigs_present(self):
        graph = build_graph([], {'a': 10, 'b': 20}, 100)
        assert graph.node_count == 4
        assert graph.contigs() == ['a', 'b']
        assert all(e.kind == EdgeKind.CONTIG for e in graph.edges.values())

    def test_contig_edge_attributes(self):
        graph = ScaffoldGraphBuilder(100).build({'short': 150, 'long': 5000}, [])
        edges = {e.label: e for e in graph.edges.values()}

        assert edges['short'].short_contig
        assert not edges['long'].short_contig

    def test_link_edge_label(self):
        graph = build_graph(TWO_LINKS, TWO_LENGTHS, 54000, min_links=0, mean_insert_size=0)
        (edge,) = graph.link_edges()

        assert edge.link_count == 2
        assert edge.label == link_label(2, edge.gap)
        assert edge.label.startswith('2links_dist')

    def test_unknown_contig(self):
        decision = OrientationDecision(
            'a', 'zzz',
            EndPair(EndLabel.CONTIG_END, EndLabel.CONTIG_START),
            supporting_links=[],
        )
        with pytest.raises(ValueError, match='unknown contig'):
            ScaffoldGraphBuilder(100).build({'a': 1000}, [decision])


class TestScaffoldGraph:
    """Test the adjacency-list graph."""

    @staticmethod
    def _edge(a, b, kind=EdgeKind.LINK):
        return GraphEdge(GraphNode.parse(a), GraphNode.parse(b), kind)

    def test_add_and_remove(self):
        graph = ScaffoldGraph()
        edge_id = graph.add_edge(self._edge('aEND', 'bSTART'))

        assert graph.degree(GraphNode('a', NodeEnd.END)) == 1
        removed = graph.remove_edge(edge_id)
        assert removed.node_b == GraphNode('b', NodeEnd.START)
        assert graph.degree(GraphNode('a', NodeEnd.END)) == 0
        assert graph.node_count == 2

    def test_copy_is_independent(self):
        graph = ScaffoldGraph()
        edge_id = graph.add_edge(self._edge('aEND', 'bSTART'))
        copy = graph.copy()
        copy.remove_edge(edge_id)

        assert graph.edge_count == 1
        assert copy.edge_count == 0

    def test_other_node(self):
        edge = self._edge('aEND', 'bSTART')
        assert edge.other_node(GraphNode('a', NodeEnd.END)) == GraphNode('b', NodeEnd.START)
        with pytest.raises(ValueError):
            edge.other_node(GraphNode('c', NodeEnd.END))

    def test_node_names(self):
        node = GraphNode.parse('scaffold_1_ENDSTART')
        assert node == GraphNode('scaffold_1_END', NodeEnd.START)
        assert node.partner().name == 'scaffold_1_ENDEND'
        with pytest.raises(ValueError):
            GraphNode.parse('contig1')

    def test_link_label(self):
        assert link_label(5, 120) == '5links_dist120'
        assert link_label(5, -40) == '5links_dist-40'
        assert link_label(5, None) == '5links'

# LinkWeaver v0.1.0
# Any usage is subject to this software's license.
