#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LinkWeaver v0.1.0

Graph persistence: the scaffold graph as a Graphviz DOT file.

The DOT file is meant to be inspected, rendered and edited by hand (for
instance to break a cycle or drop a doubtful join) and then read back for
scaffold reconstruction, so the reader accepts anything the writer emits
plus common hand edits: removed or reordered statements, unquoted
identifiers, edge chains and comments.

Format:
    graph G {
      node [shape=point];
      "ctg1START";
      "ctg1END";
      "ctg1START" -- "ctg1END" [style="setlinewidth(4)", label="ctg1", color="blue"];
      "ctg1END" -- "ctg2START" [label="5links_dist120"];
    }

Author: LinkWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from __future__ import annotations
import logging
import re
import shutil
import subprocess
from pathlib import Path
from typing import Optional

from ..assembly_core.data_structures import EdgeKind, GraphEdge, GraphNode
from ..assembly_core.scaffold_graph_module import ScaffoldGraph
from ..errors import MalformedGraphError

logger = logging.getLogger(__name__)

CONTIG_EDGE_STYLE = 'setlinewidth(4)'
LONG_CONTIG_COLOR = 'blue'
SHORT_CONTIG_COLOR = 'grey'

_ID = r'"(?:[^"\\]|\\.)*"|[\w.]+'
_ID_PATTERN = re.compile(_ID)
_EDGE_STATEMENT = re.compile(rf'^((?:{_ID})(?:\s*--\s*(?:{_ID}))+)\s*(\[.*\])?$', re.DOTALL)
_NODE_STATEMENT = re.compile(rf'^({_ID})\s*(\[.*\])?$', re.DOTALL)
_ATTRIBUTE = re.compile(rf'(\w+)\s*=\s*({_ID}|[^,;\s\]]+)')
_HEADER = re.compile(r'^\s*(strict\s+)?(graph|digraph)\s*([\w.]+|"[^"]*")?\s*\{', re.IGNORECASE)
_LINK_LABEL = re.compile(r'^(\d+)links(?:_dist(-?\d+))?$')
_KEYWORDS = {'node', 'edge', 'graph', 'subgraph'}


# ============================================================================
#                         WRITING
# ============================================================================

def _quote(value) -> str:
    text = str(value).replace('\\', '\\\\').replace('"', '\\"')
    return f'"{text}"'


def _format_attributes(attributes: dict) -> str:
    return '[' + ', '.join(f'{k}={_quote(v)}' for k, v in attributes.items()) + ']'


def format_dot(graph: ScaffoldGraph, name: str = 'G') -> str:
    """Render a scaffold graph as DOT text."""
    lines = [f'graph {name} {{', '  node [shape=point];']
    for node in graph.nodes:
        lines.append(f'  {_quote(node.name)};')
    for edge in graph.edges.values():
        if edge.kind == EdgeKind.CONTIG:
            attributes = {
                'style': CONTIG_EDGE_STYLE,
                'label': edge.label or edge.node_a.contig,
                'color': SHORT_CONTIG_COLOR if edge.short_contig else LONG_CONTIG_COLOR,
            }
        else:
            attributes = {'label': edge.label}
        lines.append(
            f'  {_quote(edge.node_a.name)} -- {_quote(edge.node_b.name)} '
            f'{_format_attributes(attributes)};'
        )
    lines.append('}')
    return '\n'.join(lines) + '\n'


def write_dot(graph: ScaffoldGraph, path: str | Path) -> Path:
    """Write a scaffold graph to a DOT file."""
    path = Path(path)
    path.write_text(format_dot(graph))
    logger.info(
        f"Wrote graph with {graph.node_count} nodes and {graph.edge_count} edges to {path}"
    )
    return path


def render_dot(
    dot_path: str | Path,
    formats: tuple = ('png', 'svg'),
    program: str = 'neato',
) -> list[Path]:
    """
    Render a DOT file with Graphviz, if it is installed.

    Returns:
        Paths of the rendered images (empty if Graphviz is unavailable)
    """
    dot_path = Path(dot_path)
    executable = shutil.which(program)
    if executable is None:
        logger.warning(f"Graphviz '{program}' not found on PATH, not rendering {dot_path}")
        return []

    outputs = []
    for fmt in formats:
        output = dot_path.with_name(f"{dot_path.stem}.{fmt}")
        result = subprocess.run(
            [executable, f'-T{fmt}', str(dot_path), '-o', str(output)],
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            logger.warning(f"{program} failed to render {output}: {result.stderr.strip()}")
            continue
        outputs.append(output)
    return outputs


# ============================================================================
#                         READING
# ============================================================================

def _unquote(token: str) -> str:
    if token.startswith('"') and token.endswith('"') and len(token) >= 2:
        return re.sub(r'\\(.)', r'\1', token[1:-1])
    return token


def _strip_comments(text: str) -> str:
    out = []
    i = 0
    in_quote = False
    while i < len(text):
        ch = text[i]
        if in_quote:
            out.append(ch)
            if ch == '\\' and i + 1 < len(text):
                out.append(text[i + 1])
                i += 1
            elif ch == '"':
                in_quote = False
        elif ch == '"':
            in_quote = True
            out.append(ch)
        elif text.startswith('//', i):
            while i < len(text) and text[i] != '\n':
                i += 1
            continue
        elif text.startswith('/*', i):
            end = text.find('*/', i + 2)
            i = len(text) if end == -1 else end + 2
            continue
        elif ch == '#' and not text[text.rfind('\n', 0, i) + 1:i].strip():
            # '#' lines, possibly indented
            while i < len(text) and text[i] != '\n':
                i += 1
            continue
        else:
            out.append(ch)
        i += 1
    return ''.join(out)


def _split_statements(body: str) -> list[str]:
    """Split on ';' and newlines outside quotes and attribute lists."""
    statements = []
    current = []
    in_quote = False
    depth = 0
    i = 0
    while i < len(body):
        ch = body[i]
        if in_quote:
            current.append(ch)
            if ch == '\\' and i + 1 < len(body):
                current.append(body[i + 1])
                i += 1
            elif ch == '"':
                in_quote = False
        elif ch == '"':
            in_quote = True
            current.append(ch)
        elif ch == '[':
            depth += 1
            current.append(ch)
        elif ch == ']':
            depth -= 1
            current.append(ch)
        elif ch in ';\n' and depth == 0:
            statements.append(''.join(current).strip())
            current = []
        else:
            current.append(ch)
        i += 1
    statements.append(''.join(current).strip())
    return [s for s in statements if s]


def _parse_attributes(text: Optional[str]) -> dict[str, str]:
    if not text:
        return {}
    return {key: _unquote(value) for key, value in _ATTRIBUTE.findall(text[1:-1])}


def _parse_node(token: str, statement: str) -> GraphNode:
    try:
        return GraphNode.parse(_unquote(token))
    except ValueError as e:
        raise MalformedGraphError(f"{e} in statement: {statement}") from e


def _make_edge(node_a: GraphNode, node_b: GraphNode, attributes: dict) -> GraphEdge:
    label = attributes.get('label', '')
    if node_a.contig == node_b.contig and node_a.end != node_b.end:
        return GraphEdge(
            node_a=node_a,
            node_b=node_b,
            kind=EdgeKind.CONTIG,
            label=label or node_a.contig,
            short_contig=attributes.get('color') == SHORT_CONTIG_COLOR,
        )

    link_count = gap = None
    match = _LINK_LABEL.match(label)
    if match:
        link_count = int(match.group(1))
        gap = int(match.group(2)) if match.group(2) is not None else None
    elif label:
        logger.debug(f"Link label {label!r} carries no gap estimate")
    return GraphEdge(
        node_a=node_a,
        node_b=node_b,
        kind=EdgeKind.LINK,
        label=label,
        link_count=link_count,
        gap=gap,
    )


def parse_dot(text: str) -> ScaffoldGraph:
    """
    Parse DOT text written by ``format_dot`` (possibly hand edited).

    Raises:
        MalformedGraphError: If the text is not an undirected graph of
            <contig>START / <contig>END nodes
    """
    text = _strip_comments(text)
    header = _HEADER.match(text)
    if not header:
        raise MalformedGraphError("DOT input does not start with 'graph <name> {'")
    if header.group(2).lower() == 'digraph':
        raise MalformedGraphError("Scaffold graphs are undirected; found a digraph")
    close = text.rfind('}')
    if close < header.end():
        raise MalformedGraphError("DOT input has no closing '}'")
    body = text[header.end():close]

    graph = ScaffoldGraph()
    for statement in _split_statements(body):
        head = statement.split('[', 1)[0].strip()
        if head.lower() in _KEYWORDS or ('=' in head and '--' not in head):
            continue

        edge_match = _EDGE_STATEMENT.match(statement)
        if edge_match:
            tokens = _ID_PATTERN.findall(edge_match.group(1))
            nodes = [_parse_node(t, statement) for t in tokens]
            attributes = _parse_attributes(edge_match.group(2))
            for node_a, node_b in zip(nodes, nodes[1:]):
                if node_a == node_b:
                    raise MalformedGraphError(f"Self loop on {node_a} in statement: {statement}")
                graph.add_edge(_make_edge(node_a, node_b, attributes))
            continue

        node_match = _NODE_STATEMENT.match(statement)
        if node_match:
            graph.add_node(_parse_node(node_match.group(1), statement))
            continue

        raise MalformedGraphError(f"Cannot parse DOT statement: {statement}")

    num_contigs = len(graph.contigs())
    logger.info(
        f"Parsed graph containing {graph.node_count} nodes (i.e. {num_contigs} contigs) "
        f"and {graph.edge_count} edges (i.e. {len(graph.link_edges())} links between contigs)"
    )
    return graph


def read_dot(path: str | Path) -> ScaffoldGraph:
    """Read a scaffold graph from a DOT file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Graph file not found: {path}")
    return parse_dot(path.read_text())

# LinkWeaver v0.1.0
# Any usage is subject to this software's license.
