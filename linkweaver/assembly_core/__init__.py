"""
LinkWeaver v0.1.0

Core scaffolding modules.

1. data_structures.py - links, decisions, graph nodes/edges, scaffolds
2. linkage_module.py - end classification and link aggregation
3. orientation_module.py - orientation voting and gap estimation
4. scaffold_graph_module.py - scaffold graph and its builder
5. path_reconstructor_module.py - scaffold paths from the graph

Author: LinkWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from .data_structures import (
    Assembly,
    ContigLengths,
    DIRECTION_CODES,
    EdgeKind,
    EndLabel,
    EndPair,
    GraphEdge,
    GraphNode,
    Link,
    LinkGroup,
    LinkResolution,
    NodeEnd,
    OrientationDecision,
    RejectionReason,
    Scaffold,
    ScaffoldContig,
    ScaffoldGap,
)
from .linkage_module import LinkageAggregator, classify_end, classify_link_ends
from .orientation_module import (
    OrientationResolver,
    ResolutionSummary,
    accepted_decisions,
    aggregate_gap,
    estimate_gap,
    summarize_resolutions,
)
from .scaffold_graph_module import ScaffoldGraph, ScaffoldGraphBuilder, link_label
from .path_reconstructor_module import (
    DEFAULT_GAP_LENGTH,
    ReconstructionResult,
    ScaffoldPathReconstructor,
)

__all__ = [
    # Data structures
    "Assembly",
    "ContigLengths",
    "DIRECTION_CODES",
    "EdgeKind",
    "EndLabel",
    "EndPair",
    "GraphEdge",
    "GraphNode",
    "Link",
    "LinkGroup",
    "LinkResolution",
    "NodeEnd",
    "OrientationDecision",
    "RejectionReason",
    "Scaffold",
    "ScaffoldContig",
    "ScaffoldGap",

    # Linkage
    "LinkageAggregator",
    "classify_end",
    "classify_link_ends",

    # Orientation and gaps
    "OrientationResolver",
    "ResolutionSummary",
    "accepted_decisions",
    "aggregate_gap",
    "estimate_gap",
    "summarize_resolutions",

    # Graph
    "ScaffoldGraph",
    "ScaffoldGraphBuilder",
    "link_label",

    # Paths
    "DEFAULT_GAP_LENGTH",
    "ReconstructionResult",
    "ScaffoldPathReconstructor",
]

# LinkWeaver v0.1.0
# Any usage is subject to this software's license.
