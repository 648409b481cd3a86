#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LinkWeaver v0.1.0

Core data structures shared by the linkage, orientation, graph and
scaffold-path modules.

Read-pair links are stored canonically (contig1 < contig2) so that a pair
and its reverse hash identically. The scaffold graph has two nodes per
contig, one for each end, joined by a mandatory contig edge; inter-contig
link edges join the ends that abut.

Author: LinkWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Union

ContigLengths = Dict[str, int]


# ============================================================================
#                         READ-PAIR EVIDENCE
# ============================================================================

FORWARD = '+'
REVERSE = '-'
DIRECTIONS = (FORWARD, REVERSE)

# Strand codes used in the linkage evidence table
DIRECTION_CODES = {'0': FORWARD, '1': REVERSE}


class EndLabel(str, Enum):
    """Which end of a contig a mapped read implicates."""
    CONTIG_START = 'contig_start'
    CONTIG_END = 'contig_end'
    INCONSISTENT = 'inconsistent'
    NOT_NEAR_END = 'not_near_end'

    @property
    def is_contig_end(self) -> bool:
        """True for the two labels that can take part in a join."""
        return self in (EndLabel.CONTIG_START, EndLabel.CONTIG_END)


class EndPair(NamedTuple):
    """End labels for the first and second contig of a canonical pair."""
    first: EndLabel
    second: EndLabel

    @property
    def is_candidate(self) -> bool:
        return self.first.is_contig_end and self.second.is_contig_end

    def __str__(self) -> str:
        return f"{self.first.value}/{self.second.value}"


@dataclass(frozen=True)
class Link:
    """
    One read pair mapped to two different contigs.

    Attributes:
        contig1: Lexicographically smaller contig name
        contig2: Lexicographically larger contig name
        position1: Read position on contig1 (0-based offset)
        position2: Read position on contig2
        direction1: Strand of the read on contig1 ('+' or '-')
        direction2: Strand of the read on contig2
        read_name: Optional read identifier, kept for reports
    """
    contig1: str
    contig2: str
    position1: int
    position2: int
    direction1: str
    direction2: str
    read_name: Optional[str] = None

    @classmethod
    def create(
        cls,
        contig_a: str,
        position_a: int,
        direction_a: str,
        contig_b: str,
        position_b: int,
        direction_b: str,
        read_name: Optional[str] = None,
    ) -> 'Link':
        """Build a link with its two sides ordered by contig name."""
        one = (contig_a, position_a, direction_a)
        two = (contig_b, position_b, direction_b)
        first, second = sorted((one, two), key=lambda side: side[0])
        return cls(
            contig1=first[0],
            contig2=second[0],
            position1=first[1],
            position2=second[1],
            direction1=first[2],
            direction2=second[2],
            read_name=read_name,
        )

    @property
    def key(self) -> tuple:
        return (self.contig1, self.contig2)


@dataclass
class LinkGroup:
    """All links between one canonical pair of contigs."""
    contig1: str
    contig2: str
    links: List[Link] = field(default_factory=list)

    @property
    def key(self) -> tuple:
        return (self.contig1, self.contig2)

    def __len__(self) -> int:
        return len(self.links)


# ============================================================================
#                         ORIENTATION DECISIONS
# ============================================================================

class RejectionReason(str, Enum):
    """Why a contig pair produced no adjacency."""
    NO_CANDIDATE_BUCKETS = 'no_candidate_buckets'
    INSUFFICIENT_LINKS = 'insufficient_links'
    TIED_ORIENTATION = 'tied_orientation'


@dataclass
class OrientationDecision:
    """
    Winning end combination for a contig pair.

    Attributes:
        contig1: First contig of the canonical pair
        contig2: Second contig of the canonical pair
        ends: Abutting ends, always drawn from start/end
        supporting_links: Links in the winning bucket
        rejected_links: Every other link of the pair
        gap: Estimated bases between the contigs (negative means overlap)
    """
    contig1: str
    contig2: str
    ends: EndPair
    supporting_links: List[Link]
    rejected_links: List[Link] = field(default_factory=list)
    gap: Optional[int] = None

    def __post_init__(self):
        if not self.ends.is_candidate:
            raise ValueError(
                f"Orientation decision for {self.contig1}/{self.contig2} "
                f"must join contig ends, got {self.ends}"
            )

    @property
    def num_links(self) -> int:
        return len(self.supporting_links)


@dataclass
class LinkResolution:
    """Outcome of resolving one link group: a decision or a rejection."""
    contig1: str
    contig2: str
    decision: Optional[OrientationDecision] = None
    rejection: Optional[RejectionReason] = None
    rejected_links: List[Link] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.decision is not None

    @property
    def consistent_links(self) -> List[Link]:
        return self.decision.supporting_links if self.decision else []


# ============================================================================
#                         SCAFFOLD GRAPH
# ============================================================================

class NodeEnd(str, Enum):
    START = 'START'
    END = 'END'


_NODE_NAME = re.compile(r'^(.+)(START|END)$')


class GraphNode(NamedTuple):
    """One end of a contig in the scaffold graph."""
    contig: str
    end: NodeEnd

    @property
    def name(self) -> str:
        return f"{self.contig}{self.end.value}"

    @classmethod
    def parse(cls, name: str) -> 'GraphNode':
        """Inverse of ``name``: 'ctg7START' -> GraphNode('ctg7', START)."""
        match = _NODE_NAME.match(name)
        if not match:
            raise ValueError(
                f"Unexpected node name {name!r}: expected <contig>START or <contig>END"
            )
        return cls(match.group(1), NodeEnd(match.group(2)))

    @classmethod
    def for_label(cls, contig: str, label: EndLabel) -> 'GraphNode':
        if label == EndLabel.CONTIG_START:
            return cls(contig, NodeEnd.START)
        if label == EndLabel.CONTIG_END:
            return cls(contig, NodeEnd.END)
        raise ValueError(f"No graph node for end label {label} of {contig}")

    def partner(self) -> 'GraphNode':
        """The node at the other end of the same contig."""
        other = NodeEnd.END if self.end == NodeEnd.START else NodeEnd.START
        return GraphNode(self.contig, other)

    def __str__(self) -> str:
        return self.name


class EdgeKind(str, Enum):
    CONTIG = 'contig'  # joins a contig's own START and END
    LINK = 'link'      # read-pair adjacency between two contigs


@dataclass
class GraphEdge:
    """Undirected edge of the scaffold graph."""
    node_a: GraphNode
    node_b: GraphNode
    kind: EdgeKind
    label: str = ''
    link_count: Optional[int] = None
    gap: Optional[int] = None
    short_contig: bool = False

    def other_node(self, node: GraphNode) -> GraphNode:
        """Endpoint opposite ``node``; ``node`` must be exactly one endpoint."""
        if node == self.node_a and node != self.node_b:
            return self.node_b
        if node == self.node_b and node != self.node_a:
            return self.node_a
        raise ValueError(f"{node} is not a distinct endpoint of edge {self}")

    def __str__(self) -> str:
        return f"{self.node_a} -- {self.node_b}"


# ============================================================================
#                         SCAFFOLDS
# ============================================================================

@dataclass(frozen=True)
class ScaffoldContig:
    """A contig placed in a scaffold, possibly reverse complemented."""
    name: str
    reverse: bool = False


@dataclass(frozen=True)
class ScaffoldGap:
    """Run of unknown bases between two scaffolded contigs."""
    length: int


ScaffoldEntry = Union[ScaffoldContig, ScaffoldGap]


@dataclass
class Scaffold:
    """Alternating contigs and gaps, starting and ending with a contig."""
    entries: List[ScaffoldEntry] = field(default_factory=list)

    def append_contig(self, contig: ScaffoldContig):
        if self.entries and isinstance(self.entries[-1], ScaffoldContig):
            raise ValueError(f"Scaffold needs a gap before contig {contig.name}")
        self.entries.append(contig)

    def append_gap(self, gap: ScaffoldGap):
        if not self.entries or isinstance(self.entries[-1], ScaffoldGap):
            raise ValueError("A gap must follow a contig")
        self.entries.append(gap)

    @property
    def contigs(self) -> List[ScaffoldContig]:
        return [e for e in self.entries if isinstance(e, ScaffoldContig)]

    @property
    def gaps(self) -> List[ScaffoldGap]:
        return [e for e in self.entries if isinstance(e, ScaffoldGap)]

    def is_valid(self) -> bool:
        """True if entries alternate and start and end with a contig."""
        if not self.entries:
            return False
        for i, entry in enumerate(self.entries):
            expected = ScaffoldContig if i % 2 == 0 else ScaffoldGap
            if not isinstance(entry, expected):
                return False
        return isinstance(self.entries[-1], ScaffoldContig)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)


@dataclass
class Assembly:
    """Ordered scaffolds, one per linear chain of the graph."""
    scaffolds: List[Scaffold] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.scaffolds)

    def __iter__(self):
        return iter(self.scaffolds)

    @property
    def contig_names(self) -> List[str]:
        return [c.name for s in self.scaffolds for c in s.contigs]

# LinkWeaver v0.1.0
# Any usage is subject to this software's license.
