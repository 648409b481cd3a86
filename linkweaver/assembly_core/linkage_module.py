#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LinkWeaver v0.1.0

Linkage evidence: end classification of mapped reads and aggregation of
read-pair links by contig pair.

A read of a pair is informative only when it maps within ``max_distance``
of a contig boundary and points out of the contig towards that boundary.
Reads near the start must map on the reverse strand, reads near the end on
the forward strand. On a contig shorter than ``2 * max_distance`` both
boundaries are near, so the strand alone decides.

Author: LinkWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from typing import Dict, Iterator, List, Optional, Tuple

from .data_structures import (
    DIRECTIONS,
    FORWARD,
    REVERSE,
    EndLabel,
    EndPair,
    Link,
    LinkGroup,
)

logger = logging.getLogger(__name__)


# ============================================================================
#                         LINK CLASSIFIER
# ============================================================================

def classify_end(
    max_distance: int,
    contig_length: int,
    position: int,
    direction: str,
) -> EndLabel:
    """
    Label the contig end implicated by one mapped read.

    Args:
        max_distance: How far from a boundary a read may map and still count
        contig_length: Length of the contig the read maps to
        position: Mapped position of the read on the contig
        direction: '+' or '-' strand of the mapping

    Returns:
        EndLabel for the read

    Raises:
        ValueError: If ``direction`` is not '+' or '-'
    """
    if direction not in DIRECTIONS:
        raise ValueError(f"Unexpected read direction {direction!r}")

    near_start = position < max_distance
    near_end = contig_length - position < max_distance

    if near_start and near_end:
        return EndLabel.CONTIG_END if direction == FORWARD else EndLabel.CONTIG_START
    if near_start:
        return EndLabel.CONTIG_START if direction == REVERSE else EndLabel.INCONSISTENT
    if near_end:
        return EndLabel.CONTIG_END if direction == FORWARD else EndLabel.INCONSISTENT
    return EndLabel.NOT_NEAR_END


def classify_link_ends(
    max_distance: int,
    contig1_length: int,
    contig2_length: int,
    link: Link,
) -> EndPair:
    """Classify both sides of a link independently."""
    return EndPair(
        classify_end(max_distance, contig1_length, link.position1, link.direction1),
        classify_end(max_distance, contig2_length, link.position2, link.direction2),
    )


# ============================================================================
#                         LINKAGE AGGREGATOR
# ============================================================================

class LinkageAggregator:
    """
    Collects read-pair links grouped by unordered contig pair.

    Every link is kept; nothing is merged or deduplicated so that all
    evidence takes part in the orientation vote. Pairs whose two reads map
    to the same contig carry no scaffolding information and are only
    counted.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._groups: Dict[Tuple[str, str], LinkGroup] = {}
        self.self_link_count = 0

    def add_link(
        self,
        contig1: str,
        position1: int,
        direction1: str,
        contig2: str,
        position2: int,
        direction2: str,
        read_name: Optional[str] = None,
    ) -> Optional[Link]:
        """
        Add one read pair.

        Returns:
            The stored canonical Link, or None for a self link
        """
        if contig1 == contig2:
            self.self_link_count += 1
            return None

        for direction in (direction1, direction2):
            if direction not in DIRECTIONS:
                raise ValueError(
                    f"Unexpected read direction {direction!r} for read {read_name}"
                )

        link = Link.create(
            contig1, position1, direction1,
            contig2, position2, direction2,
            read_name,
        )
        group = self._groups.get(link.key)
        if group is None:
            group = LinkGroup(link.contig1, link.contig2)
            self._groups[link.key] = group
        group.links.append(link)
        return link

    def get_group(self, contig_a: str, contig_b: str) -> Optional[LinkGroup]:
        """Look up the group for a pair given in either order."""
        key = tuple(sorted((contig_a, contig_b)))
        return self._groups.get(key)

    def groups(self) -> List[LinkGroup]:
        """Link groups ordered by canonical pair key."""
        return [self._groups[key] for key in sorted(self._groups)]

    def __iter__(self) -> Iterator[LinkGroup]:
        return iter(self.groups())

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, key) -> bool:
        return tuple(sorted(key)) in self._groups

    @property
    def num_links(self) -> int:
        return sum(len(g) for g in self._groups.values())

    def contig_names(self) -> List[str]:
        names = set()
        for contig1, contig2 in self._groups:
            names.add(contig1)
            names.add(contig2)
        return sorted(names)

    def log_summary(self):
        if not self._groups:
            self.logger.info(
                f"No inter-contig links found ({self.self_link_count} self links ignored)"
            )
            return
        example = self.groups()[0]
        self.logger.info(
            f"Read in {self.num_links} links between {len(self)} pairs of contigs, "
            f"e.g. {len(example)} links between {example.contig1} and {example.contig2} "
            f"({self.self_link_count} self links ignored)"
        )

# LinkWeaver v0.1.0
# Any usage is subject to this software's license.
