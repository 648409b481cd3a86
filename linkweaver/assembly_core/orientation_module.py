#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LinkWeaver v0.1.0

Orientation resolution and gap estimation for contig pairs.

Algorithm (per contig pair):
  1. Classify every link into an end-pair bucket (start/start, start/end, ...).
  2. Drop buckets where either side is inconsistent or not near an end.
  3. Require the largest bucket to hold at least ``min_links`` links.
  4. Require a strict winner; a tie at the top rejects the whole pair.
  5. Estimate the gap as the mean of insert size minus both read distances
     from the abutting ends, over the supporting links.

Read-pair mapping is noisy, so a few mismapped or repeat-derived reads must
not call a join on their own: both the vote threshold and the strict
majority are required.

Author: LinkWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from collections import Counter
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .data_structures import (
    ContigLengths,
    EndLabel,
    EndPair,
    Link,
    LinkGroup,
    LinkResolution,
    OrientationDecision,
    RejectionReason,
)
from .linkage_module import LinkageAggregator, classify_link_ends

logger = logging.getLogger(__name__)


# ============================================================================
#                         GAP ESTIMATION
# ============================================================================

def _distance_from_end(position: int, contig_length: int, label: EndLabel) -> int:
    if label == EndLabel.CONTIG_START:
        return position
    if label == EndLabel.CONTIG_END:
        return contig_length - position
    raise ValueError(f"Cannot measure distance from a {label.value} end")


def estimate_gap(
    link: Link,
    contig1_length: int,
    contig2_length: int,
    ends: EndPair,
    mean_insert_size: int,
) -> int:
    """
    Bases expected between two contigs according to a single link.

    Returns:
        mean_insert_size minus each read's distance from its abutting end;
        negative values indicate the contig ends probably overlap
    """
    distance1 = _distance_from_end(link.position1, contig1_length, ends.first)
    distance2 = _distance_from_end(link.position2, contig2_length, ends.second)
    return mean_insert_size - distance1 - distance2


def aggregate_gap(
    links: Sequence[Link],
    contig1_length: int,
    contig2_length: int,
    ends: EndPair,
    mean_insert_size: int,
) -> int:
    """Mean of the per-link estimates, truncated toward zero. Not clamped."""
    if not links:
        raise ValueError("Cannot estimate a gap without supporting links")
    estimates = [
        estimate_gap(link, contig1_length, contig2_length, ends, mean_insert_size)
        for link in links
    ]
    return int(np.mean(estimates))


# ============================================================================
#                         ORIENTATION RESOLVER
# ============================================================================

class OrientationResolver:
    """
    Decide which ends of a contig pair abut, from that pair's links.

    Args:
        max_distance: End-proximity threshold in bases
        min_links: Minimum links in the winning bucket
        mean_insert_size: Expected insert size, for gap estimation
        logger: Logger to report decisions to (defaults to the module logger)
    """

    def __init__(
        self,
        max_distance: int,
        min_links: int,
        mean_insert_size: int,
        logger: Optional[logging.Logger] = None,
    ):
        if max_distance <= 0:
            raise ValueError(f"max_distance must be > 0, got {max_distance}")
        if min_links < 0:
            raise ValueError(f"min_links must be >= 0, got {min_links}")
        if mean_insert_size < 0:
            raise ValueError(f"mean_insert_size must be >= 0, got {mean_insert_size}")
        self.max_distance = max_distance
        self.min_links = min_links
        self.mean_insert_size = mean_insert_size
        self.logger = logger or logging.getLogger(__name__)

    def classify(self, group: LinkGroup, lengths: ContigLengths) -> Dict[EndPair, List[Link]]:
        """Bucket every link of the group by its classified end pair."""
        length1, length2 = self._lengths_for(group, lengths)
        buckets: Dict[EndPair, List[Link]] = {}
        for link in group.links:
            ends = classify_link_ends(self.max_distance, length1, length2, link)
            buckets.setdefault(ends, []).append(link)
        return buckets

    def resolve(self, group: LinkGroup, lengths: ContigLengths) -> LinkResolution:
        """
        Resolve one contig pair.

        Returns:
            LinkResolution carrying either an OrientationDecision or the reason
            no join was made. Rejections are not errors.
        """
        buckets = self.classify(group, lengths)
        self.logger.debug(
            f"For {group.contig1} and {group.contig2} found link types: "
            f"{', '.join(f'{k}={len(v)}' for k, v in buckets.items())}"
        )

        candidates = [(ends, links) for ends, links in buckets.items() if ends.is_candidate]
        if not candidates:
            return self._reject(group, RejectionReason.NO_CANDIDATE_BUCKETS)

        candidates.sort(key=lambda item: (-len(item[1]), str(item[0])))
        best_ends, best_links = candidates[0]

        if len(best_links) < self.min_links:
            self.logger.debug(
                f"Not linking {group.contig1} and {group.contig2}: "
                f"{len(best_links)} links, cutoff is {self.min_links}"
            )
            return self._reject(group, RejectionReason.INSUFFICIENT_LINKS)

        if len(candidates) > 1 and len(candidates[1][1]) == len(best_links):
            self.logger.warning(
                f"Contigs {group.contig1} and {group.contig2} have confusing orientation "
                f"statistics ({', '.join(f'{k}={len(v)}' for k, v in candidates)}), "
                f"ignoring this linkage"
            )
            return self._reject(group, RejectionReason.TIED_ORIENTATION)

        rejected = [
            link for ends, links in buckets.items() if ends != best_ends for link in links
        ]
        length1, length2 = self._lengths_for(group, lengths)
        gap = aggregate_gap(best_links, length1, length2, best_ends, self.mean_insert_size)
        decision = OrientationDecision(
            contig1=group.contig1,
            contig2=group.contig2,
            ends=best_ends,
            supporting_links=list(best_links),
            rejected_links=rejected,
            gap=gap,
        )
        self.logger.debug(
            f"Joining {group.contig1} ({best_ends.first.value}) to {group.contig2} "
            f"({best_ends.second.value}) on {len(best_links)} links, gap {gap}"
        )
        return LinkResolution(
            contig1=group.contig1,
            contig2=group.contig2,
            decision=decision,
            rejected_links=rejected,
        )

    def resolve_all(
        self,
        groups: Iterable[LinkGroup],
        lengths: ContigLengths,
        threads: int = 1,
    ) -> List[LinkResolution]:
        """
        Resolve every link group.

        Groups are independent, so with ``threads > 1`` they are spread over a
        process pool. Results are returned in canonical pair order either way.
        """
        if isinstance(groups, LinkageAggregator):
            groups = groups.groups()
        groups = sorted(groups, key=lambda g: g.key)
        self.logger.info(
            f"Resolving orientation for {len(groups)} contig pairs "
            f"(max distance {self.max_distance}, min links {self.min_links})"
        )

        if threads > 1 and len(groups) > 1:
            items = [
                (group, {c: lengths[c] for c in group.key if c in lengths})
                for group in groups
            ]
            chunksize = max(1, len(items) // (threads * 4))
            with ProcessPoolExecutor(max_workers=threads) as executor:
                results = list(executor.map(self._resolve_item, items, chunksize=chunksize))
        else:
            results = [self.resolve(group, lengths) for group in groups]

        summary = summarize_resolutions(results)
        self.logger.info(summary.describe())
        return results

    def _resolve_item(self, item: Tuple[LinkGroup, ContigLengths]) -> LinkResolution:
        return self.resolve(*item)

    def _reject(self, group: LinkGroup, reason: RejectionReason) -> LinkResolution:
        return LinkResolution(
            contig1=group.contig1,
            contig2=group.contig2,
            rejection=reason,
            rejected_links=list(group.links),
        )

    @staticmethod
    def _lengths_for(group: LinkGroup, lengths: ContigLengths) -> Tuple[int, int]:
        try:
            return lengths[group.contig1], lengths[group.contig2]
        except KeyError as e:
            raise ValueError(
                f"No length known for contig {e.args[0]} (linked {group.contig1} "
                f"to {group.contig2}); is the FASTA file the one the reads were mapped to?"
            ) from e


# ============================================================================
#                         DIAGNOSTICS
# ============================================================================

@dataclass
class ResolutionSummary:
    """Aggregate counts over all resolved contig pairs."""
    total_pairs: int = 0
    accepted_pairs: int = 0
    consistent_links: int = 0
    rejected_links: int = 0
    rejections: Dict[RejectionReason, int] = field(default_factory=dict)
    examples: Dict[RejectionReason, List[Tuple[str, str]]] = field(default_factory=dict)

    @property
    def rejected_pairs(self) -> int:
        return self.total_pairs - self.accepted_pairs

    def describe(self) -> str:
        parts = [
            f"{self.accepted_pairs}/{self.total_pairs} contig pairs joined",
            f"{self.consistent_links} consistent links",
            f"{self.rejected_links} rejected links",
        ]
        for reason, count in sorted(self.rejections.items(), key=lambda r: r[0].value):
            sample = ', '.join(f"{a}/{b}" for a, b in self.examples.get(reason, []))
            parts.append(f"{reason.value}: {count} (e.g. {sample})")
        return '; '.join(parts)


def summarize_resolutions(
    results: Iterable[LinkResolution],
    max_examples: int = 3,
) -> ResolutionSummary:
    """Count decisions and rejections, keeping a few example pairs per reason."""
    summary = ResolutionSummary()
    counts: Counter = Counter()
    for result in results:
        summary.total_pairs += 1
        summary.consistent_links += len(result.consistent_links)
        summary.rejected_links += len(result.rejected_links)
        if result.accepted:
            summary.accepted_pairs += 1
            continue
        counts[result.rejection] += 1
        examples = summary.examples.setdefault(result.rejection, [])
        if len(examples) < max_examples:
            examples.append((result.contig1, result.contig2))
    summary.rejections = dict(counts)
    return summary


def accepted_decisions(results: Iterable[LinkResolution]) -> List[OrientationDecision]:
    return [r.decision for r in results if r.decision is not None]

# LinkWeaver v0.1.0
# Any usage is subject to this software's license.
