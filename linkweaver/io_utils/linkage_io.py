#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LinkWeaver v0.1.0

Linkage evidence I/O: the tab-separated read-pair table produced by the
read mapper, and the consistent/error link reports written for manual QA.

Evidence table columns (header row optional):
    contig1_name  position1  mapping_quality1  direction1
    contig2_name  position2  mapping_quality2  direction2  [read_name]

Direction codes are 0 (forward, '+') and 1 (reverse, '-'). Mapping
qualities are not used.

Author: LinkWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from __future__ import annotations
import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from ..assembly_core.data_structures import DIRECTION_CODES, ContigLengths, Link
from ..assembly_core.linkage_module import LinkageAggregator
from ..errors import LinkFormatError
from .sequence_io import open_file

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    'contig1_name', 'contig1_length', 'contig2_name', 'contig2_length',
    'read1_position', 'read1_direction', 'read2_position', 'read2_direction',
    'read_basename',
]


@dataclass
class LinkageReadStats:
    """Counts gathered while reading an evidence table."""
    rows: int = 0
    links: int = 0
    self_links: int = 0
    header: bool = False


def parse_direction(code: str, path: str | Path = '<input>', line_no: int = 0) -> str:
    """Convert a 0/1 strand code into '+' or '-'."""
    try:
        return DIRECTION_CODES[code.strip()]
    except KeyError:
        raise LinkFormatError(
            f"{path}:{line_no}: unexpected direction {code!r} (expected 0 or 1)"
        ) from None


def _parse_position(value: str, path: str | Path, line_no: int) -> int:
    try:
        position = int(value)
    except ValueError:
        raise LinkFormatError(f"{path}:{line_no}: position {value!r} is not an integer") from None
    if position < 0:
        raise LinkFormatError(f"{path}:{line_no}: negative position {position}")
    return position


def _looks_like_header(row: list[str]) -> bool:
    """A header has neither a position in column 2 nor a direction code in column 4."""
    if len(row) > 3 and row[3].strip() in DIRECTION_CODES:
        return False
    try:
        int(row[1])
    except (IndexError, ValueError):
        return True
    return False


def read_linkage_file(
    path: str | Path,
    aggregator: Optional[LinkageAggregator] = None,
) -> tuple[LinkageReadStats, LinkageAggregator]:
    """
    Load a linkage evidence table into a LinkageAggregator.

    Args:
        path: Evidence table (tab-separated, may be gzipped)
        aggregator: Aggregator to add to (a new one is created if None)

    Returns:
        (stats, aggregator)

    Raises:
        LinkFormatError: Wrong column count, bad integer or bad direction code
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Linkage file not found: {path}")

    aggregator = aggregator or LinkageAggregator()
    stats = LinkageReadStats()
    self_links_before = aggregator.self_link_count

    first_row = True
    with open_file(path) as handle:
        reader = csv.reader(handle, delimiter='\t')
        for line_no, row in enumerate(reader, start=1):
            if not row or (len(row) == 1 and not row[0].strip()) or row[0].startswith('#'):
                continue
            # only the first non-comment row may be a header
            if first_row:
                first_row = False
                if _looks_like_header(row):
                    stats.header = True
                    continue
            if len(row) not in (8, 9):
                raise LinkFormatError(
                    f"{path}:{line_no}: unexpected number of columns ({len(row)}), "
                    f"expected 8 or 9"
                )
            stats.rows += 1

            link = aggregator.add_link(
                row[0],
                _parse_position(row[1], path, line_no),
                parse_direction(row[3], path, line_no),
                row[4],
                _parse_position(row[5], path, line_no),
                parse_direction(row[7], path, line_no),
                row[8] if len(row) == 9 and row[8] else None,
            )
            if link is not None:
                stats.links += 1

    stats.self_links = aggregator.self_link_count - self_links_before
    logger.info(
        f"Read {stats.rows} rows from {path}: {stats.links} links, "
        f"{stats.self_links} ignored as the same contig"
    )
    aggregator.log_summary()
    return stats, aggregator


def write_link_report(
    path: str | Path,
    links: Iterable[Link],
    lengths: ContigLengths,
) -> int:
    """
    Write links with their contig lengths as a TSV report.

    Returns:
        Number of links written
    """
    path = Path(path)
    count = 0
    with open(path, 'w', newline='') as f:
        writer = csv.writer(f, delimiter='\t', lineterminator='\n')
        writer.writerow(REPORT_COLUMNS)
        for link in links:
            writer.writerow([
                link.contig1,
                lengths.get(link.contig1, ''),
                link.contig2,
                lengths.get(link.contig2, ''),
                link.position1,
                link.direction1,
                link.position2,
                link.direction2,
                link.read_name or '',
            ])
            count += 1
    logger.info(f"Wrote {count} links to {path}")
    return count

# LinkWeaver v0.1.0
# Any usage is subject to this software's license.
