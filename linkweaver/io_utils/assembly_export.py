#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LinkWeaver v0.1.0

Assembly Export: scaffolder YAML (one document per scaffold), its reader,
and scaffold statistics JSON.

Each scaffold document is a list of entries, either
    {'sequence': {'source': <contig>, 'reverse': true}}   (reverse optional)
or
    {'unresolved': {'length': <bases>}}
ready for a downstream scaffold-to-sequence builder.

Author: LinkWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from ..assembly_core.data_structures import (
    Assembly,
    ContigLengths,
    Scaffold,
    ScaffoldContig,
    ScaffoldGap,
)

logger = logging.getLogger(__name__)


# ============================================================================
#                       SCAFFOLDER YAML
# ============================================================================

def scaffold_to_records(scaffold: Scaffold) -> list[dict[str, Any]]:
    """Convert one scaffold into its list of YAML entries."""
    records = []
    for entry in scaffold:
        if isinstance(entry, ScaffoldContig):
            sequence = {'source': entry.name}
            if entry.reverse:
                sequence['reverse'] = True
            records.append({'sequence': sequence})
        else:
            records.append({'unresolved': {'length': entry.length}})
    return records


def assembly_to_records(assembly: Assembly) -> list[list[dict[str, Any]]]:
    return [scaffold_to_records(s) for s in assembly]


def format_scaffolder_yaml(assembly: Assembly) -> str:
    """Render an assembly as a multi-document YAML string."""
    return yaml.dump_all(
        assembly_to_records(assembly),
        default_flow_style=False,
        sort_keys=False,
        explicit_start=True,
    )


def write_scaffolder_yaml(assembly: Assembly, output_path: str | Path) -> Path:
    """
    Write an assembly as scaffolder YAML.

    Args:
        assembly: Assembly to write
        output_path: Output file path

    Returns:
        The output path
    """
    output_path = Path(output_path)
    negative = [g.length for s in assembly for g in s.gaps if g.length < 0]
    if negative:
        logger.warning(
            f"{len(negative)} joins have negative gap estimates (likely overlapping "
            f"contig ends); consider checking them with the overlaps command"
        )
    with open(output_path, 'w') as f:
        f.write(format_scaffolder_yaml(assembly))
    logger.info(f"Wrote {len(assembly)} scaffolds to {output_path}")
    return output_path


def write_scaffold_directory(assembly: Assembly, output_dir: str | Path) -> list[Path]:
    """
    Write each scaffold to its own ``scaffold<N>.yml`` (N counts from 0).

    Returns:
        The written paths, in scaffold order
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for i, scaffold in enumerate(assembly):
        path = output_dir / f"scaffold{i}.yml"
        with open(path, 'w') as f:
            yaml.dump(scaffold_to_records(scaffold), f, default_flow_style=False, sort_keys=False)
        paths.append(path)
    logger.info(f"Wrote {len(paths)} scaffold files to {output_dir}")
    return paths


def records_to_scaffold(records: list[dict[str, Any]]) -> Scaffold:
    """
    Inverse of ``scaffold_to_records``.

    Raises:
        ValueError: If an entry is neither a sequence nor an unresolved gap,
            or the entries do not alternate
    """
    scaffold = Scaffold()
    for record in records:
        if not isinstance(record, dict) or len(record) != 1:
            raise ValueError(f"Unexpected scaffold entry: {record!r}")
        if 'sequence' in record:
            sequence = record['sequence']
            scaffold.append_contig(ScaffoldContig(
                name=str(sequence['source']),
                reverse=bool(sequence.get('reverse', False)),
            ))
        elif 'unresolved' in record:
            scaffold.append_gap(ScaffoldGap(int(record['unresolved']['length'])))
        else:
            raise ValueError(f"Unexpected scaffold entry: {record!r}")
    if not scaffold.is_valid():
        raise ValueError("Scaffold must start and end with a sequence")
    return scaffold


def read_scaffolder_yaml(path: str | Path) -> Assembly:
    """Read an assembly back from scaffolder YAML."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scaffold file not found: {path}")
    with open(path) as f:
        documents = [doc for doc in yaml.safe_load_all(f) if doc]
    assembly = Assembly([records_to_scaffold(doc) for doc in documents])
    logger.info(f"Loaded {len(assembly)} scaffolds from {path}")
    return assembly


# ============================================================================
#                       STATISTICS
# ============================================================================

def assembly_statistics(assembly: Assembly, lengths: ContigLengths) -> dict[str, Any]:
    """
    Scaffold-level statistics.

    Scaffold length is the sum of its contig lengths plus gap lengths;
    negative gaps shorten it.
    """
    stats: dict[str, Any] = {
        'num_scaffolds': len(assembly),
        'num_contigs': len(assembly.contig_names),
        'num_joins': sum(len(s.gaps) for s in assembly),
        'total_gap_length': sum(g.length for s in assembly for g in s.gaps),
    }

    scaffold_lengths = sorted(
        (
            sum(lengths.get(c.name, 0) for c in s.contigs) + sum(g.length for g in s.gaps)
            for s in assembly
        ),
        reverse=True,
    )
    stats['total_length'] = sum(scaffold_lengths)
    stats['max_scaffold_length'] = scaffold_lengths[0] if scaffold_lengths else 0

    stats['n50'] = 0
    stats['l50'] = 0
    cumsum = 0
    half_total = stats['total_length'] / 2
    for i, length in enumerate(scaffold_lengths):
        cumsum += length
        if cumsum >= half_total:
            stats['n50'] = length
            stats['l50'] = i + 1
            break

    return stats


def export_assembly_stats(
    assembly: Assembly,
    lengths: ContigLengths,
    output_path: Optional[str | Path] = None,
) -> dict[str, Any]:
    """Compute statistics and optionally write them as JSON."""
    stats = assembly_statistics(assembly, lengths)
    if output_path is not None:
        output_path = Path(output_path)
        with open(output_path, 'w') as f:
            json.dump(stats, f, indent=2)
        logger.info(f"Assembly statistics exported to {output_path}")
    logger.info(
        f"  {stats['num_scaffolds']} scaffolds, {stats['num_joins']} joins, "
        f"N50: {stats['n50']:,} bp"
    )
    return stats

# LinkWeaver v0.1.0
# Any usage is subject to this software's license.
