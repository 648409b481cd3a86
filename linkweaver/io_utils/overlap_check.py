#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LinkWeaver v0.1.0

End overlap check: BLAST the facing ends of every pair of contigs joined
in a scaffold against each other, to find joins where the contigs probably
overlap rather than leave a gap.

Requires NCBI BLAST+ (``blastn``) on PATH.

Author: LinkWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from __future__ import annotations
import logging
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from Bio.Seq import Seq

from ..assembly_core.data_structures import Assembly, ScaffoldContig, ScaffoldGap
from ..errors import OverlapCheckError

logger = logging.getLogger(__name__)

DEFAULT_PROBE_LENGTH = 100

BLAST_OUTFMT6_FIELDS = [
    'qseqid', 'sseqid', 'pident', 'length', 'mismatch', 'gapopen',
    'qstart', 'qend', 'sstart', 'send', 'evalue', 'bitscore',
]


@dataclass
class BlastHit:
    """One HSP from blastn tabular (-outfmt 6) output."""
    qseqid: str
    sseqid: str
    pident: float
    length: int
    mismatch: int
    gapopen: int
    qstart: int
    qend: int
    sstart: int
    send: int
    evalue: float
    bitscore: float

    @classmethod
    def from_line(cls, line: str) -> 'BlastHit':
        fields = line.rstrip('\n').split('\t')
        if len(fields) != len(BLAST_OUTFMT6_FIELDS):
            raise OverlapCheckError(
                f"Unexpected blastn output line ({len(fields)} fields): {line!r}"
            )
        return cls(
            qseqid=fields[0],
            sseqid=fields[1],
            pident=float(fields[2]),
            length=int(fields[3]),
            mismatch=int(fields[4]),
            gapopen=int(fields[5]),
            qstart=int(fields[6]),
            qend=int(fields[7]),
            sstart=int(fields[8]),
            send=int(fields[9]),
            evalue=float(fields[10]),
            bitscore=float(fields[11]),
        )


@dataclass
class EndOverlap:
    """Probable overlap between the facing ends of two scaffolded contigs."""
    scaffold_index: int
    contig1: ScaffoldContig
    contig2: ScaffoldContig
    gap: ScaffoldGap
    hit: BlastHit
    probe1: str
    probe2: str

    @property
    def contig1_end(self) -> str:
        return 'start' if self.contig1.reverse else 'end'

    @property
    def contig2_end(self) -> str:
        return 'end' if self.contig2.reverse else 'start'

    def describe(self) -> str:
        h = self.hit
        return (
            f"Possible overlap on scaffold {self.scaffold_index} between contigs "
            f"{self.contig1.name} ({self.contig1_end}) and {self.contig2.name} "
            f"({self.contig2_end}), %ID {h.pident}, Length {h.length}, "
            f"{h.qstart}-{h.qend} vs {h.sstart}-{h.send}"
        )


def oriented_sequence(sequence: str, reverse: bool) -> str:
    return str(Seq(sequence).reverse_complement()) if reverse else sequence


def run_bl2seq(seq1: str, seq2: str, blastn: str = 'blastn') -> list[BlastHit]:
    """
    Align two nucleotide sequences with ``blastn -subject``.

    Raises:
        OverlapCheckError: If blastn is missing, exits non-zero or writes to stderr
    """
    executable = shutil.which(blastn)
    if executable is None:
        raise OverlapCheckError(f"blastn executable not found: {blastn}")

    with tempfile.TemporaryDirectory(prefix='linkweaver_bl2seq_') as tmp:
        query = Path(tmp) / 'one.fa'
        subject = Path(tmp) / 'two.fa'
        query.write_text(f">one\n{seq1}\n")
        subject.write_text(f">two\n{seq2}\n")

        cmd = [
            executable,
            '-task', 'blastn',
            '-query', str(query),
            '-subject', str(subject),
            '-outfmt', '6',
        ]
        result = subprocess.run(cmd, capture_output=True, text=True)

    if result.returncode != 0 or result.stderr.strip():
        raise OverlapCheckError(
            f"blastn failed (exit {result.returncode}): {result.stderr.strip()}"
        )
    return [BlastHit.from_line(line) for line in result.stdout.splitlines() if line.strip()]


def find_end_overlaps(
    assembly: Assembly,
    sequences: dict[str, str],
    probe_length: int = DEFAULT_PROBE_LENGTH,
    blastn: str = 'blastn',
) -> list[EndOverlap]:
    """
    Check every contig-gap-contig join of an assembly for end overlaps.

    Args:
        assembly: Scaffolds to check
        sequences: Contig name -> sequence
        probe_length: Bases taken from each facing end
        blastn: blastn executable name or path

    Returns:
        One EndOverlap per join with at least one hit (best hit first)
    """
    if probe_length <= 0:
        raise ValueError(f"probe_length must be > 0, got {probe_length}")

    overlaps = []
    num_joins = 0
    for scaffold_index, scaffold in enumerate(assembly):
        entries = scaffold.entries
        for i in range(0, len(entries) - 2, 2):
            contig1, gap, contig2 = entries[i], entries[i + 1], entries[i + 2]
            if not (
                isinstance(contig1, ScaffoldContig)
                and isinstance(gap, ScaffoldGap)
                and isinstance(contig2, ScaffoldContig)
            ):
                raise ValueError(
                    f"Unexpected assembly near {contig1!r}, {gap!r}, {contig2!r}: "
                    f"expected contig, gap, contig"
                )
            probe1 = _probe(sequences, contig1, probe_length, trailing=True)
            probe2 = _probe(sequences, contig2, probe_length, trailing=False)
            num_joins += 1

            hits = run_bl2seq(probe1, probe2, blastn=blastn)
            if hits:
                overlap = EndOverlap(scaffold_index, contig1, contig2, gap, hits[0], probe1, probe2)
                logger.info(overlap.describe())
                overlaps.append(overlap)

    logger.info(f"Checked {num_joins} joins, {len(overlaps)} possible overlaps")
    return overlaps


def _probe(
    sequences: dict[str, str],
    contig: ScaffoldContig,
    probe_length: int,
    trailing: bool,
) -> str:
    try:
        sequence = sequences[contig.name]
    except KeyError:
        raise ValueError(f"No sequence for scaffolded contig {contig.name}") from None
    oriented = oriented_sequence(sequence, contig.reverse)
    return oriented[-probe_length:] if trailing else oriented[:probe_length]


def format_overlap_report(overlaps: list[EndOverlap], width: Optional[int] = None) -> str:
    """Human-readable report: description plus both compared end sequences."""
    blocks = []
    for overlap in overlaps:
        probe1 = overlap.probe1 if width is None else overlap.probe1[:width]
        probe2 = overlap.probe2 if width is None else overlap.probe2[:width]
        blocks.append('\n'.join([
            overlap.describe(),
            f"   first {probe1}",
            f"  second {probe2}",
        ]))
    return '\n\n'.join(blocks) + ('\n' if blocks else '')

# LinkWeaver v0.1.0
# Any usage is subject to this software's license.
