#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Contig sequence I/O for LinkWeaver.

Reads the reference contigs the read pairs were mapped to, either as
lengths only (for scaffolding) or as full sequences (for the end overlap
check). Contig names are the first whitespace-delimited word of the FASTA
header and must be unique.
"""

import gzip
import logging
from pathlib import Path
from typing import Dict, Iterator, TextIO, Tuple, Union

from Bio import SeqIO

from ..errors import DuplicateContigError

logger = logging.getLogger(__name__)


def is_gzipped(filepath: Union[str, Path]) -> bool:
    """True if the file name says it is gzip compressed."""
    return Path(filepath).suffix in ('.gz', '.gzip')


def open_file(filepath: Union[str, Path], mode: str = 'r') -> TextIO:
    """
    Open file with automatic gzip detection.

    Args:
        filepath: Path to file
        mode: File mode ('r' or 'w')

    Returns:
        File handle
    """
    filepath = Path(filepath)

    if is_gzipped(filepath):
        if 'r' in mode:
            return gzip.open(filepath, 'rt')
        else:
            return gzip.open(filepath, 'wt')
    else:
        return open(filepath, mode)


def _iter_records(filepath: Union[str, Path]) -> Iterator[Tuple[str, str]]:
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"FASTA file not found: {filepath}")

    seen = set()
    with open_file(filepath) as handle:
        for record in SeqIO.parse(handle, "fasta"):
            if record.id in seen:
                raise DuplicateContigError(
                    f"Duplicate contig name in fasta {record.id}, giving up"
                )
            seen.add(record.id)
            yield record.id, str(record.seq)


def read_contig_lengths(filepath: Union[str, Path]) -> Dict[str, int]:
    """
    Read contig name -> length from a FASTA file.

    Raises:
        FileNotFoundError: If the file does not exist
        DuplicateContigError: If a contig name occurs twice
    """
    lengths = {name: len(seq) for name, seq in _iter_records(filepath)}
    if lengths:
        example = next(iter(lengths))
        logger.info(
            f"Cached {len(lengths)} contig lengths from {filepath}, "
            f"e.g. {example} => {lengths[example]}"
        )
    else:
        logger.warning(f"No sequences found in {filepath}")
    return lengths


def read_contig_sequences(filepath: Union[str, Path]) -> Dict[str, str]:
    """Read contig name -> sequence from a FASTA file."""
    sequences = dict(_iter_records(filepath))
    logger.info(f"Cached {len(sequences)} contig sequences from {filepath}")
    return sequences
