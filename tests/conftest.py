#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LinkWeaver v0.1.0

Pytest configuration and shared fixtures.

Author: LinkWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging

import pytest
from pathlib import Path
import tempfile
import shutil


# Four contigs: ctgA END joins ctgB START (gap 600), ctgB END joins
# ctgC END (gap 700, so ctgC is reversed), ctgD stays on its own.
CONTIG_LENGTHS = {
    'ctgA': 5000,
    'ctgB': 6000,
    'ctgC': 4000,
    'ctgD': 3000,
}

LINKAGE_HEADER = [
    'contig1', 'position1', 'mapq1', 'direction1',
    'contig2', 'position2', 'mapq2', 'direction2', 'read_name',
]

LINKAGE_ROWS = [
    # ctgA END / ctgB START, four consistent pairs
    ['ctgA', '4700', '60', '0', 'ctgB', '100', '60', '1', 'pair1'],
    ['ctgB', '150', '60', '1', 'ctgA', '4750', '60', '0', 'pair2'],
    ['ctgA', '4800', '60', '0', 'ctgB', '200', '60', '1', 'pair3'],
    ['ctgA', '4850', '60', '0', 'ctgB', '250', '60', '1', 'pair4'],
    # read on the wrong strand for ctgA's end
    ['ctgA', '4900', '60', '1', 'ctgB', '50', '60', '1', 'pair5'],
    # ctgB END / ctgC END, three consistent pairs
    ['ctgB', '5800', '60', '0', 'ctgC', '3900', '60', '0', 'pair6'],
    ['ctgB', '5850', '60', '0', 'ctgC', '3850', '60', '0', 'pair7'],
    ['ctgC', '3800', '60', '0', 'ctgB', '5900', '60', '0', 'pair8'],
    # ctgC / ctgD, too few links
    ['ctgC', '100', '60', '1', 'ctgD', '2900', '60', '0', 'pair9'],
    # both reads on one contig
    ['ctgA', '100', '60', '1', 'ctgA', '400', '60', '0', 'pair10'],
]

MEAN_INSERT_SIZE = 1000
MAX_DISTANCE = 1000


def make_sequence(length: int, seed: str = 'ACGTTGCA') -> str:
    """Deterministic sequence of the given length."""
    return (seed * (length // len(seed) + 1))[:length]


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo logging.basicConfig(force=True) calls made by the CLI."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def temp_output_dir():
    """Create temporary output directory for tests."""
    temp_dir = tempfile.mkdtemp(prefix="linkweaver_test_")
    yield Path(temp_dir)
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def write_fasta(tmp_path):
    """Factory writing a {name: sequence} dict as a FASTA file."""
    def _write(sequences, name='contigs.fa'):
        path = tmp_path / name
        with open(path, 'w') as f:
            for contig, sequence in sequences.items():
                f.write(f">{contig} test contig\n")
                for i in range(0, len(sequence), 60):
                    f.write(sequence[i:i + 60] + "\n")
        return path
    return _write


@pytest.fixture
def write_linkage(tmp_path):
    """Factory writing rows (lists of strings) as a tab-separated linkage table."""
    def _write(rows, name='reads.links', header=True):
        path = tmp_path / name
        with open(path, 'w') as f:
            if header:
                f.write('\t'.join(LINKAGE_HEADER) + '\n')
            for row in rows:
                f.write('\t'.join(row) + '\n')
        return path
    return _write


@pytest.fixture
def contig_lengths():
    return dict(CONTIG_LENGTHS)


@pytest.fixture
def linkage_dataset(write_fasta, write_linkage):
    """Contig FASTA and linkage table for the four-contig example."""
    fasta = write_fasta({
        name: make_sequence(length) for name, length in CONTIG_LENGTHS.items()
    })
    links = write_linkage(LINKAGE_ROWS)
    return {
        'fasta': fasta,
        'links': links,
        'lengths': dict(CONTIG_LENGTHS),
        'mean_insert_size': MEAN_INSERT_SIZE,
        'max_distance': MAX_DISTANCE,
    }

# LinkWeaver v0.1.0
# Any usage is subject to this software's license.
