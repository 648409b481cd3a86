"""
LinkWeaver v0.1.0

I/O Module for LinkWeaver.

Module structure:
1. sequence_io.py - contig lengths and sequences from FASTA
2. linkage_io.py - read-pair evidence table, consistent/error link reports
3. graph_io.py - scaffold graph as Graphviz DOT (write, render, read back)
4. assembly_export.py - scaffolder YAML, scaffold statistics
5. overlap_check.py - BLAST check of facing contig ends
"""

from .sequence_io import (
    open_file,
    read_contig_lengths,
    read_contig_sequences,
)

from .linkage_io import (
    LinkageReadStats,
    REPORT_COLUMNS,
    parse_direction,
    read_linkage_file,
    write_link_report,
)

from .graph_io import (
    format_dot,
    parse_dot,
    read_dot,
    render_dot,
    write_dot,
)

from .assembly_export import (
    assembly_statistics,
    assembly_to_records,
    export_assembly_stats,
    format_scaffolder_yaml,
    read_scaffolder_yaml,
    write_scaffold_directory,
    write_scaffolder_yaml,
)

from .overlap_check import (
    BlastHit,
    EndOverlap,
    find_end_overlaps,
    format_overlap_report,
    run_bl2seq,
)

__all__ = [
    # Sequences
    "open_file",
    "read_contig_lengths",
    "read_contig_sequences",

    # Linkage evidence
    "LinkageReadStats",
    "REPORT_COLUMNS",
    "parse_direction",
    "read_linkage_file",
    "write_link_report",

    # Graph
    "format_dot",
    "parse_dot",
    "read_dot",
    "render_dot",
    "write_dot",

    # Assembly export
    "assembly_statistics",
    "assembly_to_records",
    "export_assembly_stats",
    "format_scaffolder_yaml",
    "read_scaffolder_yaml",
    "write_scaffold_directory",
    "write_scaffolder_yaml",

    # Overlap check
    "BlastHit",
    "EndOverlap",
    "find_end_overlaps",
    "format_overlap_report",
    "run_bl2seq",
]
