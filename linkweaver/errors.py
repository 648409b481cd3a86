#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LinkWeaver v0.1.0

Exception hierarchy. Everything raised here aborts a run; per-pair
orientation rejections are not exceptions and are reported as diagnostics.

Author: LinkWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""


class LinkWeaverError(Exception):
    """Base class for fatal LinkWeaver errors."""
    pass


class LinkFormatError(LinkWeaverError):
    """Raised when a row of the linkage evidence table cannot be parsed."""
    pass


class DuplicateContigError(LinkWeaverError):
    """Raised when a contig name occurs twice in a FASTA file."""
    pass


class MalformedGraphError(LinkWeaverError):
    """Raised when a scaffold graph violates the linear-chain invariants."""
    pass


class CyclicGraphError(MalformedGraphError):
    """Raised when cyclic components remain and cycles are not tolerated."""

    def __init__(self, components):
        self.components = components
        names = '; '.join(', '.join(c) for c in components[:3])
        super().__init__(
            f"{len(components)} circular component(s) cannot be scaffolded "
            f"(break them by editing the graph file): {names}"
        )


class OverlapCheckError(LinkWeaverError):
    """Raised when the external BLAST comparison fails."""
    pass

# LinkWeaver v0.1.0
# Any usage is subject to this software's license.
