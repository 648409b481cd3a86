"""
LinkWeaver Pipeline Orchestrator.

Coordinates the two stages of a scaffolding run:
- Link: contig lengths + linkage evidence -> orientation decisions ->
  scaffold graph (DOT) plus consistent/error link reports
- Scaffold: scaffold graph (DOT, possibly hand-edited) -> ordered, oriented
  scaffolds (scaffolder YAML) plus statistics

and the optional end overlap check of scaffolds from either file.

The DOT file between the two stages can be inspected and edited (e.g. to
break a cycle) before scaffolding.
"""

from pathlib import Path
from typing import Optional, Dict, Any, List, Union
import logging
from dataclasses import dataclass, field

from ..assembly_core.orientation_module import (
    OrientationResolver,
    ResolutionSummary,
    accepted_decisions,
    summarize_resolutions,
)
from ..assembly_core.path_reconstructor_module import ScaffoldPathReconstructor
from ..assembly_core.scaffold_graph_module import ScaffoldGraph, ScaffoldGraphBuilder
from ..assembly_core.data_structures import Assembly
from ..config.schema import LinkageParameters
from ..io_utils.sequence_io import read_contig_lengths, read_contig_sequences
from ..io_utils.linkage_io import LinkageReadStats, read_linkage_file, write_link_report
from ..io_utils.graph_io import read_dot, render_dot, write_dot
from ..io_utils.assembly_export import (
    export_assembly_stats,
    read_scaffolder_yaml,
    write_scaffold_directory,
    write_scaffolder_yaml,
)
from ..io_utils.overlap_check import EndOverlap, find_end_overlaps

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str = 'INFO', log_file: Optional[Union[str, Path]] = None):
    """
    Configure root logging for a run.

    Args:
        level: Logging level name ('DEBUG', 'INFO', 'WARNING', 'ERROR')
        log_file: Also write the log to this file
    """
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


# ============================================================================
# Stage results
# ============================================================================

@dataclass
class LinkStageResult:
    """Outputs of the link stage."""
    dot_path: Path
    graph: ScaffoldGraph
    num_contigs: int
    read_stats: LinkageReadStats
    summary: ResolutionSummary
    report_paths: List[Path] = field(default_factory=list)
    rendered_paths: List[Path] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'dot_file': str(self.dot_path),
            'contigs': self.num_contigs,
            'rows': self.read_stats.rows,
            'links': self.read_stats.links,
            'self_links': self.read_stats.self_links,
            'contig_pairs': self.summary.total_pairs,
            'joins': self.summary.accepted_pairs,
            'consistent_links': self.summary.consistent_links,
            'rejected_links': self.summary.rejected_links,
            'reports': [str(p) for p in self.report_paths],
            'rendered': [str(p) for p in self.rendered_paths],
        }


@dataclass
class ScaffoldStageResult:
    """Outputs of the scaffold stage."""
    assembly: Assembly
    cyclic_components: List[List[str]] = field(default_factory=list)
    output_path: Optional[Path] = None
    scaffold_paths: List[Path] = field(default_factory=list)
    stats: Optional[Dict[str, Any]] = None


# ============================================================================
# Pipeline
# ============================================================================

class LinkagePipeline:
    """
    Run LinkWeaver stages from a merged configuration dictionary.

    Args:
        config: Configuration dictionary (see ``linkweaver.config.schema``)
        logger: Logger to report to (defaults to the module logger)
    """

    def __init__(self, config: Dict[str, Any], logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

    def run_link(
        self,
        linkage_file: Union[str, Path],
        fasta_file: Union[str, Path],
        output_prefix: Optional[Union[str, Path]] = None,
    ) -> LinkStageResult:
        """
        Resolve contig joins from linkage evidence and write the scaffold graph.

        Outputs are named after ``output_prefix`` (default: the linkage file):
        ``<prefix>.dot``, ``<prefix>.filtered_links.csv``,
        ``<prefix>.error_links.csv`` and, if rendering is enabled,
        ``<prefix>.png`` / ``<prefix>.svg``.

        Raises:
            ConfigValidationError: Invalid parameters (e.g. no mean insert size)
            LinkFormatError, DuplicateContigError: Invalid inputs
        """
        params = LinkageParameters.from_config(self.config)
        prefix = str(output_prefix or linkage_file)

        self.logger.info("=" * 60)
        self.logger.info("Linking contigs")
        self.logger.info("=" * 60)

        lengths = read_contig_lengths(fasta_file)
        read_stats, aggregator = read_linkage_file(linkage_file)

        resolver = OrientationResolver(
            max_distance=params.max_distance,
            min_links=params.min_links,
            mean_insert_size=params.mean_insert_size,
            logger=self.logger,
        )
        results = resolver.resolve_all(aggregator, lengths, threads=params.threads)
        summary = summarize_resolutions(results)

        builder = ScaffoldGraphBuilder(params.max_distance, logger=self.logger)
        graph = builder.build(lengths, accepted_decisions(results))

        report_paths = []
        if self.config['output'].get('write_reports', True):
            consistent = [link for r in results for link in r.consistent_links]
            errors = [link for r in results for link in r.rejected_links]
            for suffix, links in (('filtered_links', consistent), ('error_links', errors)):
                path = Path(f"{prefix}.{suffix}.csv")
                write_link_report(path, links, lengths)
                report_paths.append(path)

        dot_path = write_dot(graph, f"{prefix}.dot")
        rendered = []
        if self.config['output'].get('render_graph', False):
            rendered = render_dot(dot_path)

        return LinkStageResult(
            dot_path=dot_path,
            graph=graph,
            num_contigs=len(lengths),
            read_stats=read_stats,
            summary=summary,
            report_paths=report_paths,
            rendered_paths=rendered,
        )

    def _reconstructor(self) -> ScaffoldPathReconstructor:
        scaffold_config = self.config['scaffold']
        return ScaffoldPathReconstructor(
            default_gap_length=scaffold_config['default_gap_length'],
            use_estimated_gaps=scaffold_config['use_estimated_gaps'],
            fail_on_cycles=scaffold_config['fail_on_cycles'],
            logger=self.logger,
        )

    def run_scaffold(
        self,
        dot_file: Union[str, Path],
        output: Optional[Union[str, Path]] = None,
        fasta_file: Optional[Union[str, Path]] = None,
        stats_output: Optional[Union[str, Path]] = None,
        output_directory: Optional[Union[str, Path]] = None,
    ) -> ScaffoldStageResult:
        """
        Reconstruct scaffolds from a scaffold graph file.

        Args:
            dot_file: Scaffold graph in DOT format
            output: Scaffolder YAML output (not written if None)
            fasta_file: Contig FASTA; enables scaffold length statistics
            output_directory: Also write one scaffold<N>.yml per scaffold here
            stats_output: Write statistics as JSON here (requires fasta_file)

        Raises:
            MalformedGraphError: The graph violates chain invariants
            CyclicGraphError: Cycles remain and ``scaffold.fail_on_cycles`` is set
        """
        self.logger.info("=" * 60)
        self.logger.info("Reconstructing scaffolds")
        self.logger.info("=" * 60)

        graph = read_dot(dot_file)
        result = self._reconstructor().reconstruct(graph)

        output_path = None
        if output is not None:
            output_path = write_scaffolder_yaml(result.assembly, output)
        scaffold_paths = []
        if output_directory is not None:
            scaffold_paths = write_scaffold_directory(result.assembly, output_directory)

        stats = None
        if fasta_file is not None:
            lengths = read_contig_lengths(fasta_file)
            self._check_contigs_known(result.assembly, lengths)
            stats = export_assembly_stats(result.assembly, lengths, stats_output)
        elif stats_output is not None:
            raise ValueError("Scaffold statistics need the contig FASTA file")

        return ScaffoldStageResult(
            assembly=result.assembly,
            cyclic_components=result.cyclic_components,
            output_path=output_path,
            scaffold_paths=scaffold_paths,
            stats=stats,
        )

    def run_overlaps(
        self,
        dot_file: Optional[Union[str, Path]],
        fasta_file: Union[str, Path],
        probe_length: Optional[int] = None,
        scaffold_file: Optional[Union[str, Path]] = None,
    ) -> List[EndOverlap]:
        """
        BLAST every pair of facing contig ends against each other.

        Scaffolds come either from a scaffold graph (``dot_file``) or from
        scaffolder YAML (``scaffold_file``, e.g. after editing it by hand);
        exactly one must be given.
        """
        if (dot_file is None) == (scaffold_file is None):
            raise ValueError("Give either a scaffold graph or a scaffolder YAML file")
        overlap_config = self.config['overlap']
        probe_length = probe_length or overlap_config['probe_length']

        sequences = read_contig_sequences(fasta_file)
        if scaffold_file is not None:
            assembly = read_scaffolder_yaml(scaffold_file)
        else:
            assembly = self._reconstructor().reconstruct(read_dot(dot_file)).assembly
        self._check_contigs_known(assembly, sequences)

        return find_end_overlaps(
            assembly,
            sequences,
            probe_length=probe_length,
            blastn=overlap_config['blastn'],
        )

    def _check_contigs_known(self, assembly: Assembly, known: Dict[str, Any]):
        missing = [name for name in assembly.contig_names if name not in known]
        if missing:
            raise ValueError(
                f"{len(missing)} scaffolded contig(s) are not in the FASTA file, "
                f"e.g. {', '.join(missing[:5])}"
            )
