#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Command-line interface for LinkWeaver.

This module provides the main CLI entry point and all subcommands for
linking contigs into scaffolds from read-pair linkage evidence.
"""

import sys
import click
from pathlib import Path
import yaml

from .version import __version__
from .config.parser import ConfigParser
from .config.schema import (
    ConfigValidationError,
    load_config,
    save_config_template,
    validate_config,
)
from .errors import LinkWeaverError
from .io_utils.assembly_export import format_scaffolder_yaml
from .io_utils.overlap_check import format_overlap_report
from .utils.pipeline import LinkagePipeline, setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose (DEBUG) logging')
@click.option('--quiet', '-q', is_flag=True, help='Only log errors')
@click.option('--log-file', type=click.Path(), help='Also write the log to this file')
@click.pass_context
def main(ctx, verbose, quiet, log_file):
    """
    LinkWeaver: read-pair scaffolding of assembled contigs

    Decides which contig ends abut from read pairs mapped near contig ends,
    writes the result as an editable Graphviz scaffold graph, and turns that
    graph into ordered, oriented scaffolds.
    """
    # Ensure context object exists
    ctx.ensure_object(dict)
    ctx.obj['VERBOSE'] = verbose
    ctx.obj['QUIET'] = quiet
    ctx.obj['LOG_FILE'] = log_file


def _load_run_config(ctx, config_file, overrides) -> dict:
    """Merge defaults, config file and CLI overrides, then set up logging."""
    parser = ConfigParser(config_file)
    parser.merge_cli_overrides(overrides)
    parser.validate()
    config = parser.to_dict()

    if ctx.obj.get('VERBOSE'):
        level = 'DEBUG'
    elif ctx.obj.get('QUIET'):
        level = 'ERROR'
    else:
        level = config['output']['logging']['level']
    log_file = ctx.obj.get('LOG_FILE') or config['output']['logging']['log_file']
    setup_logging(level, log_file)
    return config


def _fail(error: Exception):
    click.echo(f"✗ Error: {error}", err=True)
    sys.exit(1)


# ============================================================================
# Configuration Management Commands
# ============================================================================

@main.group()
def config():
    """Configuration management commands."""
    pass


@config.command('init')
@click.option('--output', '-o', type=click.Path(), default='linkweaver_config.yaml',
              help='Output configuration file path')
@click.option('--template', '-t',
              type=click.Choice(['default', 'strict', 'permissive']),
              default='default', help='Configuration template type')
def config_init(output, template):
    """Generate a template configuration file with all available parameters."""
    click.echo(f"Generating {template} configuration template: {output}")

    try:
        save_config_template(Path(output), template=template)
    except OSError as e:
        _fail(e)
    click.echo(f"✓ Configuration file created: {output}")
    click.echo("\nSet linkage.mean_insert_size to your library's insert size before linking.")


@config.command('validate')
@click.argument('config_file', type=click.Path(exists=True))
def config_validate(config_file):
    """Validate a configuration file."""
    click.echo(f"Validating configuration file: {config_file}")

    try:
        config = load_config(Path(config_file))
    except (yaml.YAMLError, ConfigValidationError) as e:
        _fail(e)
    errors = validate_config(config)

    if errors:
        click.echo("\n✗ Configuration validation failed:")
        for error in errors:
            click.echo(f"  • {error}", err=True)
        sys.exit(1)

    click.echo("✓ Configuration is valid")

    # Show key settings
    click.echo("\nKey Settings:")
    click.echo(f"  Max distance: {config['linkage']['max_distance']}")
    click.echo(f"  Min links: {config['linkage']['min_links']}")
    insert_size = config['linkage']['mean_insert_size']
    click.echo(f"  Mean insert size: {insert_size if insert_size is not None else 'not set'}")


@config.command('show')
@click.argument('config_file', type=click.Path(exists=True))
@click.option('--format', '-f', type=click.Choice(['yaml', 'summary']), default='summary',
              help='Output format')
def config_show(config_file, format):
    """Display configuration settings."""
    try:
        config = load_config(Path(config_file))
    except (yaml.YAMLError, ConfigValidationError) as e:
        _fail(e)

    if format == 'yaml':
        click.echo(yaml.dump(config, default_flow_style=False, sort_keys=False))
        return

    click.echo(f"Configuration from: {config_file}")
    click.echo("=" * 60)

    click.echo("\nLinkage:")
    for key, value in config['linkage'].items():
        click.echo(f"  {key}: {value}")

    click.echo("\nScaffold:")
    for key, value in config['scaffold'].items():
        click.echo(f"  {key}: {value}")

    click.echo("\nOverlap check:")
    click.echo(f"  Probe length: {config['overlap']['probe_length']}")
    click.echo(f"  blastn: {config['overlap']['blastn']}")

    click.echo("\nRuntime:")
    click.echo(f"  Threads: {config['runtime']['threads']}")


# ============================================================================
# Pipeline Commands
# ============================================================================

@main.command()
@click.option('--linkage-file', '-l', required=True, type=click.Path(exists=True),
              help='Linkage evidence table from the read-pair mapper')
@click.option('--reference-fasta', '-f', required=True, type=click.Path(exists=True),
              help='FASTA file of the contigs the reads were mapped to')
@click.option('--mean', '-u', 'mean_insert_size', type=click.IntRange(min=0),
              help='Average insert size, to estimate the gap in each join')
@click.option('--max-distance', '-m', type=click.IntRange(min=1),
              help='How far from a contig end a read may map and still count (bp) [default 4000]')
@click.option('--min-links', '-L', type=click.IntRange(min=0),
              help='How many links are sufficient to call a join [default 3]')
@click.option('--threads', '-t', type=click.IntRange(min=1),
              help='Processes used to resolve contig pairs [default 1]')
@click.option('--output-prefix', '-o', type=click.Path(),
              help='Prefix for output files (default: the linkage file path)')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True),
              help='Configuration file (YAML)')
@click.option('--no-reports', is_flag=True,
              help='Do not write the filtered/error link reports')
@click.option('--render/--no-render', default=None,
              help='Render the graph to PNG and SVG with Graphviz neato')
@click.pass_context
def link(ctx, linkage_file, reference_fasta, mean_insert_size, max_distance, min_links,
         threads, output_prefix, config_file, no_reports, render):
    """
    Link contigs into a scaffold graph.

    Writes <prefix>.dot (the scaffold graph, editable by hand) and, unless
    --no-reports is given, <prefix>.filtered_links.csv and
    <prefix>.error_links.csv.

    Examples:
        linkweaver link -l reads.links -f contigs.fa -u 3000
        linkweaver link -l reads.links -f contigs.fa -u 3000 -m 2000 -L 5
    """
    overrides = {
        'linkage.mean_insert_size': mean_insert_size,
        'linkage.max_distance': max_distance,
        'linkage.min_links': min_links,
        'runtime.threads': threads,
        'output.write_reports': False if no_reports else None,
        'output.render_graph': render,
    }

    try:
        config = _load_run_config(ctx, config_file, overrides)
        result = LinkagePipeline(config).run_link(linkage_file, reference_fasta, output_prefix)
    except (LinkWeaverError, OSError, ValueError) as e:
        _fail(e)

    if not ctx.obj.get('QUIET'):
        summary = result.summary
        click.echo(f"✓ Scaffold graph written to {result.dot_path}")
        click.echo(f"  {result.read_stats.links} links between {result.num_contigs} contigs")
        click.echo(f"  {summary.accepted_pairs}/{summary.total_pairs} contig pairs joined")
        for path in result.report_paths + result.rendered_paths:
            click.echo(f"  {path}")


@main.command()
@click.argument('dot_file', type=click.Path(exists=True))
@click.option('--output', '-o', type=click.Path(),
              help='Scaffolder YAML output file (default: standard output)')
@click.option('--output-directory', '-d', type=click.Path(file_okay=False),
              help='Write one scaffold<N>.yml per scaffold into this directory')
@click.option('--reference-fasta', '-f', type=click.Path(exists=True),
              help='Contig FASTA file, to report scaffold statistics')
@click.option('--stats', 'stats_output', type=click.Path(),
              help='Write scaffold statistics as JSON (requires --reference-fasta)')
@click.option('--default-gap', type=click.IntRange(min=0),
              help='Gap length for joins without an estimate [default 25]')
@click.option('--no-estimated-gaps', is_flag=True,
              help='Use the default gap for every join')
@click.option('--fail-on-cycles', is_flag=True,
              help='Exit with an error if the graph has circular components')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True),
              help='Configuration file (YAML)')
@click.pass_context
def scaffold(ctx, dot_file, output, output_directory, reference_fasta, stats_output,
             default_gap, no_estimated_gaps, fail_on_cycles, config_file):
    """
    Turn a scaffold graph (DOT) into scaffolder YAML.

    Circular components cannot be scaffolded: break them by deleting one
    link edge from the DOT file.
    """
    overrides = {
        'scaffold.default_gap_length': default_gap,
        'scaffold.use_estimated_gaps': False if no_estimated_gaps else None,
        'scaffold.fail_on_cycles': True if fail_on_cycles else None,
    }

    try:
        config = _load_run_config(ctx, config_file, overrides)
        result = LinkagePipeline(config).run_scaffold(
            dot_file,
            output=output,
            fasta_file=reference_fasta,
            stats_output=stats_output,
            output_directory=output_directory,
        )
    except (LinkWeaverError, OSError, ValueError) as e:
        _fail(e)

    if output is None and output_directory is None:
        click.echo(format_scaffolder_yaml(result.assembly), nl=False)
    elif not ctx.obj.get('QUIET'):
        for target in (output, output_directory):
            if target is not None:
                click.echo(f"✓ {len(result.assembly)} scaffolds written to {target}")

    for component in result.cyclic_components:
        click.echo(f"⚠ Circular component not scaffolded: {', '.join(component)}", err=True)


@main.command()
@click.option('--dot-file', '-d', type=click.Path(exists=True),
              help='Scaffold graph in Graphviz DOT format')
@click.option('--scaffold-yaml', '-y', type=click.Path(exists=True),
              help='Scaffolder YAML (instead of --dot-file)')
@click.option('--fasta-file', '-s', required=True, type=click.Path(exists=True),
              help='FASTA file of contig sequences')
@click.option('--overlap', '-o', 'probe_length', type=click.IntRange(min=1),
              help='How far into each contig end to look for overlaps [default 100]')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True),
              help='Configuration file (YAML)')
@click.pass_context
def overlaps(ctx, dot_file, scaffold_yaml, fasta_file, probe_length, config_file):
    """
    Find scaffolded contig ends that overlap each other.

    Scaffolds are read from a scaffold graph (--dot-file) or from scaffolder
    YAML (--scaffold-yaml). Requires blastn (NCBI BLAST+) on PATH.
    """
    if (dot_file is None) == (scaffold_yaml is None):
        raise click.UsageError("Give exactly one of --dot-file and --scaffold-yaml")

    try:
        config = _load_run_config(ctx, config_file, {'overlap.probe_length': probe_length})
        found = LinkagePipeline(config).run_overlaps(
            dot_file, fasta_file, scaffold_file=scaffold_yaml,
        )
    except (LinkWeaverError, OSError, ValueError) as e:
        _fail(e)

    if found:
        click.echo(format_overlap_report(found), nl=False)
    elif not ctx.obj.get('QUIET'):
        click.echo("No overlapping contig ends found")


if __name__ == '__main__':
    sys.exit(main())
