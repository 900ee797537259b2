#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Command-line interface for KmerTally.

This module provides the main CLI entry point and all subcommands for
counting k-mers in FASTA files.
"""

import json
import logging
import sys
import click
from pathlib import Path
import yaml

from .version import __version__
from .config.schema import (
    TEMPLATES,
    ConfigValidationError,
    build_run_config,
    load_config,
    save_config_template,
    validate_config,
)
from .counting.codec import MAX_K
from .counting.engine import (
    DEFAULT_RESERVE,
    EXECUTOR_CHOICES,
    PARSER_CHOICES,
    KmerCounter,
)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _setup_logging(verbose: bool, quiet: bool):
    """Log to stderr so the statistics on stdout stay machine-readable."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger().setLevel(level)


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, verbose, quiet):
    """
    KmerTally: parallel k-mer statistics for FASTA files

    Counts nucleotides, k-mer windows, valid (ACGT-only) windows and
    distinct k-mers for k up to 32.
    """
    # Ensure context object exists
    ctx.ensure_object(dict)
    ctx.obj['VERBOSE'] = verbose
    ctx.obj['QUIET'] = quiet
    _setup_logging(verbose, quiet)


# ============================================================================
# Counting
# ============================================================================

@main.command()
@click.option('--kmer-size', '-k', 'kmer_size', required=True, type=click.IntRange(1, MAX_K),
              help=f'K-mer size (1-{MAX_K})')
@click.option('--input-file', '-f', 'input_file', required=True,
              type=click.Path(exists=True, dir_okay=False),
              help='Input FASTA file (optionally gzip-compressed)')
@click.option('--reserve', '-r', type=click.IntRange(min=0), default=None,
              help=f'Expected number of distinct k-mers [default: {DEFAULT_RESERVE}]. '
                   'Useless with --only-count')
@click.option('--only-count', '-c', is_flag=True,
              help='Only count nucleotides and k-mers, skip distinct k-mers')
@click.option('--max-threads', '-t', type=click.IntRange(min=0), default=None,
              help='Maximum number of workers (0 = one per CPU)')
@click.option('--unit-size', type=click.IntRange(min=1), default=None,
              help='Lines (or records) per work unit')
@click.option('--parser', type=click.Choice(PARSER_CHOICES), default=None,
              help='Input reader: raw lines or Biopython records '
                   '(biopython skips any sequence before the first header)')
@click.option('--executor', type=click.Choice(EXECUTOR_CHOICES), default=None,
              help='Worker pool type')
@click.option('--config', 'config_file', type=click.Path(exists=True, dir_okay=False),
              help='YAML configuration file (command-line options take precedence)')
@click.option('--json', 'json_output', type=click.Path(dir_okay=False),
              help='Also write the statistics to a JSON file')
@click.pass_context
def count(ctx, kmer_size, input_file, reserve, only_count, max_threads,
          unit_size, parser, executor, config_file, json_output):
    """
    Count k-mers in a FASTA file.

    Prints total nucleotides, total k-mers, valid k-mers and (unless
    --only-count) the number of distinct k-mers.

    Examples:
        kmertally count -k 21 -f genome.fa.gz

        kmertally count -k 31 -f reads.fa -c -t 8
    """
    ctx.ensure_object(dict)

    try:
        config = load_config(Path(config_file) if config_file else None)
        run_config = build_run_config(
            config,
            kmer_size,
            only_count=True if only_count else None,
            reserve=reserve,
            max_threads=max_threads,
            unit_size=unit_size,
            parser=parser,
            executor=executor,
        )
    except ConfigValidationError as e:
        click.echo(f"✗ Configuration error: {e}", err=True)
        sys.exit(1)

    if not (ctx.obj.get('VERBOSE') or ctx.obj.get('QUIET')):
        logging.getLogger().setLevel(config['output']['logging']['level'])

    json_output = json_output or config['output']['json']

    counter = KmerCounter(run_config)
    try:
        stats = counter.count_file(input_file)
    except (OSError, EOFError, UnicodeDecodeError) as e:
        click.echo(f"Error processing file: {e}", err=True)
        sys.exit(1)

    for line in stats.format_report():
        click.echo(line)

    if json_output:
        try:
            with open(json_output, 'w') as f:
                json.dump(stats.to_dict(), f, indent=2)
        except OSError as e:
            click.echo(f"Error writing JSON report: {e}", err=True)
            sys.exit(1)


# ============================================================================
# Configuration Management Commands
# ============================================================================

@main.group()
def config():
    """Configuration management commands."""
    pass


@config.command('init')
@click.option('--output', '-o', type=click.Path(), default='kmertally_config.yaml',
              help='Output configuration file path')
@click.option('--template', '-t', type=click.Choice(TEMPLATES),
              default='default', help='Configuration template type')
def config_init(output, template):
    """Generate a template configuration file with all available parameters."""
    click.echo(f"Generating {template} configuration template: {output}")

    try:
        save_config_template(Path(output), template=template)
        click.echo(f"✓ Configuration file created: {output}")
    except OSError as e:
        click.echo(f"✗ Error creating configuration: {e}", err=True)
        sys.exit(1)


@config.command('validate')
@click.argument('config_file', type=click.Path(exists=True))
def config_validate(config_file):
    """Validate a configuration file."""
    click.echo(f"Validating configuration file: {config_file}")

    try:
        config = load_config(Path(config_file))
    except ConfigValidationError as e:
        click.echo(f"✗ Error validating configuration: {e}", err=True)
        sys.exit(1)

    errors = validate_config(config)
    if errors:
        click.echo("\n✗ Configuration validation failed:")
        for error in errors:
            click.echo(f"  • {error}", err=True)
        sys.exit(1)

    click.echo("✓ Configuration is valid")


@config.command('show')
@click.argument('config_file', type=click.Path(exists=True))
@click.option('--format', '-f', type=click.Choice(['yaml', 'summary']), default='summary',
              help='Output format')
def config_show(config_file, format):
    """Display configuration settings."""
    try:
        config = load_config(Path(config_file))
    except ConfigValidationError as e:
        click.echo(f"✗ Error reading configuration: {e}", err=True)
        sys.exit(1)

    errors = validate_config(config)
    if errors:
        click.echo("✗ Configuration validation failed:", err=True)
        for error in errors:
            click.echo(f"  • {error}", err=True)
        sys.exit(1)

    if format == 'yaml':
        click.echo(yaml.dump(config, default_flow_style=False, sort_keys=False))
        return

    counting = config['counting']
    hardware = config['hardware']
    threads = hardware['threads'] or 'auto'

    click.echo(f"Configuration from: {config_file}")
    click.echo("=" * 60)
    click.echo("\nCounting:")
    click.echo(f"  Mode: {'count-only' if counting['only_count'] else 'distinct'}")
    click.echo(f"  Reserve: {counting['reserve']}")
    click.echo(f"  Unit size: {counting['unit_size']}")
    click.echo(f"  Parser: {counting['parser']}")
    click.echo("\nHardware:")
    click.echo(f"  Threads: {threads}")
    click.echo(f"  Executor: {hardware['executor']}")


# ============================================================================
# Utility Commands
# ============================================================================

@main.command()
def version():
    """Show version information."""
    click.echo(f"KmerTally v{__version__}")
    click.echo("\nDependencies:")

    import numpy
    click.echo(f"  NumPy: {numpy.__version__}")

    import Bio
    click.echo(f"  BioPython: {Bio.__version__}")

    click.echo(f"  PyYAML: {yaml.__version__}")


if __name__ == '__main__':
    sys.exit(main())
