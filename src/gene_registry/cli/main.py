"""Main CLI entry point for gene-registry.

Provides command group with global options and subcommands for gene imports.
"""

import logging
from pathlib import Path

import click

from gene_registry import __version__
from gene_registry.config.loader import load_config
from gene_registry.cli.import_cmd import import_genes


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@click.group()
@click.option(
    '--config',
    type=click.Path(exists=True, path_type=Path),
    default='config/default.yaml',
    help='Path to gene registry configuration YAML file'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging (DEBUG level)'
)
@click.pass_context
def cli(ctx, config, verbose):
    """Gene-registry: import reference gene files into a canonical gene table.

    Reconciles gene symbols from a nomenclature file, loads supplementary
    genes, and computes gene lengths from a GTF annotation.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@cli.command()
@click.pass_context
def info(ctx):
    """Display registry information and configuration summary."""
    config_path = ctx.obj['config_path']

    click.echo(f"Gene Registry v{__version__}")
    click.echo(f"Config: {config_path}")
    click.echo()

    try:
        config = load_config(config_path)

        click.echo(f"Config Hash: {config.config_hash()[:16]}...")
        click.echo()

        click.echo(click.style("Paths:", bold=True))
        click.echo(f"  Data Directory: {config.data_dir}")
        click.echo(f"  DuckDB Path: {config.duckdb_path}")
        click.echo(f"  Bulk Load: {config.bulk_load}")
        click.echo()

        click.echo(click.style("Import Settings:", bold=True))
        click.echo(f"  Taxonomy ID: {config.importer.taxonomy_id}")
        click.echo(f"  Placeholder: {config.importer.placeholder}")
        click.echo(f"  microRNA Prefix: {config.importer.microrna_prefix}")
        click.echo(f"  microRNA Type: {config.importer.microrna_type}")

    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)


# Register commands
cli.add_command(import_genes)


if __name__ == '__main__':
    cli()
