"""Import command: load reference gene files into the gene table.

Runs the requested imports in a fixed order:
1. Nomenclature file (bulk loaded, flushed before anything else reads it)
2. Supplementary gene file
3. GTF gene lengths (looks up the genes added above)
"""

import logging
import sys
from pathlib import Path

import click

from gene_registry.config.loader import load_config_with_overrides
from gene_registry.importers import (
    count_lines,
    import_gene_info,
    import_gene_lengths,
    import_supplementary_genes,
)
from gene_registry.persistence import DuckDBGeneStore

logger = logging.getLogger(__name__)


def _announce(label: str, path: Path) -> None:
    click.echo(f"Reading {label} from:  {path.resolve()}")
    click.echo(f" --> total number of lines:  {count_lines(path)}")


@click.command('import')
@click.option(
    '--genes',
    'genes_path',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='NCBI gene_info nomenclature file'
)
@click.option(
    '--supp-genes',
    'supp_genes_path',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Supplementary genes file (symbol, type, cytoband, length)'
)
@click.option(
    '--gtf',
    'gtf_path',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Gene-sorted GTF file for calculating and storing gene lengths'
)
@click.option(
    '--taxonomy-id',
    type=int,
    default=None,
    help='Override the taxonomy id of the organism to import'
)
@click.pass_context
def import_genes(ctx, genes_path, supp_genes_path, gtf_path, taxonomy_id):
    """Import gene, supplementary gene and gene length data.

    Genes already in the table are never updated; empty the table to
    re-import them. Gene lengths are written to genes found unambiguously
    by symbol and chromosome.
    """
    if not (genes_path or supp_genes_path or gtf_path):
        raise click.UsageError("Provide at least one of --genes, --supp-genes, --gtf")

    config_path = ctx.obj['config_path']
    click.echo(click.style("=== Gene Registry Import ===", bold=True))
    click.echo()

    store = None
    try:
        config = load_config_with_overrides(
            config_path,
            {"importer.taxonomy_id": taxonomy_id},
        )
        settings = config.importer
        store = DuckDBGeneStore.from_config(config)
        click.echo(f"DuckDB Path: {config.duckdb_path}")
        click.echo()

        if genes_path:
            _announce("gene data", genes_path)
            report = import_gene_info(
                genes_path,
                store,
                taxonomy_id=settings.taxonomy_id,
                placeholder=settings.placeholder,
                microrna_prefix=settings.microrna_prefix,
                microrna_type=settings.microrna_type,
            )
            # Genes must be in the table before lengths are calculated
            store.flush()
            click.echo(click.style(
                f"  Added {report.added} genes "
                f"({report.added_official} official, {report.added_unofficial} unofficial symbol)",
                fg='green'
            ))
            click.echo(f"  Already in table: {report.existing}")
            click.echo(f"  Skipped (duplicate symbol): {report.skipped_collisions}")
            click.echo(f"  Skipped (official symbol elsewhere): {report.skipped_official_elsewhere}")
            click.echo(f"  Skipped microRNA records: {report.skipped_microrna}")
            click.echo()

        if supp_genes_path:
            _announce("supp. gene data", supp_genes_path)
            supp_report = import_supplementary_genes(supp_genes_path, store)
            store.flush()
            click.echo(click.style(
                f"  Added {supp_report.genes_added} supplementary genes", fg='green'
            ))
            click.echo()

        if gtf_path:
            _announce("loci data", gtf_path)
            length_report = import_gene_lengths(
                gtf_path,
                store,
                not_found_report_limit=settings.not_found_report_limit,
            )
            click.echo(click.style(
                f"  Updated length info for {length_report.genes_updated} genes",
                fg='green'
            ))
            click.echo(f"  Genes not found or ambiguous: {len(length_report.genes_not_found)}")
            if length_report.double_ids:
                click.echo(click.style(
                    f"  Gene ids double in input file: {len(length_report.double_ids)}",
                    fg='yellow'
                ))
            click.echo()

        store.flush()
        click.echo(click.style("=== Import Summary ===", bold=True))
        click.echo(f"Genes in table: {store.gene_count()}")
        click.echo()
        click.echo(click.style("Done.", fg='green', bold=True))

    except Exception as e:
        click.echo(click.style(f"Import failed: {e}", fg='red'), err=True)
        logger.exception("Import command failed")
        sys.exit(1)
    finally:
        if store is not None:
            store.close()
