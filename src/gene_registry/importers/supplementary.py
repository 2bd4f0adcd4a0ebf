"""Supplementary gene import.

Each line of the supplementary file (symbol, type, cytoband, length) is
added to the store as a new gene, without existence checks or symbol
reconciliation. Genes get a fake (negative) id from the store.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from gene_registry.importers.readers import parse_int, read_tsv_rows
from gene_registry.models import CanonicalGene
from gene_registry.persistence.base import GeneStore

logger = logging.getLogger(__name__)

SUPP_GENE_COLUMNS = 4


@dataclass
class SupplementaryReport:
    genes_added: int = 0


def import_supplementary_genes(path: Path, store: GeneStore) -> SupplementaryReport:
    """Add every gene in the supplementary file to the store.

    Raises:
        ParseError: If a length is not a number
        StoreError: If the store rejects a gene
    """
    path = Path(path)
    report = SupplementaryReport()
    logger.info(f"Reading supp. gene data from {path}")

    for record_number, parts in read_tsv_rows(path, SUPP_GENE_COLUMNS):
        gene = CanonicalGene(gene_id=None, symbol=parts[0])
        if parts[1]:
            gene.gene_type = parts[1]
        if parts[2]:
            gene.cytoband = parts[2]
        if parts[3]:
            gene.length = parse_int(parts[3], "length", path, record_number)
        store.add(gene)
        report.genes_added += 1

    logger.info(f"Added {report.genes_added} supplementary genes")
    return report
