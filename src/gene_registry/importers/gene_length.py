"""Gene length calculation from GTF exon and CDS loci.

Gene length is the number of base positions covered by at least one
exon or CDS record of the gene; overlapping loci are counted once.
The GTF must be sorted by gene so that all records of a gene are
contiguous. Lengths are written to genes already in the store.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

import numpy as np

from gene_registry.importers.readers import parse_int, read_tsv_rows
from gene_registry.models import CanonicalGene, normalize_chromosome
from gene_registry.persistence.base import GeneStore

logger = logging.getLogger(__name__)

GTF_COLUMNS = 9
LENGTH_FEATURES = frozenset({"exon", "CDS"})

Locus = tuple[int, int]


@dataclass
class ExonRecord:
    """An exon or CDS line of the GTF file."""
    chromosome: str
    start: int
    end: int
    gene_id: str
    gene_name: str


@dataclass
class GeneLengthReport:
    """Summary of one gene length import.

    Attributes:
        genes_updated: Number of length writes to the store
        genes_not_found: Symbols with no unambiguous gene in the store
        double_ids: Feature ids written more than once (non-contiguous groups)
        skipped_chromosome_mismatch: Groups whose chromosome differs from the
            stored gene's cytoband
    """
    genes_updated: int = 0
    genes_not_found: set[str] = field(default_factory=set)
    double_ids: list[str] = field(default_factory=list)
    skipped_chromosome_mismatch: int = 0


def calculate_gene_length(loci: Iterable[Locus]) -> int:
    """Count the positions covered by at least one locus.

    Loci are half-open [start, end) intervals. Positions are marked in a
    boolean array spanning min(start)..max(end), so overlapping parts
    count once: [(3, 10), (5, 11)] covers 3..10 and gives 8.

    Raises:
        ValueError: If loci is empty or max(end) < min(start)
    """
    loci = list(loci)
    if not loci:
        raise ValueError("Cannot calculate gene length without loci")

    lowest = min(start for start, _ in loci)
    highest = max(end for _, end in loci)
    if highest < lowest:
        raise ValueError(f"Found error: max={highest}, min={lowest}")

    covered = np.zeros(highest - lowest, dtype=bool)
    for start, end in loci:
        covered[start - lowest:end - lowest] = True

    return int(np.count_nonzero(covered))


def parse_gtf_attributes(attributes: str) -> dict[str, str]:
    """Parse a GTF attribute column ('key "value"; key "value";') into a dict."""
    parsed: dict[str, str] = {}
    for item in attributes.split(";"):
        item = item.strip()
        if not item:
            continue
        key, _, value = item.partition(" ")
        parsed[key] = value.strip().strip('"')
    return parsed


def read_exon_records(path: Path) -> Iterator[ExonRecord]:
    """Yield exon and CDS records of a GTF file in file order.

    Records without gene_id or gene_name are dropped.

    Raises:
        ParseError: If start or end is not a number
    """
    path = Path(path)
    for record_number, parts in read_tsv_rows(path, GTF_COLUMNS):
        if parts[2] not in LENGTH_FEATURES:
            continue

        attributes = parse_gtf_attributes(parts[8])
        gene_id = attributes.get("gene_id")
        gene_name = attributes.get("gene_name")
        if not gene_id or not gene_name:
            logger.debug(f"Record {record_number} has no gene_id or gene_name, skipped")
            continue

        yield ExonRecord(
            chromosome=parts[0],
            start=parse_int(parts[3], "start", path, record_number),
            end=parse_int(parts[4], "end", path, record_number),
            gene_id=gene_id,
            gene_name=gene_name,
        )


def _store_gene_length(
    gene: CanonicalGene,
    feature_id: str,
    chromosome: str,
    loci: list[Locus],
    store: GeneStore,
    report: GeneLengthReport,
    saved_ids: set[str],
) -> None:
    length = calculate_gene_length(loci)

    # Symbols can exist on several chromosomes; only trust the matching one
    if gene.chromosome is not None and (
        normalize_chromosome(gene.chromosome) != normalize_chromosome(chromosome)
    ):
        logger.debug(
            f"{gene.symbol} is on chromosome {gene.chromosome}, "
            f"not saving length from {feature_id} on {chromosome}"
        )
        report.skipped_chromosome_mismatch += 1
        return

    gene.length = length
    store.update(gene)
    report.genes_updated += 1

    if feature_id in saved_ids:
        logger.warning(f"{feature_id} already is double in input file")
        report.double_ids.append(feature_id)
    else:
        saved_ids.add(feature_id)


def update_gene_lengths(
    records: Iterable[ExonRecord],
    store: GeneStore,
    not_found_report_limit: int = 100,
) -> GeneLengthReport:
    """Compute and store a length for every gene group in records.

    Consecutive records with the same gene_id form one group. When the
    gene_id switches, the previous group's length is written and the new
    gene is looked up by symbol and chromosome. Groups whose gene is not
    found (or ambiguous) are skipped. A gene_id seen again after another
    gene_id is a new group; its length overwrites the earlier one.

    Args:
        records: Exon/CDS records sorted by gene
        store: Gene store to look genes up in and write lengths to
        not_found_report_limit: Maximum characters of the not-found listing

    Returns:
        GeneLengthReport

    Raises:
        StoreError: If a lookup or update fails
    """
    report = GeneLengthReport()
    saved_ids: set[str] = set()

    current_id: str | None = None
    current_gene: CanonicalGene | None = None
    current_chromosome = ""
    loci: list[Locus] = []

    for record in records:
        if record.gene_id != current_id:
            if current_gene is not None:
                _store_gene_length(
                    current_gene, current_id, current_chromosome, loci,
                    store, report, saved_ids,
                )
            loci = []
            current_id = record.gene_id
            current_chromosome = record.chromosome
            current_gene = store.find_unambiguous(record.gene_name, record.chromosome)
            if current_gene is None:
                report.genes_not_found.add(record.gene_name)

        if current_gene is not None:
            loci.append((record.start, record.end))

    # Last gene of the file
    if current_gene is not None:
        _store_gene_length(
            current_gene, current_id, current_chromosome, loci,
            store, report, saved_ids,
        )

    if report.genes_not_found:
        listing = str(sorted(report.genes_not_found))
        if len(listing) > not_found_report_limit:
            listing = listing[:not_found_report_limit] + "..."
        logger.warning(
            "Genes not found, or symbol found to be ambiguous "
            f"({len(report.genes_not_found)} genes in total): {listing}"
        )
    logger.info(f"Updated length info for {report.genes_updated} genes")

    return report


def import_gene_lengths(
    path: Path,
    store: GeneStore,
    not_found_report_limit: int = 100,
) -> GeneLengthReport:
    """Read a gene-sorted GTF file and store gene lengths."""
    logger.info(f"Reading loci data from {path}")
    return update_gene_lengths(
        read_exon_records(path),
        store,
        not_found_report_limit=not_found_report_limit,
    )
