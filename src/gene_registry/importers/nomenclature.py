"""Gene nomenclature import with two-tier symbol reconciliation.

Reads an NCBI gene_info style file, groups genes by official
(nomenclature authority) symbol or, failing that, by provisional symbol,
and adds every gene whose symbol is unambiguous to the gene store.
Symbols shared by more than one gene id are reported and skipped.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

from gene_registry.importers.readers import parse_int, read_tsv_rows
from gene_registry.models import CanonicalGene
from gene_registry.persistence.base import GeneStore

logger = logging.getLogger(__name__)

GENE_INFO_COLUMNS = 11

ALREADY_IN_TABLE_MESSAGE = (
    "Gene {gene_id} is already in table. Updates are not allowed. If you need "
    "to update the `gene` table, empty it first and import again."
)

# Symbol -> {gene id -> gene}; a gene id seen twice under one symbol is one candidate
SymbolGroup = dict[int, CanonicalGene]


@dataclass
class GeneInfoRecord:
    """One data line of the nomenclature file.

    Attributes:
        taxonomy_id: NCBI taxonomy id (9606 for human)
        gene_id: Numeric gene identifier
        symbol: Provisional symbol (may be a placeholder)
        locus_tag: Locus tag (may be a placeholder)
        aliases: Pipe-delimited synonyms (may be a placeholder)
        cytoband: Map location (may be a placeholder)
        gene_type: Type of gene
        official_symbol: Symbol from nomenclature authority (may be a placeholder)
    """
    taxonomy_id: int
    gene_id: int
    symbol: str
    locus_tag: str
    aliases: str
    cytoband: str
    gene_type: str
    official_symbol: str


@dataclass
class SymbolGroups:
    """Genes grouped by symbol, split by whether the symbol is official."""
    official: dict[str, SymbolGroup] = field(default_factory=dict)
    unofficial: dict[str, SymbolGroup] = field(default_factory=dict)
    skipped_microrna: int = 0
    skipped_other_taxa: int = 0


@dataclass
class ReconcileReport:
    """Summary of one nomenclature import.

    Attributes:
        added_official: Genes added under their official symbol
        added_unofficial: Genes added under a provisional symbol
        existing: Genes skipped because their id was already stored
        skipped_collisions: Genes skipped because their symbol is shared
        skipped_official_elsewhere: Provisional genes skipped because their
            symbol is another gene's official symbol
        unofficial_symbols: Number of distinct provisional-only symbols
        unofficial_skipped: Provisional symbols not imported for any reason
        skipped_microrna: microRNA records left for the microRNA import
        skipped_other_taxa: Records of other organisms
    """
    added_official: int = 0
    added_unofficial: int = 0
    existing: int = 0
    skipped_collisions: int = 0
    skipped_official_elsewhere: int = 0
    unofficial_symbols: int = 0
    unofficial_skipped: int = 0
    skipped_microrna: int = 0
    skipped_other_taxa: int = 0

    @property
    def added(self) -> int:
        return self.added_official + self.added_unofficial


def read_gene_info(path: Path) -> Iterator[GeneInfoRecord]:
    """Parse the nomenclature file into records, in file order.

    Raises:
        ParseError: On short records or non-numeric taxonomy/gene ids
    """
    path = Path(path)
    for record_number, parts in read_tsv_rows(path, GENE_INFO_COLUMNS):
        yield GeneInfoRecord(
            taxonomy_id=parse_int(parts[0], "tax_id", path, record_number),
            gene_id=parse_int(parts[1], "GeneID", path, record_number),
            symbol=parts[2],
            locus_tag=parts[3],
            aliases=parts[4],
            cytoband=parts[7],
            gene_type=parts[9],
            official_symbol=parts[10],
        )


def group_by_symbol(
    records: Iterable[GeneInfoRecord],
    taxonomy_id: int = 9606,
    placeholder: str = "-",
    microrna_prefix: str = "MIR",
    microrna_type: str = "miscRNA",
) -> SymbolGroups:
    """Group nomenclature records by official or provisional symbol.

    Records of other organisms are skipped, as are microRNA records
    (provisional symbol with microrna_prefix and type microrna_type),
    which are imported separately. A record with an official symbol goes
    to the official group of that symbol; otherwise a record with a
    provisional symbol goes to the unofficial group. Records with neither
    contribute no gene.

    Args:
        records: Parsed nomenclature records
        taxonomy_id: Taxonomy id of the organism to import
        placeholder: Field value meaning "none"
        microrna_prefix: Symbol prefix of microRNA records
        microrna_type: Gene type of microRNA records (case-insensitive)

    Returns:
        SymbolGroups with both symbol maps in first-seen order
    """
    groups = SymbolGroups()

    for record in records:
        if record.taxonomy_id != taxonomy_id:
            groups.skipped_other_taxa += 1
            continue

        aliases: set[str] = set()
        if record.locus_tag and record.locus_tag != placeholder:
            aliases.add(record.locus_tag)
        if record.aliases and record.aliases != placeholder:
            aliases.update(a for a in record.aliases.split("|") if a)

        if (
            record.symbol.startswith(microrna_prefix)
            and record.gene_type.lower() == microrna_type.lower()
        ):
            logger.debug(
                f"Skipping microRNA record {record.gene_id} ({record.symbol}); "
                "microRNAs are imported separately"
            )
            groups.skipped_microrna += 1
            continue

        if record.official_symbol and record.official_symbol != placeholder:
            symbol = record.official_symbol
            target = groups.official
        elif record.symbol and record.symbol != placeholder:
            symbol = record.symbol
            target = groups.unofficial
        else:
            continue

        gene = CanonicalGene(gene_id=record.gene_id, symbol=symbol, aliases=aliases)
        if record.cytoband and record.cytoband != placeholder:
            gene.cytoband = record.cytoband
        gene.gene_type = record.gene_type

        target.setdefault(symbol, {}).setdefault(gene.gene_id, gene)

    return groups


def log_duplicate_symbol_warning(
    symbol: str,
    genes: Iterable[CanonicalGene],
    official: bool,
) -> str:
    """Log (and return) the warning for a symbol shared by several genes."""
    kind = "official" if official else "unofficial"
    gene_ids = " ".join(f"{gene.gene_id}. Ignore..." for gene in genes)
    message = f"More than 1 gene has the same ({kind}) symbol {symbol}: {gene_ids}"
    logger.warning(message)
    return message


def _add_if_new(gene: CanonicalGene, store: GeneStore, report: ReconcileReport) -> bool:
    if store.exists(gene.gene_id):
        logger.warning(ALREADY_IN_TABLE_MESSAGE.format(gene_id=gene.gene_id))
        report.existing += 1
        return False
    store.add(gene)
    return True


def add_genes_to_store(groups: SymbolGroups, store: GeneStore) -> ReconcileReport:
    """Add every gene with an unambiguous symbol to the store.

    Official symbols are resolved first. A provisional symbol is only
    used when no other gene in the file carries it as official symbol.
    Genes already in the store are never updated.

    Args:
        groups: Output of group_by_symbol
        store: Gene store to add genes to

    Returns:
        ReconcileReport with counters for every outcome

    Raises:
        StoreError: If the store fails; the import is aborted
    """
    report = ReconcileReport(
        skipped_microrna=groups.skipped_microrna,
        skipped_other_taxa=groups.skipped_other_taxa,
    )

    for symbol, candidates in groups.official.items():
        if len(candidates) == 1:
            gene = next(iter(candidates.values()))
            if _add_if_new(gene, store, report):
                logger.info(f"Gene {gene.gene_id} added with official symbol {symbol}")
                report.added_official += 1
        else:
            log_duplicate_symbol_warning(symbol, candidates.values(), official=True)
            report.skipped_collisions += len(candidates)

    if groups.unofficial:
        report.unofficial_symbols = len(groups.unofficial)
        for symbol, candidates in groups.unofficial.items():
            if len(candidates) > 1:
                log_duplicate_symbol_warning(symbol, candidates.values(), official=False)
                report.skipped_collisions += len(candidates)
                report.unofficial_skipped += 1
                continue

            gene = next(iter(candidates.values()))
            if symbol in groups.official:
                logger.warning(
                    f"Ignored line with gene id {gene.gene_id} because its unofficial "
                    f"symbol {symbol} is already an official symbol of another gene"
                )
                report.skipped_official_elsewhere += 1
                report.unofficial_skipped += 1
                continue

            if _add_if_new(gene, store, report):
                logger.info(f"Gene {gene.gene_id} added with no official symbol: {symbol}")
                report.added_unofficial += 1
            else:
                report.unofficial_skipped += 1

        logger.info(
            f"There were {report.unofficial_symbols} gene names in this file without "
            "an official symbol from nomenclature authority. "
            f"Imported: {report.added_unofficial}. Gene names skipped (because of "
            "duplicate symbol entry or because symbol is an official symbol of "
            f"another gene): {report.unofficial_skipped}"
        )

    if report.existing > 0:
        logger.warning(
            "Number of records skipped because the gene was already in the gene "
            f"table (updates are not allowed): {report.existing}"
        )

    return report


def import_gene_info(
    path: Path,
    store: GeneStore,
    taxonomy_id: int = 9606,
    placeholder: str = "-",
    microrna_prefix: str = "MIR",
    microrna_type: str = "miscRNA",
) -> ReconcileReport:
    """Full nomenclature import: parse -> group_by_symbol -> add_genes_to_store.

    The whole file is read before any gene is added, so a ParseError
    leaves the store untouched.
    """
    logger.info(f"Reading gene data from {path}")
    groups = group_by_symbol(
        read_gene_info(path),
        taxonomy_id=taxonomy_id,
        placeholder=placeholder,
        microrna_prefix=microrna_prefix,
        microrna_type=microrna_type,
    )
    logger.info(
        f"Grouped genes into {len(groups.official)} official and "
        f"{len(groups.unofficial)} unofficial symbols"
    )
    return add_genes_to_store(groups, store)
