"""Importers for nomenclature, supplementary and GTF gene files."""

from gene_registry.importers.nomenclature import (
    GeneInfoRecord,
    ReconcileReport,
    SymbolGroups,
    add_genes_to_store,
    group_by_symbol,
    import_gene_info,
    log_duplicate_symbol_warning,
    read_gene_info,
)
from gene_registry.importers.gene_length import (
    ExonRecord,
    GeneLengthReport,
    calculate_gene_length,
    import_gene_lengths,
    parse_gtf_attributes,
    read_exon_records,
    update_gene_lengths,
)
from gene_registry.importers.supplementary import (
    SupplementaryReport,
    import_supplementary_genes,
)
from gene_registry.importers.readers import count_lines

__all__ = [
    "GeneInfoRecord",
    "ReconcileReport",
    "SymbolGroups",
    "add_genes_to_store",
    "group_by_symbol",
    "import_gene_info",
    "log_duplicate_symbol_warning",
    "read_gene_info",
    "ExonRecord",
    "GeneLengthReport",
    "calculate_gene_length",
    "import_gene_lengths",
    "parse_gtf_attributes",
    "read_exon_records",
    "update_gene_lengths",
    "SupplementaryReport",
    "import_supplementary_genes",
    "count_lines",
]
