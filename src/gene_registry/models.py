"""Gene entity shared by the importers and the gene store."""

import re
from dataclasses import dataclass, field

_CYTOBAND_ARM = re.compile(r"[pq]")


def normalize_chromosome(chromosome: str) -> str:
    """Strip a leading 'chr' so '1', 'chr1' and 'CHR1' compare equal."""
    chromosome = chromosome.strip()
    if chromosome[:3].lower() == "chr":
        chromosome = chromosome[3:]
    return chromosome.upper()


def chromosome_from_cytoband(cytoband: str) -> str:
    """Chromosome part of a cytoband, e.g. '17q21.31' -> '17', 'Xp22' -> 'X'."""
    return _CYTOBAND_ARM.split(cytoband, maxsplit=1)[0]


@dataclass
class CanonicalGene:
    """A gene as stored in the registry.

    Attributes:
        gene_id: Numeric gene identifier (Entrez). None until the store
            assigns a fake identifier to a gene loaded without one.
        symbol: Primary gene symbol
        aliases: Alternative symbols, including the locus tag
        cytoband: Cytogenetic band (e.g. 11q13.5), None if unknown
        length: Gene length in bp (union of exon loci), None if unknown
        gene_type: Gene type classification (e.g. protein-coding)
    """
    gene_id: int | None
    symbol: str
    aliases: set[str] = field(default_factory=set)
    cytoband: str | None = None
    length: int | None = None
    gene_type: str | None = None

    @property
    def chromosome(self) -> str | None:
        """Chromosome derived from the cytoband, or None without cytoband."""
        if not self.cytoband:
            return None
        return chromosome_from_cytoband(self.cytoband)
