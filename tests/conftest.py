"""Shared fixtures: an in-memory gene store and input file writers."""

import dataclasses
from pathlib import Path

import pytest

from gene_registry.exceptions import StoreError
from gene_registry.models import CanonicalGene, normalize_chromosome


class InMemoryGeneStore:
    """Dict-backed GeneStore that records every add and update."""

    def __init__(self, genes=()):
        self.genes: dict[int, CanonicalGene] = {}
        self.added: list[int] = []
        self.updates: list[tuple[int, int | None]] = []
        for gene in genes:
            self.genes[gene.gene_id] = _copy(gene)
        self._next_fake_id = -1

    def exists(self, gene_id: int) -> bool:
        return gene_id in self.genes

    def add(self, gene: CanonicalGene) -> None:
        if gene.gene_id is None:
            gene.gene_id = self._next_fake_id
            self._next_fake_id -= 1
        if gene.gene_id in self.genes:
            raise StoreError(f"Duplicate gene id {gene.gene_id}")
        self.genes[gene.gene_id] = _copy(gene)
        self.added.append(gene.gene_id)

    def update(self, gene: CanonicalGene) -> None:
        if gene.gene_id not in self.genes:
            raise StoreError(f"Gene {gene.gene_id} not in table")
        self.genes[gene.gene_id] = _copy(gene)
        self.updates.append((gene.gene_id, gene.length))

    def find_unambiguous(self, symbol, chromosome=None):
        candidates = [g for g in self.genes.values() if g.symbol == symbol]
        if len(candidates) > 1 and chromosome:
            candidates = [
                g for g in candidates
                if g.chromosome is not None
                and normalize_chromosome(g.chromosome) == normalize_chromosome(chromosome)
            ]
        if len(candidates) == 1:
            return _copy(candidates[0])
        return None


def _copy(gene: CanonicalGene) -> CanonicalGene:
    return dataclasses.replace(gene, aliases=set(gene.aliases))


class FailingGeneStore(InMemoryGeneStore):
    """Store whose chosen operations always fail (writes by default)."""

    def __init__(self, genes=(), fail_on=("add", "update")):
        super().__init__(genes)
        self.fail_on = set(fail_on)

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise StoreError(f"{operation} failed: connection lost")

    def exists(self, gene_id):
        self._check("exists")
        return super().exists(gene_id)

    def add(self, gene):
        self._check("add")
        super().add(gene)

    def update(self, gene):
        self._check("update")
        super().update(gene)

    def find_unambiguous(self, symbol, chromosome=None):
        self._check("find_unambiguous")
        return super().find_unambiguous(symbol, chromosome)


def gene_info_line(
    gene_id: int,
    symbol: str,
    official: str = "-",
    tax_id: int | str = 9606,
    locus_tag: str = "-",
    aliases: str = "-",
    cytoband: str = "-",
    gene_type: str = "protein-coding",
) -> str:
    """One NCBI gene_info line (16 columns, as downloaded)."""
    fields = [
        str(tax_id), str(gene_id), symbol, locus_tag, aliases,
        "-", "1", cytoband, "description", gene_type, official,
        "-", "O", "-", "20240101", "-",
    ]
    return "\t".join(fields)


def gtf_line(
    chromosome: str,
    feature: str,
    start: int | str,
    end: int | str,
    gene_id: str,
    gene_name: str,
) -> str:
    """One GENCODE-style GTF line."""
    attributes = (
        f'gene_id "{gene_id}"; transcript_id "{gene_id}.T1"; '
        f'gene_type "protein_coding"; gene_name "{gene_name}";'
    )
    return "\t".join([
        chromosome, "HAVANA", feature, str(start), str(end), ".", "+", ".", attributes,
    ])


@pytest.fixture
def memory_store():
    return InMemoryGeneStore()


@pytest.fixture
def write_file(tmp_path: Path):
    """Write lines to a file under tmp_path and return its path."""
    def _write(name: str, lines: list[str]) -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n")
        return path
    return _write
