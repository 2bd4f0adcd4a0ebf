"""Capability interface the importers use to reach the gene table."""

from typing import Protocol

from gene_registry.models import CanonicalGene


class GeneStore(Protocol):
    """Storage backend for canonical genes.

    Implementations raise StoreError from add/update on constraint
    violations or I/O failures.
    """

    def exists(self, gene_id: int) -> bool:
        """Return True if a gene with this identifier is stored."""
        ...

    def add(self, gene: CanonicalGene) -> None:
        """Insert a new gene (and its aliases)."""
        ...

    def update(self, gene: CanonicalGene) -> None:
        """Overwrite the stored attributes of an existing gene."""
        ...

    def find_unambiguous(self, symbol: str, chromosome: str | None) -> CanonicalGene | None:
        """Return the single gene matching symbol on chromosome, else None."""
        ...
