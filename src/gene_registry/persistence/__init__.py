"""Persistence layer for the canonical gene table."""

from gene_registry.persistence.base import GeneStore
from gene_registry.persistence.duckdb_store import DuckDBGeneStore

__all__ = ["GeneStore", "DuckDBGeneStore"]
