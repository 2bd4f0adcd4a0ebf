"""DuckDB-based gene table with buffered bulk loading."""

from pathlib import Path
from typing import Optional

import duckdb
import polars as pl
import structlog

from gene_registry.exceptions import StoreError
from gene_registry.models import CanonicalGene, normalize_chromosome

logger = structlog.get_logger()

GENE_SCHEMA = {
    "gene_id": pl.Int64,
    "symbol": pl.Utf8,
    "gene_type": pl.Utf8,
    "cytoband": pl.Utf8,
    "length": pl.Int64,
}

ALIAS_SCHEMA = {
    "gene_id": pl.Int64,
    "alias": pl.Utf8,
}


class DuckDBGeneStore:
    """
    DuckDB-backed storage for the canonical gene table.

    In bulk-load mode, added genes are buffered in memory and written in a
    single transaction by flush(). Lookups by identifier see buffered genes;
    symbol lookups and updates flush the buffer first.
    """

    def __init__(self, db_path: Path, bulk_load: bool = False):
        """
        Initialize the store, creating the gene tables if needed.

        Args:
            db_path: Path to DuckDB database file. Parent directories
                     are created automatically.
            bulk_load: If True, buffer add() calls until flush()
        """
        self.db_path = Path(db_path)
        self.bulk_load = bulk_load
        self._pending: dict[int, CanonicalGene] = {}
        self._next_fake_id: Optional[int] = None

        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            self.conn = duckdb.connect(str(self.db_path))
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS gene (
                    gene_id BIGINT PRIMARY KEY,
                    symbol VARCHAR NOT NULL,
                    gene_type VARCHAR,
                    cytoband VARCHAR,
                    length BIGINT
                )
            """)
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS gene_alias (
                    gene_id BIGINT NOT NULL,
                    alias VARCHAR NOT NULL,
                    PRIMARY KEY (gene_id, alias)
                )
            """)
        except duckdb.Error as e:
            raise StoreError(f"Cannot open gene store {self.db_path}: {e}") from e

        logger.info("gene_store_open", path=str(self.db_path), bulk_load=bulk_load)

    def exists(self, gene_id: int) -> bool:
        """Check whether a gene id is stored or waiting in the buffer."""
        if gene_id in self._pending:
            return True
        try:
            result = self.conn.execute(
                "SELECT COUNT(*) FROM gene WHERE gene_id = ?", [gene_id]
            ).fetchone()
        except duckdb.Error as e:
            raise StoreError(f"Existence check failed for gene {gene_id}: {e}") from e
        return result[0] > 0

    def add(self, gene: CanonicalGene) -> None:
        """
        Add a gene. Genes without an id get the next negative (fake) id.

        Raises:
            StoreError: If the id is already buffered or stored
        """
        if gene.gene_id is None:
            gene.gene_id = self._allocate_fake_id()

        if not self.bulk_load:
            self._write_genes([gene])
            return

        if gene.gene_id in self._pending:
            raise StoreError(f"Duplicate gene id {gene.gene_id} in bulk load buffer")
        self._pending[gene.gene_id] = gene

    def flush(self) -> int:
        """
        Write all buffered genes in one transaction.

        Returns:
            Number of genes written
        """
        if not self._pending:
            return 0
        genes = list(self._pending.values())
        self._write_genes(genes)
        self._pending.clear()
        logger.info("gene_store_flush", gene_count=len(genes))
        return len(genes)

    def update(self, gene: CanonicalGene) -> None:
        """
        Overwrite symbol, type, cytoband, length and aliases of a stored gene.

        Raises:
            StoreError: If the gene is not stored or the update fails
        """
        self.flush()
        if gene.gene_id is None or not self.exists(gene.gene_id):
            raise StoreError(f"Cannot update gene {gene.gene_id}: not in gene table")

        try:
            self.conn.begin()
            stored = {
                row[0] for row in self.conn.execute(
                    "SELECT alias FROM gene_alias WHERE gene_id = ?", [gene.gene_id]
                ).fetchall()
            }
            self.conn.execute("""
                UPDATE gene
                SET symbol = ?, gene_type = ?, cytoband = ?, length = ?
                WHERE gene_id = ?
            """, [gene.symbol, gene.gene_type, gene.cytoband, gene.length, gene.gene_id])
            for alias in sorted(stored - gene.aliases):
                self.conn.execute(
                    "DELETE FROM gene_alias WHERE gene_id = ? AND alias = ?",
                    [gene.gene_id, alias],
                )
            for alias in sorted(gene.aliases - stored):
                self.conn.execute(
                    "INSERT INTO gene_alias (gene_id, alias) VALUES (?, ?)",
                    [gene.gene_id, alias],
                )
            self.conn.commit()
        except duckdb.Error as e:
            self.conn.rollback()
            raise StoreError(f"Update failed for gene {gene.gene_id}: {e}") from e

    def get_gene(self, gene_id: int) -> Optional[CanonicalGene]:
        """Load a stored gene by id, or None if absent."""
        if gene_id in self._pending:
            return self._pending[gene_id]
        rows = self._query(
            "SELECT gene_id, symbol, gene_type, cytoband, length FROM gene WHERE gene_id = ?",
            [gene_id],
        )
        return rows[0] if rows else None

    def find_unambiguous(
        self,
        symbol: str,
        chromosome: Optional[str] = None,
    ) -> Optional[CanonicalGene]:
        """
        Find the single gene matching a symbol, using chromosome to disambiguate.

        Official symbols are tried first and aliases only when no symbol
        matches. When several genes match, only those whose cytoband lies
        on the given chromosome are kept.

        Args:
            symbol: Gene symbol or alias (case-insensitive)
            chromosome: Chromosome name, with or without 'chr' prefix

        Returns:
            The matching gene, or None if no gene or several genes match
        """
        self.flush()
        candidates = self._query(
            """
            SELECT gene_id, symbol, gene_type, cytoband, length
            FROM gene WHERE upper(symbol) = upper(?)
            ORDER BY gene_id
            """,
            [symbol],
        )
        if not candidates:
            candidates = self._query(
                """
                SELECT DISTINCT g.gene_id, g.symbol, g.gene_type, g.cytoband, g.length
                FROM gene g JOIN gene_alias a ON g.gene_id = a.gene_id
                WHERE upper(a.alias) = upper(?)
                ORDER BY g.gene_id
                """,
                [symbol],
            )

        if len(candidates) > 1 and chromosome:
            wanted = normalize_chromosome(chromosome)
            candidates = [
                gene for gene in candidates
                if gene.chromosome is not None
                and normalize_chromosome(gene.chromosome) == wanted
            ]

        if len(candidates) == 1:
            return candidates[0]
        return None

    def gene_count(self) -> int:
        """Number of genes in the table (excluding the buffer)."""
        try:
            return self.conn.execute("SELECT COUNT(*) FROM gene").fetchone()[0]
        except duckdb.Error as e:
            raise StoreError(f"Cannot count genes: {e}") from e

    def _allocate_fake_id(self) -> int:
        if self._next_fake_id is None:
            try:
                lowest = self.conn.execute(
                    "SELECT COALESCE(MIN(gene_id), 0) FROM gene"
                ).fetchone()[0]
            except duckdb.Error as e:
                raise StoreError(f"Cannot allocate gene id: {e}") from e
            self._next_fake_id = min(lowest, 0) - 1
        fake_id = self._next_fake_id
        self._next_fake_id -= 1
        return fake_id

    def _query(self, query: str, params: list) -> list[CanonicalGene]:
        try:
            rows = self.conn.execute(query, params).fetchall()
            genes = []
            for gene_id, symbol, gene_type, cytoband, length in rows:
                aliases = self.conn.execute(
                    "SELECT alias FROM gene_alias WHERE gene_id = ?", [gene_id]
                ).fetchall()
                genes.append(CanonicalGene(
                    gene_id=gene_id,
                    symbol=symbol,
                    aliases={a[0] for a in aliases},
                    cytoband=cytoband,
                    length=length,
                    gene_type=gene_type,
                ))
        except duckdb.Error as e:
            raise StoreError(f"Gene query failed: {e}") from e
        return genes

    def _write_genes(self, genes: list[CanonicalGene]) -> None:
        gene_df = pl.DataFrame(
            [
                (g.gene_id, g.symbol, g.gene_type, g.cytoband, g.length)
                for g in genes
            ],
            schema=GENE_SCHEMA,
            orient="row",
        )
        alias_df = pl.DataFrame(
            [(g.gene_id, alias) for g in genes for alias in sorted(g.aliases)],
            schema=ALIAS_SCHEMA,
            orient="row",
        )

        try:
            self.conn.begin()
            self.conn.execute("""
                INSERT INTO gene (gene_id, symbol, gene_type, cytoband, length)
                SELECT gene_id, symbol, gene_type, cytoband, length FROM gene_df
            """)
            if len(alias_df) > 0:
                self.conn.execute("""
                    INSERT INTO gene_alias (gene_id, alias)
                    SELECT gene_id, alias FROM alias_df
                """)
            self.conn.commit()
        except duckdb.Error as e:
            self.conn.rollback()
            raise StoreError(f"Failed to add {len(genes)} gene(s): {e}") from e

    def close(self) -> None:
        """Close the DuckDB connection. Buffered genes are discarded."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - flushes on success, then closes."""
        try:
            if exc_type is None:
                self.flush()
        finally:
            self.close()
        return False

    @classmethod
    def from_config(cls, config: "RegistryConfig") -> "DuckDBGeneStore":
        """
        Create DuckDBGeneStore from a RegistryConfig.

        Args:
            config: RegistryConfig instance

        Returns:
            DuckDBGeneStore instance
        """
        return cls(config.duckdb_path, bulk_load=config.bulk_load)
