"""Gene registry import pipeline.

Reconciles nomenclature, supplementary and GTF annotation files into a
canonical gene table stored in DuckDB.
"""

__version__ = "0.1.0"
