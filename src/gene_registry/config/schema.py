"""Pydantic models for gene registry configuration."""

import hashlib
import json
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class ImportSettings(BaseModel):
    """Settings applied while reading the input files."""

    taxonomy_id: int = Field(
        default=9606,
        ge=1,
        description="NCBI taxonomy id of the organism to import (9606 = human)",
    )
    placeholder: str = Field(
        default="-",
        min_length=1,
        description="Value used in the nomenclature file for an empty field",
    )
    microrna_prefix: str = Field(
        default="MIR",
        description="Symbol prefix of microRNA records, which are imported separately",
    )
    microrna_type: str = Field(
        default="miscRNA",
        description="Gene type of microRNA records (compared case-insensitively)",
    )
    not_found_report_limit: int = Field(
        default=100,
        ge=10,
        description="Maximum characters of the 'genes not found' listing",
    )


class RegistryConfig(BaseModel):
    """Main gene registry configuration."""

    data_dir: Path = Field(
        ...,
        description="Directory holding the input reference files",
    )
    duckdb_path: Path = Field(
        ...,
        description="Path to DuckDB database file holding the gene table",
    )
    bulk_load: bool = Field(
        default=True,
        description="Buffer gene inserts and write them at explicit flush points",
    )
    importer: ImportSettings = Field(
        default_factory=ImportSettings,
        description="Input file settings",
    )

    @field_validator("data_dir")
    @classmethod
    def create_directory(cls, v: Path) -> Path:
        """Create directory if it doesn't exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    def config_hash(self) -> str:
        """
        Compute SHA-256 hash of the configuration.

        Returns a deterministic hash based on all config values,
        useful for telling apart imports made with different settings.
        """
        config_json = json.dumps(
            self.model_dump(mode="python"),
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(config_json.encode()).hexdigest()
