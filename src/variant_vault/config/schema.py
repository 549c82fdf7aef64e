"""Pydantic models for vault configuration."""

import hashlib
import json
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class ParserConfig(BaseModel):
    """Settings for reading genotype export files."""

    no_call_sentinel: str = Field(
        default="--",
        min_length=1,
        description="Genotype value marking a no-call; such rows are dropped",
    )
    identifier_prefix: str = Field(
        default="rs",
        min_length=1,
        description="Prefix of identifiers that can be matched against the reference database",
    )
    max_parse_errors: int = Field(
        default=100,
        ge=1,
        description="Number of per-line error messages retained per file",
    )


class MatchConfig(BaseModel):
    """Settings for reference database lookups."""

    chunk_size: int = Field(
        default=999,
        ge=1,
        le=999,
        description="Maximum identifiers bound into a single IN query",
    )
    reference_table: str = Field(
        default="variants",
        pattern=r"^[A-Za-z_][A-Za-z0-9_]*$",
        description="Table holding annotated reference variants",
    )


class ReportConfig(BaseModel):
    """Truncation limits for gene group display fields."""

    max_conditions: int = Field(
        default=3,
        ge=1,
        description="Conditions kept per gene group",
    )
    max_alleles: int = Field(
        default=3,
        ge=1,
        description="Allele pairs kept per gene group",
    )


class VaultConfig(BaseModel):
    """Main vault configuration."""

    data_dir: Path = Field(
        ...,
        description="Directory holding variant stores and the catalog manifest",
    )
    reference_db_path: Path = Field(
        ...,
        description="Path to the reference clinical-variant DuckDB database",
    )
    parser: ParserConfig = Field(
        default_factory=ParserConfig,
        description="Genotype export parsing settings",
    )
    match: MatchConfig = Field(
        default_factory=MatchConfig,
        description="Reference lookup settings",
    )
    report: ReportConfig = Field(
        default_factory=ReportConfig,
        description="Gene report settings",
    )

    @field_validator("data_dir")
    @classmethod
    def create_directory(cls, v: Path) -> Path:
        """Create directory if it doesn't exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    @property
    def stores_dir(self) -> Path:
        """Directory containing one DuckDB file per ingested genome."""
        return self.data_dir / "stores"

    @property
    def manifest_path(self) -> Path:
        """JSON manifest listing the known stores."""
        return self.stores_dir / "manifest.json"

    def config_hash(self) -> str:
        """
        Compute SHA-256 hash of the configuration.

        Returns a deterministic hash based on all config values,
        recorded in report sidecars so results can be traced to settings.
        """
        config_dict = self.model_dump(mode="python")
        config_json = json.dumps(
            config_dict,
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(config_json.encode()).hexdigest()
