"""DuckDB layout of a single variant store and read access to it."""

from pathlib import Path
from typing import Optional

import duckdb
import polars as pl

from variant_vault.persistence.models import StoreSummary

METADATA_TABLE = "ingestion_metadata"
VARIANTS_TABLE = "variants"
PARSE_ERRORS_TABLE = "parse_errors"

STORE_SCHEMA = (
    f"""
    CREATE TABLE {METADATA_TABLE} (
        store_id VARCHAR NOT NULL,
        display_name VARCHAR NOT NULL,
        source_name VARCHAR,
        source_format VARCHAR,
        assembly VARCHAR,
        ingested_at VARCHAR NOT NULL,
        total_variants INTEGER NOT NULL,
        matchable_identifier_count INTEGER NOT NULL,
        chromosome_count INTEGER NOT NULL,
        parse_error_count INTEGER NOT NULL
    )
    """,
    f"""
    CREATE TABLE {VARIANTS_TABLE} (
        identifier VARCHAR NOT NULL,
        chromosome VARCHAR NOT NULL,
        position UBIGINT NOT NULL,
        genotype VARCHAR NOT NULL
    )
    """,
    f"""
    CREATE TABLE {PARSE_ERRORS_TABLE} (
        seq INTEGER NOT NULL,
        message VARCHAR NOT NULL
    )
    """,
)

# Built after the bulk load; see VariantStoreBuilder.build
STORE_INDEXES = (
    f"CREATE INDEX idx_variants_identifier ON {VARIANTS_TABLE} (identifier)",
    f"CREATE INDEX idx_variants_chr_pos ON {VARIANTS_TABLE} (chromosome, position)",
)


class VariantStoreReader:
    """
    Read-only access to one variant store file.

    Opens the DuckDB file in read-only mode so a store is never mutated
    after it has been built.
    """

    def __init__(self, db_path: Path):
        """
        Open a store for reading.

        Args:
            db_path: Path to the store's .duckdb file

        Raises:
            duckdb.Error: If the file cannot be opened as a DuckDB database
        """
        self.db_path = Path(db_path)
        self.conn = duckdb.connect(str(self.db_path), read_only=True)

    def read_metadata(self) -> StoreSummary:
        """
        Read the ingestion metadata row.

        Returns:
            StoreSummary built from the first metadata row

        Raises:
            duckdb.Error: If the metadata table is missing
            LookupError: If the metadata table is empty
        """
        row = self.conn.execute(f"""
            SELECT store_id, display_name, source_name, ingested_at,
                   total_variants, matchable_identifier_count,
                   chromosome_count, parse_error_count
            FROM {METADATA_TABLE}
            LIMIT 1
        """).fetchone()

        if row is None:
            raise LookupError(f"No ingestion metadata in {self.db_path.name}")

        return StoreSummary(
            store_id=row[0],
            display_name=row[1],
            source_name=row[2] or "",
            ingested_at=row[3],
            total_variants=row[4],
            matchable_identifier_count=row[5],
            chromosome_count=row[6],
            parse_error_count=row[7],
        )

    def get_matchable_identifiers(self, prefix: str = "rs") -> list[str]:
        """
        Distinct identifiers carrying the reference prefix, sorted.

        Args:
            prefix: Identifier prefix shared with the reference database

        Returns:
            Sorted list of distinct identifiers
        """
        rows = self.conn.execute(
            f"""
            SELECT DISTINCT identifier
            FROM {VARIANTS_TABLE}
            WHERE starts_with(identifier, ?)
            ORDER BY identifier
            """,
            [prefix],
        ).fetchall()
        return [row[0] for row in rows]

    def get_genotypes(self, identifiers: list[str], chunk_size: int = 999) -> dict[str, str]:
        """
        Look up the stored genotype for each identifier.

        Queried in chunks so the bound-parameter count stays under chunk_size.
        When an identifier occurs more than once the first row read wins.

        Args:
            identifiers: Identifiers to look up
            chunk_size: Maximum identifiers per query

        Returns:
            Mapping of identifier to genotype for identifiers present in the store
        """
        genotypes: dict[str, str] = {}
        for start in range(0, len(identifiers), chunk_size):
            chunk = identifiers[start:start + chunk_size]
            placeholders = ", ".join("?" for _ in chunk)
            rows = self.conn.execute(
                f"""
                SELECT identifier, genotype
                FROM {VARIANTS_TABLE}
                WHERE identifier IN ({placeholders})
                """,
                chunk,
            ).fetchall()
            for identifier, genotype in rows:
                genotypes.setdefault(identifier, genotype)
        return genotypes

    def count_variants(self) -> int:
        """Number of stored variant rows."""
        return self.conn.execute(f"SELECT COUNT(*) FROM {VARIANTS_TABLE}").fetchone()[0]

    def parse_errors(self) -> list[str]:
        """Retained parse error messages in the order they were reported."""
        rows = self.conn.execute(
            f"SELECT message FROM {PARSE_ERRORS_TABLE} ORDER BY seq"
        ).fetchall()
        return [row[0] for row in rows]

    def execute_query(
        self,
        query: str,
        params: Optional[list] = None
    ) -> pl.DataFrame:
        """
        Execute arbitrary read-only SQL and return a polars DataFrame.

        Args:
            query: SQL query to execute
            params: Optional query parameters

        Returns:
            Query results as polars DataFrame
        """
        if params:
            result = self.conn.execute(query, params)
        else:
            result = self.conn.execute(query)
        return result.pl()

    def close(self) -> None:
        """Close the DuckDB connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - closes connection."""
        self.close()
        return False
