"""Read-only access to the reference clinical-variant database."""

from pathlib import Path

import duckdb
import structlog

from variant_vault.aggregation.significance import significance_case_sql
from variant_vault.exceptions import MatchError
from variant_vault.matching.models import REFERENCE_COLUMNS, ReferenceMatch

logger = structlog.get_logger()

# Bound-parameter ceiling of a single lookup query
MAX_QUERY_PARAMETERS = 999


class ReferenceDatabase:
    """
    DuckDB reference table of annotated clinical variants keyed by rsID.

    The table must provide the columns rsid, chrom, pos, ref, alt, gene,
    clnsig, clnrevstat and condition. One rsID may have several rows.
    """

    def __init__(self, db_path: Path, table: str = "variants"):
        """
        Open the reference database read-only.

        Args:
            db_path: Path to the reference .duckdb file
            table: Name of the variants table

        Raises:
            MatchError: If the file is missing or cannot be opened
            ValueError: If table is not a plain SQL identifier
        """
        if not table.isidentifier():
            raise ValueError(f"Invalid reference table name: {table!r}")

        self.db_path = Path(db_path)
        self.table = table
        self.conn = None

        if not self.db_path.exists():
            raise MatchError("Reference database not found", str(self.db_path))

        try:
            self.conn = duckdb.connect(str(self.db_path), read_only=True)
        except duckdb.Error as e:
            raise MatchError("Failed to open reference database", str(e)) from e

        logger.debug("reference_db_open", path=str(self.db_path), table=table)

    @classmethod
    def from_config(cls, config: "VaultConfig") -> "ReferenceDatabase":
        """
        Create ReferenceDatabase from a VaultConfig.

        Args:
            config: VaultConfig instance

        Returns:
            ReferenceDatabase instance
        """
        return cls(config.reference_db_path, config.match.reference_table)

    def lookup_by_identifiers(self, identifiers: list[str]) -> list[ReferenceMatch]:
        """
        Fetch every reference row whose rsID is in identifiers.

        Rows come back ordered by significance score (most severe first),
        then gene symbol.

        Args:
            identifiers: At most MAX_QUERY_PARAMETERS rsIDs

        Returns:
            Matching rows as ReferenceMatch objects

        Raises:
            ValueError: If more identifiers than MAX_QUERY_PARAMETERS are given
            MatchError: If the query fails
        """
        if len(identifiers) > MAX_QUERY_PARAMETERS:
            raise ValueError(
                f"Lookup accepts at most {MAX_QUERY_PARAMETERS} identifiers, "
                f"got {len(identifiers)}"
            )
        if not identifiers:
            return []

        placeholders = ", ".join("?" for _ in identifiers)
        query = f"""
            SELECT {", ".join(REFERENCE_COLUMNS)}
            FROM {self.table}
            WHERE rsid IN ({placeholders})
            ORDER BY {significance_case_sql("clnsig")}, gene
        """

        try:
            rows = self.conn.execute(query, list(identifiers)).fetchall()
        except duckdb.Error as e:
            logger.error("reference_lookup_failed", table=self.table, error=str(e))
            raise MatchError("Reference database query failed", str(e)) from e

        return [ReferenceMatch.from_row(row) for row in rows]

    def count(self) -> int:
        """Number of rows in the reference table."""
        try:
            return self.conn.execute(f"SELECT COUNT(*) FROM {self.table}").fetchone()[0]
        except duckdb.Error as e:
            raise MatchError("Reference database query failed", str(e)) from e

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
