"""Bulk-load parsed genotype records into a new indexed DuckDB store."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

import duckdb
import polars as pl
import structlog

from variant_vault.exceptions import StoreBuildError
from variant_vault.ingest import (
    DEFAULT_ASSEMBLY,
    DEFAULT_SOURCE_FORMAT,
    ParsedFile,
    parse_genome_file,
)
from variant_vault.ingest.parser import IDENTIFIER_PREFIX, MAX_PARSE_ERRORS, NO_CALL
from variant_vault.persistence.catalog import STORE_FILE_PREFIX, STORE_FILE_SUFFIX, StoreCatalog
from variant_vault.persistence.models import StoreSummary
from variant_vault.persistence.store import (
    METADATA_TABLE,
    PARSE_ERRORS_TABLE,
    STORE_INDEXES,
    STORE_SCHEMA,
    VARIANTS_TABLE,
)

logger = structlog.get_logger()

ProgressCallback = Callable[[str], None]

STAGE_PARSING = "parsing"
STAGE_METADATA = "storing metadata"
STAGE_BULK_INSERT = "bulk inserting"
STAGE_INDEXING = "indexing"
STAGE_READY = "ready"

PARTIAL_SUFFIX = ".partial"

VARIANT_FRAME_SCHEMA = {
    "identifier": pl.Utf8,
    "chromosome": pl.Utf8,
    "position": pl.UInt64,
    "genotype": pl.Utf8,
}


def new_store_id(stores_dir: Path, now: datetime | None = None) -> str:
    """
    Generate a store id from the ingestion timestamp.

    The id doubles as the store file stem. If a file (finished or partial)
    already uses the timestamp, a numeric suffix is appended.
    """
    now = now or datetime.now(timezone.utc)
    base = f"{STORE_FILE_PREFIX}{now.strftime('%Y%m%dT%H%M%S%fZ')}"

    candidate = base
    counter = 1
    while (
        (stores_dir / f"{candidate}{STORE_FILE_SUFFIX}").exists()
        or (stores_dir / f"{candidate}{STORE_FILE_SUFFIX}{PARTIAL_SUFFIX}").exists()
    ):
        candidate = f"{base}_{counter}"
        counter += 1
    return candidate


def _records_frame(parsed: ParsedFile) -> pl.DataFrame:
    records = parsed.records
    return pl.DataFrame(
        {
            "identifier": [r.identifier for r in records],
            "chromosome": [r.chromosome for r in records],
            "position": [r.position for r in records],
            "genotype": [r.genotype for r in records],
        },
        schema=VARIANT_FRAME_SCHEMA,
    )


def _remove_partial(partial_path: Path) -> None:
    partial_path.unlink(missing_ok=True)
    Path(f"{partial_path}.wal").unlink(missing_ok=True)


class VariantStoreBuilder:
    """
    Builds one store file per parsed genome export.

    The store is written under a .partial name, renamed into place only once
    rows and indexes are complete, and only then registered in the catalog.
    A failed build leaves nothing the catalog can see.
    """

    def __init__(
        self,
        catalog: StoreCatalog,
        source_format: str = DEFAULT_SOURCE_FORMAT,
        assembly: str = DEFAULT_ASSEMBLY,
    ):
        """
        Initialize builder.

        Args:
            catalog: Catalog that new stores are registered in
            source_format: Recorded export format
            assembly: Recorded genome build of the positions
        """
        self.catalog = catalog
        self.source_format = source_format
        self.assembly = assembly

    def build(
        self,
        parsed: ParsedFile,
        display_name: str,
        progress: Optional[ProgressCallback] = None,
    ) -> StoreSummary:
        """
        Create, fill and index a new store, then register it.

        Args:
            parsed: Parsed export to persist
            display_name: User-chosen name for the store
            progress: Optional callback receiving coarse stage names

        Returns:
            StoreSummary of the registered store

        Raises:
            StoreBuildError: If any write or index step fails. The partial file
                is removed and the catalog is left untouched.
        """
        report = progress or (lambda stage: None)
        ingested_at = datetime.now(timezone.utc)

        try:
            stores_dir = self.catalog.stores_dir
            stores_dir.mkdir(parents=True, exist_ok=True)
            store_id = new_store_id(stores_dir, ingested_at)
        except OSError as e:
            logger.error("store_build_failed", stores_dir=str(self.catalog.stores_dir), error=str(e))
            raise StoreBuildError("Failed to build variant store", str(e)) from e

        final_path = self.catalog.store_path(store_id)
        partial_path = final_path.with_name(final_path.name + PARTIAL_SUFFIX)

        summary = StoreSummary(
            store_id=store_id,
            display_name=display_name,
            source_name=parsed.source_name,
            ingested_at=ingested_at,
            total_variants=parsed.total_count,
            matchable_identifier_count=parsed.matchable_identifier_count,
            chromosome_count=len(parsed.chromosomes),
            parse_error_count=parsed.error_count,
        )

        logger.info(
            "store_build_start",
            store_id=store_id,
            display_name=display_name,
            row_count=parsed.total_count,
        )

        conn = None
        try:
            conn = duckdb.connect(str(partial_path))
            for statement in STORE_SCHEMA:
                conn.execute(statement)

            report(STAGE_METADATA)
            conn.execute(
                f"""
                INSERT INTO {METADATA_TABLE} (
                    store_id, display_name, source_name, source_format, assembly,
                    ingested_at, total_variants, matchable_identifier_count,
                    chromosome_count, parse_error_count
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    summary.store_id,
                    summary.display_name,
                    summary.source_name,
                    self.source_format,
                    self.assembly,
                    ingested_at.isoformat(),
                    summary.total_variants,
                    summary.matchable_identifier_count,
                    summary.chromosome_count,
                    summary.parse_error_count,
                ],
            )
            if parsed.parse_errors:
                conn.executemany(
                    f"INSERT INTO {PARSE_ERRORS_TABLE} (seq, message) VALUES (?, ?)",
                    list(enumerate(parsed.parse_errors)),
                )

            report(STAGE_BULK_INSERT)
            df = _records_frame(parsed)
            conn.execute(f"INSERT INTO {VARIANTS_TABLE} SELECT * FROM df")
            logger.info("store_bulk_insert_complete", store_id=store_id, row_count=df.height)

            # Indexes are only created once every row is loaded
            report(STAGE_INDEXING)
            for statement in STORE_INDEXES:
                conn.execute(statement)
            conn.execute("CHECKPOINT")

            conn.close()
            conn = None
            partial_path.rename(final_path)
        except Exception as e:
            if conn is not None:
                conn.close()
            _remove_partial(partial_path)
            logger.error("store_build_failed", store_id=store_id, error=str(e))
            raise StoreBuildError("Failed to build variant store", str(e)) from e

        self.catalog.register(summary)
        report(STAGE_READY)

        logger.info(
            "store_build_complete",
            store_id=store_id,
            path=str(final_path),
            total_variants=summary.total_variants,
            matchable=summary.matchable_identifier_count,
        )

        return summary

    @classmethod
    def from_config(cls, config: "VaultConfig", catalog: StoreCatalog | None = None) -> "VariantStoreBuilder":
        """
        Create VariantStoreBuilder from a VaultConfig.

        Args:
            config: VaultConfig instance
            catalog: Catalog to register into (default: catalog for config)

        Returns:
            VariantStoreBuilder instance
        """
        return cls(catalog or StoreCatalog.from_config(config))


def ingest_genome_file(
    path: Path | str,
    display_name: str,
    builder: VariantStoreBuilder,
    progress: Optional[ProgressCallback] = None,
    no_call: str = NO_CALL,
    identifier_prefix: str = IDENTIFIER_PREFIX,
    max_errors: int = MAX_PARSE_ERRORS,
) -> tuple[StoreSummary, ParsedFile]:
    """
    Parse an export file and build a registered store from it.

    Args:
        path: Plain-text or zip export
        display_name: User-chosen store name
        builder: Builder whose catalog receives the store
        progress: Optional stage callback; receives "parsing" before the
                  builder's own stages
        no_call: No-call genotype sentinel
        identifier_prefix: Prefix of matchable identifiers
        max_errors: Number of parse error messages retained

    Returns:
        Tuple of (registered store summary, parsed file)

    Raises:
        IngestionError: If the file cannot be read
        StoreBuildError: If the store cannot be written
    """
    if progress:
        progress(STAGE_PARSING)

    parsed = parse_genome_file(
        path,
        no_call=no_call,
        identifier_prefix=identifier_prefix,
        max_errors=max_errors,
    )
    summary = builder.build(parsed, display_name, progress=progress)
    return summary, parsed
