"""Variant store persistence: builder, read access and catalog."""

from variant_vault.persistence.builder import (
    STAGE_BULK_INSERT,
    STAGE_INDEXING,
    STAGE_METADATA,
    STAGE_PARSING,
    STAGE_READY,
    VariantStoreBuilder,
    ingest_genome_file,
    new_store_id,
)
from variant_vault.persistence.catalog import StoreCatalog
from variant_vault.persistence.models import StoreSummary
from variant_vault.persistence.store import VariantStoreReader

__all__ = [
    "STAGE_BULK_INSERT",
    "STAGE_INDEXING",
    "STAGE_METADATA",
    "STAGE_PARSING",
    "STAGE_READY",
    "StoreCatalog",
    "StoreSummary",
    "VariantStoreBuilder",
    "VariantStoreReader",
    "ingest_genome_file",
    "new_store_id",
]
