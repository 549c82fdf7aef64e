"""Summary model shared by the store builder and the catalog manifest."""

from datetime import datetime

from pydantic import BaseModel, Field


class StoreSummary(BaseModel):
    """Catalog entry for one ingested genome file.

    Mirrors the single row of a store's ingestion_metadata table so that
    listing never has to touch variant rows.
    """

    store_id: str = Field(..., min_length=1, description="Immutable id, also the store file stem")
    display_name: str = Field(..., description="Name chosen at ingestion time")
    source_name: str = Field(default="", description="Original export file name")
    ingested_at: datetime = Field(..., description="UTC ingestion timestamp")
    total_variants: int = Field(default=0, ge=0)
    matchable_identifier_count: int = Field(default=0, ge=0)
    chromosome_count: int = Field(default=0, ge=0)
    parse_error_count: int = Field(default=0, ge=0)
