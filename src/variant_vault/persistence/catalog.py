"""Catalog of ingested variant stores backed by a JSON manifest.

The manifest is a cache: store files on disk are the source of truth. Every
listing reconciles the two (drop entries whose file is gone, recover files the
manifest does not know about by reading their metadata row) and rewrites the
manifest with the result.
"""

import os
from pathlib import Path

import duckdb
import structlog
from pydantic import TypeAdapter, ValidationError

from variant_vault.exceptions import StoreNotFoundError
from variant_vault.persistence.models import StoreSummary
from variant_vault.persistence.store import VariantStoreReader

logger = structlog.get_logger()

STORE_FILE_PREFIX = "genome_"
STORE_FILE_SUFFIX = ".duckdb"
MANIFEST_FILE_NAME = "manifest.json"

_manifest_adapter = TypeAdapter(list[StoreSummary])


class StoreCatalog:
    """
    Lists, resolves and deletes variant stores in a stores directory.

    Store files follow the naming convention genome_<timestamp>.duckdb and the
    file stem is the store id.
    """

    def __init__(self, stores_dir: Path, manifest_path: Path | None = None):
        """
        Initialize catalog over a stores directory.

        Args:
            stores_dir: Directory holding store files (created if missing)
            manifest_path: Manifest location (default: stores_dir/manifest.json)
        """
        self.stores_dir = Path(stores_dir)
        self.stores_dir.mkdir(parents=True, exist_ok=True)
        self.manifest_path = Path(manifest_path) if manifest_path else self.stores_dir / MANIFEST_FILE_NAME

    @classmethod
    def from_config(cls, config: "VaultConfig") -> "StoreCatalog":
        """
        Create StoreCatalog from a VaultConfig.

        Args:
            config: VaultConfig instance

        Returns:
            StoreCatalog instance
        """
        return cls(config.stores_dir, config.manifest_path)

    def store_path(self, store_id: str) -> Path:
        """
        Resolve the file path of a store id.

        Raises:
            ValueError: If store_id is empty or contains path separators
        """
        if not store_id or "/" in store_id or "\\" in store_id or store_id in (".", ".."):
            raise ValueError(f"Invalid store id: {store_id!r}")
        return self.stores_dir / f"{store_id}{STORE_FILE_SUFFIX}"

    def register(self, summary: StoreSummary) -> None:
        """Add or replace a store's manifest entry (newest first)."""
        current = self._read_manifest()
        without_dupes = [e for e in current if e.store_id != summary.store_id]
        self._write_manifest([summary, *without_dupes])
        logger.info("catalog_register", store_id=summary.store_id, display_name=summary.display_name)

    def list_stores(self) -> list[StoreSummary]:
        """
        List all stores, newest first.

        Never raises for unreadable stores: a store file that cannot be opened
        or has no metadata is logged and left out. The manifest is rewritten
        with exactly the entries returned.

        Returns:
            Deduplicated store summaries sorted by ingestion time, newest first
        """
        manifest = self._read_manifest()
        on_disk = {path.stem: path for path in self._scan_store_files()}

        if not manifest:
            logger.info("catalog_manifest_empty", stores_on_disk=len(on_disk))

        entries: dict[str, StoreSummary] = {}
        for entry in manifest:
            if entry.store_id in entries:
                continue
            if entry.store_id not in on_disk:
                logger.info("catalog_drop_missing_store", store_id=entry.store_id)
                continue
            entries[entry.store_id] = entry

        for store_id, path in on_disk.items():
            if store_id in entries:
                continue
            summary = self._read_store_summary(path)
            if summary is not None and summary.store_id not in entries:
                entries[summary.store_id] = summary

        summaries = sorted(entries.values(), key=lambda s: s.store_id)
        summaries.sort(key=lambda s: s.ingested_at, reverse=True)

        self._write_manifest(summaries)
        logger.info("catalog_list_complete", store_count=len(summaries))

        return summaries

    def get(self, store_id: str) -> StoreSummary:
        """
        Look up one store.

        Raises:
            StoreNotFoundError: If no readable store with this id exists
        """
        path = self.store_path(store_id)
        if not path.exists():
            raise StoreNotFoundError("Variant store not found", store_id)

        for entry in self._read_manifest():
            if entry.store_id == store_id:
                return entry

        summary = self._read_store_summary(path)
        if summary is None:
            raise StoreNotFoundError("Variant store is unreadable", store_id)
        return summary

    def delete(self, store_id: str) -> None:
        """
        Remove a store file and its manifest entry.

        Deleting an id that is already gone is not an error.
        """
        path = self.store_path(store_id)
        existed = path.exists()
        path.unlink(missing_ok=True)
        Path(f"{path}.wal").unlink(missing_ok=True)

        current = self._read_manifest()
        updated = [e for e in current if e.store_id != store_id]
        if len(updated) != len(current) or existed:
            self._write_manifest(updated)

        logger.info(
            "catalog_delete",
            store_id=store_id,
            file_removed=existed,
            manifest_entries_before=len(current),
            manifest_entries_after=len(updated),
        )

    def _scan_store_files(self) -> list[Path]:
        if not self.stores_dir.exists():
            return []
        return sorted(
            p for p in self.stores_dir.glob(f"{STORE_FILE_PREFIX}*{STORE_FILE_SUFFIX}")
            if p.is_file()
        )

    def _read_store_summary(self, path: Path) -> StoreSummary | None:
        """Read a store's metadata row, or None if the store is unusable."""
        try:
            with VariantStoreReader(path) as reader:
                summary = reader.read_metadata()
        except (duckdb.Error, LookupError, ValidationError) as e:
            logger.warning("catalog_skip_unreadable_store", path=str(path), error=str(e))
            return None

        if summary.store_id != path.stem:
            logger.warning(
                "catalog_skip_mismatched_store",
                path=str(path),
                store_id=summary.store_id,
            )
            return None

        logger.info("catalog_recovered_store", store_id=summary.store_id)
        return summary

    def _read_manifest(self) -> list[StoreSummary]:
        if not self.manifest_path.exists():
            return []
        try:
            content = self.manifest_path.read_text()
        except OSError as e:
            logger.warning("catalog_manifest_unreadable", path=str(self.manifest_path), error=str(e))
            return []
        if not content.strip():
            return []
        try:
            return _manifest_adapter.validate_json(content)
        except ValidationError as e:
            logger.warning(
                "catalog_manifest_invalid",
                path=str(self.manifest_path),
                error_count=e.error_count(),
            )
            return []

    def _write_manifest(self, entries: list[StoreSummary]) -> None:
        # Never raises; list_stores() rebuilds the manifest from store files
        tmp_path = self.manifest_path.with_name(self.manifest_path.name + ".tmp")
        try:
            self.manifest_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(_manifest_adapter.dump_json(entries, indent=2))
            os.replace(tmp_path, self.manifest_path)
        except OSError as e:
            logger.warning("catalog_manifest_write_failed", path=str(self.manifest_path), error=str(e))
