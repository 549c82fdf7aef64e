"""Match a stored genome against the reference database in bounded chunks."""

from typing import Iterator, Sequence, TypeVar

import duckdb
import structlog

from variant_vault.aggregation.grouping import MAX_ALLELES, MAX_CONDITIONS, aggregate_by_gene
from variant_vault.exceptions import MatchError
from variant_vault.matching.models import AnalysisResult, ReferenceMatch
from variant_vault.matching.reference import MAX_QUERY_PARAMETERS, ReferenceDatabase
from variant_vault.persistence.catalog import StoreCatalog
from variant_vault.persistence.store import VariantStoreReader

logger = structlog.get_logger()

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most size items."""
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield items[start:start + size]


def _match_sort_key(match: ReferenceMatch) -> tuple:
    # Mirrors the lookup's ORDER BY: score, then gene with NULLs last
    return (match.significance_score, match.gene is None, match.gene or "")


class MatchEngine:
    """
    Joins a variant store's rsIDs with the reference database.

    Identifiers are sent to the reference in chunks no larger than
    chunk_size so a single query never exceeds the bound-parameter ceiling.
    """

    def __init__(
        self,
        catalog: StoreCatalog,
        reference_db: ReferenceDatabase,
        chunk_size: int = MAX_QUERY_PARAMETERS,
        identifier_prefix: str = "rs",
        max_conditions: int = MAX_CONDITIONS,
        max_alleles: int = MAX_ALLELES,
    ):
        if not 1 <= chunk_size <= MAX_QUERY_PARAMETERS:
            raise ValueError(
                f"chunk_size must be between 1 and {MAX_QUERY_PARAMETERS}, got {chunk_size}"
            )
        self.catalog = catalog
        self.reference_db = reference_db
        self.chunk_size = chunk_size
        self.identifier_prefix = identifier_prefix
        self.max_conditions = max_conditions
        self.max_alleles = max_alleles

    @classmethod
    def from_config(
        cls,
        config: "VaultConfig",
        reference_db: ReferenceDatabase | None = None,
        catalog: StoreCatalog | None = None,
    ) -> "MatchEngine":
        """
        Create MatchEngine from a VaultConfig.

        Args:
            config: VaultConfig instance
            reference_db: Open reference database (default: opened from config)
            catalog: Store catalog (default: catalog for config)

        Returns:
            MatchEngine instance

        Raises:
            MatchError: If the reference database cannot be opened
        """
        return cls(
            catalog=catalog or StoreCatalog.from_config(config),
            reference_db=reference_db or ReferenceDatabase.from_config(config),
            chunk_size=config.match.chunk_size,
            identifier_prefix=config.parser.identifier_prefix,
            max_conditions=config.report.max_conditions,
            max_alleles=config.report.max_alleles,
        )

    def _open_store(self, store_id: str) -> VariantStoreReader:
        self.catalog.get(store_id)
        try:
            return VariantStoreReader(self.catalog.store_path(store_id))
        except duckdb.Error as e:
            raise MatchError("Failed to open variant store", f"{store_id}: {e}") from e

    def get_matchable_identifiers(self, store_id: str) -> list[str]:
        """
        Distinct reference-prefixed identifiers of a store, sorted.

        Raises:
            StoreNotFoundError: If the store id is unknown
            MatchError: If the store cannot be read
        """
        reader = self._open_store(store_id)
        try:
            return reader.get_matchable_identifiers(self.identifier_prefix)
        except duckdb.Error as e:
            raise MatchError("Failed to read variant store", f"{store_id}: {e}") from e
        finally:
            reader.close()

    def _lookup(self, identifiers: list[str]) -> list[ReferenceMatch]:
        matches: list[ReferenceMatch] = []
        for chunk in chunked(identifiers, self.chunk_size):
            matches.extend(self.reference_db.lookup_by_identifiers(list(chunk)))

        # Stable, so the per-chunk order survives within equal keys
        matches.sort(key=_match_sort_key)
        return matches

    def match(self, store_id: str) -> list[ReferenceMatch]:
        """
        Find every reference row whose rsID occurs in the store.

        Results are ordered most severe first, then by gene, across all
        chunks. A store without matchable identifiers yields an empty list
        and the reference database is not queried.

        Raises:
            StoreNotFoundError: If the store id is unknown
            MatchError: If the store or the reference database cannot be read
        """
        identifiers = self.get_matchable_identifiers(store_id)
        if not identifiers:
            logger.info("match_no_identifiers", store_id=store_id)
            return []

        matches = self._lookup(identifiers)

        logger.info(
            "match_complete",
            store_id=store_id,
            identifiers_searched=len(identifiers),
            matches_found=len(matches),
        )
        return matches

    def analyze(self, store_id: str) -> AnalysisResult:
        """
        Match a store, aggregate the matches by gene and attach genotypes.

        Raises:
            StoreNotFoundError: If the store id is unknown
            MatchError: If the store or the reference database cannot be read
        """
        identifiers = self.get_matchable_identifiers(store_id)
        matches = self._lookup(identifiers) if identifiers else []

        genotypes: dict[str, str] = {}
        if matches:
            matched_ids = sorted({m.identifier for m in matches})
            reader = self._open_store(store_id)
            try:
                genotypes = reader.get_genotypes(matched_ids, self.chunk_size)
            except duckdb.Error as e:
                raise MatchError("Failed to read variant store", f"{store_id}: {e}") from e
            finally:
                reader.close()

        groups = aggregate_by_gene(matches, self.max_conditions, self.max_alleles)

        logger.info(
            "analysis_complete",
            store_id=store_id,
            identifiers_searched=len(identifiers),
            matches_found=len(matches),
            gene_count=len(groups),
        )

        return AnalysisResult(
            store_id=store_id,
            matches=matches,
            gene_groups=groups,
            identifiers_searched=len(identifiers),
            genotypes=genotypes,
        )
