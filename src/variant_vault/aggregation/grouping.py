"""Group reference matches by gene and rank the groups by severity."""

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import polars as pl
import structlog

from variant_vault.aggregation.significance import (
    Significance,
    significance_label,
    significance_score,
    significance_tiers,
)

if TYPE_CHECKING:
    from variant_vault.matching.models import ReferenceMatch

logger = structlog.get_logger()

UNKNOWN_GENE = "Unknown"
PLACEHOLDER_CONDITIONS = frozenset({"not provided", "not specified"})
MAX_CONDITIONS = 3
MAX_ALLELES = 3


@dataclass(frozen=True)
class AlleleCount:
    """Occurrences of one REF>ALT pair within a gene group."""
    ref: str
    alt: str
    count: int


@dataclass
class GeneGroup:
    """All matches of one gene with summary statistics.

    Attributes:
        gene: Gene symbol, "Unknown" for matches without one
        matched_records: Matches for this gene in input order
        dominant_significance: Label of the most severe match
        dominant_score: Score of the most severe match (1-6)
        pathogenic_count: Matches passing the pathogenic check
        likely_pathogenic_count: Matches passing the likely-pathogenic check
        uncertain_count: Matches passing the uncertain check
        conflicting_count: Matches passing the conflicting check
            (tier checks are independent, so one match may count twice)
        total_records: Number of matches
        unique_identifier_count: Distinct rsIDs among the matches
        conditions: Cleaned, deduplicated, sorted condition names (truncated)
        alleles: Most frequent REF>ALT pairs (truncated)
    """
    gene: str
    matched_records: list["ReferenceMatch"] = field(default_factory=list)
    dominant_significance: Significance = Significance.UNCERTAIN
    dominant_score: int = 6
    pathogenic_count: int = 0
    likely_pathogenic_count: int = 0
    uncertain_count: int = 0
    conflicting_count: int = 0
    total_records: int = 0
    unique_identifier_count: int = 0
    conditions: list[str] = field(default_factory=list)
    alleles: list[AlleleCount] = field(default_factory=list)


def clean_conditions(raw_conditions: list[str | None]) -> list[str]:
    """
    Normalize condition fields into a sorted list of distinct names.

    Each field is split on "|", trimmed, and underscores become spaces.
    Empty names and the "not provided" / "not specified" placeholders are
    dropped.
    """
    names = set()
    for raw in raw_conditions:
        if not raw:
            continue
        for part in raw.split("|"):
            name = part.strip().replace("_", " ").strip()
            if name and name.lower() not in PLACEHOLDER_CONDITIONS:
                names.add(name)
    return sorted(names)


def count_alleles(matches: list["ReferenceMatch"]) -> list[AlleleCount]:
    """REF>ALT pairs with occurrence counts, most frequent first."""
    counts = Counter(
        (m.reference_allele or "", m.alternate_allele or "") for m in matches
    )
    # Counter keeps first-seen order, so equal counts stay in input order
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [AlleleCount(ref=ref, alt=alt, count=count) for (ref, alt), count in ranked]


def _dominant_match(matches: list["ReferenceMatch"]) -> "ReferenceMatch":
    # Strict < keeps the earliest match among equal scores
    dominant = matches[0]
    dominant_score = significance_score(dominant.clinical_significance)
    for match in matches[1:]:
        score = significance_score(match.clinical_significance)
        if score < dominant_score:
            dominant, dominant_score = match, score
    return dominant


def build_gene_group(
    gene: str,
    matches: list["ReferenceMatch"],
    max_conditions: int = MAX_CONDITIONS,
    max_alleles: int = MAX_ALLELES,
) -> GeneGroup:
    """
    Summarize the matches of one gene.

    Args:
        gene: Group key
        matches: Non-empty list of matches for the gene, in input order
        max_conditions: Conditions kept after sorting
        max_alleles: Allele pairs kept after ranking

    Returns:
        GeneGroup with tier counts, dominant significance and display fields
    """
    tiers = Counter(
        tier
        for match in matches
        for tier in significance_tiers(match.clinical_significance)
    )

    dominant = _dominant_match(matches)

    return GeneGroup(
        gene=gene,
        matched_records=list(matches),
        dominant_significance=significance_label(dominant.clinical_significance),
        dominant_score=significance_score(dominant.clinical_significance),
        pathogenic_count=tiers[Significance.PATHOGENIC],
        likely_pathogenic_count=tiers[Significance.LIKELY_PATHOGENIC],
        uncertain_count=tiers[Significance.UNCERTAIN],
        conflicting_count=tiers[Significance.CONFLICTING],
        total_records=len(matches),
        unique_identifier_count=len({m.identifier for m in matches}),
        conditions=clean_conditions([m.condition for m in matches])[:max_conditions],
        alleles=count_alleles(matches)[:max_alleles],
    )


def aggregate_by_gene(
    matches: list["ReferenceMatch"],
    max_conditions: int = MAX_CONDITIONS,
    max_alleles: int = MAX_ALLELES,
) -> list[GeneGroup]:
    """
    Group matches by gene symbol and order groups by severity.

    Pure function: the same input always yields the same groups. Matches with
    a missing or empty gene are grouped under "Unknown". Groups are sorted by
    dominant score ascending, then gene symbol.

    Args:
        matches: Reference matches in any order
        max_conditions: Conditions kept per group
        max_alleles: Allele pairs kept per group

    Returns:
        List of GeneGroup, empty for empty input
    """
    by_gene: dict[str, list["ReferenceMatch"]] = {}
    for match in matches:
        by_gene.setdefault(match.gene or UNKNOWN_GENE, []).append(match)

    groups = [
        build_gene_group(gene, gene_matches, max_conditions, max_alleles)
        for gene, gene_matches in by_gene.items()
    ]
    groups.sort(key=lambda g: (g.dominant_score, g.gene))

    logger.debug("aggregate_by_gene_complete", match_count=len(matches), gene_count=len(groups))

    return groups


def gene_groups_to_frame(groups: list[GeneGroup]) -> pl.DataFrame:
    """
    Flatten gene groups into a polars DataFrame for reporting.

    Conditions are joined with "; " and alleles rendered as "REF>ALT (n)".
    Row order follows the input order.
    """
    return pl.DataFrame(
        {
            "gene": [g.gene for g in groups],
            "dominant_significance": [g.dominant_significance.value for g in groups],
            "dominant_score": [g.dominant_score for g in groups],
            "pathogenic_count": [g.pathogenic_count for g in groups],
            "likely_pathogenic_count": [g.likely_pathogenic_count for g in groups],
            "conflicting_count": [g.conflicting_count for g in groups],
            "uncertain_count": [g.uncertain_count for g in groups],
            "total_records": [g.total_records for g in groups],
            "unique_identifier_count": [g.unique_identifier_count for g in groups],
            "conditions": ["; ".join(g.conditions) for g in groups],
            "alleles": [
                ", ".join(f"{a.ref}>{a.alt} ({a.count})" for a in g.alleles)
                for g in groups
            ],
        },
        schema={
            "gene": pl.Utf8,
            "dominant_significance": pl.Utf8,
            "dominant_score": pl.Int64,
            "pathogenic_count": pl.Int64,
            "likely_pathogenic_count": pl.Int64,
            "conflicting_count": pl.Int64,
            "uncertain_count": pl.Int64,
            "total_records": pl.Int64,
            "unique_identifier_count": pl.Int64,
            "conditions": pl.Utf8,
            "alleles": pl.Utf8,
        },
    )
