"""Gene-level aggregation of reference matches and significance ranking."""

from variant_vault.aggregation.grouping import (
    AlleleCount,
    GeneGroup,
    aggregate_by_gene,
    build_gene_group,
    clean_conditions,
    count_alleles,
    gene_groups_to_frame,
)
from variant_vault.aggregation.significance import (
    COUNTED_TIERS,
    SIGNIFICANCE_RULES,
    UNCLASSIFIED_SCORE,
    Significance,
    SignificanceRule,
    classify_significance,
    display_text,
    significance_case_sql,
    significance_label,
    significance_score,
    significance_tiers,
)

__all__ = [
    "AlleleCount",
    "COUNTED_TIERS",
    "GeneGroup",
    "SIGNIFICANCE_RULES",
    "Significance",
    "SignificanceRule",
    "UNCLASSIFIED_SCORE",
    "aggregate_by_gene",
    "build_gene_group",
    "classify_significance",
    "clean_conditions",
    "count_alleles",
    "display_text",
    "gene_groups_to_frame",
    "significance_case_sql",
    "significance_label",
    "significance_score",
    "significance_tiers",
]
