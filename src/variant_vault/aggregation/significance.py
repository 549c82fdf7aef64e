"""Severity ranking of free-text ClinVar clinical significance values.

CLNSIG is an uncontrolled vocabulary ("Pathogenic", "Likely_pathogenic",
"Pathogenic/Likely_pathogenic", "Conflicting_interpretations_of_pathogenicity",
...), so it is ranked by case-insensitive substring rules checked in a fixed
order. The first matching rule wins; values matching none score 6.

Score table (lower = more severe):
- 1: contains "pathogenic" and not "likely"
- 2: contains "likely_pathogenic"
- 3: contains "conflicting"
- 4: contains "uncertain"
- 5: contains "benign"
- 6: anything else
"""

from dataclasses import dataclass
from enum import Enum


class Significance(str, Enum):
    """Dominant significance label assigned to a gene group."""

    PATHOGENIC = "Pathogenic"
    LIKELY_PATHOGENIC = "Likely_pathogenic"
    CONFLICTING = "Conflicting"
    UNCERTAIN = "Uncertain_significance"
    BENIGN = "Benign"


@dataclass(frozen=True)
class SignificanceRule:
    """One ordered substring rule of the ranking table."""
    label: Significance
    score: int
    contains: str
    excludes: str | None = None

    def matches(self, lowered: str) -> bool:
        if self.contains not in lowered:
            return False
        return self.excludes is None or self.excludes not in lowered


SIGNIFICANCE_RULES: tuple[SignificanceRule, ...] = (
    SignificanceRule(Significance.PATHOGENIC, 1, "pathogenic", excludes="likely"),
    SignificanceRule(Significance.LIKELY_PATHOGENIC, 2, "likely_pathogenic"),
    SignificanceRule(Significance.CONFLICTING, 3, "conflicting"),
    SignificanceRule(Significance.UNCERTAIN, 4, "uncertain"),
    SignificanceRule(Significance.BENIGN, 5, "benign"),
)

UNCLASSIFIED_SCORE = 6

DISPLAY_TEXT = {
    Significance.PATHOGENIC: "Pathogenic",
    Significance.LIKELY_PATHOGENIC: "Likely Pathogenic",
    Significance.CONFLICTING: "Conflicting",
    Significance.UNCERTAIN: "Uncertain",
    Significance.BENIGN: "Benign",
}


def classify_significance(clnsig: str | None) -> SignificanceRule | None:
    """Return the first rule matching the value, or None if unclassified."""
    lowered = (clnsig or "").lower()
    for rule in SIGNIFICANCE_RULES:
        if rule.matches(lowered):
            return rule
    return None


COUNTED_TIERS = (
    Significance.PATHOGENIC,
    Significance.LIKELY_PATHOGENIC,
    Significance.CONFLICTING,
    Significance.UNCERTAIN,
)


def significance_tiers(clnsig: str | None) -> list[Significance]:
    """
    Every counted tier whose rule matches the value, checked independently.

    Unlike classify_significance this does not stop at the first match:
    "Conflicting_interpretations_of_pathogenicity" is both pathogenic and
    conflicting. Benign is not a counted tier.
    """
    lowered = (clnsig or "").lower()
    return [
        rule.label for rule in SIGNIFICANCE_RULES
        if rule.label in COUNTED_TIERS and rule.matches(lowered)
    ]


def significance_score(clnsig: str | None) -> int:
    """Severity score 1-6 of a clinical significance value."""
    rule = classify_significance(clnsig)
    return rule.score if rule else UNCLASSIFIED_SCORE


def significance_label(clnsig: str | None) -> Significance:
    """Label of a clinical significance value; unclassified values read as uncertain."""
    rule = classify_significance(clnsig)
    return rule.label if rule else Significance.UNCERTAIN


def display_text(label: Significance | str) -> str:
    """Human-readable text for a label, "Unknown" for anything unrecognized."""
    try:
        return DISPLAY_TEXT[Significance(label)]
    except ValueError:
        return "Unknown"


def significance_case_sql(column: str) -> str:
    """
    SQL CASE expression computing significance_score() for a column.

    Uses literal substring tests (contains) rather than LIKE, since "_" in
    "likely_pathogenic" would be a LIKE wildcard.
    """
    lowered = f"lower(coalesce({column}, ''))"
    branches = []
    for rule in SIGNIFICANCE_RULES:
        condition = f"contains({lowered}, '{rule.contains}')"
        if rule.excludes:
            condition += f" AND NOT contains({lowered}, '{rule.excludes}')"
        branches.append(f"WHEN {condition} THEN {rule.score}")
    return f"CASE {' '.join(branches)} ELSE {UNCLASSIFIED_SCORE} END"
