"""Tests for clinical significance ranking."""

import duckdb
import pytest

from variant_vault.aggregation import (
    Significance,
    display_text,
    significance_case_sql,
    significance_label,
    significance_score,
    significance_tiers,
)


@pytest.mark.parametrize("clnsig,expected", [
    ("Pathogenic", 1),
    ("pathogenic", 1),
    ("Pathogenic/Likely_pathogenic", 2),
    ("Likely_pathogenic", 2),
    ("Conflicting_interpretations_of_pathogenicity", 1),
    ("Conflicting_classifications_of_benignity", 3),
    ("Uncertain_significance", 4),
    ("Benign", 5),
    ("Likely_benign", 5),
    ("Benign/Likely_benign", 5),
    ("drug_response", 6),
    ("", 6),
    (None, 6),
])
def test_significance_score(clnsig, expected):
    """Rules are checked in order; the first match wins."""
    assert significance_score(clnsig) == expected


def test_likely_benign_not_likely_pathogenic():
    """'Likely_benign' must not be caught by the likely-pathogenic rule."""
    assert significance_label("Likely_benign") == Significance.BENIGN


def test_unclassified_labels_as_uncertain():
    """Values matching no rule are labelled Uncertain_significance."""
    assert significance_label("drug_response") == Significance.UNCERTAIN
    assert significance_label(None) == Significance.UNCERTAIN


def test_display_text():
    assert display_text(Significance.LIKELY_PATHOGENIC) == "Likely Pathogenic"
    assert display_text("Uncertain_significance") == "Uncertain"
    assert display_text("something_else") == "Unknown"


def test_case_sql_agrees_with_python():
    """The generated SQL CASE scores values exactly like the Python scorer."""
    values = [
        "Pathogenic",
        "Likely_pathogenic",
        "Pathogenic/Likely_pathogenic",
        "Conflicting_classifications_of_benignity",
        "Uncertain_significance",
        "Likely_benign",
        "drug_response",
        "likelyXpathogenic",
        None,
    ]
    conn = duckdb.connect()
    try:
        conn.execute("CREATE TABLE t (clnsig VARCHAR)")
        conn.executemany("INSERT INTO t VALUES (?)", [[v] for v in values])
        rows = conn.execute(
            f"SELECT clnsig, {significance_case_sql('clnsig')} FROM t"
        ).fetchall()
    finally:
        conn.close()

    for clnsig, score in rows:
        assert score == significance_score(clnsig), clnsig


@pytest.mark.parametrize("clnsig,expected", [
    ("Pathogenic", [Significance.PATHOGENIC]),
    ("Conflicting_interpretations_of_pathogenicity",
     [Significance.PATHOGENIC, Significance.CONFLICTING]),
    ("Pathogenic/Likely_pathogenic", [Significance.LIKELY_PATHOGENIC]),
    ("Uncertain_significance", [Significance.UNCERTAIN]),
    ("Benign", []),
    (None, []),
])
def test_significance_tiers_independent(clnsig, expected):
    """Tier checks do not stop at the first matching rule; benign is not counted."""
    assert significance_tiers(clnsig) == expected
