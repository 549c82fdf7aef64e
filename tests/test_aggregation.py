"""Tests for gene-level aggregation of reference matches."""

import polars as pl

from variant_vault.aggregation import (
    AlleleCount,
    Significance,
    aggregate_by_gene,
    clean_conditions,
    count_alleles,
    gene_groups_to_frame,
)
from variant_vault.matching import ReferenceMatch


def make_match(identifier, clnsig, gene="BRCA1", ref="A", alt="G", condition=None):
    return ReferenceMatch(
        identifier=identifier,
        chromosome="17",
        position=43000000,
        reference_allele=ref,
        alternate_allele=alt,
        gene=gene,
        clinical_significance=clnsig,
        review_status="criteria_provided",
        condition=condition,
    )


def test_empty_input():
    assert aggregate_by_gene([]) == []


def test_dominant_is_most_severe_regardless_of_order():
    """Uncertain, Pathogenic, Benign in that order: Pathogenic dominates."""
    matches = [
        make_match("rs1", "Uncertain_significance"),
        make_match("rs2", "Pathogenic"),
        make_match("rs3", "Benign"),
    ]

    groups = aggregate_by_gene(matches)

    assert len(groups) == 1
    assert groups[0].dominant_significance == Significance.PATHOGENIC
    assert groups[0].dominant_score == 1


def test_dominant_tie_keeps_first_record():
    """Among equal scores the first record in input order is dominant."""
    matches = [
        make_match("rs1", "Benign"),
        make_match("rs2", "Likely_pathogenic"),
        make_match("rs3", "Pathogenic/Likely_pathogenic"),
    ]

    groups = aggregate_by_gene(matches)

    assert groups[0].dominant_significance == Significance.LIKELY_PATHOGENIC
    assert groups[0].dominant_score == 2
    assert [m.identifier for m in groups[0].matched_records] == ["rs1", "rs2", "rs3"]


def test_groups_ordered_by_score_then_gene():
    """The pathogenic gene precedes the uncertain one; ties sort by symbol."""
    matches = [
        make_match("rs1", "Uncertain_significance", gene="ZZZ"),
        make_match("rs2", "Pathogenic", gene="MYO7A"),
        make_match("rs3", "Uncertain_significance", gene="AAA"),
        make_match("rs4", "Pathogenic", gene="CDH23"),
    ]

    groups = aggregate_by_gene(matches)

    assert [g.gene for g in groups] == ["CDH23", "MYO7A", "AAA", "ZZZ"]


def test_aggregation_is_idempotent():
    """Aggregating the same list twice gives equal results."""
    matches = [
        make_match("rs1", "Pathogenic", gene="A", condition="X|Y"),
        make_match("rs2", "Benign", gene="B", ref="C", alt="T"),
        make_match("rs3", "Conflicting_classifications_of_benignity", gene="A"),
    ]

    assert aggregate_by_gene(matches) == aggregate_by_gene(matches)


def test_tier_counts_and_identifier_count():
    """Tier counts use independent substring checks per record."""
    matches = [
        make_match("rs1", "Pathogenic"),
        make_match("rs7", "Conflicting_interpretations_of_pathogenicity"),
        make_match("rs1", "Pathogenic/Likely_pathogenic"),
        make_match("rs2", "Likely_pathogenic"),
        make_match("rs3", "Conflicting_classifications_of_benignity"),
        make_match("rs4", "Uncertain_significance"),
        make_match("rs5", "Benign"),
        make_match("rs6", "drug_response"),
    ]

    group = aggregate_by_gene(matches)[0]

    assert group.pathogenic_count == 2
    assert group.likely_pathogenic_count == 2
    assert group.conflicting_count == 2
    assert group.uncertain_count == 1
    assert group.total_records == 8
    assert group.unique_identifier_count == 7


def test_conflicting_pathogenicity_counts_in_both_tiers():
    """A conflicting-interpretations value counts as pathogenic and conflicting."""
    group = aggregate_by_gene([
        make_match("rs1", "Conflicting_interpretations_of_pathogenicity", gene="G"),
    ])[0]

    assert group.pathogenic_count == 1
    assert group.conflicting_count == 1
    assert group.likely_pathogenic_count == 0
    assert group.uncertain_count == 0
    assert group.dominant_score == 1
    assert group.dominant_significance == Significance.PATHOGENIC


def test_missing_gene_grouped_as_unknown():
    matches = [
        make_match("rs1", "Benign", gene=None),
        make_match("rs2", "Benign", gene=""),
    ]

    groups = aggregate_by_gene(matches)

    assert [g.gene for g in groups] == ["Unknown"]
    assert groups[0].total_records == 2


def test_unclassified_group_labelled_uncertain():
    group = aggregate_by_gene([make_match("rs1", "not_provided")])[0]

    assert group.dominant_score == 6
    assert group.dominant_significance == Significance.UNCERTAIN


def test_brca1_pathogenic_and_benign():
    """One pathogenic and one benign BRCA1 match form one pathogenic group."""
    matches = [
        make_match("rs1", "Pathogenic"),
        make_match("rs3", "Benign"),
    ]

    groups = aggregate_by_gene(matches)

    assert len(groups) == 1
    group = groups[0]
    assert group.gene == "BRCA1"
    assert group.dominant_significance == Significance.PATHOGENIC
    assert group.pathogenic_count == 1
    assert group.total_records == 2
    assert group.unique_identifier_count == 2


def test_clean_conditions():
    """Split, trim, de-underscore, drop placeholders, dedupe and sort."""
    raw = [
        "Hereditary_breast_ovarian_cancer_syndrome|not_provided",
        " Breast-ovarian_cancer,_familial_1 | Hereditary_breast_ovarian_cancer_syndrome",
        "not specified",
        None,
        "",
    ]

    assert clean_conditions(raw) == [
        "Breast-ovarian cancer, familial 1",
        "Hereditary breast ovarian cancer syndrome",
    ]


def test_conditions_truncated():
    matches = [make_match(f"rs{i}", "Pathogenic", condition=name) for i, name in enumerate("EDCBA")]

    group = aggregate_by_gene(matches, max_conditions=3)[0]

    assert group.conditions == ["A", "B", "C"]


def test_alleles_counted_and_truncated():
    """Alleles are ranked by count; ties are not asserted in order."""
    matches = [
        make_match("rs1", "Benign", ref="A", alt="G"),
        make_match("rs2", "Benign", ref="C", alt="T"),
        make_match("rs3", "Benign", ref="A", alt="G"),
        make_match("rs4", "Benign", ref="G", alt="A"),
        make_match("rs5", "Benign", ref="T", alt="C"),
        make_match("rs6", "Benign", ref="A", alt="G"),
        make_match("rs7", "Benign", ref="C", alt="T"),
    ]

    alleles = aggregate_by_gene(matches, max_alleles=3)[0].alleles

    assert len(alleles) == 3
    assert alleles[0] == AlleleCount(ref="A", alt="G", count=3)
    assert alleles[1] == AlleleCount(ref="C", alt="T", count=2)
    assert alleles[2].count == 1
    assert (alleles[2].ref, alleles[2].alt) in {("G", "A"), ("T", "C")}


def test_count_alleles_keys_by_pair():
    """Distinct (ref, alt) pairs are never merged."""
    matches = [
        make_match("rs1", "Benign", ref="AC", alt="G"),
        make_match("rs2", "Benign", ref="A", alt="CG"),
    ]

    assert sorted((a.ref, a.alt, a.count) for a in count_alleles(matches)) == [
        ("A", "CG", 1),
        ("AC", "G", 1),
    ]


def test_gene_groups_to_frame():
    matches = [
        make_match("rs1", "Pathogenic", gene="MYO7A", condition="Usher_syndrome_type_1"),
        make_match("rs2", "Benign", gene="BRCA1"),
    ]

    df = gene_groups_to_frame(aggregate_by_gene(matches))

    assert isinstance(df, pl.DataFrame)
    assert df["gene"].to_list() == ["MYO7A", "BRCA1"]
    assert df["dominant_significance"].to_list() == ["Pathogenic", "Benign"]
    assert df["conditions"].to_list() == ["Usher syndrome type 1", ""]
    assert df["alleles"].to_list() == ["A>G (1)", "A>G (1)"]


def test_gene_groups_to_frame_empty():
    df = gene_groups_to_frame([])

    assert df.height == 0
    assert "gene" in df.columns
