"""Data models for reference database matches."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from variant_vault.aggregation.significance import significance_score

if TYPE_CHECKING:
    from variant_vault.aggregation.grouping import GeneGroup

# Column order of the reference variants table
REFERENCE_COLUMNS = (
    "rsid",
    "chrom",
    "pos",
    "ref",
    "alt",
    "gene",
    "clnsig",
    "clnrevstat",
    "condition",
)


@dataclass(frozen=True)
class ReferenceMatch:
    """One annotated row of the reference clinical-variant database.

    Attributes:
        identifier: rsID shared with the user's variant store
        chromosome: Reference chromosome
        position: Reference position
        reference_allele: REF allele
        alternate_allele: ALT allele
        gene: Gene symbol (may be empty)
        clinical_significance: Free-text CLNSIG value
        review_status: CLNREVSTAT value
        condition: Pipe-delimited condition names, underscores for spaces
    """
    identifier: str
    chromosome: str | None = None
    position: int | None = None
    reference_allele: str | None = None
    alternate_allele: str | None = None
    gene: str | None = None
    clinical_significance: str | None = None
    review_status: str | None = None
    condition: str | None = None

    @classmethod
    def from_row(cls, row: tuple) -> "ReferenceMatch":
        """Build from a row in REFERENCE_COLUMNS order."""
        return cls(*row)

    @property
    def significance_score(self) -> int:
        return significance_score(self.clinical_significance)


@dataclass
class AnalysisResult:
    """Outcome of matching one store against the reference database.

    Attributes:
        store_id: Store that was analysed
        matches: Reference rows matching the store's identifiers
        gene_groups: Matches aggregated per gene
        identifiers_searched: Distinct matchable identifiers sent to the lookup
        genotypes: The user's genotype for each matched identifier
    """
    store_id: str
    matches: list[ReferenceMatch] = field(default_factory=list)
    gene_groups: list["GeneGroup"] = field(default_factory=list)
    identifiers_searched: int = 0
    genotypes: dict[str, str] = field(default_factory=dict)

    @property
    def matches_found(self) -> int:
        return len(self.matches)
