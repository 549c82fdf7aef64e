"""Data models for parsed genotype exports."""

from dataclasses import dataclass, field

# Genotype files from 23andMe report positions on GRCh37
DEFAULT_SOURCE_FORMAT = "23andMe"
DEFAULT_ASSEMBLY = "GRCh37"


@dataclass(frozen=True)
class VariantRecord:
    """One accepted genotype call.

    Attributes:
        identifier: Variant identifier as written in the export (usually an rsID,
            but platform-internal ids such as "i3000001" also occur)
        chromosome: Chromosome label ("1".."22", "X", "Y", "MT"), "unknown" if blank
        position: 1-based position, always > 0
        genotype: Allele pair such as "AG"; no-calls never reach this type
    """
    identifier: str
    chromosome: str
    position: int
    genotype: str


@dataclass
class ParsedFile:
    """Result of parsing one genotype export.

    Attributes:
        source_name: File name the content was read from
        records: Accepted records in input order
        matchable_identifier_count: Accepted records whose identifier carries the
            reference prefix
        parse_errors: First N per-line error messages (N = max_parse_errors)
        data_line_count: Non-blank, non-comment lines seen
        no_call_count: Lines dropped because of a no-call genotype
        error_count: Total lines rejected with an error, including those whose
            message was not retained
    """
    source_name: str
    records: list[VariantRecord] = field(default_factory=list)
    matchable_identifier_count: int = 0
    parse_errors: list[str] = field(default_factory=list)
    data_line_count: int = 0
    no_call_count: int = 0
    error_count: int = 0

    @property
    def total_count(self) -> int:
        """Number of accepted records."""
        return len(self.records)

    @property
    def chromosomes(self) -> list[str]:
        """Distinct chromosome labels, sorted."""
        return sorted({r.chromosome for r in self.records})


@dataclass
class FormatCheck:
    """Outcome of a quick format sniff on export content."""
    is_valid: bool
    reason: str | None = None
