"""Genotype export parsing."""

from variant_vault.ingest.models import (
    DEFAULT_ASSEMBLY,
    DEFAULT_SOURCE_FORMAT,
    FormatCheck,
    ParsedFile,
    VariantRecord,
)
from variant_vault.ingest.parser import (
    find_genome_member,
    parse_genome_file,
    parse_genome_text,
    read_genome_text,
    summarize_parsed_file,
    validate_genome_format,
)

__all__ = [
    "DEFAULT_ASSEMBLY",
    "DEFAULT_SOURCE_FORMAT",
    "FormatCheck",
    "ParsedFile",
    "VariantRecord",
    "find_genome_member",
    "parse_genome_file",
    "parse_genome_text",
    "read_genome_text",
    "summarize_parsed_file",
    "validate_genome_format",
]
