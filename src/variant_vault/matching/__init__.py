"""Matching of stored genomes against the reference clinical-variant database."""

from variant_vault.matching.models import REFERENCE_COLUMNS, AnalysisResult, ReferenceMatch
from variant_vault.matching.reference import MAX_QUERY_PARAMETERS, ReferenceDatabase
from variant_vault.matching.engine import MatchEngine, chunked

__all__ = [
    "AnalysisResult",
    "MAX_QUERY_PARAMETERS",
    "MatchEngine",
    "REFERENCE_COLUMNS",
    "ReferenceDatabase",
    "ReferenceMatch",
    "chunked",
]
