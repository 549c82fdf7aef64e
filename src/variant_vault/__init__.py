"""Variant vault: local genotype ingestion and ClinVar gene-level matching."""

__version__ = "0.1.0"
