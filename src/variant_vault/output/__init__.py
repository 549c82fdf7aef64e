"""Output generation: gene report and match table files."""

from variant_vault.output.writers import write_gene_report, write_matches

__all__ = [
    "write_gene_report",
    "write_matches",
]
