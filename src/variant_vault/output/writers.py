"""TSV+Parquet gene report writer with provenance sidecar."""

from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

import polars as pl
import structlog
import yaml

from variant_vault.aggregation.grouping import GeneGroup, gene_groups_to_frame
from variant_vault.aggregation.significance import Significance

if TYPE_CHECKING:
    from variant_vault.matching.models import ReferenceMatch

logger = structlog.get_logger()

MATCH_FRAME_SCHEMA = {
    "identifier": pl.Utf8,
    "gene": pl.Utf8,
    "chromosome": pl.Utf8,
    "position": pl.Int64,
    "reference_allele": pl.Utf8,
    "alternate_allele": pl.Utf8,
    "user_genotype": pl.Utf8,
    "clinical_significance": pl.Utf8,
    "significance_score": pl.Int64,
    "review_status": pl.Utf8,
    "condition": pl.Utf8,
}


def write_gene_report(
    groups: list[GeneGroup],
    output_dir: Path,
    filename_base: str = "gene_report",
    metadata: dict | None = None,
) -> dict:
    """
    Write gene groups to TSV and Parquet formats with provenance sidecar.

    Rows keep the order of groups (most severe first as produced by
    aggregate_by_gene).

    Args:
        groups: Gene groups to write
        output_dir: Directory to write output files (created if doesn't exist)
        filename_base: Base filename without extension (default: "gene_report")
        metadata: Extra provenance fields, e.g. store id and config hash

    Returns:
        Dictionary with output file paths:
        {
            "tsv": Path to TSV file,
            "parquet": Path to Parquet file,
            "provenance": Path to YAML provenance sidecar
        }
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    df = gene_groups_to_frame(groups)

    tsv_path = output_dir / f"{filename_base}.tsv"
    parquet_path = output_dir / f"{filename_base}.parquet"
    provenance_path = output_dir / f"{filename_base}.provenance.yaml"

    df.write_csv(tsv_path, separator="\t", include_header=True)
    df.write_parquet(parquet_path, compression="snappy", use_pyarrow=True)

    dominant_counts = {label.value: 0 for label in Significance}
    for group in groups:
        dominant_counts[group.dominant_significance.value] += 1

    provenance = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "output_files": [tsv_path.name, parquet_path.name],
        "statistics": {
            "gene_count": len(groups),
            "total_records": sum(g.total_records for g in groups),
            "pathogenic_count": sum(g.pathogenic_count for g in groups),
            "likely_pathogenic_count": sum(g.likely_pathogenic_count for g in groups),
            "conflicting_count": sum(g.conflicting_count for g in groups),
            "uncertain_count": sum(g.uncertain_count for g in groups),
            "genes_by_dominant_significance": dominant_counts,
        },
        "column_count": len(df.columns),
        "column_names": df.columns,
    }
    if metadata:
        provenance["metadata"] = dict(metadata)

    with open(provenance_path, "w") as f:
        yaml.dump(provenance, f, default_flow_style=False, sort_keys=False)

    logger.info("gene_report_written", output_dir=str(output_dir), gene_count=len(groups))

    return {
        "tsv": tsv_path,
        "parquet": parquet_path,
        "provenance": provenance_path,
    }


def write_matches(
    matches: list["ReferenceMatch"],
    genotypes: dict[str, str],
    path: Path,
) -> Path:
    """
    Write the flat list of reference matches as TSV.

    Each row carries the user's genotype for the matched identifier (empty
    when the store holds none).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    df = pl.DataFrame(
        {
            "identifier": [m.identifier for m in matches],
            "gene": [m.gene for m in matches],
            "chromosome": [m.chromosome for m in matches],
            "position": [m.position for m in matches],
            "reference_allele": [m.reference_allele for m in matches],
            "alternate_allele": [m.alternate_allele for m in matches],
            "user_genotype": [genotypes.get(m.identifier, "") for m in matches],
            "clinical_significance": [m.clinical_significance for m in matches],
            "significance_score": [m.significance_score for m in matches],
            "review_status": [m.review_status for m in matches],
            "condition": [m.condition for m in matches],
        },
        schema=MATCH_FRAME_SCHEMA,
    )
    df.write_csv(path, separator="\t", include_header=True)

    logger.info("matches_written", path=str(path), row_count=df.height)
    return path
