"""Analyze command: match a store against the reference database and report by gene."""

import logging
import sys
from pathlib import Path

import click

from variant_vault.aggregation import display_text
from variant_vault.config.loader import load_config_with_overrides
from variant_vault.exceptions import VaultError
from variant_vault.matching import MatchEngine, ReferenceDatabase
from variant_vault.output import write_gene_report, write_matches

logger = logging.getLogger(__name__)


@click.command('analyze')
@click.argument('store_id')
@click.option(
    '--output-dir',
    type=click.Path(path_type=Path),
    default=None,
    help='Output directory (default: {data_dir}/reports/{store_id})'
)
@click.option(
    '--top',
    type=int,
    default=10,
    show_default=True,
    help='Number of gene groups to print'
)
@click.option(
    '--reference-db',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help='Reference database to match against (overrides reference_db_path)'
)
@click.option(
    '--chunk-size',
    type=click.IntRange(1, 999),
    default=None,
    help='Identifiers per reference query (overrides match.chunk_size)'
)
@click.pass_context
def analyze(ctx, store_id, output_dir, top, reference_db, chunk_size):
    """Match a stored genome against the reference database.

    Finds reference variants sharing an rsID with the store, groups them by
    gene, prints the most severe groups and writes the gene report
    (TSV + Parquet + provenance) and the flat match table.

    Examples:

        variant-vault analyze genome_20240101T120000000000Z

        variant-vault analyze genome_20240101T120000000000Z --top 25

        variant-vault analyze genome_20240101T120000000000Z --reference-db clinvar_2024.duckdb
    """
    config_path = ctx.obj['config_path']

    click.echo(click.style("=== Variant Analysis ===", bold=True))
    click.echo()

    try:
        config = load_config_with_overrides(config_path, {
            "reference_db_path": reference_db,
            "match.chunk_size": chunk_size,
        })

        with ReferenceDatabase.from_config(config) as reference:
            engine = MatchEngine.from_config(config, reference_db=reference)
            result = engine.analyze(store_id)

        if output_dir is None:
            output_dir = Path(config.data_dir) / "reports" / store_id

        output_paths = write_gene_report(
            result.gene_groups,
            output_dir,
            metadata={
                "store_id": store_id,
                "config_hash": config.config_hash(),
                "identifiers_searched": result.identifiers_searched,
                "matches_found": result.matches_found,
            },
        )
        matches_path = write_matches(
            result.matches,
            result.genotypes,
            output_dir / "matches.tsv",
        )

    except (VaultError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg='red'), err=True)
        logger.debug("Analysis failed", exc_info=True)
        sys.exit(1)

    click.echo(f"  Reference database:   {config.reference_db_path}")
    click.echo(f"  Chunk size:           {config.match.chunk_size}")
    click.echo(f"  Identifiers searched: {result.identifiers_searched}")
    click.echo(f"  Matches found:        {result.matches_found}")
    click.echo(f"  Genes:                {len(result.gene_groups)}")
    click.echo()

    if result.gene_groups:
        click.echo(click.style(f"Top {min(top, len(result.gene_groups))} genes:", bold=True))
        for group in result.gene_groups[:top]:
            label = display_text(group.dominant_significance)
            color = 'red' if group.dominant_score <= 2 else None
            click.echo(
                f"  {group.gene:<12} "
                + click.style(f"{label:<18}", fg=color)
                + f" {group.total_records:>4} records  "
                + "; ".join(group.conditions)
            )
        click.echo()

    click.echo(click.style(f"  Gene report: {output_paths['tsv']}", fg='green'))
    click.echo(click.style(f"  Parquet:     {output_paths['parquet']}", fg='green'))
    click.echo(click.style(f"  Provenance:  {output_paths['provenance']}", fg='green'))
    click.echo(click.style(f"  Matches:     {matches_path}", fg='green'))
