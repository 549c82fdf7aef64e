"""Ingest command: parse a genotype export and build a registered variant store."""

import logging
import sys
from pathlib import Path

import click

from variant_vault.config.loader import load_config
from variant_vault.exceptions import VaultError
from variant_vault.ingest import read_genome_text, validate_genome_format
from variant_vault.persistence import VariantStoreBuilder, ingest_genome_file

logger = logging.getLogger(__name__)


@click.command('ingest')
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    '--name',
    default=None,
    help='Display name for the store (default: file name)'
)
@click.option(
    '--skip-format-check',
    is_flag=True,
    help='Skip the pre-ingest format sniff'
)
@click.pass_context
def ingest(ctx, file, name, skip_format_check):
    """Ingest a 23andMe-style raw data file (.txt or .zip).

    Parses the export, bulk-loads it into a new indexed store and registers
    the store in the catalog. Malformed lines are skipped and reported.

    Examples:

        variant-vault ingest genome_John_Doe_v5_Full.zip --name "John"

        variant-vault ingest raw.txt --skip-format-check
    """
    config_path = ctx.obj['config_path']
    display_name = name or file.name

    click.echo(click.style("=== Genome Ingestion ===", bold=True))
    click.echo()

    try:
        config = load_config(config_path)

        if not skip_format_check:
            check = validate_genome_format(read_genome_text(file))
            if not check.is_valid:
                click.echo(click.style(
                    f"Error: {file.name} does not look like a genotype export: {check.reason}",
                    fg='red'
                ), err=True)
                click.echo("  Use --skip-format-check to ingest anyway.", err=True)
                sys.exit(1)

        def report_stage(stage):
            click.echo(f"  [{stage}]")

        builder = VariantStoreBuilder.from_config(config)
        summary, parsed = ingest_genome_file(
            file,
            display_name,
            builder,
            progress=report_stage,
            no_call=config.parser.no_call_sentinel,
            identifier_prefix=config.parser.identifier_prefix,
            max_errors=config.parser.max_parse_errors,
        )

    except VaultError as e:
        click.echo(click.style(f"Error: {e}", fg='red'), err=True)
        logger.debug("Ingestion failed", exc_info=True)
        sys.exit(1)

    click.echo()
    click.echo(click.style(f"Store created: {summary.store_id}", fg='green'))
    click.echo(f"  Name:               {summary.display_name}")
    click.echo(f"  Variants stored:    {summary.total_variants}")
    click.echo(f"  Matchable (rs) ids: {summary.matchable_identifier_count}")
    click.echo(f"  Chromosomes:        {summary.chromosome_count}")
    click.echo(f"  No-calls skipped:   {parsed.no_call_count}")

    if parsed.error_count:
        click.echo(click.style(
            f"  Lines rejected:     {parsed.error_count}",
            fg='yellow'
        ))
        for message in parsed.parse_errors[:5]:
            click.echo(f"    {message}")
        if parsed.error_count > 5:
            click.echo(f"    ... and {parsed.error_count - 5} more")
