"""Catalog commands: list, show and delete variant stores."""

import logging
import sys

import click
import duckdb

from variant_vault.config.loader import load_config
from variant_vault.exceptions import VaultError
from variant_vault.persistence import StoreCatalog, VariantStoreReader

logger = logging.getLogger(__name__)


@click.command('list')
@click.pass_context
def list_stores(ctx):
    """List ingested genome stores, newest first."""
    config = load_config(ctx.obj['config_path'])
    catalog = StoreCatalog.from_config(config)

    summaries = catalog.list_stores()
    if not summaries:
        click.echo("No stores found. Ingest a file with 'variant-vault ingest FILE'.")
        return

    click.echo(click.style(
        f"{'STORE ID':<34} {'NAME':<24} {'VARIANTS':>10} {'RS IDS':>10}  INGESTED",
        bold=True
    ))
    for s in summaries:
        click.echo(
            f"{s.store_id:<34} {s.display_name[:24]:<24} "
            f"{s.total_variants:>10} {s.matchable_identifier_count:>10}  "
            f"{s.ingested_at.isoformat(timespec='seconds')}"
        )


@click.command('show')
@click.argument('store_id')
@click.pass_context
def show(ctx, store_id):
    """Show details of one store: per-chromosome counts and parse errors."""
    config = load_config(ctx.obj['config_path'])
    catalog = StoreCatalog.from_config(config)

    try:
        summary = catalog.get(store_id)
        with VariantStoreReader(catalog.store_path(store_id)) as reader:
            per_chromosome = reader.execute_query(
                "SELECT chromosome, COUNT(*) AS variant_count "
                "FROM variants GROUP BY chromosome ORDER BY chromosome"
            )
            errors = reader.parse_errors()
    except (VaultError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg='red'), err=True)
        sys.exit(1)
    except duckdb.Error as e:
        click.echo(click.style(f"Error: store {store_id} is unreadable: {e}", fg='red'), err=True)
        sys.exit(1)

    click.echo(click.style(f"{summary.display_name} ({summary.store_id})", bold=True))
    click.echo(f"  Source:        {summary.source_name}")
    click.echo(f"  Ingested:      {summary.ingested_at.isoformat(timespec='seconds')}")
    click.echo(f"  Variants:      {summary.total_variants}")
    click.echo(f"  rs ids:        {summary.matchable_identifier_count}")
    click.echo(f"  Parse errors:  {summary.parse_error_count}")
    click.echo()

    click.echo(click.style("Variants per chromosome:", bold=True))
    for row in per_chromosome.iter_rows(named=True):
        click.echo(f"  {row['chromosome']:<8} {row['variant_count']:>10}")

    if errors:
        click.echo()
        click.echo(click.style("Retained parse errors:", bold=True))
        for message in errors:
            click.echo(f"  {message}")


@click.command('delete')
@click.argument('store_id')
@click.option(
    '--yes',
    is_flag=True,
    help='Delete without asking for confirmation'
)
@click.pass_context
def delete(ctx, store_id, yes):
    """Delete a store file and its catalog entry."""
    config = load_config(ctx.obj['config_path'])
    catalog = StoreCatalog.from_config(config)

    try:
        catalog.store_path(store_id)
    except ValueError as e:
        click.echo(click.style(f"Error: {e}", fg='red'), err=True)
        sys.exit(1)

    if not yes and not click.confirm(f"Delete store {store_id}?"):
        click.echo("Aborted.")
        return

    catalog.delete(store_id)
    logger.info(f"Deleted store {store_id}")
    click.echo(click.style(f"Deleted {store_id}", fg='green'))
