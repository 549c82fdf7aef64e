"""Main CLI entry point for variant-vault.

Provides command group with global options and subcommands for ingesting,
cataloguing and analysing genotype exports.
"""

import logging
from pathlib import Path

import click

from variant_vault import __version__
from variant_vault.config.loader import load_config
from variant_vault.cli.ingest_cmd import ingest
from variant_vault.cli.catalog_cmd import delete, list_stores, show
from variant_vault.cli.analyze_cmd import analyze


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@click.group()
@click.option(
    '--config',
    type=click.Path(exists=True, path_type=Path),
    default='config/default.yaml',
    help='Path to vault configuration YAML file'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging (DEBUG level)'
)
@click.pass_context
def cli(ctx, config, verbose):
    """Variant-vault: local storage and clinical annotation of consumer genotype exports.

    Ingests 23andMe-style raw data files into indexed per-genome stores and
    matches them against a reference clinical-variant database.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@cli.command()
@click.pass_context
def info(ctx):
    """Display version and configuration summary."""
    config_path = ctx.obj['config_path']

    click.echo(f"Variant Vault v{__version__}")
    click.echo(f"Config: {config_path}")
    click.echo()

    try:
        config = load_config(config_path)

        config_hash = config.config_hash()
        click.echo(f"Config Hash: {config_hash[:16]}...")
        click.echo()

        click.echo(click.style("Paths:", bold=True))
        click.echo(f"  Data Directory:     {config.data_dir}")
        click.echo(f"  Stores Directory:   {config.stores_dir}")
        click.echo(f"  Reference Database: {config.reference_db_path}")
        click.echo()

        click.echo(click.style("Parsing:", bold=True))
        click.echo(f"  No-call Sentinel:  {config.parser.no_call_sentinel}")
        click.echo(f"  Identifier Prefix: {config.parser.identifier_prefix}")
        click.echo(f"  Max Parse Errors:  {config.parser.max_parse_errors}")
        click.echo()

        click.echo(click.style("Matching:", bold=True))
        click.echo(f"  Chunk Size:      {config.match.chunk_size}")
        click.echo(f"  Reference Table: {config.match.reference_table}")

    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)


# Register commands
cli.add_command(ingest)
cli.add_command(list_stores)
cli.add_command(show)
cli.add_command(delete)
cli.add_command(analyze)


if __name__ == '__main__':
    cli()
