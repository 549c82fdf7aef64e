"""Integration tests for the CLI using CliRunner.

Tests:
- info output
- ingest with progress and rejected lines
- format check refusal and --skip-format-check
- list, show and delete
- analyze with report files
- typed errors reported in red with exit code 1
"""

import duckdb
import polars as pl
import pytest
from click.testing import CliRunner

from variant_vault.cli.main import cli
from variant_vault.persistence import StoreCatalog


SAMPLE_EXPORT = """# This data file generated by 23andMe
# rsid\tchromosome\tposition\tgenotype
rs1\t17\t43044295\tAG
rs2\t17\t43045000\tCC
rs3\t17\t43046000\tAA
i4000\t1\t100\tTT
rs5\t1\t200\t--
bad_line
"""


@pytest.fixture
def test_config(tmp_path):
    """Create minimal config YAML for testing."""
    config_path = tmp_path / "test_config.yaml"
    config_path.write_text(f"""
data_dir: {tmp_path}/data
reference_db_path: {tmp_path}/clinvar.duckdb

match:
  chunk_size: 2
""")
    return config_path


@pytest.fixture
def reference_db(tmp_path):
    """Reference database with BRCA1 matches for rs1 and rs3."""
    df = pl.DataFrame({
        "rsid": ["rs1", "rs3", "rs777"],
        "chrom": ["17", "17", "2"],
        "pos": [43044295, 43046000, 5000],
        "ref": ["A", "A", "G"],
        "alt": ["G", "T", "C"],
        "gene": ["BRCA1", "BRCA1", "OTHER"],
        "clnsig": ["Pathogenic", "Benign", "Pathogenic"],
        "clnrevstat": ["reviewed_by_expert_panel"] * 3,
        "condition": ["Hereditary_breast_ovarian_cancer_syndrome", "not_provided", "X"],
    })
    db_path = tmp_path / "clinvar.duckdb"
    conn = duckdb.connect(str(db_path))
    conn.execute("CREATE TABLE variants AS SELECT * FROM df")
    conn.close()
    return db_path


@pytest.fixture
def export_file(tmp_path):
    path = tmp_path / "genome_Jane_Doe.txt"
    path.write_text(SAMPLE_EXPORT)
    return path


def ingest_store(runner, test_config, export_file, tmp_path, name="Jane"):
    result = runner.invoke(cli, [
        '--config', str(test_config),
        'ingest', str(export_file), '--name', name,
    ])
    assert result.exit_code == 0, result.output
    catalog = StoreCatalog(tmp_path / "data" / "stores")
    return catalog.list_stores()[0].store_id


def test_info(test_config):
    runner = CliRunner()

    result = runner.invoke(cli, ['--config', str(test_config), 'info'])

    assert result.exit_code == 0
    assert "Config Hash:" in result.output
    assert "Chunk Size:      2" in result.output


def test_ingest_reports_stages_and_summary(test_config, export_file):
    runner = CliRunner()

    result = runner.invoke(cli, [
        '--config', str(test_config),
        'ingest', str(export_file), '--name', 'Jane',
    ])

    assert result.exit_code == 0, result.output
    for stage in ["parsing", "storing metadata", "bulk inserting", "indexing", "ready"]:
        assert f"[{stage}]" in result.output
    assert "Store created: genome_" in result.output
    assert "Variants stored:    4" in result.output
    assert "Matchable (rs) ids: 3" in result.output
    assert "No-calls skipped:   1" in result.output
    assert "Line 6: Invalid format - expected 4 columns, got 1" in result.output


def test_ingest_rejects_non_genome_file(tmp_path, test_config):
    path = tmp_path / "people.csv"
    path.write_text("name,age\nalice,30\nbob,40\n")
    runner = CliRunner()

    result = runner.invoke(cli, ['--config', str(test_config), 'ingest', str(path)])

    assert result.exit_code == 1
    assert "does not look like a genotype export" in result.output
    assert StoreCatalog(tmp_path / "data" / "stores").list_stores() == []


def test_ingest_skip_format_check(tmp_path, test_config):
    path = tmp_path / "people.csv"
    path.write_text("name,age\nalice,30\n")
    runner = CliRunner()

    result = runner.invoke(cli, [
        '--config', str(test_config),
        'ingest', str(path), '--skip-format-check',
    ])

    assert result.exit_code == 0, result.output
    assert "Variants stored:    0" in result.output


def test_ingest_broken_zip(tmp_path, test_config):
    path = tmp_path / "export.zip"
    path.write_bytes(b"not a zip")
    runner = CliRunner()

    result = runner.invoke(cli, ['--config', str(test_config), 'ingest', str(path)])

    assert result.exit_code == 1
    assert "Failed to parse zip file" in result.output


def test_list_and_show(tmp_path, test_config, export_file):
    runner = CliRunner()
    store_id = ingest_store(runner, test_config, export_file, tmp_path)

    result = runner.invoke(cli, ['--config', str(test_config), 'list'])
    assert result.exit_code == 0
    assert store_id in result.output
    assert "Jane" in result.output

    result = runner.invoke(cli, ['--config', str(test_config), 'show', store_id])
    assert result.exit_code == 0, result.output
    assert "Source:        genome_Jane_Doe.txt" in result.output
    assert "17" in result.output
    assert "Line 6: Invalid format" in result.output


def test_list_empty(test_config):
    runner = CliRunner()

    result = runner.invoke(cli, ['--config', str(test_config), 'list'])

    assert result.exit_code == 0
    assert "No stores found" in result.output


def test_show_unknown_store(test_config):
    runner = CliRunner()

    result = runner.invoke(cli, ['--config', str(test_config), 'show', 'genome_nope'])

    assert result.exit_code == 1
    assert "Variant store not found" in result.output


def test_delete(tmp_path, test_config, export_file):
    runner = CliRunner()
    store_id = ingest_store(runner, test_config, export_file, tmp_path)

    result = runner.invoke(cli, ['--config', str(test_config), 'delete', store_id, '--yes'])

    assert result.exit_code == 0
    assert f"Deleted {store_id}" in result.output
    assert StoreCatalog(tmp_path / "data" / "stores").list_stores() == []


def test_delete_requires_confirmation(tmp_path, test_config, export_file):
    runner = CliRunner()
    store_id = ingest_store(runner, test_config, export_file, tmp_path)

    result = runner.invoke(
        cli,
        ['--config', str(test_config), 'delete', store_id],
        input="n\n",
    )

    assert "Aborted" in result.output
    assert len(StoreCatalog(tmp_path / "data" / "stores").list_stores()) == 1


def test_analyze(tmp_path, test_config, export_file, reference_db):
    runner = CliRunner()
    store_id = ingest_store(runner, test_config, export_file, tmp_path)
    output_dir = tmp_path / "report"

    result = runner.invoke(cli, [
        '--config', str(test_config),
        'analyze', store_id, '--output-dir', str(output_dir),
    ])

    assert result.exit_code == 0, result.output
    assert "Identifiers searched: 3" in result.output
    assert "Matches found:        2" in result.output
    assert "BRCA1" in result.output
    assert "Pathogenic" in result.output
    assert "Hereditary breast ovarian cancer syndrome" in result.output

    assert (output_dir / "gene_report.tsv").exists()
    assert (output_dir / "gene_report.parquet").exists()
    assert (output_dir / "gene_report.provenance.yaml").exists()
    matches = pl.read_csv(output_dir / "matches.tsv", separator="\t")
    assert matches["identifier"].to_list() == ["rs1", "rs3"]
    assert matches["user_genotype"].to_list() == ["AG", "AA"]


def test_analyze_missing_reference(tmp_path, test_config, export_file):
    runner = CliRunner()
    store_id = ingest_store(runner, test_config, export_file, tmp_path)

    result = runner.invoke(cli, ['--config', str(test_config), 'analyze', store_id])

    assert result.exit_code == 1
    assert "Reference database not found" in result.output


def test_analyze_unknown_store(test_config, reference_db):
    runner = CliRunner()

    result = runner.invoke(cli, ['--config', str(test_config), 'analyze', 'genome_nope'])

    assert result.exit_code == 1
    assert "Variant store not found" in result.output


def test_analyze_reference_and_chunk_overrides(tmp_path, test_config, export_file, reference_db):
    """--reference-db and --chunk-size replace the configured values."""
    runner = CliRunner()
    store_id = ingest_store(runner, test_config, export_file, tmp_path)
    moved = tmp_path / "elsewhere" / "clinvar_2024.duckdb"
    moved.parent.mkdir()
    reference_db.rename(moved)

    result = runner.invoke(cli, [
        '--config', str(test_config),
        'analyze', store_id,
        '--reference-db', str(moved),
        '--chunk-size', '1',
        '--output-dir', str(tmp_path / "report"),
    ])

    assert result.exit_code == 0, result.output
    assert f"Reference database:   {moved}" in result.output
    assert "Chunk size:           1" in result.output
    assert "Matches found:        2" in result.output


def test_analyze_rejects_oversized_chunk(tmp_path, test_config, export_file, reference_db):
    runner = CliRunner()
    store_id = ingest_store(runner, test_config, export_file, tmp_path)

    result = runner.invoke(cli, [
        '--config', str(test_config),
        'analyze', store_id, '--chunk-size', '1000',
    ])

    assert result.exit_code == 2
