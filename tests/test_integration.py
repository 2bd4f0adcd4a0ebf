"""Integration tests running the CLI against a real DuckDB gene table."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from gene_registry.cli.main import cli
from gene_registry.persistence import DuckDBGeneStore

from conftest import gene_info_line, gtf_line


@pytest.fixture
def config_path(tmp_path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(f"""
data_dir: {tmp_path / "data"}
duckdb_path: {tmp_path / "data" / "genes.duckdb"}
bulk_load: true
""")
    return path


@pytest.fixture
def input_files(write_file):
    genes = write_file("Homo_sapiens.gene_info", [
        "#tax_id\tGeneID\tSymbol\tLocusTag\tSynonyms\tdbXrefs\tchromosome\tmap_location\tdescription\ttype_of_gene\tSymbol_from_nomenclature_authority",
        gene_info_line(4647, "MYO7A", official="MYO7A", aliases="USH1B|DFNB2", cytoband="11q13.5"),
        gene_info_line(65217, "PCDH15", official="PCDH15", cytoband="10q21.1"),
        gene_info_line(100130000, "LOC100130000", cytoband="3p21"),
        gene_info_line(406915, "MIR21", official="MIR21", gene_type="miscRNA", cytoband="17q23.1"),
        gene_info_line(1, "DUP", official="DUP"),
        gene_info_line(2, "DUP2", official="DUP"),
        gene_info_line(22, "Myo7a", tax_id=10090, official="Myo7a"),
    ])
    supp = write_file("supp-genes.txt", [
        "# symbol\ttype\tcytoband\tlength",
        "SUPPGENE\tpseudo\t2p11\t",
    ])
    gtf = write_file("annotation.gtf", [
        "##provider: GENCODE",
        gtf_line("chr11", "exon", 100, 200, "ENSG00000137474", "MYO7A"),
        gtf_line("chr11", "exon", 150, 260, "ENSG00000137474", "MYO7A"),
        gtf_line("chr10", "exon", 1000, 1100, "ENSG00000150275", "PCDH15"),
        gtf_line("chr2", "exon", 50, 80, "ENSG00000999999", "SUPPGENE"),
        gtf_line("chr5", "exon", 1, 10, "ENSG00000000001", "UNKNOWN"),
    ])
    return genes, supp, gtf


def test_info_command(config_path):
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(config_path), "info"])

    assert result.exit_code == 0
    assert "Taxonomy ID: 9606" in result.output


def test_import_requires_an_input(config_path):
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(config_path), "import"])

    assert result.exit_code != 0
    assert "Provide at least one of" in result.output


def test_full_import(config_path, input_files, tmp_path):
    """Genes are reconciled, supplementary genes added, lengths stored."""
    genes, supp, gtf = input_files
    runner = CliRunner()

    result = runner.invoke(cli, [
        "--config", str(config_path), "import",
        "--genes", str(genes),
        "--supp-genes", str(supp),
        "--gtf", str(gtf),
    ])

    assert result.exit_code == 0, result.output
    assert "total number of lines:  8" in result.output
    assert "Added 3 genes (2 official, 1 unofficial symbol)" in result.output
    assert "Updated length info for 3 genes" in result.output
    assert "Done." in result.output

    with DuckDBGeneStore(tmp_path / "data" / "genes.duckdb") as store:
        myo7a = store.get_gene(4647)
        assert myo7a.length == 160
        assert myo7a.aliases == {"USH1B", "DFNB2"}
        assert store.get_gene(65217).length == 100
        assert store.get_gene(100130000).symbol == "LOC100130000"
        assert store.get_gene(406915) is None
        assert store.get_gene(1) is None
        assert store.get_gene(2) is None
        assert store.get_gene(22) is None
        assert store.find_unambiguous("SUPPGENE", "chr2").length == 30
        assert store.gene_count() == 4


def test_reimport_keeps_existing_genes(config_path, input_files, tmp_path):
    genes, _, _ = input_files
    runner = CliRunner()
    args = ["--config", str(config_path), "import", "--genes", str(genes)]

    runner.invoke(cli, args)
    result = runner.invoke(cli, args)

    assert result.exit_code == 0, result.output
    assert "Added 0 genes" in result.output
    assert "Already in table: 3" in result.output


def test_taxonomy_override(config_path, input_files, tmp_path):
    genes, _, _ = input_files
    runner = CliRunner()

    result = runner.invoke(cli, [
        "--config", str(config_path), "import",
        "--genes", str(genes), "--taxonomy-id", "10090",
    ])

    assert result.exit_code == 0, result.output
    with DuckDBGeneStore(tmp_path / "data" / "genes.duckdb") as store:
        assert store.gene_count() == 1
        assert store.get_gene(22).symbol == "Myo7a"


def test_parse_error_exits_nonzero(config_path, write_file):
    bad = write_file("bad.gene_info", [gene_info_line("NaN", "A", official="A")])
    runner = CliRunner()

    result = runner.invoke(cli, ["--config", str(config_path), "import", "--genes", str(bad)])

    assert result.exit_code == 1
    assert "Import failed" in result.output
