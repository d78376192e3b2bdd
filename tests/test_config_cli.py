"""Tests for configuration loading and the command-line interface."""

from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from msaprep.cli import main, read_query
from msaprep.config import Config, DatabasePaths, FilterConfig, OutputConfig
from msaprep.exceptions import ConfigurationError
from msaprep.storage.serialization import read_alignment, write_alignment
from msaprep.alignment.record import SequenceRecord


class TestConfig:
    """Tests for the pydantic configuration."""

    def test_defaults(self):
        config = Config()
        assert config.output.line_width == 72
        assert config.filters.identity_cutoff == 90.0
        assert config.tools.psiblast == "psiblast"
        assert config.output.checkpoint_dir is None

    def test_yaml_round_trip(self, minimal_config, temp_dir):
        config = Config(**minimal_config)
        path = temp_dir / "config.yaml"
        config.to_yaml(path)
        loaded = Config.from_yaml(path)
        assert loaded.databases.search["testdb"] == Path("/tmp/testdb_filtered")
        assert loaded.filters.max_sequences == 100

    def test_reference_falls_back_to_search(self):
        databases = DatabasePaths(default="nr", search={"nr": "/db/nr_filt"})
        assert databases.reference_path() == Path("/db/nr_filt")

    def test_unknown_database(self):
        with pytest.raises(ConfigurationError):
            DatabasePaths().search_path("missing")

    @pytest.mark.parametrize("field,value", [
        ("max_sequences", 0),
        ("length_tolerance", -1),
        ("identity_cutoff", 0),
        ("identity_cutoff", 101),
    ])
    def test_filter_validation(self, field, value):
        with pytest.raises(ValidationError):
            FilterConfig(**{field: value})

    def test_line_width_validation(self):
        with pytest.raises(ValidationError):
            OutputConfig(line_width=0)

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("MSAPREP_FILTERS__IDENTITY_CUTOFF", "70")
        assert Config().filters.identity_cutoff == 70.0


class TestCLI:
    """Tests for the argparse front end."""

    def test_read_query_from_fasta(self, temp_dir):
        path = temp_dir / "t1.fasta"
        path.write_text(">T1 some protein\nMKV\nLAG\n>T2\nAAA\n")
        assert read_query(str(path)) == ("T1", "MKVLAG")

    def test_read_query_literal(self):
        assert read_query("MKVLAG") == ("query", "MKVLAG")

    def test_no_command(self):
        assert main([]) == 0

    def test_config_template(self, temp_dir):
        output = temp_dir / "msaprep.yaml"
        assert main(["config", "-o", str(output)]) == 0
        assert Config.from_yaml(output).output.line_width == 72

    def test_process_command(self, temp_dir):
        alignment = temp_dir / "hits.afa.gz"
        write_alignment([
            SequenceRecord(id="query", align="CD-EF"),
            SequenceRecord(id="h1", align="CDAEF"),
        ], alignment)
        output = temp_dir / "final.afa"

        with patch("msaprep.pipeline.pipeline.AlignmentPipeline._remove_redundant",
                   side_effect=lambda records: records):
            status = main(["process", "ABCDEFGH", str(alignment), "-o", str(output)])

        assert status == 0
        assert [r.align for r in read_alignment(output)] == ["ABCDEFGH", "--CDEF--"]

    def test_process_reports_errors(self, temp_dir):
        alignment = temp_dir / "hits.afa"
        write_alignment([SequenceRecord(id="query", align="XYZ")], alignment)
        status = main(["process", "ABCDEFGH", str(alignment), "-o", str(temp_dir / "out.afa")])
        assert status == 1
        assert not (temp_dir / "out.afa").exists()

    def test_run_unknown_database(self, temp_dir):
        status = main(["run", "MKVLAG", "-o", str(temp_dir), "-d", "missing"])
        assert status == 1
        assert list(temp_dir.iterdir()) == []

    def test_process_missing_alignment(self, temp_dir):
        output = temp_dir / "out.afa"
        status = main(["process", "MKVLAG", str(temp_dir / "absent.afa"), "-o", str(output)])
        assert status == 1
        assert not output.exists()

    def test_process_masked_without_database(self, temp_dir):
        alignment = temp_dir / "hits.afa"
        write_alignment([
            SequenceRecord(id="query", align="MKVLAG"),
            SequenceRecord(id="h1", align="MKXLAG"),
        ], alignment)
        status = main(["process", "MKVLAG", str(alignment), "-o", str(temp_dir / "out.afa")])
        assert status == 1
        assert not (temp_dir / "out.afa").exists()

    def test_missing_config_file(self, temp_dir):
        status = main(["-c", str(temp_dir / "absent.yaml"), "run", "MKVLAG", "-o", str(temp_dir)])
        assert status == 1
