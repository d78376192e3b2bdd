"""Tests for the external tool adapters."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from msaprep.exceptions import ExternalToolError
from msaprep.tools.alipid import AlipidIdentityCalculator, parse_alipid_output
from msaprep.tools.base import IdentityReport, run_tool
from msaprep.tools.blastdbcmd import BlastDbSequenceIndex
from msaprep.tools.oc import OCClusteringEngine, parse_oc_output
from msaprep.tools.profile import CommandPredictor, PsiBlastProfileBuilder

OC_OUTPUT = """\
## 1 98.500000 3
 query
 hit2
 hit5
## 2 95.000000 2
 hit1
 hit3

##UNCLUSTERED ENTITIES
 hit4
 hit6
"""

ALIPID_OUTPUT = """\
# seqname1 seqname2 %id nid denomid %match nmatch denommatch
query hit1  85.71 6 7 100.00 7 7
query hit2 100.00 7 7 100.00 7 7
hit1  hit2  71.43 5 7 100.00 7 7
"""


def completed(returncode=0, stdout="", stderr=""):
    return MagicMock(returncode=returncode, stdout=stdout, stderr=stderr)


class TestRunTool:
    """Tests for the subprocess helper."""

    def test_success(self):
        with patch("msaprep.tools.base.subprocess.run", return_value=completed(stdout="ok")) as run:
            result = run_tool("demo", ["demo", 1], input="data")
        assert result.stdout == "ok"
        assert run.call_args[0][0] == ["demo", "1"]
        assert run.call_args[1]["input"] == "data"

    def test_nonzero_exit(self):
        with patch("msaprep.tools.base.subprocess.run", return_value=completed(3, stderr="boom")):
            with pytest.raises(ExternalToolError) as exc_info:
                run_tool("demo", ["demo"])
        assert exc_info.value.returncode == 3
        assert "boom" in str(exc_info.value)

    def test_missing_binary(self):
        with patch("msaprep.tools.base.subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(ExternalToolError) as exc_info:
                run_tool("demo", ["/no/such/demo"])
        assert exc_info.value.returncode is None


class TestBlastDbSequenceIndex:
    """Tests for blastdbcmd lookups."""

    def test_fetch_one(self):
        with patch("msaprep.tools.base.subprocess.run", return_value=completed(stdout="MKVLAG\n")) as run:
            sequences = BlastDbSequenceIndex().fetch("sp|P1|X", "/db/nr")
        assert sequences == ["MKVLAG"]
        cmd = run.call_args[0][0]
        assert cmd[cmd.index("-entry") + 1] == "sp|P1|X"
        assert cmd[cmd.index("-db") + 1] == "/db/nr"

    def test_fetch_many(self):
        with patch("msaprep.tools.base.subprocess.run", return_value=completed(stdout="MKV\nMKI\n")):
            assert BlastDbSequenceIndex().fetch("dup", "/db/nr") == ["MKV", "MKI"]

    def test_not_found_is_empty(self):
        result = completed(1, stderr="Error: [blastdbcmd] Entry not found in BLAST database")
        with patch("msaprep.tools.base.subprocess.run", return_value=result):
            assert BlastDbSequenceIndex().fetch("missing", "/db/nr") == []

    def test_other_failure(self):
        result = completed(1, stderr="BLAST Database error: No alias or index file found")
        with patch("msaprep.tools.base.subprocess.run", return_value=result):
            with pytest.raises(ExternalToolError):
                BlastDbSequenceIndex().fetch("x", "/db/missing")


class TestIdentityReport:
    """Tests for identity reports and the OC matrix rendering."""

    def test_parse_alipid(self):
        report = parse_alipid_output(ALIPID_OUTPUT)
        assert report.ids == ["query", "hit1", "hit2"]
        assert report.identity("hit1", "query") == pytest.approx(85.71)
        assert report.identity("query", "hit2") == 100.0

    def test_oc_input(self):
        report = IdentityReport(
            ids=["a", "b", "c"],
            identities={("a", "b"): 90.0, ("c", "b"): 50.5},
        )
        assert report.to_oc_input() == "3\na\nb\nc\n90.00\n0.00\n50.50\n"

    def test_compute_keeps_alignment_order(self):
        payload = ">hit2\nMKV\n>query\nMKV\n>hit1\nMRV\n"
        with patch("msaprep.tools.base.subprocess.run", return_value=completed(stdout=ALIPID_OUTPUT)) as run:
            report = AlipidIdentityCalculator().compute(payload)
        assert report.ids == ["hit2", "query", "hit1"]
        cmd = run.call_args[0][0]
        assert cmd[:4] == ["esl-alipid", "--amino", "--informat", "afa"]


class TestOCClustering:
    """Tests for OC output parsing and invocation."""

    def test_parse(self):
        result = parse_oc_output(OC_OUTPUT)
        assert [c.members for c in result.clusters] == [
            ["query", "hit2", "hit5"],
            ["hit1", "hit3"],
        ]
        assert result.clusters[0].score == 98.5
        assert result.clusters[1].size == 2
        assert result.unclustered == ["hit4", "hit6"]

    def test_parse_without_clusters(self):
        result = parse_oc_output("##UNCLUSTERED ENTITIES\n a\n b\n")
        assert result.clusters == []
        assert result.unclustered == ["a", "b"]

    def test_cluster_command(self):
        report = IdentityReport(ids=["a", "b"], identities={("a", "b"): 99.0})
        with patch("msaprep.tools.base.subprocess.run", return_value=completed(stdout=OC_OUTPUT)) as run:
            OCClusteringEngine().cluster(report, 90.0)
        assert run.call_args[0][0] == ["oc", "sim", "complete", "cut", "90"]
        assert run.call_args[1]["input"] == "2\na\nb\n99.00\n"

    def test_failure(self):
        with patch("msaprep.tools.base.subprocess.run", return_value=completed(1, stderr="bad matrix")):
            with pytest.raises(ExternalToolError):
                OCClusteringEngine().cluster(IdentityReport(ids=["a"]), 90.0)


class TestProfileAndPredictor:
    """Tests for the profile builder and predictor commands."""

    def test_profile_builder(self, temp_dir):
        pssm = temp_dir / "target.pssm"

        def fake_run(tool, cmd, **kwargs):
            Path(cmd[cmd.index("-out_ascii_pssm") + 1]).write_text("PSSM")

        with patch("msaprep.tools.profile.run_tool", side_effect=fake_run) as run:
            path = PsiBlastProfileBuilder("/db/nr").build(temp_dir / "target.afa", pssm)
        assert path == pssm
        cmd = run.call_args[0][1]
        assert cmd[cmd.index("-in_msa") + 1] == str(temp_dir / "target.afa")

    def test_profile_builder_without_output(self, temp_dir):
        with patch("msaprep.tools.profile.run_tool"):
            with pytest.raises(ExternalToolError):
                PsiBlastProfileBuilder("/db/nr").build(temp_dir / "a.afa", temp_dir / "a.pssm")

    def test_predictor_template(self, temp_dir):
        predictor = CommandPredictor("predict --msa {alignment} --pssm {profile} -o {output}")
        with patch("msaprep.tools.profile.run_tool") as run:
            predictor.predict(Path("/w/t.afa"), Path("/w/t.pssm"), Path("/w/t.pred"))
        assert run.call_args[0][1] == [
            "predict", "--msa", "/w/t.afa", "--pssm", "/w/t.pssm", "-o", "/w/t.pred",
        ]

    def test_predictor_without_profile(self):
        predictor = CommandPredictor("predict {alignment} {profile} {output}")
        with patch("msaprep.tools.profile.run_tool") as run:
            predictor.predict(Path("/w/t.afa"), None, Path("/w/t.pred"))
        assert run.call_args[0][1] == ["predict", "/w/t.afa", "/w/t.pred"]
