"""Pairwise percent identity via Easel's esl-alipid."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from msaprep.storage.serialization import parse_alignment
from msaprep.tools.base import IdentityReport, run_tool

logger = logging.getLogger(__name__)


class AlipidIdentityCalculator:
    """Computes all-vs-all identities of an aligned FASTA payload."""

    def __init__(self, binary_path: str = "esl-alipid"):
        self.binary_path = binary_path

    def compute(self, alignment_text: str) -> IdentityReport:
        """Run esl-alipid on ``alignment_text`` and parse its table."""
        ids = [record.id for record in parse_alignment(alignment_text)]

        with tempfile.TemporaryDirectory() as tmpdir:
            alignment_path = Path(tmpdir) / "input.afa"
            alignment_path.write_text(alignment_text)

            cmd = [
                self.binary_path,
                "--amino",
                "--informat", "afa",
                str(alignment_path),
            ]
            result = run_tool("esl-alipid", cmd)

        report = parse_alipid_output(result.stdout)
        report.ids = ids
        logger.debug("esl-alipid reported %d pairs", len(report.identities))
        return report


def parse_alipid_output(content: str) -> IdentityReport:
    """Parse esl-alipid rows of ``name1 name2 %id nid denomid ...``."""
    report = IdentityReport()
    seen = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split()
        if len(parts) < 3:
            continue
        a, b = parts[0], parts[1]
        report.identities[(a, b)] = float(parts[2])
        seen.setdefault(a, None)
        seen.setdefault(b, None)
    report.ids = list(seen)
    return report
