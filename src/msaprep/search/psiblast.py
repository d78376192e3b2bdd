"""PSI-BLAST sequence search.

This module wraps psiblast from BLAST+ and returns the pairwise hits of the
final iteration. Output is requested as commented tabular text
(``-outfmt 7``) with the columns needed to rebuild a query-anchored
alignment: ``sseqid sstart qstart qend qseq sseq``.
"""

from __future__ import annotations

import logging
import tempfile
import time
from pathlib import Path
from typing import List, Optional, Union

from msaprep.config import SearchConfig
from msaprep.search.hits import SearchHit, SearchResult
from msaprep.tools.base import run_tool

logger = logging.getLogger(__name__)

OUTPUT_COLUMNS = "sseqid sstart qstart qend qseq sseq"


class PsiBlastSearch:
    """PSI-BLAST search for protein homologues."""

    def __init__(
        self,
        binary_path: str = "psiblast",
        config: Optional[SearchConfig] = None,
    ):
        """Initialize PSI-BLAST search.

        Args:
            binary_path: Path to psiblast binary
            config: Search configuration
        """
        self.binary_path = binary_path
        self.config = config or SearchConfig()

    def search(
        self,
        sequence: str,
        database_path: Union[str, Path],
        database_name: str = "",
    ) -> SearchResult:
        """Run PSI-BLAST against a database.

        Args:
            sequence: Query protein sequence
            database_path: BLAST database path (without extension)
            database_name: Name of the database for tracking

        Returns:
            SearchResult with the hits of the last iteration
        """
        start_time = time.time()

        with tempfile.TemporaryDirectory() as tmpdir:
            query_file = Path(tmpdir) / "query.fasta"
            output_file = Path(tmpdir) / "hits.tsv"

            with open(query_file, "w") as f:
                f.write(f">query\n{sequence}\n")

            cmd = self._build_command(query_file, Path(database_path), output_file)
            run_tool("psiblast", cmd)

            if output_file.exists():
                hits = parse_tabular_output(output_file.read_text())
            else:
                hits = []

        logger.info(
            "psiblast found %d hits in %s (%.1fs)",
            len(hits),
            database_name or database_path,
            time.time() - start_time,
        )
        return SearchResult(
            query_sequence=sequence,
            database=database_name or str(database_path),
            hits=hits,
        )

    def _build_command(
        self,
        query_file: Path,
        database_path: Path,
        output_file: Path,
    ) -> List[str]:
        """Build the psiblast command line."""
        return [
            self.binary_path,
            "-query", str(query_file),
            "-db", str(database_path),
            "-num_iterations", str(self.config.num_iterations),
            "-evalue", str(self.config.e_value),
            "-inclusion_ethresh", str(self.config.inclusion_e_value),
            "-max_target_seqs", str(self.config.max_target_seqs),
            "-max_hsps", "1",
            "-num_threads", str(self.config.num_threads),
            "-outfmt", f"7 {OUTPUT_COLUMNS}",
            "-out", str(output_file),
        ]


def parse_tabular_output(content: str) -> List[SearchHit]:
    """Parse ``-outfmt 7`` output, keeping only the last iteration.

    Each iteration starts with a ``# Iteration: N`` comment. Within the
    iteration only the first row per subject is kept.
    """
    hits: List[SearchHit] = []
    seen = set()

    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("Search has CONVERGED"):
            continue
        if line.startswith("#"):
            if line.startswith("# Iteration:"):
                hits = []
                seen = set()
            continue

        parts = line.split("\t")
        if len(parts) < 6:
            parts = line.split()
        if len(parts) < 6:
            logger.warning("Skipping malformed psiblast row: %s", line[:60])
            continue

        subject_id = parts[0]
        if subject_id in seen:
            continue
        seen.add(subject_id)

        hits.append(SearchHit(
            id=subject_id,
            start=int(parts[1]),
            query_start=int(parts[2]),
            query_end=int(parts[3]),
            query_align=parts[4],
            subject_align=parts[5],
        ))

    return hits
