"""Sequence lookup in BLAST databases via blastdbcmd."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Union

from msaprep.exceptions import ExternalToolError
from msaprep.tools.base import run_tool

logger = logging.getLogger(__name__)


class BlastDbSequenceIndex:
    """Fetches full sequences by accession from a BLAST database.

    The database must have been formatted with ``-parse_seqids``.
    """

    def __init__(self, binary_path: str = "blastdbcmd"):
        self.binary_path = binary_path

    def fetch(self, accession: str, database: Union[str, Path]) -> List[str]:
        """Return every sequence stored under ``accession``.

        An accession missing from the database gives an empty list rather
        than an error; the caller decides whether that is fatal.
        """
        cmd = [
            self.binary_path,
            "-db", str(database),
            "-entry", accession,
            "-outfmt", "%s",
            "-target_only",
        ]
        result = run_tool("blastdbcmd", cmd, ok_returncodes=(0, 1))
        if result.returncode != 0:
            if "not found" in result.stderr.lower():
                logger.debug("%s not found in %s", accession, database)
                return []
            raise ExternalToolError("blastdbcmd", result.returncode, result.stderr)

        return [line.strip() for line in result.stdout.splitlines() if line.strip()]
