"""Interfaces for the external programs the pipeline depends on.

Each collaborator is a Protocol with one synchronous call. The pipeline
only talks to these interfaces; subprocess-backed implementations live in
the sibling modules and test doubles can stand in for any of them.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence, Tuple, Union

from msaprep.exceptions import ExternalToolError

logger = logging.getLogger(__name__)


@dataclass
class Cluster:
    """One group reported by the clustering engine."""
    label: str
    score: float
    size: int
    members: List[str] = field(default_factory=list)


@dataclass
class ClusteringResult:
    """Clusters plus the identifiers that joined no cluster."""
    clusters: List[Cluster] = field(default_factory=list)
    unclustered: List[str] = field(default_factory=list)


@dataclass
class IdentityReport:
    """Pairwise percent identities for a set of alignment rows.

    Attributes:
        ids: Row identifiers in alignment order
        identities: Percent identity keyed by (id_a, id_b) in row order
    """
    ids: List[str] = field(default_factory=list)
    identities: Dict[Tuple[str, str], float] = field(default_factory=dict)

    def identity(self, a: str, b: str) -> float:
        """Identity between two rows, 0.0 when the pair was not reported."""
        if (a, b) in self.identities:
            return self.identities[(a, b)]
        return self.identities.get((b, a), 0.0)

    def to_oc_input(self) -> str:
        """Render the report as an OC similarity matrix.

        The layout is the entity count, one identifier per line, then the
        upper triangle of the matrix row by row.
        """
        lines = [str(len(self.ids))]
        lines.extend(self.ids)
        for i, a in enumerate(self.ids):
            for b in self.ids[i + 1:]:
                lines.append(f"{self.identity(a, b):.2f}")
        return "\n".join(lines) + "\n"


class SequenceIndex(Protocol):
    """Looks up full sequences in an unfiltered database."""

    def fetch(self, accession: str, database: Union[str, Path]) -> List[str]:
        """Return every sequence stored under ``accession``."""
        ...


class IdentityCalculator(Protocol):
    """Computes pairwise identities for an alignment."""

    def compute(self, alignment_text: str) -> IdentityReport:
        ...


class ClusteringEngine(Protocol):
    """Groups identifiers whose identity exceeds a cutoff."""

    def cluster(self, report: IdentityReport, cutoff: float) -> ClusteringResult:
        ...


class ProfileBuilder(Protocol):
    """Builds a position-specific scoring matrix from an alignment."""

    def build(self, alignment_path: Path, output_path: Path) -> Path:
        ...


class Predictor(Protocol):
    """Runs the structure predictor on the finished inputs."""

    def predict(
        self,
        alignment_path: Path,
        profile_path: Optional[Path],
        output_path: Path,
    ) -> Path:
        ...


def run_tool(
    tool: str,
    cmd: Sequence[str],
    input: Optional[str] = None,
    ok_returncodes: Tuple[int, ...] = (0,),
) -> subprocess.CompletedProcess:
    """Run an external program to completion.

    Args:
        tool: Name used in log and error messages
        cmd: Command line
        input: Text written to the program's stdin
        ok_returncodes: Exit statuses treated as success

    Returns:
        The completed process with text stdout and stderr

    Raises:
        ExternalToolError: The program is missing or exited abnormally
    """
    cmd = [str(c) for c in cmd]
    logger.debug("Running %s: %s", tool, " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            input=input,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError:
        raise ExternalToolError(tool, None, f"binary not found: {cmd[0]}")

    if result.returncode not in ok_returncodes:
        raise ExternalToolError(tool, result.returncode, result.stderr)
    return result
