"""Complete-linkage clustering with the OC cluster analysis program.

OC reads a similarity matrix on stdin and reports groups as::

    ## 1 95.000000 3
     seq_a
     seq_b
     seq_c
    ##UNCLUSTERED ENTITIES
     seq_d
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from msaprep.tools.base import Cluster, ClusteringResult, IdentityReport, run_tool

logger = logging.getLogger(__name__)

_CLUSTER_HEADER = re.compile(r"^##\s*(\S+)\s+(\S+)\s+(\d+)")
_UNCLUSTERED_HEADER = "##UNCLUSTERED ENTITIES"


class OCClusteringEngine:
    """Runs ``oc sim complete cut <cutoff>`` on an identity report."""

    def __init__(self, binary_path: str = "oc"):
        self.binary_path = binary_path

    def cluster(self, report: IdentityReport, cutoff: float) -> ClusteringResult:
        cmd = [
            self.binary_path,
            "sim",
            "complete",
            "cut", f"{cutoff:g}",
        ]
        result = run_tool("oc", cmd, input=report.to_oc_input())
        clustering = parse_oc_output(result.stdout)
        logger.debug(
            "OC: %d clusters, %d unclustered",
            len(clustering.clusters),
            len(clustering.unclustered),
        )
        return clustering


def parse_oc_output(content: str) -> ClusteringResult:
    """Parse OC's cluster listing."""
    result = ClusteringResult()
    current: Optional[Cluster] = None
    in_unclustered = False

    for raw in content.splitlines():
        line = raw.strip()
        if not line:
            continue

        if line.upper().startswith(_UNCLUSTERED_HEADER):
            in_unclustered = True
            current = None
            continue

        match = _CLUSTER_HEADER.match(line)
        if match:
            in_unclustered = False
            current = Cluster(
                label=match.group(1),
                score=float(match.group(2)),
                size=int(match.group(3)),
            )
            result.clusters.append(current)
            continue

        if line.startswith("#"):
            continue

        name = line.split()[0]
        if in_unclustered:
            result.unclustered.append(name)
        elif current is not None:
            current.members.append(name)

    return result
