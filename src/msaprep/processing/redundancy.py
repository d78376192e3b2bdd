"""Redundancy filtering by identity clustering.

Records are clustered with complete linkage at a percent-identity cutoff.
One representative per cluster survives, and the query is always the
representative of its own cluster.
"""

from __future__ import annotations

import logging
from typing import List, Set

from msaprep.alignment.record import SequenceRecord
from msaprep.exceptions import InputInsufficientError
from msaprep.storage.serialization import format_alignment
from msaprep.tools.base import ClusteringEngine, ClusteringResult, IdentityCalculator

logger = logging.getLogger(__name__)


def select_representatives(clustering: ClusteringResult, query_id: str) -> List[str]:
    """Pick the identifiers to keep from a clustering result.

    For each cluster the query is kept if it is a member (and placed first);
    otherwise the first listed member is kept. Unclustered identifiers are
    all kept.
    """
    kept: List[str] = []
    for cluster in clustering.clusters:
        if not cluster.members:
            continue
        if query_id in cluster.members:
            kept.insert(0, query_id)
        else:
            kept.append(cluster.members[0])
    kept.extend(clustering.unclustered)
    return kept


def remove_redundant(
    cutoff: float,
    records: List[SequenceRecord],
    identity_calculator: IdentityCalculator,
    clustering_engine: ClusteringEngine,
) -> List[SequenceRecord]:
    """Remove near-duplicate records.

    Returns:
        The records of the input whose ids were selected, in input order

    Raises:
        ExternalToolError: The identity calculator or clustering engine
            failed
    """
    if not records:
        return records

    report = identity_calculator.compute(format_alignment(records))
    clustering = clustering_engine.cluster(report, cutoff)

    keep: Set[str] = set(select_representatives(clustering, records[0].id))
    kept = [record for record in records if record.id in keep]

    logger.info(
        "Redundancy filter at %g%%: %d -> %d records (%d clusters)",
        cutoff,
        len(records),
        len(kept),
        len(clustering.clusters),
    )
    return kept


def require_records(records: List[SequenceRecord], minimum: int) -> List[SequenceRecord]:
    """Return ``records`` unchanged if there are at least ``minimum`` of them.

    Raises:
        InputInsufficientError: Fewer than ``minimum`` records
    """
    if len(records) < minimum:
        raise InputInsufficientError(len(records), minimum)
    return records
