"""Removal of alignment columns that are gaps in the query."""

from __future__ import annotations

import logging
from typing import List

import numpy as np

from msaprep.alignment.record import GAP, SequenceRecord
from msaprep.exceptions import AlignmentFormatError

logger = logging.getLogger(__name__)


def query_columns(query_align: str) -> np.ndarray:
    """Indices of the columns where the query has a residue."""
    return np.array([i for i, c in enumerate(query_align) if c != GAP], dtype=np.int64)


def degap_alignment(records: List[SequenceRecord]) -> List[SequenceRecord]:
    """Project every record onto the query's non-gap columns, in place.

    Collapsing an already collapsed alignment changes nothing.
    """
    if not records:
        return records

    query = records[0]
    if GAP not in query.align:
        return records

    columns = query_columns(query.align)
    width = query.length
    for record in records:
        if record.length != width:
            raise AlignmentFormatError(
                f"{record.id} has {record.length} columns, query has {width}"
            )
        chars = np.frombuffer(record.align.encode("ascii"), dtype="S1")
        record.align = chars[columns].tobytes().decode("ascii")

    logger.debug("Collapsed %d columns to %d query columns", width, len(columns))
    return records
