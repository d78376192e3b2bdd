"""Record-level filters: case folding, volume reduction and length filtering.

All functions keep the query (element 0) and preserve the relative order
of the remaining records.
"""

from __future__ import annotations

import logging
from typing import List

from msaprep.alignment.record import SequenceRecord

logger = logging.getLogger(__name__)


def uppercase_alignment(records: List[SequenceRecord]) -> List[SequenceRecord]:
    """Uppercase every record in place."""
    for record in records:
        record.align = record.align.upper()
    return records


def reduce_alignment(max_sequences: int, records: List[SequenceRecord]) -> List[SequenceRecord]:
    """Thin the hits by even-stride sampling.

    With ``n`` hits and ``stride = n // max_sequences``, keeps the query and
    the hits at 0-based indices 0, stride, 2 * stride, ... taking ``n // stride``
    of them. The result has ``n // stride + 1`` records, which can exceed
    ``max_sequences``; the cap is approximate.
    Nothing is removed when ``n < max_sequences``.

    When ``n`` is not a multiple of ``stride`` the last multiple of ``stride``
    is left out, so the record count is exactly ``n // stride + 1``.
    """
    if not records:
        return records

    hits = records[1:]
    n = len(hits)
    stride = n // max_sequences if max_sequences > 0 else 0
    if n < max_sequences or stride == 0:
        return records

    reduced = [records[0]] + [hits[i * stride] for i in range(n // stride)]
    logger.info("Volume reduction: %d -> %d records (stride %d)", len(records), len(reduced), stride)
    return reduced


def length_bounds(query_length: int, tolerance: float) -> tuple:
    """Inclusive (low, high) ungapped length bounds around the query length."""
    delta = query_length * tolerance / 100
    return query_length - delta, query_length + delta


def filter_by_length(tolerance: float, records: List[SequenceRecord]) -> List[SequenceRecord]:
    """Drop hits whose ungapped length deviates more than ``tolerance`` percent.

    Bounds are inclusive. The query is kept whatever its length.
    """
    if not records:
        return records

    low, high = length_bounds(records[0].ungapped_length, tolerance)
    kept = [records[0]]
    for record in records[1:]:
        if low <= record.ungapped_length <= high:
            kept.append(record)

    logger.info(
        "Length filter [%g, %g]: %d -> %d records",
        low,
        high,
        len(records),
        len(kept),
    )
    return kept
