"""Extension of search alignments to the full query length.

Search engines report only the aligned span of the query. This stage pads
every hit with gaps and restores the unaligned query ends so that each
record covers the full query.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from msaprep.alignment.record import GAP, SequenceRecord, ungap
from msaprep.exceptions import DataInconsistencyError

logger = logging.getLogger(__name__)


def query_overhangs(full_query: str, aligned_query: str) -> Tuple[int, int]:
    """Locate the aligned query span inside the full query.

    Both sequences are compared ungapped and uppercased.

    Returns:
        (leading, trailing) counts of full-query residues outside the span

    Raises:
        DataInconsistencyError: The aligned span is not a substring of the
            full query
    """
    full = ungap(full_query).upper()
    aligned = ungap(aligned_query).upper()

    leading = full.find(aligned)
    if leading < 0:
        raise DataInconsistencyError(
            f"Aligned query ({len(aligned)} residues) is not a substring of "
            f"the full query ({len(full)} residues)"
        )
    trailing = len(full) - len(aligned) - leading
    return leading, trailing


def extend_alignment(
    full_query: str,
    records: List[SequenceRecord],
) -> List[SequenceRecord]:
    """Extend every record to span the full query.

    Args:
        full_query: The complete query sequence
        records: Search alignment; element 0 is the engine's copy of the
            query

    Returns:
        The same records, modified in place
    """
    if not records:
        return records

    full = ungap(full_query)
    query = records[0]
    leading, trailing = query_overhangs(full, query.align)

    if leading == 0 and trailing == 0:
        return records

    head = GAP * leading
    tail = GAP * trailing
    for record in records[1:]:
        record.align = head + record.align + tail

    query.align = full[:leading] + query.align + full[len(full) - trailing:]

    logger.debug(
        "Extended alignment by %d leading and %d trailing columns",
        leading,
        trailing,
    )
    return records
