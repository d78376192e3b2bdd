"""Restoration of masked residues.

Searching a low-complexity filtered database yields hits in which filtered
residues are replaced by the masking symbol. Each masked residue is restored
from the same sequence in the unfiltered database, using the hit's start
offset to align the two.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from msaprep.alignment.record import GAP_SYMBOLS, MASK_SYMBOLS, SequenceRecord
from msaprep.exceptions import DataInconsistencyError, LookupFailureError
from msaprep.tools.base import SequenceIndex

logger = logging.getLogger(__name__)


def unmask_record(record: SequenceRecord, reference: str) -> SequenceRecord:
    """Replace masked columns of ``record`` with residues from ``reference``.

    ``record.start`` is the 1-based position of the record's first residue
    in ``reference``. Every non-gap column advances the reference position,
    masked or not.

    Raises:
        DataInconsistencyError: The reference ends before the record does,
            or the record has no start offset
    """
    if record.start is None:
        raise DataInconsistencyError(f"{record.id} has masked residues but no start offset")

    offset = record.start - 1
    columns = list(record.align)
    i = 0
    for col, char in enumerate(columns):
        if char in GAP_SYMBOLS:
            continue
        if char in MASK_SYMBOLS:
            position = i + offset
            if position < 0 or position >= len(reference):
                raise DataInconsistencyError(
                    f"Reference sequence for {record.id} has {len(reference)} residues, "
                    f"position {position + 1} required"
                )
            columns[col] = reference[position]
        i += 1

    record.align = "".join(columns)
    return record


def unmask_alignment(
    records: List[SequenceRecord],
    sequence_index: SequenceIndex,
    database: Optional[Union[str, Path]],
) -> List[SequenceRecord]:
    """Unmask every non-query record that contains the masking symbol.

    Records without masked residues are never looked up.

    Raises:
        LookupFailureError: The index returned zero or several sequences
        DataInconsistencyError: A reference sequence is too short
    """
    unmasked = 0
    for record in records[1:]:
        if not record.is_masked:
            continue

        sequences = sequence_index.fetch(record.id, database)
        if len(sequences) != 1:
            raise LookupFailureError(record.id, len(sequences))

        unmask_record(record, sequences[0])
        unmasked += 1

    logger.info("Unmasked %d of %d hits", unmasked, max(len(records) - 1, 0))
    return records
