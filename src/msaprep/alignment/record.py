"""Alignment record data structures.

A collection of SequenceRecord objects is the unit every pipeline stage
consumes and returns. By convention the query is element 0, and between
stages every record's ``align`` has the same length.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Sequence

import numpy as np

GAP = "-"
MASK = "X"

# Symbols counted as "no residue" when measuring ungapped length.
GAP_SYMBOLS: FrozenSet[str] = frozenset({GAP})
MASK_SYMBOLS: FrozenSet[str] = frozenset({MASK, MASK.lower()})

AMINO_ACIDS = "ARNDCQEGHILKMFPSTWYV"


@dataclass
class SequenceRecord:
    """One row of an alignment.

    Attributes:
        id: Sequence identifier, unique within a collection once redundancy
            filtering has run
        align: Aligned sequence, one character per column, '-' for gaps
        start: 1-based offset of the first aligned residue into the
            unfiltered reference sequence (search hits only)
    """
    id: str
    align: str
    start: Optional[int] = None

    @property
    def length(self) -> int:
        """Number of alignment columns."""
        return len(self.align)

    @property
    def ungapped(self) -> str:
        """The residues of the record with gaps removed."""
        return ungap(self.align)

    @property
    def ungapped_length(self) -> int:
        return sum(1 for c in self.align if c not in GAP_SYMBOLS)

    @property
    def is_masked(self) -> bool:
        """True if any column holds the masking symbol."""
        return any(c in MASK_SYMBOLS for c in self.align)

    @property
    def coverage(self) -> float:
        """Fraction of non-gap columns."""
        if not self.align:
            return 0.0
        return self.ungapped_length / len(self.align)


def ungap(sequence: str) -> str:
    """Remove gap symbols from a sequence."""
    return "".join(c for c in sequence if c not in GAP_SYMBOLS)


def is_rectangular(records: Sequence[SequenceRecord]) -> bool:
    """Whether all records have the same alignment length."""
    return len({r.length for r in records}) <= 1


def alignment_width(records: Sequence[SequenceRecord]) -> int:
    """Column count of a collection (0 when empty)."""
    if not records:
        return 0
    return records[0].length


def copy_records(records: Sequence[SequenceRecord]) -> List[SequenceRecord]:
    """Shallow copies of records, so in-place stages leave the input alone."""
    return [SequenceRecord(id=r.id, align=r.align, start=r.start) for r in records]


def alignment_profile(records: Sequence[SequenceRecord]) -> np.ndarray:
    """Compute residue frequencies at each column.

    Returns:
        Array of shape (width, 21): 20 amino acids then gap. Masked and
        non-standard residues count toward the column total only.
    """
    width = alignment_width(records)
    if width == 0:
        return np.zeros((0, 21), dtype=np.float32)

    aa_mapping = {c: i for i, c in enumerate(AMINO_ACIDS)}
    counts = np.zeros((width, 21), dtype=np.float32)
    totals = np.zeros(width, dtype=np.float32)

    for record in records:
        for j, char in enumerate(record.align.upper()):
            totals[j] += 1
            if char in aa_mapping:
                counts[j, aa_mapping[char]] += 1
            elif char in GAP_SYMBOLS:
                counts[j, 20] += 1

    totals[totals == 0] = 1
    return counts / totals[:, None]
