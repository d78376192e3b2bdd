"""Alignment record types and column helpers."""

from msaprep.alignment.record import (
    GAP,
    MASK,
    SequenceRecord,
    alignment_profile,
    alignment_width,
    copy_records,
    is_rectangular,
    ungap,
)

__all__ = [
    "GAP",
    "MASK",
    "SequenceRecord",
    "alignment_profile",
    "alignment_width",
    "copy_records",
    "is_rectangular",
    "ungap",
]
