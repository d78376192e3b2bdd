"""Alignment file reading, writing and checkpoints."""

from msaprep.storage.serialization import (
    DEFAULT_LINE_WIDTH,
    CheckpointStore,
    format_alignment,
    parse_alignment,
    read_alignment,
    write_alignment,
    write_alignment_atomic,
)

__all__ = [
    "DEFAULT_LINE_WIDTH",
    "CheckpointStore",
    "format_alignment",
    "parse_alignment",
    "read_alignment",
    "write_alignment",
    "write_alignment_atomic",
]
