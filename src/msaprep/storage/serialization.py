"""Alignment serialization.

Records are written as FASTA-style aligned text: a ``>id`` header line per
record followed by the aligned sequence wrapped at a fixed width. Targets
whose name ends in ``.gz`` are gzip-compressed. The same format is used for
the final alignment, the identity calculator payload and checkpoints.
"""

from __future__ import annotations

import gzip
import logging
import os
from pathlib import Path
from typing import IO, List, Optional, Sequence, Union

from msaprep.alignment.record import SequenceRecord
from msaprep.exceptions import AlignmentFormatError

logger = logging.getLogger(__name__)

DEFAULT_LINE_WIDTH = 72

PathLike = Union[str, Path]


def _open(path: Path, mode: str) -> IO[str]:
    if path.name.endswith(".gz"):
        return gzip.open(path, mode + "t")
    return open(path, mode)


def format_alignment(
    records: Sequence[SequenceRecord],
    line_width: int = DEFAULT_LINE_WIDTH,
) -> str:
    """Render records as wrapped alignment text."""
    lines = []
    for record in records:
        lines.append(f">{record.id}")
        for i in range(0, len(record.align), line_width):
            lines.append(record.align[i:i + line_width])
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def parse_alignment(content: str) -> List[SequenceRecord]:
    """Parse wrapped alignment text back into records.

    The header's first whitespace-delimited word is the id. Records read this
    way carry no start offset.

    Raises:
        AlignmentFormatError: Sequence data before the first header, or an
            empty identifier
    """
    records: List[SequenceRecord] = []
    current_id: Optional[str] = None
    parts: List[str] = []

    for line in content.splitlines():
        line = line.strip()
        if not line:
            continue

        if line.startswith(">"):
            if current_id is not None:
                records.append(SequenceRecord(id=current_id, align="".join(parts)))
            fields = line[1:].split()
            if not fields:
                raise AlignmentFormatError("Header line without an identifier")
            current_id = fields[0]
            parts = []
        else:
            if current_id is None:
                raise AlignmentFormatError(
                    f"Sequence data before first header: {line[:20]}"
                )
            parts.append(line)

    if current_id is not None:
        records.append(SequenceRecord(id=current_id, align="".join(parts)))

    return records


def write_alignment(
    records: Sequence[SequenceRecord],
    path: PathLike,
    line_width: int = DEFAULT_LINE_WIDTH,
) -> Path:
    """Write records to ``path``, gzip-compressed for ``.gz`` names."""
    path = Path(path)
    with _open(path, "w") as f:
        f.write(format_alignment(records, line_width))
    logger.debug("Wrote %d records to %s", len(records), path)
    return path


def write_alignment_atomic(
    records: Sequence[SequenceRecord],
    path: PathLike,
    line_width: int = DEFAULT_LINE_WIDTH,
) -> Path:
    """Write records to a temporary sibling and rename it into place.

    Readers never observe a partially written file at ``path``.
    """
    path = Path(path)
    suffix = ".gz" if path.name.endswith(".gz") else ""
    tmp_path = path.with_name(f".{path.name}.tmp{suffix}")
    try:
        write_alignment(records, tmp_path, line_width)
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
    return path


def read_alignment(path: PathLike) -> List[SequenceRecord]:
    """Read records from ``path``, decompressing ``.gz`` names."""
    path = Path(path)
    with _open(path, "r") as f:
        records = parse_alignment(f.read())
    logger.debug("Read %d records from %s", len(records), path)
    return records


class CheckpointStore:
    """Numbered gzip checkpoints of intermediate collections.

    Checkpoints are named ``<name>.<NN>_<stage>.afa.gz`` so that a directory
    listing shows them in pipeline order.
    """

    def __init__(
        self,
        directory: PathLike,
        name: str,
        line_width: int = DEFAULT_LINE_WIDTH,
    ):
        self.directory = Path(directory)
        self.name = name
        self.line_width = line_width
        self._counter = 0
        self._paths: dict = {}

    def save(self, stage: str, records: Sequence[SequenceRecord]) -> Path:
        """Write a checkpoint for ``stage`` and return its path."""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / f"{self.name}.{self._counter:02d}_{stage}.afa.gz"
        self._counter += 1
        write_alignment(records, path, self.line_width)
        self._paths[stage] = path
        logger.info("Checkpoint %s: %d records", path.name, len(records))
        return path

    def path(self, stage: str) -> Path:
        """Path of the most recent checkpoint for ``stage``."""
        if stage not in self._paths:
            raise KeyError(f"No checkpoint for stage: {stage}")
        return self._paths[stage]

    def load(self, stage: str) -> List[SequenceRecord]:
        """Read back the most recent checkpoint for ``stage``."""
        return read_alignment(self.path(stage))

    @property
    def stages(self) -> List[str]:
        return list(self._paths)
