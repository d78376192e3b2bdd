"""Search hits and their assembly into a query-anchored alignment.

Pairwise hits report the query span they cover (qstart..qend) and the
aligned query and subject strings. Assembling them keeps every subject
residue: columns where a hit inserts residues relative to the query become
insertion columns, gapped in the query and in every other hit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Protocol, Union

from msaprep.alignment.record import GAP, SequenceRecord

logger = logging.getLogger(__name__)

QUERY_ID = "query"


@dataclass
class SearchHit:
    """One pairwise alignment reported by the search engine.

    Attributes:
        id: Subject identifier
        start: 1-based subject position of the first aligned residue
        query_start: 1-based query position of the first aligned residue
        query_end: 1-based query position of the last aligned residue
        query_align: Aligned query string
        subject_align: Aligned subject string
    """
    id: str
    start: int
    query_start: int
    query_end: int
    query_align: str
    subject_align: str


@dataclass
class SearchResult:
    """Result of a search."""
    query_sequence: str
    database: str
    hits: List[SearchHit] = field(default_factory=list)

    @property
    def num_hits(self) -> int:
        return len(self.hits)


class SearchEngine(Protocol):
    """Finds homologues of a query in a sequence database."""

    def search(self, sequence: str, database_path: Union[str, Path], database_name: str = "") -> SearchResult:
        ...


def _split_hit(hit: SearchHit) -> tuple:
    """Per query position: the aligned subject character and the insertion after it."""
    matches: Dict[int, str] = {}
    insertions: Dict[int, str] = {}
    position = hit.query_start
    for q_char, s_char in zip(hit.query_align, hit.subject_align):
        if q_char == GAP:
            insertions[position - 1] = insertions.get(position - 1, "") + s_char
        else:
            matches[position] = s_char
            position += 1
    if position - 1 != hit.query_end:
        logger.warning(
            "Hit %s covers query %d-%d but its alignment ends at %d",
            hit.id,
            hit.query_start,
            hit.query_end,
            position - 1,
        )
    return matches, insertions


def assemble_hits(
    query: str,
    hits: List[SearchHit],
    query_id: str = QUERY_ID,
) -> List[SequenceRecord]:
    """Build a rectangular alignment from pairwise hits.

    Row 0 is the query restricted to the span covered by any hit, gapped at
    insertion columns. Rows 1.. are the hits in the order given, each with
    its subject start offset.

    Returns:
        Records of equal length; only the query when there are no hits
    """
    if not hits:
        return [SequenceRecord(id=query_id, align=query)]

    first = min(hit.query_start for hit in hits)
    last = max(hit.query_end for hit in hits)

    split = [_split_hit(hit) for hit in hits]
    widths: Dict[int, int] = {}
    for _, insertions in split:
        for position, inserted in insertions.items():
            if first <= position < last:
                widths[position] = max(widths.get(position, 0), len(inserted))

    query_parts = []
    for position in range(first, last + 1):
        query_parts.append(query[position - 1])
        query_parts.append(GAP * widths.get(position, 0))
    records = [SequenceRecord(id=query_id, align="".join(query_parts))]

    for hit, (matches, insertions) in zip(hits, split):
        parts = []
        for position in range(first, last + 1):
            parts.append(matches.get(position, GAP))
            width = widths.get(position, 0)
            if width:
                parts.append(insertions.get(position, "").ljust(width, GAP))
        records.append(SequenceRecord(id=hit.id, align="".join(parts), start=hit.start))

    logger.debug(
        "Assembled %d hits over query %d-%d into %d columns",
        len(hits),
        first,
        last,
        records[0].length,
    )
    return records
