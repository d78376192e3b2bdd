"""Homology search and assembly of hits into an alignment."""

from msaprep.search.hits import (
    QUERY_ID,
    SearchEngine,
    SearchHit,
    SearchResult,
    assemble_hits,
)
from msaprep.search.psiblast import PsiBlastSearch, parse_tabular_output

__all__ = [
    "QUERY_ID",
    "SearchEngine",
    "SearchHit",
    "SearchResult",
    "assemble_hits",
    "PsiBlastSearch",
    "parse_tabular_output",
]
