"""Alignment post-processing stages.

Each stage takes the record collection (query first) and returns it:

- Extension of the search alignment to the full query
- Unmasking of filtered residues
- Case normalization
- Volume reduction and length filtering
- Redundancy filtering
- Collapsing to query columns
"""

from msaprep.processing.degap import degap_alignment, query_columns
from msaprep.processing.extend import extend_alignment, query_overhangs
from msaprep.processing.filtering import (
    filter_by_length,
    length_bounds,
    reduce_alignment,
    uppercase_alignment,
)
from msaprep.processing.redundancy import (
    remove_redundant,
    require_records,
    select_representatives,
)
from msaprep.processing.unmask import unmask_alignment, unmask_record

__all__ = [
    "extend_alignment",
    "query_overhangs",
    "unmask_alignment",
    "unmask_record",
    "uppercase_alignment",
    "reduce_alignment",
    "filter_by_length",
    "length_bounds",
    "remove_redundant",
    "require_records",
    "select_representatives",
    "degap_alignment",
    "query_columns",
]
