"""msaprep: turn sequence-search hits into a predictor-ready alignment.

This package provides tools for:
- Running PSI-BLAST and assembling its hits into a query-anchored alignment
- Reconciling truncated hit alignments with the full query
- Restoring masked residues from an unfiltered sequence database
- Length and redundancy filtering of alignment rows
- Collapsing the alignment to query columns and writing checkpoints
"""

from msaprep.config import Config
from msaprep.pipeline.pipeline import AlignmentPipeline, create_pipeline

__version__ = "0.1.0"
__all__ = ["Config", "AlignmentPipeline", "create_pipeline", "__version__"]
