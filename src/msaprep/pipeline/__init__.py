"""Pipeline orchestration."""

from msaprep.pipeline.pipeline import (
    AlignmentPipeline,
    PipelineResult,
    PipelineStats,
    create_pipeline,
)

__all__ = [
    "AlignmentPipeline",
    "PipelineResult",
    "PipelineStats",
    "create_pipeline",
]
