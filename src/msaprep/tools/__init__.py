"""External collaborators: interfaces and subprocess-backed implementations."""

from msaprep.tools.alipid import AlipidIdentityCalculator
from msaprep.tools.base import (
    Cluster,
    ClusteringEngine,
    ClusteringResult,
    IdentityCalculator,
    IdentityReport,
    Predictor,
    ProfileBuilder,
    SequenceIndex,
    run_tool,
)
from msaprep.tools.blastdbcmd import BlastDbSequenceIndex
from msaprep.tools.oc import OCClusteringEngine
from msaprep.tools.profile import CommandPredictor, PsiBlastProfileBuilder

__all__ = [
    # Interfaces
    "SequenceIndex",
    "IdentityCalculator",
    "ClusteringEngine",
    "ProfileBuilder",
    "Predictor",
    # Data
    "Cluster",
    "ClusteringResult",
    "IdentityReport",
    # Implementations
    "AlipidIdentityCalculator",
    "BlastDbSequenceIndex",
    "OCClusteringEngine",
    "PsiBlastProfileBuilder",
    "CommandPredictor",
    "run_tool",
]
