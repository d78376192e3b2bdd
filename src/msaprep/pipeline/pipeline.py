"""Alignment pipeline orchestration.

Implements the full path from a query sequence to a predictor-ready
alignment:
1. Search (PSI-BLAST) and assembly of hits
2. Extension to the full query length
3. Unmasking of filtered residues
4. Case normalization
5. Volume reduction
6. Length filtering
7. Redundancy filtering (with fallback to the previous collection)
8. Collapsing to query columns
9. Writing the alignment, then the optional profile and prediction
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from msaprep.alignment.record import SequenceRecord, alignment_profile, copy_records
from msaprep.config import Config
from msaprep.exceptions import InputInsufficientError, MSAPrepError, NoHitsError
from msaprep.processing.degap import degap_alignment
from msaprep.processing.extend import extend_alignment
from msaprep.processing.filtering import filter_by_length, reduce_alignment, uppercase_alignment
from msaprep.processing.redundancy import remove_redundant, require_records
from msaprep.processing.unmask import unmask_alignment
from msaprep.search.hits import QUERY_ID, SearchEngine, assemble_hits
from msaprep.search.psiblast import PsiBlastSearch
from msaprep.storage.serialization import CheckpointStore, write_alignment_atomic
from msaprep.tools.alipid import AlipidIdentityCalculator
from msaprep.tools.base import (
    ClusteringEngine,
    IdentityCalculator,
    Predictor,
    ProfileBuilder,
    SequenceIndex,
)
from msaprep.tools.blastdbcmd import BlastDbSequenceIndex
from msaprep.tools.oc import OCClusteringEngine
from msaprep.tools.profile import CommandPredictor, PsiBlastProfileBuilder

logger = logging.getLogger(__name__)


@dataclass
class PipelineStats:
    """Statistics for one pipeline run."""
    num_hits: int = 0
    stage_counts: Dict[str, int] = field(default_factory=dict)
    redundancy_fallback: bool = False
    query_only: bool = False
    final_width: int = 0
    mean_coverage: float = 0.0


@dataclass
class PipelineResult:
    """Outputs of a pipeline run."""
    name: str
    records: List[SequenceRecord]
    alignment_path: Path
    profile_path: Optional[Path] = None
    prediction_path: Optional[Path] = None
    checkpoints: Dict[str, Path] = field(default_factory=dict)
    stats: PipelineStats = field(default_factory=PipelineStats)


class AlignmentPipeline:
    """Builds a filtered, query-anchored alignment for one query.

    Every external program is reached through an injected collaborator;
    any that is not given is built from the configuration.
    """

    def __init__(
        self,
        config: Config,
        search_engine: Optional[SearchEngine] = None,
        sequence_index: Optional[SequenceIndex] = None,
        identity_calculator: Optional[IdentityCalculator] = None,
        clustering_engine: Optional[ClusteringEngine] = None,
        profile_builder: Optional[ProfileBuilder] = None,
        predictor: Optional[Predictor] = None,
    ):
        """Initialize the pipeline.

        Args:
            config: Pipeline configuration
            search_engine: Homology search (PSI-BLAST by default)
            sequence_index: Full-sequence lookup (blastdbcmd by default)
            identity_calculator: Pairwise identities (esl-alipid by default)
            clustering_engine: Complete-linkage clustering (OC by default)
            profile_builder: PSSM builder, used when output.build_profile is set
            predictor: Structure predictor, used when given or configured
        """
        self.config = config
        tools = config.tools

        self.search_engine = search_engine or PsiBlastSearch(
            binary_path=tools.psiblast,
            config=config.search,
        )
        self.sequence_index = sequence_index or BlastDbSequenceIndex(tools.blastdbcmd)
        self.identity_calculator = identity_calculator or AlipidIdentityCalculator(tools.esl_alipid)
        self.clustering_engine = clustering_engine or OCClusteringEngine(tools.oc)
        self.profile_builder = profile_builder
        self.predictor = predictor
        if self.predictor is None and tools.predictor:
            self.predictor = CommandPredictor(tools.predictor)

        self.stats = PipelineStats()
        self.checkpoints: Optional[CheckpointStore] = None

    def run(
        self,
        query: str,
        name: str,
        output_dir: Union[str, Path],
        database: Optional[str] = None,
    ) -> PipelineResult:
        """Search, process and write the alignment for ``query``.

        Args:
            query: Query protein sequence
            name: Basename for output files
            output_dir: Directory for the alignment, profile and prediction
            database: Database name (configured default when omitted)

        Returns:
            PipelineResult with the final records and output paths

        Raises:
            MSAPrepError: Any fatal pipeline error; no final alignment is
                written in that case
        """
        self.stats = PipelineStats()
        output_dir = Path(output_dir)
        databases = self.config.databases
        database = database or databases.default

        checkpoint_dir = self.config.output.checkpoint_dir
        self.checkpoints = None
        if checkpoint_dir is not None:
            self.checkpoints = CheckpointStore(
                checkpoint_dir, name, self.config.output.line_width
            )

        try:
            result = self.search_engine.search(
                query,
                databases.search_path(database),
                database_name=database,
            )
            self.stats.num_hits = result.num_hits

            if result.num_hits == 0:
                if not self.config.output.allow_query_only:
                    raise NoHitsError(f"No hits for {name} in {database}")
                logger.warning("No hits for %s; continuing with the query alone", name)
                self.stats.query_only = True

            records = assemble_hits(query, result.hits, query_id=QUERY_ID)
            records = self.process(
                query,
                records,
                reference_database=databases.reference_path(database),
            )

            output_dir.mkdir(parents=True, exist_ok=True)
            alignment_path = write_alignment_atomic(
                records,
                output_dir / f"{name}.afa",
                self.config.output.line_width,
            )
            logger.info("Alignment for %s written to %s", name, alignment_path)

            profile_path = None
            if self.config.output.build_profile:
                profile_path = self._get_profile_builder(database).build(
                    alignment_path, output_dir / f"{name}.pssm"
                )

            prediction_path = None
            if self.predictor is not None:
                prediction_path = self.predictor.predict(
                    alignment_path, profile_path, output_dir / f"{name}.pred"
                )

        except MSAPrepError as e:
            logger.error("Pipeline failed for %s: %s", name, e)
            raise

        checkpoints = {}
        if self.checkpoints is not None:
            checkpoints = {s: self.checkpoints.path(s) for s in self.checkpoints.stages}

        return PipelineResult(
            name=name,
            records=records,
            alignment_path=alignment_path,
            profile_path=profile_path,
            prediction_path=prediction_path,
            checkpoints=checkpoints,
            stats=self.stats,
        )

    def process(
        self,
        query: str,
        records: List[SequenceRecord],
        reference_database: Optional[Union[str, Path]] = None,
    ) -> List[SequenceRecord]:
        """Run the post-processing stages on an assembled search alignment.

        Args:
            query: Full query sequence
            records: Search alignment, the engine's query copy first
            reference_database: Unfiltered database for unmasking

        Returns:
            The final, query-column alignment
        """
        filters = self.config.filters
        if reference_database is None and any(r.is_masked for r in records[1:]):
            reference_database = self.config.databases.reference_path()

        self._checkpoint("hits", records)

        records = extend_alignment(query, records)
        self._checkpoint("extended", records)

        records = unmask_alignment(records, self.sequence_index, reference_database)
        self._checkpoint("unmasked", records)

        records = uppercase_alignment(records)
        self._checkpoint("uppercase", records)

        records = reduce_alignment(filters.max_sequences, records)
        self._checkpoint("reduced", records)

        records = filter_by_length(filters.length_tolerance, records)
        self._checkpoint("length_filtered", records)

        records = self._remove_redundant(records)
        self._checkpoint("nonredundant", records)

        records = degap_alignment(records)
        self._checkpoint("degapped", records)

        self.stats.final_width = records[0].length if records else 0
        if len(records) > 1:
            profile = alignment_profile(records[1:])
            self.stats.mean_coverage = float(1.0 - profile[:, 20].mean())
        return records

    def _remove_redundant(self, records: List[SequenceRecord]) -> List[SequenceRecord]:
        """Redundancy filtering, reverting to the input when too few survive."""
        filters = self.config.filters
        minimum = filters.min_after_redundancy
        if len(records) < minimum:
            logger.debug("Skipping redundancy filter for %d records", len(records))
            return records

        before = copy_records(records)
        try:
            filtered = remove_redundant(
                filters.identity_cutoff,
                records,
                self.identity_calculator,
                self.clustering_engine,
            )
            return require_records(filtered, minimum)
        except InputInsufficientError as e:
            logger.warning("%s after redundancy filtering; using unfiltered alignment", e)
            self.stats.redundancy_fallback = True
            return before

    def _checkpoint(self, stage: str, records: List[SequenceRecord]) -> None:
        self.stats.stage_counts[stage] = len(records)
        if self.checkpoints is not None:
            self.checkpoints.save(stage, records)

    def _get_profile_builder(self, database: str) -> ProfileBuilder:
        if self.profile_builder is None:
            self.profile_builder = PsiBlastProfileBuilder(
                database=self.config.databases.search_path(database),
                binary_path=self.config.tools.psiblast,
                num_threads=self.config.search.num_threads,
            )
        return self.profile_builder


def create_pipeline(config_path: Optional[str] = None) -> AlignmentPipeline:
    """Create a pipeline from configuration.

    Args:
        config_path: Optional path to a YAML config file

    Returns:
        Configured AlignmentPipeline
    """
    if config_path:
        config = Config.from_yaml(config_path)
    else:
        config = Config()

    return AlignmentPipeline(config)
