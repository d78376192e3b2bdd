"""Configuration management for the msaprep pipeline.

This module defines all configuration options for alignment construction,
including external tool paths, database tables, filter thresholds and
output settings. A single Config is built at program start and handed to
the pipeline; nothing below reads global state.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from msaprep.exceptions import ConfigurationError


class ToolPaths(BaseModel):
    """Executables for the external collaborators."""

    psiblast: str = Field(default="psiblast", description="PSI-BLAST binary (search and profile)")
    blastdbcmd: str = Field(default="blastdbcmd", description="BLAST database lookup binary")
    esl_alipid: str = Field(default="esl-alipid", description="Easel pairwise identity binary")
    oc: str = Field(default="oc", description="OC cluster analysis binary")
    predictor: Optional[str] = Field(
        default=None,
        description="Predictor command template with {alignment}, {profile} and {output} fields",
    )


class DatabasePaths(BaseModel):
    """Database name to path tables.

    Search databases may be low-complexity filtered; masked residues in their
    hits are restored from the reference database registered under the same
    name.
    """

    default: str = Field(default="nr", description="Database used when none is named")
    search: Dict[str, Path] = Field(
        default_factory=dict,
        description="Filtered databases searched by PSI-BLAST",
    )
    reference: Dict[str, Path] = Field(
        default_factory=dict,
        description="Unfiltered databases used to unmask hits",
    )

    def search_path(self, name: Optional[str] = None) -> Path:
        """Path of the search database called ``name`` (or the default)."""
        name = name or self.default
        if name not in self.search:
            raise ConfigurationError(f"Unknown search database: {name}")
        return self.search[name]

    def reference_path(self, name: Optional[str] = None) -> Path:
        """Path of the unfiltered database for ``name``.

        Falls back to the search database when no reference is registered.
        """
        name = name or self.default
        if name in self.reference:
            return self.reference[name]
        return self.search_path(name)


class SearchConfig(BaseModel):
    """PSI-BLAST search parameters."""

    num_iterations: int = Field(default=3, description="Number of iterations (-num_iterations)")
    e_value: float = Field(default=0.001, description="E-value threshold (-evalue)")
    inclusion_e_value: float = Field(default=0.001, description="Inclusion threshold (-inclusion_ethresh)")
    max_target_seqs: int = Field(default=5000, description="Max hits (-max_target_seqs)")
    num_threads: int = Field(default=1, description="Threads (-num_threads)")


class FilterConfig(BaseModel):
    """Thresholds for the filtering stages."""

    max_sequences: int = Field(default=2000, description="Approximate cap for volume reduction")
    length_tolerance: float = Field(
        default=50.0,
        description="Allowed ungapped length deviation from the query, in percent",
    )
    identity_cutoff: float = Field(
        default=90.0,
        description="Percent identity at which records are clustered as redundant",
    )
    min_after_redundancy: int = Field(
        default=2,
        description="Records required after redundancy filtering before falling back",
    )

    @field_validator("max_sequences")
    @classmethod
    def _check_max_sequences(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_sequences must be at least 1")
        return v

    @field_validator("length_tolerance")
    @classmethod
    def _check_tolerance(cls, v: float) -> float:
        if v < 0:
            raise ValueError("length_tolerance must not be negative")
        return v

    @field_validator("identity_cutoff")
    @classmethod
    def _check_cutoff(cls, v: float) -> float:
        if not 0 < v <= 100:
            raise ValueError("identity_cutoff must be in (0, 100]")
        return v


class OutputConfig(BaseModel):
    """Alignment output and checkpoint settings."""

    line_width: int = Field(default=72, description="Residues per sequence line")
    checkpoint_dir: Optional[Path] = Field(
        default=None,
        description="Write a gzip checkpoint after every stage when set",
    )
    build_profile: bool = Field(default=False, description="Build a PSSM from the final alignment")
    allow_query_only: bool = Field(
        default=True,
        description="Continue with the query alone when the search finds nothing",
    )

    @field_validator("line_width")
    @classmethod
    def _check_line_width(cls, v: int) -> int:
        if v < 1:
            raise ValueError("line_width must be positive")
        return v


class Config(BaseSettings):
    """Main configuration for the msaprep pipeline."""

    tools: ToolPaths = Field(default_factory=ToolPaths)
    databases: DatabasePaths = Field(default_factory=DatabasePaths)
    search: SearchConfig = Field(default_factory=SearchConfig)
    filters: FilterConfig = Field(default_factory=FilterConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    model_config = {"env_prefix": "MSAPREP_", "env_nested_delimiter": "__"}

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to a YAML file."""
        with open(path, "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False)

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        return self.model_dump()
