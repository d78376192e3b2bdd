"""Profile building and predictor invocation.

The PSSM is built by PSI-BLAST restarted from the finished alignment; the
predictor is an arbitrary command configured as a template.
"""

from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Optional, Union

from msaprep.exceptions import ExternalToolError
from msaprep.tools.base import run_tool

logger = logging.getLogger(__name__)


class PsiBlastProfileBuilder:
    """Builds an ASCII PSSM from an alignment whose first row is the query."""

    def __init__(
        self,
        database: Union[str, Path],
        binary_path: str = "psiblast",
        num_threads: int = 1,
    ):
        self.database = database
        self.binary_path = binary_path
        self.num_threads = num_threads

    def build(self, alignment_path: Path, output_path: Path) -> Path:
        cmd = [
            self.binary_path,
            "-in_msa", str(alignment_path),
            "-msa_master_idx", "1",
            "-db", str(self.database),
            "-num_iterations", "1",
            "-num_threads", str(self.num_threads),
            "-out_ascii_pssm", str(output_path),
            "-out", "/dev/null",
        ]
        run_tool("psiblast", cmd)
        if not Path(output_path).exists():
            raise ExternalToolError("psiblast", 0, f"no profile written to {output_path}")
        logger.info("Profile written to %s", output_path)
        return Path(output_path)


class CommandPredictor:
    """Runs a predictor given as a command template.

    The template may use ``{alignment}``, ``{profile}`` and ``{output}``;
    ``{profile}`` expands to an empty string when no profile was built.
    """

    def __init__(self, command_template: str):
        self.command_template = command_template

    def predict(
        self,
        alignment_path: Path,
        profile_path: Optional[Path],
        output_path: Path,
    ) -> Path:
        command = self.command_template.format(
            alignment=shlex.quote(str(alignment_path)),
            profile=shlex.quote(str(profile_path)) if profile_path else "",
            output=shlex.quote(str(output_path)),
        )
        run_tool("predictor", shlex.split(command))
        logger.info("Prediction written to %s", output_path)
        return Path(output_path)
