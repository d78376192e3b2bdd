"""Exception types raised by the alignment pipeline.

Every fatal condition maps to one subclass of MSAPrepError. Only
InputInsufficientError is recovered from, by the pipeline itself.
"""

from __future__ import annotations

from typing import Optional


class MSAPrepError(Exception):
    """Base class for all pipeline errors."""


class DataInconsistencyError(MSAPrepError):
    """Search output and reference data disagree about a sequence."""


class LookupFailureError(MSAPrepError):
    """The sequence index returned zero or several sequences for an id."""

    def __init__(self, accession: str, count: int):
        self.accession = accession
        self.count = count
        if count == 0:
            message = f"No sequence found for {accession}"
        else:
            message = f"Ambiguous accession {accession}: {count} sequences returned"
        super().__init__(message)


class InputInsufficientError(MSAPrepError):
    """Too few records survived a filtering stage."""

    def __init__(self, remaining: int, required: int):
        self.remaining = remaining
        self.required = required
        super().__init__(
            f"Only {remaining} records remain, at least {required} required"
        )


class ExternalToolError(MSAPrepError):
    """An external program exited abnormally or could not be started."""

    def __init__(self, tool: str, returncode: Optional[int], stderr: str = ""):
        self.tool = tool
        self.returncode = returncode
        self.stderr = stderr
        if returncode is None:
            message = f"{tool} could not be run: {stderr}"
        else:
            message = f"{tool} failed with exit status {returncode}: {stderr.strip()}"
        super().__init__(message)


class NoHitsError(MSAPrepError):
    """The search returned no hits and query-only prediction is disabled."""


class AlignmentFormatError(MSAPrepError):
    """Alignment text could not be parsed."""


class ConfigurationError(MSAPrepError):
    """A database or tool named at run time is not configured."""
