"""Pytest configuration and fixtures for msaprep tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Dict, Generator, List

import pytest

from msaprep.alignment.record import SequenceRecord
from msaprep.tools.base import Cluster, ClusteringResult, IdentityReport


# =============================================================================
# Test Data Fixtures
# =============================================================================


@pytest.fixture
def sample_protein_sequence() -> str:
    """A sample protein sequence for testing."""
    return "MVLSPADKTNVKAAWGKVGAHAGEYGAEALERMFLSFPTTKTYFPHFDLSH"


@pytest.fixture
def sample_records() -> List[SequenceRecord]:
    """A small rectangular alignment with the query first."""
    return [
        SequenceRecord(id="query", align="MK-VLAG"),
        SequenceRecord(id="hit1", align="MKAVLAG", start=1),
        SequenceRecord(id="hit2", align="MR-ILSG", start=10),
        SequenceRecord(id="hit3", align="-KAV-AG", start=3),
    ]


@pytest.fixture
def reference_sequences() -> Dict[str, List[str]]:
    """Unfiltered sequences keyed by accession."""
    return {
        "hit1": ["PPMKAVLAGQQ"],
        "hit2": ["MRILSG"],
    }


# =============================================================================
# Temporary Directory Fixtures
# =============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_output_dir(temp_dir: Path) -> Path:
    """Create a temporary directory for output files."""
    output_dir = temp_dir / "output"
    output_dir.mkdir()
    return output_dir


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def minimal_config() -> Dict:
    """Minimal configuration for testing."""
    return {
        "databases": {
            "default": "testdb",
            "search": {"testdb": "/tmp/testdb_filtered"},
            "reference": {"testdb": "/tmp/testdb"},
        },
        "filters": {
            "max_sequences": 100,
            "length_tolerance": 50,
            "identity_cutoff": 90,
        },
    }


# =============================================================================
# Test Doubles for External Tools
# =============================================================================


class FakeSequenceIndex:
    """Sequence index backed by a dictionary."""

    def __init__(self, sequences: Dict[str, List[str]]):
        self.sequences = sequences
        self.calls: List[str] = []

    def fetch(self, accession, database):
        self.calls.append(accession)
        return list(self.sequences.get(accession, []))


class FakeIdentityCalculator:
    """Records the payload it was given and reports no identities."""

    def __init__(self):
        self.payloads: List[str] = []

    def compute(self, alignment_text):
        self.payloads.append(alignment_text)
        ids = [line[1:] for line in alignment_text.splitlines() if line.startswith(">")]
        return IdentityReport(ids=ids)


class FakeClusteringEngine:
    """Returns a fixed clustering."""

    def __init__(self, clusters=None, unclustered=None):
        self.result = ClusteringResult(
            clusters=[
                Cluster(label=str(i + 1), score=95.0, size=len(m), members=list(m))
                for i, m in enumerate(clusters or [])
            ],
            unclustered=list(unclustered or []),
        )
        self.cutoffs: List[float] = []

    def cluster(self, report, cutoff):
        self.cutoffs.append(cutoff)
        return self.result


@pytest.fixture
def fake_index(reference_sequences) -> FakeSequenceIndex:
    return FakeSequenceIndex(reference_sequences)


@pytest.fixture
def fake_identity() -> FakeIdentityCalculator:
    return FakeIdentityCalculator()


# =============================================================================
# Markers
# =============================================================================


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "requires_external: marks tests that require external tools"
    )
