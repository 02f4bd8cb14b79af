"""Pytest configuration for the Funk test suite."""

import io
import sys
from pathlib import Path

import pytest

# Add src directory to path so the suite runs without an install
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from funk import run  # noqa: E402


@pytest.fixture
def run_source():
    """Run Funk source and return everything it printed."""

    def _run(source: str, stdin: str = "", typecheck: bool = True) -> str:
        out = io.StringIO()
        run(source, out=out, inp=io.StringIO(stdin), typecheck=typecheck)
        return out.getvalue()

    return _run
