import sys
from pathlib import Path

import pytest

# Make the src layout importable without installing the package
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists():
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def _no_ambient_alignment_pattern(monkeypatch):
    """Keep a developer's ALIGNMENT_PATTERN from leaking into CLI tests."""

    monkeypatch.delenv("ALIGNMENT_PATTERN", raising=False)
