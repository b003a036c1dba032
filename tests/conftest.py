import sys
from pathlib import Path
from typing import Dict, Optional

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from geocoin.config import GameplayConfig  # noqa: E402


class FakeLuck:
    """Luck oracle backed by a dict; unknown keys get ``default``."""

    def __init__(self, values: Optional[Dict[str, float]] = None, default: float = 0.99) -> None:
        self.values = dict(values or {})
        self.default = default
        self.calls = []

    def __call__(self, key: str) -> float:
        self.calls.append(key)
        return self.values.get(key, self.default)


@pytest.fixture
def fake_luck():
    return FakeLuck


@pytest.fixture
def small_config():
    # Player starts in the middle of cell (0, 0); neighborhood is cells -2..1.
    return GameplayConfig(origin_lat=0.00005, origin_lng=0.00005, neighborhood_size=2)
