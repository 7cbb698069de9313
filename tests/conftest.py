from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure `import src...` works when pytest uses importlib import mode.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from src.data import sample_lines  # noqa: E402
from src.user_cf.store import RatingStore  # noqa: E402


@pytest.fixture()
def sample_store() -> RatingStore:
    """The six-user / eight-item sample dataset."""
    return RatingStore.build(sample_lines())


@pytest.fixture()
def three_user_store() -> RatingStore:
    return RatingStore.build(
        [
            "userId,itemId,rating",
            "U1,I1,5", "U1,I2,4", "U1,I3,2", "U1,I4,1",
            "U2,I1,5", "U2,I2,5", "U2,I3,1", "U2,I5,4",
            "U3,I2,4", "U3,I3,5", "U3,I4,2", "U3,I6,5",
        ]
    )
