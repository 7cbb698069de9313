from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

from .user_cf.store import RatingStore


logger = logging.getLogger(__name__)

RATINGS_HEADER = "userId,itemId,rating"

# Users U1..U6, items I1..I8, ratings 1..5.
SAMPLE_RATINGS: tuple[tuple[str, str, int], ...] = (
    ("U1", "I1", 5), ("U1", "I2", 4), ("U1", "I3", 2), ("U1", "I4", 1),
    ("U2", "I1", 5), ("U2", "I2", 5), ("U2", "I3", 1), ("U2", "I5", 4),
    ("U3", "I2", 4), ("U3", "I3", 5), ("U3", "I4", 2), ("U3", "I6", 5),
    ("U4", "I1", 1), ("U4", "I3", 4), ("U4", "I5", 5), ("U4", "I7", 4),
    ("U5", "I2", 5), ("U5", "I4", 1), ("U5", "I6", 4), ("U5", "I8", 5),
    ("U6", "I1", 4), ("U6", "I3", 2), ("U6", "I5", 5), ("U6", "I8", 4),
)


def sample_lines() -> list[str]:
    """The sample dataset as CSV lines, header first."""
    return [RATINGS_HEADER] + [f"{u},{i},{r}" for u, i, r in SAMPLE_RATINGS]


def ensure_sample_data(path: Path) -> bool:
    """Write the sample dataset to `path` if it does not exist yet.

    Returns True when a file was created.
    """
    path = Path(path)
    if path.exists():
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(sample_lines()) + "\n")
    logger.info("Created sample dataset: %s", path)
    return True


def iter_rating_lines(path: Path) -> Iterator[str]:
    """Yield raw lines of a ratings file (newlines stripped).

    Undecodable bytes become U+FFFD so the row is reported as malformed
    instead of aborting the read.
    """
    with Path(path).open("r", encoding="utf-8", errors="replace") as f:
        for line in f:
            yield line.rstrip("\r\n")


def load_rating_store(path: Path, *, delimiter: str = ",") -> RatingStore:
    """Load a `userId,itemId,rating` file into a RatingStore.

    Raises FileNotFoundError if the file is missing; malformed rows are skipped
    and kept on `store.skipped`.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Ratings file not found: {path}")

    store = RatingStore.build(iter_rating_lines(path), delimiter=delimiter)
    logger.info("Loaded %d ratings from %s", store.n_ratings, path)
    return store
