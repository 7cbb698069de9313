"""Similarity-weighted rating prediction from a neighbor list."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .neighbors import rank_key
from .store import RatingStore


@dataclass(frozen=True)
class Recommendation:
    item_id: str
    score: float


def candidate_items(store: RatingStore, target_user: str, neighbors: Sequence[tuple[str, float]]) -> set[str]:
    """Items rated by any neighbor that the target user has not rated."""
    candidates: set[str] = set()
    for user, _ in neighbors:
        candidates.update(store.ratings_of(user).keys())
    return candidates - store.ratings_of(target_user).keys()


def predict(
    store: RatingStore,
    target_user: str,
    neighbors: Sequence[tuple[str, float]],
    top_n: int,
) -> list[Recommendation]:
    """Predict scores for unseen items and return the best `top_n`.

    score(item) = sum(sim * r) / sum(|sim|) over neighbors that rated the item
    with sim > 0. Items with no such neighbor are left out rather than scored 0.
    An empty result means the caller should fall back to popularity.
    """
    candidates = candidate_items(store, target_user, neighbors)
    if not candidates:
        return []

    scored: list[tuple[str, float]] = []
    for item in sorted(candidates):
        num = 0.0
        den = 0.0
        for user, sim in neighbors:
            r = store.ratings_of(user).get(item)
            # Non-positive similarities never contribute.
            if r is None or sim <= 0.0:
                continue
            num += sim * r
            den += abs(sim)
        if den > 0.0:
            scored.append((item, num / den))

    scored.sort(key=rank_key)
    return [Recommendation(item_id=item, score=score) for item, score in scored[: max(int(top_n), 0)]]
