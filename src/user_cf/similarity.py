"""User-user cosine similarity with shrinkage for small overlaps."""

from __future__ import annotations

from typing import Mapping

import numpy as np

from .store import RatingStore


DEFAULT_SHRINKAGE = 5.0


def _norm(ratings: Mapping[str, float]) -> float:
    # Summed in item order so the result does not depend on load order.
    values = np.array([ratings[i] for i in sorted(ratings)], dtype=np.float64)
    return float(np.sqrt(np.dot(values, values)))


def shrinkage_factor(n_common: int, shrinkage: float = DEFAULT_SHRINKAGE) -> float:
    """`n / (n + shrinkage)`: discounts similarities backed by few co-rated items."""
    if n_common <= 0:
        return 0.0
    return n_common / (n_common + float(shrinkage))


def user_similarity(
    target: Mapping[str, float],
    other: Mapping[str, float],
    *,
    shrinkage: float = DEFAULT_SHRINKAGE,
) -> float:
    """Shrunk cosine similarity between two users' rating profiles.

    The dot product runs over the co-rated items only, while each norm covers
    that user's full profile, so users who rated many items outside the overlap
    score lower than users whose profile is mostly the overlap.
    """
    common = sorted(target.keys() & other.keys())
    if not common:
        return 0.0

    a = np.array([target[i] for i in common], dtype=np.float64)
    b = np.array([other[i] for i in common], dtype=np.float64)
    dot = float(np.dot(a, b))

    denom = _norm(target) * _norm(other)
    if denom == 0.0:
        return 0.0
    return (dot / denom) * shrinkage_factor(len(common), shrinkage)


def similarities(
    store: RatingStore,
    target_user: str,
    *,
    shrinkage: float = DEFAULT_SHRINKAGE,
) -> dict[str, float]:
    """Similarity of `target_user` to every other user in the store."""
    target = store.ratings_of(target_user)
    return {
        other: user_similarity(target, store.ratings_of(other), shrinkage=shrinkage)
        for other in sorted(store.known_users())
        if other != target_user
    }


def common_counts(store: RatingStore, target_user: str) -> dict[str, int]:
    """Number of co-rated items between `target_user` and every other user."""
    target_items = store.ratings_of(target_user).keys()
    return {
        other: len(target_items & store.ratings_of(other).keys())
        for other in sorted(store.known_users())
        if other != target_user
    }
