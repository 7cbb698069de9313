from __future__ import annotations

from typing import Mapping


def rank_key(entry: tuple[str, float]) -> tuple[float, str]:
    """Sort key: higher score first, then ascending id for ties."""
    return (-entry[1], entry[0])


def top_k(scores: Mapping[str, float], k: int) -> list[tuple[str, float]]:
    """The `k` highest-scoring users as (user, score), best first.

    Non-positive scores are kept; the predictor decides who contributes.
    """
    k = max(int(k), 0)
    ranked = sorted(scores.items(), key=rank_key)
    return ranked[:k]
