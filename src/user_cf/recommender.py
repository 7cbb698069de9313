from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..data import load_rating_store
from .config import UserCFConfig
from .neighbors import top_k
from .popularity import popular
from .predict import Recommendation, predict
from .similarity import common_counts, similarities
from .store import RatingStore


logger = logging.getLogger(__name__)


class UnknownTargetUser(KeyError):
    """The requested user has no ratings in the store."""

    def __init__(self, user_id: str, available: list[str]) -> None:
        super().__init__(f"Unknown userId: {user_id}")
        self.user_id = user_id
        self.available = available

    def __str__(self) -> str:
        return f"Target user '{self.user_id}' not found in dataset. Available users: {self.available}"


class PipelineState(str, Enum):
    LOADED = "loaded"
    SIMILARITIES_COMPUTED = "similarities_computed"
    NEIGHBORS_SELECTED = "neighbors_selected"
    PREDICTED = "predicted"
    FALLBACK_APPLIED = "fallback_applied"
    DONE = "done"


@dataclass(frozen=True)
class Neighbor:
    user_id: str
    similarity: float
    common_rated: int


@dataclass(frozen=True)
class RecommendationResult:
    target_user: str
    neighbors: list[Neighbor]
    recommendations: list[Recommendation]
    used_fallback: bool
    states: tuple[PipelineState, ...]


class UserUserCFRecommender:
    """User-user CF recommender over an in-memory RatingStore.

    Every call recomputes similarities from the store; nothing is cached between
    calls, so the same store and parameters always give the same output.
    """

    def __init__(self, store: RatingStore, *, config: UserCFConfig | None = None) -> None:
        self.store = store
        self.config = config if config is not None else UserCFConfig()

    @classmethod
    def from_csv(cls, path: Path, *, config: UserCFConfig | None = None) -> "UserUserCFRecommender":
        config = config if config is not None else UserCFConfig(data_file=Path(path))
        store = load_rating_store(Path(path), delimiter=config.delimiter)
        return cls(store, config=config)

    def has_user(self, user_id: str) -> bool:
        return self.store.has_user(user_id)

    def _require_user(self, user_id: str) -> None:
        if not self.store.has_user(user_id):
            raise UnknownTargetUser(user_id, sorted(self.store.known_users()))

    def _select_neighbors(self, user_id: str, sims: dict[str, float], k: int) -> list[Neighbor]:
        counts = common_counts(self.store, user_id)
        return [
            Neighbor(user_id=other, similarity=float(sim), common_rated=int(counts.get(other, 0)))
            for other, sim in top_k(sims, k)
        ]

    def similar_users(self, user_id: str, *, top_n: int | None = None) -> list[Neighbor]:
        """Top-`top_n` most similar users to `user_id`, best first."""
        self._require_user(user_id)
        k = self.config.k_neighbors if top_n is None else int(top_n)
        sims = similarities(self.store, user_id, shrinkage=self.config.shrinkage)
        return self._select_neighbors(user_id, sims, k)

    def recommend(
        self,
        user_id: str,
        *,
        k: int | None = None,
        top_n: int | None = None,
    ) -> RecommendationResult:
        """Neighbors and top-N recommendations for `user_id`.

        Falls back to global item popularity when the neighbors yield no
        scorable candidate items.
        """
        k = self.config.k_neighbors if k is None else int(k)
        top_n = self.config.top_n if top_n is None else int(top_n)

        states = [PipelineState.LOADED]
        self._require_user(user_id)

        sims = similarities(self.store, user_id, shrinkage=self.config.shrinkage)
        states.append(PipelineState.SIMILARITIES_COMPUTED)
        logger.debug("user=%s similarities computed for %d users", user_id, len(sims))

        neighbors = self._select_neighbors(user_id, sims, k)
        states.append(PipelineState.NEIGHBORS_SELECTED)
        logger.debug("user=%s neighbors=%s", user_id, [n.user_id for n in neighbors])

        recs = predict(self.store, user_id, [(n.user_id, n.similarity) for n in neighbors], top_n)
        states.append(PipelineState.PREDICTED)

        used_fallback = not recs
        if used_fallback:
            logger.info("No personalized recommendations for user=%s; using popularity fallback", user_id)
            recs = popular(self.store, user_id, top_n)
            states.append(PipelineState.FALLBACK_APPLIED)
        states.append(PipelineState.DONE)

        logger.info(
            "user=%s k=%d top_n=%d neighbors=%d recommendations=%d fallback=%s",
            user_id,
            k,
            top_n,
            len(neighbors),
            len(recs),
            used_fallback,
        )
        return RecommendationResult(
            target_user=user_id,
            neighbors=neighbors,
            recommendations=recs,
            used_fallback=used_fallback,
            states=tuple(states),
        )
