from __future__ import annotations

from .neighbors import rank_key
from .predict import Recommendation
from .store import RatingStore


def item_means(store: RatingStore) -> dict[str, float]:
    """Mean rating of every item across all users."""
    return {
        item: sum(raters[u] for u in sorted(raters)) / len(raters)
        for item, raters in store.item_ratings.items()
        if raters
    }


def popular(store: RatingStore, target_user: str, top_n: int) -> list[Recommendation]:
    """Highest mean-rated items the target user has not rated yet."""
    seen = store.ratings_of(target_user).keys()
    ranked = sorted(
        ((item, mean) for item, mean in item_means(store).items() if item not in seen),
        key=rank_key,
    )
    return [Recommendation(item_id=item, score=score) for item, score in ranked[: max(int(top_n), 0)]]
