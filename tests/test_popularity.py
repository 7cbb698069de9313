from __future__ import annotations

import pytest

from src.user_cf.popularity import item_means, popular
from src.user_cf.store import RatingStore


def test_item_means_use_every_rater(sample_store: RatingStore) -> None:
    means = item_means(sample_store)

    assert means["I1"] == pytest.approx((5 + 5 + 1 + 4) / 4)
    assert means["I3"] == pytest.approx((2 + 1 + 5 + 4 + 2) / 5)
    assert means["I7"] == 4.0


def test_popular_excludes_items_the_user_rated(sample_store: RatingStore) -> None:
    recs = popular(sample_store, "U3", top_n=10)
    rated = set(sample_store.ratings_of("U3"))

    assert not rated & {r.item_id for r in recs}
    assert [r.item_id for r in recs] == ["I5", "I8", "I7", "I1"]
    assert recs[0].score == pytest.approx(14 / 3)


def test_popular_breaks_ties_by_item_id(sample_store: RatingStore) -> None:
    recs = popular(sample_store, "U1", top_n=3)

    # I6 and I8 both average 4.5.
    assert [(r.item_id, r.score) for r in recs] == [
        ("I5", pytest.approx(14 / 3)),
        ("I6", 4.5),
        ("I8", 4.5),
    ]


def test_popular_on_empty_store_and_non_positive_top_n(sample_store: RatingStore) -> None:
    assert popular(RatingStore.build([]), "U1", top_n=5) == []
    assert popular(sample_store, "U1", top_n=0) == []
    assert popular(sample_store, "U1", top_n=-3) == []
