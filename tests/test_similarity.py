from __future__ import annotations

import math

import pytest

from src.user_cf.similarity import common_counts, shrinkage_factor, similarities, user_similarity
from src.user_cf.store import RatingStore


def test_no_common_items_is_exactly_zero() -> None:
    assert user_similarity({"I1": 5.0}, {"I2": 5.0}) == 0.0


def test_norms_use_each_users_full_profile() -> None:
    a = {"x": 5.0, "y": 3.0, "z": 4.0}
    b = {"x": 4.0, "w": 2.0}

    expected = (5.0 * 4.0) / (math.sqrt(50.0) * math.sqrt(20.0)) * (1 / 6)
    # Norms restricted to the overlap would give a cosine of exactly 1.
    overlap_only = 1.0 * (1 / 6)

    assert user_similarity(a, b) == pytest.approx(expected)
    assert user_similarity(a, b) != pytest.approx(overlap_only)
    assert user_similarity(b, a) == pytest.approx(expected)


def test_zero_norm_gives_zero() -> None:
    assert user_similarity({"x": 0.0}, {"x": 3.0}) == 0.0


def test_shrinkage_grows_with_overlap_and_stays_below_raw_cosine() -> None:
    scores = []
    for n in range(1, 31):
        profile = {f"I{i}": 3.0 for i in range(n)}
        scores.append(user_similarity(profile, dict(profile)))

    assert scores[0] == pytest.approx(1 / 6)
    assert all(later > earlier for earlier, later in zip(scores, scores[1:]))
    assert all(s < 1.0 for s in scores)
    assert scores[19] == pytest.approx(20 / 25)


def test_shrinkage_factor() -> None:
    assert shrinkage_factor(0) == 0.0
    assert shrinkage_factor(1) == pytest.approx(1 / 6)
    assert shrinkage_factor(3, shrinkage=0.0) == 1.0


def test_negative_ratings_give_negative_similarity() -> None:
    assert user_similarity({"A": 1.0}, {"A": -2.0, "B": 3.0}) < 0.0


def test_similarities_exclude_target_and_cover_everyone_else(sample_store: RatingStore) -> None:
    sims = similarities(sample_store, "U3")

    assert "U3" not in sims
    assert set(sims) == {"U1", "U2", "U4", "U5", "U6"}


def test_sample_similarities_for_u3(sample_store: RatingStore) -> None:
    sims = similarities(sample_store, "U3")
    norm_u3 = math.sqrt(16 + 25 + 4 + 25)

    assert sims["U1"] == pytest.approx(28 / (norm_u3 * math.sqrt(46)) * 3 / 8)
    assert sims["U2"] == pytest.approx((4 * 5 + 5 * 1) / (norm_u3 * math.sqrt(67)) * 2 / 7)
    assert sims["U5"] == pytest.approx(42 / (norm_u3 * math.sqrt(67)) * 3 / 8)
    assert f"{sims['U5']:.4f}" == "0.2300"
    assert f"{sims['U1']:.4f}" == "0.1850"
    assert f"{sims['U2']:.4f}" == "0.1043"


def test_common_counts(sample_store: RatingStore) -> None:
    assert common_counts(sample_store, "U3") == {"U1": 3, "U2": 2, "U4": 1, "U5": 3, "U6": 1}
