"""Command-line entrypoint: user-based CF recommendations from a ratings file.

Example:
    python -m src.user_cf.cli --user-id U3 --k 3 --top-n 5

Ratings file format: `userId,itemId,rating` (header optional).
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import pandas as pd

from ..data import ensure_sample_data, load_rating_store
from ..paths import get_repo_root, resolve_path
from ..utils import setup_logging
from .config import UserCFConfig, load_config
from .predict import Recommendation
from .recommender import Neighbor, RecommendationResult, UnknownTargetUser, UserUserCFRecommender
from .store import RatingStore


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="User-based collaborative filtering recommendations")
    p.add_argument("--user-id", type=str, default=None, help="Target userId (default from config, else U1)")
    p.add_argument("--k", type=int, default=None, help="How many neighbors to use (default 3)")
    p.add_argument("--top-n", type=int, default=None, help="How many recommendations to return (default 5)")
    p.add_argument("--data-file", type=Path, default=None, help="Ratings file (userId,itemId,rating)")
    p.add_argument("--config", type=Path, default=None, help="Path to config YAML (default: config.yaml)")
    p.add_argument("--log-level", type=str, default=None, help="DEBUG/INFO/WARNING; default from config")
    p.add_argument("--no-sample", action="store_true", help="Fail instead of writing a sample file if missing")
    p.add_argument("--show-ratings", action="store_true", help="Print the loaded user x item rating matrix")
    return p


def neighbors_table(neighbors: list[Neighbor]) -> str:
    df = pd.DataFrame(
        {
            "rank": range(1, len(neighbors) + 1),
            "userId": [n.user_id for n in neighbors],
            "similarity": [n.similarity for n in neighbors],
            "common_rated": [n.common_rated for n in neighbors],
        }
    )
    return df.to_string(index=False, formatters={"similarity": "{:.4f}".format})


def recommendations_table(recs: list[Recommendation]) -> str:
    df = pd.DataFrame(
        {
            "rank": range(1, len(recs) + 1),
            "itemId": [r.item_id for r in recs],
            "predictedScore": [r.score for r in recs],
        }
    )
    return df.to_string(index=False, formatters={"predictedScore": "{:.3f}".format})


def ratings_matrix(store: RatingStore) -> str:
    df = store.to_frame()
    if df.empty:
        return "(no ratings)"
    matrix = df.pivot(index="userId", columns="itemId", values="rating")
    return matrix.to_string(na_rep="-", float_format="{:g}".format)


def print_dataset(store: RatingStore) -> None:
    print("\n=== Ratings ===")
    print(
        f"Users: {len(store.known_users())}  Items: {len(store.known_items())}  "
        f"Ratings: {store.n_ratings}  Skipped rows: {len(store.skipped)}"
    )
    print(ratings_matrix(store))


def print_result(result: RecommendationResult, *, k: int, top_n: int, data_file: Path) -> None:
    print("\n===== User-Based CF Recommendations =====")
    print(f"Target User : {result.target_user}")
    print(f"Neighbors K : {k}")
    print(f"Top-N       : {top_n}")
    print(f"Data File   : {data_file}")

    print(f"\n=== Top Neighbors for {result.target_user} ===")
    print(neighbors_table(result.neighbors) if result.neighbors else "(none)")

    if result.used_fallback:
        print("\nNo personalized recommendations found (not enough overlap).")
        print("Showing popular items the user hasn't rated yet:")

    print(f"\n=== Top Recommendations for {result.target_user} ===")
    print(recommendations_table(result.recommendations) if result.recommendations else "(none)")


def _resolve_config(args: argparse.Namespace) -> UserCFConfig:
    repo_root = get_repo_root()
    if args.config is not None:
        config_path = resolve_path(Path.cwd(), args.config)
        if not config_path.exists():
            raise FileNotFoundError(f"Config not found: {config_path}")
    else:
        config_path = repo_root / "config.yaml"

    cfg = load_config(config_path, repo_root=repo_root)
    return cfg.with_overrides(
        data_file=(resolve_path(Path.cwd(), args.data_file) if args.data_file is not None else None),
        target_user=(args.user_id.strip() if args.user_id is not None else None),
        k_neighbors=args.k,
        top_n=args.top_n,
        log_level=args.log_level,
        create_sample_if_missing=(False if args.no_sample else None),
    )


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    cfg = _resolve_config(args)
    setup_logging(cfg.log_level)

    if cfg.create_sample_if_missing and ensure_sample_data(cfg.data_file):
        print(f"Created sample dataset: {cfg.data_file}")

    try:
        store = load_rating_store(cfg.data_file, delimiter=cfg.delimiter)
    except OSError as exc:
        print(f"Failed to read data file: {exc}", file=sys.stderr)
        return 1

    if args.show_ratings:
        print_dataset(store)

    rec = UserUserCFRecommender(store, config=cfg)
    try:
        result = rec.recommend(cfg.target_user, k=cfg.k_neighbors, top_n=cfg.top_n)
    except UnknownTargetUser as exc:
        print(str(exc))
        return 1

    print_result(result, k=cfg.k_neighbors, top_n=cfg.top_n, data_file=cfg.data_file)
    print("\nDone.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
