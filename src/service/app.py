"""FastAPI service entrypoint for the user-based CF recommender."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException

from ..data import ensure_sample_data, load_rating_store
from ..paths import get_repo_root
from ..user_cf.config import load_config
from ..user_cf.recommender import UnknownTargetUser, UserUserCFRecommender
from ..utils import setup_logging
from .schemas import RecommendRequest, RecommendResponse, UsersResponse

logger = logging.getLogger(__name__)


def _get_env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or str(raw).strip() == "":
        return default
    p = Path(str(raw))
    return p if p.is_absolute() else (get_repo_root() / p).resolve()


@asynccontextmanager
async def lifespan(app: FastAPI):
    repo_root = get_repo_root()
    config_path = _get_env_path("CONFIG_PATH", repo_root / "config.yaml")
    cfg = load_config(config_path, repo_root=repo_root)
    setup_logging(os.getenv("LOG_LEVEL", cfg.log_level))

    if cfg.create_sample_if_missing:
        ensure_sample_data(cfg.data_file)

    logger.info("Starting service with config=%s data_file=%s", config_path, cfg.data_file)
    store = load_rating_store(cfg.data_file, delimiter=cfg.delimiter)
    app.state.user_cf = UserUserCFRecommender(store, config=cfg)
    yield


app = FastAPI(title="User-Based CF Recommendation Service", lifespan=lifespan)


def _user_cf(app_: FastAPI) -> UserUserCFRecommender:
    rec = getattr(app_.state, "user_cf", None)
    if rec is None:
        raise HTTPException(status_code=503, detail="UserCF recommender not initialized")
    return rec


@app.get("/users", response_model=UsersResponse)
def users() -> dict:
    """List every userId that has at least one rating."""
    rec = _user_cf(app)
    return {"users": sorted(rec.store.known_users())}


@app.post("/recommend", response_model=RecommendResponse)
def recommend(req: RecommendRequest) -> dict:
    """Recommend unseen items to a user from the ratings of similar users."""
    rec = _user_cf(app)
    try:
        result = rec.recommend(req.userId.strip(), k=int(req.k), top_n=int(req.top_n))
    except UnknownTargetUser as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return {
        "userId": result.target_user,
        "k": int(req.k),
        "top_n": int(req.top_n),
        "used_fallback": result.used_fallback,
        "neighbors": [
            {"userId": n.user_id, "similarity": n.similarity, "common_rated": n.common_rated}
            for n in result.neighbors
        ],
        "results": [{"itemId": r.item_id, "score": r.score} for r in result.recommendations],
    }
