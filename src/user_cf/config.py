from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from ..paths import resolve_path
from .similarity import DEFAULT_SHRINKAGE


logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = "sample_ratings.csv"
DEFAULT_TARGET_USER = "U1"
DEFAULT_K = 3
DEFAULT_TOP_N = 5


@dataclass(frozen=True)
class UserCFConfig:
    data_file: Path = Path(DEFAULT_DATA_FILE)
    delimiter: str = ","
    create_sample_if_missing: bool = True
    target_user: str = DEFAULT_TARGET_USER
    k_neighbors: int = DEFAULT_K
    top_n: int = DEFAULT_TOP_N
    shrinkage: float = DEFAULT_SHRINKAGE
    log_level: str = "INFO"

    def with_overrides(self, **overrides: Any) -> "UserCFConfig":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _section(cfg_yaml: dict[str, Any], name: str) -> dict[str, Any]:
    section = cfg_yaml.get(name, {})
    return section if isinstance(section, dict) else {}


def load_config(config_path: Path | None, *, repo_root: Path) -> UserCFConfig:
    """Load `UserCFConfig` from a YAML file.

    A missing default `config.yaml` yields the built-in defaults; relative
    `data_file` values resolve against `repo_root`.
    """
    if config_path is None or not Path(config_path).exists():
        if config_path is not None:
            logger.info("Config not found at %s; using defaults", config_path)
        return UserCFConfig(data_file=resolve_path(repo_root, DEFAULT_DATA_FILE))

    cfg_yaml = yaml.safe_load(Path(config_path).read_text())
    if cfg_yaml is None:
        cfg_yaml = {}
    if not isinstance(cfg_yaml, dict):
        raise ValueError(f"Expected YAML mapping at {config_path}, got {type(cfg_yaml)}")

    dataset_cfg = _section(cfg_yaml, "dataset")
    user_cf_cfg = _section(cfg_yaml, "user_cf")
    logging_cfg = _section(cfg_yaml, "logging")

    shrinkage = float(user_cf_cfg.get("shrinkage", DEFAULT_SHRINKAGE))
    if shrinkage < 0.0:
        raise ValueError(f"user_cf.shrinkage must be >= 0, got {shrinkage}")

    delimiter = str(dataset_cfg.get("delimiter", ","))
    if len(delimiter) != 1:
        raise ValueError(f"dataset.delimiter must be a single character, got {delimiter!r}")

    return UserCFConfig(
        data_file=resolve_path(repo_root, str(dataset_cfg.get("data_file", DEFAULT_DATA_FILE))),
        delimiter=delimiter,
        create_sample_if_missing=bool(dataset_cfg.get("create_sample_if_missing", True)),
        target_user=str(user_cf_cfg.get("target_user", DEFAULT_TARGET_USER)),
        k_neighbors=int(user_cf_cfg.get("k_neighbors", DEFAULT_K)),
        top_n=int(user_cf_cfg.get("top_n", DEFAULT_TOP_N)),
        shrinkage=shrinkage,
        log_level=str(logging_cfg.get("level", "INFO")),
    )
