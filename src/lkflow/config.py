from __future__ import annotations

import copy
import os

import yaml


DEFAULT_CONFIG: dict = {
    "capture": {
        "source": 0,
        "width": 640,
        "height": 480,
    },
    "detect": {
        "max_features": 300,
        "quality_level": 0.005,
        "min_distance": 3.0,
    },
    "flow": {
        "win_size": 21,
        "max_level": 3,
    },
    "tracker": {
        "reseed_every": 300,
    },
    "overlay": {
        "frame_alpha": 0.55,
        "radius": 3,
        "prev_color": [0, 0, 255],
        "prev_alpha": 0.55,
        "cur_color": [255, 0, 0],
        "cur_alpha": 0.5,
        "line_color": [0, 255, 0],
        "line_alpha": 0.5,
    },
}


def _merge(base: dict, override: dict) -> dict:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def validate_config(cfg: dict) -> None:
    """Reject settings the tracker cannot run with."""
    reseed_every = cfg.get("tracker", {}).get("reseed_every", 300)
    if isinstance(reseed_every, bool) or not isinstance(reseed_every, int) or reseed_every <= 0:
        raise ValueError(f"tracker.reseed_every must be a positive integer, got {reseed_every!r}")
    max_features = cfg.get("detect", {}).get("max_features", 300)
    if isinstance(max_features, bool) or not isinstance(max_features, int) or max_features <= 0:
        raise ValueError(f"detect.max_features must be a positive integer, got {max_features!r}")


def load_config(path: str | None = None) -> dict:
    """
    Load a YAML config and merge it over DEFAULT_CONFIG.

    Sections missing from the file keep their defaults, so an empty file
    (or path=None) yields the stock demo settings.
    """
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    if path is None:
        return cfg
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Missing config: {path}")

    with open(path, "r", encoding="utf-8") as f:
        user_cfg = yaml.safe_load(f) or {}
    if not isinstance(user_cfg, dict):
        raise ValueError(f"Config root must be a mapping, got {type(user_cfg).__name__}: {path}")
    cfg = _merge(cfg, user_cfg)
    validate_config(cfg)
    return cfg
