from dataclasses import dataclass, field
import numpy as np


def _empty_pts() -> np.ndarray:
    return np.zeros((0, 2), np.float32)


@dataclass
class FrameData:
    idx: int
    ts: float
    img_gray: np.ndarray  # (H,W) uint8

@dataclass
class TrackerState:
    prev: FrameData | None = None

    # index-aligned while status comes from the same update() call
    features: np.ndarray = field(default_factory=_empty_pts)        # (N,2) current
    prev_features: np.ndarray = field(default_factory=_empty_pts)   # (N,2) previous
    status: np.ndarray = field(default_factory=lambda: np.zeros((0,), bool))
    errors: np.ndarray = field(default_factory=lambda: np.zeros((0,), np.float32))  # kept, never used for filtering

    last_action: str = "none"
