# src/lkflow/system/runner.py
from __future__ import annotations

import logging

import numpy as np

from .state import FrameData, TrackerState
from .telemetry import Telemetry
from ..modules.detect import detect_features
from ..modules.lk_flow import lk_flow, flow_stats

logger = logging.getLogger(__name__)


def update(
    state: TrackerState,
    frame: FrameData,
    cfg: dict,
    telemetry: Telemetry,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    One tracking tick: state.prev -> frame.

    Responsibilities:
      1) on the very first frame only remember it
      2) re-seed features when there are none, or every `reseed_every` frames
      3) shift current features into previous
      4) propagate features with LK flow
      5) keep frame as state.prev and log telemetry

    Re-seeding throws away every tracked feature. Long-lived tracks are
    traded for a fresh set that has not drifted or been occluded.

    Returns:
        (features, prev_features, status) as held by state after the tick.
        features[i] pairs with prev_features[i] only where status[i] is True
        and the flow ran in this call (see state.last_action).
    """
    if frame.img_gray is None:
        raise ValueError("runner.update requires frame.img_gray to be set.")
    if frame.img_gray.ndim != 2:
        raise ValueError("runner.update expects a grayscale frame (H,W); use to_gray_u8 first.")

    # --- 1) First frame: nothing to flow from yet
    if state.prev is None:
        state.prev = frame
        state.last_action = "init"
        telemetry.log_frame(frame.idx, {
            "ts": float(frame.ts),
            "action": "init",
            "num_features": 0,
            "num_tracked": 0,
            "mean_flow_px": 0.0,
        })
        return state.features, state.prev_features, state.status

    tracker_cfg = cfg.get("tracker", {})
    detect_cfg = cfg.get("detect", {})
    flow_cfg = cfg.get("flow", {})
    reseed_every = int(tracker_cfg.get("reseed_every", 300))
    if reseed_every <= 0:
        raise ValueError(f"tracker.reseed_every must be positive, got {reseed_every}")

    # --- 2) Re-seed
    detected = False
    if len(state.features) == 0 or frame.idx % reseed_every == 0:
        state.features = detect_features(
            frame.img_gray,
            max_count=int(detect_cfg.get("max_features", 300)),
            quality_level=float(detect_cfg.get("quality_level", 0.005)),
            min_distance=float(detect_cfg.get("min_distance", 3.0)),
        )
        detected = True
        logger.debug("frame %d: detected %d features", frame.idx, len(state.features))

    # --- 3) Current becomes previous
    state.prev_features = state.features.copy()

    # --- 4) Flow (status/errors stay stale when there is nothing to track)
    flowed = False
    if len(state.features) > 0:
        state.features, state.status, state.errors = lk_flow(
            state.prev.img_gray,
            frame.img_gray,
            state.prev_features,
            win_size=int(flow_cfg.get("win_size", 21)),
            max_level=int(flow_cfg.get("max_level", 3)),
        )
        flowed = True

    # --- 5) Shift window
    state.prev = frame

    # an empty feature list always re-seeds, so no-detect implies flowed
    state.last_action = "detect" if detected else "track"

    stats = flow_stats(state.prev_features, state.features, state.status) if flowed else \
        {"num_tracked": 0, "mean_flow_px": 0.0}
    telemetry.log_frame(frame.idx, {
        "ts": float(frame.ts),
        "action": state.last_action,
        "num_features": int(len(state.features)),
        "num_tracked": stats["num_tracked"],
        "mean_flow_px": stats["mean_flow_px"],
    })
    return state.features, state.prev_features, state.status
