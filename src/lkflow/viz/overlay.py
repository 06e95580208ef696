from __future__ import annotations

from dataclasses import dataclass

import cv2
import numpy as np


@dataclass
class OverlayStyle:
    frame_alpha: float = 0.55
    radius: int = 3
    prev_color: tuple = (0, 0, 255)   # BGR red, stroked
    prev_alpha: float = 0.55
    cur_color: tuple = (255, 0, 0)    # BGR blue, filled
    cur_alpha: float = 0.5
    line_color: tuple = (0, 255, 0)   # BGR green
    line_alpha: float = 0.5

    @classmethod
    def from_cfg(cls, cfg: dict) -> "OverlayStyle":
        o = cfg.get("overlay", {})
        d = cls()
        return cls(
            frame_alpha=float(o.get("frame_alpha", d.frame_alpha)),
            radius=int(o.get("radius", d.radius)),
            prev_color=tuple(int(c) for c in o.get("prev_color", d.prev_color)),
            prev_alpha=float(o.get("prev_alpha", d.prev_alpha)),
            cur_color=tuple(int(c) for c in o.get("cur_color", d.cur_color)),
            cur_alpha=float(o.get("cur_alpha", d.cur_alpha)),
            line_color=tuple(int(c) for c in o.get("line_color", d.line_color)),
            line_alpha=float(o.get("line_alpha", d.line_alpha)),
        )


def flow_segments(prev_pts: np.ndarray, cur_pts: np.ndarray, status: np.ndarray) -> np.ndarray:
    """
    (M,2,2) array of [cur, prev] endpoints for every status-true pair.

    status can be left over from an earlier tick (features re-seeded with
    nothing to track), so only the common prefix of the three arrays is used.
    """
    n = min(len(prev_pts), len(cur_pts), len(status))
    if n == 0:
        return np.zeros((0, 2, 2), np.float32)
    mask = np.asarray(status[:n], dtype=bool)
    seg = np.stack([np.asarray(cur_pts[:n])[mask], np.asarray(prev_pts[:n])[mask]], axis=1)
    return seg.astype(np.float32)


def _finite_int_pts(pts: np.ndarray) -> np.ndarray:
    pts = np.asarray(pts, dtype=np.float32).reshape(-1, 2)
    pts = pts[np.isfinite(pts).all(axis=1)]
    return np.round(pts).astype(np.int32)


def _blend_onto(canvas: np.ndarray, layer: np.ndarray, alpha: float) -> None:
    cv2.addWeighted(layer, alpha, canvas, 1.0 - alpha, 0, dst=canvas)


def draw_overlay(
    frame: np.ndarray | None,
    prev_pts: np.ndarray,
    cur_pts: np.ndarray,
    status: np.ndarray,
    style: OverlayStyle | None = None,
    *,
    size: tuple[int, int] = (480, 640),
) -> np.ndarray:
    """
    Render previous features, current features and flow lines over the
    camera frame.

    Draw order: black background, frame at frame_alpha, previous features
    (stroked circles), current features (filled circles), flow lines.
    Each primitive group is drawn opaque on a copy and blended at its alpha.

    Args:
        frame: BGR or grayscale frame, or None (features on black, size=(H,W))

    Returns:
        (H,W,3) uint8 BGR image
    """
    style = style or OverlayStyle()

    if frame is not None:
        if frame.ndim == 2:
            frame = cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
        canvas = np.zeros_like(frame, dtype=np.uint8)
        _blend_onto(canvas, frame.astype(np.uint8), style.frame_alpha)
    else:
        canvas = np.zeros((size[0], size[1], 3), np.uint8)

    # previous features
    pts = _finite_int_pts(prev_pts)
    if len(pts):
        layer = canvas.copy()
        for x, y in pts:
            cv2.circle(layer, (int(x), int(y)), style.radius, style.prev_color, 1, cv2.LINE_AA)
        _blend_onto(canvas, layer, style.prev_alpha)

    # current features
    pts = _finite_int_pts(cur_pts)
    if len(pts):
        layer = canvas.copy()
        for x, y in pts:
            cv2.circle(layer, (int(x), int(y)), style.radius, style.cur_color, -1, cv2.LINE_AA)
        _blend_onto(canvas, layer, style.cur_alpha)

    # flow vectors, matched pairs only
    seg = flow_segments(prev_pts, cur_pts, status)
    seg = seg[np.isfinite(seg).all(axis=(1, 2))]
    if len(seg):
        layer = canvas.copy()
        for (x0, y0), (x1, y1) in np.round(seg).astype(np.int32):
            cv2.line(layer, (int(x0), int(y0)), (int(x1), int(y1)), style.line_color, 1, cv2.LINE_AA)
        _blend_onto(canvas, layer, style.line_alpha)

    return canvas
