# src/lkflow/modules/lk_flow.py
from __future__ import annotations

import cv2
import numpy as np


def lk_flow(
    prev_gray_u8: np.ndarray,
    cur_gray_u8: np.ndarray,
    pts_prev: np.ndarray,
    *,
    win_size: int = 21,
    max_level: int = 3,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Pyramidal Lucas-Kanade flow of sparse points from prev to cur.

    Args:
        prev_gray_u8, cur_gray_u8: uint8 grayscale images, same shape (H,W)
        pts_prev: (N,2) pixel coords in prev
        win_size: side of the square search window at each pyramid level
        max_level: 0-based number of pyramid levels

    Returns:
        pts_cur: (N,2) float32, index-aligned with pts_prev
        status:  (N,) bool, True where the point was found in cur
        err:     (N,) float32, OpenCV's per-point tracking error
    """
    if prev_gray_u8 is None or cur_gray_u8 is None:
        raise ValueError("Input images are None")
    if prev_gray_u8.ndim != 2 or cur_gray_u8.ndim != 2:
        raise ValueError("lk_flow expects grayscale images (H,W).")

    pts_prev = np.asarray(pts_prev, dtype=np.float32).reshape(-1, 2)
    n = pts_prev.shape[0]
    if n == 0:
        return np.zeros((0, 2), np.float32), np.zeros((0,), bool), np.zeros((0,), np.float32)

    pts_cur, status, err = cv2.calcOpticalFlowPyrLK(
        prev_gray_u8,
        cur_gray_u8,
        pts_prev.reshape(-1, 1, 2),
        None,
        winSize=(int(win_size), int(win_size)),
        maxLevel=int(max_level),
    )
    return (
        pts_cur.reshape(-1, 2).astype(np.float32),
        status.reshape(-1).astype(bool),
        err.reshape(-1).astype(np.float32),
    )


def flow_stats(pts_prev: np.ndarray, pts_cur: np.ndarray, status: np.ndarray) -> dict:
    """Matched count and mean displacement (px) over status-true pairs."""
    n = min(len(pts_prev), len(pts_cur), len(status))
    mask = np.asarray(status[:n], dtype=bool)
    num_tracked = int(mask.sum())
    if num_tracked == 0:
        return {"num_tracked": 0, "mean_flow_px": 0.0}
    d = np.asarray(pts_cur[:n])[mask] - np.asarray(pts_prev[:n])[mask]
    return {
        "num_tracked": num_tracked,
        "mean_flow_px": float(np.linalg.norm(d, axis=1).mean()),
    }
