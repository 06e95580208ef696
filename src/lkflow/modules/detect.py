# src/lkflow/modules/detect.py
from __future__ import annotations

import cv2
import numpy as np


def detect_features(
    img_gray_u8: np.ndarray,
    *,
    max_count: int = 300,
    quality_level: float = 0.005,
    min_distance: float = 3.0,
) -> np.ndarray:
    """
    Shi-Tomasi corners ("good features to track") on a grayscale image.

    Args:
        img_gray_u8: uint8 grayscale image, shape (H,W)
        max_count: maximum number of corners returned, strongest first
        quality_level: fraction of the best corner score a corner must reach
        min_distance: minimum euclidean distance between returned corners (px)

    Returns:
        pts: (N,2) float32 pixel coords, N <= max_count. N == 0 when the
             image has no corner above the quality threshold.
    """
    if img_gray_u8 is None:
        raise ValueError("Input image is None")
    if img_gray_u8.ndim != 2:
        raise ValueError("detect_features expects a grayscale image (H,W).")
    if max_count <= 0:
        raise ValueError(f"max_count must be positive, got {max_count}")

    corners = cv2.goodFeaturesToTrack(
        img_gray_u8,
        maxCorners=int(max_count),
        qualityLevel=float(quality_level),
        minDistance=float(min_distance),
    )
    if corners is None:
        return np.zeros((0, 2), np.float32)
    return corners.reshape(-1, 2).astype(np.float32)
