from __future__ import annotations

import cv2
import numpy as np


def to_gray_u8(img: np.ndarray) -> np.ndarray:
    """
    Convert a captured frame to the single-channel uint8 image that
    goodFeaturesToTrack / calcOpticalFlowPyrLK expect.

    Accepts (H,W), (H,W,1), (H,W,3) BGR and (H,W,4) BGRA. Float images are
    assumed to be in [0,1] when their max is <= 1, else in [0,255];
    NaN becomes 0 and +inf saturates to 255.
    """
    if img is None:
        raise ValueError("Input image is None")

    if img.ndim == 3:
        if img.shape[2] == 1:
            img = img[:, :, 0]
        elif img.shape[2] == 3:
            img = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
        elif img.shape[2] == 4:
            img = cv2.cvtColor(img, cv2.COLOR_BGRA2GRAY)
        else:
            raise ValueError(f"Unsupported channel count: {img.shape[2]}")
    elif img.ndim != 2:
        raise ValueError(f"Expected an (H,W) or (H,W,C) image, got shape {img.shape}")

    if img.dtype == np.uint8:
        return img
    if np.issubdtype(img.dtype, np.floating):
        img = np.nan_to_num(img, nan=0.0, posinf=255.0, neginf=0.0)
        if float(img.max(initial=0.0)) <= 1.0:
            img = img * 255.0
    return np.clip(img, 0, 255).astype(np.uint8)
