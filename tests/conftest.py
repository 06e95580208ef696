import cv2
import numpy as np
import pytest

from lkflow.system.state import FrameData, TrackerState
from lkflow.system.telemetry import Telemetry

H, W = 480, 640


def corner_frame(x=320, y=240, shape=(H, W)):
    """Black frame with a bright lower-right quadrant whose corner sits at (x,y)."""
    img = np.zeros(shape, np.uint8)
    img[y:, x:] = 255
    return cv2.GaussianBlur(img, (5, 5), 0)


def textured_frame(dx=0, dy=0, shape=(H, W), seed=0):
    """Black frame with a 120x120 random-texture patch shifted by (dx,dy) px."""
    rng = np.random.default_rng(seed)
    patch = rng.integers(0, 256, size=(120, 120), dtype=np.uint8)
    img = np.zeros(shape, np.uint8)
    x0, y0 = 260 + dx, 180 + dy
    img[y0:y0 + 120, x0:x0 + 120] = patch
    return cv2.GaussianBlur(img, (7, 7), 0)


@pytest.fixture
def state():
    return TrackerState()


@pytest.fixture
def telemetry():
    return Telemetry()


@pytest.fixture
def cfg():
    from lkflow.config import load_config
    return load_config()


def make_frame(idx, img):
    return FrameData(idx=idx, ts=idx / 30.0, img_gray=img)
