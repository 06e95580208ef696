from __future__ import annotations

import os
from dataclasses import dataclass

import cv2
import numpy as np

IMAGE_EXTS = (".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff")


@dataclass
class FrameEntry:
    ts: float
    path: str


def parse_frame_list(list_path: str, *, fps: float = 30.0) -> list[FrameEntry]:
    """
    Playlist of frames, one per line: `<image path> [timestamp]`.

    Paths are relative to the list file. Lines without a timestamp are placed
    1/fps after the previous frame. Blank lines and `#` comments are skipped.
    """
    base = os.path.dirname(list_path)
    entries: list[FrameEntry] = []
    with open(list_path, "r", encoding="utf-8") as f:
        for lineno, raw in enumerate(f, 1):
            line = raw.split("#", 1)[0].strip()
            if not line:
                continue
            parts = line.split()
            if len(parts) > 2:
                raise ValueError(f"{list_path}:{lineno}: expected '<path> [timestamp]', got {raw.strip()!r}")
            if len(parts) == 2:
                ts = float(parts[1])
            else:
                ts = entries[-1].ts + 1.0 / fps if entries else 0.0
            entries.append(FrameEntry(ts=ts, path=os.path.join(base, parts[0])))
    return entries


class ImageSequence:
    """
    Folder of still frames played back like a camera.

    Frame order comes from `frames.txt` (see parse_frame_list) when present,
    otherwise from the sorted image file names spaced at 1/fps.
    """

    def __init__(self, seq_dir: str, *, fps: float = 30.0):
        if not os.path.isdir(seq_dir):
            raise FileNotFoundError(f"Missing image folder: {seq_dir}")
        self.seq_dir = seq_dir
        frames_txt = os.path.join(seq_dir, "frames.txt")
        if os.path.isfile(frames_txt):
            self.entries = parse_frame_list(frames_txt, fps=fps)
        else:
            names = sorted(n for n in os.listdir(seq_dir) if n.lower().endswith(IMAGE_EXTS))
            self.entries = [FrameEntry(ts=i / fps, path=os.path.join(seq_dir, n)) for i, n in enumerate(names)]
        self._pos = 0

    def __len__(self) -> int:
        return len(self.entries)

    # same read()/release()/context-manager surface as CameraSource
    def read(self) -> np.ndarray | None:
        if self._pos >= len(self.entries):
            return None
        e = self.entries[self._pos]
        self._pos += 1
        img = cv2.imread(e.path, cv2.IMREAD_COLOR)
        if img is None:
            raise FileNotFoundError(f"Failed to read image: {e.path}")
        return img

    def release(self) -> None:
        self._pos = len(self.entries)

    def __enter__(self) -> "ImageSequence":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
