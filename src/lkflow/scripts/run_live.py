from __future__ import annotations

import argparse
import logging
import os
import time
from itertools import islice
from pathlib import Path

import cv2
import numpy as np
import matplotlib.pyplot as plt
import yaml

from lkflow.config import load_config
from lkflow.capture.camera import CameraSource, CaptureError
from lkflow.capture.sequence import ImageSequence
from lkflow.modules.image import to_gray_u8
from lkflow.system.state import FrameData, TrackerState
from lkflow.system.telemetry import Telemetry
from lkflow.system.runner import update
from lkflow.viz.overlay import OverlayStyle, draw_overlay

logger = logging.getLogger("lkflow.live")

WINDOW_NAME = "lkflow"


class FlowStatsVisualizer:
    def __init__(self, window: int = 600):
        self.window = window
        plt.ion()
        self.fig = plt.figure(figsize=(10, 4))
        self.ax1 = self.fig.add_subplot(121)
        self.ax2 = self.fig.add_subplot(122)

    def update(self, frames):
        # trailing window only, newest last
        recent = list(islice(reversed(frames), self.window))[::-1]
        recs = [r for r in recent if r.get("action") != "init"]
        if len(recs) < 2:
            return

        idx = np.array([r["frame_idx"] for r in recs])
        tracked = np.array([r["num_tracked"] for r in recs])
        flow = np.array([r["mean_flow_px"] for r in recs])
        reseeds = idx[[r["action"] == "detect" for r in recs]]

        self.ax1.clear()
        self.ax1.set_xlabel('frame')
        self.ax1.set_ylabel('matched features')
        self.ax1.set_title(f'Tracked features ({tracked[-1]} now)')
        self.ax1.plot(idx, tracked, 'b-', linewidth=1.5, alpha=0.7)
        for x in reseeds:
            self.ax1.axvline(x, color='r', alpha=0.3)
        self.ax1.grid(True)

        self.ax2.clear()
        self.ax2.set_xlabel('frame')
        self.ax2.set_ylabel('px')
        self.ax2.set_title('Mean flow magnitude')
        self.ax2.plot(idx, flow, 'g-', linewidth=1.5, alpha=0.7)
        self.ax2.grid(True)

        plt.pause(0.001)

    def close(self):
        plt.ioff()
        plt.show()


def open_source(cfg: dict):
    """ImageSequence for a folder, else a CameraSource (device index or video file)."""
    cap_cfg = cfg["capture"]
    source = cap_cfg.get("source", 0)
    if isinstance(source, str) and os.path.isdir(source):
        return ImageSequence(source)
    return CameraSource(
        source,
        width=int(cap_cfg.get("width", 640)),
        height=int(cap_cfg.get("height", 480)),
    ).open()


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Live sparse optical flow (Shi-Tomasi + pyramidal Lucas-Kanade).")
    ap.add_argument("--config", type=str, default=None, help="YAML config, e.g. configs/default.yaml")
    ap.add_argument("--source", type=str, default=None, help="Camera index, video file or image folder (overrides config)")
    ap.add_argument("--out_dir", type=str, default=None, help="Write metrics.json and config_used.yaml here on exit")
    ap.add_argument("--plot", action="store_true", help="Live plot of tracked features and flow magnitude")
    ap.add_argument("--plot_every", type=int, default=30, help="Update plot every N frames")
    ap.add_argument("--plot_window", type=int, default=600, help="Frames shown in the plot and kept in memory without --out_dir")
    ap.add_argument("--log_every", type=int, default=100, help="Log progress every N frames")
    ap.add_argument("--max_frames", type=int, default=None, help="Stop after N frames")
    ap.add_argument("--headless", action="store_true", help="No window; stop when the source runs out")
    ap.add_argument("--log_level", type=str, default="INFO")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    logger.info("Loading config: %s", args.config or "<defaults>")
    cfg = load_config(args.config)
    if args.source is not None:
        cfg["capture"]["source"] = args.source

    state = TrackerState()
    # a camera session has no end: keep everything only when it will be dumped
    telemetry = Telemetry(maxlen=None if args.out_dir is not None else max(args.plot_window, 1))
    style = OverlayStyle.from_cfg(cfg)
    visualizer = FlowStatsVisualizer(window=max(args.plot_window, 1)) if args.plot else None

    # no video is not fatal: the window stays up, the tracker is never fed
    source = None
    try:
        source = open_source(cfg)
    except (CaptureError, FileNotFoundError):
        logger.exception("Failed to init capture")

    if source is None and args.headless:
        return

    live = isinstance(source, CameraSource) and isinstance(source.source, int)
    if not args.headless:
        cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)

    frame_count = 0
    ticks = 0
    t0 = time.perf_counter()
    last_frame = None
    try:
        while True:
            # without a source no frame ever arrives, so the limit counts ticks
            done = ticks if source is None else frame_count
            if args.max_frames is not None and done >= args.max_frames:
                break
            ticks += 1

            frame = source.read() if source is not None else None

            if frame is not None:
                last_frame = frame
                fd = FrameData(idx=frame_count, ts=time.perf_counter() - t0, img_gray=to_gray_u8(frame))
                update(state, fd, cfg, telemetry)
                frame_count += 1

                if args.log_every > 0 and frame_count % args.log_every == 0:
                    rec = telemetry.frames[-1]
                    logger.info("Frame %d: %s, %d/%d matched, mean flow %.2f px",
                                frame_count, rec["action"], rec["num_tracked"],
                                rec["num_features"], rec["mean_flow_px"])

                if visualizer is not None and frame_count % args.plot_every == 0:
                    visualizer.update(telemetry.frames)
            elif source is not None and not live:
                logger.info("Source exhausted after %d frames", frame_count)
                break

            if args.headless:
                continue

            img = draw_overlay(last_frame, state.prev_features, state.features, state.status, style)
            cv2.imshow(WINDOW_NAME, img)
            key = cv2.waitKey(1) & 0xFF
            if key in (27, ord('q')):
                break
    finally:
        if source is not None:
            source.release()
        if not args.headless:
            cv2.destroyAllWindows()

    logger.info("Processed %d frames, %d re-seeds", frame_count, telemetry.count("detect"))

    if args.out_dir is not None:
        out_dir = Path(args.out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        metrics_path = str(out_dir / "metrics.json")
        cfg_path = str(out_dir / "config_used.yaml")
        telemetry.dump(metrics_path)
        with open(cfg_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(cfg, f, sort_keys=False)
        logger.info("wrote: %s", metrics_path)
        logger.info("wrote: %s", cfg_path)

    if visualizer is not None:
        logger.info("Showing final statistics. Close the window to exit.")
        visualizer.update(telemetry.frames)
        visualizer.close()


if __name__ == "__main__":
    main()
