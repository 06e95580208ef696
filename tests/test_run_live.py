import json
import logging

import cv2
import yaml

from lkflow.scripts import run_live

from conftest import textured_frame


def test_headless_image_folder(tmp_path):
    frames = tmp_path / "frames"
    frames.mkdir()
    for i in range(8):
        assert cv2.imwrite(str(frames / f"{i:03d}.png"), textured_frame(dx=i))
    out = tmp_path / "out"

    run_live.main(["--source", str(frames), "--headless", "--out_dir", str(out), "--log_every", "0"])

    recs = json.loads((out / "metrics.json").read_text())
    assert [r["frame_idx"] for r in recs] == list(range(8))
    assert [r["action"] for r in recs[:3]] == ["init", "detect", "track"]
    assert all(r["num_features"] > 0 for r in recs[1:])

    used = yaml.safe_load((out / "config_used.yaml").read_text())
    assert used["capture"]["source"] == str(frames)
    assert used["tracker"]["reseed_every"] == 300


def test_headless_max_frames(tmp_path):
    frames = tmp_path / "frames"
    frames.mkdir()
    for i in range(5):
        cv2.imwrite(str(frames / f"{i:03d}.png"), textured_frame(dx=i))
    out = tmp_path / "out"

    run_live.main(["--source", str(frames), "--headless", "--max_frames", "3", "--out_dir", str(out)])

    recs = json.loads((out / "metrics.json").read_text())
    assert len(recs) == 3


def test_capture_failure_is_logged_not_raised(tmp_path, caplog):
    caplog.set_level(logging.INFO)
    run_live.main(["--source", str(tmp_path / "missing.avi"), "--headless"])
    assert any("Failed to init capture" in r.getMessage() for r in caplog.records)
    assert any(r.levelno == logging.ERROR for r in caplog.records)


def test_open_source_picks_folder(tmp_path):
    cfg = {"capture": {"source": str(tmp_path)}}
    src = run_live.open_source(cfg)
    assert isinstance(src, run_live.ImageSequence)


def test_windowed_max_frames_without_capture(tmp_path, monkeypatch):
    shown = []
    monkeypatch.setattr(run_live.cv2, "namedWindow", lambda *a, **k: None)
    monkeypatch.setattr(run_live.cv2, "imshow", lambda name, img: shown.append(img.shape))
    monkeypatch.setattr(run_live.cv2, "waitKey", lambda delay: -1)
    monkeypatch.setattr(run_live.cv2, "destroyAllWindows", lambda: None)

    run_live.main(["--source", str(tmp_path / "missing.avi"), "--max_frames", "4"])

    assert shown == [(480, 640, 3)] * 4


def test_metrics_kept_in_full_when_dumping(tmp_path):
    frames = tmp_path / "frames"
    frames.mkdir()
    for i in range(6):
        cv2.imwrite(str(frames / f"{i:03d}.png"), textured_frame(dx=i))
    out = tmp_path / "out"

    run_live.main(["--source", str(frames), "--headless", "--plot_window", "2", "--out_dir", str(out)])

    recs = json.loads((out / "metrics.json").read_text())
    assert len(recs) == 6
