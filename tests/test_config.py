import pytest
import yaml

from lkflow.config import DEFAULT_CONFIG, load_config, validate_config


def test_defaults():
    cfg = load_config()
    assert cfg == DEFAULT_CONFIG
    assert cfg is not DEFAULT_CONFIG
    assert cfg["tracker"]["reseed_every"] == 300
    assert cfg["detect"]["max_features"] == 300
    assert cfg["detect"]["quality_level"] == 0.005
    assert cfg["detect"]["min_distance"] == 3.0
    assert (cfg["capture"]["width"], cfg["capture"]["height"]) == (640, 480)


def test_defaults_are_not_shared():
    cfg = load_config()
    cfg["detect"]["max_features"] = 1
    assert DEFAULT_CONFIG["detect"]["max_features"] == 300


def test_partial_override(tmp_path):
    p = tmp_path / "c.yaml"
    p.write_text("tracker:\n  reseed_every: 50\ncapture:\n  source: clip.mp4\n")
    cfg = load_config(str(p))
    assert cfg["tracker"]["reseed_every"] == 50
    assert cfg["capture"]["source"] == "clip.mp4"
    assert cfg["capture"]["width"] == 640
    assert cfg["flow"]["win_size"] == 21


def test_empty_file(tmp_path):
    p = tmp_path / "c.yaml"
    p.write_text("")
    assert load_config(str(p)) == DEFAULT_CONFIG


def test_shipped_default_matches_builtin():
    import os
    path = os.path.join(os.path.dirname(__file__), "..", "configs", "default.yaml")
    assert load_config(path) == DEFAULT_CONFIG


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_non_mapping_root(tmp_path):
    p = tmp_path / "c.yaml"
    p.write_text("- a\n- b\n")
    with pytest.raises(ValueError):
        load_config(str(p))


@pytest.mark.parametrize("value", [0, -5, 2.5, "often", True])
def test_bad_reseed_interval(tmp_path, value):
    p = tmp_path / "c.yaml"
    p.write_text(yaml.safe_dump({"tracker": {"reseed_every": value}}))
    with pytest.raises(ValueError):
        load_config(str(p))


def test_bad_max_features(tmp_path):
    p = tmp_path / "c.yaml"
    p.write_text("detect:\n  max_features: 0\n")
    with pytest.raises(ValueError):
        load_config(str(p))


def test_validate_accepts_defaults():
    validate_config(load_config())
