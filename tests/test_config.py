import logging

import pytest

from geocoin.config import GameplayConfig, load_gameplay_config
from geocoin.errors import ConfigError


def test_embedded_defaults_match_dataclass():
    assert load_gameplay_config() == GameplayConfig()


def test_user_file_overrides(tmp_path):
    path = tmp_path / "gameplay.yaml"
    path.write_text("spawn_probability: 0.5\nneighborhood_size: 3\nallow_regrowth: true\nseed: abc\n")
    cfg = load_gameplay_config(str(path))
    assert cfg.spawn_probability == 0.5
    assert cfg.neighborhood_size == 3
    assert cfg.allow_regrowth is True
    assert cfg.seed == "abc"
    assert cfg.tile_degrees == 1e-4


def test_unknown_keys_are_ignored_with_warning(tmp_path, caplog):
    path = tmp_path / "gameplay.yaml"
    path.write_text("zoom: 19\n")
    with caplog.at_level(logging.WARNING):
        cfg = load_gameplay_config(str(path))
    assert cfg == GameplayConfig()
    assert "zoom" in caplog.text


@pytest.mark.parametrize(
    "text",
    [
        "spawn_probability: 1.5\n",
        "tile_degrees: 0\n",
        "neighborhood_size: many\n",
        "allow_regrowth: maybe\n",
        "neighborhood_size: 2.7\n",
        "neighborhood_size: true\n",
        "spawn_probability: \"0.5\"\n",
        "- just\n- a list\n",
        "spawn_probability: [\n",
    ],
)
def test_invalid_files_raise_config_error(tmp_path, text):
    path = tmp_path / "gameplay.yaml"
    path.write_text(text)
    with pytest.raises(ConfigError):
        load_gameplay_config(str(path))


def test_missing_file_raises_config_error(tmp_path):
    with pytest.raises(ConfigError):
        load_gameplay_config(str(tmp_path / "absent.yaml"))


def test_integral_float_and_null_seed_are_accepted(tmp_path):
    path = tmp_path / "gameplay.yaml"
    path.write_text("neighborhood_size: 4.0\nseed:\n")
    cfg = load_gameplay_config(str(path))
    assert cfg.neighborhood_size == 4
    assert isinstance(cfg.neighborhood_size, int)
    assert cfg.seed == ""
