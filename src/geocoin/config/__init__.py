from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from importlib.resources import files as resource_files
from typing import Any, Dict, Optional

import yaml

from ..errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameplayConfig:
    """Tunable gameplay parameters.

    Defaults reproduce the original classroom game: the origin is the Oakes
    classroom, cells are 1e-4 degrees wide, the player sees a 16x16 block of
    cells and roughly one cell in ten holds a cache.

    - allow_regrowth: when False (default) a cache that has been generated and
      emptied stays empty forever. When True the spawn roll is repeated for
      depleted cells on every pass and a passing cell regrows fresh coins.
    """

    origin_lat: float = 36.98949379578401
    origin_lng: float = -122.06277128548504
    tile_degrees: float = 1e-4
    neighborhood_size: int = 8
    spawn_probability: float = 0.1
    max_initial_coins: int = 10
    allow_regrowth: bool = False
    seed: str = ""

    def __post_init__(self) -> None:
        if self.tile_degrees <= 0:
            raise ConfigError("tile_degrees must be positive")
        if self.neighborhood_size < 0:
            raise ConfigError("neighborhood_size must be non-negative")
        if not 0.0 <= self.spawn_probability <= 1.0:
            raise ConfigError("spawn_probability must be within [0, 1]")
        if self.max_initial_coins < 0:
            raise ConfigError("max_initial_coins must be non-negative")

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "GameplayConfig":
        known = {f.name: f for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in raw.items():
            if key not in known:
                logger.warning("Ignoring unknown gameplay config key: %s", key)
                continue
            values[key] = value
        try:
            cfg = cls(**{k: _coerce(known[k].type, k, v) for k, v in values.items()})
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid gameplay config: {e}") from e
        return cfg


def _coerce(type_name: Any, key: str, value: Any) -> Any:
    # Field types are strings under postponed annotations.
    if type_name == "bool":
        if not isinstance(value, bool):
            raise ValueError(f"{key} must be a boolean")
        return value
    if type_name == "int":
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{key} must be an integer, got {value!r}")
        return value
    if type_name == "float":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{key} must be a number, got {value!r}")
        return float(value)
    if value is None:
        return ""
    return str(value)


def load_gameplay_config(path: Optional[str] = None) -> GameplayConfig:
    """Load gameplay configuration from YAML.

    If path is None, loads the embedded default resource at
    geocoin/config/gameplay.yaml.
    """
    if path is None:
        data = resource_files("geocoin.config").joinpath("gameplay.yaml").read_text(encoding="utf-8")
        logger.debug("Loaded embedded gameplay config resource")
    else:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = f.read()
        except OSError as e:
            raise ConfigError(f"Cannot read gameplay config {path}: {e}") from e
        logger.debug("Loaded gameplay config from path: %s", path)

    try:
        raw = yaml.safe_load(data) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed gameplay config: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError("Gameplay config must be a mapping")
    cfg = GameplayConfig.from_dict(raw)
    logger.info(
        "Gameplay config: tile=%s neighborhood=%s spawn_p=%s regrowth=%s",
        cfg.tile_degrees,
        cfg.neighborhood_size,
        cfg.spawn_probability,
        cfg.allow_regrowth,
    )
    return cfg


__all__ = ["GameplayConfig", "load_gameplay_config"]
