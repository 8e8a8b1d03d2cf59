# src/gemshift/config/io.py
from __future__ import annotations

from pathlib import Path
from typing import Any

from omegaconf import DictConfig, OmegaConf
from pydantic import BaseModel

from gemshift.config.game_config import GameConfig


def to_plain_dict(cfg: Any) -> dict[str, Any]:
    if isinstance(cfg, BaseModel):
        return cfg.model_dump(mode="json")
    if isinstance(cfg, DictConfig):
        data = OmegaConf.to_container(cfg, resolve=True)
        if not isinstance(data, dict):
            raise TypeError("config must resolve to a mapping")
        return data
    raise TypeError(f"unsupported config type: {type(cfg).__name__}")


def load_yaml(path: Path) -> dict[str, Any]:
    cfg = OmegaConf.load(Path(path))
    data = OmegaConf.to_container(cfg, resolve=True)
    if not isinstance(data, dict):
        raise TypeError(f"config({path}) must be a mapping")
    return data


def load_game_config(path: Path, *, overrides: list[str] | None = None) -> GameConfig:
    """
    Load a GameConfig from YAML. The file may hold the fields at top level or
    under a `game:` key. `overrides` are OmegaConf dotlist entries
    (e.g. ["width=6", "seed=3"]) applied on top of the game section.
    """
    data = load_yaml(path)
    game = data.get("game", data)
    if not isinstance(game, dict):
        raise TypeError(f"config({path}).game must be a mapping")
    if overrides:
        merged = OmegaConf.merge(OmegaConf.create(game), OmegaConf.from_dotlist(list(overrides)))
        game = OmegaConf.to_container(merged, resolve=True)
    return GameConfig.model_validate(game)


__all__ = ["to_plain_dict", "load_yaml", "load_game_config"]
