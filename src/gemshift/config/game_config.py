# src/gemshift/config/game_config.py
from __future__ import annotations

from typing import Mapping, Optional

from pydantic import Field, field_validator, model_validator

from gemshift.config.base import ConfigBase
from gemshift.game.core.constants import DEFAULT_HEIGHT, DEFAULT_MAX_CASCADES, DEFAULT_WIDTH
from gemshift.game.core.types import DEFAULT_TOKEN_TYPES, TokenType


def _as_int(value: object, *, where: str) -> int:
    if isinstance(value, bool):
        raise TypeError(f"{where} must be an int, got bool")
    if not isinstance(value, (int, float, str, bytes, bytearray)):
        raise TypeError(f"{where} must be an int-like value, got {type(value)!r}")
    try:
        return int(value)
    except Exception as e:
        raise TypeError(f"{where} must be an int-like value, got {type(value)!r}") from e


class GameConfig(ConfigBase):
    """
    Engine-facing game config.

    Keep this as the single home for things that conceptually belong to the engine:
      - board size and palette
      - seed (None -> fresh OS entropy)
      - influence: category codes and their code -> token mapping
      - malformed-move policy and cascade bound
    """

    width: int = Field(default=DEFAULT_WIDTH, gt=0)
    height: int = Field(default=DEFAULT_HEIGHT, gt=0)
    seed: Optional[int] = Field(default=None, ge=0)
    token_types: tuple[TokenType, ...] = DEFAULT_TOKEN_TYPES
    category_map: Optional[dict[int, TokenType]] = None
    influence: Optional[tuple[float, ...]] = None
    strict_moves: bool = False
    max_cascades: int = Field(default=DEFAULT_MAX_CASCADES, gt=0)
    log_level: str = "info"

    @field_validator("width", "height", "max_cascades", mode="before")
    @classmethod
    def _size_int(cls, v: object) -> int:
        return _as_int(v, where="game size")

    @field_validator("token_types", mode="before")
    @classmethod
    def _token_types_lower(cls, v: object) -> object:
        if isinstance(v, (list, tuple)):
            return tuple(str(t.value if isinstance(t, TokenType) else t).strip().lower() for t in v)
        return v

    @field_validator("token_types", mode="after")
    @classmethod
    def _token_types_unique(cls, v: tuple[TokenType, ...]) -> tuple[TokenType, ...]:
        if len(v) < 2:
            raise ValueError(f"token_types needs at least 2 types, got {len(v)}")
        if len(set(v)) != len(v):
            raise ValueError("token_types must not contain duplicates")
        return v

    @field_validator("category_map", mode="before")
    @classmethod
    def _category_keys(cls, v: object) -> object:
        if not isinstance(v, Mapping):
            return v
        out: dict[int, object] = {}
        for k, t in v.items():
            out[_as_int(k, where="category_map key")] = (
                str(t.value if isinstance(t, TokenType) else t).strip().lower()
            )
        return out

    @field_validator("log_level", mode="before")
    @classmethod
    def _log_level_lower(cls, v: object) -> str:
        return str(v).strip().lower()

    @model_validator(mode="after")
    def _mapping_targets_palette(self) -> "GameConfig":
        if self.category_map is not None:
            outside = sorted({t.value for t in self.category_map.values() if t not in self.token_types})
            if outside:
                raise ValueError(f"category_map targets token types outside token_types: {outside}")
        return self


__all__ = ["GameConfig"]
