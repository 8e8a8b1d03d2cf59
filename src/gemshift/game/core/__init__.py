# src/gemshift/game/core/__init__.py
from __future__ import annotations

from gemshift.game.core.engine import PuzzleEngine
from gemshift.game.core.grid import Grid, apply_shift, find_matches, generate, remove_and_compact
from gemshift.game.core.influence import DEFAULT_CATEGORY_MAP, InfluenceSource
from gemshift.game.core.phase import FallMove, PhaseResult
from gemshift.game.core.types import DEFAULT_TOKEN_TYPES, Axis, Coord, Match, MoveAction, TokenType, clamp_amount

__all__ = [
    "Axis",
    "Coord",
    "DEFAULT_CATEGORY_MAP",
    "DEFAULT_TOKEN_TYPES",
    "FallMove",
    "Grid",
    "InfluenceSource",
    "Match",
    "MoveAction",
    "PhaseResult",
    "PuzzleEngine",
    "TokenType",
    "apply_shift",
    "clamp_amount",
    "find_matches",
    "generate",
    "remove_and_compact",
]
