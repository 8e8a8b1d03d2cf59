# src/gemshift/game/core/constants.py
from __future__ import annotations

# Grid / cell encoding
EMPTY_CELL: int = 0

# Shortest run that counts as a match.
MIN_RUN: int = 3

# Default board size
DEFAULT_WIDTH: int = 8
DEFAULT_HEIGHT: int = 8

# Cascade bound used by drivers (a runaway chain is treated as a bug).
DEFAULT_MAX_CASCADES: int = 50
