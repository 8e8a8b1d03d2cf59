# tests/conftest.py
from __future__ import annotations

from typing import Sequence

import pytest

from gemshift.game.core.engine import PuzzleEngine
from gemshift.game.core.grid import Grid
from gemshift.game.core.types import DEFAULT_TOKEN_TYPES


def diagonal_board(first_column: Sequence[int]) -> Grid:
    """
    6x6 board: column 0 given as palette indices, column x>0 cycles
    (x + 2*row) % 6 so no other column or row can hold a run.
    """
    pal = DEFAULT_TOKEN_TYPES
    columns = [[pal[i] for i in first_column]]
    columns += [[pal[(x + 2 * y) % 6] for y in range(6)] for x in range(1, 6)]
    return Grid.from_columns(columns, palette=pal)


@pytest.fixture
def seam_board() -> Grid:
    """Column 0 = R B G Y R R; shifting it down by 2 yields exactly one R run at rows 0-2."""
    return diagonal_board([0, 2, 1, 3, 0, 0])


@pytest.fixture
def seam_board_blue_pair() -> Grid:
    """Like seam_board but the survivors below the run start with B B."""
    return diagonal_board([0, 2, 2, 3, 0, 0])


@pytest.fixture
def engine_6x6(seam_board: Grid) -> PuzzleEngine:
    engine = PuzzleEngine(6, 6, seed=7)
    engine.set_grid(seam_board)
    return engine
