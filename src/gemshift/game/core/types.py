# src/gemshift/game/core/types.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Tuple

Coord = Tuple[int, int]  # (col, row); row 0 is the top of the board


class TokenType(str, Enum):
    RED = "red"
    GREEN = "green"
    BLUE = "blue"
    YELLOW = "yellow"
    PURPLE = "purple"
    ORANGE = "orange"

    @property
    def glyph(self) -> str:
        return self.value[0].upper()


DEFAULT_TOKEN_TYPES: tuple[TokenType, ...] = (
    TokenType.RED,
    TokenType.GREEN,
    TokenType.BLUE,
    TokenType.YELLOW,
    TokenType.PURPLE,
    TokenType.ORANGE,
)


class Axis(str, Enum):
    ROW = "row"
    COL = "col"


@dataclass(frozen=True)
class MoveAction:
    """
    Shift one whole row or column with wraparound.

    Contracts:
      - axis=ROW shifts row `index`; positive amount moves tokens rightward.
      - axis=COL shifts column `index`; positive amount moves tokens downward.
      - amount is taken modulo the line length by the engine; callers are
        expected to clamp to [-(length-1), length-1] (see clamp_amount()).
    """

    axis: Axis
    index: int
    amount: int

    @classmethod
    def row(cls, index: int, amount: int) -> "MoveAction":
        return cls(axis=Axis.ROW, index=int(index), amount=int(amount))

    @classmethod
    def col(cls, index: int, amount: int) -> "MoveAction":
        return cls(axis=Axis.COL, index=int(index), amount=int(amount))

    def inverse(self) -> "MoveAction":
        return MoveAction(axis=self.axis, index=self.index, amount=-self.amount)


def clamp_amount(amount: int, length: int) -> int:
    if length <= 0:
        raise ValueError(f"line length must be positive, got {length}")
    lim = int(length) - 1
    return max(-lim, min(lim, int(amount)))


@dataclass(frozen=True)
class Match:
    """
    One maximal run of >= 3 identical tokens along a single axis.

    cells are ordered top-to-bottom (COL runs) or left-to-right (ROW runs).
    """

    token: TokenType
    axis: Axis
    cells: Tuple[Coord, ...]

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[Coord]:
        return iter(self.cells)

    def __contains__(self, cell: object) -> bool:
        return cell in self.cells
