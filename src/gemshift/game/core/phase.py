# src/gemshift/game/core/phase.py
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from gemshift.game.core.types import Coord, Match, MoveAction, TokenType


@dataclass(frozen=True)
class FallMove:
    """
    One token animation of the fall sub-phase.

    from_row < 0 means the token is newly spawned above the board; spawned
    moves carry their token type, surviving tokens keep their own visuals
    (token=None).
    """

    col: int
    from_row: int
    to_row: int
    token: Optional[TokenType] = None

    @property
    def spawned(self) -> bool:
        return self.token is not None


@dataclass(frozen=True)
class PhaseResult:
    """
    One explode + replace cycle, as committed by PuzzleEngine.advance().

    Contracts:
      - matches: runs found after the moves were applied (may share cells).
      - replacements[col]: new token types for that column, top-most spawn first;
        len(replacements[col]) == number of unique cleared cells in col.
      - replacements is empty whenever matches is empty.
      - moves: the moves that were applied before detection (empty for cascades).
    """

    matches: tuple[Match, ...] = ()
    replacements: Mapping[int, tuple[TokenType, ...]] = field(default_factory=dict)
    moves: tuple[MoveAction, ...] = ()

    def __post_init__(self) -> None:
        # containers are read-only too, not just the field bindings
        object.__setattr__(self, "matches", tuple(self.matches))
        object.__setattr__(
            self,
            "replacements",
            MappingProxyType({int(c): tuple(v) for c, v in self.replacements.items()}),
        )
        object.__setattr__(self, "moves", tuple(self.moves))

    @classmethod
    def nothing(cls, *, moves: tuple[MoveAction, ...] = ()) -> "PhaseResult":
        return cls(matches=(), replacements={}, moves=tuple(moves))

    def is_nothing_to_do(self) -> bool:
        return len(self.matches) == 0

    @property
    def is_cascade(self) -> bool:
        return len(self.moves) == 0

    def cleared_cells(self) -> tuple[Coord, ...]:
        """Unique matched cells, sorted by (col, row)."""
        cells = {c for m in self.matches for c in m.cells}
        return tuple(sorted(cells))

    def cleared_per_column(self) -> dict[int, int]:
        out: dict[int, int] = {}
        for col, _row in self.cleared_cells():
            out[col] = out.get(col, 0) + 1
        return out

    def spawn_count(self) -> int:
        return int(sum(len(v) for v in self.replacements.values()))

    def fall_plan(self, height: int) -> list[FallMove]:
        """
        Post-removal layout as token moves, derived from the payload only.

        Per column with k cleared cells: survivors keep their relative order and
        land below the k spawned tokens; spawn i starts at row i - k and lands
        on row i. Survivors that do not move are omitted.
        """
        h = int(height)
        cleared: dict[int, set[int]] = {}
        for col, row in self.cleared_cells():
            cleared.setdefault(col, set()).add(row)

        plan: list[FallMove] = []
        for col in sorted(cleared):
            rows = cleared[col]
            spawns = tuple(self.replacements.get(col, ()))
            k = len(rows)
            if len(spawns) != k:
                raise RuntimeError(f"column {col}: {k} cleared cell(s) but {len(spawns)} replacement(s)")

            survivors = [y for y in range(h) if y not in rows]
            for i, y in enumerate(survivors):
                to_row = k + i
                if to_row != y:
                    plan.append(FallMove(col=col, from_row=y, to_row=to_row))
            for i, token in enumerate(spawns):
                plan.append(FallMove(col=col, from_row=i - k, to_row=i, token=token))
        return plan


__all__ = ["FallMove", "PhaseResult"]
