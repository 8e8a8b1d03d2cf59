# src/gemshift/game/presentation/shadow.py
from __future__ import annotations

from typing import Optional, Sequence

from gemshift.game.core.grid import Grid
from gemshift.game.core.phase import FallMove, PhaseResult
from gemshift.game.core.types import Axis, Coord, MoveAction, TokenType
from gemshift.game.presentation.contract import PresentationContract


class ShadowBoard(PresentationContract):
    """
    Headless visual layer: mirrors the board from phase payloads only.

    It never reads the engine grid after construction, so comparing it with the
    engine (verify_against) checks that the payloads are sufficient and that
    the call order of the contract was honored. Ordering violations raise
    RuntimeError.
    """

    def __init__(self, columns: Sequence[Sequence[Optional[TokenType]]]) -> None:
        self.columns: list[list[Optional[TokenType]]] = [list(c) for c in columns]
        self.width = len(self.columns)
        self.height = len(self.columns[0]) if self.columns else 0
        self.events: list[tuple[str, int]] = []
        self._removed = False

    @classmethod
    def from_grid(cls, grid: Grid) -> "ShadowBoard":
        return cls(grid.columns())

    # ---- contract ------------------------------------------------------------------

    def commit_move(self, move: MoveAction) -> None:
        if self._removed:
            raise RuntimeError("move committed while a phase is still animating")
        self.events.append(("move", int(move.amount)))

        axis = Axis(move.axis)
        i = int(move.index)
        if axis is Axis.ROW:
            if not (0 <= i < self.height) or self.width == 0:
                return
            k = int(move.amount) % self.width
            if k == 0:
                return
            line = [self.columns[x][i] for x in range(self.width)]
            line = line[-k:] + line[:-k]
            for x in range(self.width):
                self.columns[x][i] = line[x]
        else:
            if not (0 <= i < self.width) or self.height == 0:
                return
            k = int(move.amount) % self.height
            if k == 0:
                return
            col = self.columns[i]
            self.columns[i] = col[-k:] + col[:-k]

    def animate_removals(self, cells: Sequence[Coord]) -> None:
        if self._removed:
            raise RuntimeError("removals requested twice within one phase")
        for x, y in cells:
            self.columns[x][y] = None
        self._removed = True
        self.events.append(("removals", len(cells)))

    def animate_falls(self, moves: Sequence[FallMove]) -> None:
        if not self._removed:
            raise RuntimeError("falls requested before removals finished")
        before = [list(c) for c in self.columns]
        for m in moves:
            self.columns[m.col][m.to_row] = m.token if m.spawned else before[m.col][m.from_row]
        holes = [(x, y) for x, col in enumerate(self.columns) for y, t in enumerate(col) if t is None]
        if holes:
            raise RuntimeError(f"board has empty cells after falls: {holes[:8]}")
        self.events.append(("falls", len(moves)))

    def phase_done(self, phase: PhaseResult) -> None:
        if not self._removed:
            raise RuntimeError("phase_done without removals/falls")
        self._removed = False
        self.events.append(("done", len(phase.matches)))

    def revert_move(self, move: MoveAction) -> None:
        self.events.append(("revert", int(move.amount)))

    # ---- checks --------------------------------------------------------------------

    def verify_against(self, grid: Grid) -> list[str]:
        """Mismatch messages between this mirror and an engine grid (empty = in sync)."""
        problems: list[str] = []
        if (grid.width, grid.height) != (self.width, self.height):
            return [f"size mismatch: view {self.width}x{self.height}, model {grid.width}x{grid.height}"]
        for x in range(grid.width):
            for y in range(grid.height):
                model = grid.token_at(x, y)
                view = self.columns[x][y]
                if model != view:
                    problems.append(
                        f"[{x},{y}] model={getattr(model, 'value', None)} view={getattr(view, 'value', None)}"
                    )
        return problems


__all__ = ["ShadowBoard"]
