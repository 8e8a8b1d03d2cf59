# src/gemshift/game/core/engine.py
from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Mapping, Optional, Sequence

import numpy as np

from gemshift.game.core.constants import MIN_RUN
from gemshift.game.core.grid import (
    Grid,
    apply_shift,
    find_matches,
    generate,
    move_in_bounds,
    remove_and_compact,
    would_complete_run,
)
from gemshift.game.core.influence import InfluenceSource
from gemshift.game.core.phase import PhaseResult
from gemshift.game.core.types import DEFAULT_TOKEN_TYPES, Axis, Coord, Match, MoveAction, TokenType
from gemshift.utils.logging import setup_logger

if TYPE_CHECKING:
    from gemshift.config.game_config import GameConfig

LOG = setup_logger(name="gemshift.game.core.engine", use_rich=True, level="info")


class PuzzleEngine:
    """
    Owns one live grid and is its only mutator.

    Contracts:

      - Construction yields a full board with no run of 3 (given >= 3 token types).
      - advance(moves) runs exactly one phase:
            ApplyMove -> DetectMatches -> ComputeReplacements -> Commit
        and returns the committed PhaseResult. With no matches the grid stays
        exactly as after the moves and the result is_nothing_to_do().
      - Cascades are caller-driven: call advance([]) until is_nothing_to_do().
        Each phase must be animated before the next one is requested, so the
        engine never loops internally.
      - preview_matches() works on a deep copy and never touches the live grid.
      - Not thread-safe; callers serialize advance() (see CascadeDriver).

      - Malformed moves (index out of range) are a logged no-op by default;
        with strict_moves=True they raise ValueError. Unknown axis values
        always raise ValueError. A batch of moves is validated as a whole before
        any of them is applied, so a rejected batch leaves the grid untouched.
      - seed and rng are mutually exclusive.
    """

    def __init__(
            self,
            width: int,
            height: int,
            *,
            token_types: Sequence[TokenType] = DEFAULT_TOKEN_TYPES,
            seed: Optional[int] = None,
            rng: Optional[np.random.Generator] = None,
            category_map: Mapping[int, TokenType] | None = None,
            strict_moves: bool = False,
    ) -> None:
        if isinstance(width, bool) or isinstance(height, bool):
            raise TypeError("width/height must be ints, got bool")
        self.width = int(width)
        self.height = int(height)
        if self.width <= 0:
            raise ValueError(f"width must be positive, got {self.width}")
        if self.height <= 0:
            raise ValueError(f"height must be positive, got {self.height}")

        types = tuple(dict.fromkeys(TokenType(t) for t in token_types))
        if len(types) < 2:
            raise ValueError(f"need at least 2 distinct token types, got {len(types)}")
        if len(types) < MIN_RUN:
            LOG.warning(
                "[engine] palette of %d token types cannot always avoid runs; boards may start with matches",
                len(types),
            )

        if seed is not None and rng is not None:
            raise ValueError("pass either seed or rng, not both")
        # Seedable, injectable RNG shared by generation and replacement.
        self._rng: np.random.Generator = rng if rng is not None else np.random.default_rng(seed)
        self.source = InfluenceSource(types, rng=self._rng, category_map=category_map)
        self.strict_moves = bool(strict_moves)

        self.phases_committed = 0
        self._grid: Grid = generate(self.width, self.height, source=self.source)

    @classmethod
    def from_config(cls, cfg: "GameConfig", *, rng: Optional[np.random.Generator] = None) -> "PuzzleEngine":
        engine = cls(
            cfg.width,
            cfg.height,
            token_types=cfg.token_types,
            seed=cfg.seed if rng is None else None,
            rng=rng,
            category_map=cfg.category_map,
            strict_moves=cfg.strict_moves,
        )
        if cfg.influence is not None:
            engine.set_influence(list(cfg.influence))
        return engine

    # ---- queries -------------------------------------------------------------------

    @property
    def token_types(self) -> tuple[TokenType, ...]:
        return self.source.token_types

    @property
    def grid(self) -> Grid:
        """Live grid reference. Read-only for callers."""
        return self._grid

    def get_grid(self) -> Grid:
        """Deep-copied snapshot of the live grid."""
        return self._grid.copy()

    def is_settled(self) -> bool:
        return not find_matches(self._grid)

    def preview_matches(self, move: MoveAction) -> list[Match]:
        """Matches the move would produce, computed on a deep copy."""
        scratch = self._grid.copy()
        if self._check_move(scratch, move):
            apply_shift(scratch, move)
        return find_matches(scratch)

    # ---- configuration -------------------------------------------------------------

    def set_influence(self, codes: Iterable[object] | None) -> None:
        """
        Replace the influence weighting and regenerate the board from scratch.
        This is a full reset of the grid, not an incremental reweight.
        """
        active = self.source.set_influence(codes)
        LOG.info(
            "[engine] influence %s; regenerating %dx%d board",
            "set" if active else "cleared",
            self.width,
            self.height,
        )
        self._regenerate()

    def queue_next_tokens(self, types: Iterable[TokenType]) -> None:
        """Force the next spawned tokens (FIFO), ahead of influence and randomness."""
        self.source.queue(types)

    def set_grid(self, grid: Grid) -> None:
        """
        Install a scripted board (tests, puzzles). The grid is copied; it must
        match the engine size and palette and be full. Matches are allowed and
        resolve on the next advance().
        """
        if (grid.width, grid.height) != (self.width, self.height):
            raise ValueError(
                f"grid is {grid.width}x{grid.height}, engine expects {self.width}x{self.height}"
            )
        if grid.palette != self.token_types:
            raise ValueError("grid palette differs from the engine token types")
        if grid.count_empty():
            raise ValueError(f"grid has {grid.count_empty()} empty cell(s)")
        self._grid = grid.copy()

    def reset(self) -> None:
        self.source.clear_influence()
        self.source.clear_queue()
        self._regenerate()

    def _regenerate(self) -> None:
        self.phases_committed = 0
        self._grid = generate(self.width, self.height, source=self.source)

    # ---- mutation ------------------------------------------------------------------

    def advance(self, moves: Iterable[MoveAction] = ()) -> PhaseResult:
        """
        Apply moves in order, then resolve one explode/replace phase.

        Returns the committed PhaseResult (replacements listed top-most first).
        """
        applied = tuple(moves)
        # all-or-nothing: a rejected move leaves the grid untouched
        valid = [self._check_move(self._grid, m) for m in applied]
        for move, ok in zip(applied, valid):
            if ok:
                apply_shift(self._grid, move)

        matches = find_matches(self._grid)
        if not matches:
            return PhaseResult.nothing(moves=applied)

        cleared = sorted({c for m in matches for c in m.cells})
        replacements = self._compute_replacements(cleared)
        phase = PhaseResult(matches=tuple(matches), replacements=replacements, moves=applied)

        remove_and_compact(self._grid, cleared, replacements)
        self.phases_committed += 1

        LOG.debug(
            "[engine] phase=%d moves=%d matches=%d cleared=%d",
            self.phases_committed,
            len(applied),
            len(matches),
            len(cleared),
        )
        return phase

    # ---- internals -----------------------------------------------------------------

    def _check_move(self, grid: Grid, move: MoveAction) -> bool:
        """True iff the move is in range. Raises for malformed moves (and out of range when strict)."""
        if not isinstance(move, MoveAction):
            raise TypeError(f"move must be a MoveAction, got {type(move)!r}")
        try:
            axis = Axis(move.axis)
        except ValueError as e:
            raise ValueError(f"unknown move axis {move.axis!r}") from e

        if not move_in_bounds(grid, move):
            limit = grid.height if axis is Axis.ROW else grid.width
            msg = f"{axis.value} index {move.index} out of range [0,{limit})"
            if self.strict_moves:
                raise ValueError(msg)
            LOG.debug("[engine] ignoring move: %s", msg)
            return False
        return True

    def _compute_replacements(self, cleared: Sequence[Coord]) -> dict[int, tuple[TokenType, ...]]:
        """
        One new token per cleared cell, columns left-to-right, top-most spawn first.

        The final column will be spawns ++ survivors, so each spawn is checked
        against its known vertical neighbours: spawns already chosen above it
        and, for the lowest spawn, the surviving tokens directly beneath.
        """
        rows_by_col: dict[int, set[int]] = {}
        for col, row in cleared:
            rows_by_col.setdefault(int(col), set()).add(int(row))

        out: dict[int, tuple[TokenType, ...]] = {}
        for col in sorted(rows_by_col):
            rows = rows_by_col[col]
            k = len(rows)
            survivors = [t for y, t in enumerate(self._grid.column(col)) if y not in rows]
            line: list[Optional[TokenType]] = [None] * k + survivors

            for i in range(k):
                def rejects(t: TokenType, i: int = i) -> bool:
                    return would_complete_run(line, i, t)

                line[i] = self.source.choose(rejects)

            out[col] = tuple(t for t in line[:k] if t is not None)
        return out


__all__ = ["PuzzleEngine"]
