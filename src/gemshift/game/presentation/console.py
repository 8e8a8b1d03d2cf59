# src/gemshift/game/presentation/console.py
from __future__ import annotations

import time
from typing import Optional, Sequence

from rich.console import Console
from rich.text import Text

from gemshift.game.core.phase import FallMove, PhaseResult
from gemshift.game.core.types import Coord, MoveAction, TokenType
from gemshift.game.presentation.shadow import ShadowBoard

TOKEN_STYLES: dict[TokenType, str] = {
    TokenType.RED: "bold red",
    TokenType.GREEN: "bold green",
    TokenType.BLUE: "bold blue",
    TokenType.YELLOW: "bold yellow",
    TokenType.PURPLE: "bold magenta",
    TokenType.ORANGE: "bold dark_orange",
}


class ConsolePresentation(ShadowBoard):
    """
    Text "animation": prints one frame per contract step.

    Frame duration is a presentation concern (frame_delay seconds per step).
    """

    def __init__(
            self,
            columns: Sequence[Sequence[Optional[TokenType]]],
            *,
            console: Optional[Console] = None,
            frame_delay: float = 0.0,
    ) -> None:
        super().__init__(columns)
        self.console = console or Console()
        self.frame_delay = float(frame_delay)

    def render(self, *, highlight: Sequence[Coord] = ()) -> Text:
        marked = set(highlight)
        out = Text()
        for y in range(self.height):
            for x in range(self.width):
                t = self.columns[x][y]
                if t is None:
                    out.append(". ", style="dim")
                    continue
                style = TOKEN_STYLES.get(t, "")
                if (x, y) in marked:
                    style = f"{style} reverse".strip()
                out.append(f"{t.glyph} ", style=style)
            if y < self.height - 1:
                out.append("\n")
        return out

    def _frame(self, title: str, *, highlight: Sequence[Coord] = ()) -> None:
        self.console.print(f"[dim]{title}[/dim]")
        self.console.print(self.render(highlight=highlight))
        if self.frame_delay > 0.0:
            time.sleep(self.frame_delay)

    def commit_move(self, move: MoveAction) -> None:
        super().commit_move(move)
        self._frame(f"move {move.axis.value} {move.index} by {move.amount:+d}")

    def animate_removals(self, cells: Sequence[Coord]) -> None:
        self._frame(f"explode {len(cells)} cell(s)", highlight=cells)
        super().animate_removals(cells)

    def animate_falls(self, moves: Sequence[FallMove]) -> None:
        super().animate_falls(moves)
        spawned = sum(1 for m in moves if m.spawned)
        self._frame(f"fall {len(moves) - spawned} / spawn {spawned}")

    def phase_done(self, phase: PhaseResult) -> None:
        super().phase_done(phase)
        kind = "cascade" if phase.is_cascade else "phase"
        self.console.print(f"[dim]{kind} done: {len(phase.matches)} match(es)[/dim]")


__all__ = ["ConsolePresentation", "TOKEN_STYLES"]
