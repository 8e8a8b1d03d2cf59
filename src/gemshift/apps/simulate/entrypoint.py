# src/gemshift/apps/simulate/entrypoint.py
from __future__ import annotations

import argparse
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
from omegaconf import OmegaConf
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from gemshift.config.game_config import GameConfig
from gemshift.config.io import load_game_config
from gemshift.game.core.engine import PuzzleEngine
from gemshift.game.core.grid import line_length
from gemshift.game.core.phase import PhaseResult
from gemshift.game.core.types import Axis, MoveAction, clamp_amount
from gemshift.game.presentation.console import ConsolePresentation
from gemshift.game.presentation.driver import CascadeDriver
from gemshift.game.presentation.shadow import ShadowBoard
from gemshift.utils.logging import set_level, setup_logger

PACKAGE_LOGGERS = (
    "gemshift.game.core.engine",
    "gemshift.game.core.grid",
    "gemshift.game.core.influence",
    "gemshift.game.presentation.driver",
)


@dataclass
class SimulationStats:
    moves: int = 0
    productive_moves: int = 0
    phases: int = 0
    cascades: int = 0
    max_cascade_depth: int = 0
    matches: int = 0
    cleared_cells: int = 0
    elapsed_s: float = 0.0

    def summary(self) -> str:
        mps = self.moves / max(self.elapsed_s, 1e-12)
        return (
            f"moves={self.moves} productive={self.productive_moves} phases={self.phases} "
            f"cascades={self.cascades} max_depth={self.max_cascade_depth} matches={self.matches} "
            f"cleared={self.cleared_cells} elapsed={self.elapsed_s:.3f}s moves/s={mps:.1f}"
        )


def random_move(engine: PuzzleEngine, rng: np.random.Generator) -> MoveAction:
    """Uniform line + non-zero clamped amount, the way a drag would be quantized."""
    axis = Axis.ROW if int(rng.integers(0, 2)) == 0 else Axis.COL
    count = engine.height if axis is Axis.ROW else engine.width
    length = line_length(engine.grid, axis)
    index = int(rng.integers(0, count))
    if length <= 1:
        return MoveAction(axis=axis, index=index, amount=0)
    amount = int(rng.integers(1, length))
    if int(rng.integers(0, 2)) == 1:
        amount = -amount
    return MoveAction(axis=axis, index=index, amount=clamp_amount(amount, length))


def check_phase(engine: PuzzleEngine, phase: PhaseResult) -> None:
    """Per-phase invariants: conservation per column and a full board."""
    cleared = phase.cleared_per_column()
    spawned = {col: len(v) for col, v in phase.replacements.items()}
    if cleared != spawned:
        raise RuntimeError(f"conservation violated: cleared={cleared} spawned={spawned}")
    empty = engine.grid.count_empty()
    if empty:
        raise RuntimeError(f"board has {empty} empty cell(s) after commit")


def simulate(
    engine: PuzzleEngine,
    *,
    moves: int,
    rng: np.random.Generator,
    presentation: Optional[ShadowBoard] = None,
    max_cascades: int = 50,
    verify: bool = True,
    progress: Optional[Progress] = None,
) -> SimulationStats:
    """
    Random-move soak run through CascadeDriver.

    With verify=True every phase is checked (conservation, full board) and the
    payload-only mirror must match the engine after every settled move.
    """
    view = presentation if presentation is not None else ShadowBoard.from_grid(engine.grid)
    driver = CascadeDriver(engine, view, max_cascades=max_cascades)
    stats = SimulationStats()

    task = progress.add_task("simulate", total=int(moves)) if progress is not None else None
    t0 = time.perf_counter()
    for _ in range(int(moves)):
        phases = driver.submit(random_move(engine, rng))
        stats.moves += 1
        if phases:
            stats.productive_moves += 1
        stats.phases += len(phases)
        stats.cascades += max(0, len(phases) - 1)
        stats.max_cascade_depth = max(stats.max_cascade_depth, driver.last_cascade_depth)
        for phase in phases:
            stats.matches += len(phase.matches)
            stats.cleared_cells += len(phase.cleared_cells())
            if verify:
                check_phase(engine, phase)

        if verify:
            problems = view.verify_against(engine.grid)
            if problems:
                raise RuntimeError(f"view out of sync after move {stats.moves}: {problems[:4]}")
            if not engine.is_settled():
                raise RuntimeError(f"board not settled after move {stats.moves}")

        if progress is not None and task is not None:
            progress.advance(task)

    stats.elapsed_s = time.perf_counter() - t0
    return stats


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Random-move soak test for the gemshift puzzle engine")
    parser.add_argument("--config", type=Path, default=None, help="GameConfig YAML (fields at top level or under game:).")
    parser.add_argument("--set", dest="overrides", action="append", default=[], help="Config override, e.g. width=6.")
    parser.add_argument("--moves", type=int, default=1_000, help="Number of random moves to submit.")
    parser.add_argument("--seed", type=int, default=None, help="Engine seed (overrides config).")
    parser.add_argument("--move-seed", type=int, default=None, help="Seed for the random move stream.")
    parser.add_argument("--render", action="store_true", help="Print every frame with the console presentation.")
    parser.add_argument("--frame-delay", type=float, default=0.0, help="Seconds per rendered frame.")
    parser.add_argument("--no-verify", action="store_true", help="Skip per-phase invariant checks.")
    parser.add_argument("--no-progress", action="store_true")
    parser.add_argument("--log-level", type=str, default=None)
    return parser.parse_args(argv)


def _resolve_config(args: argparse.Namespace) -> GameConfig:
    if args.config is not None:
        cfg = load_game_config(args.config, overrides=list(args.overrides))
    elif args.overrides:
        data = OmegaConf.to_container(OmegaConf.from_dotlist(list(args.overrides)), resolve=True)
        cfg = GameConfig.model_validate(data)
    else:
        cfg = GameConfig()
    if args.seed is not None:
        cfg = cfg.model_copy(update={"seed": int(args.seed)})
    return cfg


def run_simulation(args: argparse.Namespace) -> int:
    cfg = _resolve_config(args)
    level = str(args.log_level or cfg.log_level)
    logger = setup_logger(name="gemshift.simulate", use_rich=True, level=level)
    set_level(names=PACKAGE_LOGGERS, level=level)

    engine = PuzzleEngine.from_config(cfg)
    move_seed = args.move_seed if args.move_seed is not None else (None if cfg.seed is None else cfg.seed + 1)
    rng = np.random.default_rng(move_seed)

    logger.info(
        f"[simulate] board={cfg.width}x{cfg.height} types={len(cfg.token_types)} seed={cfg.seed} moves={args.moves}"
    )

    console = Console()
    presentation: Optional[ShadowBoard] = None
    if args.render:
        presentation = ConsolePresentation(engine.grid.columns(), console=console, frame_delay=args.frame_delay)
        console.print(presentation.render())

    if args.render or args.no_progress:
        stats = simulate(
            engine,
            moves=int(args.moves),
            rng=rng,
            presentation=presentation,
            max_cascades=cfg.max_cascades,
            verify=not args.no_verify,
        )
    else:
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            TimeRemainingColumn(),
            console=console,
        ) as progress:
            stats = simulate(
                engine,
                moves=int(args.moves),
                rng=rng,
                presentation=presentation,
                max_cascades=cfg.max_cascades,
                verify=not args.no_verify,
                progress=progress,
            )

    logger.info(f"[simulate] DONE: {stats.summary()}")
    return 0


__all__ = ["SimulationStats", "check_phase", "parse_args", "random_move", "run_simulation", "simulate"]
