# src/gemshift/utils/paths.py
from __future__ import annotations

from pathlib import Path


def _find_repo_root(start: Path) -> Path | None:
    for p in [start, *start.parents]:
        if (p / "pyproject.toml").is_file():
            return p
    return None


def repo_root() -> Path:
    """
    Return the repository root by searching upwards for pyproject.toml.
    """
    here = Path(__file__).resolve()
    root = _find_repo_root(here.parent)
    if root is None:
        raise FileNotFoundError("Could not locate repo root (pyproject.toml not found).")
    return root


def configs_dir() -> Path:
    """
    Return repo_root/configs (must exist).
    """
    p = repo_root() / "configs"
    if not p.is_dir():
        raise FileNotFoundError(f"Configs directory not found: {p}")
    return p


def default_game_config_path() -> Path:
    return configs_dir() / "game" / "default.yaml"


__all__ = ["repo_root", "configs_dir", "default_game_config_path"]
