# src/gemshift/game/presentation/__init__.py
from __future__ import annotations

from gemshift.game.presentation.console import ConsolePresentation
from gemshift.game.presentation.contract import PresentationContract
from gemshift.game.presentation.driver import CascadeDriver
from gemshift.game.presentation.shadow import ShadowBoard

__all__ = ["CascadeDriver", "ConsolePresentation", "PresentationContract", "ShadowBoard"]
