"""ClassicXO package exposing board rules, the minimax AI, and the web application."""

from .ai import MinimaxAI
from .game import Board, ClassicXOGame
from .ui import app

__all__ = ["Board", "ClassicXOGame", "MinimaxAI", "app"]
