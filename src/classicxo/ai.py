"""Exhaustive minimax AI for ClassicXO."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .game import Board, ClassicXOGame, Move, Player, opponent_of

logger = logging.getLogger(__name__)

WIN_SCORE = 10


@dataclass
class MinimaxAI:
    """AI player that searches the full game tree on every turn.

    Scores are from this player's point of view: ``WIN_SCORE - depth`` for a
    win, ``depth - WIN_SCORE`` for a loss and ``0`` for a draw, so quicker
    wins and slower losses rank higher. Ties between equally good moves go
    to the first one in row-major order.

      - MinimaxAI(player="O")
      - choose(game) -> (row, col)
    """

    player: Player = "O"
    nodes: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        # Rejects unknown marks
        opponent_of(self.player)

    @property
    def opponent(self) -> Player:
        return opponent_of(self.player)

    # ---- public API ----

    def choose(self, game: ClassicXOGame) -> Move:
        if game.current_player != self.player:
            raise ValueError("It is not this AI player's turn")
        return self.best_move(game.board)

    def best_move(self, board: Board) -> Move:
        if board.winner() is not None:
            raise RuntimeError("Game already decided")

        self.nodes = 0
        best: Optional[Move] = None
        best_score = -math.inf
        for move, score in self.score_moves(board):
            # Strict comparison keeps the first of equally scored moves
            if score > best_score:
                best_score, best = score, move

        if best is None:
            raise RuntimeError("No valid moves available")
        logger.debug(
            "%s picks %s (score %s, %d nodes)", self.player, best, best_score, self.nodes
        )
        return best

    def score_moves(self, board: Board) -> List[Tuple[Move, int]]:
        """Score each legal move in row-major order, assuming best replies."""

        work = board.clone()
        scored: List[Tuple[Move, int]] = []
        for move in work.legal_moves():
            with work.trial(move, self.player):
                scored.append((move, self.evaluate(work, 0, False)))
        return scored

    # ---- core search ----

    def evaluate(self, board: Board, depth: int, maximizing: bool) -> int:
        self.nodes += 1
        opponent = self.opponent

        # Terminal
        if board.is_winner(self.player):
            return WIN_SCORE - depth
        if board.is_winner(opponent):
            return depth - WIN_SCORE
        if board.is_full():
            return 0

        if maximizing:
            value = -math.inf
            for move in board.legal_moves():
                with board.trial(move, self.player):
                    value = max(value, self.evaluate(board, depth + 1, False))
        else:
            value = math.inf
            for move in board.legal_moves():
                with board.trial(move, opponent):
                    value = min(value, self.evaluate(board, depth + 1, True))
        return int(value)
