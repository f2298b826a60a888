"""Console front end: play ClassicXO against the computer in a terminal."""

from __future__ import annotations

import logging
import os
from typing import Callable, Optional

from .ai import MinimaxAI
from .game import ClassicXOGame, Player, opponent_of, position_to_move

logger = logging.getLogger(__name__)

PROMPT = "Enter position (1-9): "


def _announce(game: ClassicXOGame, human: Player, output: Callable[[str], None]) -> bool:
    """Print the final grid and result if the game is over; return whether it is."""
    if game.finished:
        output(game.board.render())
    if game.winner:
        output("Player wins!" if game.winner == human else "Computer wins!")
        return True
    if game.drawn:
        output("It's a tie!")
        return True
    return False


def play(
    input_fn: Callable[[str], str] = input,
    output: Callable[[str], None] = print,
    human: Player = "X",
) -> Optional[Player]:
    """Run one game; returns the winning mark, or ``None`` on a tie or EOF."""

    game = ClassicXOGame(current_player=human)
    ai = MinimaxAI(player=opponent_of(human))

    while True:
        output(game.board.render())
        try:
            raw = input_fn(PROMPT)
        except EOFError:
            logger.debug("Input closed, leaving game")
            return None

        try:
            row, col = position_to_move(int(raw.strip()))
        except ValueError:
            output("Invalid position, please enter a number between 1 and 9.")
            continue

        try:
            game.play_move(row, col)
        except ValueError:
            output("Invalid move, try again.")
            continue
        if _announce(game, human, output):
            return game.winner

        row, col = ai.choose(game)
        game.play_move(row, col)
        logger.debug("Computer played (%d, %d)", row, col)
        if _announce(game, human, output):
            return game.winner


def main() -> int:
    logging.basicConfig(level=os.environ.get("CLASSICXO_LOG_LEVEL", "WARNING").upper())
    play()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
