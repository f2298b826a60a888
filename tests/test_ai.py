"""Tests for the ClassicXO minimax AI."""

import pytest

from classicxo.ai import MinimaxAI
from classicxo.game import Board, ClassicXOGame


def test_ai_takes_immediate_win():
    board = Board.from_rows([["O", "O", ""], ["", "", ""], ["", "", ""]])
    ai = MinimaxAI(player="O")

    assert ai.best_move(board) == (0, 2)


def test_ai_blocks_open_line():
    board = Board.from_rows([["X", "X", ""], ["", "O", ""], ["", "", ""]])
    ai = MinimaxAI(player="O")

    assert ai.best_move(board) == (0, 2)


def test_single_remaining_move_is_returned():
    board = Board.from_rows([["X", "O", "X"], ["X", "O", "O"], ["O", "X", ""]])
    assert MinimaxAI(player="O").best_move(board) == (2, 2)


def test_empty_board_is_a_draw():
    ai = MinimaxAI(player="O")
    assert ai.evaluate(Board(), 0, True) == 0


def test_empty_board_opening_is_first_corner():
    # Every opening draws, so the first cell in row-major order wins the tie
    assert MinimaxAI(player="X").best_move(Board()) == (0, 0)


def test_terminal_scores_are_depth_adjusted():
    ai = MinimaxAI(player="O")
    won = Board.from_rows([["O", "O", "O"], ["X", "X", ""], ["", "", ""]])
    lost = Board.from_rows([["X", "X", "X"], ["O", "O", ""], ["", "", ""]])
    drawn = Board.from_rows([["X", "O", "X"], ["X", "O", "O"], ["O", "X", "X"]])

    assert ai.evaluate(won, 2, False) == 8
    assert ai.evaluate(lost, 3, True) == -7
    assert ai.evaluate(drawn, 4, True) == 0


def test_quicker_win_scores_higher():
    ai = MinimaxAI(player="O")
    win_in_one = Board.from_rows([["O", "O", ""], ["X", "X", ""], ["", "", ""]])
    # O must block at (2, 0), which leaves a fork on column 0 and row 2
    win_in_three = Board.from_rows([["O", "", "X"], ["", "X", ""], ["", "", "O"]])

    assert ai.evaluate(win_in_one, 0, True) == 9
    assert ai.evaluate(win_in_three, 0, True) == 7
    assert ai.best_move(win_in_three) == (2, 0)


def test_evaluate_is_deterministic_and_leaves_board_untouched():
    ai = MinimaxAI(player="O")
    board = Board.from_rows([["X", "", ""], ["", "", ""], ["", "", ""]])
    before = board.to_rows()

    first = ai.evaluate(board, 1, True)
    second = ai.evaluate(board, 1, True)

    assert first == second
    assert board.to_rows() == before


def test_best_move_does_not_mutate_board():
    ai = MinimaxAI(player="O")
    board = Board.from_rows([["X", "", ""], ["", "", ""], ["", "", ""]])
    before = board.to_rows()

    move = ai.best_move(board)

    assert move in board.legal_moves()
    assert board.to_rows() == before
    assert ai.nodes > 0


def test_score_moves_follow_row_major_order():
    ai = MinimaxAI(player="O")
    board = Board.from_rows([["O", "O", ""], ["X", "X", ""], ["", "", ""]])

    scored = ai.score_moves(board)

    assert [move for move, _ in scored] == board.legal_moves()
    # Winning on the spot is scored at depth 0
    assert scored[0] == ((0, 2), 10)
    assert all(score < 10 for _, score in scored[1:])


def test_best_move_rejects_finished_boards():
    ai = MinimaxAI(player="O")
    full = Board.from_rows([["X", "O", "X"], ["X", "O", "O"], ["O", "X", "X"]])
    won = Board.from_rows([["X", "X", "X"], ["O", "O", ""], ["", "", ""]])

    with pytest.raises(RuntimeError):
        ai.best_move(full)
    with pytest.raises(RuntimeError):
        ai.best_move(won)


def test_choose_requires_ai_turn():
    game = ClassicXOGame()
    with pytest.raises(ValueError):
        MinimaxAI(player="O").choose(game)


def test_self_play_always_draws():
    game = ClassicXOGame()
    players = {"X": MinimaxAI(player="X"), "O": MinimaxAI(player="O")}

    while not game.finished:
        game.play_move(*players[game.current_player].choose(game))

    assert game.drawn
    assert game.winner is None
    assert game.history[0] == ("X", (0, 0))


def test_no_human_line_beats_the_ai():
    ai = MinimaxAI(player="O")
    replies = {}

    def explore(game: ClassicXOGame) -> None:
        for move in game.available_moves():
            child = game.clone()
            child.play_move(*move)
            assert child.winner != "X"
            if child.finished:
                continue
            key = tuple(tuple(row) for row in child.board.cells)
            if key not in replies:
                replies[key] = ai.choose(child)
            child.play_move(*replies[key])
            if not child.finished:
                explore(child)

    explore(ClassicXOGame())
    assert replies


def test_opponent_follows_player():
    ai = MinimaxAI(player="O")
    assert ai.opponent == "X"

    ai.player = "X"

    assert ai.opponent == "O"
    board = Board.from_rows([["X", "X", ""], ["O", "O", ""], ["", "", ""]])
    assert ai.best_move(board) == (0, 2)


def test_unknown_mark_is_rejected():
    with pytest.raises(ValueError):
        MinimaxAI(player="Z")
