"""Tests for the ClassicXO console front end."""

from itertools import cycle

from classicxo.cli import PROMPT, play


def _scripted(answers):
    answers = iter(answers)
    prompts = []

    def input_fn(prompt):
        prompts.append(prompt)
        try:
            return next(answers)
        except StopIteration:
            raise EOFError from None

    return input_fn, prompts


def test_invalid_positions_are_reprompted():
    input_fn, prompts = _scripted(["abc", "0", "10"])
    output = []

    result = play(input_fn=input_fn, output=output.append)

    assert result is None
    assert prompts == [PROMPT] * 4
    invalid = "Invalid position, please enter a number between 1 and 9."
    assert output.count(invalid) == 3


def test_occupied_cell_is_rejected():
    input_fn, _ = _scripted(["5", "5"])
    output = []

    play(input_fn=input_fn, output=output.append)

    assert "Invalid move, try again." in output


def test_game_runs_to_a_result_without_human_win():
    positions = cycle("123456789")
    output = []

    result = play(input_fn=lambda _prompt: next(positions), output=output.append)

    assert result in (None, "O")
    assert "Player wins!" not in output
    assert ("Computer wins!" in output) or ("It's a tie!" in output)
