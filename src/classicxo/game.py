"""Core rules for ClassicXO (3x3 tic-tac-toe)."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

Player = str  # "X" or "O"
Move = Tuple[int, int]  # (row, col), 0-indexed

EMPTY = " "
PLAYERS: Tuple[Player, Player] = ("X", "O")
SIZE = 3

WINNING_LINES: Tuple[Tuple[Move, Move, Move], ...] = (
    ((0, 0), (0, 1), (0, 2)),
    ((1, 0), (1, 1), (1, 2)),
    ((2, 0), (2, 1), (2, 2)),
    ((0, 0), (1, 0), (2, 0)),
    ((0, 1), (1, 1), (2, 1)),
    ((0, 2), (1, 2), (2, 2)),
    ((0, 0), (1, 1), (2, 2)),
    ((0, 2), (1, 1), (2, 0)),
)


def opponent_of(player: Player) -> Player:
    if player not in PLAYERS:
        raise ValueError(f"Unknown player mark {player!r}")
    return "O" if player == "X" else "X"


def position_to_move(position: int) -> Move:
    """Convert a keypad-style position (1-9, row-major) to ``(row, col)``."""

    if not 1 <= position <= SIZE * SIZE:
        raise ValueError(f"Position {position} is outside 1-{SIZE * SIZE}")
    return (position - 1) // SIZE, (position - 1) % SIZE


def move_to_position(move: Move) -> int:
    row, col = move
    return row * SIZE + col + 1


# ---------- Board ----------


@dataclass
class Board:
    # 'X', 'O', or ' ' (space) for empty
    cells: List[List[str]] = field(
        default_factory=lambda: [[EMPTY] * SIZE for _ in range(SIZE)]
    )

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Optional[str]]]) -> "Board":
        """Build a board from nested rows; ``""``, ``" "`` and ``None`` are empty."""

        if len(rows) != SIZE or any(len(row) != SIZE for row in rows):
            raise ValueError("Board must be 3x3")
        cells: List[List[str]] = []
        for row in rows:
            out: List[str] = []
            for value in row:
                if value in ("", EMPTY, None):
                    out.append(EMPTY)
                elif value in PLAYERS:
                    out.append(value)
                else:
                    raise ValueError(f"Unknown cell value {value!r}")
            cells.append(out)
        return cls(cells=cells)

    def to_rows(self) -> List[List[str]]:
        return [[c if c in PLAYERS else "" for c in row] for row in self.cells]

    def clone(self) -> "Board":
        return Board(cells=[row.copy() for row in self.cells])

    # ---- queries ----

    def is_winner(self, player: Player) -> bool:
        for line in WINNING_LINES:
            if all(self.cells[r][c] == player for r, c in line):
                return True
        return False

    def winner(self) -> Optional[Player]:
        for player in PLAYERS:
            if self.is_winner(player):
                return player
        return None

    def is_full(self) -> bool:
        return all(c != EMPTY for row in self.cells for c in row)

    def legal_moves(self) -> List[Move]:
        """Empty cells in row-major order; search tie-breaks depend on it."""
        return [
            (r, c)
            for r in range(SIZE)
            for c in range(SIZE)
            if self.cells[r][c] == EMPTY
        ]

    def count(self, player: Player) -> int:
        return sum(row.count(player) for row in self.cells)

    # ---- mutation ----

    def apply_move(self, move: Move, player: Player) -> None:
        if player not in PLAYERS:
            raise ValueError(f"Unknown player mark {player!r}")
        row, col = self._check_bounds(move)
        if self.cells[row][col] != EMPTY:
            raise ValueError(f"Cell {move} already occupied")
        self.cells[row][col] = player

    def undo_move(self, move: Move) -> None:
        row, col = self._check_bounds(move)
        if self.cells[row][col] == EMPTY:
            raise ValueError(f"Cell {move} is already empty")
        self.cells[row][col] = EMPTY

    @contextmanager
    def trial(self, move: Move, player: Player) -> Iterator["Board"]:
        """Apply ``move`` for the duration of the block, then take it back."""

        self.apply_move(move, player)
        try:
            yield self
        finally:
            self.undo_move(move)

    def render(self) -> str:
        return "\n".join(" | ".join(row) for row in self.cells)

    # ---- helpers ----

    @staticmethod
    def _check_bounds(move: Move) -> Move:
        row, col = move
        if not (0 <= row < SIZE and 0 <= col < SIZE):
            raise ValueError(f"Move {move} is off the board")
        return row, col


# ---------- Game ----------


@dataclass
class ClassicXOGame:
    board: Board = field(default_factory=Board)
    current_player: Player = "X"
    winner: Optional[Player] = None
    drawn: bool = False
    history: List[Tuple[Player, Move]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.current_player not in PLAYERS:
            raise ValueError(f"Unknown player mark {self.current_player!r}")

    @property
    def finished(self) -> bool:
        return bool(self.winner or self.drawn)

    def available_moves(self) -> List[Move]:
        if self.finished:
            return []
        return self.board.legal_moves()

    def play_move(self, row: int, col: int) -> None:
        """Place the current player's mark, update the result, and pass the turn."""
        if self.finished:
            raise ValueError("Game already finished")

        move = (row, col)
        if move not in self.available_moves():
            raise ValueError("Illegal move for the current position")

        player = self.current_player
        self.board.apply_move(move, player)
        self.history.append((player, move))
        self._update_state(player)
        self.current_player = opponent_of(player)

    def restart(self, first_player: Player = "X") -> None:
        if first_player not in PLAYERS:
            raise ValueError(f"Unknown player mark {first_player!r}")
        self.board = Board()
        self.current_player = first_player
        self.winner = None
        self.drawn = False
        self.history = []

    def clone(self) -> "ClassicXOGame":
        return ClassicXOGame(
            board=self.board.clone(),
            current_player=self.current_player,
            winner=self.winner,
            drawn=self.drawn,
            history=list(self.history),
        )

    # ---- helpers ----

    def _update_state(self, player: Player) -> None:
        # Only the mover can have completed a line
        if self.board.is_winner(player):
            self.winner = player
            self.drawn = False
            return
        if self.board.is_full():
            self.winner = None
            self.drawn = True
