"""FastAPI-powered web UI for playing ClassicXO in the browser."""

from __future__ import annotations

import logging
import random
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Literal, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field

from .ai import MinimaxAI
from .game import ClassicXOGame, Player, opponent_of

logger = logging.getLogger(__name__)

HUMAN_PLAYER: Player = "X"
AI_PLAYER: Player = opponent_of(HUMAN_PLAYER)
AI_THINK_DELAY: Tuple[float, float] = (0.3, 0.8)


@dataclass
class GameSession:
    """Container for an active ClassicXO game and its AI opponent."""

    game: ClassicXOGame
    ai: MinimaxAI
    ai_pending: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="ClassicXO", description="Unbeatable tic-tac-toe in the browser")


class NewGameRequest(BaseModel):
    """Request payload for starting (or restarting) a game."""

    model_config = ConfigDict(populate_by_name=True)

    first_player: Literal["human", "ai"] = Field(
        default="human",
        alias="firstPlayer",
        description="Who places the first mark",
    )


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    row: int = Field(ge=0, le=2)
    col: int = Field(ge=0, le=2)


def _first_mark(first_player: str) -> Player:
    return HUMAN_PLAYER if first_player == "human" else AI_PLAYER


def _create_session() -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    session = GameSession(game=ClassicXOGame(), ai=MinimaxAI(player=AI_PLAYER))
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _schedule_ai_if_due(session: GameSession) -> bool:
    """Mark the AI as pending when it is its turn; caller holds the lock."""

    game = session.game
    due = not game.finished and game.current_player == session.ai.player
    if due:
        session.ai_pending = True
    return due


def _run_ai_turn(game_id: str) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, random.uniform(*AI_THINK_DELAY)))

    with session.lock:
        game = session.game
        if game.finished or game.current_player != session.ai.player:
            session.ai_pending = False
            return
        snapshot = game.clone()

    # Search without the lock so state reads stay responsive
    try:
        row, col = session.ai.choose(snapshot)
    except Exception:
        with session.lock:
            session.ai_pending = False
        raise

    with session.lock:
        try:
            game = session.game
            if game.history != snapshot.history:
                logger.info("Game %s changed during the AI search; move dropped", game_id)
                return
            game.play_move(row, col)
            logger.info(
                "Game %s: AI played (%d, %d) after %d nodes",
                game_id,
                row,
                col,
                session.ai.nodes,
            )
        finally:
            session.ai_pending = False


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        game = session.game
        move_log = [
            {"player": player, "row": row, "col": col}
            for player, (row, col) in game.history
        ]
        state: Dict[str, object] = {
            "id": game_id,
            "board": game.board.to_rows(),
            "currentPlayer": game.current_player,
            "humanPlayer": HUMAN_PLAYER,
            "aiPlayer": session.ai.player,
            "winner": game.winner,
            "drawn": game.drawn,
            "availableMoves": [
                {"row": row, "col": col} for row, col in game.available_moves()
            ],
            "moveLog": move_log,
            "aiPending": session.ai_pending,
        }
        if move_log:
            state["lastMove"] = move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    row: int,
    col: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    should_schedule_ai = False
    with session.lock:
        game = session.game
        if game.finished:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")

        if game.current_player != HUMAN_PLAYER:
            raise HTTPException(status_code=400, detail="It is not your turn")

        try:
            game.play_move(row, col)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        should_schedule_ai = _schedule_ai_if_due(session)

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id)


def _start_game(
    game_id: str,
    session: GameSession,
    first_player: str,
    background_tasks: BackgroundTasks,
) -> None:
    with session.lock:
        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")
        session.game.restart(_first_mark(first_player))
        should_schedule_ai = _schedule_ai_if_due(session)
    if should_schedule_ai:
        background_tasks.add_task(_run_ai_turn, game_id)


@app.post("/api/game")
def create_game(
    background_tasks: BackgroundTasks, request: Optional[NewGameRequest] = None
) -> Dict[str, object]:
    first_player = request.first_player if request else "human"
    game_id, session = _create_session()
    _start_game(game_id, session, first_player, background_tasks)
    logger.info("Created game %s (%s moves first)", game_id, first_player)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.row, request.col, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/restart")
def restart_game(
    game_id: str,
    background_tasks: BackgroundTasks,
    request: Optional[NewGameRequest] = None,
) -> Dict[str, object]:
    session = _get_session(game_id)
    first_player = request.first_player if request else "human"
    _start_game(game_id, session, first_player, background_tasks)
    logger.info("Restarted game %s (%s moves first)", game_id, first_player)
    return _serialize_session(game_id, session)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>ClassicXO</title>
    <style>
      body {
        font-family: system-ui, sans-serif;
        background: #0f172a;
        color: #e2e8f0;
        display: flex;
        flex-direction: column;
        align-items: center;
        gap: 1rem;
        margin: 0;
        padding: 2rem 1rem;
      }
      #board {
        display: grid;
        grid-template-columns: repeat(3, 96px);
        grid-template-rows: repeat(3, 96px);
        gap: 6px;
      }
      #board.thinking { opacity: 0.7; }
      .cell {
        font-size: 2.5rem;
        font-weight: 700;
        border: none;
        border-radius: 10px;
        background: #1e293b;
        color: inherit;
        cursor: pointer;
      }
      .cell:disabled { cursor: default; }
      .cell.x { color: #38bdf8; }
      .cell.o { color: #f472b6; }
      .cell.last-move { outline: 2px solid #facc15; }
      .controls { display: flex; gap: 0.5rem; }
      button.control {
        padding: 0.5rem 1rem;
        border-radius: 8px;
        border: 1px solid #334155;
        background: #1e293b;
        color: inherit;
        cursor: pointer;
      }
    </style>
  </head>
  <body>
    <h1>ClassicXO</h1>
    <p id=\"message\" role=\"status\"></p>
    <div id=\"board\"></div>
    <div class=\"controls\">
      <button class=\"control\" id=\"new-human\" type=\"button\">New game (you start)</button>
      <button class=\"control\" id=\"new-ai\" type=\"button\">New game (computer starts)</button>
    </div>
    <script>
      const boardEl = document.getElementById('board');
      const messageEl = document.getElementById('message');
      let gameId = null;
      let gameState = null;
      let pollTimer = null;
      let isRequestPending = false;

      async function request(url, body) {
        const options = body === undefined
          ? {}
          : {
              method: 'POST',
              headers: { 'Content-Type': 'application/json' },
              body: JSON.stringify(body),
            };
        const response = await fetch(url, options);
        const data = await response.json();
        if (!response.ok) {
          throw new Error(typeof data.detail === 'string' ? data.detail : 'Request failed');
        }
        return data;
      }

      async function newGame(firstPlayer) {
        const url = gameId ? `/api/game/${gameId}/restart` : '/api/game';
        try {
          setState(await request(url, { firstPlayer }));
        } catch (error) {
          messageEl.textContent = error.message;
        }
      }

      async function sendMove(row, col) {
        if (isRequestPending) return;
        isRequestPending = true;
        try {
          setState(await request(`/api/game/${gameId}/move`, { row, col }));
        } catch (error) {
          messageEl.textContent = error.message;
        } finally {
          isRequestPending = false;
        }
      }

      function ensurePolling() {
        if (pollTimer) return;
        pollTimer = setInterval(async () => {
          try {
            setState(await request(`/api/game/${gameId}`));
          } catch (error) {
            messageEl.textContent = error.message;
          }
        }, 300);
      }

      function stopPolling() {
        clearInterval(pollTimer);
        pollTimer = null;
      }

      function setState(data) {
        gameId = data.id;
        gameState = data;
        render();
        if (gameState.aiPending) {
          ensurePolling();
        } else {
          stopPolling();
        }
      }

      function updateStatus() {
        if (gameState.winner) {
          messageEl.textContent =
            gameState.winner === gameState.humanPlayer ? 'You win!' : 'Computer wins!';
        } else if (gameState.drawn) {
          messageEl.textContent = "It's a tie!";
        } else if (gameState.aiPending) {
          messageEl.textContent = 'Computer is thinking…';
        } else {
          messageEl.textContent = `Your move (${gameState.humanPlayer})`;
        }
      }

      function render() {
        boardEl.innerHTML = '';
        boardEl.classList.toggle('thinking', Boolean(gameState.aiPending));
        const allowed = new Set(
          (gameState.availableMoves || []).map((move) => `${move.row}-${move.col}`)
        );
        const last = gameState.lastMove;
        const humanTurn =
          gameState.currentPlayer === gameState.humanPlayer && !gameState.aiPending;
        gameState.board.forEach((rowCells, row) => {
          rowCells.forEach((value, col) => {
            const cell = document.createElement('button');
            cell.type = 'button';
            cell.classList.add('cell');
            cell.textContent = value;
            cell.setAttribute('aria-label', value ? `${value} placed` : 'Empty cell');
            if (value) cell.classList.add(value.toLowerCase());
            if (last && last.row === row && last.col === col) {
              cell.classList.add('last-move');
            }
            if (humanTurn && allowed.has(`${row}-${col}`)) {
              cell.addEventListener('click', () => sendMove(row, col));
            } else {
              cell.disabled = true;
            }
            boardEl.appendChild(cell);
          });
        });
        updateStatus();
      }

      document.getElementById('new-human').addEventListener('click', () => newGame('human'));
      document.getElementById('new-ai').addEventListener('click', () => newGame('ai'));
      newGame('human');
    </script>
  </body>
</html>
"""
