"""In-memory registry of running games."""
import copy
import logging
import random
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from mines_server import engine
from mines_server.errors import GameNotFound, TurnNotFound
from mines_server.types import Board, GameConfig, Turn, utcnow

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    board: Board
    last_activity: datetime
    lock: threading.Lock = field(default_factory=threading.Lock)
    turns: List[Turn] = field(default_factory=list)


class GameStore:
    """Holds every game by id and serializes access to each one.

    Moves on the same game run one at a time under that game's lock; games
    never share state, so different games can be played concurrently.
    Games idle for longer than ``idle_timeout`` are dropped the next time a
    game is created.
    """

    def __init__(self, idle_timeout: Optional[timedelta] = None,
                 clock: Callable[[], datetime] = utcnow):
        self.idle_timeout = idle_timeout
        self._clock = clock
        self._games: Dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)

    def __contains__(self, game_id: str) -> bool:
        with self._lock:
            return game_id in self._games

    def _entry(self, game_id: str) -> _Entry:
        try:
            key = str(uuid.UUID(game_id))
        except (TypeError, ValueError):
            raise GameNotFound("invalid Game") from None
        with self._lock:
            entry = self._games.get(key)
        if entry is None:
            raise GameNotFound("invalid Game")
        return entry

    def create(self, config: GameConfig, rng: Optional[random.Random] = None) -> Board:
        """Start a new game and register it under a fresh id."""
        board = engine.create_board(config, rng=rng)
        self.purge_idle()
        with self._lock:
            self._games[board.id] = _Entry(board=board, last_activity=self._clock())
        logger.info(f"Created game {board.id} ({board.width}x{board.height}, {board.mine_count} mines)")
        return board

    def get(self, game_id: str) -> Board:
        return self._entry(game_id).board

    def view(self, game_id: str) -> Dict[str, Any]:
        entry = self._entry(game_id)
        with entry.lock:
            return engine.render_view(entry.board)

    def apply_move(self, game_id: str, x: int, y: int, flag: bool) -> Dict[str, Any]:
        """Apply a move and record it as a turn. Returns the new view."""
        entry = self._entry(game_id)
        with entry.lock:
            engine.apply_move(entry.board, x, y, flag)
            now = self._clock()
            entry.last_activity = now
            view = engine.render_view(entry.board)
            entry.turns.append(Turn(
                number=len(entry.turns),
                id=str(uuid.uuid4()),
                x=x,
                y=y,
                flag=flag,
                taken_at=now,
                view=view,
            ))
            return view

    def turns(self, game_id: str) -> List[Turn]:
        entry = self._entry(game_id)
        with entry.lock:
            return list(entry.turns)

    def turn(self, game_id: str, number: int) -> Dict[str, Any]:
        """Replay a recorded turn: the move itself plus the board right after it."""
        entry = self._entry(game_id)
        with entry.lock:
            if not 0 <= number < len(entry.turns):
                raise TurnNotFound("invalid Turn")
            turn = entry.turns[number]
        return {
            'turn': turn.number,
            'uuid': turn.id,
            'x': turn.x,
            'y': turn.y,
            'flag': turn.flag,
            'taken_at': turn.taken_at.isoformat(),
            'game': copy.deepcopy(turn.view),
        }

    def end(self, game_id: str, won: bool = False) -> None:
        entry = self._entry(game_id)
        with entry.lock:
            engine.force_end(entry.board, won)
            entry.last_activity = self._clock()

    def remove(self, game_id: str) -> None:
        entry = self._entry(game_id)
        with self._lock:
            self._games.pop(entry.board.id, None)
        logger.info(f"Removed game {entry.board.id}")

    def purge_idle(self) -> int:
        """Drop games with no activity within idle_timeout. Returns how many."""
        if self.idle_timeout is None:
            return 0
        cutoff = self._clock() - self.idle_timeout
        with self._lock:
            stale = [game_id for game_id, entry in self._games.items()
                     if entry.last_activity < cutoff]
            for game_id in stale:
                del self._games[game_id]
        if stale:
            logger.info(f"Purged {len(stale)} idle games")
        return len(stale)
