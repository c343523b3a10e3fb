"""Type definitions for the mines server."""
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

# Adjacency value marking a tile that holds a mine.
MINE = 9

MAX_WIDTH = 250
MAX_HEIGHT = 250


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Tile:
    """Represents a single tile on the board."""
    adjacency_count: int = 0
    is_flagged: bool = False
    is_revealed: bool = False

    @property
    def is_mine(self) -> bool:
        return self.adjacency_count == MINE


class GameStatus(str, Enum):
    """Possible game states."""
    IN_PROGRESS = 'in_progress'
    WON = 'won'
    LOST = 'lost'


@dataclass
class GameConfig:
    """Configuration for creating a new game."""
    width: int
    height: int
    mine_count: int


@dataclass
class Board:
    """A single game being played.

    ``cells`` stays empty until the first move places the mines, so the
    first tile touched is never a mine.
    """
    id: str
    width: int
    height: int
    mine_count: int
    cells: List[Tile] = field(default_factory=list)
    flag_count: int = 0
    status: GameStatus = GameStatus.IN_PROGRESS
    started_at: datetime = field(default_factory=utcnow)
    ended_at: Optional[datetime] = None
    rng: random.Random = field(default_factory=random.Random, repr=False, compare=False)

    @property
    def mines_placed(self) -> bool:
        return bool(self.cells)

    @property
    def is_active(self) -> bool:
        return self.status == GameStatus.IN_PROGRESS

    def index(self, x: int, y: int) -> int:
        return y * self.width + x

    def tile(self, x: int, y: int) -> Tile:
        return self.cells[self.index(x, y)]


@dataclass
class Turn:
    """A move accepted by the store, with the board view right after it."""
    number: int
    id: str
    x: int
    y: int
    flag: bool
    taken_at: datetime
    view: Dict[str, Any]
