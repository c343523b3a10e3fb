"""
Pytest configuration and shared fixtures.
"""
import random
from typing import Callable, Iterable, Tuple

import pytest

from mines_server import engine
from mines_server.server import create_app
from mines_server.store import GameStore
from mines_server.types import Board, GameConfig


# ============================================================================
# Board Fixtures
# ============================================================================

@pytest.fixture
def seeded_rng() -> random.Random:
    """A deterministic random source for mine placement."""
    return random.Random(1234)


@pytest.fixture
def make_board() -> Callable[..., Board]:
    """Build a board with mines at hand-picked (x, y) positions.

    The returned board has its grid laid out already, so the first move
    does not place mines.
    """
    def _make(width: int, height: int, mines: Iterable[Tuple[int, int]] = ()) -> Board:
        mines = list(mines)
        board = engine.create_board(GameConfig(width, height, len(mines)))
        engine.lay_mines(board, [y * width + x for x, y in mines])
        return board
    return _make


@pytest.fixture
def fresh_board(seeded_rng: random.Random) -> Board:
    """A 9x9 board with 10 mines, not yet placed."""
    return engine.create_board(GameConfig(9, 9, 10), rng=seeded_rng)


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def store() -> GameStore:
    return GameStore()


@pytest.fixture
def app(store: GameStore):
    app = create_app(store=store)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
