"""Game rules: mine placement, reveals, flags and the client view."""
import logging
import random
import uuid
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from mines_server.errors import GameNotActive, OutOfBounds, ValidationError
from mines_server.types import (
    MAX_HEIGHT,
    MAX_WIDTH,
    MINE,
    Board,
    GameConfig,
    GameStatus,
    Tile,
    utcnow,
)

logger = logging.getLogger(__name__)

HIDDEN = '?'
FLAG = '!'
BAD_FLAG = 'X'
EXPOSED_MINE = str(MINE)
EMPTY = ''


def validate_config(config: GameConfig) -> None:
    """Raise ValidationError when a board cannot be built from config."""
    if config.width < 1 or config.height < 1:
        raise ValidationError("Board dimensions must be positive")
    if config.width > MAX_WIDTH:
        raise ValidationError("width exceeds max")
    if config.height > MAX_HEIGHT:
        raise ValidationError("height exceeds max")
    if config.mine_count < 0:
        raise ValidationError("Number of mines cannot be negative")
    if config.mine_count > config.width * config.height - 1:
        raise ValidationError("mines exceed tiles")


def create_board(config: GameConfig, rng: Optional[random.Random] = None,
                 game_id: Optional[str] = None) -> Board:
    """Create a new game. Mines are placed on the first move."""
    validate_config(config)
    board = Board(
        id=game_id or str(uuid.uuid4()),
        width=config.width,
        height=config.height,
        mine_count=config.mine_count,
        rng=rng or random.Random(),
    )
    logger.debug(f"Created game {board.id} ({board.width}x{board.height}, {board.mine_count} mines)")
    return board


def neighbors(board: Board, x: int, y: int) -> Iterator[Tuple[int, int]]:
    """Yield the in-grid neighbors of (x, y), row by row."""
    for dy in [-1, 0, 1]:
        for dx in [-1, 0, 1]:
            if dx == 0 and dy == 0:
                continue
            nx = x + dx
            ny = y + dy
            if 0 <= nx < board.width and 0 <= ny < board.height:
                yield nx, ny


def count_neighbors(board: Board, x: int, y: int, predicate: Callable[[Tile], bool]) -> int:
    """Count the neighbors of (x, y) whose tile satisfies predicate."""
    return sum(1 for nx, ny in neighbors(board, x, y) if predicate(board.tile(nx, ny)))


def place_mines(board: Board, safe_x: int, safe_y: int) -> None:
    """Pick mine_count distinct random tiles, never (safe_x, safe_y), and mine them."""
    safe_index = board.index(safe_x, safe_y)
    positions = [i for i in range(board.width * board.height) if i != safe_index]
    lay_mines(board, board.rng.sample(positions, board.mine_count))
    logger.debug(f"Placed {board.mine_count} mines on game {board.id} avoiding ({safe_x}, {safe_y})")


def lay_mines(board: Board, mine_indexes: Iterable[int]) -> None:
    """Build the grid with mines at the given indexes and number every other tile."""
    board.cells = [Tile() for _ in range(board.width * board.height)]
    for i in mine_indexes:
        board.cells[i].adjacency_count = MINE

    for y in range(board.height):
        for x in range(board.width):
            tile = board.tile(x, y)
            if not tile.is_mine:
                tile.adjacency_count = count_neighbors(board, x, y, lambda t: t.is_mine)


def _end(board: Board, status: GameStatus) -> None:
    board.status = status
    if board.ended_at is None:
        board.ended_at = utcnow()
    logger.info(f"Game {board.id} ended: {status.value}")


def _open(board: Board, x: int, y: int) -> None:
    """Reveal (x, y) and flood outward from tiles with no neighboring mines.

    A tile that is already revealed or flagged is never opened again, which
    is what stops the flood.
    """
    stack = [(x, y)]
    while stack:
        cx, cy = stack.pop()
        tile = board.tile(cx, cy)
        if tile.is_revealed or tile.is_flagged:
            continue
        tile.is_revealed = True
        if tile.is_mine:
            _end(board, GameStatus.LOST)
            return
        if tile.adjacency_count == 0:
            for nx, ny in reversed(list(neighbors(board, cx, cy))):
                neighbor = board.tile(nx, ny)
                if not neighbor.is_revealed and not neighbor.is_flagged:
                    stack.append((nx, ny))


def _chord(board: Board, x: int, y: int) -> None:
    """Open every unflagged neighbor when the flags around (x, y) match its number."""
    tile = board.tile(x, y)
    if count_neighbors(board, x, y, lambda t: t.is_flagged) != tile.adjacency_count:
        return
    for nx, ny in neighbors(board, x, y):
        neighbor = board.tile(nx, ny)
        if not neighbor.is_revealed and not neighbor.is_flagged:
            _open(board, nx, ny)
            if not board.is_active:
                return


def _check_win(board: Board) -> None:
    settled = sum(1 for tile in board.cells if tile.is_revealed or tile.is_mine)
    if settled == board.width * board.height:
        _end(board, GameStatus.WON)


def apply_move(board: Board, x: int, y: int, toggle_flag: bool) -> None:
    """Click the tile at (x, y), or toggle its flag when toggle_flag is set.

    Raises OutOfBounds or GameNotActive before touching the board.
    Redundant clicks (re-revealing, a plain click on a flag, a chord whose
    flags do not match) are silently ignored.
    """
    if not 0 <= x < board.width:
        raise OutOfBounds("X cannot be larger than the board width")
    if not 0 <= y < board.height:
        raise OutOfBounds("Y cannot be larger than the board height")
    if not board.is_active:
        raise GameNotActive("Game is not active")

    if not board.mines_placed:
        place_mines(board, x, y)

    tile = board.tile(x, y)
    if tile.is_revealed:
        if not toggle_flag:
            _chord(board, x, y)
    elif not tile.is_flagged:
        if toggle_flag:
            tile.is_flagged = True
            board.flag_count += 1
        else:
            _open(board, x, y)
    elif toggle_flag:
        tile.is_flagged = False
        board.flag_count -= 1

    if board.is_active:
        _check_win(board)


def force_end(board: Board, won: bool) -> None:
    """End a game regardless of its state, e.g. when a player abandons it."""
    _end(board, GameStatus.WON if won else GameStatus.LOST)


def tile_symbol(tile: Tile, status: GameStatus) -> str:
    """What a client is shown for one tile."""
    lost = status == GameStatus.LOST
    won = status == GameStatus.WON
    if lost and tile.is_mine and not tile.is_flagged:
        return EXPOSED_MINE
    if lost and not tile.is_mine and tile.is_flagged:
        return BAD_FLAG
    if tile.is_flagged or (won and tile.is_mine):
        return FLAG
    if not tile.is_revealed:
        return HIDDEN
    if tile.adjacency_count == 0:
        return EMPTY
    return str(tile.adjacency_count)


def render_view(board: Board) -> Dict[str, Any]:
    """Convert a board to the JSON-serializable view sent to clients."""
    if board.mines_placed:
        grid: List[str] = [tile_symbol(tile, board.status) for tile in board.cells]
    else:
        grid = [HIDDEN] * (board.width * board.height)

    view: Dict[str, Any] = {
        'started_at': board.started_at.isoformat(),
        'mines': board.mine_count,
        'width': board.width,
        'height': board.height,
        'flags': board.flag_count,
        'grid': grid,
    }
    if board.ended_at is not None:
        view['ended_at'] = board.ended_at.isoformat()
        if board.status == GameStatus.WON:
            view['won'] = True
            view['flags'] = board.mine_count
    return view
