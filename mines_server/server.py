"""Flask server for the mines game."""
import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from mines_server.config import (
    DEFAULT_HEIGHT,
    DEFAULT_MINES,
    DEFAULT_WIDTH,
    ServerConfig,
    parse_uint,
)
from mines_server.errors import GameError
from mines_server.store import GameStore
from mines_server.types import GameConfig

logger = logging.getLogger(__name__)


def json_error(message: str, status_code: int, headers=None):
    return jsonify({'error': message}), status_code, headers or []


class _BadRequest(GameError):
    """Malformed request parameters."""


def _coordinate(name: str) -> int:
    """Read a required non-negative integer form field."""
    raw = request.form.get(name, '')
    if raw == '':
        raise _BadRequest(f"{name} cannot be empty")
    value = parse_uint(raw, -1)
    if value < 0:
        raise _BadRequest(f"{name} must be a non-negative integer")
    return value


def create_app(store: Optional[GameStore] = None, config: Optional[ServerConfig] = None) -> Flask:
    """Build the Flask app around a game store."""
    config = config or ServerConfig()
    if store is None:
        store = GameStore(idle_timeout=config.game_ttl)

    app = Flask(__name__)
    CORS(
        app,
        resources={r"/games/*": {"origins": "*"}},
        methods=["POST", "GET", "DELETE", "OPTIONS"],
        allow_headers=["Accept", "Content-Type", "Origin", "X-GAME-UUID"],
        max_age=86400,
        send_wildcard=True,
    )

    @app.errorhandler(GameError)
    def handle_game_error(error: GameError):
        logger.info(f"{request.method} {request.path} rejected: {error}")
        return json_error(str(error), error.status_code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        if isinstance(error, HTTPException):
            # Keep headers such as Allow, minus the HTML content type.
            headers = [(key, value) for key, value in error.get_headers()
                       if key.lower() != 'content-type']
            return json_error(error.description, error.code, headers)
        logger.exception(f"Error handling {request.method} {request.path}")
        return json_error('Internal server error', 500)

    @app.route('/', methods=['GET'])
    def index():
        """Nothing lives at the root."""
        return '', 204

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint."""
        return jsonify({
            'status': 'OK',
            'timestamp': datetime.now(timezone.utc).isoformat()
        })

    @app.route('/games/', methods=['GET'], provide_automatic_options=False)
    def count_games():
        """How many games are held in memory."""
        return jsonify({'games': len(store)})

    @app.route('/games/', methods=['POST'], provide_automatic_options=False)
    def create_game():
        """Create a new game from the w, h and m form fields."""
        game_config = GameConfig(
            width=parse_uint(request.form.get('w'), DEFAULT_WIDTH),
            height=parse_uint(request.form.get('h'), DEFAULT_HEIGHT),
            mine_count=parse_uint(request.form.get('m'), DEFAULT_MINES),
        )
        board = store.create(game_config)
        return jsonify({'uuid': board.id}), 201

    @app.route('/games/', methods=['OPTIONS'])
    def games_options():
        return '', 204

    @app.route('/games/<game_id>', methods=['GET'], provide_automatic_options=False)
    def get_game(game_id):
        """Get the current view of a game."""
        return jsonify(store.view(game_id))

    @app.route('/games/<game_id>/<int:turn>', methods=['GET'])
    def get_turn(game_id, turn):
        """Replay one recorded turn of a game."""
        return jsonify(store.turn(game_id, turn))

    @app.route('/games/<game_id>', methods=['POST'], provide_automatic_options=False)
    def make_move(game_id):
        """Click a tile; flag=1 toggles its flag instead."""
        store.get(game_id)
        x = _coordinate('x')
        y = _coordinate('y')
        flag = request.form.get('flag') == '1'
        view = store.apply_move(game_id, x, y, flag)
        return jsonify(view), 202

    @app.route('/games/<game_id>', methods=['DELETE'], provide_automatic_options=False)
    def abandon_game(game_id):
        """End a game as a loss."""
        store.end(game_id, won=False)
        return '', 204

    @app.route('/games/<game_id>', methods=['OPTIONS'])
    def game_options(game_id):
        store.get(game_id)
        return '', 204

    return app


def main():
    """Start the Flask server."""
    config = ServerConfig.from_env()
    logging.basicConfig(level=config.log_level)

    app = create_app(config=config)
    logger.info(f"Mines server running on http://{config.host}:{config.port}")
    app.run(host=config.host, port=config.port, debug=False)


if __name__ == "__main__":
    main()
