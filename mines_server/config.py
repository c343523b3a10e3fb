"""Server settings read from the environment, and form field parsing."""
import logging
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping, Optional

DEFAULT_PORT = 8080
DEFAULT_WIDTH = 12
DEFAULT_HEIGHT = 12
DEFAULT_MINES = 20


def parse_uint(value: Optional[str], default: int) -> int:
    """Parse a non-negative integer form field, falling back to default."""
    if value is None:
        return default
    value = value.strip()
    if not (value.isascii() and value.isdigit()):
        return default
    return int(value)


@dataclass
class ServerConfig:
    """Settings for the HTTP server, normally read from the environment."""
    host: str = '0.0.0.0'
    port: int = DEFAULT_PORT
    game_ttl: Optional[timedelta] = timedelta(hours=24)
    log_level: str = 'INFO'

    # Reads MINES_SERVER_PORT, MINES_SERVER_HOST, MINES_GAME_TTL_HOURS and
    # LOG_LEVEL. Ports that do not parse, or that fall below 1024, use the
    # default port, and unknown log levels use INFO. A TTL of 0 keeps idle
    # games forever.
    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        env = os.environ if environ is None else environ

        port = parse_uint(env.get("MINES_SERVER_PORT"), DEFAULT_PORT)
        if port < 1024:
            port = DEFAULT_PORT

        ttl_hours = parse_uint(env.get("MINES_GAME_TTL_HOURS"), 24)
        game_ttl = timedelta(hours=ttl_hours) if ttl_hours else None

        log_level = env.get("LOG_LEVEL", "INFO").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            log_level = "INFO"

        return cls(
            host=env.get("MINES_SERVER_HOST", "0.0.0.0"),
            port=port,
            game_ttl=game_ttl,
            log_level=log_level,
        )
