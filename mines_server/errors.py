"""Errors raised by the engine and the game store."""


class GameError(Exception):
    """Base class for every error the mines server reports to clients."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(GameError, ValueError):
    """Bad parameters for a new game."""


class OutOfBounds(GameError, IndexError):
    """Move coordinates fall outside the grid."""


class GameNotActive(GameError):
    """Move attempted on a game that has already ended."""


class GameNotFound(GameError, KeyError):
    """No game is registered under the requested id."""

    status_code = 404


class TurnNotFound(GameError, KeyError):
    """The game has no turn with the requested number."""

    status_code = 404
