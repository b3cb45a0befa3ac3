"""
Custom exceptions.

Every exception raised on purpose by the application derives from GameError, so the API layer can
translate any of them into a response without crashing the session.
"""


class GameError(Exception):
    """Top-level exception for anything that goes wrong while handling a game."""


class InvalidSquareError(GameError):
    """Square coordinates or names that do not lie on the 8x8 board."""


class IllegalMoveError(GameError):
    """The requested destination is not in the set of legal moves."""


class NotYourTurnError(GameError):
    """A piece of the side that is not to move was asked to move."""


class GameStateError(GameError):
    """The request does not fit the current state of the game (game over, engine thinking, ...)."""


class InvalidFENError(GameError):
    """FEN text that cannot be parsed into a position."""


class InvalidRequestError(GameError):
    """Request data that fails validation at the API boundary."""


class RepositoryError(GameError):
    """The persistence layer could not find (or store) the requested game."""
