"""
Custom exceptions shared by all layers.

Structural misuse of the engine (wrong phase, wrong turn, wrong worker) raises one of these.
Routine rule violations (an illegal move or build target) are answered with `False` by the Game instead.
"""


class GameError(Exception):
    """Top-level exception: anything the service layer may want to catch in one go."""


class IllegalPhaseError(GameError):
    """Action attempted outside the phase in which it is allowed."""


class NotYourTurnError(GameError):
    """Action requested by the player that is not currently allowed to act."""


class WrongWorkerError(GameError):
    """Worker is unknown, belongs to someone else, or is not the one expected to be placed."""


class UnknownPlayerError(GameError):
    """No player is registered under the requested id."""


class InvalidMoveError(GameError):
    """Target square fails the adjacency / height / occupancy / dome rule."""


class InvalidBuildError(GameError):
    """Target square cannot receive a block or a dome."""


class UnknownCardError(GameError):
    """No power card is registered under the requested name."""


class InvalidRequestError(GameError):
    """Boundary layer: request could not be interpreted."""


class GameNotFoundError(GameError):
    """Service layer: there is no active game to apply the request to."""
