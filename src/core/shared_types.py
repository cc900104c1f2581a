"""
Type definitions used across layers
"""

from enum import StrEnum


class GamePhase(StrEnum):
    INITIALIZE = "initialize"
    PLACE_WORKER = "place worker"
    MOVE = "move"
    BUILD = "build"
    SECOND_BUILD = "second build"
    GAME_OVER = "game over"


class PlayerAction(StrEnum):
    """Sub-state within a turn: is a Move or a Build expected next?"""

    MOVE = "move"
    BUILD = "build"
