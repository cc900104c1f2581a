"""
The power card protocol.

Key idea: the Game calls every hook at its decision point, for every player. A player without a card gets
this base class, whose hooks implement the plain rules. Concrete cards override only the hooks they change.
"""

from typing import Protocol

from src.santorini.board import Board
from src.santorini.pieces import Worker
from src.santorini.position import Position

NO_CARD_NAME = "None"


class GameControls(Protocol):
    """Just the parts of the Game the cards need"""

    board: Board

    def switch_turn(self) -> None: ...
    def enter_second_build(self) -> None: ...


class PowerCard:
    """Default behavior: the base rules, turn ends after a single build."""

    name: str = NO_CARD_NAME

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    # --- TURN BOUNDARIES ---
    def activate_effect(self, game: GameControls) -> None:
        """Start of the owner's turn: reset per-turn state"""

    def deactivate_effect(self, game: GameControls) -> None:
        """End of the owner's turn: clear per-turn state"""

    # --- MOVING ---
    def modify_move_validation(
        self, worker: Worker, origin: Position, to: Position, board: Board
    ) -> bool:
        return board.is_move_legal(worker, origin, to)

    def modify_legal_moves(
        self, worker: Worker, legal_moves: list[Position], board: Board
    ) -> list[Position]:
        return legal_moves

    def pre_move_execution(
        self, worker: Worker, origin: Position, to: Position, board: Board
    ) -> bool:
        """Runs right before the board moves the worker onto an occupied square. False aborts the move."""
        return True

    def post_move_execution(
        self, game: GameControls, worker: Worker, origin: Position, to: Position
    ) -> None:
        """Runs right after the worker landed"""

    def check_win_condition(
        self, worker: Worker, origin: Position, to: Position, board: Board
    ) -> bool:
        """Extra way to win. The base win (climbing to the third level) is always checked by the Game."""
        return False

    # --- BUILDING ---
    def modify_build_validation(self, worker: Worker, at: Position, board: Board) -> bool:
        # for the typechecker: only called for a worker that stands on the board
        assert worker.position is not None
        return board.is_build_legal(worker, worker.position, at)

    def modify_legal_builds(
        self, worker: Worker, legal_builds: list[Position], board: Board
    ) -> list[Position]:
        return legal_builds

    def post_build_execution(self, game: GameControls, worker: Worker, at: Position) -> None:
        """Decide between offering another build and ending the turn"""
        game.switch_turn()

    def skip_action(self, game: GameControls) -> bool:
        """Forgo an optional extra action. Returns False when nothing could be skipped."""
        return False
