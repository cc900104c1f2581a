"""
Concrete power cards

Key idea: strategy pattern. Every card overrides a subset of the PowerCard hooks, the registry below maps the
card names a client may send to the class implementing them.
"""

import logging
from typing import Optional

from src.core.exceptions import UnknownCardError
from src.santorini.board import Board
from src.santorini.pieces import Worker
from src.santorini.position import Position
from src.santorini.power_card import NO_CARD_NAME, GameControls, PowerCard
from src.santorini.tower import MAX_LEVEL

logger = logging.getLogger(__name__)


# --- SHARED RULES ---
def opponent_at(worker: Worker, to: Position, board: Board) -> Optional[Worker]:
    """The opponent worker standing on `to`, if any"""
    occupant = board.occupant(to)
    if occupant is None or occupant.owner_id == worker.owner_id:
        return None
    return occupant


def can_enter_opponent_square(
    worker: Worker, origin: Position, to: Position, board: Board
) -> bool:
    """Adjacent square held by an opponent, at most one level higher than where the worker stands"""
    if not board.is_within_bounds(to) or opponent_at(worker, to, board) is None:
        return False
    return origin.is_adjacent(to) and board.tower(to).level <= board.tower(origin).level + 1


def is_valid_push_destination(position: Position, board: Board) -> bool:
    """Height does not matter for a forced move. Only the board edge, other workers and domes block it."""
    return (
        board.is_within_bounds(position)
        and not board.is_occupied(position)
        and not board.tower(position).domed
    )


def opponent_squares(
    worker: Worker, board: Board, already_legal: list[Position]
) -> list[Position]:
    """Adjacent squares held by opponents that are not yet part of the legal moves"""
    # for the typechecker: only called for a worker that stands on the board
    assert worker.position is not None
    return [
        neighbor
        for neighbor in worker.position.neighbors()
        if neighbor not in already_legal
        and can_enter_opponent_square(worker, worker.position, neighbor, board)
    ]


# --- MOVEMENT CARDS ---
class Apollo(PowerCard):
    """Your worker may move into an opponent worker's square, forcing them into the square you just vacated."""

    name = "Apollo"

    def __init__(self) -> None:
        self._displaced: Optional[Worker] = None

    def activate_effect(self, game: GameControls) -> None:
        self._displaced = None

    def deactivate_effect(self, game: GameControls) -> None:
        self._displaced = None

    def modify_move_validation(
        self, worker: Worker, origin: Position, to: Position, board: Board
    ) -> bool:
        if board.is_move_legal(worker, origin, to):
            return True
        return can_enter_opponent_square(worker, origin, to, board)

    def modify_legal_moves(
        self, worker: Worker, legal_moves: list[Position], board: Board
    ) -> list[Position]:
        return legal_moves + opponent_squares(worker, board, legal_moves)

    def pre_move_execution(
        self, worker: Worker, origin: Position, to: Position, board: Board
    ) -> bool:
        """Vacate the target square, the opponent is put back on the board once our worker left `origin`"""
        if not board.is_occupied(to):
            return True
        if not can_enter_opponent_square(worker, origin, to, board):
            return False
        self._displaced = board.occupant(to)
        assert self._displaced is not None
        board.remove_worker(self._displaced)
        return True

    def post_move_execution(
        self, game: GameControls, worker: Worker, origin: Position, to: Position
    ) -> None:
        if self._displaced is None:
            return
        if game.board.push_worker(self._displaced, origin):
            logger.info("%s swapped places with %s", worker.id, self._displaced.id)
        else:
            logger.warning("%s could not be put back on %s", self._displaced.id, origin)
        self._displaced = None

    def check_win_condition(
        self, worker: Worker, origin: Position, to: Position, board: Board
    ) -> bool:
        # the swapped opponent is moved by force, only our own ascent counts
        return board.tower(to).level == MAX_LEVEL and board.tower(origin).level < MAX_LEVEL


class Minotaur(PowerCard):
    """
    Your worker may move into an opponent worker's square, if their worker can be forced one square
    straight backwards to an unoccupied square at any level.
    """

    name = "Minotaur"

    def modify_move_validation(
        self, worker: Worker, origin: Position, to: Position, board: Board
    ) -> bool:
        if board.is_move_legal(worker, origin, to):
            return True
        return self._can_push(worker, origin, to, board)

    def modify_legal_moves(
        self, worker: Worker, legal_moves: list[Position], board: Board
    ) -> list[Position]:
        assert worker.position is not None
        origin = worker.position
        pushes = [
            square
            for square in opponent_squares(worker, board, legal_moves)
            if is_valid_push_destination(square.behind(origin), board)
        ]
        return legal_moves + pushes

    def pre_move_execution(
        self, worker: Worker, origin: Position, to: Position, board: Board
    ) -> bool:
        """Push the opponent out of the way"""
        if not self._can_push(worker, origin, to, board):
            return False
        opponent = board.occupant(to)
        assert opponent is not None
        pushed = board.push_worker(opponent, to.behind(origin))
        if pushed:
            logger.info("%s pushed %s to %s", worker.id, opponent.id, to.behind(origin))
        return pushed

    def _can_push(
        self, worker: Worker, origin: Position, to: Position, board: Board
    ) -> bool:
        return can_enter_opponent_square(
            worker, origin, to, board
        ) and is_valid_push_destination(to.behind(origin), board)


class Pan(PowerCard):
    """You also win if your worker moves down two or more levels."""

    name = "Pan"

    def check_win_condition(
        self, worker: Worker, origin: Position, to: Position, board: Board
    ) -> bool:
        return board.tower(origin).level - board.tower(to).level >= 2


# --- EXTRA BUILD CARDS ---
class _ExtraBuildCard(PowerCard):
    """Shared bookkeeping: remember the first build of the turn, end the turn after the second one or a skip."""

    def __init__(self) -> None:
        self.has_built_once = False
        self.last_build_position: Optional[Position] = None

    def activate_effect(self, game: GameControls) -> None:
        self._reset()

    def deactivate_effect(self, game: GameControls) -> None:
        self._reset()

    def post_build_execution(self, game: GameControls, worker: Worker, at: Position) -> None:
        if not self.has_built_once and self._offers_second_build(at, game.board):
            self.has_built_once = True
            self.last_build_position = at
            game.enter_second_build()
            return
        game.switch_turn()

    def skip_action(self, game: GameControls) -> bool:
        if not self.has_built_once:
            return False
        logger.info("%s: second build skipped", self.name)
        game.switch_turn()
        return True

    def _offers_second_build(self, at: Position, board: Board) -> bool:
        return True

    def _reset(self) -> None:
        self.has_built_once = False
        self.last_build_position = None


class Demeter(_ExtraBuildCard):
    """Your worker may build one additional time, but not on the same space."""

    name = "Demeter"

    def modify_build_validation(self, worker: Worker, at: Position, board: Board) -> bool:
        if self.has_built_once and at == self.last_build_position:
            return False
        return super().modify_build_validation(worker, at, board)

    def modify_legal_builds(
        self, worker: Worker, legal_builds: list[Position], board: Board
    ) -> list[Position]:
        if not self.has_built_once:
            return legal_builds
        return [position for position in legal_builds if position != self.last_build_position]


class Hephaestus(_ExtraBuildCard):
    """Your worker may build one additional block (not dome) on top of your first block."""

    name = "Hephaestus"

    def modify_build_validation(self, worker: Worker, at: Position, board: Board) -> bool:
        if not self.has_built_once:
            return super().modify_build_validation(worker, at, board)
        return (
            at == self.last_build_position
            and board.tower(at).can_add_level()
            and super().modify_build_validation(worker, at, board)
        )

    def modify_legal_builds(
        self, worker: Worker, legal_builds: list[Position], board: Board
    ) -> list[Position]:
        if not self.has_built_once:
            return legal_builds
        return [
            position
            for position in legal_builds
            if position == self.last_build_position and board.tower(position).can_add_level()
        ]

    def _offers_second_build(self, at: Position, board: Board) -> bool:
        # a second block must not turn into a dome
        return board.tower(at).can_add_level()


CARD_TYPES: dict[str, type[PowerCard]] = {
    card.name.lower(): card for card in (Apollo, Demeter, Hephaestus, Minotaur, Pan)
}

AVAILABLE_CARD_NAMES: tuple[str, ...] = (NO_CARD_NAME,) + tuple(
    card.name for card in CARD_TYPES.values()
)


def is_no_card(name: Optional[str]) -> bool:
    return name is None or name.strip() == "" or name.strip().lower() == NO_CARD_NAME.lower()


def create_card(name: Optional[str]) -> PowerCard:
    """Factory: card names are case-insensitive. No name (or 'None') gets the default rules."""
    if is_no_card(name):
        return PowerCard()
    assert name is not None
    card_type = CARD_TYPES.get(name.strip().lower())
    if card_type is None:
        raise UnknownCardError(
            f"Unknown power card {name!r}. Pick one from {', '.join(AVAILABLE_CARD_NAMES)}."
        )
    return card_type()
