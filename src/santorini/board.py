"""The Game board implements all rules that affect the towers and the squares the workers stand on, independent of any power card"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Self

from src.core.exceptions import InvalidBuildError, InvalidMoveError
from src.santorini.pieces import Worker
from src.santorini.position import BOARD_DIMENSIONS, Position
from src.santorini.square import Square
from src.santorini.tower import MAX_LEVEL, Tower

logger = logging.getLogger(__name__)

DOME_CHAR = "D"


def _empty_squares() -> dict[Position, Square]:
    return {
        Position(x, y): Square()
        for y in range(BOARD_DIMENSIONS[1])
        for x in range(BOARD_DIMENSIONS[0])
    }


@dataclass
class Board:
    squares: dict[Position, Square] = field(default_factory=_empty_squares)
    worker_positions: dict[str, Position] = field(default_factory=dict)

    @classmethod
    def from_layout(cls, layout: str) -> Self:
        """Construct a board with pre-built towers (no workers).

        Rows are separated by slashes and read top (y=0) to bottom, each character is a column (x=0 first).
        A digit is the number of blocks, a 'D' is a complete tower (three blocks and a dome).
        ex) a board with a single level 2 tower in the center:
        00000/00000/00200/00000/00000
        """
        squares: dict[Position, Square] = {}
        rows = layout.split("/")
        if len(rows) != BOARD_DIMENSIONS[1] or any(len(row) != BOARD_DIMENSIONS[0] for row in rows):
            raise ValueError(
                f"Layout {layout!r} must have {BOARD_DIMENSIONS[1]} rows of {BOARD_DIMENSIONS[0]} squares."
            )
        for y, row in enumerate(rows):
            for x, character in enumerate(row):
                if character == DOME_CHAR:
                    tower = Tower(level=MAX_LEVEL, domed=True)
                elif character.isdigit() and int(character) <= MAX_LEVEL:
                    tower = Tower(level=int(character))
                else:
                    raise ValueError(f"Cannot interpret {character!r} at {Position(x, y)} as a tower.")
                squares[Position(x, y)] = Square(tower)
        return cls(squares)

    # --- LOOKUPS ---
    def is_within_bounds(self, position: Position) -> bool:
        return position in self.squares

    def square(self, position: Position) -> Square:
        return self.squares[position]

    def tower(self, position: Position) -> Tower:
        return self.squares[position].tower

    def occupant(self, position: Position) -> Optional[Worker]:
        if not self.is_within_bounds(position):
            return None
        return self.squares[position].occupant

    def is_occupied(self, position: Position) -> bool:
        return self.is_within_bounds(position) and self.squares[position].is_occupied()

    def position_of(self, worker: Worker) -> Optional[Position]:
        return self.worker_positions.get(worker.id)

    # --- MUTATIONS ---
    def place_worker(self, worker: Worker, position: Position) -> bool:
        """Placement phase: any free square on the board"""
        if not self.is_within_bounds(position):
            logger.debug("Cannot place worker at %s. It is out of bounds.", position)
            return False
        if self.is_occupied(position):
            logger.debug("Cannot place worker at %s. It is occupied.", position)
            return False
        self._update_worker_position(worker, position)
        logger.debug("%s is placed at %s", worker.id, position)
        return True

    def move_worker(self, worker: Worker, to: Position) -> bool:
        """Move a worker under the base movement rules"""
        origin = self.position_of(worker)
        if origin is None or not self.is_move_legal(worker, origin, to):
            raise InvalidMoveError(f"Move of {worker.id} from {origin} to {to} is not legal.")
        self._update_worker_position(worker, to)
        logger.debug("Successful move. %s moved to %s.", worker.id, to)
        return True

    def build(self, worker: Worker, at: Position) -> bool:
        """Add a block (level < 3) or a dome (level == 3) next to the worker"""
        origin = self.position_of(worker)
        if origin is None or not self.is_build_legal(worker, origin, at):
            raise InvalidBuildError(f"Build at {at} by {worker.id} is not legal.")
        tower = self.tower(at)
        if tower.can_add_level():
            tower.add_level()
            logger.debug("Successful build. A block has been built at %s by %s.", at, worker.id)
            return True
        if tower.can_add_dome():
            tower.add_dome()
            logger.debug("A dome has been placed at %s by %s.", at, worker.id)
            return True
        logger.debug("No build action executed at %s: the tower is complete.", at)
        return False

    def push_worker(self, target: Worker, to: Position) -> bool:
        """
        Forced relocation (power cards only). No adjacency or height rules apply,
        the destination only needs to be a free square without a dome.
        """
        if not self.is_within_bounds(to) or self.is_occupied(to) or self.tower(to).domed:
            logger.debug("Cannot push %s to %s.", target.id, to)
            return False
        self._update_worker_position(target, to)
        logger.debug("%s has been pushed to %s.", target.id, to)
        return True

    def remove_worker(self, worker: Worker) -> Optional[Position]:
        """Lift a worker off the board. Returns the square it stood on."""
        position = self.worker_positions.pop(worker.id, None)
        if position is not None:
            self.squares[position].occupant = None
        worker.position = None
        logger.debug("%s has been lifted from %s.", worker.id, position)
        return position

    def _update_worker_position(self, worker: Worker, new_position: Position) -> None:
        """Keep the square occupants, the worker index and the worker itself consistent"""
        old_position = self.worker_positions.get(worker.id)
        if old_position is not None:
            self.squares[old_position].occupant = None
        self.worker_positions[worker.id] = new_position
        self.squares[new_position].occupant = worker
        worker.position = new_position

    # --- LEGALITY ---
    def is_move_legal(self, worker: Worker, origin: Position, to: Position) -> bool:
        if not self.is_within_bounds(to) or self.is_occupied(to):
            return False
        target = self.tower(to)
        return (
            origin.is_adjacent(to)
            and not target.domed
            and target.level <= self.tower(origin).level + 1
        )

    def is_build_legal(self, worker: Worker, origin: Position, to: Position) -> bool:
        if not self.is_within_bounds(to) or self.is_occupied(to):
            return False
        target = self.tower(to)
        return origin.is_adjacent(to) and (target.can_add_level() or target.can_add_dome())

    def climbed_to_third_alone(self, origin: Position, to: Position) -> bool:
        """The worker moved up from level 2 to level 3 by its own move."""
        return (
            self.tower(origin).level == MAX_LEVEL - 1
            and self.tower(to).level == MAX_LEVEL
        )
