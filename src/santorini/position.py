"""
A coordinate on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

# Santorini is always played on a 5x5 grid.
BOARD_DIMENSIONS = (5, 5)

# Row-major over dy, then dx. The zero offset is skipped.
NEIGHBOR_OFFSETS: tuple[tuple[int, int], ...] = tuple(
    (dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dx, dy) != (0, 0)
)


@dataclass(frozen=True)
class Position:
    x: int
    y: int

    def __str__(self) -> str:
        return f"[{self.x}, {self.y}]"

    def is_within_bounds(self) -> bool:
        return (0 <= self.x < BOARD_DIMENSIONS[0]) and (0 <= self.y < BOARD_DIMENSIONS[1])

    def is_adjacent(self, other: Position) -> bool:
        """8-neighborhood. A position is never adjacent to itself."""
        return abs(self.x - other.x) <= 1 and abs(self.y - other.y) <= 1 and self != other

    def neighbors(self) -> Iterator[Position]:
        """All adjacent positions that are still on the board"""
        for dx, dy in NEIGHBOR_OFFSETS:
            neighbor = Position(self.x + dx, self.y + dy)
            if neighbor.is_within_bounds():
                yield neighbor

    def behind(self, origin: Position) -> Position:
        """
        Mirror `origin` through this position: the square one further step in the direction origin -> self.
        NOTE: May lie outside the board. Callers check bounds.
        """
        return Position(2 * self.x - origin.x, 2 * self.y - origin.y)
