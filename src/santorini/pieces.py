"""Defines the players and the workers they move around the board"""

from dataclasses import dataclass, field
from typing import Optional, Self

from src.santorini.position import Position

WORKERS_PER_PLAYER = 2
PLAYER_IDS: tuple[str, str] = ("A", "B")


@dataclass(eq=False)
class Worker:
    """
    A piece on the board.
    ----

    NOTE: Identity matters (two unplaced workers are never interchangeable), so equality is by object identity.
    The owner is only referenced by its id, the Player owns the Worker and not the other way around.
    """

    id: str
    owner_id: str
    position: Optional[Position] = None

    def __repr__(self) -> str:
        return f"Worker({self.id!r}, at={self.position})"

    def is_placed(self) -> bool:
        return self.position is not None


@dataclass(eq=False)
class Player:
    id: str
    workers: tuple[Worker, ...] = field(default_factory=tuple)

    @classmethod
    def with_workers(cls, player_id: str) -> Self:
        """Workers are created together with their player: 'A' gets 'A1' and 'A2'."""
        workers = tuple(
            Worker(f"{player_id}{index}", player_id)
            for index in range(1, WORKERS_PER_PLAYER + 1)
        )
        return cls(player_id, workers)

    def worker(self, worker_id: str) -> Optional[Worker]:
        return next((worker for worker in self.workers if worker.id == worker_id), None)

    def owns(self, worker: Worker) -> bool:
        return worker.owner_id == self.id
