"""
Read model of a Game: everything a serialization layer needs, nothing it has to compute itself.
"""

from dataclasses import dataclass, field
from typing import Optional

from src.core.shared_types import GamePhase, PlayerAction
from src.santorini.position import Position


@dataclass
class SquareModel:
    x: int
    y: int
    level: int
    dome: bool
    worker_id: Optional[str] = None
    owner_id: Optional[str] = None

    @property
    def occupied(self) -> bool:
        return self.worker_id is not None


@dataclass
class WorkerModel:
    id: str
    position: Optional[Position]


@dataclass
class PlayerModel:
    id: str
    card: str
    workers: list[WorkerModel]


@dataclass
class GameStateModel:
    """Snapshot of a Game. Board rows are indexed by y, columns by x."""

    phase: GamePhase
    current_action: Optional[PlayerAction]
    current_player: str
    current_worker: Optional[str]
    winner: Optional[str]
    players: list[PlayerModel]
    board: list[list[SquareModel]]
    legal_moves: list[Position] = field(default_factory=list)
    legal_builds: list[Position] = field(default_factory=list)
