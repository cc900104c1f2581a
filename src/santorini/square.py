"""
A single cell of the board: the tower built on it and the worker standing on it (if any)
"""

from dataclasses import dataclass, field
from typing import Optional

from src.santorini.pieces import Worker
from src.santorini.tower import Tower


@dataclass
class Square:
    tower: Tower = field(default_factory=Tower)
    occupant: Optional[Worker] = None

    @property
    def level(self) -> int:
        return self.tower.level

    @property
    def domed(self) -> bool:
        return self.tower.domed

    def is_occupied(self) -> bool:
        return self.occupant is not None
