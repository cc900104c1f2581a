"""Buildings stacked on a single square of the board"""

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Three blocks, then only a dome fits on top.
MAX_LEVEL = 3


@dataclass
class Tower:
    level: int = 0
    domed: bool = False

    def can_add_level(self) -> bool:
        return self.level < MAX_LEVEL and not self.domed

    def can_add_dome(self) -> bool:
        return self.level == MAX_LEVEL and not self.domed

    def add_level(self) -> bool:
        if not self.can_add_level():
            logger.debug(
                "Cannot add a level to tower at level %d (domed=%s)", self.level, self.domed
            )
            return False
        self.level += 1
        return True

    def add_dome(self) -> bool:
        # NOTE: domed implies level == MAX_LEVEL, so a dome can only ever be placed once.
        if not self.can_add_dome():
            logger.debug(
                "Cannot place a dome on tower at level %d (domed=%s)", self.level, self.domed
            )
            return False
        self.domed = True
        return True
