"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Callable, Optional

import pytest

from src.santorini.board import Board
from src.santorini.game import Game

EMPTY_LAYOUT = "/".join(["00000"] * 5)

# Workers in placement order: A1, A2, B1, B2
DEFAULT_PLACEMENT: tuple[tuple[int, int], ...] = ((0, 0), (4, 0), (0, 4), (4, 4))

GameFactory = Callable[..., Game]


@pytest.fixture
def game_factory() -> GameFactory:
    """Call the inner function to get a game that is ready for player A's first move."""

    def _create_game(
        card_a: Optional[str] = None,
        card_b: Optional[str] = None,
        placement: tuple[tuple[int, int], ...] = DEFAULT_PLACEMENT,
        layout: str = EMPTY_LAYOUT,
    ) -> Game:
        game = Game.new_game()
        game.board = Board.from_layout(layout)
        game.select_card("A", card_a)
        game.select_card("B", card_b)
        for worker_id, (x, y) in zip(("A1", "A2", "B1", "B2"), placement):
            assert game.place_worker(worker_id, x, y)
        return game

    return _create_game
