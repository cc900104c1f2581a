"""Orchestration of communication from API router to the rules engine (and the reverse direction)."""

import logging
from typing import Optional
from uuid import UUID, uuid4

from src.api.models import (
    ActionResponse,
    GameStateResponse,
    PlaceWorkerRequest,
    PlayerResponse,
    PositionRequest,
    PositionResponse,
    SelectCardRequest,
    SelectWorkerRequest,
    SquareResponse,
    WorkerResponse,
)
from src.core.exceptions import GameNotFoundError
from src.santorini.game import Game
from src.santorini.game_model import GameStateModel
from src.santorini.position import Position

logger = logging.getLogger(__name__)


class SantoriniService:
    """
    Orchestration of layers for a Santorini game.

    The engine defines one active game at a time: starting a new game replaces the previous one.
    NOTE: Not safe for concurrent callers. Requests for the same service must be serialized by the caller.
    """

    def __init__(self) -> None:
        self.game: Optional[Game] = None
        self.game_id: Optional[UUID] = None

    # -- API routes logic ---
    def new_game(self) -> GameStateResponse:
        """Start a fresh game (two players, two unplaced workers each)."""
        self.game = Game.new_game()
        self.game_id = uuid4()
        logger.info("Created game %s", self.game_id)
        return self._create_game_response()

    def get_game_state(self) -> GameStateResponse:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by frontend to check when it is the player's turn for instance.
        """
        self._fetch_game()
        return self._create_game_response()

    def select_card(self, request: SelectCardRequest) -> GameStateResponse:
        """Player picked a power card (or none). Errors propagate: selecting outside of the first phase is a client bug."""
        game = self._fetch_game()
        game.select_card(request.player_id, request.card)
        return self._create_game_response()

    def place_worker(self, request: PlaceWorkerRequest) -> ActionResponse:
        game = self._fetch_game()
        accepted = game.place_worker(request.worker_id, request.x, request.y)
        return self._create_action_response(accepted)

    def select_worker(self, request: SelectWorkerRequest) -> ActionResponse:
        game = self._fetch_game()
        accepted = game.select_worker(request.worker_id, request.player_id)
        return self._create_action_response(accepted)

    def move(self, request: PositionRequest) -> ActionResponse:
        game = self._fetch_game()
        accepted = game.move(request.x, request.y)
        return self._create_action_response(accepted)

    def build(self, request: PositionRequest) -> ActionResponse:
        game = self._fetch_game()
        accepted = game.build(request.x, request.y)
        return self._create_action_response(accepted)

    def skip_second_build(self) -> ActionResponse:
        game = self._fetch_game()
        accepted = game.skip_second_build()
        return self._create_action_response(accepted)

    # -- Internal helpers --
    def _fetch_game(self) -> Game:
        """Make sure there is an active game and raise error if there is none."""
        if self.game is None:
            raise GameNotFoundError("No active game. Start a new game first.")
        return self.game

    def _create_action_response(self, accepted: bool) -> ActionResponse:
        if not accepted:
            logger.info("Action rejected in game %s", self.game_id)
        return ActionResponse(accepted=accepted, state=self._create_game_response())

    def _create_game_response(self) -> GameStateResponse:
        """Convert the Game's read model into a GameStateResponse"""
        game = self._fetch_game()
        assert self.game_id is not None
        return to_response(self.game_id, game.to_model())


def _position_response(position: Position) -> PositionResponse:
    return PositionResponse(x=position.x, y=position.y)


def to_response(game_id: UUID, model: GameStateModel) -> GameStateResponse:
    """Read model (domain) --> response model (boundary)"""
    return GameStateResponse(
        game_id=game_id,
        phase=model.phase,
        current_action=model.current_action,
        current_player=model.current_player,
        current_worker=model.current_worker,
        winner=model.winner,
        players=[
            PlayerResponse(
                player_id=player.id,
                card=player.card,
                workers=[
                    WorkerResponse(
                        worker_id=worker.id,
                        position=_position_response(worker.position) if worker.position else None,
                    )
                    for worker in player.workers
                ],
            )
            for player in model.players
        ],
        board=[
            [
                SquareResponse(
                    x=square.x,
                    y=square.y,
                    level=square.level,
                    dome=square.dome,
                    occupied=square.occupied,
                    worker_id=square.worker_id,
                    owner_id=square.owner_id,
                )
                for square in row
            ]
            for row in model.board
        ],
        possible_moves=[_position_response(position) for position in model.legal_moves],
        possible_builds=[_position_response(position) for position in model.legal_builds],
    )
