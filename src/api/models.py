"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import GamePhase, PlayerAction
from src.santorini.cards import AVAILABLE_CARD_NAMES, is_no_card
from src.santorini.pieces import PLAYER_IDS

PlayerId = str
WorkerId = str


# --- REQUEST MODELS ---
class SelectCardRequest(BaseModel):
    player_id: PlayerId
    card: Optional[str] = None

    @field_validator("player_id")
    @classmethod
    def validate_player_id(cls, value: str) -> str:
        if value not in PLAYER_IDS:
            raise InvalidRequestError(
                f"Unknown player: {value!r}. Pick one from {', '.join(PLAYER_IDS)}."
            )
        return value

    @field_validator("card")
    @classmethod
    def validate_card(cls, value: Optional[str]) -> Optional[str]:
        if is_no_card(value):
            return None

        assert value is not None
        if value.strip().lower() not in [name.lower() for name in AVAILABLE_CARD_NAMES]:
            raise InvalidRequestError(
                f"Unknown power card: {value!r}. Pick one from {', '.join(AVAILABLE_CARD_NAMES)}."
            )
        return value.strip()


class PositionRequest(BaseModel):
    """Coordinates are not checked against the board here: an off-board square is a rejected action, not a bad request."""

    x: int
    y: int


class PlaceWorkerRequest(PositionRequest):
    worker_id: WorkerId


class SelectWorkerRequest(BaseModel):
    worker_id: WorkerId
    player_id: PlayerId

    @field_validator("worker_id")
    @classmethod
    def validate_worker_id(cls, value: str) -> str:
        def _is_worker_notation(value: str) -> bool:
            # ex) "A1": player id, then the worker's number
            return len(value) == 2 and value[0] in PLAYER_IDS and value[1].isnumeric()

        if not _is_worker_notation(value):
            raise InvalidRequestError(f"Cannot interpret worker_id: {value!r} as a worker.")
        return value


# --- RESPONSE MODELS ---
class PositionResponse(BaseModel):
    x: int
    y: int


class SquareResponse(BaseModel):
    x: int
    y: int
    level: int
    dome: bool
    occupied: bool
    worker_id: Optional[WorkerId] = None
    owner_id: Optional[PlayerId] = None


class WorkerResponse(BaseModel):
    worker_id: WorkerId
    position: Optional[PositionResponse]


class PlayerResponse(BaseModel):
    player_id: PlayerId
    card: str
    workers: list[WorkerResponse]


class GameStateResponse(BaseModel):
    game_id: UUID
    phase: GamePhase
    current_action: Optional[PlayerAction]
    current_player: PlayerId
    current_worker: Optional[WorkerId]
    winner: Optional[PlayerId]
    players: list[PlayerResponse]
    board: list[list[SquareResponse]]
    possible_moves: list[PositionResponse]
    possible_builds: list[PositionResponse]


class ActionResponse(BaseModel):
    """`accepted` is False when the rules rejected the action. The state is unchanged in that case."""

    accepted: bool
    state: GameStateResponse
