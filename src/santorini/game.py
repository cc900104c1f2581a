"""
The Game class will be the entrypoint into the domain layer for the service layer.
It is responsible for orchestrating all the business logic required to play a turn of the board game:
it checks the phase / turn, consults the current player's power card, lets the Board do the mechanical update,
and then advances the phase / turn state machine.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Self

from src.core.exceptions import (
    IllegalPhaseError,
    InvalidBuildError,
    InvalidMoveError,
    NotYourTurnError,
    UnknownPlayerError,
    WrongWorkerError,
)
from src.core.shared_types import GamePhase, PlayerAction
from src.santorini.board import Board
from src.santorini.cards import create_card
from src.santorini.game_model import GameStateModel, PlayerModel, SquareModel, WorkerModel
from src.santorini.pieces import PLAYER_IDS, Player, Worker
from src.santorini.position import BOARD_DIMENSIONS, Position
from src.santorini.power_card import PowerCard

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: dict[GamePhase, frozenset[GamePhase]] = {
    GamePhase.INITIALIZE: frozenset({GamePhase.PLACE_WORKER}),
    GamePhase.PLACE_WORKER: frozenset({GamePhase.MOVE, GamePhase.GAME_OVER}),
    GamePhase.MOVE: frozenset({GamePhase.BUILD, GamePhase.GAME_OVER}),
    GamePhase.BUILD: frozenset(
        {GamePhase.SECOND_BUILD, GamePhase.MOVE, GamePhase.GAME_OVER}
    ),
    GamePhase.SECOND_BUILD: frozenset({GamePhase.MOVE, GamePhase.GAME_OVER}),
    GamePhase.GAME_OVER: frozenset(),
}

# Phases in which the current worker has legal moves / builds worth showing.
TURN_PHASES = (GamePhase.MOVE, GamePhase.BUILD, GamePhase.SECOND_BUILD)
BUILD_PHASES = (GamePhase.BUILD, GamePhase.SECOND_BUILD)


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    players: tuple[Player, Player]
    board: Board
    current_player: Player
    # During placement: the worker that must be placed next. Afterwards: the worker selected for this turn.
    current_worker: Optional[Worker]
    phase: GamePhase
    current_action: Optional[PlayerAction] = None
    winner: Optional[Player] = None
    cards: dict[str, PowerCard] = field(default_factory=dict)

    @classmethod
    def new_game(cls) -> Self:
        """Two fresh players, each with two unplaced workers. Cards have yet to be selected."""
        first, second = (Player.with_workers(player_id) for player_id in PLAYER_IDS)
        logger.info("New game started with players: %s and %s.", first.id, second.id)
        return cls(
            players=(first, second),
            board=Board(),
            current_player=first,
            current_worker=first.workers[0],
            phase=GamePhase.INITIALIZE,
        )

    @property
    def winner_id(self) -> Optional[str]:
        return self.winner.id if self.winner else None

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    def select_card(self, player_id: str, card_name: Optional[str]) -> None:
        """
        Assign a power card (or none) to a player.
        ----

        Once both players have an entry, the placement of workers starts.
        """
        if self.phase != GamePhase.INITIALIZE:
            raise IllegalPhaseError(
                f"Power cards can only be selected before the game starts. phase: {self.phase}"
            )
        player = self.find_player(player_id)
        self.cards[player.id] = create_card(card_name)
        logger.info("Player %s - power card: %s", player.id, self.cards[player.id].name)

        if all(player.id in self.cards for player in self.players):
            self._change_phase(GamePhase.PLACE_WORKER)

    def place_worker(self, worker_id: str, x: int, y: int) -> bool:
        """
        Place the next worker (A1, A2, B1, B2 in that order) on a free square.
        ----

        Placing the first worker without having selected cards means playing without cards.
        """
        if self.phase not in (GamePhase.INITIALIZE, GamePhase.PLACE_WORKER):
            raise IllegalPhaseError(f"Workers cannot be placed now. phase: {self.phase}")

        worker = self.find_worker(worker_id)
        if worker is not self.current_worker:
            expected = self.current_worker.id if self.current_worker else None
            raise WrongWorkerError(f"Worker {worker_id} cannot be placed now. Expected {expected}.")

        if not self.board.place_worker(worker, Position(x, y)):
            logger.info("Failed to place worker %s at %s.", worker_id, Position(x, y))
            return False

        if self.phase == GamePhase.INITIALIZE:
            self._assign_missing_cards()
            self._change_phase(GamePhase.PLACE_WORKER)

        self._determine_next_worker()
        return True

    def select_worker(self, worker_id: str, player_id: str) -> bool:
        """Choose the worker that will move and build this turn"""
        self._assert_phase(GamePhase.MOVE)
        self._assert_your_turn(player_id)

        worker = self.find_worker(worker_id)
        if not self.current_player.owns(worker):
            raise WrongWorkerError(f"Worker {worker_id} does not belong to player {player_id}.")

        self.current_worker = worker
        logger.info("Worker %s selected by player %s", worker_id, player_id)
        return True

    def move(self, x: int, y: int) -> bool:
        """
        Attempt to move the selected worker
        -----

        1. the card validates the target (the base rules, unless the card says otherwise)
        2. the card clears the way if the target is occupied (may abort)
        3. the board moves the worker
        4. the card does its after-move work
        5. win check: card specific first, then climbing to the third level by the worker's own move
        6. no win? --> build
        """
        self._assert_action(PlayerAction.MOVE, GamePhase.MOVE)
        worker = self._selected_worker()
        card = self._current_card()
        assert worker.position is not None
        origin = worker.position
        to = Position(x, y)

        if not card.modify_move_validation(worker, origin, to, self.board):
            logger.info("Move of %s from %s to %s rejected.", worker.id, origin, to)
            return False

        if self.board.is_occupied(to) and not card.pre_move_execution(
            worker, origin, to, self.board
        ):
            logger.info("Move of %s to %s aborted by %s.", worker.id, to, card.name)
            return False

        try:
            self.board.move_worker(worker, to)
        except InvalidMoveError as exc:
            logger.info(str(exc))
            return False

        card.post_move_execution(self, worker, origin, to)

        # NOTE: only the mover's own from / to are checked. A worker that got displaced never wins by it.
        if card.check_win_condition(
            worker, origin, to, self.board
        ) or self.board.climbed_to_third_alone(origin, to):
            self._declare_winner(self.current_player)
            return True

        self._change_phase(GamePhase.BUILD)
        self.current_action = PlayerAction.BUILD
        return True

    def build(self, x: int, y: int) -> bool:
        """Attempt to build with the worker that just moved. The card decides what happens afterwards."""
        self._assert_action(PlayerAction.BUILD, *BUILD_PHASES)
        worker = self._selected_worker()
        card = self._current_card()
        at = Position(x, y)

        if not card.modify_build_validation(worker, at, self.board):
            logger.info("Build at %s by %s rejected.", at, worker.id)
            return False

        try:
            built = self.board.build(worker, at)
        except InvalidBuildError as exc:
            logger.info(str(exc))
            return False
        if not built:
            return False

        card.post_build_execution(self, worker, at)
        return True

    def skip_second_build(self) -> bool:
        """Forgo the optional extra build some cards offer"""
        self._assert_not_over()
        if self.phase != GamePhase.SECOND_BUILD:
            logger.info("No second build to skip. phase: %s", self.phase)
            return False
        return self._current_card().skip_action(self)

    def legal_moves(self, worker: Worker) -> list[Position]:
        """
        Squares the worker could move to
        ----

        1. scan the 8 neighbors (row-major) and keep those passing the base movement rule
        2. let the owner's card add or remove candidates
        """
        origin = worker.position
        if origin is None:
            return []
        candidates = [
            neighbor
            for neighbor in origin.neighbors()
            if self.board.is_move_legal(worker, origin, neighbor)
        ]
        return self.card_for(worker.owner_id).modify_legal_moves(worker, candidates, self.board)

    def legal_builds(self, worker: Worker) -> list[Position]:
        """Same as legal_moves, for building"""
        origin = worker.position
        if origin is None:
            return []
        candidates = [
            neighbor
            for neighbor in origin.neighbors()
            if self.board.is_build_legal(worker, origin, neighbor)
        ]
        return self.card_for(worker.owner_id).modify_legal_builds(
            worker, candidates, self.board
        )

    # --- CALLED BY THE POWER CARDS ---
    def switch_turn(self) -> None:
        """End the turn: hand over to the opponent and fire their card's activation."""
        self._current_card().deactivate_effect(self)
        self.current_player = self.opponent_of(self.current_player)
        self.current_worker = None
        self._change_phase(GamePhase.MOVE)
        self.current_action = PlayerAction.MOVE
        logger.info("Turn of player %s", self.current_player.id)
        self._current_card().activate_effect(self)
        self._check_for_tie()

    def enter_second_build(self) -> None:
        """Offer a second build. The action stays BUILD."""
        self._change_phase(GamePhase.SECOND_BUILD)

    # --- LOOKUPS ---
    def find_player(self, player_id: str) -> Player:
        player = next((player for player in self.players if player.id == player_id), None)
        if player is None:
            raise UnknownPlayerError(f"Player {player_id!r} not found.")
        return player

    def find_worker(self, worker_id: str) -> Worker:
        for player in self.players:
            worker = player.worker(worker_id)
            if worker is not None:
                return worker
        raise WrongWorkerError(f"Worker {worker_id!r} not found.")

    def opponent_of(self, player: Player) -> Player:
        return self.players[1] if player is self.players[0] else self.players[0]

    def card_for(self, player_id: str) -> PowerCard:
        """Before the cards are selected, everybody plays by the base rules"""
        return self.cards.get(player_id) or PowerCard()

    # --- READ MODEL ---
    def to_model(self) -> GameStateModel:
        """Encode into a format the Service layer uses"""
        selected = self.current_worker if self.phase in TURN_PHASES else None
        return GameStateModel(
            phase=self.phase,
            current_action=self.current_action,
            current_player=self.current_player.id,
            current_worker=self.current_worker.id if self.current_worker else None,
            winner=self.winner_id,
            players=[
                PlayerModel(
                    id=player.id,
                    card=self.card_for(player.id).name,
                    workers=[WorkerModel(worker.id, worker.position) for worker in player.workers],
                )
                for player in self.players
            ],
            board=[
                [self._square_model(Position(x, y)) for x in range(BOARD_DIMENSIONS[0])]
                for y in range(BOARD_DIMENSIONS[1])
            ],
            legal_moves=self.legal_moves(selected) if selected else [],
            legal_builds=self.legal_builds(selected) if selected else [],
        )

    # -- PRIVATE HELPERS ---
    def _square_model(self, position: Position) -> SquareModel:
        square = self.board.square(position)
        occupant = square.occupant
        return SquareModel(
            x=position.x,
            y=position.y,
            level=square.level,
            dome=square.domed,
            worker_id=occupant.id if occupant else None,
            owner_id=occupant.owner_id if occupant else None,
        )

    def _current_card(self) -> PowerCard:
        return self.card_for(self.current_player.id)

    def _assign_missing_cards(self) -> None:
        for player in self.players:
            self.cards.setdefault(player.id, PowerCard())

    def _change_phase(self, new_phase: GamePhase) -> None:
        if new_phase not in ALLOWED_TRANSITIONS[self.phase]:
            raise IllegalPhaseError(f"Cannot go from phase {self.phase} to {new_phase}.")
        logger.debug("Phase change: %s -> %s", self.phase, new_phase)
        self.phase = new_phase

    def _assert_not_over(self) -> None:
        if self.is_over:
            raise IllegalPhaseError("The game is over.")

    def _assert_phase(self, *phases: GamePhase) -> None:
        self._assert_not_over()
        if self.phase not in phases:
            raise IllegalPhaseError(
                f"Not allowed in phase {self.phase}. Expected one of: {', '.join(phases)}."
            )

    def _assert_action(self, action: PlayerAction, *phases: GamePhase) -> None:
        self._assert_phase(*phases)
        if self.current_action != action:
            raise IllegalPhaseError(f"You should {self.current_action} now, not {action}.")

    def _assert_your_turn(self, player_id: str) -> None:
        if player_id != self.current_player.id:
            raise NotYourTurnError(
                f"It is not your turn. Waiting for player {self.current_player.id} to play first."
            )

    def _selected_worker(self) -> Worker:
        if self.current_worker is None:
            raise IllegalPhaseError("No worker has been selected.")
        return self.current_worker

    def _determine_next_worker(self) -> None:
        """Placement order is fixed: the first unplaced worker, player A before player B."""
        unplaced = [
            worker for player in self.players for worker in player.workers if not worker.is_placed()
        ]
        if unplaced:
            self.current_worker = unplaced[0]
            self.current_player = self.find_player(unplaced[0].owner_id)
            return

        # all workers placed: player A starts moving
        self.current_player = self.players[0]
        self.current_worker = None
        self._change_phase(GamePhase.MOVE)
        self.current_action = PlayerAction.MOVE
        logger.info("All workers placed. Turn of player %s", self.current_player.id)
        self._current_card().activate_effect(self)
        self._check_for_tie()

    # --- CHECKS FOR ENDING THE GAME ---
    def _can_act(self, player: Player) -> bool:
        """Any legal move or build for any of the player's workers (card adjusted)"""
        return any(
            self.legal_moves(worker) or self.legal_builds(worker) for worker in player.workers
        )

    def _check_for_tie(self) -> None:
        """
        Start of a turn: the game only ends here if neither player can move or build.
        A single stuck player does not lose, the game simply does not go on without them.
        """
        if any(self._can_act(player) for player in self.players):
            if not self._can_act(self.current_player):
                logger.info("Player %s cannot move or build.", self.current_player.id)
            return
        self._end_game()

    def _declare_winner(self, winner: Player) -> None:
        self.winner = winner
        self._end_game()

    def _end_game(self) -> None:
        self._current_card().deactivate_effect(self)
        self._change_phase(GamePhase.GAME_OVER)
        self.current_action = None
        if self.winner is not None:
            logger.info("Game is over. Winner is %s.", self.winner.id)
        else:
            logger.info("Game over due to a tie. No winner.")
