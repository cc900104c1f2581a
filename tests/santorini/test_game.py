"""Unit tests for /src/santorini/game.py"""

import pytest

from src.core.exceptions import (
    IllegalPhaseError,
    NotYourTurnError,
    UnknownCardError,
    UnknownPlayerError,
    WrongWorkerError,
)
from src.core.shared_types import GamePhase, PlayerAction
from src.santorini.cards import Demeter
from src.santorini.game import ALLOWED_TRANSITIONS, Game
from src.santorini.position import Position
from src.santorini.power_card import NO_CARD_NAME, PowerCard

# Layouts are read top (y=0) to bottom, one character per column (x=0 first)
ALL_DOMES_BUT_CORNERS = "0DDD0/DDDDD/DDDDD/DDDDD/0DDD0"
PLAYER_A_WALLED_IN = "0DDD0/DDDDD/00000/00000/00000"


def assert_consistent(game: Game) -> None:
    for player in game.players:
        for worker in player.workers:
            if worker.position is None:
                assert game.board.position_of(worker) is None
                continue
            assert game.board.occupant(worker.position) is worker
            assert game.board.position_of(worker) == worker.position


# -- CREATION LOGIC ---
def test_new_game() -> None:
    game = Game.new_game()
    assert game.phase == GamePhase.INITIALIZE
    assert [player.id for player in game.players] == ["A", "B"]
    assert game.current_player.id == "A"
    assert game.current_worker is not None and game.current_worker.id == "A1"
    assert game.winner is None
    assert game.cards == {}
    assert all(not worker.is_placed() for player in game.players for worker in player.workers)


# -- CARD SELECTION ---
def test_select_cards_starts_placement() -> None:
    game = Game.new_game()
    game.select_card("A", "Apollo")
    assert game.phase == GamePhase.INITIALIZE
    game.select_card("B", None)
    assert game.phase == GamePhase.PLACE_WORKER
    assert game.card_for("A").name == "Apollo"
    assert game.card_for("B").name == NO_CARD_NAME


def test_reselecting_card_overwrites_choice() -> None:
    game = Game.new_game()
    game.select_card("A", "Apollo")
    game.select_card("A", "Pan")
    assert game.card_for("A").name == "Pan"
    assert game.phase == GamePhase.INITIALIZE


def test_select_card_unknown_player() -> None:
    with pytest.raises(UnknownPlayerError):
        Game.new_game().select_card("C", "Apollo")


def test_select_unknown_card() -> None:
    game = Game.new_game()
    with pytest.raises(UnknownCardError):
        game.select_card("A", "Zeus")
    assert "A" not in game.cards


def test_select_card_after_placement_started(game_factory) -> None:
    game = Game.new_game()
    game.place_worker("A1", 0, 0)
    with pytest.raises(IllegalPhaseError):
        game.select_card("A", "Apollo")

    with pytest.raises(IllegalPhaseError):
        game_factory().select_card("B", "Pan")


# -- PLACEMENT ---
def test_play_without_selecting_cards() -> None:
    """Placing the first worker without cards: everybody plays with the base rules"""
    game = Game.new_game()
    assert game.place_worker("A1", 0, 0)
    assert game.phase == GamePhase.PLACE_WORKER
    assert isinstance(game.cards["A"], PowerCard)
    assert game.cards["A"].name == NO_CARD_NAME
    assert game.cards["B"].name == NO_CARD_NAME


def test_placement_order_and_start_of_first_turn() -> None:
    game = Game.new_game()
    game.select_card("A", None)
    game.select_card("B", None)

    expected_next = [("A", "A2"), ("B", "B1"), ("B", "B2")]
    for worker_id, (x, y), (player_id, next_worker) in zip(
        ("A1", "A2", "B1"), ((0, 0), (4, 0), (0, 4)), expected_next
    ):
        assert game.place_worker(worker_id, x, y)
        assert game.phase == GamePhase.PLACE_WORKER
        assert game.current_player.id == player_id
        assert game.current_worker is not None and game.current_worker.id == next_worker

    assert game.place_worker("B2", 4, 4)
    assert game.phase == GamePhase.MOVE
    assert game.current_action == PlayerAction.MOVE
    assert game.current_player.id == "A"
    assert game.current_worker is None
    assert_consistent(game)


@pytest.mark.parametrize("worker_id", ["A2", "B1", "B2"])
def test_place_worker_out_of_order(worker_id: str) -> None:
    game = Game.new_game()
    with pytest.raises(WrongWorkerError):
        game.place_worker(worker_id, 0, 0)
    assert game.phase == GamePhase.INITIALIZE


def test_place_unknown_worker() -> None:
    with pytest.raises(WrongWorkerError):
        Game.new_game().place_worker("C1", 0, 0)


def test_failed_placement_changes_nothing() -> None:
    game = Game.new_game()
    assert not game.place_worker("A1", 5, 0)
    assert game.phase == GamePhase.INITIALIZE
    assert game.cards == {}

    assert game.place_worker("A1", 0, 0)
    assert not game.place_worker("A2", 0, 0)
    assert game.current_worker is not None and game.current_worker.id == "A2"
    assert not game.players[0].workers[1].is_placed()


def test_place_worker_after_placement(game_factory) -> None:
    game = game_factory()
    with pytest.raises(IllegalPhaseError):
        game.place_worker("A1", 2, 2)


# -- WORKER SELECTION ---
def test_select_worker(game_factory) -> None:
    game = game_factory()
    assert game.select_worker("A1", "A")
    assert game.current_worker is game.players[0].workers[0]
    # changing your mind before moving is fine
    assert game.select_worker("A2", "A")
    assert game.current_worker is game.players[0].workers[1]


def test_select_worker_during_placement() -> None:
    game = Game.new_game()
    with pytest.raises(IllegalPhaseError):
        game.select_worker("A1", "A")


def test_select_worker_not_your_turn(game_factory) -> None:
    with pytest.raises(NotYourTurnError):
        game_factory().select_worker("B1", "B")


@pytest.mark.parametrize("worker_id", ["B1", "X9"])
def test_select_wrong_worker(game_factory, worker_id: str) -> None:
    game = game_factory()
    with pytest.raises(WrongWorkerError):
        game.select_worker(worker_id, "A")
    assert game.current_worker is None


def test_select_worker_after_move(game_factory) -> None:
    game = game_factory()
    game.select_worker("A1", "A")
    assert game.move(1, 1)
    with pytest.raises(IllegalPhaseError):
        game.select_worker("A2", "A")


# -- MOVE / BUILD ---
def test_move_without_selected_worker(game_factory) -> None:
    with pytest.raises(IllegalPhaseError):
        game_factory().move(1, 1)


def test_build_before_moving(game_factory) -> None:
    game = game_factory()
    game.select_worker("A1", "A")
    with pytest.raises(IllegalPhaseError):
        game.build(1, 1)


def test_move_twice(game_factory) -> None:
    game = game_factory()
    game.select_worker("A1", "A")
    assert game.move(1, 1)
    with pytest.raises(IllegalPhaseError):
        game.move(2, 2)


@pytest.mark.parametrize(
    "target",
    [(2, 2), (0, 0), (-1, 0), (1, 0)],  # too far, own square, off the board, two levels up
)
def test_illegal_move_is_rejected(game_factory, target: tuple[int, int]) -> None:
    game = game_factory(layout="02000/00000/00000/00000/00000")
    game.select_worker("A1", "A")
    assert not game.move(*target)
    assert game.phase == GamePhase.MOVE
    assert game.players[0].workers[0].position == Position(0, 0)


def test_illegal_build_is_rejected(game_factory) -> None:
    game = game_factory()
    game.select_worker("A1", "A")
    game.move(1, 1)
    assert not game.build(3, 3)
    assert not game.build(1, 1)
    assert game.phase == GamePhase.BUILD
    assert game.current_player.id == "A"




def test_full_turn_hands_over(game_factory) -> None:
    game = game_factory()
    game.select_worker("A2", "A")
    assert game.move(3, 1)
    # the square A2 just left is free to build on
    assert game.build(4, 0)
    assert game.board.tower(Position(4, 0)).level == 1
    assert game.phase == GamePhase.MOVE
    assert game.current_action == PlayerAction.MOVE
    assert game.current_player.id == "B"
    assert game.current_worker is None

    with pytest.raises(NotYourTurnError):
        game.select_worker("A1", "A")
    assert game.select_worker("B1", "B")
    assert game.move(1, 3)
    assert game.build(1, 2)
    assert game.current_player.id == "A"
    assert_consistent(game)


# -- END TO END ---
def test_scenario_placement_without_cards() -> None:
    game = Game.new_game()
    for worker_id, (x, y) in zip(("A1", "A2", "B1", "B2"), ((0, 0), (1, 0), (3, 4), (4, 4))):
        assert game.place_worker(worker_id, x, y)
        if worker_id == "A1":
            assert game.phase == GamePhase.PLACE_WORKER
    assert game.phase == GamePhase.MOVE
    assert game.current_player.id == "A"


def test_scenario_move_then_build(game_factory) -> None:
    game = game_factory(placement=((2, 2), (4, 0), (0, 4), (4, 4)))
    assert game.select_worker("A1", "A")
    assert game.move(3, 2)
    assert game.players[0].workers[0].position == Position(3, 2)
    assert game.phase == GamePhase.BUILD
    assert game.build(3, 1)
    assert game.board.tower(Position(3, 1)).level == 1


def test_scenario_minotaur_push(game_factory) -> None:
    game = game_factory(card_a="Minotaur", placement=((1, 1), (4, 0), (1, 2), (4, 4)))
    game.select_worker("A1", "A")
    assert game.move(1, 2)
    attacker = game.find_worker("A1")
    opponent = game.find_worker("B1")
    assert attacker.position == Position(1, 2)
    assert opponent.position == Position(1, 3)
    assert game.phase == GamePhase.BUILD
    assert_consistent(game)


def test_scenario_hephaestus_builds_twice_on_same_square(game_factory) -> None:
    game = game_factory(card_a="Hephaestus", placement=((1, 1), (4, 0), (0, 4), (4, 4)))
    game.select_worker("A1", "A")
    assert game.move(1, 0)

    assert game.build(0, 0)
    assert game.board.tower(Position(0, 0)).level == 1
    assert game.phase == GamePhase.SECOND_BUILD
    assert game.current_action == PlayerAction.BUILD

    assert not game.build(0, 1)
    assert game.phase == GamePhase.SECOND_BUILD
    assert game.board.tower(Position(0, 1)).level == 0

    assert game.build(0, 0)
    assert game.board.tower(Position(0, 0)).level == 2
    assert game.phase == GamePhase.MOVE
    assert game.current_player.id == "B"


def test_scenario_pan_wins_by_dropping(game_factory) -> None:
    game = game_factory(card_a="Pan", layout="31000/00000/00000/00000/00000")
    game.select_worker("A1", "A")
    assert game.move(1, 0)
    assert game.phase == GamePhase.GAME_OVER
    assert game.is_over
    assert game.winner_id == "A"
    assert game.current_action is None


# -- POWER CARDS IN PLAY ---
def test_apollo_swap_in_game(game_factory) -> None:
    game = game_factory(card_a="Apollo", placement=((1, 1), (4, 0), (1, 2), (4, 4)))
    game.select_worker("A1", "A")
    assert game.move(1, 2)
    assert game.find_worker("A1").position == Position(1, 2)
    assert game.find_worker("B1").position == Position(1, 1)
    assert game.phase == GamePhase.BUILD
    assert_consistent(game)


def test_without_card_occupied_square_is_off_limits(game_factory) -> None:
    game = game_factory(placement=((1, 1), (4, 0), (1, 2), (4, 4)))
    game.select_worker("A1", "A")
    assert not game.move(1, 2)
    assert game.find_worker("B1").position == Position(1, 2)


def test_minotaur_push_onto_third_level_does_not_win(game_factory) -> None:
    game = game_factory(
        card_a="Minotaur",
        placement=((1, 1), (4, 0), (1, 2), (4, 4)),
        layout="00000/00000/00000/03000/00000",
    )
    game.select_worker("A1", "A")
    assert game.move(1, 2)
    assert game.find_worker("B1").position == Position(1, 3)
    assert not game.is_over
    assert game.winner is None


def test_minotaur_blocked_push_is_rejected(game_factory) -> None:
    game = game_factory(card_a="Minotaur", placement=((1, 1), (4, 0), (1, 2), (1, 3)))
    game.select_worker("A1", "A")
    assert not game.move(1, 2)
    assert game.phase == GamePhase.MOVE
    assert_consistent(game)


def test_demeter_second_build_and_skip(game_factory) -> None:
    game = game_factory(card_a="Demeter", placement=((1, 1), (4, 0), (0, 4), (4, 4)))
    game.select_worker("A1", "A")
    game.move(1, 0)
    assert game.build(0, 0)
    assert game.phase == GamePhase.SECOND_BUILD
    assert not game.build(0, 0)
    assert game.skip_second_build()
    assert game.phase == GamePhase.MOVE
    assert game.current_player.id == "B"

    card = game.cards["A"]
    assert isinstance(card, Demeter)
    assert not card.has_built_once
    assert card.last_build_position is None


def test_demeter_second_build_elsewhere(game_factory) -> None:
    game = game_factory(card_a="Demeter", placement=((1, 1), (4, 0), (0, 4), (4, 4)))
    game.select_worker("A1", "A")
    game.move(1, 0)
    game.build(0, 0)
    assert game.build(0, 1)
    assert game.board.tower(Position(0, 0)).level == 1
    assert game.board.tower(Position(0, 1)).level == 1
    assert game.current_player.id == "B"


def test_nothing_to_skip(game_factory) -> None:
    game = game_factory(card_a="Demeter")
    assert not game.skip_second_build()
    game.select_worker("A1", "A")
    game.move(1, 1)
    assert not game.skip_second_build()
    assert game.phase == GamePhase.BUILD


def test_base_rules_offer_no_second_build(game_factory) -> None:
    game = game_factory()
    game.select_worker("A1", "A")
    game.move(1, 1)
    game.build(2, 2)
    assert game.phase == GamePhase.MOVE
    assert game.current_player.id == "B"


# -- WINNING / ENDING THE GAME ---
def test_climbing_to_third_level_wins(game_factory) -> None:
    game = game_factory(layout="23000/00000/00000/00000/00000")
    game.select_worker("A1", "A")
    assert game.move(1, 0)
    assert game.is_over
    assert game.winner_id == "A"


def test_apollo_wins_by_climbing(game_factory) -> None:
    game = game_factory(
        card_a="Apollo",
        placement=((0, 0), (4, 0), (1, 0), (4, 4)),
        layout="23000/00000/00000/00000/00000",
    )
    game.select_worker("A1", "A")
    assert game.move(1, 0)
    assert game.find_worker("B1").position == Position(0, 0)
    assert game.winner_id == "A"


def test_tie_when_nobody_can_act(game_factory) -> None:
    game = game_factory(layout=ALL_DOMES_BUT_CORNERS)
    assert game.is_over
    assert game.winner is None
    assert game.current_action is None


def test_stuck_player_does_not_lose_at_start(game_factory) -> None:
    """Only a win or a tie ends the game. Player A is walled in, B could still play."""
    game = game_factory(layout=PLAYER_A_WALLED_IN)
    assert not game.is_over
    assert game.winner is None
    assert game.phase == GamePhase.MOVE
    assert game.current_player.id == "A"
    assert game.legal_moves(game.find_worker("A1")) == []
    assert game.legal_builds(game.find_worker("A2")) == []


def test_stuck_opponent_does_not_hand_out_a_win(game_factory) -> None:
    """A's dome on (1, 3) takes away the last square B could build on"""
    game = game_factory(
        placement=((2, 2), (4, 0), (0, 4), (4, 4)),
        layout="00000/00000/00000/D30DD/0D0D0",
    )
    game.select_worker("A1", "A")
    assert game.move(2, 3)
    assert game.build(1, 3)
    assert game.board.tower(Position(1, 3)).domed
    assert not game.is_over
    assert game.winner is None
    assert game.current_player.id == "B"
    assert game.phase == GamePhase.MOVE


def test_no_actions_after_game_over(game_factory) -> None:
    game = game_factory(layout="23000/00000/00000/00000/00000")
    game.select_worker("A1", "A")
    game.move(1, 0)

    with pytest.raises(IllegalPhaseError):
        game.select_worker("B1", "B")
    with pytest.raises(IllegalPhaseError):
        game.move(2, 0)
    with pytest.raises(IllegalPhaseError):
        game.build(2, 0)
    with pytest.raises(IllegalPhaseError):
        game.skip_second_build()
    with pytest.raises(IllegalPhaseError):
        game.place_worker("A1", 2, 2)
    with pytest.raises(IllegalPhaseError):
        game.select_card("A", "Pan")


# -- STATE MACHINE ---
def test_game_over_is_final() -> None:
    assert ALLOWED_TRANSITIONS[GamePhase.GAME_OVER] == frozenset()


@pytest.mark.parametrize(
    "origin, target",
    [
        (GamePhase.INITIALIZE, GamePhase.MOVE),
        (GamePhase.PLACE_WORKER, GamePhase.BUILD),
        (GamePhase.MOVE, GamePhase.SECOND_BUILD),
        (GamePhase.GAME_OVER, GamePhase.MOVE),
    ],
)
def test_illegal_phase_change(origin: GamePhase, target: GamePhase) -> None:
    game = Game.new_game()
    game.phase = origin
    with pytest.raises(IllegalPhaseError):
        game._change_phase(target)
    assert game.phase == origin


# -- READ MODEL ---
def test_model_during_placement() -> None:
    game = Game.new_game()
    game.select_card("A", "Apollo")
    model = game.to_model()
    assert model.phase == GamePhase.INITIALIZE
    assert model.current_player == "A"
    assert model.current_worker == "A1"
    assert model.winner is None
    assert model.legal_moves == []
    assert model.legal_builds == []
    assert [(player.id, player.card) for player in model.players] == [
        ("A", "Apollo"),
        ("B", NO_CARD_NAME),
    ]


def test_model_board(game_factory) -> None:
    game = game_factory(layout="000D0/00000/00000/00000/20000")
    model = game.to_model()
    assert len(model.board) == 5
    assert all(len(row) == 5 for row in model.board)

    corner = model.board[0][0]
    assert (corner.x, corner.y) == (0, 0)
    assert corner.occupied
    assert corner.worker_id == "A1"
    assert corner.owner_id == "A"

    dome = model.board[0][3]
    assert dome.dome and dome.level == 3
    assert dome.worker_id is None and not dome.occupied

    tower = model.board[4][0]
    assert (tower.x, tower.y, tower.level) == (0, 4, 2)
    assert tower.worker_id == "B1"

    workers = {worker.id: worker.position for player in model.players for worker in player.workers}
    assert workers == {
        "A1": Position(0, 0),
        "A2": Position(4, 0),
        "B1": Position(0, 4),
        "B2": Position(4, 4),
    }


def test_model_legal_moves_and_builds(game_factory) -> None:
    game = game_factory(layout="02000/00000/00000/00000/00000")
    assert game.to_model().legal_moves == []

    game.select_worker("A1", "A")
    model = game.to_model()
    assert model.current_worker == "A1"
    assert model.legal_moves == [Position(0, 1), Position(1, 1)]
    assert model.legal_builds == [Position(1, 0), Position(0, 1), Position(1, 1)]

    game.move(1, 1)
    model = game.to_model()
    assert model.current_action == PlayerAction.BUILD
    assert Position(0, 0) in model.legal_builds
    assert len(model.legal_builds) == 8


def test_model_legal_moves_with_card(game_factory) -> None:
    game = game_factory(card_a="Apollo", placement=((0, 0), (4, 0), (1, 0), (4, 4)))
    game.select_worker("A1", "A")
    assert game.to_model().legal_moves == [Position(0, 1), Position(1, 1), Position(1, 0)]


def test_model_second_build_options(game_factory) -> None:
    game = game_factory(card_a="Hephaestus", placement=((1, 1), (4, 0), (0, 4), (4, 4)))
    game.select_worker("A1", "A")
    game.move(1, 0)
    game.build(0, 0)
    assert game.to_model().legal_builds == [Position(0, 0)]
