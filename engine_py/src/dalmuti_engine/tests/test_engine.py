"""
Tests for the game state machine: dealing, plays, passes and completion.
"""

import pytest
from dalmuti_engine.bots import choose_action
from dalmuti_engine.constants import (
    JOKER, PHASE_FINISHED, PHASE_PLAYING, PHASE_TAX, TITLE_GREATER_DALMUTI,
    TITLE_GREATER_PEON, TITLE_LESSER_DALMUTI
)
from dalmuti_engine.engine import create_game, next_player_index, pass_turn, play_cards
from dalmuti_engine.errors import (
    ALREADY_FINISHED, ILLEGAL_PLAY, INVALID_STATE, NOT_FOUND, NOT_YOUR_TURN, GameError
)
from dalmuti_engine.models import GameOptions, Player
from dalmuti_engine.tests.helpers import cards_of, make_game


def players(count):
    return [Player(id=f"p{i}", name=f"Player {i}") for i in range(count)]


def test_create_game_deals_sorted_hands():
    game = create_game(players(4), "room", GameOptions(enable_tax=False), seed=42)

    assert game.phase == PHASE_PLAYING
    assert game.current_player_index == 0
    assert game.current_turn is None
    assert sum(len(p.cards) for p in game.players) == 80
    for player in game.players:
        values = [0 if c.rank == JOKER else c.rank for c in player.cards]
        assert values == sorted(values)


def test_create_game_does_not_touch_room_players():
    members = players(3)
    create_game(members, "room", GameOptions(), seed=1)
    assert all(p.cards == [] for p in members)


def test_create_game_with_tax_starts_in_tax_phase():
    game = create_game(players(4), "room", GameOptions(enable_tax=True), seed=42)

    assert game.phase == PHASE_TAX
    assert not game.tax_phase_complete
    assert len(game.pending_tax) == 2


def test_create_game_records_clock_only_with_time_limit():
    assert create_game(players(2), "room", GameOptions(enable_tax=False), seed=1).turn_start_time is None
    timed = create_game(players(2), "room", GameOptions(enable_tax=False, turn_time_limit=30), seed=1)
    assert timed.turn_start_time is not None


def test_play_cards_moves_turn_and_table():
    game = make_game([cards_of(5, 2) + cards_of(9, 1), cards_of(3, 2), cards_of(12, 2)])

    updated = play_cards(game, "p0", cards_of(5, 2))

    assert [c.id for c in updated.players[0].cards] == ["9-0"]
    assert updated.current_turn.player_id == "p0"
    assert [c.id for c in updated.current_turn.cards] == ["5-0", "5-1"]
    assert updated.current_player_index == 1
    assert updated.pass_count == 0
    assert len(updated.turn_history) == 1
    assert updated.version == game.version + 1


def test_transitions_do_not_mutate_input():
    game = make_game([cards_of(5, 2), cards_of(3, 2)])

    play_cards(game, "p0", cards_of(5, 1))

    assert len(game.players[0].cards) == 2
    assert game.current_turn is None
    assert game.version == 0


def test_play_rejects_wrong_player():
    game = make_game([cards_of(5, 1), cards_of(3, 1)])

    with pytest.raises(GameError) as exc:
        play_cards(game, "p1", cards_of(3, 1))
    assert exc.value.code == NOT_YOUR_TURN


def test_play_rejects_unknown_player():
    game = make_game([cards_of(5, 1), cards_of(3, 1)])

    with pytest.raises(GameError) as exc:
        play_cards(game, "ghost", cards_of(3, 1))
    assert exc.value.code == NOT_FOUND


def test_play_rejects_outside_play_phase():
    game = make_game([cards_of(5, 1), cards_of(3, 1)], phase=PHASE_TAX)

    with pytest.raises(GameError) as exc:
        play_cards(game, "p0", cards_of(5, 1))
    assert exc.value.code == INVALID_STATE


def test_play_rejects_finished_player():
    game = make_game([[], cards_of(3, 1), cards_of(4, 1)])
    game.players[0].has_finished = True
    game.players[0].finish_order = 1
    game.finished_players = ["p0"]

    with pytest.raises(GameError) as exc:
        pass_turn(game, "p0")
    assert exc.value.code == ALREADY_FINISHED


def test_play_rejects_cards_not_in_hand():
    game = make_game([cards_of(5, 1), cards_of(3, 1)])

    with pytest.raises(GameError) as exc:
        play_cards(game, "p0", cards_of(3, 1))
    assert exc.value.code == ILLEGAL_PLAY


def test_play_rejects_same_card_twice():
    game = make_game([cards_of(5, 2), cards_of(3, 1)])

    with pytest.raises(GameError) as exc:
        play_cards(game, "p0", cards_of(5, 1) + cards_of(5, 1))
    assert exc.value.code == ILLEGAL_PLAY


def test_pass_counts_and_clears_table():
    game = make_game([cards_of(5, 2), cards_of(3, 2), cards_of(12, 2)])
    game = play_cards(game, "p0", cards_of(5, 1))

    game = pass_turn(game, "p1")
    assert game.pass_count == 1
    assert game.current_turn is not None
    assert game.current_player.id == "p2"

    game = pass_turn(game, "p2")
    assert game.pass_count == 0
    assert game.current_turn is None
    # The last player to play leads the next trick
    assert game.current_player.id == "p0"


def test_pass_on_empty_table_is_allowed():
    game = make_game([cards_of(5, 1), cards_of(3, 1)])

    updated = pass_turn(game, "p0")

    assert updated.current_player.id == "p1"
    assert updated.current_turn is None


def test_finished_players_are_skipped():
    game = make_game([[], cards_of(3, 1), cards_of(4, 1)])
    game.players[0].has_finished = True

    assert next_player_index(game, 2) == 1
    assert next_player_index(game, 1) == 2


def test_game_runs_to_completion_with_titles():
    game = make_game([cards_of(1, 1), cards_of(5, 1), cards_of(7, 1) + cards_of(8, 1)])

    game = play_cards(game, "p0", cards_of(1, 1))
    assert game.players[0].has_finished
    assert game.players[0].finish_order == 1
    assert game.phase == PHASE_PLAYING
    assert game.current_player.id == "p1"

    # Nobody beats a 1, so the table clears after one pass
    game = pass_turn(game, "p1")
    assert game.current_turn is None
    assert game.current_player.id == "p2"

    game = play_cards(game, "p2", cards_of(7, 1))
    assert game.current_player.id == "p1"

    game = play_cards(game, "p1", cards_of(5, 1))
    assert game.phase == PHASE_FINISHED
    assert game.finished_players == ["p0", "p1"]
    assert game.players[1].finish_order == 2
    assert game.players[2].finish_order is None
    assert [p.title for p in game.players] == [
        TITLE_GREATER_DALMUTI, TITLE_LESSER_DALMUTI, TITLE_GREATER_PEON
    ]


def test_eight_card_play_toggles_revolution_and_resorts_hand():
    options = GameOptions(enable_tax=False, enable_revolution=True)
    game = make_game(
        [cards_of(11, 8) + cards_of(3, 1) + cards_of(5, 1), cards_of(12, 8) + cards_of(2, 1)],
        options=options,
    )

    game = play_cards(game, "p0", cards_of(11, 8))
    assert game.is_revolution
    assert [c.rank for c in game.players[0].cards] == [5, 3]

    # In revolution the higher rank wins, and a second revolution ends it
    game = play_cards(game, "p1", cards_of(12, 8))
    assert not game.is_revolution


def test_revolution_disabled_by_option():
    options = GameOptions(enable_tax=False, enable_revolution=False)
    game = make_game([cards_of(11, 8) + cards_of(3, 1), cards_of(2, 1)], options=options)

    game = play_cards(game, "p0", cards_of(11, 8))

    assert not game.is_revolution


def test_jacks_then_tens_scenario():
    """Three Jacks are answered with three 10s and the table clears around to the 10s."""
    game = create_game(players(4), "room", GameOptions(enable_tax=False), seed=1234)
    hands = {
        "p0": cards_of(11, 3) + cards_of(5, 1),
        "p1": cards_of(12, 3) + cards_of(10, 3),
        "p2": cards_of(9, 2),
        "p3": cards_of(8, 2),
    }
    for player in game.players:
        player.cards = hands[player.id]

    game = play_cards(game, "p0", cards_of(11, 3))
    assert game.current_player.id == "p1"

    with pytest.raises(GameError) as exc:
        play_cards(game, "p1", cards_of(12, 2))
    assert exc.value.code == ILLEGAL_PLAY
    assert "exactly 3" in exc.value.message

    with pytest.raises(GameError) as exc:
        play_cards(game, "p1", cards_of(12, 3))
    assert exc.value.code == ILLEGAL_PLAY

    game = play_cards(game, "p1", cards_of(10, 3))
    for player_id in ("p2", "p3", "p0"):
        game = pass_turn(game, player_id)

    assert game.current_turn is None
    assert game.pass_count == 0
    assert game.current_player.id == "p1"


@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
def test_bot_games_keep_turn_invariants(seed):
    game = create_game(players(5), "room", GameOptions(enable_tax=False), seed=seed)
    difficulties = ["easy", "medium", "hard", "medium", "easy"]

    for _ in range(5000):
        if game.phase == PHASE_FINISHED:
            break
        player = game.current_player
        assert not player.has_finished

        action = choose_action(game, player.id, difficulties[game.current_player_index])
        if action.is_pass:
            game = pass_turn(game, player.id)
        else:
            game = play_cards(game, player.id, action.cards)

        active = sum(1 for p in game.players if not p.has_finished)
        assert game.pass_count <= max(active - 1, 0)

    assert game.phase == PHASE_FINISHED
    orders = [p.finish_order for p in game.players if p.finish_order is not None]
    assert sorted(orders) == list(range(1, len(game.players)))
    assert sum(1 for p in game.players if not p.has_finished) == 1
