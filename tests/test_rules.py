"""Tests for rule configuration and move commands."""

import pytest
from conftest import StarterRandom, card_id, rig

from unorules.engine import (
    ChallengeShout,
    ChallengeWildDrawFour,
    ChooseColor,
    Color,
    DeclareShout,
    DrawCard,
    Game,
    PlayCard,
    Rules,
    apply_move,
    get_legal_moves,
)

A, B, C = "player_0", "player_1", "player_2"


def test_rules_defaults():
    rules = Rules()
    assert rules.stack_draw_two and rules.stack_draw_four
    assert rules.must_play_if_drawable
    assert not rules.allow_draw_when_playable
    assert rules.target_score == 500
    assert rules.shout_policy == "immediate"
    assert rules.fallback_wild_color is Color.RED
    assert rules.shout_challenge_window == 1
    assert not rules.seven_zero


@pytest.mark.parametrize(
    "kwargs",
    [
        {"shout_policy": "sometimes"},
        {"target_score": 0},
        {"hand_size": 0},
        {"shout_penalty": -1},
        {"shout_challenge_window": -1},
        {"fallback_wild_color": Color.WILD},
    ],
)
def test_rules_validation(kwargs):
    with pytest.raises(ValueError):
        Rules(**kwargs)


def test_rules_can_stack():
    rules = Rules(stack_draw_two=True, stack_draw_four=False)
    assert rules.can_stack("draw_two")
    assert not rules.can_stack("wild_draw_four")
    assert not rules.can_stack("skip")


def test_rules_from_dict_ignores_unknown_keys():
    rules = Rules.from_dict({"target_score": 200, "fallback_wild_color": "blue", "house_rule": True})
    assert rules.target_score == 200
    assert rules.fallback_wild_color is Color.BLUE


def test_rules_from_dict_house_rules():
    rules = Rules.from_dict({"seven_zero": True, "shout_challenge_window": 3})
    assert rules.seven_zero
    assert rules.shout_challenge_window == 3


def test_rules_dict_round_trip():
    rules = Rules(stack_draw_four=False, shout_policy="challenge", fallback_wild_color=Color.GREEN)
    data = rules.to_dict()
    assert data["fallback_wild_color"] == "green"
    assert Rules.from_dict(data) == rules


def test_legal_moves_expand_wild_colors(two_players):
    game = rig(two_players, {A: ["red_7", "wild", "blue_1"], B: ["green_1"]}, top="red_5")
    moves = get_legal_moves(game, A)
    wild = card_id(game, A, "wild")
    assert PlayCard(card_id(game, A, "red_7")) in moves
    assert [m.chosen_color for m in moves if isinstance(m, PlayCard) and m.card_id == wild] == list(
        Color.playable()
    )
    assert not any(isinstance(m, DrawCard) for m in moves)


def test_legal_moves_offer_draw_when_stuck(two_players):
    game = rig(two_players, {A: ["green_1", "blue_1"], B: ["green_2"]}, top="red_5")
    assert get_legal_moves(game, A) == [DrawCard()]


def test_legal_moves_empty_for_waiting_player(two_players):
    game = rig(two_players, {A: ["red_1", "red_2"], B: ["red_3"]}, top="red_5")
    assert get_legal_moves(game, B) == []


def test_legal_moves_under_pending_penalty(three_players):
    game = rig(
        three_players,
        {A: ["red_draw_two", "blue_1", "blue_2"], B: ["green_draw_two", "red_4"], C: ["yellow_1"]},
        top="red_5",
    )
    game.play_card(A, card_id(game, A, "red_draw_two"))
    moves = get_legal_moves(game, B)
    assert moves == [PlayCard(card_id(game, B, "green_draw_two")), DrawCard()]


def test_legal_moves_for_wild_starter():
    game = Game(["a", "b"], rng=StarterRandom("wild", players=2))
    assert get_legal_moves(game, A) == [ChooseColor(c) for c in Color.playable()]
    assert apply_move(game, A, ChooseColor(Color.YELLOW))
    assert game.wild_color is Color.YELLOW


def test_apply_move_dispatches(two_players):
    game = rig(
        two_players, {A: ["red_7", "blue_1"], B: ["green_1", "green_2"]}, top="red_5", draw=("yellow_9",)
    )
    assert not apply_move(game, B, PlayCard(card_id(game, B, "green_1")))
    assert apply_move(game, A, DeclareShout())
    assert apply_move(game, A, PlayCard(card_id(game, A, "red_7")))
    assert game.get_player(A).has_shouted
    assert not apply_move(game, B, ChallengeShout(A))
    assert not apply_move(game, B, ChallengeWildDrawFour(A))
    assert apply_move(game, B, DrawCard())
    assert game.current_player.id == A


def test_apply_move_rejects_draw_with_playable_card(two_players):
    game = rig(two_players, {A: ["red_7", "blue_1"], B: ["green_1"]}, top="red_5")
    assert not apply_move(game, A, DrawCard())
    assert game.current_player.id == A


def test_apply_move_unknown_type(two_players):
    with pytest.raises(TypeError):
        apply_move(two_players, A, "play")
