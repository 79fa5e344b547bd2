"""Unit tests for game history logging."""

import random

from conftest import card_id, rig

from unorules.engine import DECK_SIZE, Color, Game, Rules, apply_move, get_legal_moves

A, B = "player_0", "player_1"


def test_history_initialization():
    game = Game(["p1", "p2"], seed=42)
    assert game.history[0] == f"Round started with {game.top_card()}"


def test_history_records_play(two_players):
    game = rig(two_players, {A: ["red_7", "blue_1", "blue_2"], B: ["green_2", "green_3"]}, top="red_5")
    game.play_card(A, card_id(game, A, "red_7"))
    assert game.history[-1] == "Alice played red_7"


def test_history_records_draw(two_players):
    game = rig(
        two_players, {A: ["green_1", "green_2"], B: ["green_3", "green_4"]}, top="red_5", draw=("blue_9",)
    )
    game.draw_card(A)
    assert game.history[-1] == "Alice drew a card"


def test_history_records_wild_color(two_players):
    game = rig(two_players, {A: ["wild", "blue_1", "blue_2"], B: ["green_3"]}, top="red_5")
    game.play_card(A, card_id(game, A, "wild"), Color.YELLOW)
    assert game.history[-2:] == ["Alice played wild", "Color changed to yellow"]


def test_history_records_penalty_and_skip(two_players):
    game = rig(two_players, {A: ["red_draw_two", "blue_1", "blue_2"], B: ["green_3", "green_4"]}, top="red_5")
    game.play_card(A, card_id(game, A, "red_draw_two"))
    assert "Pending penalty is 2" in game.history
    assert "Bob drew 2 cards (penalty)" in game.history
    assert game.history[-1] == "Bob is skipped"


def test_history_persists_across_turns(two_players):
    game = rig(
        two_players,
        {A: ["red_7", "blue_1", "blue_2"], B: ["green_3", "green_4"]},
        top="red_5",
        draw=("yellow_9",),
    )
    start = len(game.history)
    game.play_card(A, card_id(game, A, "red_7"))
    game.draw_card(B)
    assert game.history[start:] == ["Alice played red_7", "Bob drew a card"]


def test_history_records_reshuffle(two_players):
    game = rig(two_players, {A: ["green_1", "green_2"], B: ["green_3", "green_4"]}, top="red_5")
    deck = game._deck
    deck._discard_pile = deck._draw_pile + deck._discard_pile
    deck._draw_pile = []
    game.draw_card(A)
    assert any(line.startswith("Discard pile reshuffled") for line in game.history)
    assert str(game.discard_pile()[0]) == "red_5"
    assert game.card_total() == DECK_SIZE


def test_history_is_capped():
    game = Game(["p1", "p2", "p3"], seed=3, rules=Rules(history_limit=5))
    rng = random.Random(3)
    for _ in range(200):
        if game.is_over():
            break
        pid = game.current_player.id
        apply_move(game, pid, rng.choice(get_legal_moves(game, pid)))
    assert len(game.history) <= 5


def test_snapshot_keeps_recent_history():
    game = Game(["p1", "p2"], seed=5)
    for i in range(30):
        game._record("event %d", i)
    snapshot = game.snapshot()
    assert len(snapshot.history) == 10
    assert snapshot.history[-1] == "event 29"
