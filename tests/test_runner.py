"""Tests for the round runner, matches and tournaments."""

import random

from conftest import card_id, hand_names, rig

from unorules.agents import HeuristicStrategy, HumanStrategy
from unorules.engine import DECK_SIZE, Card, Color, Game, Phase, Rules
from unorules.orchestration import GameRunner, Match, run_tournament
from unorules.orchestration.game_runner import _seat_players

A, B, C = "player_0", "player_1", "player_2"


def heuristics(count, seed=0):
    rng = random.Random(seed)
    levels = ["easy", "normal", "hard", "expert"]
    return {
        f"player_{i}": HeuristicStrategy(levels[i % 4], rng=random.Random(rng.randrange(2**32)))
        for i in range(count)
    }


class Declining:
    """Always asks to draw."""

    name = "declining"

    def choose_card(self, playable, view):
        return None

    def choose_wild_color(self, hand, view):
        return Color.BLUE

    def choose_swap_target(self, view):
        return "nobody"


class Cheating(Declining):
    """Tries to play a card it does not hold."""

    name = "cheating"

    def choose_card(self, playable, view):
        return Card("bogus", Color.RED, "5")


def test_runner_finishes_round():
    runner = GameRunner(heuristics(4), seed=42)
    result = runner.run()
    assert result.winner in result.player_ids
    assert not result.stalled
    assert result.num_turns > 0
    assert result.points == result.scores[result.winner]
    assert runner.game.card_total() == DECK_SIZE
    assert runner.game.get_player(result.winner).is_empty()


def test_runner_respects_turn_limit():
    result = GameRunner(heuristics(2), seed=3, max_turns=1).run()
    assert result.num_turns == 1
    assert result.winner is None
    assert result.stalled


def test_runner_plays_when_draw_is_not_allowed(two_players):
    runner = GameRunner({A: Declining(), B: Declining()})
    game = rig(two_players, {A: ["red_7", "blue_1", "blue_2"], B: ["green_1"]}, top="red_5")
    runner._take_turn(game, game.get_player(A), Declining())
    assert str(game.top_card()) == "red_7"
    assert game.current_player.id == B


def test_runner_ignores_card_not_in_playable(two_players):
    runner = GameRunner({A: Cheating(), B: Cheating()})
    game = rig(two_players, {A: ["red_7", "blue_1", "blue_2"], B: ["green_1"]}, top="red_5")
    runner._take_turn(game, game.get_player(A), Cheating())
    assert str(game.top_card()) == "red_7"


def test_runner_asks_strategy_for_wild_color(two_players):
    runner = GameRunner({A: Declining(), B: Declining()})
    game = rig(two_players, {A: ["wild", "green_1", "green_2"], B: ["green_3"]}, top="red_5")
    runner._take_turn(game, game.get_player(A), Declining())
    assert game.wild_color is Color.BLUE


def test_runner_shouts_before_second_to_last_card(two_players):
    runner = GameRunner({A: Declining(), B: Declining()})
    game = rig(two_players, {A: ["red_7", "blue_1"], B: ["green_1", "green_2"]}, top="red_5")
    runner._take_turn(game, game.get_player(A), Declining())
    assert game.get_player(A).hand_size == 1
    assert game.get_player(A).has_shouted


def test_runner_challenges_missed_shout():
    game = Game(["a", "b"], seed=12, rules=Rules(shout_policy="challenge"))
    rig(game, {A: ["red_7", "blue_1"], B: ["green_1", "green_2"]}, top="red_5")
    game.play_card(A, card_id(game, A, "red_7"))
    runner = GameRunner({A: Declining(), B: Declining()}, rules=game.rules)
    runner._challenge_missed_shout(game, game.get_player(A))
    assert game.get_player(A).hand_size == 3


def test_runner_with_challenge_policy_conserves_cards():
    runner = GameRunner(heuristics(3, seed=5), rules=Rules(shout_policy="challenge"), seed=5)
    runner.run()
    assert runner.game.card_total() == DECK_SIZE


def test_seat_players_marks_humans():
    players = _seat_players({A: HumanStrategy("me"), B: HeuristicStrategy()}, names={A: "Me"})
    assert players[0].is_human and players[0].name == "Me"
    assert not players[1].is_human
    assert players[1].name == "heuristic-expert"


def test_match_plays_to_target_score():
    session = Match(heuristics(3, seed=1), rules=Rules(target_score=150), seed=1)
    winner = session.run()
    assert winner is not None
    assert session.scores[winner] >= 150
    assert session.winner == winner
    earned = {}
    for result in session.rounds:
        if result.winner:
            earned[result.winner] = earned.get(result.winner, 0) + result.points
    assert earned.get(winner) == session.scores[winner]


def test_match_round_limit():
    session = Match(heuristics(2, seed=2), rules=Rules(target_score=10_000), seed=2)
    assert session.run(max_rounds=2) is None
    assert len(session.rounds) == 2


def test_match_restart():
    session = Match(heuristics(2, seed=3), seed=3)
    session.play_round()
    session.restart()
    assert session.rounds == []
    assert set(session.scores.values()) == {0}


def test_tournament_counts_wins():
    strategies = heuristics(2, seed=4)
    wins = run_tournament(strategies, num_games=6, seed=4)
    assert set(wins) <= set(strategies)
    assert sum(wins.values()) <= 6
    assert sum(wins.values()) > 0


def _seven_played(strategy):
    game = Game(["a", "b", "c"], seed=15, rules=Rules(seven_zero=True))
    rig(game, {A: ["red_7", "blue_1", "blue_2"], B: ["green_1", "green_2"], C: ["yellow_1"]}, top="red_5")
    runner = GameRunner({A: strategy, B: strategy, C: strategy}, rules=game.rules)
    runner._take_turn(game, game.get_player(A), strategy)
    assert game.phase is Phase.CHOOSING_PLAYER
    return runner, game


def test_runner_asks_strategy_for_swap_target():
    strategy = HeuristicStrategy("expert")
    runner, game = _seven_played(strategy)
    runner._resolve_choice(game, game.get_player(A), strategy)
    assert hand_names(game, A) == ["yellow_1"]
    assert hand_names(game, C) == ["blue_1", "blue_2"]
    assert game.current_player.id == B


def test_runner_replaces_invalid_swap_target():
    runner, game = _seven_played(Declining())
    runner._resolve_choice(game, game.get_player(A), Declining())
    assert game.phase is Phase.PLAYING
    assert hand_names(game, C) == ["blue_1", "blue_2"]


def test_runner_with_seven_zero_conserves_cards():
    runner = GameRunner(heuristics(4, seed=6), rules=Rules(seven_zero=True), seed=6)
    result = runner.run()
    assert runner.game.card_total() == DECK_SIZE
    assert result.num_turns > 0
