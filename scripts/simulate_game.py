"""Simulate a match between heuristic strategies and check card conservation."""

import logging
import random

from unorules.agents import HeuristicStrategy
from unorules.engine import DECK_SIZE, Rules
from unorules.orchestration.game_runner import GameRunner, Match


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    rng = random.Random(42)
    strategies = {
        "p1": HeuristicStrategy("easy", rng=random.Random(rng.randrange(2**32))),
        "p2": HeuristicStrategy("normal", rng=random.Random(rng.randrange(2**32))),
        "p3": HeuristicStrategy("hard", rng=random.Random(rng.randrange(2**32))),
        "p4": HeuristicStrategy("expert", rng=random.Random(rng.randrange(2**32))),
    }

    runner = GameRunner(strategies, seed=42)
    result = runner.run()
    game = runner.game
    print(f"Round finished! Winner: {result.winner} (+{result.points} points)")
    print(f"Turns: {result.num_turns}")
    print(f"Cards accounted for: {game.card_total()} / {DECK_SIZE}")
    for line in game.history[-10:]:
        print(f"> {line}")

    session = Match(strategies, rules=Rules(target_score=200), seed=7)
    winner = session.run()
    print(f"Match to 200 finished after {len(session.rounds)} rounds. Winner: {winner}")
    print(f"Scores: {session.scores}")


if __name__ == "__main__":
    main()
