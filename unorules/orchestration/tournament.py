"""Tournament - many independent rounds between the same strategies."""

from __future__ import annotations

import logging
import random
from collections import Counter
from typing import TYPE_CHECKING, Dict, Optional

from unorules.engine import Rules
from unorules.orchestration.game_runner import GameRunner

if TYPE_CHECKING:
    from unorules.agent.protocol import Strategy

logger = logging.getLogger(__name__)


def run_tournament(
    strategies: Dict[str, "Strategy"],
    num_games: int = 100,
    rules: Optional[Rules] = None,
    seed: Optional[int] = None,
) -> Dict[str, int]:
    """Play ``num_games`` rounds, each starting from zero scores.

    Even rounds seat players in the given order, odd rounds in reverse, so
    no strategy always leads. Abandoned rounds count for nobody.

    Returns:
        Dict mapping player_id to number of rounds won.
    """
    seating = list(strategies)
    wins: Counter[str] = Counter()
    stalled = 0

    rng = random.Random(seed)
    for round_no in range(num_games):
        order = seating if round_no % 2 == 0 else seating[::-1]
        result = GameRunner(
            {pid: strategies[pid] for pid in order},
            rules=rules,
            seed=rng.randint(0, 2**31 - 1),
        ).run()
        if result.winner is None:
            stalled += 1
        else:
            wins[result.winner] += 1

    if stalled:
        logger.warning("%d of %d rounds were abandoned", stalled, num_games)
    return dict(wins)
