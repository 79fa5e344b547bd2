"""
Heuristic (rule-based) UNO strategy.

Difficulty levels:
- easy: random legal card
- normal: colored action cards first, then cards matching the active color
- hard: block with action cards when the next player is close to going out,
  otherwise normal play most of the time with some random choices
- expert: like hard, but prefers Skip when blocking and holds action cards
  back while the hand is still large
"""

import random
from typing import Optional

from unorules.engine import Card, Color, PlayerView

DIFFICULTIES = ("easy", "normal", "hard", "expert")

BLOCK_THRESHOLD = 2
CONSERVE_HAND_SIZE = 5
NORMAL_PROBABILITY = 0.7


class HeuristicStrategy:
    """Rule-based strategy, also the fallback for remote strategies."""

    def __init__(self, difficulty: str = "expert", rng: Optional[random.Random] = None):
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty: {difficulty}. Use one of {', '.join(DIFFICULTIES)}.")
        self.difficulty = difficulty
        self._rng = rng or random.Random()

    @property
    def name(self) -> str:
        return f"heuristic-{self.difficulty}"

    def choose_card(self, playable: list[Card], view: PlayerView) -> Optional[Card]:
        if not playable:
            return None
        if self.difficulty == "easy":
            return self._easy(playable)
        if self.difficulty == "normal":
            return self._normal(playable, view)
        if self.difficulty == "hard":
            return self._hard(playable, view)
        return self._expert(playable, view)

    def choose_wild_color(self, hand: list[Card], view: PlayerView) -> Color:
        """Pick the color held most often; random when only wilds remain."""
        counts = {color: 0 for color in Color.playable()}
        for card in hand:
            if not card.is_wild():
                counts[card.color] += 1
        best = max(Color.playable(), key=lambda c: counts[c])
        if counts[best] == 0:
            return self._rng.choice(Color.playable())
        return best

    def choose_swap_target(self, view: PlayerView) -> str:
        """Take the smallest hand; easy players pick anyone."""
        opponents = [pid for pid in view.player_order if pid != view.player_id]
        if self.difficulty == "easy":
            return self._rng.choice(opponents)
        return min(opponents, key=lambda pid: view.num_cards_per_player[pid])

    def _easy(self, playable: list[Card]) -> Card:
        return self._rng.choice(playable)

    def _normal(self, playable: list[Card], view: PlayerView) -> Card:
        actions = [c for c in playable if c.is_action_card() and not c.is_wild()]
        if actions:
            return self._rng.choice(actions)
        color_matches = [c for c in playable if c.color == view.active_color]
        if color_matches:
            return self._rng.choice(color_matches)
        return self._rng.choice(playable)

    def _should_block(self, view: PlayerView) -> bool:
        return view.num_cards_per_player.get(view.next_player, 0) <= BLOCK_THRESHOLD

    def _hard(self, playable: list[Card], view: PlayerView) -> Card:
        if self._should_block(view):
            actions = [c for c in playable if c.is_action_card() and not c.is_wild()]
            if actions:
                return self._rng.choice(actions)
        if self._rng.random() < NORMAL_PROBABILITY:
            return self._normal(playable, view)
        return self._easy(playable)

    def _expert(self, playable: list[Card], view: PlayerView) -> Card:
        if self._should_block(view):
            actions = [c for c in playable if c.is_action_card() and not c.is_wild()]
            if actions:
                skips = [c for c in actions if c.value == "skip"]
                return skips[0] if skips else actions[0]

        # Many cards and many options: keep action cards for later
        if len(view.my_hand) > CONSERVE_HAND_SIZE and len(playable) > 3:
            plain = [c for c in playable if not c.is_action_card()]
            if plain:
                color_matches = [c for c in plain if c.color == view.active_color]
                return color_matches[0] if color_matches else plain[0]

        return self._hard(playable, view)
