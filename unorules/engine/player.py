"""A player's hand, score and shout bookkeeping."""

import time
from typing import Dict, Iterable, List, Optional

from unorules.engine.card import Card, Color


class Player:
    """A seat at the table.

    The hand is mutated only through ``add_cards``/``remove_card`` so the shout
    flag stays consistent: it can only be set while holding exactly one card and
    is dropped whenever the hand moves away from (or freshly arrives at) one card.
    """

    def __init__(self, id: str, name: str, is_human: bool = False):
        self.id = id
        self.name = name
        self.is_human = is_human
        self._hand: List[Card] = []
        self._score = 0
        self._has_shouted = False
        self._shout_time: Optional[float] = None

    def __repr__(self) -> str:
        return f"Player(id={self.id!r}, name={self.name!r}, cards={len(self._hand)})"

    @property
    def hand(self) -> List[Card]:
        return list(self._hand)

    @property
    def hand_size(self) -> int:
        return len(self._hand)

    @property
    def score(self) -> int:
        return self._score

    @property
    def has_shouted(self) -> bool:
        return self._has_shouted

    @property
    def shout_time(self) -> Optional[float]:
        return self._shout_time

    def add_cards(self, cards: Iterable[Card]) -> None:
        self._hand.extend(cards)
        if len(self._hand) != 1:
            self.reset_shout()

    def remove_card(self, card_id: str) -> Optional[Card]:
        """Remove and return the card with ``card_id``, or None if absent."""
        for i, card in enumerate(self._hand):
            if card.id == card_id:
                removed = self._hand.pop(i)
                # A fresh single-card state requires a fresh call
                if len(self._hand) == 1:
                    self.reset_shout()
                return removed
        return None

    def find_card(self, card_id: str) -> Optional[Card]:
        return next((c for c in self._hand if c.id == card_id), None)

    def has_card(self, card_id: str) -> bool:
        return self.find_card(card_id) is not None

    def playable_cards(self, top: Card, wild_color: Optional[Color] = None) -> List[Card]:
        """Cards in hand that may legally follow ``top``."""
        return [c for c in self._hand if c.can_follow(top, wild_color)]

    def declare_shout(self) -> bool:
        if len(self._hand) != 1:
            return False
        self._has_shouted = True
        self._shout_time = time.monotonic()
        return True

    def reset_shout(self) -> None:
        self._has_shouted = False
        self._shout_time = None

    def should_be_penalized_for_missed_shout(self) -> bool:
        return len(self._hand) == 1 and not self._has_shouted

    def hand_points(self) -> int:
        return sum(c.points for c in self._hand)

    def color_counts(self) -> Dict[Color, int]:
        """Number of cards held per playable color."""
        counts = {color: 0 for color in Color.playable()}
        for card in self._hand:
            if not card.is_wild():
                counts[card.color] += 1
        return counts

    def add_score(self, points: int) -> None:
        self._score += points

    def reset_score(self) -> None:
        self._score = 0

    def reset_hand(self) -> List[Card]:
        """Empty the hand, returning what was held."""
        cards, self._hand = self._hand, []
        self.reset_shout()
        return cards

    def is_empty(self) -> bool:
        return not self._hand
