"""Deck creation, shuffling and the draw/discard piles."""

import logging
import random
from typing import Callable, List, Optional

from unorules.engine.card import COLORED_ACTIONS, NUMBER_VALUES, Card, Color

logger = logging.getLogger(__name__)

DECK_SIZE = 108


def create_deck(rng: Optional[random.Random] = None) -> List[Card]:
    """Create a standard 108-card UNO deck.

    - 4 colors × (one 0, two each of 1-9): 76 cards
    - 4 colors × two each of Skip, Reverse, Draw Two: 24 cards
    - 4 Wild, 4 Wild Draw Four: 8 cards
    - Total: 108 cards

    Every card gets an id unique within the deck.
    """
    cards: List[Card] = []

    def add(color: Color, value: str) -> None:
        cards.append(Card(id=str(len(cards)), color=color, value=value))

    for color in Color.playable():
        # One zero per color
        add(color, "0")
        # Two of each 1-9 per color
        for value in NUMBER_VALUES[1:]:
            add(color, value)
            add(color, value)

    for color in Color.playable():
        for value in COLORED_ACTIONS:
            add(color, value)
            add(color, value)

    for _ in range(4):
        add(Color.WILD, "wild")
        add(Color.WILD, "wild_draw_four")

    (rng or random).shuffle(cards)
    return cards


class Deck:
    """Draw pile plus discard pile.

    The top of the draw pile is the end of the list; the top of the discard
    pile is its last card.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        on_reshuffle: Optional[Callable[[int], None]] = None,
    ):
        self._rng = rng or random.Random()
        self._on_reshuffle = on_reshuffle
        self._draw_pile: List[Card] = create_deck(self._rng)
        self._discard_pile: List[Card] = []

    def shuffle(self) -> None:
        self._rng.shuffle(self._draw_pile)

    def draw(self) -> Optional[Card]:
        """Pop the top card, reshuffling the discard pile first if needed."""
        if not self._draw_pile:
            self._reshuffle_from_discard()
        if not self._draw_pile:
            return None
        return self._draw_pile.pop()

    def draw_many(self, count: int) -> List[Card]:
        """Draw up to ``count`` cards; fewer when the deck runs dry."""
        drawn: List[Card] = []
        for _ in range(count):
            card = self.draw()
            if card is None:
                logger.debug("Deck exhausted after %d of %d cards", len(drawn), count)
                break
            drawn.append(card)
        return drawn

    def put_back(self, card: Card) -> None:
        """Return a card to the draw pile and reshuffle it."""
        self._draw_pile.append(card)
        self.shuffle()

    def _reshuffle_from_discard(self) -> None:
        if len(self._discard_pile) <= 1:
            return
        # Keep top card, shuffle the rest back into the draw pile
        top = self._discard_pile.pop()
        self._draw_pile = self._discard_pile
        self._discard_pile = [top]
        self.shuffle()
        logger.debug("Reshuffled discard pile, %d cards in draw pile", len(self._draw_pile))
        if self._on_reshuffle is not None:
            self._on_reshuffle(len(self._draw_pile))

    def play(self, card: Card) -> None:
        self._discard_pile.append(card)

    def top_card(self) -> Optional[Card]:
        return self._discard_pile[-1] if self._discard_pile else None

    def remaining_count(self) -> int:
        return len(self._draw_pile)

    def discard_snapshot(self) -> List[Card]:
        return list(self._discard_pile)

    def total_count(self) -> int:
        return len(self._draw_pile) + len(self._discard_pile)
