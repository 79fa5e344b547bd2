"""Helpers for arranging exact table situations."""

import random

import pytest

from unorules.engine import DECK_SIZE, Card, Color, Game, Phase, Rules


def parse(name: str) -> tuple[Color, str]:
    """'red_7' -> (RED, '7'), 'blue_draw_two' -> (BLUE, 'draw_two'), 'wild' -> (WILD, 'wild')."""
    if name in ("wild", "wild_draw_four"):
        return Color.WILD, name
    color, value = name.split("_", 1)
    return Color(color), value


def rig(
    game: Game,
    hands: dict[str, list[str]],
    top: str,
    current: int = 0,
    draw: tuple[str, ...] = (),
    wild_color: Color | None = None,
) -> Game:
    """Rearrange every card of ``game`` into the given hands and piles.

    ``draw`` lists the next cards to come off the draw pile, first one first.
    Players missing from ``hands`` end up with no cards.
    """
    deck = game._deck
    pool: list[Card] = deck._draw_pile + deck._discard_pile
    for player in game.players:
        pool.extend(player.reset_hand())

    def take(name: str) -> Card:
        color, value = parse(name)
        for i, card in enumerate(pool):
            if card.color == color and card.value == value:
                return pool.pop(i)
        raise AssertionError(f"No {name} left to deal")

    top_card = take(top)
    for pid, names in hands.items():
        game.get_player(pid).add_cards([take(n) for n in names])
    upcoming = [take(n) for n in draw]

    deck._discard_pile = [top_card]
    deck._draw_pile = pool + list(reversed(upcoming))

    game._current = current
    game._direction = 1
    game._phase = Phase.PLAYING
    game._draw_penalty = 0
    game._skip_next = False
    game._last_action_card = None
    game._wild_color = wild_color
    game._previous_active_color = None if top_card.is_wild() else top_card.color
    game._last_played_by = None
    game._wild_draw_four_challenged = False
    game._announced.clear()
    game._missed_shouts.clear()
    assert game.card_total() == DECK_SIZE
    return game


def card_id(game: Game, player_id: str, name: str) -> str:
    color, value = parse(name)
    for card in game.get_hand(player_id):
        if card.color == color and card.value == value:
            return card.id
    raise AssertionError(f"{player_id} holds no {name}")


def hand_names(game: Game, player_id: str) -> list[str]:
    return sorted(str(c) for c in game.get_hand(player_id))


class StarterRandom(random.Random):
    """Random whose first shuffle puts a card of ``value`` where the starter is flipped.

    With ``first_card`` set, player 0 is also dealt a card of that value.
    """

    def __init__(
        self, value: str, players: int, hand_size: int = 7, seed: int = 0, first_card: str | None = None
    ):
        super().__init__(seed)
        self._value = value
        self._first_card = first_card
        self._offset = players * hand_size + 1
        self._arranged = False

    def shuffle(self, x):
        super().shuffle(x)
        if self._arranged:
            return
        self._arranged = True
        idx = next(i for i, c in enumerate(x) if c.value == self._value)
        pos = len(x) - self._offset
        x[idx], x[pos] = x[pos], x[idx]
        if self._first_card is not None:
            # Player 0 is dealt the top of the draw pile first
            idx = next(i for i, c in enumerate(x) if c.value == self._first_card and i != pos)
            x[idx], x[-1] = x[-1], x[idx]


@pytest.fixture
def two_players() -> Game:
    return Game(["Alice", "Bob"], seed=1)


@pytest.fixture
def three_players() -> Game:
    return Game(["Alice", "Bob", "Cara"], seed=2)


@pytest.fixture
def four_players() -> Game:
    return Game(["Alice", "Bob", "Cara", "Dan"], seed=3)


@pytest.fixture
def no_stacking() -> Rules:
    return Rules(stack_draw_two=False, stack_draw_four=False)
