"""The UNO round: turn order, penalties, shouts, challenges and scoring."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Union

from unorules.engine.card import Card, Color
from unorules.engine.deck import DECK_SIZE, Deck
from unorules.engine.game_state import GameSnapshot
from unorules.engine.player import Player
from unorules.engine.rules import Rules

logger = logging.getLogger(__name__)

WILD_DRAW_FOUR_CHALLENGE_PENALTY = 4
FAILED_CHALLENGE_PENALTY = 6


class Phase(str, Enum):
    """Round phases."""

    PLAYING = "playing"
    CHOOSING_COLOR = "choosing_color"  # wild starter waiting for a color
    CHOOSING_PLAYER = "choosing_player"  # seven played, waiting for a swap target
    GAME_OVER = "game_over"


@dataclass
class GameEvents:
    """Optional callbacks for a presentation layer.

    Each hook runs after the state change it reports.
    """

    on_card_played: Optional[Callable[[Player, Card, Optional[Color]], None]] = None
    on_round_end: Optional[Callable[[Player, int], None]] = None
    on_game_end: Optional[Callable[[Player], None]] = None
    on_shout_challenged: Optional[Callable[[Player, Player, bool], None]] = None
    on_wild_draw_four_challenged: Optional[Callable[[Player, Player, bool], None]] = None
    on_hands_swapped: Optional[Callable[[Player, Player], None]] = None
    on_deck_reshuffled: Optional[Callable[[int], None]] = None


class Game:
    """One round of UNO.

    A ``Game`` owns its deck and mutates its players' hands. It is driven by a
    single caller: every operation runs to completion and either applies fully
    or, for an illegal request, returns a falsy value without touching state.
    Scores live on the ``Player`` objects, so the next round is a new ``Game``
    built from the same players.
    """

    def __init__(
        self,
        players: Sequence[Union[str, Player]],
        human_index: Optional[int] = None,
        rules: Optional[Rules] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        events: Optional[GameEvents] = None,
    ):
        if len(players) < 2:
            raise ValueError("At least 2 players are required")
        self._rules = rules or Rules()
        if len(players) * self._rules.hand_size >= DECK_SIZE:
            raise ValueError(
                f"Cannot deal {self._rules.hand_size} cards to {len(players)} players"
            )
        self._rng = rng or random.Random(seed)
        self._events = events or GameEvents()
        self._players = self._seat(players, human_index)

        self._deck = Deck(self._rng, on_reshuffle=self._on_reshuffle)
        self._current = 0
        self._direction = 1  # 1 = clockwise, -1 = counter-clockwise
        self._phase = Phase.PLAYING
        self._draw_penalty = 0
        self._skip_next = False
        self._last_action_card: Optional[Card] = None
        self._last_player_at_one_card: Optional[Player] = None
        self._wild_color: Optional[Color] = None
        self._previous_active_color: Optional[Color] = None
        self._last_played_by: Optional[str] = None
        self._wild_draw_four_challenged = False
        self._announced: Set[str] = set()
        self._missed_shouts: Dict[str, int] = {}  # player id -> turn of the miss
        self._turn = 0
        self._round_winner: Optional[Player] = None
        self._winner: Optional[Player] = None
        self._history: List[str] = []

        self._deal()
        self._flip_starter()

    @staticmethod
    def _seat(players: Sequence[Union[str, Player]], human_index: Optional[int]) -> List[Player]:
        seated: List[Player] = []
        for i, entry in enumerate(players):
            if isinstance(entry, Player):
                entry.reset_hand()
                seated.append(entry)
            else:
                seated.append(Player(f"player_{i}", entry, is_human=(i == human_index)))
        if len({p.id for p in seated}) != len(seated):
            raise ValueError("Player ids must be unique")
        return seated

    def _deal(self) -> None:
        for _ in range(self._rules.hand_size):
            for player in self._players:
                card = self._deck.draw()
                if card is not None:
                    player.add_cards([card])

    def _flip_starter(self) -> None:
        card = self._deck.draw()
        # Wild Draw Four cannot start a round
        while card is not None and card.value == "wild_draw_four":
            self._deck.put_back(card)
            card = self._deck.draw()
        if card is None:
            raise RuntimeError("Deck exhausted before a starter card could be flipped")

        self._deck.play(card)
        self._previous_active_color = None if card.is_wild() else card.color
        self._record("Round started with %s", card)

        if card.value == "skip":
            self._skip_next = True
            self._current = self._land(self._current)
        elif card.value == "reverse":
            self._direction = -self._direction
        elif card.value == "draw_two":
            self._draw_penalty = 2
            self._skip_next = True
            self._last_action_card = card
            self._current = self._land(self._current)
            if self._draw_penalty == 0:
                self._last_action_card = None
        elif card.value == "wild":
            self._phase = Phase.CHOOSING_COLOR

    # -- helpers -----------------------------------------------------------

    def _record(self, message: str, *args) -> None:
        text = message % args if args else message
        self._history.append(text)
        if len(self._history) > self._rules.history_limit:
            del self._history[: len(self._history) - self._rules.history_limit]
        logger.debug("%s", text)

    def _emit(self, hook: str, *args) -> None:
        callback = getattr(self._events, hook)
        if callback is not None:
            callback(*args)

    def _on_reshuffle(self, remaining: int) -> None:
        self._record("Discard pile reshuffled into draw pile (%d cards)", remaining)
        self._emit("on_deck_reshuffled", remaining)

    def _lookup(self, player_id: str) -> Optional[Player]:
        player = self.get_player(player_id)
        if player is None:
            logger.warning("Unknown player id: %r", player_id)
        return player

    def _step(self, index: int) -> int:
        return (index + self._direction) % len(self._players)

    def _can_stack(self, player: Player) -> bool:
        lac = self._last_action_card
        if self._draw_penalty <= 0 or lac is None or not self._rules.can_stack(lac.value):
            return False
        return any(c.value == lac.value for c in player.hand)

    def _apply_penalty(self, player: Player, count: int, reason: str) -> List[Card]:
        cards = self._deck.draw_many(count)
        player.add_cards(cards)
        self._record("%s drew %d cards (%s)", player.name, len(cards), reason)
        return cards

    def _land(self, index: int) -> int:
        """Resolve the pending penalty and skip for the player at ``index``.

        Returns the index of the player who acts next.
        """
        if self._draw_penalty > 0:
            recipient = self._players[index]
            if self._can_stack(recipient):
                # The recipient may answer with the same card type
                self._skip_next = False
                return index
            self._apply_penalty(recipient, self._draw_penalty, "penalty")
            self._draw_penalty = 0
        if self._skip_next:
            self._skip_next = False
            self._record("%s is skipped", self._players[index].name)
            index = self._step(index)
        return index

    def _advance(self) -> None:
        if self._phase is Phase.GAME_OVER:
            return
        self._announced.clear()
        self._turn += 1
        self._current = self._land(self._step(self._current))
        self._expire_missed_shouts()
        for player in self._players:
            if player.hand_size != 1 and player.has_shouted:
                player.reset_shout()
        lone = self._last_player_at_one_card
        if lone is not None and lone.hand_size != 1:
            self._last_player_at_one_card = None
        if self._draw_penalty == 0:
            self._last_action_card = None

    def _expire_missed_shouts(self) -> None:
        """Penalize missed shouts nobody challenged within the window."""
        window = self._rules.shout_challenge_window
        for player_id, turn in list(self._missed_shouts.items()):
            player = self.get_player(player_id)
            if not player.should_be_penalized_for_missed_shout():
                del self._missed_shouts[player_id]
            elif self._turn - turn > window:
                del self._missed_shouts[player_id]
                self._apply_penalty(player, self._rules.shout_penalty, "missed shout, not challenged in time")

    def _excuse_single_cards(self, players: Iterable[Player]) -> None:
        # A one-card hand received in a swap or rotation carries no shout obligation
        for player in players:
            if player.hand_size == 1:
                player.declare_shout()
                self._missed_shouts.pop(player.id, None)

    def _rotate_hands(self) -> None:
        hands = [p.reset_hand() for p in self._players]
        for i, cards in enumerate(hands):
            self._players[self._step(i)].add_cards(cards)
        self._excuse_single_cards(self._players)
        self._record("Hands passed %s", "clockwise" if self._direction == 1 else "counter-clockwise")

    def _valid_color(self, color: Optional[Color]) -> bool:
        return color is None or color in Color.playable()

    # -- operations --------------------------------------------------------

    def play_card(self, player_id: str, card_id: str, chosen_color: Optional[Color] = None) -> bool:
        """Play ``card_id`` from the current player's hand.

        Returns False, changing nothing, if it is not the player's turn, the
        card is not theirs or does not match, or a pending penalty only
        allows stacking the same card type.
        """
        player = self._lookup(player_id)
        if player is None or self._phase is not Phase.PLAYING:
            return False
        if self.current_player.id != player_id:
            return False
        card = player.find_card(card_id)
        if card is None or card not in self.playable_cards(player_id):
            return False
        if not self._valid_color(chosen_color):
            return False

        self._play(player, card, Color(chosen_color) if chosen_color is not None else None)
        return True

    def _play(self, player: Player, card: Card, chosen_color: Optional[Color]) -> None:
        top = self._deck.top_card()
        self._previous_active_color = self._wild_color or (top.color if top else None)

        player.remove_card(card.id)
        self._deck.play(card)
        self._wild_color = None
        self._last_played_by = player.id
        self._wild_draw_four_challenged = False
        self._record("%s played %s", player.name, card)
        self._emit("on_card_played", player, card, chosen_color)

        if player.hand_size == 1:
            self._check_shout(player)
        self._announced.discard(player.id)

        if player.is_empty():
            self._end_round(player)
            return

        self._apply_effect(card, chosen_color)
        if self._phase is Phase.CHOOSING_PLAYER:
            # The turn passes once a swap target is picked
            return
        self._advance()

    def _check_shout(self, player: Player) -> None:
        if player.id in self._announced:
            player.declare_shout()
            self._last_player_at_one_card = player
            self._record("%s shouted UNO", player.name)
        elif self._rules.shout_policy == "immediate":
            self._apply_penalty(player, self._rules.shout_penalty, "missed shout")
        else:
            self._last_player_at_one_card = player
            self._missed_shouts[player.id] = self._turn

    def _apply_effect(self, card: Card, chosen_color: Optional[Color]) -> None:
        value = card.value
        previous = self._last_action_card.value if self._last_action_card else None

        if value == "skip":
            self._skip_next = True
            self._draw_penalty = 0
            self._last_action_card = card
        elif value == "reverse":
            self._direction = -self._direction
            # With two players Reverse acts like Skip
            if len(self._players) == 2:
                self._skip_next = True
            self._last_action_card = card
        elif value == "draw_two":
            if previous == "draw_two":
                self._draw_penalty += 2
            else:
                self._draw_penalty = 2
            self._skip_next = True
            self._last_action_card = card
        elif value == "wild":
            self._wild_color = chosen_color or self._rules.fallback_wild_color
            self._last_action_card = None
            self._record("Color changed to %s", self._wild_color.value)
        elif value == "wild_draw_four":
            if previous == "wild_draw_four":
                self._draw_penalty += 4
            else:
                self._draw_penalty = 4
            self._wild_color = chosen_color or self._rules.fallback_wild_color
            self._skip_next = True
            self._last_action_card = card
            self._record("Color changed to %s", self._wild_color.value)
        elif value == "7" and self._rules.seven_zero:
            self._phase = Phase.CHOOSING_PLAYER
        elif value == "0" and self._rules.seven_zero:
            self._rotate_hands()

        if self._draw_penalty:
            self._record("Pending penalty is %d", self._draw_penalty)

    def can_draw(self, player_id: str) -> bool:
        """Whether ``draw_card`` would be accepted for this player now."""
        player = self.get_player(player_id)
        if player is None or self._phase is not Phase.PLAYING:
            return False
        if self.current_player.id != player_id:
            return False
        if self._draw_penalty > 0 or self._rules.allow_draw_when_playable:
            return True
        return not self.playable_cards(player_id)

    def draw_card(self, player_id: str, chosen_color: Optional[Color] = None) -> Optional[Card]:
        """Draw for the current player.

        With a pending penalty the player absorbs all of it and the turn
        passes; the last card drawn is returned. Otherwise one card is drawn,
        which is only allowed when no legal play exists; a playable drawn card
        is played at once (``chosen_color`` applies if it is a wild).

        Returns None in two cases: the draw was rejected (nothing changed, use
        ``can_draw`` to check beforehand), or it was accepted but the deck was
        exhausted, in which case the turn has passed.
        """
        player = self._lookup(player_id)
        if player is None or not self.can_draw(player_id):
            return None
        if not self._valid_color(chosen_color):
            return None

        if self._draw_penalty > 0:
            cards = self._apply_penalty(player, self._draw_penalty, "penalty")
            self._draw_penalty = 0
            self._skip_next = False
            self._last_action_card = None
            self._advance()
            return cards[-1] if cards else None

        card = self._deck.draw()
        if card is None:
            self._record("%s could not draw, deck exhausted", player.name)
            self._advance()
            return None

        player.add_cards([card])
        self._record("%s drew a card", player.name)

        top = self._deck.top_card()
        if self._rules.must_play_if_drawable and card in player.playable_cards(top, self._wild_color):
            self._play(player, card, Color(chosen_color) if chosen_color is not None else None)
            return card

        self._advance()
        return card

    def declare_shout(self, player_id: str) -> bool:
        """Shout UNO.

        Valid with exactly one card, or on one's own turn with two cards,
        announcing the play that will leave one card.
        """
        player = self._lookup(player_id)
        if player is None or self._phase is Phase.GAME_OVER:
            return False
        is_current = self.current_player.id == player_id
        if player.hand_size == 1:
            player.declare_shout()
            if is_current:
                self._announced.add(player_id)
            self._last_player_at_one_card = player
            self._record("%s shouted UNO", player.name)
            return True
        if player.hand_size == 2 and is_current:
            self._announced.add(player_id)
            return True
        return False

    def challenge_missed_shout(self, challenger_id: str, target_id: str) -> bool:
        challenger = self._lookup(challenger_id)
        target = self._lookup(target_id)
        if challenger is None or target is None or challenger is target:
            return False
        if self._phase is Phase.GAME_OVER:
            return False
        if not target.should_be_penalized_for_missed_shout():
            self._emit("on_shout_challenged", challenger, target, False)
            return False
        self._apply_penalty(target, self._rules.shout_penalty, f"caught by {challenger.name}")
        self._missed_shouts.pop(target.id, None)
        if self._last_player_at_one_card is target:
            self._last_player_at_one_card = None
        self._emit("on_shout_challenged", challenger, target, True)
        return True

    def can_challenge_wild_draw_four(self, target_id: str) -> bool:
        top = self._deck.top_card()
        return (
            self._phase is not Phase.GAME_OVER
            and top is not None
            and top.value == "wild_draw_four"
            and self._last_played_by == target_id
            and self._previous_active_color is not None
            and not self._wild_draw_four_challenged
        )

    def challenge_wild_draw_four(self, challenger_id: str, target_id: str) -> bool:
        """Challenge the Wild Draw Four that ``target_id`` just played.

        Succeeds when the target still holds a card of the color that was
        active before the wild; the target then draws 4. Otherwise the
        challenger draws 6. Turn order is not changed.
        """
        challenger = self._lookup(challenger_id)
        target = self._lookup(target_id)
        if challenger is None or target is None or challenger is target:
            return False
        if not self.can_challenge_wild_draw_four(target_id):
            return False

        self._wild_draw_four_challenged = True
        if any(c.color == self._previous_active_color for c in target.hand):
            self._apply_penalty(target, WILD_DRAW_FOUR_CHALLENGE_PENALTY, "Wild Draw Four challenge")
            self._emit("on_wild_draw_four_challenged", challenger, target, True)
            return True
        self._apply_penalty(challenger, FAILED_CHALLENGE_PENALTY, "failed Wild Draw Four challenge")
        self._emit("on_wild_draw_four_challenged", challenger, target, False)
        return False

    def choose_color(self, player_id: str, color: Color) -> bool:
        """Pick the active color after a wild starter card."""
        player = self._lookup(player_id)
        if player is None or self._phase is not Phase.CHOOSING_COLOR:
            return False
        if self.current_player.id != player_id or color is None or not self._valid_color(color):
            return False
        self._wild_color = Color(color)
        self._phase = Phase.PLAYING
        self._record("%s chose %s", player.name, self._wild_color.value)
        return True

    def swap_hands(self, player_id: str, target_id: str) -> bool:
        """Swap hands with ``target_id`` after playing a 7 under the seven-zero rule.

        Only the player who played the 7 may call this, and only while the
        game waits for a target; the turn then passes as usual.
        """
        player = self._lookup(player_id)
        target = self._lookup(target_id)
        if player is None or target is None or player is target:
            return False
        if self._phase is not Phase.CHOOSING_PLAYER or self.current_player is not player:
            return False

        mine, theirs = player.reset_hand(), target.reset_hand()
        player.add_cards(theirs)
        target.add_cards(mine)
        self._excuse_single_cards((player, target))
        self._phase = Phase.PLAYING
        self._record("%s swapped hands with %s", player.name, target.name)
        self._emit("on_hands_swapped", player, target)
        self._advance()
        return True

    def _end_round(self, winner: Player) -> None:
        self._round_winner = winner
        self._phase = Phase.GAME_OVER
        points = sum(p.hand_points() for p in self._players if p is not winner)
        winner.add_score(points)
        self._record("%s won the round (+%d points, total %d)", winner.name, points, winner.score)
        self._emit("on_round_end", winner, points)
        if winner.score >= self._rules.target_score:
            self._winner = winner
            self._record("%s won the game", winner.name)
            self._emit("on_game_end", winner)

    # -- queries -----------------------------------------------------------

    @property
    def rules(self) -> Rules:
        return self._rules

    @property
    def players(self) -> List[Player]:
        return list(self._players)

    @property
    def current_player(self) -> Player:
        return self._players[self._current]

    @property
    def current_index(self) -> int:
        return self._current

    @property
    def direction(self) -> int:
        return self._direction

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def draw_penalty(self) -> int:
        return self._draw_penalty

    @property
    def skip_next(self) -> bool:
        return self._skip_next

    @property
    def wild_color(self) -> Optional[Color]:
        return self._wild_color

    @property
    def previous_active_color(self) -> Optional[Color]:
        return self._previous_active_color

    @property
    def last_action_card(self) -> Optional[Card]:
        return self._last_action_card

    @property
    def last_player_at_one_card(self) -> Optional[Player]:
        return self._last_player_at_one_card

    @property
    def last_played_by(self) -> Optional[str]:
        return self._last_played_by

    @property
    def round_winner(self) -> Optional[Player]:
        return self._round_winner

    @property
    def winner(self) -> Optional[Player]:
        return self._winner

    @property
    def history(self) -> List[str]:
        return list(self._history)

    def top_card(self) -> Optional[Card]:
        return self._deck.top_card()

    def deck_count(self) -> int:
        return self._deck.remaining_count()

    def discard_pile(self) -> List[Card]:
        return self._deck.discard_snapshot()

    def get_player(self, player_id: str) -> Optional[Player]:
        return next((p for p in self._players if p.id == player_id), None)

    def get_hand(self, player_id: str) -> Optional[List[Card]]:
        player = self.get_player(player_id)
        return player.hand if player else None

    def playable_cards(self, player_id: str) -> List[Card]:
        """Cards the player could legally play on the current top card.

        While a penalty is pending only the stackable card type qualifies.
        """
        player = self.get_player(player_id)
        top = self._deck.top_card()
        if player is None or top is None:
            return []
        cards = player.playable_cards(top, self._wild_color)
        if self._draw_penalty > 0:
            lac = self._last_action_card
            if lac is None or not self._rules.can_stack(lac.value):
                return []
            cards = [c for c in cards if c.value == lac.value]
        return cards

    def next_player(self) -> Player:
        return self._players[self._step(self._current)]

    def card_total(self) -> int:
        """Cards across draw pile, discard pile and all hands."""
        return self._deck.total_count() + sum(p.hand_size for p in self._players)

    def is_over(self) -> bool:
        return self._phase is Phase.GAME_OVER

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot.from_game(self)
