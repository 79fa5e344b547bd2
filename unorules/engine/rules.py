"""UNO rule toggles and move commands."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, List, Optional, Union

from unorules.engine.card import Color

if TYPE_CHECKING:
    from unorules.engine.game import Game

SHOUT_POLICIES = ("immediate", "challenge")


@dataclass
class Rules:
    """Rule configuration, read once when a game is constructed.

    Attributes:
        stack_draw_two: a pending Draw Two penalty may be answered with Draw Two.
        stack_draw_four: a pending Wild Draw Four penalty may be answered with
            Wild Draw Four.
        must_play_if_drawable: a voluntarily drawn card that can be played is
            played on the drawer's behalf.
        allow_draw_when_playable: voluntary draws are allowed even when the
            player holds a legal card.
        target_score: cumulative score that wins the whole game.
        shout_policy: "immediate" penalizes a missed shout as soon as the hand
            reaches one card; "challenge" leaves it to other players.
        shout_penalty: cards drawn for a missed shout.
        shout_challenge_window: under the "challenge" policy, number of turns
            after the miss during which other players may challenge; once they
            have passed, the penalty is applied automatically.
        hand_size: cards dealt to each player.
        fallback_wild_color: color used for a wild played without a choice.
        history_limit: maximum number of kept history lines.
        seven_zero: a 7 makes its player swap hands with a chosen opponent;
            a 0 passes every hand on in the direction of play.
    """

    stack_draw_two: bool = True
    stack_draw_four: bool = True
    must_play_if_drawable: bool = True
    allow_draw_when_playable: bool = False
    target_score: int = 500
    shout_policy: str = "immediate"
    shout_penalty: int = 2
    shout_challenge_window: int = 1
    hand_size: int = 7
    fallback_wild_color: Color = Color.RED
    history_limit: int = 1000
    seven_zero: bool = False

    def __post_init__(self) -> None:
        self.fallback_wild_color = Color(self.fallback_wild_color)
        if self.shout_policy not in SHOUT_POLICIES:
            raise ValueError(f"Unknown shout policy: {self.shout_policy}")
        if self.target_score <= 0:
            raise ValueError("target_score must be positive")
        if self.hand_size <= 0:
            raise ValueError("hand_size must be positive")
        if self.shout_penalty < 0:
            raise ValueError("shout_penalty must not be negative")
        if self.shout_challenge_window < 0:
            raise ValueError("shout_challenge_window must not be negative")
        if self.fallback_wild_color is Color.WILD:
            raise ValueError("fallback_wild_color must be a playable color")

    def can_stack(self, value: str) -> bool:
        """Whether a pending penalty of this card value may be stacked."""
        if value == "draw_two":
            return self.stack_draw_two
        if value == "wild_draw_four":
            return self.stack_draw_four
        return False

    @classmethod
    def from_dict(cls, d: dict) -> "Rules":
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        return cls(**filtered)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["fallback_wild_color"] = self.fallback_wild_color.value
        return data


@dataclass
class PlayCard:
    """Move: play a card. For wilds, chosen_color picks the new color."""

    card_id: str
    chosen_color: Optional[Color] = None


@dataclass
class DrawCard:
    """Move: draw (absorbing a pending penalty, or a voluntary single draw).

    chosen_color is used if the drawn card is a wild that gets auto-played.
    """

    chosen_color: Optional[Color] = None


@dataclass
class DeclareShout:
    """Move: announce being down to one card."""

    pass


@dataclass
class ChallengeShout:
    """Move: accuse another player of a missed shout."""

    target_id: str


@dataclass
class ChallengeWildDrawFour:
    """Move: challenge the Wild Draw Four just played by target_id."""

    target_id: str


@dataclass
class ChooseColor:
    """Move: pick the color for a wild starter card."""

    color: Color


@dataclass
class SwapHands:
    """Move: after playing a 7 under the seven-zero rule, swap hands with target_id."""

    target_id: str


Move = Union[PlayCard, DrawCard, DeclareShout, ChallengeShout, ChallengeWildDrawFour, ChooseColor, SwapHands]


def get_legal_moves(game: "Game", player_id: str) -> List[Move]:
    """Return the play/draw moves the player may submit right now.

    Shouts and challenges are not listed; they are available to any player
    whose situation allows them.
    """
    if game.is_over() or game.current_player.id != player_id:
        return []

    if game.phase == "choosing_color":
        return [ChooseColor(color=color) for color in Color.playable()]
    if game.phase == "choosing_player":
        return [SwapHands(target_id=p.id) for p in game.players if p.id != player_id]

    moves: List[Move] = []
    for card in game.playable_cards(player_id):
        if card.is_wild():
            for color in Color.playable():
                moves.append(PlayCard(card_id=card.id, chosen_color=color))
        else:
            moves.append(PlayCard(card_id=card.id))

    if game.can_draw(player_id):
        moves.append(DrawCard())
    return moves


def apply_move(game: "Game", player_id: str, move: Move) -> bool:
    """Apply a move through the game's public operations.

    Returns True if the game accepted it. A draw that was accepted but found
    the deck exhausted also counts as accepted.
    """
    if isinstance(move, PlayCard):
        return game.play_card(player_id, move.card_id, move.chosen_color)
    if isinstance(move, DrawCard):
        if not game.can_draw(player_id):
            return False
        game.draw_card(player_id, move.chosen_color)
        return True
    if isinstance(move, DeclareShout):
        return game.declare_shout(player_id)
    if isinstance(move, ChallengeShout):
        return game.challenge_missed_shout(player_id, move.target_id)
    if isinstance(move, ChallengeWildDrawFour):
        return game.challenge_wild_draw_four(player_id, move.target_id)
    if isinstance(move, ChooseColor):
        return game.choose_color(player_id, move.color)
    if isinstance(move, SwapHands):
        return game.swap_hands(player_id, move.target_id)
    raise TypeError(f"Unknown move: {move!r}")
