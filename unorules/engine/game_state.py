"""Read-only snapshots of a game for renderers and decision makers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional

from unorules.engine.card import Card, Color

if TYPE_CHECKING:
    from unorules.engine.game import Game

HISTORY_WINDOW = 10


@dataclass(frozen=True)
class PlayerSummary:
    """Public information about one seat."""

    id: str
    name: str
    is_human: bool
    hand_size: int
    score: int
    has_shouted: bool
    turn_order: int


@dataclass(frozen=True)
class GameSnapshot:
    """Immutable copy of everything a table display needs."""

    phase: str
    direction: int  # 1 = clockwise, -1 = counter-clockwise
    current_player: str
    top_card: Optional[Card]
    wild_color: Optional[Color]
    pending_draws: int
    skip_next: bool
    deck_count: int
    players: tuple[PlayerSummary, ...]
    round_winner: Optional[str] = None
    winner: Optional[str] = None
    history: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_game(cls, game: "Game") -> "GameSnapshot":
        return cls(
            phase=game.phase.value,
            direction=game.direction,
            current_player=game.current_player.id,
            top_card=game.top_card(),
            wild_color=game.wild_color,
            pending_draws=game.draw_penalty,
            skip_next=game.skip_next,
            deck_count=game.deck_count(),
            players=tuple(
                PlayerSummary(
                    id=p.id,
                    name=p.name,
                    is_human=p.is_human,
                    hand_size=p.hand_size,
                    score=p.score,
                    has_shouted=p.has_shouted,
                    turn_order=i,
                )
                for i, p in enumerate(game.players)
            ),
            round_winner=game.round_winner.id if game.round_winner else None,
            winner=game.winner.id if game.winner else None,
            history=tuple(game.history[-HISTORY_WINDOW:]),
        )

    def active_color(self) -> Optional[Color]:
        """Color that must be matched (the wild choice, else the top card's)."""
        if self.wild_color is not None:
            return self.wild_color
        if self.top_card is not None and not self.top_card.is_wild():
            return self.top_card.color
        return None


@dataclass
class PlayerView:
    """Filtered game state visible to a single player.

    Contains only that player's hand and public info.
    """

    player_id: str
    my_hand: List[Card]
    playable: List[Card]
    top_discard: Optional[Card]
    active_color: Optional[Color]
    current_player: str
    direction: int
    pending_draws: int
    player_order: tuple[str, ...]
    num_cards_per_player: Dict[str, int]  # player_id -> count
    next_player: str
    history: List[str]  # Recent game events

    @classmethod
    def from_game(cls, game: "Game", player_id: str) -> "PlayerView":
        """Create a player view, hiding other players' hands."""
        snapshot = game.snapshot()
        return cls(
            player_id=player_id,
            my_hand=game.get_hand(player_id) or [],
            playable=game.playable_cards(player_id),
            top_discard=snapshot.top_card,
            active_color=snapshot.active_color(),
            current_player=snapshot.current_player,
            direction=snapshot.direction,
            pending_draws=snapshot.pending_draws,
            player_order=tuple(p.id for p in snapshot.players),
            num_cards_per_player={p.id: p.hand_size for p in snapshot.players},
            next_player=game.next_player().id,
            history=list(snapshot.history),
        )
