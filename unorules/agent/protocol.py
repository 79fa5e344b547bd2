"""Strategy protocol - interface that heuristic, LLM and human players implement."""

from typing import Optional, Protocol

from unorules.engine import Card, Color, PlayerView


class Strategy(Protocol):
    """Interface for UNO decision makers.

    A strategy only ever picks among cards the engine reports as playable;
    its choice is submitted through the same ``Game`` operations a human uses.
    """

    @property
    def name(self) -> str:
        """Display name for the strategy."""
        ...

    def choose_card(self, playable: list[Card], view: PlayerView) -> Optional[Card]:
        """Choose a card to play.

        Args:
            playable: Legal cards for this turn (never empty when called by the runner).
            view: Filtered view with only this player's hand and public info.

        Returns:
            One of ``playable``, or None to draw instead.
        """
        ...

    def choose_wild_color(self, hand: list[Card], view: PlayerView) -> Color:
        """Choose the color to declare for a wild card."""
        ...

    def choose_swap_target(self, view: PlayerView) -> str:
        """Choose whose hand to take after playing a 7 under the seven-zero rule."""
        ...
