"""Card and Color types for UNO."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Color(str, Enum):
    """Card colors. WILD marks the two wild values."""

    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    WILD = "wild"

    @classmethod
    def playable(cls) -> tuple["Color", ...]:
        """The four colors a wild card can be declared as."""
        return (cls.RED, cls.BLUE, cls.GREEN, cls.YELLOW)


NUMBER_VALUES = ("0", "1", "2", "3", "4", "5", "6", "7", "8", "9")
COLORED_ACTIONS = ("skip", "reverse", "draw_two")
WILD_VALUES = ("wild", "wild_draw_four")

CARD_VALUES = NUMBER_VALUES + COLORED_ACTIONS + WILD_VALUES

ACTION_POINTS = 20
WILD_POINTS = 50


def card_points(value: str) -> int:
    """Scoring value of a card face."""
    if value in NUMBER_VALUES:
        return int(value)
    if value in COLORED_ACTIONS:
        return ACTION_POINTS
    if value in WILD_VALUES:
        return WILD_POINTS
    raise ValueError(f"Invalid card value: {value}")


@dataclass(frozen=True)
class Card:
    """A UNO card.

    For number/action cards: color is one of the four colors, value is
    "0"-"9", "skip", "reverse" or "draw_two".
    For wild cards: color is Color.WILD, value is "wild" or "wild_draw_four".
    """

    id: str
    color: Color
    value: str
    points: int = field(init=False, compare=False)

    def __post_init__(self) -> None:
        if self.value not in CARD_VALUES:
            raise ValueError(f"Invalid card value: {self.value}")
        if self.value in WILD_VALUES and self.color is not Color.WILD:
            raise ValueError("Wild cards must have color=Color.WILD")
        if self.value not in WILD_VALUES and self.color is Color.WILD:
            raise ValueError("Non-wild cards must have a playable color")
        object.__setattr__(self, "points", card_points(self.value))

    def can_follow(self, top: "Card", wild_color: Optional[Color] = None) -> bool:
        """Check if this card can legally be played on ``top``."""
        # Wild can always be played
        if self.is_wild():
            return True
        if wild_color is not None and self.color == wild_color:
            return True
        return self.color == top.color or self.value == top.value

    def is_wild(self) -> bool:
        return self.color is Color.WILD

    def is_number(self) -> bool:
        return self.value in NUMBER_VALUES

    def is_action_card(self) -> bool:
        return not self.is_number()

    def is_draw_penalty(self) -> bool:
        return self.value in ("draw_two", "wild_draw_four")

    def __str__(self) -> str:
        if self.is_wild():
            return self.value
        return f"{self.color.value}_{self.value}"
