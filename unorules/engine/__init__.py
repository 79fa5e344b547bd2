"""Game engine for UNO."""

from unorules.engine.card import Card, Color
from unorules.engine.deck import DECK_SIZE, Deck, create_deck
from unorules.engine.game import Game, GameEvents, Phase
from unorules.engine.game_state import GameSnapshot, PlayerSummary, PlayerView
from unorules.engine.player import Player
from unorules.engine.rules import (
    ChallengeShout,
    ChallengeWildDrawFour,
    ChooseColor,
    DeclareShout,
    DrawCard,
    Move,
    PlayCard,
    Rules,
    SwapHands,
    apply_move,
    get_legal_moves,
)

__all__ = [
    "Card",
    "Color",
    "DECK_SIZE",
    "Deck",
    "create_deck",
    "Game",
    "GameEvents",
    "Phase",
    "GameSnapshot",
    "PlayerSummary",
    "PlayerView",
    "Player",
    "Rules",
    "Move",
    "PlayCard",
    "DrawCard",
    "DeclareShout",
    "ChallengeShout",
    "ChallengeWildDrawFour",
    "ChooseColor",
    "SwapHands",
    "get_legal_moves",
    "apply_move",
]
