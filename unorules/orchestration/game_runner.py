"""Round runner and multi-round match."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Optional, Sequence

from unorules.agents.human_agent import HumanStrategy
from unorules.engine import Card, Color, Game, GameEvents, Phase, Player, PlayerView, Rules

if TYPE_CHECKING:
    from unorules.agent.protocol import Strategy

logger = logging.getLogger(__name__)


@dataclass
class RoundResult:
    """Result of a completed (or abandoned) round."""

    winner: Optional[str]
    num_turns: int
    player_ids: tuple[str, ...]
    points: int = 0
    scores: Dict[str, int] = field(default_factory=dict)
    game_winner: Optional[str] = None
    stalled: bool = False


def _seat_players(strategies: Dict[str, "Strategy"], names: Optional[Dict[str, str]] = None) -> list[Player]:
    names = names or {}
    return [
        Player(pid, names.get(pid, strategy.name), is_human=isinstance(strategy, HumanStrategy))
        for pid, strategy in strategies.items()
    ]


def _default_color(player: Player) -> Color:
    counts = player.color_counts()
    return max(Color.playable(), key=lambda c: counts[c])


def _default_swap_target(game: Game, player: Player) -> str:
    opponents = [p for p in game.players if p is not player]
    return min(opponents, key=lambda p: p.hand_size).id


class GameRunner:
    """Runs a single UNO round to completion.

    Strategies only choose; every move goes through the ``Game``'s public
    operations, which validate it like any other caller's.
    """

    def __init__(
        self,
        strategies: Dict[str, "Strategy"],
        rules: Optional[Rules] = None,
        seed: Optional[int] = None,
        max_turns: int = 1000,
        players: Optional[Sequence[Player]] = None,
        events: Optional[GameEvents] = None,
    ):
        self._strategies = strategies
        self._rules = rules or Rules()
        self._seed = seed
        self._max_turns = max_turns
        self._players = list(players) if players is not None else _seat_players(strategies)
        self._events = events
        self.game: Optional[Game] = None

    def run(self) -> RoundResult:
        """Run the round and return the result."""
        game = Game(self._players, rules=self._rules, seed=self._seed, events=self._events)
        self.game = game
        before = {p.id: p.score for p in game.players}
        num_turns = 0

        while not game.is_over() and num_turns < self._max_turns:
            player = game.current_player
            strategy = self._strategies[player.id]

            if game.phase is not Phase.PLAYING:
                self._resolve_choice(game, player, strategy)
                continue

            self._take_turn(game, player, strategy)
            num_turns += 1
            self._challenge_missed_shout(game, player)

        winner = game.round_winner
        if winner is None:
            logger.warning("Round abandoned after %d turns", num_turns)
        return RoundResult(
            winner=winner.id if winner else None,
            num_turns=num_turns,
            player_ids=tuple(p.id for p in game.players),
            points=(winner.score - before[winner.id]) if winner else 0,
            scores={p.id: p.score for p in game.players},
            game_winner=game.winner.id if game.winner else None,
            stalled=winner is None,
        )

    def _resolve_choice(self, game: Game, player: Player, strategy: "Strategy") -> None:
        """Answer a wild starter color or a seven-zero swap target."""
        view = PlayerView.from_game(game, player.id)
        if game.phase is Phase.CHOOSING_COLOR:
            color = strategy.choose_wild_color(player.hand, view)
            if not game.choose_color(player.id, color):
                game.choose_color(player.id, _default_color(player))
        elif game.phase is Phase.CHOOSING_PLAYER:
            target = strategy.choose_swap_target(view)
            if not game.swap_hands(player.id, target):
                logger.warning("%s chose invalid swap target %r", strategy.name, target)
                game.swap_hands(player.id, _default_swap_target(game, player))

    def _take_turn(self, game: Game, player: Player, strategy: "Strategy") -> None:
        view = PlayerView.from_game(game, player.id)
        playable = game.playable_cards(player.id)
        card: Optional[Card] = strategy.choose_card(playable, view) if playable else None

        if card is not None and card not in playable:
            logger.warning("%s chose unplayable card %s", strategy.name, card)
            card = None
        if card is None and not game.can_draw(player.id):
            # Drawing is not allowed while a legal play exists
            card = playable[0]

        if card is not None:
            color = None
            if card.is_wild():
                remaining = [c for c in player.hand if c.id != card.id]
                color = strategy.choose_wild_color(remaining, view)
                if color not in Color.playable():
                    color = _default_color(player)
            if player.hand_size == 2:
                game.declare_shout(player.id)
            game.play_card(player.id, card.id, color)
            return

        if player.hand_size == 1:
            game.declare_shout(player.id)
        game.draw_card(player.id, _default_color(player))

    def _challenge_missed_shout(self, game: Game, mover: Player) -> None:
        if game.is_over() or game.rules.shout_policy != "challenge":
            return
        challenger = game.current_player
        if challenger is not mover and mover.should_be_penalized_for_missed_shout():
            game.challenge_missed_shout(challenger.id, mover.id)


class Match:
    """A session of rounds played until someone reaches the target score."""

    def __init__(
        self,
        strategies: Dict[str, "Strategy"],
        rules: Optional[Rules] = None,
        seed: Optional[int] = None,
        max_turns: int = 1000,
        names: Optional[Dict[str, str]] = None,
        events: Optional[GameEvents] = None,
    ):
        self._strategies = strategies
        self._rules = rules or Rules()
        self._rng = random.Random(seed)
        self._max_turns = max_turns
        self.players = _seat_players(strategies, names)
        self._events = events
        self.rounds: list[RoundResult] = []

    @property
    def scores(self) -> Dict[str, int]:
        return {p.id: p.score for p in self.players}

    @property
    def winner(self) -> Optional[str]:
        for result in self.rounds:
            if result.game_winner:
                return result.game_winner
        return None

    def play_round(self) -> RoundResult:
        runner = GameRunner(
            self._strategies,
            rules=self._rules,
            seed=self._rng.randint(0, 2**31 - 1),
            max_turns=self._max_turns,
            players=self.players,
            events=self._events,
        )
        result = runner.run()
        self.rounds.append(result)
        logger.info("Round %d: winner=%s points=%d", len(self.rounds), result.winner, result.points)
        return result

    def run(self, max_rounds: int = 100) -> Optional[str]:
        """Play rounds until there is an overall winner; returns its id."""
        while self.winner is None and len(self.rounds) < max_rounds:
            self.play_round()
        return self.winner

    def restart(self) -> None:
        """Forget the rounds played and zero every score."""
        for player in self.players:
            player.reset_score()
        self.rounds = []
