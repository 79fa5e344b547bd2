"""CLI entry point."""

from __future__ import annotations

import logging
from typing import Optional

import typer
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(help="UNO rule engine with heuristic, LLM and human players")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _parse_strategies(
    roster: str,
    llm_provider: str,
    llm_model: Optional[str],
    seed: Optional[int],
) -> dict[str, "Strategy"]:
    import random

    from unorules.agent.protocol import Strategy
    from unorules.agents import HeuristicStrategy, HumanStrategy, LLMStrategy, ProviderRegistry

    registry = ProviderRegistry.with_defaults()
    rng = random.Random(seed)
    parts = [s.strip().lower() for s in roster.split(",") if s.strip()]
    strategies: dict[str, Strategy] = {}
    for i, part in enumerate(parts):
        pid = f"player_{i}"
        kind, _, arg = part.partition(":")

        if kind == "heuristic":
            try:
                strategies[pid] = HeuristicStrategy(arg or "expert", rng=random.Random(rng.randrange(2**32)))
            except ValueError as e:
                raise typer.BadParameter(str(e))
        elif kind == "llm":
            fallback = HeuristicStrategy("expert", rng=random.Random(rng.randrange(2**32)))
            try:
                strategies[pid] = LLMStrategy.from_registry(
                    registry, llm_provider, fallback, model=arg or llm_model
                )
            except ValueError as e:
                raise typer.BadParameter(str(e))
        elif kind == "human":
            strategies[pid] = HumanStrategy(name=f"Human_{i}")
        else:
            raise typer.BadParameter(
                f"Unknown player type: {kind}. Use 'heuristic[:level]', 'llm[:model]' or 'human'."
            )
    if len(strategies) < 2:
        raise typer.BadParameter("At least 2 players are required.")
    return strategies


def _build_rules(target_score: int, stacking: bool, shout_policy: str, seven_zero: bool = False) -> "Rules":
    from unorules.engine import Rules

    try:
        return Rules(
            stack_draw_two=stacking,
            stack_draw_four=stacking,
            target_score=target_score,
            shout_policy=shout_policy,
            seven_zero=seven_zero,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e))


PLAYERS_HELP = "Comma-separated: heuristic[:easy|normal|hard|expert], llm[:model], human"
SEVEN_ZERO_HELP = "House rule: a 7 swaps hands with a chosen player, a 0 passes all hands on"


@app.command()
def play(
    players: str = typer.Option("human,heuristic,heuristic,heuristic", "--players", "-a", help=PLAYERS_HELP),
    llm_provider: str = typer.Option("openrouter", "--llm-provider", "-p", help="openrouter, groq, ollama, huggingface or openai"),
    llm_model: Optional[str] = typer.Option(None, "--llm-model", "-m", help="Model name (provider default if omitted)"),
    stacking: bool = typer.Option(True, "--stacking/--no-stacking", help="Allow stacking Draw Two / Wild Draw Four"),
    shout_policy: str = typer.Option("immediate", "--shout-policy", help="immediate or challenge"),
    seven_zero: bool = typer.Option(False, "--seven-zero", help=SEVEN_ZERO_HELP),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Random seed"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every game event"),
) -> None:
    """Play a single round."""
    from unorules.orchestration.game_runner import GameRunner

    _configure_logging(verbose)
    strategies = _parse_strategies(players, llm_provider, llm_model, seed)
    rules = _build_rules(500, stacking, shout_policy, seven_zero)
    runner = GameRunner(strategies, rules=rules, seed=seed)
    result = runner.run()
    typer.echo(f"Winner: {result.winner or 'None (abandoned)'}")
    typer.echo(f"Points: {result.points}")
    typer.echo(f"Turns: {result.num_turns}")


@app.command()
def match(
    players: str = typer.Option("heuristic,heuristic,heuristic,heuristic", "--players", "-a", help=PLAYERS_HELP),
    llm_provider: str = typer.Option("openrouter", "--llm-provider", "-p", help="openrouter, groq, ollama, huggingface or openai"),
    llm_model: Optional[str] = typer.Option(None, "--llm-model", "-m", help="Model name"),
    target_score: int = typer.Option(500, "--target-score", "-t", help="Score that wins the game"),
    stacking: bool = typer.Option(True, "--stacking/--no-stacking", help="Allow stacking Draw Two / Wild Draw Four"),
    shout_policy: str = typer.Option("immediate", "--shout-policy", help="immediate or challenge"),
    seven_zero: bool = typer.Option(False, "--seven-zero", help=SEVEN_ZERO_HELP),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Random seed"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every game event"),
) -> None:
    """Play rounds until someone reaches the target score."""
    from unorules.orchestration.game_runner import Match

    _configure_logging(verbose)
    strategies = _parse_strategies(players, llm_provider, llm_model, seed)
    session = Match(strategies, rules=_build_rules(target_score, stacking, shout_policy, seven_zero), seed=seed)
    winner = session.run()
    for i, result in enumerate(session.rounds, 1):
        typer.echo(f"Round {i}: {result.winner or 'abandoned'} +{result.points}")
    typer.echo("Scores:")
    for pid, score in sorted(session.scores.items(), key=lambda x: -x[1]):
        typer.echo(f"  {pid}: {score}")
    typer.echo(f"Winner: {winner or 'None'}")


@app.command()
def tournament(
    players: str = typer.Option("heuristic:expert,heuristic:easy", "--players", "-a", help=PLAYERS_HELP),
    games: int = typer.Option(100, "--games", "-g", help="Number of rounds"),
    seven_zero: bool = typer.Option(False, "--seven-zero", help=SEVEN_ZERO_HELP),
    llm_provider: str = typer.Option("openrouter", "--llm-provider", "-p", help="openrouter, groq, ollama, huggingface or openai"),
    llm_model: Optional[str] = typer.Option(None, "--llm-model", "-m", help="Model name"),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Random seed"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every game event"),
) -> None:
    """Run a tournament."""
    from unorules.orchestration.tournament import run_tournament

    _configure_logging(verbose)
    strategies = _parse_strategies(players, llm_provider, llm_model, seed)
    rules = _build_rules(500, True, "immediate", seven_zero)
    wins = run_tournament(strategies, num_games=games, rules=rules, seed=seed)
    typer.echo("Tournament results:")
    for pid in strategies:
        typer.echo(f"  {pid} ({strategies[pid].name}): {wins.get(pid, 0)} wins")


@app.command()
def providers() -> None:
    """List the built-in LLM providers."""
    from unorules.agents import ProviderRegistry

    registry = ProviderRegistry.with_defaults()
    for name in registry.names():
        config = registry.get(name)
        key = config.api_key_env or "no key"
        typer.echo(f"{name}: {config.resolved_base_url()} (default model {config.default_model}, {key})")


if __name__ == "__main__":
    app()
