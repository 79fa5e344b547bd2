"""Game orchestration."""

from unorules.orchestration.game_runner import GameRunner, Match, RoundResult
from unorules.orchestration.tournament import run_tournament

__all__ = ["GameRunner", "Match", "RoundResult", "run_tournament"]
