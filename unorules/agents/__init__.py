"""Built-in strategies."""

from unorules.agents.heuristic_agent import HeuristicStrategy
from unorules.agents.human_agent import HumanStrategy
from unorules.agents.llm_agent import LLMStrategy
from unorules.agents.providers import ProviderConfig, ProviderRegistry

__all__ = ["HeuristicStrategy", "HumanStrategy", "LLMStrategy", "ProviderConfig", "ProviderRegistry"]
