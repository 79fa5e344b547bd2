"""Decision-maker interface."""

from unorules.agent.protocol import Strategy

__all__ = ["Strategy"]
