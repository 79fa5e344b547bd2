"""UNO rule engine with pluggable heuristic and LLM strategies."""

__version__ = "0.1.0"
