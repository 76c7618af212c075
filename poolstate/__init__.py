"""State accounts, tick arrays and swap tick-walking helpers for concentrated-liquidity pools."""

__version__ = "0.1.0"