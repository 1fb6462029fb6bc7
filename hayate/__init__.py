"""Event-driven trading bot toolkit: fixed-point numbers, order books, positions, a bot runner and a Bybit order book feed."""

__version__ = "0.1.0"