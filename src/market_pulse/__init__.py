"""market-pulse: session-aware equity quotes and multi-source token prices."""

__version__ = "0.1.0"
