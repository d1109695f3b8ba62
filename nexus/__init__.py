"""Raft consensus building blocks and a replicated key-value state machine."""

__version__ = "0.1.0"