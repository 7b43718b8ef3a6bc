"""Prefscale backend: accounts, session tokens, blogs and contact messages."""

__version__ = "1.0.0"
