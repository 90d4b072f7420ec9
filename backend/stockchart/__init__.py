"""Stateless stock history and chart rendering API."""

__version__ = "1.0.0"
