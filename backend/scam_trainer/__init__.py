"""Scam awareness trainer: simulated scam conversations with post-hoc feedback."""

__version__ = "0.1.0"
