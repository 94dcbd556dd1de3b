"""Evvl: compare and validate model outputs across AI providers."""

__version__ = "0.4.0"
