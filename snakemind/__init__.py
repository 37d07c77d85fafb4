"""Deadline-bounded move engine for Battlesnake."""

__version__ = "1.0.0"
