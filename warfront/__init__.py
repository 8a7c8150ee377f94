"""Warfront: turn-based territory conquest on a region graph."""

__version__ = "1.0.0"
