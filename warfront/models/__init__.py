"""Data models for Warfront."""

from .command import MOVE, PLAN, Command
from .game import Game
from .player import Player
from .region import Region
from .scratch import Group, RegionScratch, TurnScratch

__all__ = [
    "MOVE",
    "PLAN",
    "Command",
    "Game",
    "Group",
    "Player",
    "Region",
    "RegionScratch",
    "TurnScratch",
]
