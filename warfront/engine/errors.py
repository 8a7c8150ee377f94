"""Engine exception types."""


class WarfrontError(Exception):
    """Base class for engine errors."""


class InvalidCommand(WarfrontError, ValueError):
    """A single staged command is malformed or not allowed.

    Always handled inside CommandStaging: the command is dropped and the
    rest of the batch goes ahead.
    """


class DuplicateSubmission(WarfrontError):
    """A player submitted after already submitting this turn."""


class UnknownPlayer(WarfrontError, KeyError):
    """A request named a player that is not in the game."""


class UnknownRegion(WarfrontError, KeyError):
    """A request named a region id that does not exist."""


class NoStartingRegion(WarfrontError):
    """No empty passable region is left to place a new player."""
