from __future__ import annotations


class BlockPuzzleError(Exception):
    """Base class for engine errors caused by broken data, never by play."""


class InvalidShapeError(BlockPuzzleError, ValueError):
    pass


class UnknownFamilyError(BlockPuzzleError, KeyError):
    pass


class ConfigError(BlockPuzzleError, ValueError):
    pass


class SessionStateError(BlockPuzzleError, ValueError):
    """A serialized session does not satisfy the engine invariants."""
