"""Exceptions raised by the layout optimisation engine."""

from typing import Optional


class TrussForgeError(Exception):
    """Base exception for trussforge operations."""


class DimensionMismatch(TrussForgeError):
    """A boundary-condition list does not match the node list."""

    def __init__(self, name: str, expected: int, actual: int):
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{name} list has {actual} entries but the structure has {expected} nodes"
        )


class InvalidTopology(TrussForgeError):
    """A member references an unknown node or joins a node to itself."""


class SolverFailure(TrussForgeError):
    """The LP backend could not produce a solution.

    The backend's message is kept verbatim so it can be shown to the user.
    """

    def __init__(self, message: str, backend: Optional[str] = None):
        self.message = message
        self.backend = backend
        super().__init__(message)


class SessionStateError(TrussForgeError):
    """An operation was requested in a state that does not allow it."""
