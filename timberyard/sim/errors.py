"""Coordination error taxonomy."""

from __future__ import annotations


class CoordinationError(Exception):
    """Base class for coordination failures inside the simulation core."""


class ClaimConflict(CoordinationError):
    """Another agent won the race for a resource or build site."""

    def __init__(self, target: object, *, holder: str | None = None) -> None:
        self.target = target
        self.holder = holder
        detail = f" (held by {holder})" if holder else ""
        super().__init__(f"Lost claim on {target}{detail}.")


class NoResourceAvailable(CoordinationError):
    """The resource field holds no unclaimed node."""


class NoSiteFound(CoordinationError):
    """The locator exhausted its search radius without a clear site."""


class InvalidStateTransition(CoordinationError):
    """An agent tried to enter a state without its required preconditions.

    This signals a broken invariant and is never recovered from.
    """


class ScenarioError(ValueError):
    """A scenario file could not be turned into a world."""
