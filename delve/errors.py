"""Exceptions raised when a simulation invariant is violated."""

from __future__ import annotations


class EntityNotFoundError(KeyError):
    """An entity id is not (or no longer) alive in the world."""


class MissingResourceError(RuntimeError):
    """A context resource was read before it was created."""


class InvalidTransitionError(ValueError):
    """A run-state transition was requested that the state machine forbids."""
