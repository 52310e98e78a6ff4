"""
Ring Router Errors

The router has a deliberately narrow error taxonomy:

- ConfigurationError: invalid input at construction time
- EmptyRingError: a lookup that needs a node found an empty ring

Plain lookups (RingRouter.resolve) never raise EmptyRingError; they return
None. Only the explicit require()/client_for() paths turn "no node" into an
exception.
"""


class RingError(Exception):
    """Base class for all shard-ring errors."""


class ConfigurationError(RingError, ValueError):
    """Raised for an invalid replica count or malformed shard definitions."""


class EmptyRingError(RingError, LookupError):
    """Raised when a node is required but the ring holds no points."""

    def __init__(self, key=None):
        self.key = key
        message = "no backend available: ring is empty"
        if key is not None:
            message = f"{message} (key={key!r})"
        super().__init__(message)
