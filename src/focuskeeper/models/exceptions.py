"""Exceptions raised by the focus core and its storage adapters."""


class FocusKeeperError(Exception):
    """Base exception for FocusKeeper errors."""


class PersistenceError(FocusKeeperError):
    """A backend read or write failed.

    The in-memory session stays authoritative; callers may retry or just
    display the error.
    """


class ValidationError(FocusKeeperError):
    """Input was rejected before any state was mutated."""


class InvalidStateError(ValidationError):
    """The operation is not allowed in the clock's current state."""


class NotFoundError(FocusKeeperError):
    """A requested record does not exist."""


class SessionBusyError(FocusKeeperError):
    """Another process owns the user's focus session."""
