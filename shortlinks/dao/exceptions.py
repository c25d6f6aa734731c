"""Errors raised by the Persistence Port adapters.

Hierarchy:
    DAOError
    ├── ShortLinkNotFoundError        unknown code
    ├── ShortLinkAlreadyExistsError   code already claimed (uniqueness is enforced by the store)
    ├── UserDoesNotExistError         unknown account
    └── DataStoreError                the store failed to answer (connection, timeout, OOM)
        └── DeadlineExceededError     the originating request ran out of time

ShortLinkService translates these into `shortlinks.exceptions` before they
reach the transport layer.

Example:
    >>> raise ShortLinkNotFoundError("Short link with code 'abc123' not found.")
    Traceback (most recent call last):
        ...
    shortlinks.dao.exceptions.ShortLinkNotFoundError: Short link with code 'abc123' not found.
"""


class DAOError(Exception):
    """Base class for Persistence Port errors."""

    pass


class ShortLinkNotFoundError(DAOError):
    pass


class ShortLinkAlreadyExistsError(DAOError):
    """The code is already claimed, by this owner or another."""

    pass


class UserDoesNotExistError(DAOError):
    pass


class DataStoreError(DAOError):
    """The store could not serve the call. Safe to retry."""

    pass


class DeadlineExceededError(DataStoreError):
    """The call was made, or waited, past its request deadline."""

    pass
