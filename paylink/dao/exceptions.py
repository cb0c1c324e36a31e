"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    ShortLinkNotFoundError:
        Raised when a short link token is unknown or has expired.

    ShortLinkAlreadyExistsError:
        Raised when attempting to insert a token that is still live.

    DataStoreError:
        Raised when there is an error in the data store (e.g., connection issues, timeouts, OOM, etc.).

Example:
    >>> from paylink.dao.exceptions import ShortLinkNotFoundError
    >>> raise ShortLinkNotFoundError("Short link with token 'abc' not found.")
    Traceback (most recent call last):
        ...
    paylink.dao.exceptions.ShortLinkNotFoundError: Short link with token 'abc' not found.
"""

from paylink.exceptions import PaylinkError


class DAOError(PaylinkError):
    """Generic base class for DAO-related exceptions."""

    error_code = 'dao:dao_error'


class ShortLinkNotFoundError(DAOError):
    """Raised when a ShortLinkModel is not found in the data store."""

    error_code = 'dao:short_link_not_found_error'


class ShortLinkAlreadyExistsError(DAOError):
    """Raised when inserting a ShortLinkModel whose token is already taken."""

    error_code = 'dao:short_link_already_exists_error'


class DataStoreError(DAOError):
    """Raised when the data store encounters an error.

    Examples include connection issues, timeouts, and out-of-memory failures.
    """

    error_code = 'dao:data_store_error'
