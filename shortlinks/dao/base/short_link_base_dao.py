"""Abstract base class for short link data access objects (DAOs).

This class establishes a consistent contract for all short link DAO implementations,
regardless of the underlying storage mechanism (e.g., Redis, in-memory, PostgreSQL).
It is the Persistence Port of the service: the service layer never talks to a
data store by any other route.

Responsibilities:
    - Provide an interface for creating, reading and updating ShortLinkRecord objects.
    - Append and list ClickEvent objects per short code.
    - Standardize error handling across multiple data store implementations.

Every method accepts **kwargs; the service passes `deadline=` (a Deadline) for
calls made on behalf of a request, and implementations must honour it by calling
`check_deadline()` before touching the backend.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from shortlinks.dao.memory import ShortLinkMemoryDAO

        >>> dao = ShortLinkMemoryDAO()
        >>> record = dao.create('jane@example.com', 'https://example.com/blog/article-123', 'a1b2c3', is_guest=False)
        >>> dao.get('a1b2c3').original_url
        'https://example.com/blog/article-123'
        >>> dao.count_for_owner('jane@example.com')
        1
"""

from abc import ABC, abstractmethod

from shortlinks.models import ClickEvent, ShortLinkRecord


class ShortLinkBaseDAO(ABC):
    """Interface for short link data access objects (DAOs).

    Methods:
        create(owner_id, original_url, code, is_guest, **kwargs) -> ShortLinkRecord:
            Insert a new record.
            Raises ShortLinkAlreadyExistsError if the code already exists.
            Raises UserDoesNotExistError if a non-guest owner has no account.

        get(code, **kwargs) -> ShortLinkRecord:
            Raises ShortLinkNotFoundError if the code does not exist.

        list_for_owner(owner_id, **kwargs) -> list[ShortLinkRecord]

        update(code, original_url=None, click=None, **kwargs) -> None:
            Replace the original URL and/or append a click event (which also
            increments the record's click counter).
            Raises ShortLinkNotFoundError if the code does not exist.

        set_disabled(code, disabled, **kwargs) -> None:
            Raises ShortLinkNotFoundError if the code does not exist.

        count_for_owner(owner_id, **kwargs) -> int

        clicks(code, **kwargs) -> list[ClickEvent]:
            Click events of a code, oldest first.

    All methods raise DataStoreError on connection or I/O failure and
    DeadlineExceededError when called with an expired deadline.

    Subclassing:
        Datastore-specific implementations (e.g., ShortLinkRedisDAO or
        ShortLinkMemoryDAO) must extend this class and implement all
        abstract methods.

    NOTE:
        - Records are never deleted. The DAO does not provide an interface to
          manually delete entries.
        - Code uniqueness must be enforced by the data store itself (atomically),
          not by the caller checking first.
    """

    @abstractmethod
    def create(self, owner_id: str, original_url: str, code: str, is_guest: bool, **kwargs) -> ShortLinkRecord:
        """Insert a new short link record.

        Args:
            owner_id (str):
                Owner email, or guest token.

            original_url (str):
                Long URL the code redirects to.

            code (str):
                Short code to claim.

            is_guest (bool):
                Whether the owner is a guest (guests need no account).

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortLinkRecord: the stored record

        Raises:
            ShortLinkAlreadyExistsError:
                If a record with the same code already exists.

            UserDoesNotExistError:
                If is_guest is False and the owner has no account.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, code: str, **kwargs) -> ShortLinkRecord:
        """Retrieve a short link record by its code.

        Raises:
            ShortLinkNotFoundError:
                If no record with the given code exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def list_for_owner(self, owner_id: str, **kwargs) -> list[ShortLinkRecord]:
        """Retrieve all short link records created by an owner."""
        pass

    @abstractmethod
    def update(self, code: str, original_url: str | None = None, click: ClickEvent | None = None, **kwargs) -> None:
        """Update a record's original URL and/or append a click event.

        Raises:
            ShortLinkNotFoundError:
                If no record with the given code exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def set_disabled(self, code: str, disabled: bool, **kwargs) -> None:
        """Enable or disable a short link.

        Raises:
            ShortLinkNotFoundError:
                If no record with the given code exists.
        """
        pass

    @abstractmethod
    def count_for_owner(self, owner_id: str, **kwargs) -> int:
        """Return the number of records created by an owner."""
        pass

    @abstractmethod
    def clicks(self, code: str, **kwargs) -> list[ClickEvent]:
        """Return the click events recorded for a code, oldest first."""
        pass
