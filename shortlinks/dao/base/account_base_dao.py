"""Abstract base class for account data access objects (DAOs).

Accounts (registration, passwords, tokens) are owned by a separate service; the
short link service only needs to know whether an authenticated owner exists
before it lets them create links.

Example:
    >>> from shortlinks.dao.memory import AccountMemoryDAO
    >>> dao = AccountMemoryDAO({'jane@example.com'})
    >>> dao.exists('jane@example.com')
    True
    >>> dao.exists('nobody@example.com')
    False
"""

from abc import ABC, abstractmethod


class AccountBaseDAO(ABC):
    """Interface for account lookup data access objects (DAOs)

    Methods:
        exists(owner_id: str, **kwargs) -> bool:
            Whether an account with the given owner id (email) exists.
            Raises DataStoreError on read failure.
    """

    @abstractmethod
    def exists(self, owner_id: str, **kwargs) -> bool:
        """Check whether an account exists.

        Args:
            owner_id (str):
                The account's email.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            bool: True if the account exists.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass
