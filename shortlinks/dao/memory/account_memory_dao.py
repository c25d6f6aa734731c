import threading
from collections.abc import Iterable

from beartype import beartype

from shortlinks.dao.base import AccountBaseDAO
from shortlinks.utils.deadline import check_deadline


class AccountMemoryDAO(AccountBaseDAO):
    """Set-backed account lookup, seeded with known owner emails."""

    def __init__(self, emails: Iterable[str] = ()):
        self._lock = threading.Lock()
        self._emails = set(emails)

    def add(self, email: str) -> None:
        with self._lock:
            self._emails.add(email)

    @beartype
    def exists(self, owner_id: str, **kwargs) -> bool:
        check_deadline(kwargs.get('deadline'))
        with self._lock:
            return owner_id in self._emails
