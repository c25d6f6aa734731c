"""In-process implementation of the short link Persistence Port.

All state lives in dictionaries guarded by a single lock, which makes the
create() code claim atomic just like a unique index would in a real store.
Used for local development, single-process deployments and tests.

Example:
    >>> dao = ShortLinkMemoryDAO()
    >>> dao.create('1.2.3.4', 'https://example.com/a', 'a1b2c3', is_guest=True)
    ShortLinkRecord(code='a1b2c3', owner_id='1.2.3.4', ...)
    >>> dao.create('1.2.3.4', 'https://example.com/b', 'a1b2c3', is_guest=True)
    Traceback (most recent call last):
        ...
    shortlinks.dao.exceptions.ShortLinkAlreadyExistsError: Short link with code 'a1b2c3' already exists.
"""

import threading
from dataclasses import replace
from datetime import datetime, UTC

from beartype import beartype

from shortlinks.models import ClickEvent, ShortLinkRecord
from shortlinks.dao.base import AccountBaseDAO, ShortLinkBaseDAO
from shortlinks.dao.exceptions import ShortLinkAlreadyExistsError, ShortLinkNotFoundError, UserDoesNotExistError
from shortlinks.utils.deadline import check_deadline


class ShortLinkMemoryDAO(ShortLinkBaseDAO):
    """Dictionary-backed DAO for short link records and click events

    Args:
        accounts (AccountBaseDAO | None):
            Account lookup used to reject records for unknown non-guest owners.
            If None, owners are not checked.
    """

    def __init__(self, accounts: AccountBaseDAO | None = None):
        self.accounts = accounts
        self._lock = threading.Lock()
        self._records: dict[str, ShortLinkRecord] = {}
        self._owners: dict[str, list[str]] = {}
        self._clicks: dict[str, list[ClickEvent]] = {}

    @beartype
    def create(self, owner_id: str, original_url: str, code: str, is_guest: bool, **kwargs) -> ShortLinkRecord:
        check_deadline(kwargs.get('deadline'))
        if not is_guest and self.accounts is not None and not self.accounts.exists(owner_id):
            raise UserDoesNotExistError(f"User with ID '{owner_id}' does not exist.")

        record = ShortLinkRecord(
            code=code,
            owner_id=owner_id,
            original_url=original_url,
            created_at=datetime.now(UTC),
            is_guest=is_guest,
        )
        with self._lock:
            if code in self._records:
                raise ShortLinkAlreadyExistsError(f"Short link with code '{code}' already exists.")
            self._records[code] = record
            self._owners.setdefault(owner_id, []).append(code)
        return record

    @beartype
    def get(self, code: str, **kwargs) -> ShortLinkRecord:
        check_deadline(kwargs.get('deadline'))
        with self._lock:
            record = self._records.get(code)
        if record is None:
            raise ShortLinkNotFoundError(f"Short link with code '{code}' not found.")
        return record

    @beartype
    def list_for_owner(self, owner_id: str, **kwargs) -> list[ShortLinkRecord]:
        check_deadline(kwargs.get('deadline'))
        with self._lock:
            return [self._records[code] for code in self._owners.get(owner_id, [])]

    @beartype
    def update(self, code: str, original_url: str | None = None, click: ClickEvent | None = None, **kwargs) -> None:
        check_deadline(kwargs.get('deadline'))
        with self._lock:
            record = self._records.get(code)
            if record is None:
                raise ShortLinkNotFoundError(f"Short link with code '{code}' not found.")

            if original_url is not None:
                record = replace(record, original_url=original_url)
            if click is not None:
                record = replace(record, clicks=record.clicks + 1)
                self._clicks.setdefault(code, []).append(click)
            self._records[code] = record

    @beartype
    def set_disabled(self, code: str, disabled: bool, **kwargs) -> None:
        check_deadline(kwargs.get('deadline'))
        with self._lock:
            record = self._records.get(code)
            if record is None:
                raise ShortLinkNotFoundError(f"Short link with code '{code}' not found.")
            self._records[code] = replace(record, disabled=disabled)

    @beartype
    def count_for_owner(self, owner_id: str, **kwargs) -> int:
        check_deadline(kwargs.get('deadline'))
        with self._lock:
            return len(self._owners.get(owner_id, []))

    @beartype
    def clicks(self, code: str, **kwargs) -> list[ClickEvent]:
        check_deadline(kwargs.get('deadline'))
        with self._lock:
            if code not in self._records:
                raise ShortLinkNotFoundError(f"Short link with code '{code}' not found.")
            return list(self._clicks.get(code, []))
