"""Short link service: the single entry point used by the transport layer

Procedure for creating a short link:
    - Step 1: Validate the long URL (absolute, allowed scheme, host)
    - Step 2: Hand a guest its existing link for the URL, if any (not counted against the quota)
    - Step 3: Enforce the guest quota / check the account exists
    - Step 4: Validate the custom code, or find the owner's existing code / a free generated one
    - Step 5: Insert the record (the data store detects code collisions atomically)
    - Step 6: Write the new record through to the redirect cache (reused links keep their cached entry)

Procedure for a redirect:
    - Step 1: Resolve the code through the redirect cache
    - Step 2: Refuse disabled links
    - Step 3: Count the click in the cache and queue its durable write
    - Step 4: Hand the original URL back to the caller

All DAO exceptions are translated to `shortlinks.exceptions` at this boundary.

Example:
    >>> service = ShortLinkService(ShortLinkMemoryDAO(), AccountMemoryDAO())
    >>> with service:
    ...     record = service.create_short_link(Guest('1.2.3.4'), 'https://example.com/a')
    ...     service.redirect(record.code, ip='5.6.7.8', user_agent='Mozilla/5.0 ...')
    'https://example.com/a'
"""

import logging
import functools
from dataclasses import replace
from collections.abc import Callable
from typing import Any

import segno

from shortlinks.cache import RedirectCache
from shortlinks.constants import Defaults, LINK_CREATED, LINK_REUSED, LINK_UPDATED, LINK_DISABLED, CODE_COLLISION
from shortlinks.dao.base import AccountBaseDAO, ShortLinkBaseDAO
from shortlinks.dao.exceptions import (
    DataStoreError,
    DeadlineExceededError,
    ShortLinkAlreadyExistsError,
    ShortLinkNotFoundError,
    UserDoesNotExistError,
)
from shortlinks.exceptions import (
    AllocationExhaustedError,
    BadRequestError,
    LinkDisabledError,
    NotFoundError,
    UnavailableError,
)
from shortlinks.models import ClickEvent, Guest, Identity, ShortLinkRecord
from shortlinks.services.click_recorder import ClickRecorder
from shortlinks.services.code_generator import CodeGenerator
from shortlinks.services.quota import QuotaEnforcer
from shortlinks.utils.config import Settings
from shortlinks.utils.deadline import Deadline
from shortlinks.utils.helpers import is_valid_long_url
from shortlinks.utils.qr import render_png
from shortlinks.utils.useragent import summarize_user_agent


logger = logging.getLogger(__name__)

# Extra generator passes after an insert lost a race for a free code
INSERT_COLLISION_RETRIES = 1
# Extra insert attempts after a data store failure
INSERT_FAILURE_RETRIES = 1
# Schemes the public short URL may use in QR codes
QR_BASE_URL_SCHEMES = ('http', 'https')


def translate_dao_errors[F: Callable[..., Any]](func: F) -> F:
    """Decorator to translate DAO exceptions into service exceptions

    ShortLinkNotFoundError and UserDoesNotExistError become NotFoundError.
    DataStoreError (including DeadlineExceededError) becomes UnavailableError
    with a generic message; the backend detail is logged and chained.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (ShortLinkNotFoundError, UserDoesNotExistError) as e:
            raise NotFoundError(str(e)) from e
        except DeadlineExceededError as e:
            logger.info('Request abandoned before the data store answered.', extra={'operation': func.__name__})
            raise UnavailableError('Request deadline exceeded.') from e
        except DataStoreError as e:
            logger.exception('Data store failure.', extra={'operation': func.__name__})
            raise UnavailableError('Service temporarily unavailable. Try again later.') from e

    return wrapper


class ShortLinkService:
    """Coordinates code allocation, quotas, the redirect cache and click accounting

    Args:
        dao (ShortLinkBaseDAO):
            Persistence Port for short link records and click events.
        accounts (AccountBaseDAO):
            Account collaborator used to verify authenticated identities.
        settings (Settings | None):
            Service tunables. Defaults to Settings().
        cache (RedirectCache | None):
            Redirect cache. Built from settings when None.
        recorder (ClickRecorder | None):
            Click recorder. Built from settings when None.

    The cache sweeper and click worker threads run between start() and close();
    the service can be used as a context manager for that.
    """

    def __init__(
        self,
        dao: ShortLinkBaseDAO,
        accounts: AccountBaseDAO,
        settings: Settings | None = None,
        cache: RedirectCache | None = None,
        recorder: ClickRecorder | None = None,
    ):
        self.settings = settings or Settings()
        self.dao = dao
        self.accounts = accounts
        self.cache = cache or RedirectCache(
            dao,
            ttl_seconds=self.settings.cache_ttl_seconds,
            sweep_interval_seconds=self.settings.sweep_interval_seconds,
            max_entries=self.settings.max_cache_entries,
        )
        self.recorder = recorder or ClickRecorder(dao, self.cache, queue_size=self.settings.click_queue_size)
        self.generator = CodeGenerator(dao, length=self.settings.code_length, max_retries=self.settings.max_retries)
        self.quota = QuotaEnforcer(dao, accounts, max_guest_urls=self.settings.max_guest_urls)

    def start(self) -> None:
        self.cache.start()
        self.recorder.start()

    def close(self) -> None:
        """Drain pending click writes, then stop the background threads."""
        self.recorder.close()
        self.cache.close()

    def __enter__(self) -> 'ShortLinkService':
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @translate_dao_errors
    def create_short_link(
        self,
        identity: Identity,
        long_url: str,
        custom_code: str | None = None,
        deadline: Deadline | None = None,
    ) -> ShortLinkRecord:
        """Create (or re-use) a short link for long_url owned by identity.

        Args:
            identity (Identity):
                Authenticated(email) or Guest(token).
            long_url (str):
                Absolute URL with an allowed scheme and a host.
            custom_code (str | None):
                User-supplied code, authenticated identities only.
            deadline (Deadline | None):
                Deadline of the originating request.

        Returns:
            ShortLinkRecord: the new record, or the owner's existing record for long_url

        Raises:
            BadRequestError:
                Invalid URL, invalid or taken custom code, custom code requested by a guest.
            QuotaExceededError:
                The guest already owns the maximum number of links.
            NotFoundError:
                The authenticated identity has no account.
            AllocationExhaustedError:
                No free generated code was found.
            UnavailableError:
                The data store failed or the deadline expired.
        """
        if not is_valid_long_url(long_url, self.settings.allowed_schemes):
            raise BadRequestError(
                f"Invalid URL '{long_url}': provide an absolute URL with a scheme "
                f"({', '.join(self.settings.allowed_schemes)}) and a host, e.g. https://example.com/path."
            )
        if custom_code is not None and identity.is_guest:
            raise BadRequestError('Create an account to use custom short codes.')

        if custom_code is None and isinstance(identity, Guest) and identity.token.strip():
            # Re-submitting an owned URL creates nothing, so it is not counted against the quota
            existing = self.generator.find_existing(identity.owner_id, long_url, deadline=deadline)
            if existing is not None:
                return self._reuse(existing)

        self.quota.check(identity, deadline=deadline)

        if custom_code is not None:
            code = self.generator.claim_custom(custom_code).code
            try:
                record = self._insert(identity, long_url, code, deadline)
            except ShortLinkAlreadyExistsError as e:
                raise BadRequestError(f"Custom code '{code}' is already taken.") from e
        else:
            allocated = self._allocate(identity, long_url, deadline)
            if allocated is None:
                raise AllocationExhaustedError('Could not allocate a short code. Try again later.')
            record, reused = allocated
            if reused:
                return self._reuse(record)

        self.cache.put(record)
        logger.info(
            'Created short link.',
            extra={'code': record.code, 'owner_id': record.owner_id, 'is_guest': record.is_guest, 'event': LINK_CREATED},
        )
        return record

    def _reuse(self, existing: ShortLinkRecord) -> ShortLinkRecord:
        logger.info(
            'Owner already has a short link for this URL.',
            extra={'code': existing.code, 'owner_id': existing.owner_id, 'event': LINK_REUSED},
        )
        # The cached snapshot may carry clicks the store has not seen yet
        return self.cache.put_if_absent(existing)

    def _allocate(
        self, identity: Identity, long_url: str, deadline: Deadline | None
    ) -> tuple[ShortLinkRecord, bool] | None:
        """Return (record, reused), or None if every insert lost a race for its code."""
        for _ in range(INSERT_COLLISION_RETRIES + 1):
            allocation = self.generator.generate(identity.owner_id, long_url, deadline=deadline)
            if allocation.reused:
                return allocation.existing, True
            try:
                record = self._insert(identity, long_url, allocation.code, deadline)
            except ShortLinkAlreadyExistsError:
                logger.info(
                    'Short code %s was claimed concurrently.',
                    allocation.code,
                    extra={'code': allocation.code, 'event': CODE_COLLISION},
                )
            else:
                return record, False
        return None

    def _insert(self, identity: Identity, long_url: str, code: str, deadline: Deadline | None) -> ShortLinkRecord:
        for attempt in range(INSERT_FAILURE_RETRIES + 1):
            try:
                return self.dao.create(identity.owner_id, long_url, code, identity.is_guest, deadline=deadline)
            except DeadlineExceededError:
                raise
            except DataStoreError:
                if attempt == INSERT_FAILURE_RETRIES:
                    raise
                logger.warning('Insert failed, retrying once.', extra={'code': code}, exc_info=True)

    @translate_dao_errors
    def resolve(self, code: str, deadline: Deadline | None = None) -> ShortLinkRecord:
        """Return the record for code, disabled or not, through the redirect cache.

        Raises:
            NotFoundError: If the code does not exist.
            UnavailableError: If the data store failed or the deadline expired.
        """
        return self.cache.resolve(code, deadline=deadline)

    def redirect(self, code: str, ip: str, user_agent: str | None = None, deadline: Deadline | None = None) -> str:
        """Resolve code for a visitor, record the click and return the target URL.

        Raises:
            LinkDisabledError: If the link is disabled (no click is recorded).
            NotFoundError: If the code does not exist.
            UnavailableError: If the data store failed or the deadline expired.
        """
        record = self.resolve(code, deadline=deadline)
        if record.disabled:
            logger.info('Refusing redirect for disabled short link.', extra={'code': code, 'event': LINK_DISABLED})
            raise LinkDisabledError(f"Short link '{code}' has been disabled.")

        event = ClickEvent(code=code, ip=ip, user_agent=summarize_user_agent(user_agent))
        self.recorder.record_click(code, event)
        return record.original_url

    @translate_dao_errors
    def get_record(self, code: str, deadline: Deadline | None = None) -> ShortLinkRecord:
        """Return the durable record for code, bypassing the cache."""
        return self.dao.get(code, deadline=deadline)

    @translate_dao_errors
    def list_records_for_owner(self, owner_id: str, deadline: Deadline | None = None) -> list[ShortLinkRecord]:
        return self.dao.list_for_owner(owner_id, deadline=deadline)

    @translate_dao_errors
    def update_record(self, code: str, original_url: str, deadline: Deadline | None = None) -> None:
        """Point code at a new URL, in the data store and in the cache.

        Raises:
            BadRequestError: If original_url is invalid.
            NotFoundError: If the code does not exist.
        """
        if not is_valid_long_url(original_url, self.settings.allowed_schemes):
            raise BadRequestError(f"Invalid URL '{original_url}'.")

        self.dao.update(code, original_url=original_url, deadline=deadline)
        self.cache.update(code, lambda record: replace(record, original_url=original_url))
        logger.info('Updated short link target.', extra={'code': code, 'event': LINK_UPDATED})

    @translate_dao_errors
    def set_disabled(self, code: str, disabled: bool, deadline: Deadline | None = None) -> None:
        """Enable or disable code, in the data store and in the cache."""
        self.dao.set_disabled(code, disabled, deadline=deadline)
        self.cache.update(code, lambda record: replace(record, disabled=disabled))
        logger.info(
            'Short link %s.',
            'disabled' if disabled else 'enabled',
            extra={'code': code, 'disabled': disabled, 'event': LINK_UPDATED},
        )

    def record_click(self, code: str, event: ClickEvent) -> bool:
        """Count a click now and write it durably in the background (never raises for store failures)."""
        return self.recorder.record_click(code, event)

    @translate_dao_errors
    def get_click_history(self, code: str, deadline: Deadline | None = None) -> list[ClickEvent]:
        return self.recorder.history(code, deadline=deadline)

    @translate_dao_errors
    def qr_code(self, code: str, base_url: str, size: int = Defaults.QR_SIZE, deadline: Deadline | None = None) -> bytes:
        """Render a PNG QR code pointing at the short URL `<base_url>/<code>`.

        Args:
            code (str):
                Existing short code.
            base_url (str):
                Public address the redirects are served from, e.g. 'https://sho.rt'.
            size (int):
                Approximate PNG width in pixels.

        Raises:
            BadRequestError: If base_url is not an absolute http(s) URL or the QR code cannot be rendered.
            NotFoundError: If the code does not exist.
        """
        if not is_valid_long_url(base_url, QR_BASE_URL_SCHEMES):
            raise BadRequestError(f"Invalid base URL '{base_url}'.")

        record = self.cache.resolve(code, deadline=deadline)
        short_url = f"{base_url.rstrip('/')}/{record.code}"
        try:
            return render_png(short_url, size=size)
        except segno.DataOverflowError as e:
            raise BadRequestError('Failed to generate QR code.') from e
