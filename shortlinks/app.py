"""Service factory

create_service() is what a transport layer (HTTP server, worker, CLI) calls
once at start-up:
    - Step 0: Initialize logging
    - Step 1: Load settings (SHORTLINKS_CONFIG document, or defaults)
    - Step 2: Build the DAOs for the active backend
    - Step 3: Build the service (redirect cache + click recorder) and start it

Example:
    >>> os.environ['SHORTLINKS_CONFIG'] = '/etc/shortlinks/config.json'
    >>> service = create_service()
    >>> record = service.create_short_link(Guest('1.2.3.4'), 'https://example.com/a')
    >>> service.close()
"""

import logging

from shortlinks.constants import Backend
from shortlinks.dao.base import AccountBaseDAO, ShortLinkBaseDAO
from shortlinks.dao.memory import AccountMemoryDAO, ShortLinkMemoryDAO
from shortlinks.dao.redis import AccountRedisDAO, ShortLinkRedisDAO
from shortlinks.exceptions import BadConfigurationError
from shortlinks.services import ShortLinkService
from shortlinks.utils.config import Settings, load_settings
from shortlinks.utils.logging import initialize_logging


logger = logging.getLogger(__name__)


def build_daos(settings: Settings) -> tuple[ShortLinkBaseDAO, AccountBaseDAO]:
    """Build the Persistence Port and account collaborator for the active backend.

    Raises:
        BadConfigurationError: If the backend is unknown or its section is malformed.
        DataStoreError: If the Redis backend is unreachable.
    """
    match settings.backend:
        case Backend.MEMORY:
            accounts = AccountMemoryDAO(settings.backend_config.get('accounts', ()))
            return ShortLinkMemoryDAO(accounts=accounts), accounts
        case Backend.REDIS:
            # 'host' -> 'redis_host', 'port' -> 'redis_port', ...
            try:
                redis_config = {f'redis_{k}': v for k, v in settings.backend_config.items()}
                accounts = AccountRedisDAO(**redis_config, prefix=settings.prefix)
            except TypeError as e:
                raise BadConfigurationError(f'Invalid Redis backend configuration: {e}') from e
            return ShortLinkRedisDAO(redis_client=accounts.redis, prefix=settings.prefix, accounts=accounts), accounts
        case _:
            raise BadConfigurationError(f'Unknown backend {settings.backend!r}.')


def create_service(settings: Settings | None = None, start: bool = True) -> ShortLinkService:
    """Wire DAOs, redirect cache and click recorder into a ShortLinkService

    Args:
        settings (Settings | None):
            Service settings. If None, they are loaded with load_settings().
        start (bool):
            Start the cache sweeper and click worker threads. Defaults to True.

    Returns:
        ShortLinkService: ready to serve requests; call close() at shutdown
    """
    initialize_logging()
    settings = settings or load_settings()

    dao, accounts = build_daos(settings)
    logger.info('Using %s backend for short links.', settings.backend, extra={'backend': settings.backend})

    service = ShortLinkService(dao, accounts, settings=settings)
    if start:
        service.start()
    return service
