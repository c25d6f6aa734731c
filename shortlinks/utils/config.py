"""Utility functions for application configuration management.

Configuration is a single JSON document whose path is given by the
`SHORTLINKS_CONFIG` environment variable. The document follows this structure:

    {
        "active_backend": "redis",
        "backends": {
            "redis": {
                "host": "localhost",
                "port": 6379,
                "db": 0
            }
        },
        "service": {
            "code_length": 6,
            "max_retries": 5,
            "max_guest_urls": 2,
            "cache_ttl_seconds": 43200,
            "sweep_interval_seconds": 7200,
            "max_cache_entries": 100000,
            "click_queue_size": 10000,
            "allowed_schemes": ["https"]
        }
    }

The redis section may give a single "url" instead of host/port/db.
Every key is optional; missing keys fall back to the defaults in
`shortlinks.constants`. Redis keys are namespaced with `app_prefix()`.

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`) value,
        defaulting to `'local'`.

    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.

    app_prefix() -> str | None
        Return application prefix for DAOs, or None if `APP_NAME` is not set.

    load_config() -> dict
        Read the JSON configuration document named by `SHORTLINKS_CONFIG`.

    load_settings(document: dict | None = None) -> Settings
        Build validated service settings from a configuration document.

Example:
    >>> os.environ['SHORTLINKS_CONFIG'] = '/etc/shortlinks/config.json'
    >>> settings = load_settings(load_config())
    >>> settings.backend
    'redis'
"""

import os
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from shortlinks.constants import ENV, TTL, Backend, Defaults
from shortlinks.exceptions import BadConfigurationError
from shortlinks.utils.helpers import require_environment
from shortlinks.utils.shortener import MAX_LENGTH


logger = logging.getLogger(__name__)

type Configuration = dict[str, Any]


def app_env() -> str:
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return application prefix for DAOs

    Returns:
        str: app prefix as <app name>:<app env>.
             None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'shortlinks'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'shortlinks:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


# fmt: off
@dataclass(frozen=True)
class Settings:
    backend: str = Backend.MEMORY                                   # Active Persistence Port adapter
    backend_config: Configuration = field(default_factory=dict)     # Adapter connection parameters
    prefix: str | None = None                                       # Redis key namespace
    code_length: int = Defaults.CODE_LENGTH                         # Generated code length
    max_retries: int = Defaults.MAX_RETRIES                         # Collision retries per allocation
    max_guest_urls: int = Defaults.MAX_GUEST_URLS                   # Links per guest identity
    cache_ttl_seconds: float = TTL.CACHE_ENTRY                      # Age after which cache entries are swept
    sweep_interval_seconds: float = TTL.SWEEP_INTERVAL              # Pause between two sweeper passes
    max_cache_entries: int = Defaults.MAX_CACHE_ENTRIES             # Cache size bound
    click_queue_size: int = Defaults.CLICK_QUEUE_SIZE               # Pending click writes bound
    allowed_schemes: tuple[str, ...] = Defaults.ALLOWED_SCHEMES     # Schemes a long URL may use
# fmt: on


@require_environment(ENV.App.CONFIG_FILE)
def load_config() -> Configuration:
    """Load the JSON configuration document named by SHORTLINKS_CONFIG.

    Raises:
        MissingEnvironmentVariableError:
            If SHORTLINKS_CONFIG is not set.
        BadConfigurationError:
            If the file cannot be read or is not a JSON object.
    """
    path = Path(os.environ[ENV.App.CONFIG_FILE])
    logger.debug('Loading configuration document.', extra={'path': str(path)})

    try:
        document = json.loads(path.read_text(encoding='utf-8'))
    except OSError as e:
        raise BadConfigurationError(f"Can't read configuration file {path}.") from e
    except json.JSONDecodeError as e:
        raise BadConfigurationError(f'Invalid JSON in configuration file {path}.') from e

    if not isinstance(document, dict):
        raise BadConfigurationError(f'Configuration file {path} must contain a JSON object.')
    return document


def _positive(service: Configuration, key: str, default: float, cast: type = int) -> Any:
    value = service.get(key, default)
    try:
        value = cast(value)
    except (TypeError, ValueError) as e:
        raise BadConfigurationError(f'Configuration value {key!r} must be a number (given value: {value!r}).') from e
    if value <= 0:
        raise BadConfigurationError(f'Configuration value {key!r} must be positive (given value: {value!r}).')
    return value


def load_settings(document: Configuration | None = None) -> Settings:
    """Build validated Settings from a configuration document.

    Args:
        document (dict | None):
            Parsed configuration document. If None, the document is loaded with
            load_config() when SHORTLINKS_CONFIG is set, otherwise defaults are used.

    Returns:
        Settings: validated service settings

    Raises:
        BadConfigurationError:
            If the backend is unknown or a tunable is out of range.
    """
    if document is None:
        document = load_config() if os.environ.get(ENV.App.CONFIG_FILE) else {}

    backend = str(document.get('active_backend', Backend.MEMORY)).lower()
    if backend not in {b.value for b in Backend}:
        raise BadConfigurationError(f'Unknown backend {backend!r} (expected one of: {", ".join(Backend)}).')

    service = document.get('service', {})
    if not isinstance(service, dict):
        raise BadConfigurationError("Configuration section 'service' must be a JSON object.")

    code_length = _positive(service, 'code_length', Defaults.CODE_LENGTH)
    if code_length > MAX_LENGTH:
        raise BadConfigurationError(f"Configuration value 'code_length' must be at most {MAX_LENGTH} (given value: {code_length}).")

    schemes = service.get('allowed_schemes', list(Defaults.ALLOWED_SCHEMES))
    if not isinstance(schemes, (list, tuple)) or not schemes or not all(isinstance(s, str) and s for s in schemes):
        raise BadConfigurationError("Configuration value 'allowed_schemes' must be a non-empty list of strings.")

    return Settings(
        backend=backend,
        backend_config=document.get('backends', {}).get(backend, {}),
        prefix=app_prefix(),
        code_length=code_length,
        max_retries=_positive(service, 'max_retries', Defaults.MAX_RETRIES),
        max_guest_urls=_positive(service, 'max_guest_urls', Defaults.MAX_GUEST_URLS),
        cache_ttl_seconds=_positive(service, 'cache_ttl_seconds', TTL.CACHE_ENTRY, float),
        sweep_interval_seconds=_positive(service, 'sweep_interval_seconds', TTL.SWEEP_INTERVAL, float),
        max_cache_entries=_positive(service, 'max_cache_entries', Defaults.MAX_CACHE_ENTRIES),
        click_queue_size=_positive(service, 'click_queue_size', Defaults.CLICK_QUEUE_SIZE),
        allowed_schemes=tuple(s.lower() for s in schemes),
    )
