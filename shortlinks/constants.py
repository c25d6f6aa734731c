from enum import StrEnum


class TTL:
    """Cache timing values in seconds."""

    # Cached redirect entries older than this are evicted by the sweeper (12 hours)
    CACHE_ENTRY = 43_200  # 60 * 60 * 12
    # Interval between two sweeper passes (2 hours)
    SWEEP_INTERVAL = 7_200  # 60 * 60 * 2


class Defaults:
    """Default tunables for the short link service."""

    CODE_LENGTH = 6  # Generated short code length
    MAX_RETRIES = 5  # Collision retries before giving up on a generated code
    MAX_GUEST_URLS = 2  # Links a guest identity may create
    MAX_CACHE_ENTRIES = 100_000  # ~93 bytes * 100,000 = ~10MB of records
    CLICK_QUEUE_SIZE = 10_000  # Pending click writes before new clicks are dropped
    ALLOWED_SCHEMES = ('https',)
    QR_SIZE = 200  # QR code PNG width in pixels


class CustomCode:
    """Constraints for user-supplied short codes."""

    PATTERN = r'^[A-Za-z0-9_-]+$'
    MIN_LENGTH = 3
    MAX_LENGTH = 32


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        LOG_LEVEL = 'LOG_LEVEL'
        CONFIG_FILE = 'SHORTLINKS_CONFIG'


class Backend(StrEnum):
    """Supported Persistence Port adapters."""

    MEMORY = 'memory'
    REDIS = 'redis'


# Log event names
LINK_CREATED = 'LINK_CREATED'
LINK_REUSED = 'LINK_REUSED'
LINK_UPDATED = 'LINK_UPDATED'
CODE_COLLISION = 'CODE_COLLISION'
QUOTA_EXCEEDED = 'QUOTA_EXCEEDED'
CACHE_HIT = 'CACHE_HIT'
CACHE_MISS = 'CACHE_MISS'
CACHE_SWEEP = 'CACHE_SWEEP'
LINK_DISABLED = 'LINK_DISABLED'
CLICK_DROPPED = 'CLICK_DROPPED'
CLICK_WRITE_FAILED = 'CLICK_WRITE_FAILED'
