"""Helper utilities shared by the short link service.

Functions:
    is_valid_email(email: str) -> bool
        Check whether an owner id is a well-formed email address
    is_valid_long_url(url: str, schemes: Iterable[str]) -> bool
        Check whether a URL is absolute, uses an allowed scheme and has a host
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present

Example:
    >>> from shortlinks.utils.helpers import is_valid_long_url
    >>> is_valid_long_url('https://example.com/a', schemes=('https',))
    True
    >>> is_valid_long_url('example.com/a', schemes=('https',))
    False
"""

import os
import functools
from email.utils import parseaddr
from urllib.parse import urlparse
from collections.abc import Callable, Iterable

from shortlinks.exceptions import MissingEnvironmentVariableError


def is_valid_email(email: str) -> bool:
    """Check whether a string is a plain email address with a dotted domain.

    Example:
        >>> is_valid_email('jane@example.com')
        True
        >>> is_valid_email('1.2.3.4')
        False
    """
    if not isinstance(email, str) or email.count('@') != 1:
        return False

    _, address = parseaddr(email)
    if address != email:
        return False

    local, domain = address.split('@')
    return bool(local) and '.' in domain.strip('.')


def is_valid_long_url(url: str, schemes: Iterable[str]) -> bool:
    """Check whether a URL can be shortened.

    A valid URL is absolute, uses one of the allowed schemes and names a host.
    Whitespace anywhere in the URL makes it invalid.

    Args:
        url (str): URL to validate
        schemes (Iterable[str]): allowed schemes, e.g. ('https',)

    Returns:
        bool: True if the URL may be shortened, False otherwise
    """
    if not isinstance(url, str) or not url or any(ch.isspace() for ch in url):
        return False

    try:
        components = urlparse(url)
        hostname = components.hostname
    except ValueError:
        return False

    return components.scheme.lower() in {s.lower() for s in schemes} and bool(hostname)


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Args:
        *names (str):
            Names of required environment variables.

    Raises:
        MissingEnvironmentVariableError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('SHORTLINKS_CONFIG')
        ... def my_function():
        ...     pass
        >>> my_function()
        MissingEnvironmentVariableError: Missing required environment variables: 'SHORTLINKS_CONFIG'
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator
