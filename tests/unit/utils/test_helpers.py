"""Unit tests for helper functions in helpers.py.

Test coverage includes:

1. is_valid_email() validation
   - Ensures plain addresses with a dotted domain are accepted.
   - Ensures IPs, display names and malformed addresses are rejected.

2. is_valid_long_url() validation
   - Ensures absolute URLs with an allowed scheme and a host are accepted.
   - Ensures relative URLs, disallowed schemes, missing hosts and whitespace are rejected.

3. require_environment() decorator behavior
   - 3.1. Ensures decorated functions execute when all env vars are present.
   - 3.2. Ensures missing or empty env vars raise MissingEnvironmentVariableError.
"""

import pytest

from shortlinks.exceptions import MissingEnvironmentVariableError
from shortlinks.utils.helpers import is_valid_email, is_valid_long_url, require_environment


# -------------------------------
# 1. is_valid_email() validation
# -------------------------------


@pytest.mark.parametrize('email', ['jane@example.com', 'john.doe+links@mail.example.org'])
def test_valid_emails(email):
    """Ensure well-formed addresses are accepted."""
    assert is_valid_email(email)


@pytest.mark.parametrize(
    'email',
    ['1.2.3.4', 'jane@localhost', 'jane@@example.com', '@example.com', 'Jane <jane@example.com>', '', None],
)
def test_invalid_emails(email):
    """Ensure non-addresses are rejected."""
    assert not is_valid_email(email)


# -------------------------------
# 2. is_valid_long_url() validation
# -------------------------------


@pytest.mark.parametrize(
    'url',
    [
        'https://example.com',
        'https://example.com/blog/article-123?utm=1#top',
        'HTTPS://EXAMPLE.COM/a',
    ],
)
def test_valid_long_urls(url):
    """Ensure absolute https URLs with a host are accepted."""
    assert is_valid_long_url(url, schemes=('https',))


@pytest.mark.parametrize(
    'url',
    [
        'example.com/a',
        '/relative/path',
        'http://example.com/a',
        'ftp://example.com/a',
        'https://',
        'https:///path-only',
        'https://example.com/with space',
        '',
        None,
    ],
)
def test_invalid_long_urls(url):
    """Ensure URLs that cannot be redirected to are rejected."""
    assert not is_valid_long_url(url, schemes=('https',))


def test_long_url_with_configured_schemes():
    """Ensure the allowed scheme list is honoured."""
    assert is_valid_long_url('http://example.com/a', schemes=('https', 'http'))


# -------------------------------
# 3.1. require_environment() - success path
# -------------------------------


def test_require_environment_allows_when_all_present(monkeypatch):
    """Ensure decorated function runs when all required env vars are present and non-empty."""
    monkeypatch.setenv('SHORTLINKS_CONFIG', '/etc/shortlinks/config.json')
    monkeypatch.setenv('APP_NAME', 'shortlinks')

    @require_environment('SHORTLINKS_CONFIG', 'APP_NAME')
    def decorated():
        return 'ok'

    assert decorated() == 'ok'


# -------------------------------
# 3.2. require_environment() - missing/empty vars
# -------------------------------


def test_require_environment_raises_on_missing_or_empty(monkeypatch):
    """Ensure missing or empty env vars raise with a descriptive message."""
    monkeypatch.delenv('SHORTLINKS_CONFIG', raising=False)
    monkeypatch.setenv('APP_NAME', '')

    @require_environment('SHORTLINKS_CONFIG', 'APP_NAME')
    def decorated():
        return 'should not run'

    with pytest.raises(MissingEnvironmentVariableError) as e:
        decorated()

    assert str(e.value) == "Missing required environment variables: 'SHORTLINKS_CONFIG', 'APP_NAME'"
