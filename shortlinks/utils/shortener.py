"""Shortcode generation utility

This module provides helper functions for deriving short, deterministic,
content-addressed codes from long URLs, perturbing a URL after a collision,
and validating user-supplied custom codes.

Functions:
    generate_shortcode(url, length=6) -> str:
        Fingerprint a URL and encode it as a fixed-length Base62 string.
    perturb(url) -> str:
        Append a fresh random suffix to a URL so it fingerprints differently.
    is_valid_custom_code(code) -> bool:
        Check a custom code against the allowed charset and length bounds.

Example:
    >>> from shortlinks.utils import generate_shortcode
    >>> code = generate_shortcode('https://example.com/a')
    >>> len(code)
    6
    >>> code == generate_shortcode('https://example.com/a')
    True
"""

import re
import string
import secrets

import xxhash

from shortlinks.constants import CustomCode, Defaults


ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
BASE = len(ALPHABET)  # 26 lowercase + 26 uppercase + 10 digits
MAX_LENGTH = 21  # 62**21 < 2**128, the fingerprint width

CUSTOM_CODE_REGEX = re.compile(CustomCode.PATTERN)


def generate_shortcode(url: str, length: int = Defaults.CODE_LENGTH) -> str:
    """Generate a short, deterministic code from a URL.

    The URL is fingerprinted with 128-bit xxh3, reduced modulo BASE^length and
    encoded in Base62 (a-z, A-Z, 0-9) with leading 'a' padding, so the same URL
    always yields the same fixed-length code.

    Args:
        url (str):
            Long URL (or a perturbed variant of it) to fingerprint.

        length (int, optional):
            Exact length of the resulting code. Defaults to 6.

    Returns:
        str: A Base62 code of exactly `length` characters.

    Raises:
        TypeError: If url is not a string.
        ValueError: If length is outside 1..21.

    NOTE:
        - Distinct URLs can map to the same code; callers detect collisions at
          insert time and retry with perturb().
        - The output is not a secret, anyone can recompute a URL's first code.
    """
    if not isinstance(url, str):
        raise TypeError(f'URL must be of type string (given type: {type(url)}).')
    if not isinstance(length, int) or not 1 <= length <= MAX_LENGTH:
        raise ValueError(f'Code length must be an integer between 1 and {MAX_LENGTH} (given value: {length}).')

    modulo_space = BASE**length
    fingerprint = xxhash.xxh3_128_intdigest(url.encode('utf-8')) % modulo_space

    # Encode most significant digit first, padded to a fixed length
    return ''.join(reversed([ALPHABET[(fingerprint // BASE**i) % BASE] for i in range(length)])).rjust(length, ALPHABET[0])


def perturb(url: str) -> str:
    """Return the URL with a random suffix appended, used only as fingerprint input."""
    return f'{url}#{secrets.token_hex(8)}'


def is_valid_custom_code(code: str) -> bool:
    """Check that a custom code uses [A-Za-z0-9_-] and respects the length bounds.

    Example:
        >>> is_valid_custom_code('my-link')
        True
        >>> is_valid_custom_code('no spaces')
        False
    """
    if not isinstance(code, str):
        return False
    return CustomCode.MIN_LENGTH <= len(code) <= CustomCode.MAX_LENGTH and CUSTOM_CODE_REGEX.fullmatch(code) is not None
