"""Unit tests for the CodeGenerator

Test coverage includes:

1. Idempotence
   - Ensures an owner re-submitting a URL gets its existing code back.

2. Deterministic first attempt
   - Ensures a free URL gets the fingerprint-derived code.

3. Collisions
   - Ensures codes taken by another owner or URL trigger perturbed retries.
   - Confirms exhausting the retries raises AllocationExhaustedError.

4. Custom codes
   - Ensures valid custom codes pass and invalid ones raise BadRequestError.
"""

from unittest.mock import patch

import pytest

from shortlinks.dao.memory import ShortLinkMemoryDAO
from shortlinks.exceptions import AllocationExhaustedError, BadRequestError
from shortlinks.services import CodeGenerator
from shortlinks.utils.shortener import generate_shortcode


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def dao():
    return ShortLinkMemoryDAO()


@pytest.fixture
def generator(dao):
    return CodeGenerator(dao, length=6, max_retries=5)


# -------------------------------
# 1. Idempotence
# -------------------------------


def test_existing_link_is_reused(generator, dao):
    """Ensure the owner's existing code is returned without generating a new one."""
    dao.create('1.2.3.4', 'https://example.com/a', 'mine01', is_guest=True)

    with patch('shortlinks.services.code_generator.generate_shortcode') as shortcode_mock:
        allocation = generator.generate('1.2.3.4', 'https://example.com/a')

    assert allocation.reused
    assert allocation.code == 'mine01'
    assert allocation.existing.original_url == 'https://example.com/a'
    shortcode_mock.assert_not_called()


# -------------------------------
# 2. Deterministic first attempt
# -------------------------------


def test_fresh_code_is_deterministic(generator):
    """Ensure a new URL gets its fingerprint code on the first attempt."""
    allocation = generator.generate('1.2.3.4', 'https://example.com/a')

    assert not allocation.reused
    assert allocation.code == generate_shortcode('https://example.com/a', 6)
    assert len(allocation.code) == 6
    assert allocation.code.isalnum()


# -------------------------------
# 3. Collisions
# -------------------------------


def test_same_url_of_another_owner_is_perturbed(generator, dao):
    """Ensure the deterministic code of another owner's identical URL is not reused."""
    url = 'https://example.com/shared'
    dao.create('5.6.7.8', url, generate_shortcode(url, 6), is_guest=True)

    allocation = generator.generate('1.2.3.4', url)

    assert not allocation.reused
    assert allocation.code != generate_shortcode(url, 6)


def test_collision_retries_with_perturbed_url(generator, dao):
    """Ensure a taken code leads to a retry with a perturbed fingerprint input."""
    dao.create('5.6.7.8', 'https://example.com/other', 'taken1', is_guest=True)

    with (
        patch('shortlinks.services.code_generator.generate_shortcode', side_effect=['taken1', 'free01']) as shortcode_mock,
        patch('shortlinks.services.code_generator.perturb', return_value='https://example.com/a#f00d') as perturb_mock,
    ):
        allocation = generator.generate('1.2.3.4', 'https://example.com/a')

    assert allocation.code == 'free01'
    perturb_mock.assert_called_once_with('https://example.com/a')
    assert shortcode_mock.call_args_list[1].args == ('https://example.com/a#f00d', 6)


def test_retries_exhausted(generator, dao):
    """Ensure AllocationExhaustedError after max_retries perturbed attempts."""
    dao.create('5.6.7.8', 'https://example.com/other', 'taken1', is_guest=True)

    with patch('shortlinks.services.code_generator.generate_shortcode', return_value='taken1') as shortcode_mock:
        with pytest.raises(AllocationExhaustedError):
            generator.generate('1.2.3.4', 'https://example.com/a')

    assert shortcode_mock.call_count == 6  # first attempt + 5 retries


# -------------------------------
# 4. Custom codes
# -------------------------------


def test_claim_valid_custom_code(generator):
    """Ensure valid custom codes are accepted as-is."""
    assert generator.claim_custom('my-launch_2025').code == 'my-launch_2025'


@pytest.mark.parametrize('code', ['ab', 'has space', 'x' * 33, 'dot.ted'])
def test_claim_invalid_custom_code(generator, code):
    """Ensure malformed custom codes raise BadRequestError."""
    with pytest.raises(BadRequestError):
        generator.claim_custom(code)
