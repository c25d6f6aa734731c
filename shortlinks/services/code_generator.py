"""Short code allocation

Functions of the generator, in the order the service uses them:
    - idempotence: an owner re-submitting a URL gets its existing code back
    - deterministic first candidate: generate_shortcode(long_url)
    - bounded retries: on collision, generate_shortcode(perturb(long_url))
    - custom codes: format check only, uniqueness is left to the data store

Example:
    >>> generator = CodeGenerator(dao, length=6, max_retries=5)
    >>> allocation = generator.generate('jane@example.com', 'https://example.com/a')
    >>> allocation.code, allocation.reused
    ('Xb9k2A', False)
"""

import logging
from dataclasses import dataclass

from shortlinks.constants import Defaults, CODE_COLLISION
from shortlinks.dao.base import ShortLinkBaseDAO
from shortlinks.dao.exceptions import ShortLinkNotFoundError
from shortlinks.exceptions import AllocationExhaustedError, BadRequestError
from shortlinks.models import ShortLinkRecord
from shortlinks.utils.shortener import generate_shortcode, perturb, is_valid_custom_code
from shortlinks.utils.deadline import Deadline


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Allocation:
    code: str
    existing: ShortLinkRecord | None = None

    @property
    def reused(self) -> bool:
        return self.existing is not None


class CodeGenerator:
    """Pick a free code for a long URL

    Args:
        dao (ShortLinkBaseDAO):
            Persistence Port used to look up candidate codes.
        length (int):
            Length of generated codes.
        max_retries (int):
            Perturbed attempts allowed after the deterministic first one.
    """

    def __init__(self, dao: ShortLinkBaseDAO, length: int = Defaults.CODE_LENGTH, max_retries: int = Defaults.MAX_RETRIES):
        self.dao = dao
        self.length = length
        self.max_retries = max_retries

    def find_existing(self, owner_id: str, long_url: str, deadline: Deadline | None = None) -> ShortLinkRecord | None:
        for record in self.dao.list_for_owner(owner_id, deadline=deadline):
            if record.original_url == long_url:
                return record
        return None

    def generate(self, owner_id: str, long_url: str, deadline: Deadline | None = None) -> Allocation:
        """Return the owner's existing code for long_url, or a code that is currently free.

        A free code can still be claimed by someone else before the caller
        inserts it; the insert is what detects that race.

        Raises:
            AllocationExhaustedError:
                If every candidate is taken by a different URL or owner.
            DataStoreError:
                If the data store cannot be reached.
        """
        existing = self.find_existing(owner_id, long_url, deadline=deadline)
        if existing is not None:
            return Allocation(code=existing.code, existing=existing)

        candidate = long_url
        for attempt in range(self.max_retries + 1):
            code = generate_shortcode(candidate, self.length)
            try:
                record = self.dao.get(code, deadline=deadline)
            except ShortLinkNotFoundError:
                return Allocation(code=code)

            if record.owner_id == owner_id and record.original_url == long_url:
                return Allocation(code=code, existing=record)

            logger.info(
                'Short code %s already taken, retrying with a perturbed URL.',
                code,
                extra={'code': code, 'attempt': attempt + 1, 'event': CODE_COLLISION},
            )
            candidate = perturb(long_url)

        raise AllocationExhaustedError(f'Could not allocate a short code after {self.max_retries} retries.')

    def claim_custom(self, code: str) -> Allocation:
        """Validate a user-supplied code.

        Raises:
            BadRequestError:
                If the code violates the charset or length rules.
        """
        if not is_valid_custom_code(code):
            raise BadRequestError(f"Invalid custom code '{code}': use 3 to 32 characters from [A-Za-z0-9_-].")
        return Allocation(code=code)
