import logging

from shortlinks.constants import Defaults, QUOTA_EXCEEDED
from shortlinks.dao.base import AccountBaseDAO, ShortLinkBaseDAO
from shortlinks.exceptions import BadRequestError, NotFoundError, QuotaExceededError
from shortlinks.models import Authenticated, Guest, Identity
from shortlinks.utils.deadline import Deadline
from shortlinks.utils.helpers import is_valid_email


logger = logging.getLogger(__name__)


class QuotaEnforcer:
    """Gatekeeper run before every link creation

    Guests may own at most `max_guest_urls` links. The count and the following
    insert are not atomic, so concurrent requests from one guest can overshoot
    the limit slightly. Authenticated identities have no limit but must exist.

    Args:
        dao (ShortLinkBaseDAO):
            Persistence Port used to count links per owner.
        accounts (AccountBaseDAO):
            Account collaborator used to verify authenticated identities.
        max_guest_urls (int):
            Links a guest identity may create.
    """

    def __init__(self, dao: ShortLinkBaseDAO, accounts: AccountBaseDAO, max_guest_urls: int = Defaults.MAX_GUEST_URLS):
        self.dao = dao
        self.accounts = accounts
        self.max_guest_urls = max_guest_urls

    def check(self, identity: Identity, deadline: Deadline | None = None) -> None:
        """Raise if identity may not create another link.

        Raises:
            QuotaExceededError:
                If a guest already owns max_guest_urls links.
            BadRequestError:
                If a guest token is blank or an authenticated identity carries a malformed email.
            NotFoundError:
                If an authenticated identity has no account.
        """
        match identity:
            case Guest(token=token):
                if not token.strip():
                    raise BadRequestError('Missing guest identity.')
                count = self.dao.count_for_owner(token, deadline=deadline)
                if count >= self.max_guest_urls:
                    logger.info(
                        'Guest link quota reached.',
                        extra={'owner_id': token, 'count': count, 'limit': self.max_guest_urls, 'event': QUOTA_EXCEEDED},
                    )
                    raise QuotaExceededError(f'Guests may create at most {self.max_guest_urls} short links. Sign in to create more.')
            case Authenticated(email=email):
                if not is_valid_email(email):
                    raise BadRequestError(f"Malformed account email '{email}'.")
                if not self.accounts.exists(email, deadline=deadline):
                    raise NotFoundError(f"Account '{email}' does not exist.")
            case _:
                raise TypeError(f'Unsupported identity type: {type(identity).__name__}.')
