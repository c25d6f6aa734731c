from dataclasses import dataclass, field
from datetime import datetime, UTC

from shortlinks.utils.helpers import is_valid_email


# fmt: off
@dataclass(frozen=True)
class ShortLinkRecord:
    code: str                           # Unique, immutable short identifier
    owner_id: str                       # Owner email, or guest token (e.g. source IP)
    original_url: str                   # Long URL the code redirects to
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    clicks: int = 0                     # Click counter, never decreases
    disabled: bool = False              # Disabled links are never redirected to
    is_guest: bool = False              # Whether the owner was a guest at creation


@dataclass(frozen=True)
class UserAgentSummary:
    browser: str = 'unknown'            # Browser family, e.g. 'Chrome'
    device: str = 'unknown'             # Device family, e.g. 'iPhone'
    device_type: str = 'unknown'        # One of bot, desktop, mobile, tablet, unknown


@dataclass(frozen=True)
class ClickEvent:
    code: str                           # Short code that was visited
    ip: str                             # Visitor source IP
    user_agent: UserAgentSummary = field(default_factory=UserAgentSummary)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
# fmt: on


@dataclass(frozen=True)
class Authenticated:
    """Identity of a logged in account, keyed by email."""

    email: str

    @property
    def owner_id(self) -> str:
        return self.email

    @property
    def is_guest(self) -> bool:
        return False


@dataclass(frozen=True)
class Guest:
    """Identity of an anonymous caller, keyed by a transient token such as its IP."""

    token: str

    @property
    def owner_id(self) -> str:
        return self.token

    @property
    def is_guest(self) -> bool:
        return True


type Identity = Authenticated | Guest


def identity_for(owner_id: str) -> Identity:
    """Build an Identity from a raw owner id (emails are accounts, anything else is a guest).

    Example:
        >>> identity_for('jane@example.com')
        Authenticated(email='jane@example.com')
        >>> identity_for('1.2.3.4')
        Guest(token='1.2.3.4')
    """
    if is_valid_email(owner_id):
        return Authenticated(email=owner_id)
    return Guest(token=owner_id)
