"""User-Agent header summarization for click analytics

Functions:
    device_type(user_agent) -> str
        Classify a parsed user agent as bot, mobile, tablet, desktop or unknown
    summarize_user_agent(raw: str | None) -> UserAgentSummary
        Parse a raw User-Agent header into the summary stored with each click

Example:
    >>> summary = summarize_user_agent(
    ...     'Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 '
    ...     '(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1'
    ... )
    >>> summary.browser, summary.device, summary.device_type
    ('Mobile Safari', 'iPhone', 'mobile')
"""

from user_agents import parse
from user_agents.parsers import UserAgent

from shortlinks.models import UserAgentSummary


def device_type(user_agent: UserAgent) -> str:
    # bot check precedes the form-factor checks
    if user_agent.is_bot:
        return 'bot'
    if user_agent.is_mobile:
        return 'mobile'
    if user_agent.is_tablet:
        return 'tablet'
    if user_agent.is_pc:
        return 'desktop'
    return 'unknown'


def summarize_user_agent(raw: str | None) -> UserAgentSummary:
    if not raw:
        return UserAgentSummary()

    user_agent = parse(raw)
    return UserAgentSummary(
        browser=user_agent.browser.family or 'unknown',
        device=user_agent.device.family or 'unknown',
        device_type=device_type(user_agent),
    )
