from shortlinks.dao.base.short_link_base_dao import ShortLinkBaseDAO
from shortlinks.dao.base.account_base_dao import AccountBaseDAO


__all__ = [
    'ShortLinkBaseDAO',
    'AccountBaseDAO',
]
