from shortlinks.dao.memory.short_link_memory_dao import ShortLinkMemoryDAO
from shortlinks.dao.memory.account_memory_dao import AccountMemoryDAO


__all__ = [
    'ShortLinkMemoryDAO',
    'AccountMemoryDAO',
]
