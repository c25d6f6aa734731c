from shortlinks.services.code_generator import Allocation, CodeGenerator
from shortlinks.services.quota import QuotaEnforcer
from shortlinks.services.click_recorder import ClickRecorder
from shortlinks.services.short_link_service import ShortLinkService


__all__ = [
    'Allocation',
    'CodeGenerator',
    'QuotaEnforcer',
    'ClickRecorder',
    'ShortLinkService',
]
