from shortlinks.utils.config import app_env, app_name, app_prefix, load_config, load_settings, Settings
from shortlinks.utils.helpers import is_valid_email, is_valid_long_url, require_environment
from shortlinks.utils.shortener import generate_shortcode, perturb, is_valid_custom_code
from shortlinks.utils.deadline import Deadline
from shortlinks.utils.logging import initialize_logging


__all__ = [
    'generate_shortcode',
    'perturb',
    'is_valid_custom_code',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'load_settings',
    'Settings',
    'is_valid_email',
    'is_valid_long_url',
    'require_environment',
    'Deadline',
    'initialize_logging',
]
