from paylink.utils.config import app_env, app_name, app_prefix, load_settings, cached_settings, Settings
from paylink.utils.helpers import base_url, get_short_url, get_header, parse_json_body, raw_body, require_environment, guarantee_500_response
from paylink.utils.shortener import generate_token, is_allowed_target, is_well_formed_token
from paylink.utils.logging import initialize_logging


__all__ = [
    'Settings',
    'app_env',
    'app_name',
    'app_prefix',
    'load_settings',
    'cached_settings',
    'base_url',
    'get_short_url',
    'get_header',
    'parse_json_body',
    'raw_body',
    'require_environment',
    'guarantee_500_response',
    'generate_token',
    'is_allowed_target',
    'is_well_formed_token',
    'initialize_logging',
]
