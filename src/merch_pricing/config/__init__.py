"""Configuration subpackage - settings, pricing config model and loader."""
from .exceptions import (
    ConfigurationError,
    UnknownProductLineError,
    UnknownRoleError,
    UnknownChannelError,
)
from .model import PricingConfig, normalize_line_name
from .loader import load_pricing_config, get_pricing_config

__all__ = [
    'ConfigurationError',
    'UnknownProductLineError',
    'UnknownRoleError',
    'UnknownChannelError',
    'PricingConfig',
    'normalize_line_name',
    'load_pricing_config',
    'get_pricing_config',
]
