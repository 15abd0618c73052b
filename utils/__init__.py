"""
Utilities Package
Configuration loading and refs persistence
"""

from .config import load_config, get_network_config, get_confirmation_settings
from .refs import Refs

__all__ = [
    'load_config',
    'get_network_config',
    'get_confirmation_settings',
    'Refs'
]
