"""
Configuration management module.

Settings are read from the environment and an optional ``.env`` file.
"""

from .settings import Settings, get_settings, set_settings

__all__ = [
    'Settings',
    'get_settings',
    'set_settings',
]
