"""
autosettings: shared and capability-triggered settings for multi-unit builds.
"""

from .config import (
    BuildUnit,
    Capability,
    ConfigException,
    Setting,
    SettingsBundle,
    SettingsRegistry,
    load_build,
)

__all__ = [
    'BuildUnit',
    'Capability',
    'ConfigException',
    'Setting',
    'SettingsBundle',
    'SettingsRegistry',
    'load_build',
]
