"""
Settings composition for multi-unit builds.
"""

from .exceptions import (
    ConfigException,
    BuildDefinitionException,
    CapabilityCycleException,
    CapabilityConflictException,
    DuplicateDefinitionException,
    RegistryFrozenException,
    UndeclaredCapabilityException,
    UnknownUnitException,
)
from .models import Setting, SettingsBundle, Capability, BuildUnit, ResolvedConfig, ResolvedSetting
from .capabilities import CapabilityGraph
from .registry import SettingsRegistry
from .loading import load_build, get_build_root


__all__ = [
    'ConfigException',
    'BuildDefinitionException',
    'CapabilityCycleException',
    'CapabilityConflictException',
    'DuplicateDefinitionException',
    'RegistryFrozenException',
    'UndeclaredCapabilityException',
    'UnknownUnitException',
    'Setting',
    'SettingsBundle',
    'Capability',
    'BuildUnit',
    'ResolvedConfig',
    'ResolvedSetting',
    'CapabilityGraph',
    'SettingsRegistry',
    'load_build',
    'get_build_root',
]
