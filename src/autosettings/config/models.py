"""
Pydantic models for build definitions and resolved configurations.
"""
import re
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

KEY_PATTERN = re.compile(r'^[A-Za-z_][A-Za-z0-9_-]*(\.[A-Za-z_][A-Za-z0-9_-]*)*$')
NAME_PATTERN = re.compile(r'^[A-Za-z_][A-Za-z0-9_.-]*$')


def _check_name(value: str, what: str) -> str:
    if not NAME_PATTERN.match(value):
        raise ValueError(f"Invalid {what} name '{value}'")
    return value


class Setting(BaseModel):
    """A single key/value assignment, optionally scoped to a capability."""
    model_config = ConfigDict(frozen=True)

    key: str
    value: Any = None
    scope: Optional[str] = None

    @field_validator('key')
    @classmethod
    def validate_key(cls, value: str) -> str:
        if not KEY_PATTERN.match(value):
            raise ValueError(f"Invalid setting key '{value}'")
        return value

    @field_validator('scope')
    @classmethod
    def validate_scope(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _check_name(value, 'scope')

    @property
    def qualified_key(self) -> str:
        """Key as it appears in a resolved configuration map."""
        if self.scope:
            return f"{self.scope}/{self.key}"
        return self.key


class SettingsBundle(BaseModel):
    """An ordered, immutable sequence of settings."""
    model_config = ConfigDict(frozen=True)

    name: str
    settings: Tuple[Setting, ...] = ()
    requires: Tuple[str, ...] = ()
    auto_trigger: bool = True

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _check_name(value, 'bundle')

    @property
    def is_global(self) -> bool:
        return self.auto_trigger and not self.requires

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any], **kwargs) -> 'SettingsBundle':
        """Create a bundle from a plain ``key: value`` mapping."""
        settings = tuple(Setting(key=key, value=value) for key, value in data.items())
        return cls(name=name, settings=settings, **kwargs)


class Capability(BaseModel):
    """A named feature a build unit may enable."""
    model_config = ConfigDict(frozen=True)

    name: str
    requires: Tuple[str, ...] = ()

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _check_name(value, 'capability')


class BuildUnit(BaseModel):
    """One sub-project of a multi-unit build."""
    model_config = ConfigDict(frozen=True)

    name: str
    enables: Tuple[str, ...] = ()
    opts_in: Tuple[str, ...] = ()
    disables: Tuple[str, ...] = ()
    settings: Tuple[Setting, ...] = ()

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _check_name(value, 'unit')


class LayerValue(BaseModel):
    """A bundle/value pair that was overridden by a later write."""
    layer: str
    value: Any = None


class ResolvedSetting(BaseModel):
    """A resolved configuration value with the bundles that wrote it."""
    key: str
    value: Any = None
    source: str
    overrides: List[LayerValue] = []

    def found(self, value: Any, layer: str) -> None:
        """
        Record a new value from a layer, pushing the previous value to overrides.

        Args:
            value: The new value found
            layer: The bundle (or unit) the value came from
        """
        self.overrides.insert(0, LayerValue(layer=self.source, value=self.value))
        self.value = value
        self.source = layer

    @property
    def is_override(self) -> bool:
        """True if this value replaced one written by an earlier layer."""
        return len(self.overrides) > 0


class ResolvedConfig(BaseModel):
    """Final configuration of a build unit with provenance."""
    unit: str
    capabilities: List[str] = []
    bundles: List[str] = []
    settings: Dict[str, ResolvedSetting] = {}

    def to_dict(self) -> Dict[str, Any]:
        """Plain key -> value map."""
        return {key: resolved.value for key, resolved in self.settings.items()}
