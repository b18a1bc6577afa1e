"""
Settings registry and conditional settings activation.

A registry is built once when the build definition loads, validated, and then
frozen. Resolution is a pure function of the registrations:

1. global bundles, in registration order
2. conditional bundles whose requirements are met, in registration order
3. the unit's own settings

Later writes override earlier ones for the same key.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from .capabilities import CapabilityGraph
from .exceptions import (
    CapabilityConflictException,
    DuplicateDefinitionException,
    RegistryFrozenException,
    UndeclaredCapabilityException,
    UnknownUnitException,
)
from .models import BuildUnit, Capability, ResolvedConfig, ResolvedSetting, Setting, SettingsBundle

logger = logging.getLogger(__name__)


def _as_names(names: Iterable[str]) -> Tuple[str, ...]:
    """A bare string is a single name."""
    if isinstance(names, str):
        return (names,)
    return tuple(dict.fromkeys(names))


class SettingsRegistry:
    """Holds capabilities, settings bundles and build units for one build."""

    def __init__(self):
        self.capabilities = CapabilityGraph()
        self._bundles: Dict[str, SettingsBundle] = {}
        self._units: Dict[str, BuildUnit] = {}
        self._plugins: Set[str] = set()
        self._resolved: Dict[str, ResolvedConfig] = {}
        self._frozen = False

    # Registration

    def _check_mutable(self, what: str) -> None:
        if self._frozen:
            raise RegistryFrozenException(f"Cannot {what}: registry is already validated")

    def declare_capability(self, name: str, requires: Iterable[str] = ()) -> Capability:
        self._check_mutable(f"declare capability '{name}'")
        capability = Capability(name=name, requires=_as_names(requires))
        self.capabilities.declare(capability)
        return capability

    def _add_bundle(self, bundle: SettingsBundle) -> SettingsBundle:
        self._check_mutable(f"register bundle '{bundle.name}'")
        if bundle.name in self._bundles:
            raise DuplicateDefinitionException(
                f"Bundle '{bundle.name}' already registered", kind='bundle', name=bundle.name
            )
        self._bundles[bundle.name] = bundle
        logger.debug(
            f"Registered bundle {bundle.name} requires={list(bundle.requires)} "
            f"auto_trigger={bundle.auto_trigger} keys={[s.qualified_key for s in bundle.settings]}"
        )
        return bundle

    def register(self, bundle: SettingsBundle) -> SettingsBundle:
        """Register a bundle applied to every unit."""
        return self._add_bundle(bundle.model_copy(update={'requires': (), 'auto_trigger': True}))

    def register_conditional(self, bundle: SettingsBundle, required_capabilities: Iterable[str],
                             auto_trigger: bool = True) -> SettingsBundle:
        """
        Register a bundle applied to units that have ``required_capabilities``.

        Args:
            bundle: Settings to apply
            required_capabilities: Capabilities a unit must have enabled
            auto_trigger: Apply without explicit opt-in when requirements are met

        Returns:
            The registered bundle
        """
        requires = _as_names(required_capabilities)
        return self._add_bundle(bundle.model_copy(update={'requires': requires, 'auto_trigger': auto_trigger}))

    def register_plugin(self, name: str, settings: Iterable[Setting] = (), requires: Iterable[str] = (),
                        auto_trigger: bool = False) -> SettingsBundle:
        """Declare a capability and the bundle of settings it contributes."""
        requires = _as_names(requires)
        self.declare_capability(name, requires)
        bundle = self.register_conditional(
            SettingsBundle(name=name, settings=tuple(settings)), requires, auto_trigger
        )
        self._plugins.add(name)
        return bundle

    def declare_unit(self, unit: BuildUnit) -> BuildUnit:
        self._check_mutable(f"declare unit '{unit.name}'")
        if unit.name in self._units:
            raise DuplicateDefinitionException(
                f"Unit '{unit.name}' already declared", kind='unit', name=unit.name
            )
        self._units[unit.name] = unit
        logger.debug(f"Declared unit {unit.name} enables={list(unit.enables)}")
        return unit

    # Queries

    @property
    def bundles(self) -> List[SettingsBundle]:
        return list(self._bundles.values())

    @property
    def units(self) -> List[BuildUnit]:
        return list(self._units.values())

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get_unit(self, name: str) -> BuildUnit:
        if name not in self._units:
            raise UnknownUnitException(
                f"Unknown build unit '{name}'", unit_name=name, available=list(self._units)
            )
        return self._units[name]

    def validate(self) -> None:
        """
        Validate every registration and freeze the registry.

        Every unit is resolved once here so that conflicts surface before
        any unit is queried.
        """
        if self._frozen:
            return
        self.capabilities.validate()
        for bundle in self._bundles.values():
            for required in bundle.requires:
                if required not in self.capabilities:
                    raise UndeclaredCapabilityException(
                        f"Bundle '{bundle.name}' requires undeclared capability '{required}'",
                        capability=required, referenced_by=bundle.name
                    )
        for unit in self._units.values():
            self._check_unit_references(unit)

        resolved = {unit.name: self._resolve_unit(unit) for unit in self._units.values()}
        self._resolved = resolved
        self._frozen = True
        logger.debug(
            f"Validated registry: {len(self._units)} units, {len(self._bundles)} bundles, "
            f"{len(self.capabilities.names)} capabilities"
        )

    def explain(self, unit_name: str) -> ResolvedConfig:
        """Resolve a unit and return its configuration with provenance."""
        self.validate()
        self.get_unit(unit_name)
        return self._resolved[unit_name].model_copy(deep=True)

    def resolve(self, unit_name: str) -> Dict[str, Any]:
        """Resolve a unit's final configuration map."""
        return self.explain(unit_name).to_dict()

    def resolve_all(self) -> Dict[str, Dict[str, Any]]:
        self.validate()
        return {name: self.resolve(name) for name in self._units}

    # Resolution

    def _check_unit_references(self, unit: BuildUnit) -> None:
        for name in unit.enables:
            if name not in self.capabilities:
                raise UndeclaredCapabilityException(
                    f"Unit '{unit.name}' enables undeclared capability '{name}'",
                    capability=name, referenced_by=unit.name
                )
        for name in unit.opts_in:
            if name not in self._bundles:
                raise UndeclaredCapabilityException(
                    f"Unit '{unit.name}' opts in to undeclared bundle '{name}'",
                    capability=name, referenced_by=unit.name
                )
        for name in unit.disables:
            if name not in self.capabilities and name not in self._bundles:
                raise UndeclaredCapabilityException(
                    f"Unit '{unit.name}' disables undeclared capability '{name}'",
                    capability=name, referenced_by=unit.name
                )

    def _enabled_capabilities(self, unit: BuildUnit) -> Set[str]:
        disabled = set(unit.disables)
        roots = list(unit.enables)
        for name in unit.opts_in:
            roots.extend(self._bundles[name].requires)
        enabled = self.capabilities.closure(roots, referenced_by=unit.name)

        # Triggered plugins are capabilities too: enable them once their
        # requirements are met, until nothing changes.
        changed = True
        while changed:
            changed = False
            for bundle in self._bundles.values():
                if (bundle.auto_trigger and bundle.name in self._plugins
                        and bundle.name not in enabled and bundle.name not in disabled
                        and set(bundle.requires) <= enabled):
                    enabled |= self.capabilities.closure([bundle.name], referenced_by=unit.name)
                    changed = True

        for name in unit.disables:
            if name in enabled or name in unit.opts_in:
                raise CapabilityConflictException(
                    f"Unit '{unit.name}' disables '{name}' which it still requires",
                    unit_name=unit.name, capability=name,
                    required_by=self._find_requirer(unit, name)
                )
        return enabled

    def _find_requirer(self, unit: BuildUnit, name: str) -> Optional[str]:
        if name in unit.enables or name in unit.opts_in:
            return None
        for bundle_name in unit.opts_in:
            if self.capabilities.requirer_of(name, self._bundles[bundle_name].requires):
                return bundle_name
        return self.capabilities.requirer_of(name, [n for n in unit.enables if n != name])

    def _applies(self, bundle: SettingsBundle, unit: BuildUnit, enabled: Set[str]) -> bool:
        if bundle.name in unit.disables:
            return False
        if bundle.auto_trigger:
            return set(bundle.requires) <= enabled
        # enabling a plugin by name opts in to its bundle
        return bundle.name in unit.opts_in or (bundle.name in self._plugins and bundle.name in enabled)

    def _resolve_unit(self, unit: BuildUnit) -> ResolvedConfig:
        enabled = self._enabled_capabilities(unit)
        ordered = [b for b in self._bundles.values() if b.is_global]
        ordered += [b for b in self._bundles.values() if not b.is_global]
        applied = [b for b in ordered if self._applies(b, unit, enabled)]

        settings: Dict[str, ResolvedSetting] = {}
        layers = [(bundle.name, bundle.settings) for bundle in applied]
        layers.append((unit.name, unit.settings))
        for layer, layer_settings in layers:
            for setting in layer_settings:
                key = setting.qualified_key
                if key in settings:
                    settings[key].found(setting.value, layer)
                else:
                    settings[key] = ResolvedSetting(key=key, value=setting.value, source=layer)

        logger.debug(f"Resolved unit {unit.name}: bundles={[b.name for b in applied]}")
        return ResolvedConfig(
            unit=unit.name,
            capabilities=sorted(enabled),
            bundles=[b.name for b in applied],
            settings=settings,
        )
