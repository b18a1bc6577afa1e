"""
Build definition loading from YAML.

A build root contains ``build.yaml`` with capabilities, global settings,
bundles and units, plus an optional ``project/`` directory holding one plugin
per ``*.yaml`` file:

    # project/DockerProjectSpecificPlugin.yaml
    name: DockerProjectSpecificPlugin
    requires: [DockerPlugin]
    trigger: allRequirements
    settings:
      - key: daemonUser
        scope: Docker
        value: test
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import ValidationError

from .exceptions import BuildDefinitionException
from .models import BuildUnit, Setting, SettingsBundle
from .registry import SettingsRegistry

logger = logging.getLogger(__name__)

BUILD_ROOT_ENV_VAR = 'AUTOSETTINGS_BUILD_ROOT'
BUILD_FILE = 'build.yaml'
PLUGIN_DIR = 'project'
GLOBAL_BUNDLE_NAME = 'ThisBuild'

TRIGGERS = {
    'allRequirements': True,
    'noTrigger': False,
}


def get_build_root(root: Optional[str] = None) -> Path:
    """
    Determine the build root directory.

    Args:
        root: Explicit root; wins over the environment

    Returns:
        Path to the build root
    """
    if root:
        return Path(root)
    env_root = os.environ.get(BUILD_ROOT_ENV_VAR)
    if env_root:
        return Path(env_root)
    return Path.cwd()


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise BuildDefinitionException(f"Invalid YAML: {e}", source=str(path))
    except UnicodeDecodeError as e:
        raise BuildDefinitionException(f"File is not valid UTF-8: {e}", source=str(path))
    except OSError as e:
        raise BuildDefinitionException(f"Cannot read file: {e}", source=str(path))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BuildDefinitionException("Top level must be a mapping", source=str(path))
    return data


def _as_names(value: Any, field: str, source: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise BuildDefinitionException(f"'{field}' must be a name or a list of names", source=source)


def _setting_from_item(key: str, value: Any) -> Setting:
    # "Docker/daemonUser" is shorthand for key daemonUser scoped to Docker
    if '/' in key:
        scope, key = key.split('/', 1)
        return Setting(key=key, value=value, scope=scope)
    return Setting(key=key, value=value)


def parse_settings(data: Any, source: str) -> Tuple[Setting, ...]:
    """
    Parse a settings section.

    Accepts either a ``key: value`` mapping (``scope/key`` for scoped keys)
    or a list of ``{key, value, scope}`` mappings.
    """
    if data is None:
        return ()
    try:
        if isinstance(data, dict):
            return tuple(_setting_from_item(str(key), value) for key, value in data.items())
        if isinstance(data, list):
            settings = []
            for entry in data:
                if not isinstance(entry, dict) or 'key' not in entry:
                    raise BuildDefinitionException(
                        f"Setting entries must be mappings with a 'key': {entry!r}", source=source
                    )
                settings.append(Setting(**entry))
            return tuple(settings)
    except ValidationError as e:
        raise BuildDefinitionException(f"Invalid setting: {e}", source=source)
    raise BuildDefinitionException("'settings' must be a mapping or a list", source=source)


def _parse_trigger(value: Any, source: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if not isinstance(value, str) or value not in TRIGGERS:
        raise BuildDefinitionException(
            f"Unknown trigger '{value}', expected one of {sorted(TRIGGERS)}", source=source
        )
    return TRIGGERS[value]


def _declare_capabilities(registry: SettingsRegistry, data: Any, source: str) -> None:
    if data is None:
        return
    if isinstance(data, list):
        data = {name: None for name in data}
    if not isinstance(data, dict):
        raise BuildDefinitionException("'capabilities' must be a mapping or a list", source=source)
    for name, spec in data.items():
        if isinstance(spec, (str, list)):
            spec = {'requires': spec}
        spec = spec or {}
        if not isinstance(spec, dict):
            raise BuildDefinitionException(f"Capability '{name}' must be a mapping", source=source)
        try:
            registry.declare_capability(str(name), _as_names(spec.get('requires'), 'requires', source))
        except ValidationError as e:
            raise BuildDefinitionException(f"Invalid capability '{name}': {e}", source=source)


def _register_bundle(registry: SettingsRegistry, data: Dict[str, Any], source: str) -> None:
    if 'name' not in data:
        raise BuildDefinitionException("Bundle is missing 'name'", source=source)
    try:
        bundle = SettingsBundle(name=str(data['name']), settings=parse_settings(data.get('settings'), source))
    except ValidationError as e:
        raise BuildDefinitionException(f"Invalid bundle: {e}", source=source)
    requires = _as_names(data.get('requires'), 'requires', source)
    registry.register_conditional(bundle, requires, _parse_trigger(data.get('trigger'), source))


def _declare_units(registry: SettingsRegistry, data: Any, source: str) -> None:
    if data is None:
        return
    if not isinstance(data, dict):
        raise BuildDefinitionException("'units' must be a mapping", source=source)
    for name, spec in data.items():
        spec = spec or {}
        if not isinstance(spec, dict):
            raise BuildDefinitionException(f"Unit '{name}' must be a mapping", source=source)
        try:
            unit = BuildUnit(
                name=str(name),
                enables=_as_names(spec.get('enables'), 'enables', source),
                opts_in=_as_names(spec.get('opts_in'), 'opts_in', source),
                disables=_as_names(spec.get('disables'), 'disables', source),
                settings=parse_settings(spec.get('settings'), source),
            )
        except ValidationError as e:
            raise BuildDefinitionException(f"Invalid unit '{name}': {e}", source=source)
        registry.declare_unit(unit)


def load_plugin(registry: SettingsRegistry, path: Path) -> None:
    """Register the plugin defined in a ``project/*.yaml`` file."""
    source = str(path)
    data = _read_yaml(path)
    name = data.get('name') or path.stem
    try:
        settings = parse_settings(data.get('settings'), source)
        registry.register_plugin(
            str(name),
            settings=settings,
            requires=_as_names(data.get('requires'), 'requires', source),
            auto_trigger=_parse_trigger(data.get('trigger'), source),
        )
    except ValidationError as e:
        raise BuildDefinitionException(f"Invalid plugin: {e}", source=source)
    logger.debug(f"Loaded plugin {name} from {path}")


def load_build(root: Optional[str] = None) -> SettingsRegistry:
    """
    Load and validate the build definition under ``root``.

    Args:
        root: Build root directory; defaults to $AUTOSETTINGS_BUILD_ROOT or the cwd

    Returns:
        A validated, frozen SettingsRegistry

    Raises:
        BuildDefinitionException: If build.yaml is missing or malformed
        ConfigException: If validation fails (cycles, undeclared references, ...)
    """
    build_root = get_build_root(root)
    build_file = build_root / BUILD_FILE
    if not build_file.exists():
        raise BuildDefinitionException(f"Missing {BUILD_FILE} at {build_file}", source=str(build_file))

    source = str(build_file)
    data = _read_yaml(build_file)
    registry = SettingsRegistry()

    _declare_capabilities(registry, data.get('capabilities'), source)

    global_settings = parse_settings(data.get('settings'), source)
    if global_settings:
        registry.register(SettingsBundle(name=GLOBAL_BUNDLE_NAME, settings=global_settings))

    bundles = data.get('bundles') or []
    if not isinstance(bundles, list):
        raise BuildDefinitionException("'bundles' must be a list", source=source)
    for bundle_data in bundles:
        if not isinstance(bundle_data, dict):
            raise BuildDefinitionException(f"Bundle entries must be mappings: {bundle_data!r}", source=source)
        _register_bundle(registry, bundle_data, source)

    plugin_files: List[Path] = []
    plugin_dir = build_root / PLUGIN_DIR
    if plugin_dir.is_dir():
        plugin_files = sorted(plugin_dir.glob('*.yaml'))
    for plugin_file in plugin_files:
        load_plugin(registry, plugin_file)

    _declare_units(registry, data.get('units'), source)

    registry.validate()
    logger.info(
        f"Loaded build from {build_root}: {len(registry.units)} units, "
        f"{len(registry.bundles)} bundles, {len(plugin_files)} plugin files"
    )
    return registry
