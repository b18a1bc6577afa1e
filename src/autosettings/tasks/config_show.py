"""
Configuration display tasks.

Show resolved unit configurations with diagnostic information. Parseable
output goes to stdout, diagnostics to stderr.
"""

import logging
import sys

import yaml
from invoke import task

from ..config.exceptions import ConfigException
from ..config.loading import get_build_root, load_build
from ..config.logging import bootstrap_logging
from ..config.registry import SettingsRegistry

logger = logging.getLogger(__name__)

COMMON_HELP = {
    'root': "Build root directory (default: $AUTOSETTINGS_BUILD_ROOT or cwd)",
    'debug': "Enable debug logging",
}


def _load_or_exit(root=None, debug=False) -> SettingsRegistry:
    """Load the build definition, exiting with guidance on configuration errors."""
    bootstrap_logging(debug=debug)
    try:
        return load_build(root)
    except ConfigException as e:
        print(e.guidance, file=sys.stderr)
        sys.exit(1)


def _explain_or_exit(registry: SettingsRegistry, unit: str):
    try:
        return registry.explain(unit)
    except ConfigException as e:
        print(e.guidance, file=sys.stderr)
        sys.exit(1)


@task(help={'unit': "Build unit to resolve", **COMMON_HELP})
def show_config(ctx, unit, root=None, debug=False):
    """
    Show the resolved configuration of a build unit.

    Outputs:
        stdout: YAML configuration (parseable)
        stderr: Diagnostic information
    """
    registry = _load_or_exit(root, debug)
    print(f"🔍 Resolving build unit: {unit}", file=sys.stderr)
    resolved = _explain_or_exit(registry, unit)

    print(f"✅ Capabilities: {', '.join(resolved.capabilities) or 'None'}", file=sys.stderr)
    print(f"📦 Bundles: {', '.join(resolved.bundles) or 'None'}", file=sys.stderr)

    yaml.safe_dump({'unit': unit, 'settings': resolved.to_dict()}, sys.stdout,
                   default_flow_style=False, sort_keys=True)


@task(help=COMMON_HELP)
def list_units(ctx, root=None, debug=False):
    """
    List declared build units.

    Unit names go to stdout, one per line; enabled capabilities to stderr.
    """
    registry = _load_or_exit(root, debug)

    print(f"📋 Build units in {get_build_root(root)}:", file=sys.stderr)
    for build_unit in registry.units:
        resolved = registry.explain(build_unit.name)
        capabilities = ', '.join(resolved.capabilities) or 'none'
        print(f"   • {build_unit.name:20} (capabilities: {capabilities})", file=sys.stderr)

    for build_unit in registry.units:
        print(build_unit.name)


@task(help={'unit': "Build unit to explain", **COMMON_HELP})
def explain(ctx, unit, root=None, debug=False):
    """Show which bundle wrote every resolved setting of a build unit."""
    registry = _load_or_exit(root, debug)
    resolved = _explain_or_exit(registry, unit)

    for key in sorted(resolved.settings):
        setting = resolved.settings[key]
        print(f"{key} = {setting.value!r}  (from {setting.source})")
        for overridden in setting.overrides:
            print(f"    overrides {overridden.value!r} from {overridden.layer}")


@task(help=COMMON_HELP)
def check(ctx, root=None, debug=False):
    """Validate the build definition."""
    registry = _load_or_exit(root, debug)
    logger.debug(f"Units: {[u.name for u in registry.units]}")
    print(f"✅ Build definition is valid: {len(registry.units)} units, "
          f"{len(registry.bundles)} bundles", file=sys.stderr)
