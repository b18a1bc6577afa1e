#!/usr/bin/env python3
"""
Example usage of the settings registry.

Builds the common/Docker example in code and prints each unit's resolved
configuration along with where every value came from.
"""

import sys
from pathlib import Path

# Add the package to the path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from autosettings import BuildUnit, Setting, SettingsBundle, SettingsRegistry


def main():
    """Resolve two units that share common settings."""
    registry = SettingsRegistry()
    registry.declare_capability("Docker")

    registry.register(SettingsBundle.from_dict("common", {
        "organization": "com.example",
        "version": "0.1.0-SNAPSHOT",
    }))
    registry.register_conditional(
        SettingsBundle(name="docker-user", settings=(Setting(key="daemonUser", value="test", scope="Docker"),)),
        {"Docker"},
        auto_trigger=True,
    )

    registry.declare_unit(BuildUnit(name="core"))
    registry.declare_unit(BuildUnit(name="fooService", enables=("Docker",)))

    for unit in registry.units:
        resolved = registry.explain(unit.name)
        print(f"\n📦 {unit.name} (bundles: {', '.join(resolved.bundles)})")
        for key, setting in resolved.settings.items():
            print(f"   {key} = {setting.value} (from {setting.source})")


if __name__ == "__main__":
    main()
