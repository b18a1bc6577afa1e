"""
Pytest plugin exposing the build definition to tests.

Registered through the ``pytest11`` entry point. Tests in a build can take
the ``build_registry`` fixture to assert on resolved unit configurations.
"""

import pytest

from autosettings.config.exceptions import ConfigException
from autosettings.config.loading import load_build
from autosettings.config.registry import SettingsRegistry


def pytest_addoption(parser):
    """Add custom command line options for pytest."""
    parser.addoption(
        "--build-root",
        action="store",
        default=None,
        help="Build root holding build.yaml (default: $AUTOSETTINGS_BUILD_ROOT or cwd)"
    )


@pytest.fixture
def settings_registry():
    """An empty registry for building definitions in code."""
    return SettingsRegistry()


@pytest.fixture
def build_registry(request):
    """
    The validated registry loaded from --build-root.

    Skips the test with guidance when the build definition cannot be loaded.
    """
    root = request.config.getoption("--build-root")
    try:
        return load_build(root)
    except ConfigException as e:
        pytest.skip(f"Build definition unavailable: {e.guidance}")
