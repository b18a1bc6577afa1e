"""
Root pytest configuration for autosettings.
"""

from pathlib import Path

import pytest
import yaml

from autosettings.config.logging import bootstrap_logging

bootstrap_logging()

pytest_plugins = ["pytester"]

SAMPLE_BUILD = Path(__file__).parent / 'data' / 'sample'


@pytest.fixture
def sample_root():
    """Build root of the two-service sample build."""
    return SAMPLE_BUILD


@pytest.fixture
def write_build(tmp_path):
    """
    Write a build definition under tmp_path.

    Usage:
        root = write_build({'units': {...}}, plugins={'Docker': {...}})
    """
    def _write(build, plugins=None):
        (tmp_path / 'build.yaml').write_text(yaml.safe_dump(build))
        if plugins:
            project_dir = tmp_path / 'project'
            project_dir.mkdir(exist_ok=True)
            for name, plugin in plugins.items():
                (project_dir / f'{name}.yaml').write_text(yaml.safe_dump(plugin))
        return tmp_path
    return _write
