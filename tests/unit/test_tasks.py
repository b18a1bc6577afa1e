"""Tests for the command line tasks."""

import pytest
import yaml
from invoke import Context

from autosettings.tasks import namespace
from autosettings.tasks.config_show import check, explain, list_units, show_config


def test_namespace_has_tasks():
    assert set(namespace.task_names) >= {"show-config", "list-units", "explain", "check"}


def test_show_config(sample_root, capsys):
    show_config(Context(), unit="fooService", root=str(sample_root))
    captured = capsys.readouterr()
    output = yaml.safe_load(captured.out)
    assert output == {
        "unit": "fooService",
        "settings": {
            "organization": "com.example",
            "version": "0.1.0-SNAPSHOT",
            "Docker/daemonUser": "test",
            "name": "foo-service",
        },
    }
    assert "DockerProjectSpecificPlugin" in captured.err


def test_show_config_unknown_unit(sample_root, capsys):
    with pytest.raises(SystemExit) as excinfo:
        show_config(Context(), unit="missing", root=str(sample_root))
    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert "Unknown build unit 'missing'" in captured.err
    assert "core, fooService" in captured.err


def test_list_units(sample_root, capsys):
    list_units(Context(), root=str(sample_root))
    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["core", "fooService"]
    assert "JavaAppPackaging" in captured.err


def test_explain(sample_root, capsys):
    explain(Context(), unit="fooService", root=str(sample_root))
    out = capsys.readouterr().out
    assert "organization = 'com.example'  (from CommonProjectSettingsPlugin)" in out
    assert "Docker/daemonUser = 'test'  (from DockerProjectSpecificPlugin)" in out


def test_explain_shows_overrides(write_build, capsys):
    root = write_build({
        "settings": {"version": "0.1.0"},
        "units": {"app": {"settings": {"version": "2.0.0"}}},
    })
    explain(Context(), unit="app", root=str(root))
    out = capsys.readouterr().out
    assert "version = '2.0.0'  (from app)" in out
    assert "overrides '0.1.0' from ThisBuild" in out


def test_check_valid(sample_root, capsys):
    check(Context(), root=str(sample_root))
    assert "valid: 2 units" in capsys.readouterr().err


def test_check_cycle(write_build, capsys):
    root = write_build({"capabilities": {"A": ["B"], "B": ["A"]}, "units": {"core": {}}})
    with pytest.raises(SystemExit) as excinfo:
        check(Context(), root=str(root))
    assert excinfo.value.code == 1
    assert "cycle" in capsys.readouterr().err


def test_check_missing_build(tmp_path, capsys):
    with pytest.raises(SystemExit):
        check(Context(), root=str(tmp_path))
    assert "build.yaml" in capsys.readouterr().err
