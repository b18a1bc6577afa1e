"""Tests for the capability dependency graph."""

import pytest

from autosettings.config.capabilities import CapabilityGraph
from autosettings.config.exceptions import (
    CapabilityCycleException,
    DuplicateDefinitionException,
    UndeclaredCapabilityException,
)
from autosettings.config.models import Capability


def _graph(**edges):
    graph = CapabilityGraph()
    for name, requires in edges.items():
        graph.declare(Capability(name=name, requires=tuple(requires)))
    return graph


def test_closure_follows_requirements_transitively():
    graph = _graph(A=["B"], B=["C"], C=[], D=[])
    graph.validate()
    assert graph.closure(["A"]) == {"A", "B", "C"}
    assert graph.closure(["D"]) == {"D"}
    assert graph.closure([]) == set()


def test_closure_with_shared_requirement():
    graph = _graph(Web=["Http"], Grpc=["Http"], Http=[])
    assert graph.closure(["Web", "Grpc"]) == {"Web", "Grpc", "Http"}


def test_closure_rejects_unknown_name():
    graph = _graph(A=[])
    with pytest.raises(UndeclaredCapabilityException) as excinfo:
        graph.closure(["Missing"], referenced_by="core")
    assert excinfo.value.capability == "Missing"
    assert excinfo.value.referenced_by == "core"


def test_two_node_cycle():
    graph = _graph(A=["B"], B=["A"])
    with pytest.raises(CapabilityCycleException) as excinfo:
        graph.validate()
    assert excinfo.value.cycle == ["A", "B", "A"]
    assert "A -> B -> A" in excinfo.value.guidance


def test_self_cycle():
    graph = _graph(A=["A"])
    with pytest.raises(CapabilityCycleException) as excinfo:
        graph.validate()
    assert excinfo.value.cycle == ["A", "A"]


def test_cycle_reported_from_its_entry_point():
    graph = _graph(Root=["A"], A=["B"], B=["C"], C=["A"])
    with pytest.raises(CapabilityCycleException) as excinfo:
        graph.validate()
    assert excinfo.value.cycle == ["A", "B", "C", "A"]


def test_diamond_is_not_a_cycle():
    graph = _graph(Top=["Left", "Right"], Left=["Base"], Right=["Base"], Base=[])
    graph.validate()
    assert graph.closure(["Top"]) == {"Top", "Left", "Right", "Base"}


def test_undeclared_requirement():
    graph = _graph(Docker=["JavaAppPackaging"])
    with pytest.raises(UndeclaredCapabilityException) as excinfo:
        graph.validate()
    assert excinfo.value.referenced_by == "Docker"
    assert "project/JavaAppPackaging.yaml" in excinfo.value.guidance


def test_duplicate_declaration():
    graph = _graph(A=[])
    with pytest.raises(DuplicateDefinitionException):
        graph.declare(Capability(name="A"))


def test_requirer_of():
    graph = _graph(Compose=["Docker"], Docker=[], Web=[])
    assert graph.requirer_of("Docker", ["Web", "Compose"]) == "Compose"
    assert graph.requirer_of("Docker", ["Web"]) is None


def test_long_requirement_chain():
    edges = {f"C{i}": [f"C{i + 1}"] for i in range(5000)}
    edges["C5000"] = []
    graph = _graph(**edges)
    graph.validate()
    assert len(graph.closure(["C0"])) == 5001


def test_cycle_at_the_end_of_a_long_chain():
    edges = {f"C{i}": [f"C{i + 1}"] for i in range(5000)}
    edges["C5000"] = ["C4999"]
    graph = _graph(**edges)
    with pytest.raises(CapabilityCycleException) as excinfo:
        graph.validate()
    assert excinfo.value.cycle == ["C4999", "C5000", "C4999"]
