"""Tests for diagnostics and build metrics."""

import pytest

from fhir_structure_tree.shared import (
    BuildMetrics,
    DiagnosticEntry,
    DiagnosticSeverity,
    MissingFieldWarning,
)


class TestDiagnosticEntry:
    """Test diagnostic entries."""

    def test_requires_message_and_component(self):
        """Test validation of empty fields."""
        with pytest.raises(ValueError, match="message cannot be empty"):
            DiagnosticEntry(DiagnosticSeverity.WARNING, "", "tree_builder")
        with pytest.raises(ValueError, match="component cannot be empty"):
            DiagnosticEntry(DiagnosticSeverity.WARNING, "message", "")

    def test_from_warning(self):
        """Test conversion of a missing field warning."""
        warning = MissingFieldWarning("heartrate", "publisher")

        entry = DiagnosticEntry.from_warning(warning, "tree_builder", "run-1")

        assert entry.severity == DiagnosticSeverity.WARNING
        assert entry.message == "[heartrate] Missing property publisher in StructureDefinition"
        assert entry.resource_id == "heartrate"
        assert entry.details == {"field": "publisher", "location": "StructureDefinition"}
        assert entry.correlation_id == "run-1"

    def test_to_dict(self):
        """Test dictionary conversion drops empty optional fields."""
        entry = DiagnosticEntry(DiagnosticSeverity.WARNING, "boom", "cli")

        assert entry.to_dict() == {
            "severity": "WARNING",
            "message": "boom",
            "component": "cli",
        }

    def test_only_recovered_conditions_have_a_severity(self):
        assert [severity.name for severity in DiagnosticSeverity] == ["WARNING"]


class TestBuildMetrics:
    """Test build metrics."""

    def test_defaults(self):
        metrics = BuildMetrics()

        assert metrics.elements_retained == 0
        assert metrics.omission_rate == 0.0
        assert metrics.backtracks_per_node == 0.0

    def test_derived_values(self):
        """Test ratios computed from the counters."""
        metrics = BuildMetrics(
            elements_seen=20, elements_omitted=5, nodes_created=15, cursor_backtracks=3
        )

        assert metrics.elements_retained == 15
        assert metrics.omission_rate == 0.25
        assert metrics.backtracks_per_node == 0.2

    def test_to_dict(self):
        data = BuildMetrics(root_count=2).to_dict()

        assert data["root_count"] == 2
        assert set(data) == {
            "processing_time_ms",
            "memory_used_bytes",
            "elements_seen",
            "elements_omitted",
            "nodes_created",
            "cursor_backtracks",
            "root_count",
        }
