"""Diagnostic and metric types for attribute tree building.

This module defines the diagnostic entries collected while structurizing a
StructureDefinition and the metrics describing the cursor walk.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional

from .errors import MissingFieldWarning


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries.

    Structural errors are raised, never recorded, so only recovered
    conditions appear as diagnostics.
    """

    WARNING = auto()    # Recovered locally, e.g. a missing metadata field


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    resource_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    @classmethod
    def from_warning(
        cls,
        warning: MissingFieldWarning,
        component: str,
        correlation_id: Optional[str] = None,
    ) -> "DiagnosticEntry":
        """Create a WARNING entry from a missing field warning."""
        return cls(
            severity=DiagnosticSeverity.WARNING,
            message=str(warning),
            component=component,
            resource_id=warning.resource_id,
            details={"field": warning.field_name, "location": warning.location},
            correlation_id=correlation_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert entry to dictionary representation."""
        result: Dict[str, Any] = {
            "severity": self.severity.name,
            "message": self.message,
            "component": self.component,
        }
        if self.resource_id is not None:
            result["resource_id"] = self.resource_id
        if self.details:
            result["details"] = dict(self.details)
        return result


@dataclass
class BuildMetrics:
    """Metrics for one structurize run."""

    processing_time_ms: float = 0.0
    memory_used_bytes: int = 0
    elements_seen: int = 0
    elements_omitted: int = 0
    nodes_created: int = 0
    cursor_backtracks: int = 0
    root_count: int = 0

    @property
    def elements_retained(self) -> int:
        """Number of snapshot elements turned into nodes."""
        return self.elements_seen - self.elements_omitted

    @property
    def omission_rate(self) -> float:
        """Share of snapshot elements dropped by the exclusion rule."""
        if self.elements_seen == 0:
            return 0.0
        return self.elements_omitted / self.elements_seen

    @property
    def backtracks_per_node(self) -> float:
        """Average number of cursor climbs needed to place one node."""
        if self.nodes_created == 0:
            return 0.0
        return self.cursor_backtracks / self.nodes_created

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary representation."""
        return {
            "processing_time_ms": self.processing_time_ms,
            "memory_used_bytes": self.memory_used_bytes,
            "elements_seen": self.elements_seen,
            "elements_omitted": self.elements_omitted,
            "nodes_created": self.nodes_created,
            "cursor_backtracks": self.cursor_backtracks,
            "root_count": self.root_count,
        }
