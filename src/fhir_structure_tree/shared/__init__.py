"""Shared utilities for attribute tree building.

This module provides the configuration object, error taxonomy, diagnostic
types and logging helpers used by the tree, api and cli layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    StructureTreeConfig,
)
from .errors import (
    DuplicateIndexError,
    MissingExtensionChildError,
    MissingFieldWarning,
    MissingSnapshotError,
    NonArrayItemError,
    StructureTreeError,
)
from .logging import (
    ResourceLogger,
    get_logger,
)
from .result import (
    BuildMetrics,
    DiagnosticEntry,
    DiagnosticSeverity,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "StructureTreeConfig",
    "DuplicateIndexError",
    "MissingExtensionChildError",
    "MissingFieldWarning",
    "MissingSnapshotError",
    "NonArrayItemError",
    "StructureTreeError",
    "ResourceLogger",
    "get_logger",
    "BuildMetrics",
    "DiagnosticEntry",
    "DiagnosticSeverity",
]
