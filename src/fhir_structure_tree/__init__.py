"""FHIR Structure Tree.

Turns the flat snapshot of a FHIR StructureDefinition into navigable attribute
trees: children, slices, type choices and array items, each addressable by a
dotted path.

Progressive API Disclosure:
- Level 1: Simple functions - structurize(), structurize_string(), structurize_file()
- Level 2: Configured builder - TreeBuilder with StructureTreeConfig
- Level 3: Tree editing - AttributeNode.add_item(), spread_types(), add_extension()
"""

__version__ = "0.1.0"
__author__ = "FHIR Structure Tree Team"

from .api import rebuild_definition, structurize_file, structurize_string
from .shared.config import StructureTreeConfig
from .shared.errors import (
    DuplicateIndexError,
    MissingExtensionChildError,
    MissingFieldWarning,
    MissingSnapshotError,
    NonArrayItemError,
    StructureTreeError,
)
from .tree import AttributeNode, Definition, ResourceMetadata, TreeBuilder, structurize

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "structurize",
    "structurize_string",
    "structurize_file",
    "rebuild_definition",

    # Level 2: Configured builder
    "TreeBuilder",
    "StructureTreeConfig",

    # Result objects and data structures
    "AttributeNode",
    "Definition",
    "ResourceMetadata",

    # Errors and warnings
    "StructureTreeError",
    "MissingSnapshotError",
    "NonArrayItemError",
    "DuplicateIndexError",
    "MissingExtensionChildError",
    "MissingFieldWarning",
]
