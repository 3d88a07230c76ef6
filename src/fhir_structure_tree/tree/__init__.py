"""Attribute tree building for FHIR StructureDefinitions.

Key Components:
    AttributeNode: One snapshot element with its children, slices, choices and items
    TreeBuilder: Cursor walk turning a flat snapshot into attribute trees
    Definition: Metadata plus the attribute trees of one StructureDefinition
    structurize: One-call entry point around TreeBuilder
"""

from .attribute import EXTENSION_TYPE, PRIMITIVE_TYPES, AttributeNode
from .builder import (
    Definition,
    ResourceMetadata,
    TreeBuilder,
    structurize,
)
from .definition import (
    is_child_of,
    is_choice_of,
    is_slice_of,
    resolve_type_name,
    should_omit,
)

__all__ = [
    "AttributeNode",
    "Definition",
    "EXTENSION_TYPE",
    "PRIMITIVE_TYPES",
    "ResourceMetadata",
    "TreeBuilder",
    "is_child_of",
    "is_choice_of",
    "is_slice_of",
    "resolve_type_name",
    "should_omit",
    "structurize",
]
