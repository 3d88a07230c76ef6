"""Entry points reading StructureDefinitions from JSON text and files."""

from .loader import (
    StructureDefinitionLoadError,
    load_structure_definition,
    rebuild_definition,
    structurize_file,
    structurize_string,
    unwrap_resource,
)

__all__ = [
    "StructureDefinitionLoadError",
    "load_structure_definition",
    "rebuild_definition",
    "structurize_file",
    "structurize_string",
    "unwrap_resource",
]
