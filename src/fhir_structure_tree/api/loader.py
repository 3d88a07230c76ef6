"""Loading StructureDefinitions and structurizing them.

This module is the I/O boundary of the package: it reads StructureDefinition
JSON from strings and files and hands the decoded resource to the tree
builder. The tree layer itself never touches files.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from fhir_structure_tree.shared import StructureTreeConfig, get_logger
from fhir_structure_tree.tree import Definition, structurize
from fhir_structure_tree.tree.builder import WarningSink

PathLike = Union[str, Path]

# Max length for content preview in logs
PREVIEW_LENGTH = 100

RESOURCE_TYPE = "StructureDefinition"


class StructureDefinitionLoadError(ValueError):
    """Raised when a document cannot be read as a StructureDefinition."""


def unwrap_resource(document: Any) -> Dict[str, Any]:
    """Return the StructureDefinition held by a document.

    Accepts the bare resource and the ``{"resource": {...}}`` envelope used by
    bundle entries and package fixtures.
    """
    if not isinstance(document, dict):
        raise StructureDefinitionLoadError(
            f"Expected a JSON object, got {type(document).__name__}"
        )
    resource = document.get("resource", document)
    if not isinstance(resource, dict):
        raise StructureDefinitionLoadError("Entry resource must be a JSON object")

    resource_type = resource.get("resourceType")
    if resource_type is not None and resource_type != RESOURCE_TYPE:
        raise StructureDefinitionLoadError(
            f"Expected a {RESOURCE_TYPE}, got {resource_type}"
        )
    return resource


def load_structure_definition(
    file_path: PathLike, encoding: str = "utf-8"
) -> Dict[str, Any]:
    """Read a StructureDefinition from a JSON file."""
    path = Path(file_path)
    logger = get_logger(__name__, None, "loader")
    logger.debug("Loading StructureDefinition", extra={"file": str(path)})

    try:
        with path.open(encoding=encoding) as f:
            document = json.load(f)
    except json.JSONDecodeError as e:
        raise StructureDefinitionLoadError(f"{path}: invalid JSON ({e})") from e
    return unwrap_resource(document)


def structurize_string(
    json_string: str,
    config: Optional[StructureTreeConfig] = None,
    warning_sink: Optional[WarningSink] = None,
) -> Definition:
    """Structurize a StructureDefinition given as JSON text.

    Examples:
        >>> definition = structurize_string(open("heartrate.json").read())
        >>> definition.meta.type
        'Observation'
    """
    logger = get_logger(__name__, None, "structurize_string")
    logger.debug(
        "Structurizing JSON string",
        extra={
            "content_length": len(json_string),
            "preview": (
                json_string[:PREVIEW_LENGTH] + "..."
                if len(json_string) > PREVIEW_LENGTH else json_string
            ),
        },
    )
    try:
        document = json.loads(json_string)
    except json.JSONDecodeError as e:
        raise StructureDefinitionLoadError(f"Invalid JSON: {e}") from e
    return structurize(unwrap_resource(document), config, warning_sink)


def structurize_file(
    file_path: PathLike,
    config: Optional[StructureTreeConfig] = None,
    warning_sink: Optional[WarningSink] = None,
    encoding: str = "utf-8",
) -> Definition:
    """Structurize a StructureDefinition stored in a JSON file."""
    resource = load_structure_definition(file_path, encoding)
    return structurize(resource, config, warning_sink)


def rebuild_definition(data: Union[str, Dict[str, Any]]) -> Definition:
    """Rebuild a live Definition from its serialized form (dict or JSON text)."""
    if isinstance(data, str):
        data = json.loads(data)
    return Definition.from_dict(data)
