"""Attribute tree building for FHIR StructureDefinitions.

This module turns the flat, ordered ``snapshot.element`` list of a
StructureDefinition into a forest of ``AttributeNode`` trees. Only path
strings and element order are available, so the builder walks a cursor over
the most recently attached node and climbs its ancestors until the next
element relates to it as a choice, a slice or a child.
"""

import os
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional

import psutil

from fhir_structure_tree.shared import (
    BuildMetrics,
    DiagnosticEntry,
    DiagnosticSeverity,
    MissingFieldWarning,
    MissingSnapshotError,
    ResourceLogger,
    StructureTreeConfig,
    get_logger,
)

from .attribute import EXTENSION_TYPE, AttributeNode
from .definition import (
    ElementDefinition,
    is_child_of,
    is_choice_of,
    is_slice_of,
    should_omit,
)

# StructureDefinition keys copied into the metadata, with their field names
META_PROPERTIES = (
    ("id", "id"),
    ("url", "url"),
    ("name", "name"),
    ("type", "type"),
    ("description", "description"),
    ("kind", "kind"),
    ("baseDefinition", "base_definition"),
    ("derivation", "derivation"),
    ("publisher", "publisher"),
)
EXTENSION_META_PROPERTIES = (("context", "context"),)
# Keys read from the first snapshot element, which describes the resource itself
ROOT_PROPERTIES = ("min", "max", "constraint")

PRIMITIVE_KIND = "primitive-type"

WarningSink = Callable[[MissingFieldWarning], None]


@dataclass
class ResourceMetadata:
    """Scalar metadata of a StructureDefinition."""

    id: Optional[str] = None
    url: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    kind: Optional[str] = None
    base_definition: Optional[str] = None
    derivation: Optional[str] = None
    publisher: Optional[str] = None
    context: Optional[List[Any]] = None
    min: Optional[int] = None
    max: Optional[str] = None
    constraint: Optional[List[Dict[str, Any]]] = None

    @property
    def is_extension(self) -> bool:
        """Check whether the resource constrains Extension."""
        return self.type == EXTENSION_TYPE and self.derivation == "constraint"

    @property
    def is_primitive(self) -> bool:
        return self.kind == PRIMITIVE_KIND

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to a dictionary keyed like the StructureDefinition."""
        result: Dict[str, Any] = {
            key: getattr(self, attribute) for key, attribute in META_PROPERTIES
        }
        if self.is_extension:
            result["context"] = self.context
        for key in ROOT_PROPERTIES:
            result[key] = getattr(self, key)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResourceMetadata":
        """Create metadata from ``to_dict`` output."""
        values = {
            attribute: data.get(key)
            for key, attribute in META_PROPERTIES + EXTENSION_META_PROPERTIES
        }
        values.update({key: data.get(key) for key in ROOT_PROPERTIES})
        return cls(**values)


@dataclass
class Definition:
    """Result of structurizing a StructureDefinition.

    ``attributes`` is ``None`` when the definition describes a primitive type.
    """

    meta: ResourceMetadata = field(default_factory=ResourceMetadata)
    attributes: Optional[List[AttributeNode]] = None
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    metrics: BuildMetrics = field(default_factory=BuildMetrics)

    @property
    def attribute_count(self) -> int:
        """Get the number of nodes in every attribute tree."""
        return sum(1 for _ in self.iter_attributes())

    @property
    def warnings(self) -> List[DiagnosticEntry]:
        return [
            diag for diag in self.diagnostics
            if diag.severity == DiagnosticSeverity.WARNING
        ]

    def iter_attributes(self) -> Iterator[AttributeNode]:
        """Iterate over every node of every attribute tree."""
        for root in self.attributes or []:
            yield from root.iter_nodes()

    def get_attribute(self, path: str) -> Optional[AttributeNode]:
        """Find an attribute by its dotted path (e.g. "code.coding")."""
        return next(
            (node for node in self.iter_attributes() if node.path == path), None
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert definition to its acyclic serialized form."""
        result: Dict[str, Any] = {"meta": self.meta.to_dict()}
        if self.attributes is not None:
            result["attributes"] = [root.to_dict() for root in self.attributes]
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Definition":
        """Rebuild a definition, parents included, from ``to_dict`` output."""
        attributes = data.get("attributes")
        return cls(
            meta=ResourceMetadata.from_dict(data.get("meta") or {}),
            attributes=(
                None if attributes is None
                else [AttributeNode.from_dict(root) for root in attributes]
            ),
        )


class TreeBuilder:
    """Builds attribute trees from StructureDefinition snapshots."""

    def __init__(
        self,
        config: Optional[StructureTreeConfig] = None,
        warning_sink: Optional[WarningSink] = None,
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Exclusion rules and build options
            warning_sink: Receives a MissingFieldWarning per absent field. By
                default warnings become diagnostics of the returned Definition.
        """
        self.config = config or StructureTreeConfig()
        self.warning_sink = warning_sink
        self.logger = get_logger(
            __name__, None, "tree_builder", self.config.correlation_id
        )

    def build(self, structure_definition: Dict[str, Any]) -> Definition:
        """Structurize a StructureDefinition.

        Args:
            structure_definition: The StructureDefinition resource as a dict

        Returns:
            Definition with metadata and, unless primitive, attribute trees

        Raises:
            MissingSnapshotError: If the resource has no snapshot elements
        """
        start_time = time.time()
        resource_id = structure_definition.get("id")
        logger = self.logger.bind(resource_id)

        snapshot = structure_definition.get("snapshot") or {}
        elements: List[ElementDefinition] = snapshot.get("element") or []
        if not elements:
            raise MissingSnapshotError(resource_id)

        process = psutil.Process(os.getpid()) if self.config.track_memory else None
        memory_start = process.memory_info().rss if process else 0

        definition = Definition()
        definition.meta = self._build_metadata(
            structure_definition, elements[0], definition, logger
        )

        logger.info(
            "Starting attribute tree building",
            extra={"element_count": len(elements), "kind": definition.meta.kind},
        )

        # Primitive types are never unrolled, only their metadata is needed
        if not definition.meta.is_primitive:
            remaining = elements[1:] if self.config.skip_root_element else elements
            definition.attributes = self._build_attributes(
                remaining, definition.metrics, logger
            )

        metrics = definition.metrics
        metrics.processing_time_ms = (time.time() - start_time) * 1000
        if process:
            metrics.memory_used_bytes = max(
                0, process.memory_info().rss - memory_start
            )

        logger.info(
            "Attribute tree building completed",
            extra=metrics.to_dict(),
        )
        return definition

    def _build_metadata(
        self,
        structure_definition: Dict[str, Any],
        root_element: ElementDefinition,
        definition: Definition,
        logger: ResourceLogger,
    ) -> ResourceMetadata:
        resource_id = structure_definition.get("id")
        meta = ResourceMetadata()

        def fill(key: str, attribute: str) -> None:
            value = structure_definition.get(key)
            if not value:
                self._warn(
                    MissingFieldWarning(resource_id, key, "StructureDefinition"),
                    definition,
                    logger,
                )
            setattr(meta, attribute, value)

        for key, attribute in META_PROPERTIES:
            fill(key, attribute)

        if meta.is_extension:
            for key, attribute in EXTENSION_META_PROPERTIES:
                fill(key, attribute)

        for key in ROOT_PROPERTIES:
            value = root_element.get(key)
            if value is None:
                self._warn(
                    MissingFieldWarning(resource_id, key, "first snapshot attribute"),
                    definition,
                    logger,
                )
            setattr(meta, key, value)

        return meta

    def _warn(
        self, warning: MissingFieldWarning, definition: Definition, logger: ResourceLogger
    ) -> None:
        if self.warning_sink is not None:
            self.warning_sink(warning)
            return

        logger.warning(
            f"Missing property {warning.field_name} in {warning.location}",
            extra={"field": warning.field_name},
        )
        definition.diagnostics.append(
            DiagnosticEntry.from_warning(
                warning, "tree_builder", self.config.correlation_id
            )
        )

    def _build_attributes(
        self,
        elements: List[ElementDefinition],
        metrics: BuildMetrics,
        logger: ResourceLogger,
    ) -> List[AttributeNode]:
        """Place every retained element relative to the cursor.

        An element that relates to neither the cursor nor any of its ancestors
        starts a new top-level attribute.
        """
        roots: List[AttributeNode] = []
        cursor: Optional[AttributeNode] = None
        position = 0

        while position < len(elements):
            element = elements[position]

            if should_omit(
                element,
                self.config.omitted_resources,
                self.config.allowed_attributes,
            ):
                logger.debug(
                    f"Omitting inherited element {element.get('id')}",
                    extra={"base_path": (element.get("base") or {}).get("path")},
                )
                metrics.elements_seen += 1
                metrics.elements_omitted += 1
                position += 1
                continue

            if cursor is None:
                node = AttributeNode(element)
                roots.append(node)
            elif is_choice_of(element, cursor.definition):
                node = AttributeNode(element)
                cursor.add_choice(node)
            elif is_slice_of(element, cursor.definition):
                node = AttributeNode(element)
                cursor.add_slice(node)
            elif is_child_of(element, cursor.definition):
                node = AttributeNode(element)
                cursor.add_child(node)
            else:
                # Retry the same element one level up
                logger.debug(
                    f"Element {element.get('id')} does not belong to "
                    f"{cursor.definition.get('id')}, climbing",
                )
                metrics.cursor_backtracks += 1
                cursor = cursor.parent
                continue

            metrics.elements_seen += 1
            metrics.nodes_created += 1
            cursor = node
            position += 1

        metrics.root_count = len(roots)
        return roots


def structurize(
    structure_definition: Dict[str, Any],
    config: Optional[StructureTreeConfig] = None,
    warning_sink: Optional[WarningSink] = None,
) -> Definition:
    """Structurize a StructureDefinition into metadata and attribute trees.

    Examples:
        >>> definition = structurize(heart_rate_profile)
        >>> definition.get_attribute("code.coding").types
        ['Coding']
    """
    return TreeBuilder(config, warning_sink).build(structure_definition)
