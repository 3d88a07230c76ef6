"""Attribute nodes of a structurized FHIR resource.

An ``AttributeNode`` represents one snapshot element and owns four kinds of
edges: ``children`` (one path level below), ``slices`` (named narrowings of the
same element), ``choices`` (one alternative per type of a ``[x]`` element)
and ``items`` (materialized instances of an array element). ``parent`` is a
back-reference used for path computation only; it is never serialized.
"""

import copy
from typing import Any, Dict, Iterator, List, Optional, Tuple

from fhir_structure_tree.shared import (
    DuplicateIndexError,
    MissingExtensionChildError,
    NonArrayItemError,
)

from .definition import (
    CHOICE_MARKER,
    ElementDefinition,
    last_segment,
    replace_choice_marker,
    resolve_type_name,
)

PRIMITIVE_TYPES = frozenset({
    "base64Binary",
    "boolean",
    "canonical",
    "code",
    "date",
    "dateTime",
    "decimal",
    "id",
    "instant",
    "integer",
    "markdown",
    "oid",
    "positiveInt",
    "string",
    "time",
    "unsignedInt",
    "uri",
    "url",
    "uuid",
    "xhtml",
})

EXTENSION_TYPE = "Extension"

# Serialization order, also the order edges are rebuilt in
EDGE_NAMES = ("children", "slices", "choices", "items")


class AttributeNode:
    """One element of a StructureDefinition snapshot, placed in a tree.

    The node is built from a single element definition, which it copies so
    later changes to the input never leak into the tree.
    """

    def __init__(self, definition: ElementDefinition) -> None:
        """Initialize attribute node.

        Args:
            definition: One entry of ``snapshot.element``
        """
        self.definition: ElementDefinition = copy.deepcopy(definition)
        self.id: str = last_segment(self.definition.get("id") or "")
        self.name: str = last_segment(self.definition.get("path") or "")
        self.types: List[str] = [
            resolve_type_name(type_entry)
            for type_entry in self.definition.get("type") or []
        ]

        self.is_slice: bool = bool(self.definition.get("sliceName"))
        self.is_item: bool = False
        self.index: Optional[int] = None

        self.parent: Optional["AttributeNode"] = None
        self.children: List["AttributeNode"] = []
        self.slices: List["AttributeNode"] = []
        self.choices: List["AttributeNode"] = []
        self.items: List["AttributeNode"] = []

    def __repr__(self) -> str:
        return f"AttributeNode(path={self.path!r}, types={self.types!r})"

    # Cardinality is read from the definition each time so it cannot go stale

    @property
    def is_array(self) -> bool:
        """Check whether the element may repeat."""
        max_cardinality = self.definition.get("max")
        if max_cardinality == "*":
            return True
        try:
            return int(max_cardinality) > 1
        except (TypeError, ValueError):
            return False

    @property
    def is_required(self) -> bool:
        """Check whether the element must be present."""
        try:
            return int(self.definition.get("min") or 0) > 0
        except (TypeError, ValueError):
            return False

    @property
    def is_multi_type(self) -> bool:
        return len(self.types) > 1

    @property
    def is_primitive(self) -> bool:
        """Check whether the element holds a single primitive FHIR type."""
        return len(self.types) == 1 and self.types[0] in PRIMITIVE_TYPES

    @property
    def is_reference_type(self) -> bool:
        """Check whether this is the target uri of a Reference element."""
        return (
            bool(self.types)
            and self.types[0] == "uri"
            and self.parent is not None
            and bool(self.parent.types)
            and self.parent.types[0] == "Reference"
        )

    @property
    def cardinality(self) -> str:
        return f"{self.definition.get('min', '?')}..{self.definition.get('max', '?')}"

    @property
    def tail(self) -> str:
        """Get the last segment of the attribute path."""
        tail = self.name
        if self.is_slice and CHOICE_MARKER in self.name:
            tail = self.definition["sliceName"]

        if self.is_item:
            return f"{tail}[{self.index}]"
        return tail

    @property
    def path(self) -> str:
        """Get the dotted path of the attribute from its top-level ancestor."""
        tails = []
        current: Optional[AttributeNode] = self
        while current is not None:
            tails.append(current.tail)
            current = current.parent
        return ".".join(reversed(tails))

    @property
    def depth(self) -> int:
        """Get depth of this attribute in the tree (root = 0)."""
        depth = 0
        current = self.parent
        while current is not None:
            depth += 1
            current = current.parent
        return depth

    def add_child(self, child: "AttributeNode") -> None:
        """Add a child attribute and set its parent to this attribute."""
        child.parent = self
        self.children.append(child)

    def add_slice(self, slice_node: "AttributeNode") -> None:
        """Add a slice, which is a peer of this attribute rather than a child.

        A slice of an array item is positioned at that item's index.
        """
        slice_node.parent = self.parent
        if self.is_item:
            slice_node.is_item = True
            slice_node.index = self.index
        self.slices.append(slice_node)

    def add_choice(self, choice: "AttributeNode") -> None:
        """Add a type alternative, which is a peer of this attribute."""
        choice.parent = self.parent
        if self.is_item:
            choice.is_item = True
            choice.index = self.index
        self.choices.append(choice)

    def spread_types(self) -> List["AttributeNode"]:
        """Generate one single-type choice per declared type.

        "value[x]" typed Quantity and boolean yields "valueQuantity" and
        "valueBoolean". An attribute with a single type is returned as is.
        """
        if not self.is_multi_type:
            return [self]

        generated = []
        for type_entry, type_name in zip(self.definition["type"], self.types):
            definition = dict(self.definition)
            definition["type"] = [type_entry]
            definition["id"] = replace_choice_marker(
                self.definition.get("id", ""), type_name
            )
            definition["path"] = replace_choice_marker(
                self.definition.get("path", ""), type_name
            )
            choice = AttributeNode(definition)
            self.add_choice(choice)
            generated.append(choice)
        return generated

    def add_item(self, index: Optional[int] = None) -> "AttributeNode":
        """Materialize one instance of this array attribute.

        Args:
            index: Position of the item, e.g. when restoring a saved instance.
                The smallest unused index is allocated when omitted.

        Returns:
            The new item, a copy of this attribute's subtree with max "1"

        Raises:
            NonArrayItemError: If the attribute cannot repeat
            DuplicateIndexError: If ``index`` is already taken
        """
        definition = dict(self.definition)
        definition["max"] = "1"
        item = AttributeNode(definition)
        self._attach_item(item, index)
        _populate(item, self.to_dict(), with_items=False)
        return item

    def remove_item(self, item: "AttributeNode") -> None:
        """Drop an item, matching on its index.

        ``item`` is detached only when an entry with its index was removed.
        """
        remaining = [it for it in self.items if it.index != item.index]
        if len(remaining) == len(self.items):
            return
        self.items = remaining
        item.parent = None

    def add_extension(
        self, type_id: str, index: Optional[int] = None
    ) -> "AttributeNode":
        """Add an extension of the given profile as an item of the extension child.

        Args:
            type_id: Profile of the extension (canonical url or id)
            index: Optional position among the existing extensions

        Raises:
            MissingExtensionChildError: If no child is typed Extension
        """
        extension_child = next(
            (
                child for child in self.children
                if child.types and child.types[0] == EXTENSION_TYPE
            ),
            None,
        )
        if extension_child is None:
            raise MissingExtensionChildError(self.path)

        definition = dict(extension_child.definition)
        definition["max"] = "1"
        definition["type"] = [{"code": EXTENSION_TYPE, "profile": [type_id]}]
        extension = AttributeNode(definition)
        extension_child._attach_item(extension, index)
        return extension

    def get_item(self, index: int) -> Optional["AttributeNode"]:
        """Get the item at a given index."""
        return next((item for item in self.items if item.index == index), None)

    def iter_nodes(self) -> Iterator["AttributeNode"]:
        """Iterate over this attribute and everything it owns, in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            owned = node.children + node.slices + node.choices + node.items
            stack.extend(reversed(owned))

    def find(self, path: str) -> Optional["AttributeNode"]:
        """Find the first attribute of this subtree with the given path."""
        return next((node for node in self.iter_nodes() if node.path == path), None)

    def find_all(self, name: str) -> List["AttributeNode"]:
        """Find all attributes of this subtree with the given name."""
        return [node for node in self.iter_nodes() if node.name == name]

    def _next_index(self, index: Optional[int]) -> int:
        used = {item.index for item in self.items}
        if index is not None:
            if isinstance(index, bool) or not isinstance(index, int):
                raise TypeError("Item index must be an integer")
            if index < 0:
                raise ValueError("Item index must be >= 0")
            if index in used:
                raise DuplicateIndexError(index)
            return index

        for candidate in range(len(self.items)):
            if candidate not in used:
                return candidate
        return len(self.items)

    def _attach_item(self, item: "AttributeNode", index: Optional[int]) -> None:
        if not self.is_array:
            raise NonArrayItemError(self.path, self.definition.get("max"))

        item.index = self._next_index(index)
        item.is_item = True
        item.parent = self.parent
        self.items.append(item)

    def _shallow_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "definition": copy.deepcopy(self.definition),
            "types": list(self.types),
            "is_slice": self.is_slice,
            "is_item": self.is_item,
            "is_primitive": self.is_primitive,
            "is_array": self.is_array,
            "is_required": self.is_required,
        }
        if self.is_item:
            result["index"] = self.index
        return result

    def to_dict(self) -> Dict[str, Any]:
        """Convert the subtree to a JSON-ready dictionary, without parents."""
        root = self._shallow_dict()
        stack: List[Tuple[AttributeNode, Dict[str, Any]]] = [(self, root)]
        while stack:
            node, data = stack.pop()
            for edge in EDGE_NAMES:
                entries = []
                for owned in getattr(node, edge):
                    owned_data = owned._shallow_dict()
                    entries.append(owned_data)
                    stack.append((owned, owned_data))
                data[edge] = entries
        return root

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AttributeNode":
        """Rebuild an attribute subtree from ``to_dict`` output.

        Edges are re-attached top-down through the regular ``add_*`` calls, so
        parents, slice positions and item indices come out as in the original.
        """
        root = cls(data["definition"])
        if data.get("is_item"):
            root.is_item = True
            root.index = data.get("index")
        _populate(root, data)
        return root


def _populate(
    target: AttributeNode, data: Dict[str, Any], with_items: bool = True
) -> None:
    """Attach the edges described by ``data`` below ``target``."""
    stack: List[Tuple[AttributeNode, Dict[str, Any], bool]] = [
        (target, data, with_items)
    ]
    while stack:
        node, node_data, include_items = stack.pop()
        for child_data in node_data.get("children", []):
            child = AttributeNode(child_data["definition"])
            node.add_child(child)
            stack.append((child, child_data, True))
        for slice_data in node_data.get("slices", []):
            slice_node = AttributeNode(slice_data["definition"])
            node.add_slice(slice_node)
            stack.append((slice_node, slice_data, True))
        for choice_data in node_data.get("choices", []):
            choice = AttributeNode(choice_data["definition"])
            node.add_choice(choice)
            stack.append((choice, choice_data, True))
        if not include_items:
            continue
        for item_data in node_data.get("items", []):
            item = AttributeNode(item_data["definition"])
            node._attach_item(item, item_data.get("index"))
            stack.append((item, item_data, True))
