"""Error and warning types raised while building attribute trees.

Structural errors abort the operation that triggered them and always reach the
caller. Missing metadata fields are only reported as warnings.
"""

from typing import Optional


class StructureTreeError(Exception):
    """Base exception for attribute tree construction and mutation errors."""


class MissingSnapshotError(StructureTreeError):
    """Raised when a StructureDefinition carries no snapshot elements."""

    def __init__(self, resource_id: Optional[str] = None) -> None:
        super().__init__("Snapshot is needed in the structure definition.")
        self.resource_id = resource_id


class NonArrayItemError(StructureTreeError):
    """Raised when adding an item to an attribute that cannot repeat."""

    def __init__(self, path: str, max_cardinality: Optional[str] = None) -> None:
        super().__init__(
            f"trying to add an item to a non-array attribute ({path}, max={max_cardinality})"
        )
        self.path = path
        self.max_cardinality = max_cardinality


class DuplicateIndexError(StructureTreeError):
    """Raised when an explicit item index is already taken."""

    def __init__(self, index: int) -> None:
        super().__init__(f"item with index {index} already exists")
        self.index = index


class MissingExtensionChildError(StructureTreeError):
    """Raised when an attribute has no extension child to attach to."""

    def __init__(self, path: str) -> None:
        super().__init__(f"attribute {path} has no extension child")
        self.path = path


class MissingFieldWarning(UserWarning):
    """A scalar metadata or root cardinality field is absent."""

    def __init__(
        self,
        resource_id: Optional[str],
        field_name: str,
        location: str = "StructureDefinition",
    ) -> None:
        super().__init__(
            f"[{resource_id}] Missing property {field_name} in {location}"
        )
        self.resource_id = resource_id
        self.field_name = field_name
        self.location = location
