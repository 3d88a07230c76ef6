"""Helpers reading snapshot element definitions.

Element definitions are kept as plain dictionaries, exactly as found in a
StructureDefinition's ``snapshot.element`` list. The functions here derive
names and resolved types from them and decide how two elements relate.
"""

from typing import Any, Dict, FrozenSet, Optional

ElementDefinition = Dict[str, Any]

# Marks a multi-typed element, as in "Observation.value[x]"
CHOICE_MARKER = "[x]"


def last_segment(value: str, separator: str = ".") -> str:
    """Return what follows the last separator of a dotted or slashed string."""
    return value.rsplit(separator, 1)[-1]


def parent_path(path: str) -> str:
    """Return a dotted path with its last segment removed ("" for one segment)."""
    head, sep, _ = path.rpartition(".")
    return head if sep else ""


def capitalize_first(value: str) -> str:
    """Uppercase the first character only ("codeableConcept" -> "CodeableConcept")."""
    if not value:
        return value
    return value[0].upper() + value[1:]


def resolve_type_name(type_entry: Dict[str, Any]) -> str:
    """Resolve the name of one declared type.

    An explicit extension value wins over the first declared profile, which
    wins over the raw type code.
    """
    for extension in type_entry.get("extension") or []:
        if extension.get("valueUrl"):
            return extension["valueUrl"]
        if extension.get("url"):
            return last_segment(extension["url"], "/")

    profile = type_entry.get("profile")
    if isinstance(profile, list):
        profile = profile[0] if profile else None
    if profile:
        return last_segment(profile.split("|", 1)[0], "/")

    return type_entry.get("code", "")


def replace_choice_marker(value: str, type_name: str) -> str:
    """Replace the last choice marker with the capitalized type name."""
    head, marker, tail = value.rpartition(CHOICE_MARKER)
    if not marker:
        return value
    return f"{head}{capitalize_first(type_name)}{tail}"


def is_choice_of(choice: ElementDefinition, attribute: ElementDefinition) -> bool:
    """Check whether ``choice`` is a type variant of the multi-typed ``attribute``."""
    return (
        choice.get("path") == attribute.get("path")
        and bool(choice.get("sliceName"))
        and choice.get("path", "").endswith(CHOICE_MARKER)
    )


def is_slice_of(slice_def: ElementDefinition, attribute: ElementDefinition) -> bool:
    """Check whether ``slice_def`` narrows the unsliced ``attribute``."""
    return (
        slice_def.get("path") == attribute.get("path")
        and bool(slice_def.get("sliceName"))
        and not attribute.get("sliceName")
    )


def is_child_of(child: ElementDefinition, parent: ElementDefinition) -> bool:
    """Check whether ``child`` sits exactly one path level below ``parent``."""
    child_path = child.get("path", "")
    if "." not in child_path:
        return False
    return parent_path(child_path) == parent.get("path")


def should_omit(
    element: ElementDefinition,
    omitted_resources: FrozenSet[str],
    allowed_attributes: FrozenSet[str],
) -> bool:
    """Check whether an element is inherited from an excluded generic ancestor."""
    base_path: Optional[str] = (element.get("base") or {}).get("path")
    if not base_path:
        return False

    segments = base_path.split(".")
    if segments[-1] in allowed_attributes:
        return False
    return segments[0] in omitted_resources
