"""Configuration for attribute tree building.

This module provides the immutable configuration object controlling which
snapshot elements the builder keeps and what it measures while building.
"""

import json
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

# Generic ancestors whose inherited elements are dropped from the tree
DEFAULT_OMITTED_RESOURCES = frozenset(
    {"Element", "BackboneElement", "Resource", "DomainResource"}
)
# Element names kept even when inherited from an omitted ancestor
DEFAULT_ALLOWED_ATTRIBUTES = frozenset({"extension"})


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


def _as_frozenset(values: Iterable[str], field_name: str) -> FrozenSet[str]:
    if isinstance(values, str):
        raise ConfigValidationError(
            f"{field_name} must be a collection of names, not a string",
            field_name=field_name,
            suggestions=[f"Use [{values!r}]"],
        )
    result = frozenset(values)
    for value in result:
        if not isinstance(value, str) or not value:
            raise ConfigValidationError(
                f"{field_name} entries must be non-empty strings",
                field_name=field_name,
            )
    return result


@dataclass(frozen=True)
class StructureTreeConfig:
    """Configuration for structurizing StructureDefinition snapshots.

    Frozen, so a single instance can be shared by every builder.
    """

    omitted_resources: FrozenSet[str] = field(
        default_factory=lambda: DEFAULT_OMITTED_RESOURCES
    )
    allowed_attributes: FrozenSet[str] = field(
        default_factory=lambda: DEFAULT_ALLOWED_ATTRIBUTES
    )
    skip_root_element: bool = True
    track_memory: bool = False
    correlation_id: Optional[str] = None

    # Metadata
    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Normalize name collections and validate the configuration."""
        object.__setattr__(
            self,
            "omitted_resources",
            _as_frozenset(self.omitted_resources, "omitted_resources"),
        )
        object.__setattr__(
            self,
            "allowed_attributes",
            _as_frozenset(self.allowed_attributes, "allowed_attributes"),
        )
        if not isinstance(self.skip_root_element, bool):
            raise ConfigValidationError(
                "skip_root_element must be a boolean", field_name="skip_root_element"
            )
        if not isinstance(self.track_memory, bool):
            raise ConfigValidationError(
                "track_memory must be a boolean", field_name="track_memory"
            )

    def override(self, **kwargs: Any) -> "StructureTreeConfig":
        """Create a new configuration with specific overrides.

        Example:
            >>> config = StructureTreeConfig()
            >>> config.override(allowed_attributes={"extension", "id"})
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration fields: {', '.join(unknown)}",
                suggestions=sorted(known),
            )
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        result: Dict[str, Any] = {}
        for config_field in fields(self):
            value = getattr(self, config_field.name)
            if isinstance(value, frozenset):
                value = sorted(value)
            result[config_field.name] = value
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StructureTreeConfig":
        """Create configuration from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def from_json(cls, json_str: str) -> "StructureTreeConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def default(cls) -> "StructureTreeConfig":
        """Drop elements inherited from generic FHIR ancestors."""
        return cls(name="default")

    @classmethod
    def keep_inherited(cls) -> "StructureTreeConfig":
        """Keep every snapshot element, inherited or not."""
        return cls(
            omitted_resources=frozenset(),
            name="keep_inherited",
            description="Keeps elements inherited from Element, Resource and friends",
        )
