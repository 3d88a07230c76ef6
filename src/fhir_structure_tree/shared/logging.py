"""Structured logging utilities for attribute tree building.

Log records carry the StructureDefinition id they relate to, so warnings about
one resource can be told apart when many definitions are processed together.
"""

import logging
from typing import Any, Dict, Optional


class ResourceLogger:
    """Logger that tags every record with a resource id and component name."""

    def __init__(
        self,
        name: str,
        resource_id: Optional[str] = None,
        component: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize resource logger.

        Args:
            name: Logger name (typically __name__)
            resource_id: Id of the StructureDefinition being processed
            component: Component name for structured logging
            correlation_id: Optional correlation ID for request tracking
        """
        self.logger = logging.getLogger(name)
        self.resource_id = resource_id
        self.component = component or name.split(".")[-1]
        self.correlation_id = correlation_id

    def bind(self, resource_id: Optional[str]) -> "ResourceLogger":
        """Return a logger for another resource sharing this configuration."""
        return ResourceLogger(
            self.logger.name, resource_id, self.component, self.correlation_id
        )

    def _get_extra(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        combined_extra = {
            "component": self.component,
            "resource_id": self.resource_id,
            "correlation_id": self.correlation_id,
        }
        if extra:
            combined_extra.update(extra)
        return combined_extra

    def _format(self, message: str) -> str:
        if self.resource_id is None:
            return message
        return f"[{self.resource_id}] {message}"

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log debug message with resource info."""
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(self._format(message), extra=self._get_extra(extra))

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log info message with resource info."""
        self.logger.info(self._format(message), extra=self._get_extra(extra))

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log warning message with resource info."""
        self.logger.warning(self._format(message), extra=self._get_extra(extra))

    def error(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = True,
    ) -> None:
        """Log error message with resource info."""
        self.logger.error(
            self._format(message), extra=self._get_extra(extra), exc_info=exc_info
        )


def get_logger(
    name: str,
    resource_id: Optional[str] = None,
    component: Optional[str] = None,
    correlation_id: Optional[str] = None,
) -> ResourceLogger:
    """Get a resource-aware logger instance.

    Args:
        name: Logger name (typically __name__)
        resource_id: Id of the StructureDefinition being processed
        component: Component name for structured logging
        correlation_id: Optional correlation ID for request tracking

    Returns:
        ResourceLogger instance
    """
    return ResourceLogger(name, resource_id, component, correlation_id)
