"""Command-line interface module for fhir-structure-tree.

This module provides the ``fhir-structure-tree`` command printing attribute
trees, paths, metadata and serialized definitions of StructureDefinitions.
"""

from .main import main

__all__ = ["main"]
