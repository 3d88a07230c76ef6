"""Main CLI entry point for the fhir-structure-tree command-line tool.

Prints the attribute tree, the attribute paths, the metadata or the
serialized form of StructureDefinition JSON files.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from fhir_structure_tree import __version__
from fhir_structure_tree.api import StructureDefinitionLoadError, structurize_file
from fhir_structure_tree.shared import (
    StructureTreeConfig,
    StructureTreeError,
    get_logger,
)
from fhir_structure_tree.tree import AttributeNode, Definition

INDENT = "  "


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="fhir-structure-tree",
        description="Turn FHIR StructureDefinition snapshots into attribute trees",
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for name, help_text in (
        ("tree", "Print the attribute tree with cardinalities and types"),
        ("paths", "Print one attribute path per line"),
        ("meta", "Print the StructureDefinition metadata as JSON"),
        ("dump", "Print the serialized definition as JSON"),
    ):
        command_parser = subparsers.add_parser(name, help=help_text)
        command_parser.add_argument(
            "path",
            type=Path,
            help="StructureDefinition JSON file"
        )
        command_parser.add_argument(
            "--keep-inherited",
            action="store_true",
            help="Keep elements inherited from Element, Resource and friends"
        )
        command_parser.add_argument(
            "--output", "-o",
            type=Path,
            help="Output file (default: stdout)"
        )

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def _describe(node: AttributeNode) -> str:
    parts = [node.tail, node.cardinality]
    if node.types:
        parts.append("|".join(node.types))
    if node.is_slice:
        parts.append(f"(slice {node.definition.get('sliceName')})")
    return " ".join(parts)


def format_tree(definition: Definition) -> str:
    """Render attribute trees as an indented outline."""
    lines = [f"{definition.meta.type or definition.meta.id} ({definition.meta.kind})"]
    if definition.attributes is None:
        return "\n".join(lines)

    stack = [(root, 1, "") for root in reversed(definition.attributes)]
    while stack:
        node, level, marker = stack.pop()
        lines.append(f"{INDENT * level}{marker}{_describe(node)}")
        owned = (
            [(child, level + 1, "") for child in node.children]
            + [(slice_node, level, ":") for slice_node in node.slices]
            + [(choice, level, "?") for choice in node.choices]
            + [(item, level + 1, "#") for item in node.items]
        )
        stack.extend(reversed(owned))
    return "\n".join(lines)


def format_paths(definition: Definition) -> str:
    """Render one attribute path per line."""
    return "\n".join(node.path for node in definition.iter_attributes())


def format_output(definition: Definition, command: str) -> str:
    """Format a definition for the given command."""
    if command == "tree":
        return format_tree(definition)
    if command == "paths":
        return format_paths(definition)
    if command == "meta":
        return json.dumps(definition.meta.to_dict(), indent=2)
    return json.dumps(definition.to_dict(), indent=2)


def cmd_structurize(args: argparse.Namespace) -> int:
    """Handle the tree, paths, meta and dump commands."""
    logger = get_logger(__name__, None, "cli")
    config = (
        StructureTreeConfig.keep_inherited()
        if args.keep_inherited else StructureTreeConfig.default()
    )

    try:
        definition = structurize_file(args.path, config=config)
    except (OSError, StructureDefinitionLoadError) as e:
        print(f"Could not read {args.path}: {e}", file=sys.stderr)
        return 1
    except StructureTreeError as e:
        logger.error("Structurize failed", extra={"file": str(args.path)}, exc_info=False)
        print(f"Could not structurize {args.path}: {e}", file=sys.stderr)
        return 1

    formatted_output = format_output(definition, args.command)

    if args.output:
        try:
            args.output.write_text(formatted_output + "\n")
            print(f"Results written to {args.output}", file=sys.stderr)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
    else:
        print(formatted_output)

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Set up logging verbosity
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    try:
        return cmd_structurize(args)
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
