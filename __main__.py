"""CLI entry point for formtree.

This module acts as the central entry point for the project's CLI tools.
Each command parses its own arguments and delegates to the library modules
under ``src``.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError

from src.config import (
    EnvVar,
    get_environment,
    get_environment_info,
    list_environment_variables,
)
from src.convert import SchemaImportError
from src.core import get_logger, parse_level, setup_logging
from src.data import initialize_nested_form_data
from src.export import dump_form, load_form
from src.mid import FieldTree, IdGenerator, dump_tree, load_tree, validate_tree
from src.output import format_field_tree
from src.registry import FieldRegistry
from src.rules import compile_rule
from src.schema import build_json_schema
from src.uischema import build_ui_schema

# Load environment variables from .env file
load_dotenv()

logger = get_logger("cli")


# =============================================================================
# Helpers
# =============================================================================


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=get_environment(EnvVar.INDENT))


def _emit(text: str, output: Path | None) -> None:
    if output:
        output.write_text(text + "\n", encoding="utf-8")
        logger.info(f"Saved to {output}")
    else:
        print(text)


def _load_tree_file(path: Path) -> FieldTree:
    """Load a tree from a fields list, a form document or a JSON Schema."""
    text = path.read_text(encoding="utf-8")
    if text.lstrip().startswith("["):
        try:
            return load_tree(text)
        except PydanticValidationError as e:
            raise SchemaImportError(f"Invalid fields in {path}: {e}") from e
    return load_form(text, FieldRegistry.with_defaults(), IdGenerator())


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SchemaImportError(f"Invalid JSON in {path}: {e}") from e


# =============================================================================
# Build Command
# =============================================================================


def cmd_build(args: argparse.Namespace) -> int:
    """Handle the build command."""
    try:
        tree = _load_tree_file(args.fields)

        if args.format == "schema":
            text = _to_json(build_json_schema(tree))
        elif args.format == "uischema":
            text = _to_json(build_ui_schema(tree))
        elif args.format == "data":
            existing = _read_json(args.data) if args.data else None
            text = _to_json(initialize_nested_form_data(tree, existing))
        elif args.format == "tree":
            text = format_field_tree(tree)
        else:
            text = dump_form(tree)

        _emit(text, args.output)
        return 0

    except (SchemaImportError, OSError) as e:
        logger.error(f"Build failed: {e}")
        return 1


def handle_build_command(argv: list[str]) -> int:
    """Handle build-specific arguments."""
    parser = argparse.ArgumentParser(
        prog="python . build",
        description="Generate schemas or seed data from a field tree",
    )
    parser.add_argument(
        "fields",
        type=Path,
        help="Fields JSON (node list, form document or JSON Schema)",
    )
    parser.add_argument(
        "--format",
        "-f",
        type=str,
        default="document",
        choices=["schema", "uischema", "data", "document", "tree"],
        help="Output format (default: document)",
    )
    parser.add_argument(
        "--data",
        "-d",
        type=Path,
        default=None,
        help="Existing form data to merge into (data format only)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output file path (prints to stdout if not specified)",
    )
    return cmd_build(parser.parse_args(argv))


# =============================================================================
# Import Command
# =============================================================================


def cmd_import(args: argparse.Namespace) -> int:
    """Handle the import command."""
    try:
        payload = args.schema.read_text(encoding="utf-8")
        tree = load_form(payload, FieldRegistry.with_defaults(), IdGenerator())
    except (SchemaImportError, OSError) as e:
        logger.error(f"Import failed: {e}")
        return 1

    logger.info(f"Imported {len(tree)} root field(s) from {args.schema}")
    if args.format == "tree":
        text = format_field_tree(tree)
    else:
        text = _to_json(dump_tree(tree))

    try:
        _emit(text, args.output)
    except OSError as e:
        logger.error(f"Import failed: {e}")
        return 1
    return 0


def handle_import_command(argv: list[str]) -> int:
    """Handle import-specific arguments."""
    parser = argparse.ArgumentParser(
        prog="python . import",
        description="Import a JSON Schema as an editable field tree",
    )
    parser.add_argument("schema", type=Path, help="JSON Schema or form document")
    parser.add_argument(
        "--format",
        "-f",
        type=str,
        default="fields",
        choices=["fields", "tree"],
        help="Output format (default: fields)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output file path (prints to stdout if not specified)",
    )
    return cmd_import(parser.parse_args(argv))


# =============================================================================
# Validate Command
# =============================================================================


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle the validate command."""
    try:
        tree = _load_tree_file(args.fields)
    except (SchemaImportError, OSError) as e:
        logger.error(f"Validation failed: {e}")
        return 1

    errors = validate_tree(tree)
    if not errors:
        print(f"{args.fields}: valid")
        return 0

    for error in errors:
        logger.error(f"[{error.error_type}] {error.node_id}: {error.message}")
    print(f"{args.fields}: {len(errors)} issue(s)")
    return 1


def handle_validate_command(argv: list[str]) -> int:
    """Handle validate-specific arguments."""
    parser = argparse.ArgumentParser(
        prog="python . validate",
        description="Check a field tree for structural issues",
    )
    parser.add_argument("fields", type=Path, help="Fields JSON or form document")
    return cmd_validate(parser.parse_args(argv))


# =============================================================================
# Rule Command
# =============================================================================


def cmd_rule(args: argparse.Namespace) -> int:
    """Handle the rule command."""
    try:
        rows = _read_json(args.rows)
        if not isinstance(rows, list):
            raise SchemaImportError("Condition rows must be a JSON list")
        rule = compile_rule(rows, args.effect)
    except (SchemaImportError, OSError, PydanticValidationError) as e:
        logger.error(f"Rule compilation failed: {e}")
        return 1

    if rule is None:
        logger.warning("No usable condition rows")
        return 1
    print(_to_json(rule))
    return 0


def handle_rule_command(argv: list[str]) -> int:
    """Handle rule-specific arguments."""
    parser = argparse.ArgumentParser(
        prog="python . rule",
        description="Compile visibility condition rows into a UI Schema rule",
    )
    parser.add_argument("rows", type=Path, help="JSON list of condition rows")
    parser.add_argument(
        "--effect",
        "-e",
        type=str,
        default="SHOW",
        choices=["SHOW", "HIDE", "ENABLE", "DISABLE"],
        help="Rule effect (default: SHOW)",
    )
    return cmd_rule(parser.parse_args(argv))


# =============================================================================
# Env Command
# =============================================================================


def cmd_env(argv: list[str]) -> int:
    """Show environment variables and their current values."""
    category = argv[0] if argv else None
    variables = list_environment_variables(category)
    if not variables:
        logger.error(f"Unknown category: {category}")
        return 1

    for var in variables:
        info = get_environment_info(var)
        value = get_environment(var)
        print(f"{info.name}={value}  [{info.category}] {info.description}")
    return 0


# =============================================================================
# Main
# =============================================================================


def show_help() -> None:
    """Display CLI help message."""
    print("Usage: python . {command} [args]")
    print("\n=== Form Building ===")
    print("  build      Generate schema, UI schema, seed data or a form document")
    print("  import     Import a JSON Schema as a field tree")
    print("  validate   Check a field tree for structural issues")
    print("  rule       Compile visibility condition rows")
    print("\n=== Configuration ===")
    print("  env        Show environment variables (optionally by category)")
    print("\nExamples:")
    print("  python . build fields.json -f schema")
    print("  python . build form.json -f data -d current.json")
    print("  python . import schema.json -f tree")
    print("  python . validate fields.json")
    print("  python . rule rows.json -e HIDE")
    print("  python . env output")


def main() -> int:
    """Main entry point for the CLI."""
    if len(sys.argv) < 2:
        show_help()
        return 1

    command = sys.argv[1]
    rest_args = sys.argv[2:]

    if command in ("-h", "--help"):
        show_help()
        return 0

    commands = {
        "build": lambda: handle_build_command(rest_args),
        "import": lambda: handle_import_command(rest_args),
        "validate": lambda: handle_validate_command(rest_args),
        "rule": lambda: handle_rule_command(rest_args),
        "env": lambda: cmd_env(rest_args),
    }

    if command in commands:
        setup_logging(parse_level(get_environment(EnvVar.LOG_LEVEL)))
        return commands[command]()

    logger.error(f"Unknown command: {command}")
    show_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
