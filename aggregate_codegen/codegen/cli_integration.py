"""
CLI integration for code generation functionality.

Provides the command-line interface for generating files from models.
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from .core.config import NAMING_ROLES, ConfigError, GeneratorConfig, get_config_manager
from .pipeline import GenerationPipeline, InputDocument
from .sinks import DirectorySink, MemorySink
from ..cli import CLIHandler
from ..logging_config import get_logger
from ..utils import MODEL_SUFFIXES, ModelLoaderError, read_model_file, read_model_url

logger = get_logger(__name__)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


# Initialize rich console
console = Console()


def add_codegen_args(parser: argparse.ArgumentParser):
    """Add code generation arguments to a CLI parser."""

    # Input options
    parser.add_argument(
        "files",
        nargs="*",
        metavar="FILE",
        help="YAML model files, or directories containing them",
    )
    parser.add_argument("--url", help="URL to fetch a YAML model from")
    parser.add_argument(
        "--stdin", action="store_true", help="Read a YAML model from standard input"
    )

    # Core generation options
    parser.add_argument(
        "--output",
        "-o",
        metavar="DIR",
        default="generated",
        help="Output directory (default: generated)",
    )
    parser.add_argument(
        "--config", metavar="FILE", help="Configuration file (JSON or YAML)"
    )

    template_group = parser.add_argument_group("templates")
    template_group.add_argument(
        "--template-set",
        metavar="NAME",
        help="Built-in template set (use --list-template-sets to see options)",
    )
    template_group.add_argument(
        "--template-dir",
        metavar="DIR",
        help="Directory with templates overriding the template set",
    )
    template_group.add_argument(
        "--extension",
        metavar="EXT",
        help="File extension for every generated file (e.g. .ts)",
    )

    emission_group = parser.add_argument_group("emission")
    emission_group.add_argument(
        "--atomic",
        action="store_true",
        help="Write a model's files only if all of them were generated",
    )
    emission_group.add_argument(
        "--no-empty-root-index",
        action="store_true",
        help="Skip the root index when a model has no commands, events or faults",
    )
    emission_group.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the files that would be generated without writing them",
    )

    # Informational commands
    info_group = parser.add_argument_group("information")
    info_group.add_argument(
        "--list-template-sets",
        action="store_true",
        help="List built-in template sets and exit",
    )
    info_group.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show generated class names and configuration warnings",
    )
    info_group.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the aggregate-codegen command."""
    parser = argparse.ArgumentParser(
        prog="aggregate-codegen",
        description="Generate aggregate, command, event and fault files from YAML models",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  aggregate-codegen model.yaml
  aggregate-codegen specs/ --template-set typescript -o src/domain
  aggregate-codegen --stdin --dry-run < model.yaml
  aggregate-codegen --list-template-sets
        """.strip(),
    )
    add_codegen_args(parser)
    return parser


def handle_codegen_command(args: argparse.Namespace) -> int:
    """
    Handle code generation command from CLI arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    try:
        if getattr(args, "list_template_sets", False):
            return _list_template_sets()

        if not (args.files or args.url or args.stdin):
            console.print(
                "[red]✗[/red] Input source required (FILE, --url, or --stdin)"
            )
            return 1

        config = _build_config(args)
        if args.verbose:
            _show_config_warnings(config)

        pipeline = GenerationPipeline(config)
        sink = MemorySink() if args.dry_run else DirectorySink(args.output)

        handler = CLIHandler(console=console, verbose=args.verbose)
        return handler.run(pipeline, _iter_documents(args, handler), sink, args.dry_run)

    except (CLIError, ConfigError) as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1
    except Exception as e:
        logger.debug("Unexpected failure", exc_info=True)
        console.print(f"[red]✗ Unexpected error:[/red] {e}")
        return 1


def _list_template_sets() -> int:
    """List built-in template sets with their defaults."""
    manager = get_config_manager()

    table = Table(
        title="📋 Template Sets", box=box.ROUNDED, title_style="bold cyan"
    )
    table.add_column("Template Set", style="bold green", no_wrap=True)
    table.add_column("Extension", style="cyan")
    table.add_column("Index File", style="blue")
    table.add_column("Folders", style="dim")

    for name in manager.list_template_sets():
        config = manager.get_config(template_set=name)
        folders = ", ".join(config.naming[role].folder for role in NAMING_ROLES)
        table.add_row(
            f"🔧 {name}",
            config.naming["aggregate"].extension,
            config.sub_module_name,
            folders,
        )

    console.print()
    console.print(table)
    console.print()
    console.print(
        Panel(
            "[bold]Usage:[/bold] aggregate-codegen [dim]model.yaml[/dim] --template-set [cyan]NAME[/cyan]",
            title="💡 Quick Start",
            border_style="blue",
        )
    )
    return 0


def _build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Build configuration from CLI arguments."""
    overrides: Dict[str, Any] = {}

    if args.template_set:
        overrides["template_set"] = args.template_set

    if args.template_dir:
        overrides["template_dir"] = args.template_dir

    if args.extension:
        extension = args.extension if args.extension.startswith(".") else f".{args.extension}"
        overrides["naming"] = {role: {"extension": extension} for role in NAMING_ROLES}
        overrides["sub_module_name"] = f"index{extension}"
        overrides["root_module_name"] = f"index{extension}"

    if args.atomic:
        overrides["atomic"] = True

    if args.no_empty_root_index:
        overrides["emit_empty_root_index"] = False

    try:
        return get_config_manager().get_config(overrides, args.config)
    except ConfigError as e:
        raise CLIError(f"Configuration error: {e}") from e


def _show_config_warnings(config: GeneratorConfig):
    warnings = get_config_manager().validate_config(config)
    if warnings:
        console.print("\n[yellow]⚠️  Configuration warnings:[/yellow]")
        for warning in warnings:
            console.print(f"  [yellow]•[/yellow] {warning}")
        console.print()


def _expand_paths(paths: List[str]) -> List[Path]:
    """Expand directories into the model files they contain."""
    expanded = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            expanded.extend(
                sorted(p for p in path.rglob("*") if p.suffix.lower() in MODEL_SUFFIXES)
            )
        else:
            expanded.append(path)
    return expanded


def _iter_documents(
    args: argparse.Namespace, handler: Optional[CLIHandler] = None
) -> Iterator[InputDocument]:
    """Yield input documents; unreadable inputs are reported and skipped."""
    for path in _expand_paths(args.files):
        try:
            source, text = read_model_file(path)
        except (FileNotFoundError, ModelLoaderError) as e:
            if handler is not None:
                handler.report_input_error(str(path), e)
            continue
        yield InputDocument(source=source, text=text)

    if args.url:
        try:
            source, text = read_model_url(args.url)
        except ModelLoaderError as e:
            if handler is not None:
                handler.report_input_error(args.url, e)
        else:
            yield InputDocument(source=source, text=text)

    if args.stdin:
        yield InputDocument(source="<stdin>", text=sys.stdin.read())
