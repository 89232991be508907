"""Command-line entry point for aggregate-codegen."""

import sys

from .codegen.cli_integration import create_parser, handle_codegen_command
from .logging_config import setup_logging


def main(argv=None) -> int:
    """Parse arguments, configure logging and run code generation."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    return handle_codegen_command(args)


if __name__ == "__main__":
    sys.exit(main())
