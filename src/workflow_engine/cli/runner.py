"""CLI runner: parse arguments, load config, dispatch to a command."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Dict, Iterable, Optional

from workflow_engine.cli.arguments import build_parser, cli_args_to_config_overrides
from workflow_engine.cli.commands import (
    Command,
    DebugCommand,
    ImageScanCommand,
    SmokeTestCommand,
)
from workflow_engine.cli.exit_codes import EXIT_INVALID_USAGE, EXIT_SUCCESS
from workflow_engine.config.loader import ConfigError, load_config
from workflow_engine.core.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)


def get_version() -> str:
    try:
        return version("workflow-engine")
    except PackageNotFoundError:
        # Fallback for editable installs that have not yet built metadata.
        from workflow_engine import __version__

        return __version__


class CLIRunner:
    """Dispatches parsed arguments to the matching command."""

    def __init__(self) -> None:
        commands = [DebugCommand(), ImageScanCommand(), SmokeTestCommand()]
        self._commands: Dict[str, Command] = {c.name: c for c in commands}

    def run(self, argv: Optional[Iterable[str]] = None) -> int:
        """Run the CLI.

        Args:
            argv: Command-line arguments (defaults to sys.argv).

        Returns:
            Exit code.
        """
        parser = build_parser()

        # Handle --help specially to return 0
        if argv is not None:
            argv_list: Optional[list[str]] = list(argv)
            if "--help" in argv_list or "-h" in argv_list:
                parser.print_help()
                return EXIT_SUCCESS
        else:
            argv_list = None

        args = parser.parse_args(argv_list)

        # Configure logging as early as possible.
        configure_logging(debug=args.debug, verbose=args.verbose, quiet=args.quiet)

        if args.version:
            print(get_version())
            return EXIT_SUCCESS

        if not args.command:
            parser.print_help()
            return EXIT_SUCCESS

        try:
            config = load_config(
                project_root=Path.cwd(),
                cli_config_path=args.config,
                cli_overrides=cli_args_to_config_overrides(args),
            )
        except ConfigError as e:
            LOGGER.error(str(e))
            return EXIT_INVALID_USAGE

        return self._commands[args.command].execute(args, config)
