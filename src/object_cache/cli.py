"""Command line interface: ``object-cache <namespace> <command>``."""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from object_cache.commands import COMMAND_REGISTRY, register_cli_commands
from object_cache.config import get_settings
from object_cache.facade import get_runtime


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser from the registered command bundles."""

    parser = argparse.ArgumentParser(
        prog="object-cache",
        description="Manage the object cache",
        allow_abbrev=False,
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for diagnostic output",
    )
    namespaces = parser.add_subparsers(dest="namespace", metavar="namespace")
    namespaces.required = True
    for namespace, bundle in sorted(COMMAND_REGISTRY.items()):
        ns_parser = namespaces.add_parser(namespace, help=(bundle.__doc__ or "").strip())
        commands = ns_parser.add_subparsers(dest="command", metavar="command")
        commands.required = True
        for name, help_text in bundle.COMMANDS.items():
            commands.add_parser(name, help=help_text)
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""

    return build_parser().parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI."""

    settings = get_settings().model_copy(update={"cli_enabled": True})
    register_cli_commands(settings)
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    runtime = get_runtime()
    if not runtime.is_initialized:
        runtime.init()

    bundle = COMMAND_REGISTRY[args.namespace](runtime)
    return getattr(bundle, args.command)(args)


if __name__ == "__main__":
    raise SystemExit(main())
