# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Provisioner CLI: one subcommand per container or image operation.

Subcommands:

* ``create NAME``: create a container, print its id
* ``start NAME ID``: start a stopped container
* ``stop NAME ID``: stop a container
* ``remove NAME ID``: remove a container
* ``ip NAME ID``: print a container's IP address
* ``commit IMAGE CONTAINER_ID``: commit a container, print the repository

The CLI keeps no state between invocations; commands other than
``create`` take the runtime id printed by ``create``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from provisioner.config import ConfigError, ProvisionerConfig
from provisioner.container import Container, ContainerState
from provisioner.errors import ProvisionerError
from provisioner.executor import CommandExecutor
from provisioner.image import Image
from provisioner.logging import SecretFilter, configure_logging


logger = logging.getLogger(__name__)

#: Exit codes (argparse exits with 2 on usage errors).
EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_FAILURE = 3


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="provisioner",
        description="Drive container lifecycle through the runtime CLI",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="PATH",
        help=(
            "Path to provisioner.yaml"
            " (default: ~/.config/provisioner/provisioner.yaml)"
        ),
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    create_parser = subparsers.add_parser(
        "create", help="Create a container and print its id"
    )
    create_parser.add_argument("name", help="Logical container name")

    for command, help_text in (
        ("start", "Start a stopped container"),
        ("stop", "Stop a container"),
        ("remove", "Remove a container"),
        ("ip", "Print a container's IP address"),
    ):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument("name", help="Logical container name")
        sub.add_argument("id", help="Runtime container id")

    commit_parser = subparsers.add_parser(
        "commit", help="Commit a container into an image"
    )
    commit_parser.add_argument("image", help="Image name")
    commit_parser.add_argument("container_id", help="Source container id")

    return parser


def _execute(
    args: argparse.Namespace,
    config: ProvisionerConfig,
    executor: CommandExecutor,
) -> str | None:
    """Run the selected operation and return the text to print."""
    if args.command == "create":
        return Container(args.name, config, executor).create()

    if args.command == "commit":
        return Image(args.image, config, executor).commit(args.container_id)

    # start needs a stopped handle to reach the runtime
    state = (
        ContainerState.STOPPED
        if args.command == "start"
        else ContainerState.RUNNING
    )
    container = Container.attach(
        args.name, args.id, config, executor, state=state
    )
    if args.command == "start":
        container.start()
    elif args.command == "stop":
        container.stop()
    elif args.command == "remove":
        container.remove()
    else:
        return container.ip()
    return None


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        Exit code (0=success, 1=config error, 2=usage, 3=operation failed).
    """
    args = _build_parser().parse_args(argv)

    configure_logging(level=logging.DEBUG if args.debug else logging.INFO)

    try:
        config = ProvisionerConfig.from_yaml(config_path=args.config)
    except ConfigError as e:
        logger.critical("Configuration error: %s", e)
        return EXIT_CONFIG

    try:
        output = _execute(args, config, CommandExecutor())
    except ConfigError as e:
        logger.critical("Configuration error: %s", e)
        return EXIT_CONFIG
    except (ProvisionerError, ValueError) as e:
        # Error text embeds the runtime argv, which may hold !env values
        message = SecretFilter.redact(str(e))
        print(f"provisioner: {args.command} failed: {message}", file=sys.stderr)
        return EXIT_FAILURE

    if output is not None:
        print(output)
    return EXIT_OK


def cli() -> None:
    """Entry point for the ``provisioner`` console script."""
    sys.exit(main())
