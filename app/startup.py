"""Command-line startup.

Parses the service settings, wires the application and runs one command
against the site or user configuration.
"""
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from loguru import logger

from app.application import Application
from config.service import ConfigurationServiceFactory
from core.exceptions import ConfigurationError
from siteconfig.properties import format_properties

PROPERTY_TYPES = ("str", "bool", "int", "long", "float", "double")


def configure_logging(level: str) -> None:
    """Route loguru output to stderr at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level=level, format="<level>{level: <8}</level> {name}:{line} - {message}")


def build_command_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="siteconfig",
        description="Inspect and update the layered site configuration",
        epilog="Settings options: --root, --location, --custom-pattern, --user-store, "
               "--user-store-path, --no-audit, --debug, --log-level",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("dump", help="Print the merged site properties")

    get = commands.add_parser("get", help="Print one site property")
    get.add_argument("name")
    get.add_argument("--type", choices=PROPERTY_TYPES, default="str", dest="value_type")
    get.add_argument("--default", action="store_true", help="Default for --type bool")

    set_ = commands.add_parser("set", help="Set one site property")
    set_.add_argument("username")
    set_.add_argument("name")
    set_.add_argument("value")

    user_get = commands.add_parser("user-get", help="Print a user configuration")
    user_get.add_argument("username")
    user_get.add_argument("config_id")
    user_get.add_argument("keys", nargs="*")

    user_set = commands.add_parser("user-set", help="Store a user configuration")
    user_set.add_argument("username")
    user_set.add_argument("config_id")
    user_set.add_argument("content")
    user_set.add_argument("keys", nargs="*")

    return parser


def run_application(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point.

    Startup sequence:
    1. Parse settings from all sources (defaults, file, env, CLI)
    2. Configure logging
    3. Wire the application services
    4. Run the requested command

    Returns:
        Process exit code
    """
    argv = sys.argv[1:] if argv is None else argv
    try:
        settings, remaining = ConfigurationServiceFactory.create_from_args(argv)
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    configure_logging(settings.log_level)
    args = build_command_parser().parse_args(remaining)

    application = Application(settings.raw_config, install_hooks=True)
    application.log_session_info(settings.to_dict())
    try:
        return _run_command(application, args)
    finally:
        application.cleanup()


def _run_command(application: Application, args: argparse.Namespace) -> int:
    if args.command == "dump":
        result = application.reload_use_case().execute()
        if result.is_failure():
            print(f"error: {result.error}", file=sys.stderr)
            return 1
        sys.stdout.write(format_properties(result.value))
        return 0

    if args.command == "get":
        result = application.get_property_use_case().execute(args.name, args.value_type, args.default)
        if result.is_failure():
            print(f"error: {result.error}", file=sys.stderr)
            return 1
        prop = result.value
        if not prop.found:
            logger.info("Property '{}' is not set", prop.name)
            return 1
        print(prop.value)
        return 0

    if args.command == "set":
        result = application.set_property_use_case().execute(args.username, args.name, args.value)
        if result.is_failure():
            print(f"error: {result.error}", file=sys.stderr)
            return 1
        return 0

    if args.command == "user-get":
        result = application.get_user_configuration_use_case().execute(args.username, args.config_id, *args.keys)
        if result.is_failure():
            print(f"error: {result.error}", file=sys.stderr)
            return 1
        if result.value is None:
            return 1
        print(result.value)
        return 0

    if args.command == "user-set":
        result = application.set_user_configuration_use_case().execute(
            args.username, args.config_id, args.content, *args.keys
        )
        if result.is_failure():
            print(f"error: {result.error}", file=sys.stderr)
            return 1
        return 0

    logger.error("Unknown command {}", args.command)
    return 2
