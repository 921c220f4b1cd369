# MIT License
# Copyright (c) 2025 Hashborn

import argparse
import functools
import logging
import sys
from typing import BinaryIO, List, Optional

import yaml

from ..config.app_options import AppOptions, ExportConfig, default_home
from ..export.orchestrator import AppExporter, ExportOrchestrator
from ..storage.db import DriverRegistry
from ...protocol.config.params import LATEST_HEIGHT
from ...protocol.types.common import ExportError

logger = logging.getLogger(__name__)


def cmd_export(
    args,
    exporter: Optional[AppExporter] = None,
    drivers: Optional[DriverRegistry] = None,
    stdout: Optional[BinaryIO] = None,
) -> int:
    """Dump app state to a genesis JSON document."""
    home = getattr(args, "home", None) or default_home()
    try:
        options = AppOptions.load(home)
        config = ExportConfig.from_options(
            home,
            options,
            height=args.height,
            for_zero_height=args.for_zero_height,
            jail_allowed_addrs=args.jail_allowed_addrs,
            modules_to_export=args.modules_to_export,
            output_document=args.output_document,
            app_db_backend=args.app_db_backend,
            db_backend=args.db_backend,
        )
    except (ValueError, OSError, yaml.YAMLError) as e:
        # pydantic's ValidationError is a ValueError
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 1

    orchestrator = ExportOrchestrator(exporter=exporter, drivers=drivers, stdout=stdout)
    try:
        result = orchestrator.run(config)
    except ExportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger.debug(f"Export finished: {result.bytes_written} bytes to {result.output}")
    return 0


def build_export_command(
    subparsers,
    exporter: Optional[AppExporter] = None,
    drivers: Optional[DriverRegistry] = None,
    stdout: Optional[BinaryIO] = None,
) -> argparse.ArgumentParser:
    """
    Registers the export command on a host parser with its exporter bound.
    Without a --home option on the host parser the default home is used.
    """
    export_parser = subparsers.add_parser("export", help="Export state to JSON")
    export_parser.add_argument(
        "--height", type=int, default=LATEST_HEIGHT,
        help="Export state from a particular height (-1 means latest height)"
    )
    export_parser.add_argument(
        "--for-zero-height", action="store_true",
        help="Export state to start at height zero (perform preprocessing)"
    )
    export_parser.add_argument(
        "--jail-allowed-addrs", action="append", default=[],
        help="Comma-separated list of operator addresses of jailed validators to unjail"
    )
    export_parser.add_argument(
        "--modules-to-export", action="append", default=[],
        help="Comma-separated list of modules to export. If empty, will export all modules"
    )
    export_parser.add_argument(
        "--output-document", default="",
        help="Exported state is written to the given file instead of STDOUT"
    )

    # Backend overrides (otherwise read from config/app.yaml and config/config.yaml)
    export_parser.add_argument("--app-db-backend", default="", help="Application DB backend")
    export_parser.add_argument("--db-backend", default="", help="Node-wide DB backend")

    export_parser.set_defaults(
        func=functools.partial(cmd_export, exporter=exporter, drivers=drivers, stdout=stdout)
    )
    return export_parser


def build_parser(
    exporter: Optional[AppExporter] = None,
    drivers: Optional[DriverRegistry] = None,
    stdout: Optional[BinaryIO] = None,
) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Chain state export CLI")
    parser.add_argument("--home", default=None, help="Node home directory")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ERROR)")

    subparsers = parser.add_subparsers(dest="command", required=True)
    build_export_command(subparsers, exporter=exporter, drivers=drivers, stdout=stdout)
    return parser


def main(
    argv: Optional[List[str]] = None,
    exporter: Optional[AppExporter] = None,
    drivers: Optional[DriverRegistry] = None,
    stdout: Optional[BinaryIO] = None,
) -> int:
    """
    Entry point. Host applications pass their exporter and storage drivers;
    without an exporter the export command returns the genesis file as-is.
    """
    parser = build_parser(exporter=exporter, drivers=drivers, stdout=stdout)
    args = parser.parse_args(argv)
    if args.home is None:
        args.home = default_home()

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s: %(message)s',
        datefmt='%H:%M:%S',
        stream=sys.stderr,
    )

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
