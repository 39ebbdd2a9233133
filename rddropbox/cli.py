#!/usr/bin/env python3
"""
rd-dropbox CLI - Thin entrypoint for the dropbox reconciliation run.

One invocation performs one pass:
- Load this station's dropboxes from the Rivendell database
- Check (and repair) their directories and log files
- Match them against running rdimport processes
- Restart rdcatchd if any dropbox has no worker

Design Principles:
==================
- CLI is a dispatcher only
- No reconciliation logic inside CLI
- Exit non-zero on failure
- No interactive prompts

Exit Codes:
===========
- 0: Success
- 1: Run completed with errors
- 2: Fatal error (database, process table, supervisor executable)
- 4: Configuration error (option file, database URL)
"""

import argparse
import json
import logging
import sys
from typing import List, NoReturn, Optional

from rddropbox import __version__
from rddropbox.app.config import RunConfig, configure_logging
from rddropbox.app.dropboxes import RemediationEngine
from rddropbox.app.persistence import (
    CredentialsError,
    DatabaseSettings,
    DropboxStore,
    DropboxStoreError,
)
from rddropbox.app.persistence.credentials import DEFAULT_MYCNF
from rddropbox.app.processes import (
    InventoryUnavailableError,
    ProcessInventory,
    SupervisorLauncher,
    SupervisorNotFoundError,
)

logger = logging.getLogger("rddropbox")

EXIT_OK = 0
EXIT_ERRORS = 1
EXIT_FATAL = 2
EXIT_CONFIG = 4


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rd-dropbox",
        description=(
            "Make sure every Rivendell dropbox on this station has a running "
            "rdimport process, restarting rdcatchd if one is missing."
        ),
    )
    parser.add_argument(
        "-m", "--myconfig",
        default=DEFAULT_MYCNF,
        help="MySQL option file holding database credentials (default: %(default)s)",
    )
    parser.add_argument("-d", "--dbhost", default=None, help="Database host (default: localhost)")
    parser.add_argument("-u", "--dbuser", default=None, help="Database user (default: rduser)")
    parser.add_argument("-p", "--dbpass", default=None, help="Database password")
    parser.add_argument("-n", "--dbname", default=None, help="Database name (default: Rivendell)")
    parser.add_argument(
        "--db-url",
        default=None,
        help="SQLAlchemy database URL; overrides every other database option",
    )
    parser.add_argument(
        "--station",
        default=None,
        help="Station name to check (default: this host's name)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Report progress")
    parser.add_argument("-D", "--debug", action="store_true", help="Report everything (implies --verbose)")
    parser.add_argument("--json", action="store_true", help="Print the run report as JSON on stdout")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _build_config(args: argparse.Namespace) -> RunConfig:
    values = {"verbose": args.verbose, "debug": args.debug}
    if args.station:
        values["station_name"] = args.station
    return RunConfig(**values)


def _open_store(args: argparse.Namespace) -> DropboxStore:
    """
    Resolve credentials and open the dropbox store.

    Raises:
        CredentialsError: Option file unreadable or settings invalid
        DropboxStoreError: Database URL unusable
    """
    settings = DatabaseSettings.load(
        args.myconfig,
        host=args.dbhost,
        user=args.dbuser,
        password=args.dbpass,
        name=args.dbname,
        url=args.db_url,
    )
    logger.debug(f"Using database {settings.describe()}")
    return DropboxStore(settings.sqlalchemy_url())


def main(argv: Optional[List[str]] = None) -> NoReturn:
    """
    Main CLI entrypoint.

    Parses arguments, runs one reconciliation pass and exits with its status.
    """
    args = build_parser().parse_args(argv)

    try:
        config = _build_config(args)
    except ValueError as e:
        print(f"ERROR: Invalid run configuration: {e}", file=sys.stderr)
        sys.exit(EXIT_CONFIG)

    configure_logging(config)

    try:
        store = _open_store(args)
    except CredentialsError as e:
        logger.critical(str(e))
        sys.exit(EXIT_CONFIG)
    except DropboxStoreError as e:
        logger.critical(str(e))
        sys.exit(EXIT_CONFIG)

    engine = RemediationEngine(
        config=config,
        store=store,
        inventory=ProcessInventory(),
        launcher=SupervisorLauncher(),
    )

    try:
        report = engine.run()
    except (DropboxStoreError, InventoryUnavailableError, SupervisorNotFoundError) as e:
        logger.critical(f"FATAL: {e}")
        sys.exit(EXIT_FATAL)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))

    if not report.succeeded:
        logger.critical(
            f"Encountered {report.error_count} errors. Please fix them and try again."
        )
        sys.exit(EXIT_ERRORS)

    sys.exit(EXIT_OK)


if __name__ == "__main__":
    main()
