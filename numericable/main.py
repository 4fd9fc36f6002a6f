"""Main entry point with CLI."""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

from numericable.config import config
from numericable.logging_conf import setup_logging
from numericable.jobs.runner import KonnectorRunner
from numericable.parse.models import RunParams
from numericable.store.operations_store import OperationStore

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Numericable bills konnector")

    # Credentials
    parser.add_argument(
        "--login",
        default=None,
        help="Account login (default: LOGIN env var)",
    )
    parser.add_argument(
        "--password",
        default=None,
        help="Account password (default: PASSWORD env var)",
    )

    # Storage options
    parser.add_argument(
        "--folder",
        default=None,
        help=f"Folder receiving the bill PDFs (default: {config.BILLS_DIR})",
    )
    parser.add_argument(
        "--no-download",
        action="store_true",
        help="Only record bills, don't download their PDFs",
    )
    parser.add_argument(
        "--import-operations",
        type=Path,
        default=None,
        help="JSON file of bank operations to import before reconciliation",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Verbose logs",
    )

    return parser.parse_args(argv)


async def _import_operations(path: Path) -> None:
    store = OperationStore()
    await store.initialize()
    await store.import_json(path)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging("DEBUG" if args.debug else None)

    if args.login:
        config.LOGIN = args.login
    if args.password:
        config.PASSWORD = args.password

    try:
        config.validate()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    if args.import_operations:
        try:
            asyncio.run(_import_operations(args.import_operations))
        except (OSError, ValueError) as e:
            logger.error(f"Could not import bank operations: {e}")
            sys.exit(1)

    params = RunParams(
        login=config.LOGIN,
        password=config.PASSWORD,
        folder_path=args.folder,
        download_pdfs=config.DOWNLOAD_PDFS and not args.no_download,
    )

    logger.info("=" * 60)
    logger.info("Numericable konnector starting")
    logger.info(f"Account portal: {config.ACCOUNT_URL}")
    logger.info(f"Download PDFs: {params.download_pdfs}")
    logger.info("=" * 60)

    runner = KonnectorRunner(params)
    try:
        bills = asyncio.run(runner.run())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)

    if runner.error_code:
        print(runner.error_code, file=sys.stderr)
        sys.exit(1)

    logger.info(f"Done: {len(bills)} bill(s) synchronized")


if __name__ == "__main__":
    main()
