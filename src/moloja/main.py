"""
Command line entry point for Moloja receipts.

Usage:
    moloja-receipt pdf <sale.json> [--profile profile.json]      Save PDF receipt
    moloja-receipt thermal <sale.json> [--profile profile.json]  Save thermal text
    moloja-receipt text <sale.json> [--profile profile.json]     Print thermal text to stdout
    moloja-receipt print <sale.json> [--profile profile.json]    Send to receipt printer
    moloja-receipt share <sale.json> [--profile profile.json]    Share (or save) PDF receipt
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from moloja.printing import DocumentConstructionError, ReceiptService, ShareOutcome, create_sink
from moloja.settings import get_settings

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


def _load_json(path: Optional[Path]) -> Any:
    if path is None:
        return None
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="moloja-receipt",
        description="Generate receipts for completed sales",
    )
    parser.add_argument(
        "command",
        choices=["pdf", "thermal", "text", "print", "share"],
        help="Output action",
    )
    parser.add_argument("sale", type=Path, help="Sale JSON file")
    parser.add_argument("--profile", type=Path, help="Business profile JSON file")
    parser.add_argument("--output-dir", type=Path, help="Directory for saved receipts")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser


async def run(args: argparse.Namespace) -> int:
    """Run one command, returning the process exit code."""
    settings = get_settings()
    if args.output_dir:
        settings = settings.model_copy(update={"output_dir": args.output_dir})

    service = ReceiptService(create_sink(settings))
    sale = _load_json(args.sale)
    profile = _load_json(args.profile)

    if args.command == "pdf":
        path = service.to_download(sale, profile)
        print(path)
    elif args.command == "thermal":
        path = service.to_thermal_download(sale, profile)
        print(path)
    elif args.command == "text":
        sys.stdout.write(service.thermal_text(sale, profile))
    elif args.command == "print":
        if not await service.to_print(sale, profile):
            logger.error("Receipt was not printed")
            return 1
    elif args.command == "share":
        outcome = await service.to_share(sale, profile)
        if outcome is ShareOutcome.DOWNLOADED:
            logger.info("Sharing not available, receipt saved instead")
        elif outcome is ShareOutcome.DECLINED:
            logger.info("Share declined")
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    from dotenv import load_dotenv

    # Load environment variables
    load_dotenv()

    args = build_parser().parse_args(argv)
    setup_logging(args.debug or get_settings().debug)

    try:
        code = asyncio.run(run(args))
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read input: {e}")
        sys.exit(2)
    except DocumentConstructionError as e:
        logger.error(f"Receipt could not be generated: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        code = 130

    sys.exit(code)


if __name__ == "__main__":
    main()
