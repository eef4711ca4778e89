# main.py

"""Entry point for the pricewatch tracker (headless CLI)."""

import argparse
import logging
import sys
from pathlib import Path

from pricewatch.config.logging_config import setup_logging

logger = logging.getLogger("pricewatch.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="pricewatch",
        description=(
            "Track the cheapest price of each catalog product across "
            "retail sources and keep a price history."
        ),
    )
    parser.add_argument(
        "-c",
        "--catalog",
        default=None,
        type=Path,
        help="Product catalog JSON (default: products.json).",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        type=Path,
        dest="output_dir",
        help="Directory for data.json / history.json (default: docs/).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format for the update run (default: json).",
    )
    parser.add_argument(
        "--sort",
        choices=["name", "best"],
        default="name",
        help="Table order: product name or best price (default: name).",
    )
    parser.add_argument(
        "--only",
        choices=["priced", "missing"],
        default=None,
        help="Table filter: only priced or only unpriced products.",
    )
    parser.add_argument(
        "--csv",
        action="store_true",
        default=False,
        dest="export_csv",
        help="Also export the snapshot as CSV.",
    )
    parser.add_argument(
        "--history",
        nargs="?",
        const="",
        default=None,
        metavar="PRODUCT_ID",
        help="Show price history stats (all products, or one).",
    )
    parser.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Run a connectivity health check on all catalog sources.",
    )
    return parser


def main() -> None:
    """Route to the update run, history view, or health check."""
    log_file = setup_logging()
    logger.info("pricewatch starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    from pricewatch.cli import runner

    if args.history is not None:
        exit_code = runner.show_history(
            product_id=args.history or None,
            output_dir=args.output_dir,
        )
    elif args.health:
        exit_code = runner.run_health_check(catalog_path=args.catalog)
    else:
        exit_code = runner.run_update(
            catalog_path=args.catalog,
            output_dir=args.output_dir,
            output_format=args.output_format,
            export_csv=args.export_csv,
            sort=args.sort,
            only=args.only,
        )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
