"""
CLI entry point for UPC cross-referencing.

Usage:
    python -m upc_crossref --items item.txt --posted posted.txt --vendor export.csv
    python -m upc_crossref --items item.txt --posted posted.txt --vendor export.xlsx --no-fixups

Fix-ups go through the dry-run edit port, which logs each edit instead
of applying it; the UI automation port is plugged in by the caller.
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import load_config
from .driver import run
from .edit_port import DryRunEditPort
from .errors import CrossrefError, FileIOError
from .report import export_csv, format_console


def _configure_logging(verbose: bool, quiet: bool, log_file: str | None):
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="upc_crossref",
        description="Cross-reference a vendor export against the legacy inventory by UPC",
    )

    parser.add_argument("--items", required=True, metavar="FILE", help="Legacy item file (tab-separated)")
    parser.add_argument("--posted", required=True, metavar="FILE", help="Legacy posted file (tab-separated)")
    parser.add_argument("--vendor", required=True, metavar="FILE", help="Vendor export (CSV or XLSX)")

    parser.add_argument(
        "--config",
        default=None,
        metavar="FILE",
        help="Config file (default: $UPC_CROSSREF_CONFIG or the module's crossref_config.json)",
    )

    parser.add_argument(
        "--output-dir",
        default=".",
        metavar="DIR",
        help="Directory for the four report files (default: current directory)",
    )

    parser.add_argument("--output-csv", metavar="FILE", help="Also export every disposition as CSV")

    parser.add_argument(
        "--no-fixups",
        action="store_true",
        help="Classify and report only; matched items are listed as not yet updated",
    )

    parser.add_argument("--log-file", metavar="FILE", help="Also write log output to FILE")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--quiet", "-q", action="store_true", help="Suppress console output")

    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet, args.log_file)

    try:
        config = load_config(args.config)
        port = None if args.no_fixups else DryRunEditPort()

        result = run(
            args.items,
            args.posted,
            args.vendor,
            config=config,
            port=port,
            output_dir=args.output_dir,
        )

        if not args.quiet:
            print(format_console(result.reconciliation, result.outcome))

        if args.output_csv:
            output_path = Path(args.output_csv)
            try:
                with open(output_path, "w", newline="") as f:
                    export_csv(result.reconciliation, output=f)
            except OSError as e:
                raise FileIOError(output_path, e.strerror or str(e)) from e
            if not args.quiet:
                print(f"\nCSV exported to: {output_path}")

    except CrossrefError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
