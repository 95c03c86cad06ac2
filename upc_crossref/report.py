"""
Report Generator - Format reconciliation results for human follow-up.

Writes the four plain-text reports (duplicates, new, double-check,
matched), a console summary and a CSV export.
"""

import csv
import io
import logging
from pathlib import Path
from typing import Optional, TextIO

from .config import Config
from .errors import FileIOError
from .fixers import FixupOutcome
from .matcher import summarize
from .models import DuplicateReport, MatchResult, Reconciliation

logger = logging.getLogger(__name__)

DUPLICATES_HEADER = "The following products all share the same UPC. You may want to fix that."
NEW_HEADER = "The following products are new to the catalog. Please enter them manually."
REVIEW_HEADER = (
    "The following products seem to have changed wildly. "
    "Please double check that their listings are correct."
)
MATCHED_HEADER = "The following products were successfully cross referenced."
UNFIXED_HEADER = "The following products matched but could not be updated."
PENDING_HEADER = "The following products matched but have not been updated yet."

RULE = "-" * 78


def _vendor_line(result: MatchResult) -> str:
    vendor = result.vendor_product
    weight = "" if vendor.weight is None else str(vendor.weight)
    retail = "" if vendor.retail is None else str(vendor.retail)
    return (
        f"{vendor.sku:<15} {str(vendor.upc):<14} {vendor.description[:25]:<25} "
        f"{str(vendor.cost):>9} {retail:>9} {weight:>7}"
    )


def _vendor_table(results: list[MatchResult], show_catalog: bool = False) -> list[str]:
    lines = [
        f"{'VENDOR SKU':<15} {'UPC':<14} {'DESCRIPTION':<25} {'COST':>9} {'RETAIL':>9} {'WEIGHT':>7}",
        RULE,
    ]
    for result in results:
        lines.append(_vendor_line(result))
        catalog = result.catalog_product
        if show_catalog and catalog is not None:
            lines.append(
                f"    catalog {catalog.sku}: cost {catalog.cost}, list {catalog.list_price}"
                f" - {result.reason}"
            )
    return lines


def format_duplicates(duplicates: list[DuplicateReport]) -> str:
    lines = [DUPLICATES_HEADER, ""]
    for report in duplicates:
        lines.append(f"UPC {report.barcode} ({len(report.products)} products)")
        for product in report.products:
            lines.append(
                f"    {product.sku:<15} {product.description[:40]:<40} "
                f"cost {product.cost}  list {product.list_price}  stock {product.stock:g}"
            )
        lines.append("")
    return "\n".join(lines)


def format_new(results: list[MatchResult]) -> str:
    return "\n".join([NEW_HEADER, "", *_vendor_table(results)]) + "\n"


def format_needs_review(results: list[MatchResult]) -> str:
    return "\n".join([REVIEW_HEADER, "", *_vendor_table(results, show_catalog=True)]) + "\n"


def format_matched(results: list[MatchResult], outcome: Optional[FixupOutcome] = None) -> str:
    """
    Format the matched report.

    With a fix-up outcome, only fixed items are listed as cross referenced;
    failed and skipped items follow in their own section. Without one, no
    fix-ups ran and every match is listed as not yet updated.
    """
    if outcome is None:
        return "\n".join([PENDING_HEADER, "", *_vendor_table(results)]) + "\n"

    lines = [MATCHED_HEADER, "", *_vendor_table(outcome.fixed)]
    if outcome.failed or outcome.skipped:
        lines += ["", UNFIXED_HEADER, ""]
        for failure in outcome.failed:
            lines.append(_vendor_line(failure.result))
            lines.append(f"    failed: {failure.error}")
        for result in outcome.skipped:
            lines.append(_vendor_line(result))
            lines.append("    skipped: batch aborted")
    return "\n".join(lines) + "\n"


def write_reports(
    reconciliation: Reconciliation,
    output_dir: str | Path,
    config: Optional[Config] = None,
    outcome: Optional[FixupOutcome] = None,
) -> dict[str, Path]:
    """
    Write the four plain-text reports.

    Returns:
        Mapping of report name -> written path
    """
    config = config or Config()
    output_dir = Path(output_dir)
    names = config.reports

    contents = {
        "duplicates": (names.duplicates, format_duplicates(reconciliation.duplicates)),
        "new": (names.new, format_new(reconciliation.new)),
        "needs_review": (names.needs_review, format_needs_review(reconciliation.needs_review)),
        "matched": (names.matched, format_matched(reconciliation.matched, outcome)),
    }

    written = {}
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        for key, (filename, text) in contents.items():
            path = output_dir / filename
            path.write_text(text, encoding="utf-8")
            written[key] = path
    except OSError as e:
        raise FileIOError(output_dir, e.strerror or str(e)) from e

    logger.info(f"Wrote {len(written)} reports to {output_dir}")
    return written


def format_console(reconciliation: Reconciliation, outcome: Optional[FixupOutcome] = None) -> str:
    """Format a short summary for console display."""
    summary = summarize(reconciliation)
    lines = [
        "=" * 70,
        "SUMMARY",
        f"  Vendor products:  {summary['total']}",
        f"  New:              {summary['new']}",
        f"  Needs review:     {summary['needs_review']}",
        f"  Matched:          {summary['matched']}",
        f"  Shared barcodes:  {summary['duplicates']}",
    ]
    if outcome is not None:
        lines.append(f"  Fixed:            {len(outcome.fixed)}")
        lines.append(f"  Fix-up failures:  {len(outcome.failed)}")
        if outcome.skipped:
            lines.append(f"  Skipped:          {len(outcome.skipped)}")
    lines.append("=" * 70)
    return "\n".join(lines)


def export_csv(reconciliation: Reconciliation, output: TextIO | None = None) -> str:
    """
    Export one row per vendor product with its disposition.

    Returns:
        CSV string (also writes to output if provided)
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer)

    writer.writerow([
        "disposition",
        "vendor_sku",
        "upc",
        "description",
        "vendor_cost",
        "vendor_retail",
        "vendor_weight",
        "catalog_sku",
        "catalog_cost",
        "catalog_list",
        "reason",
    ])

    for result in reconciliation.results():
        vendor = result.vendor_product
        catalog = result.catalog_product
        writer.writerow([
            result.disposition.value,
            vendor.sku,
            str(vendor.upc),
            vendor.description,
            str(vendor.cost),
            str(vendor.retail) if vendor.retail is not None else "",
            str(vendor.weight) if vendor.weight is not None else "",
            catalog.sku if catalog else "",
            str(catalog.cost) if catalog else "",
            str(catalog.list_price) if catalog else "",
            result.reason,
        ])

    csv_content = buffer.getvalue()

    if output:
        output.write(csv_content)

    return csv_content
