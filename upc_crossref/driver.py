"""
Cross-Reference Driver - Orchestrates one reconciliation run.

Data flows one way:
    legacy files -> Catalog -> BarcodeIndex -> classification -> partitions
and the matched partition is forwarded to the fix-up stage. Any
ingestion error aborts the run before classification begins.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .catalog_loader import load_catalog
from .config import Config
from .edit_port import InventoryEditPort
from .fixers import FixupOutcome, run_fixups
from .index import BarcodeIndex, build_index
from .matcher import classify
from .models import Catalog, Reconciliation, VendorProduct
from .report import write_reports
from .vendor_loader import load_vendor_products

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Everything one run produced, for reporting and tests."""
    catalog: Catalog
    index: BarcodeIndex
    reconciliation: Reconciliation
    outcome: Optional[FixupOutcome] = None
    reports: Optional[dict[str, Path]] = None


def reconcile(
    catalog: Catalog,
    vendor_products: list[VendorProduct],
    config: Optional[Config] = None,
) -> tuple[BarcodeIndex, Reconciliation]:
    """Index the catalog and classify the vendor products against it."""
    config = config or Config()
    index = build_index(catalog)
    return index, classify(vendor_products, index, config.price_policy)


def run(
    item_path: str | Path,
    posted_path: str | Path,
    vendor_path: str | Path,
    config: Optional[Config] = None,
    port: Optional[InventoryEditPort] = None,
    output_dir: Optional[str | Path] = None,
) -> RunResult:
    """
    Run a full cross-reference.

    Args:
        item_path: Legacy item file (tab-separated)
        posted_path: Legacy posted file (tab-separated)
        vendor_path: Vendor export (CSV or XLSX)
        config: Loaded configuration (defaults to Config())
        port: Edit port for fix-ups; without one, no fix-ups run
        output_dir: Where to write the four reports; without one, none are written

    Returns:
        RunResult with the catalog, index, partitions and fix-up outcome
    """
    config = config or Config()

    catalog = load_catalog(item_path, posted_path, config)
    vendor_products = load_vendor_products(vendor_path)
    index, reconciliation = reconcile(catalog, vendor_products, config)

    outcome = None
    if port is not None:
        outcome = run_fixups(reconciliation.matched, port, config)

    reports = None
    if output_dir is not None:
        reports = write_reports(reconciliation, output_dir, config, outcome)

    return RunResult(
        catalog=catalog,
        index=index,
        reconciliation=reconciliation,
        outcome=outcome,
        reports=reports,
    )
