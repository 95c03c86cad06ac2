# UPC cross-reference: legacy inventory export vs. vendor product export

from .barcode import Ean13, compute_check_digit, is_valid, repair_or_reject
from .models import (
    Catalog,
    CatalogProduct,
    VendorProduct,
    Disposition,
    DuplicateReport,
    MatchResult,
    Reconciliation,
)
from .errors import (
    CrossrefError,
    ConfigError,
    FileIOError,
    IncompleteRecordError,
    MissingFieldError,
    MalformedValueError,
    MissingBaseRecordError,
    SkuCollisionError,
    ExportLayoutError,
    AutomationError,
    FixupError,
    SessionBusyError,
)
from .config import load_config, Config, PricePolicy
from .catalog_loader import ingest, load_catalog
from .vendor_loader import load_vendor_products
from .index import build_index, fold_barcodes, BarcodeIndex
from .matcher import classify, summarize
from .edit_port import InventoryEditPort, EditSession, InMemoryEditPort, DryRunEditPort
from .fixers import apply_fixups, run_fixups, FixupOutcome
from .report import write_reports, format_console, export_csv
from .driver import reconcile, run

__version__ = "1.0.0"

__all__ = [
    # Barcodes
    "Ean13",
    "compute_check_digit",
    "is_valid",
    "repair_or_reject",
    # Models
    "Catalog",
    "CatalogProduct",
    "VendorProduct",
    "Disposition",
    "DuplicateReport",
    "MatchResult",
    "Reconciliation",
    # Errors
    "CrossrefError",
    "ConfigError",
    "FileIOError",
    "IncompleteRecordError",
    "MissingFieldError",
    "MalformedValueError",
    "MissingBaseRecordError",
    "SkuCollisionError",
    "ExportLayoutError",
    "AutomationError",
    "FixupError",
    "SessionBusyError",
    # Config
    "Config",
    "PricePolicy",
    "load_config",
    # Loading
    "ingest",
    "load_catalog",
    "load_vendor_products",
    # Index
    "build_index",
    "fold_barcodes",
    "BarcodeIndex",
    # Matcher
    "classify",
    "summarize",
    # Edit ports
    "InventoryEditPort",
    "EditSession",
    "InMemoryEditPort",
    "DryRunEditPort",
    # Fix-ups
    "apply_fixups",
    "run_fixups",
    "FixupOutcome",
    # Report
    "write_reports",
    "format_console",
    "export_csv",
    # Driver
    "reconcile",
    "run",
]
