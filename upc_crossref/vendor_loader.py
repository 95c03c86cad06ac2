"""
Vendor Loader - Parse a vendor product export into VendorProducts.

The vendor export is the source of truth for corrections. It arrives as
CSV or XLSX with a header row; headers are matched case-insensitively.
"""

import csv
import logging
import math
import re
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .barcode import repair_or_reject
from .errors import ExportLayoutError, FileIOError, MalformedValueError, MissingFieldError
from .models import VendorProduct

logger = logging.getLogger(__name__)

# Expected columns and the header spellings seen in vendor exports
COLUMN_PATTERNS = {
    "sku": ["sku", "vendor sku", "item number", "item_number"],
    "upc": ["upc", "ean", "barcode", "gtin"],
    "desc": ["desc", "description", "item description"],
    "weight": ["weight", "wt"],
    "cost": ["cost", "unit cost", "price"],
    "retail": ["retail", "msrp", "list"],
}

REQUIRED_COLUMNS = ("sku", "upc", "cost")


def _find_column_index(headers: list, patterns: list[str]) -> Optional[int]:
    """Find column index matching any of the patterns (case-insensitive)."""
    for i, header in enumerate(headers):
        if header is None:
            continue
        if str(header).lower().strip() in patterns:
            return i
    return None


def _text(value: Any) -> str:
    """Render a cell value as text; integral floats lose their '.0'."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _upc_text(value: Any) -> str:
    """
    Render a UPC cell as text.

    Spreadsheets store barcodes typed as numbers without their leading
    zeros, so numeric cells are zero-padded back to 13 digits.
    """
    if isinstance(value, int) or (isinstance(value, float) and value.is_integer()):
        return f"{int(value):013d}"
    return _text(value)


def _parse_decimal(value: Any, row: int, field: str, source: str) -> Optional[Decimal]:
    """Parse a money value; blank is None. NaN and infinities are rejected."""
    if isinstance(value, (int, float)):
        text = str(value)
    else:
        text = _text(value)
        if not text:
            return None
    try:
        amount = Decimal(re.sub(r"[$,]", "", text))
    except InvalidOperation:
        raise MalformedValueError(row, field, text, source) from None
    if not amount.is_finite():
        raise MalformedValueError(row, field, text, source)
    return amount


def _parse_weight(value: Any, row: int, source: str) -> Optional[float]:
    if isinstance(value, (int, float)):
        weight = float(value)
        text = str(value)
    else:
        text = _text(value)
        if not text:
            return None
        try:
            weight = float(text)
        except ValueError:
            raise MalformedValueError(row, "weight", text, source) from None
    if not math.isfinite(weight):
        raise MalformedValueError(row, "weight", text, source)
    return weight


def _to_product(values: dict[str, Any], row: int, source: str) -> VendorProduct:
    """Convert one row of raw cell values into a VendorProduct."""
    sku = _text(values.get("sku"))
    if not sku:
        raise MissingFieldError(row, "sku", source)

    upc_text = _upc_text(values.get("upc"))
    if not upc_text:
        raise MissingFieldError(row, "upc", source)
    upc = repair_or_reject(upc_text)
    if upc is None:
        raise MalformedValueError(row, "upc", upc_text, source)

    cost = _parse_decimal(values.get("cost"), row, "cost", source)
    if cost is None:
        raise MissingFieldError(row, "cost", source)

    return VendorProduct(
        sku=sku,
        upc=upc,
        description=_text(values.get("desc")),
        cost=cost,
        weight=_parse_weight(values.get("weight"), row, source),
        retail=_parse_decimal(values.get("retail"), row, "retail", source),
    )


def _map_columns(headers: list, source: str) -> dict[str, int]:
    col_idx = {}
    for field, patterns in COLUMN_PATTERNS.items():
        idx = _find_column_index(headers, patterns)
        if idx is not None:
            col_idx[field] = idx

    missing = [f for f in REQUIRED_COLUMNS if f not in col_idx]
    if missing:
        raise ExportLayoutError(source, f"missing required columns {missing}")
    return col_idx


def _products_from_rows(rows, source: str) -> list[VendorProduct]:
    """
    Build products from an iterable of row sequences, header first.

    Data rows are numbered from 1, not counting the header.
    """
    rows = iter(rows)
    headers = list(next(rows, None) or [])
    if not headers:
        raise ExportLayoutError(source, "no header row")
    col_idx = _map_columns(headers, source)

    products = []
    for row_num, row in enumerate(rows, start=1):
        row = list(row)
        if not any(_text(v) for v in row):
            continue
        values = {field: row[idx] if idx < len(row) else None for field, idx in col_idx.items()}
        products.append(_to_product(values, row_num, source))
    return products


def _load_csv(path: Path) -> list[VendorProduct]:
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        return _products_from_rows(csv.reader(f), path.name)


def _load_xlsx(path: Path) -> list[VendorProduct]:
    try:
        workbook = load_workbook(path, read_only=True, data_only=True)
    except (BadZipFile, InvalidFileException, KeyError) as e:
        raise FileIOError(path, f"not a readable workbook ({e})") from e
    try:
        sheet = workbook.worksheets[0]
        return _products_from_rows(sheet.iter_rows(values_only=True), path.name)
    finally:
        workbook.close()


def load_vendor_products(file_path: str | Path) -> list[VendorProduct]:
    """
    Load vendor products from a CSV or XLSX export.

    Args:
        file_path: Path to the export

    Returns:
        List of VendorProduct in file order

    Raises:
        FileIOError: the file is missing, unreadable or not a valid workbook
        ExportLayoutError: unsupported format, or no usable header row
        MissingFieldError / MalformedValueError: a bad data row
    """
    path = Path(file_path)
    if not path.exists():
        raise FileIOError(path, "file not found")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        loader = _load_csv
    elif suffix in (".xlsx", ".xlsm"):
        loader = _load_xlsx
    else:
        raise ExportLayoutError(path.name, f"unsupported vendor export format '{suffix}'")

    try:
        products = loader(path)
    except UnicodeDecodeError as e:
        raise FileIOError(path, f"not valid UTF-8 text ({e.reason})") from e
    except OSError as e:
        raise FileIOError(path, e.strerror or str(e)) from e

    logger.info(f"Loaded {len(products)} vendor products from {path.name}")
    return products
