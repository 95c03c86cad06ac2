"""
Catalog Loader - Parse the legacy inventory export into CatalogProducts.

The export is two fixed-column, tab-separated files with no header row:
- the item file carries sku, description, prices, barcodes and weight
- the posted file carries last-sold date and stock, keyed by sku

Both are merged by sku into a single Catalog. Any row-level problem
aborts ingestion: a partial catalog is never handed to the matcher.
"""

import csv
import logging
import math
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

from .barcode import Ean13, repair_or_reject
from .config import Config, ItemColumns, PostedColumns
from .errors import (
    FileIOError,
    IncompleteRecordError,
    MalformedValueError,
    MissingBaseRecordError,
    MissingFieldError,
    SkuCollisionError,
)
from .models import Catalog, CatalogProduct

logger = logging.getLogger(__name__)

_NOT_CURRENCY = re.compile(r"[^0-9.]")

Row = list[str]


def read_rows(path: str | Path, encoding: str = "utf-8") -> list[Row]:
    """
    Read a tab-separated file into raw rows.

    Quotes are not special: legacy descriptions contain stray quote
    characters. Blank lines are kept as empty rows so row numbers stay
    aligned with line numbers.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding=encoding, errors="replace", newline="") as f:
            return list(csv.reader(f, delimiter="\t", quoting=csv.QUOTE_NONE))
    except OSError as e:
        raise FileIOError(path, e.strerror or str(e)) from e


def _cell(row: Row, index: int) -> Optional[str]:
    """Return the cell at index, or None if the row is too short."""
    if index >= len(row):
        return None
    return row[index]


def _is_blank(row: Row) -> bool:
    return not any(cell.strip() for cell in row)


def parse_currency(raw: str, row: int, field: str, source: Optional[str] = None) -> Decimal:
    """
    Parse noisy currency text ("$1,234.50 ") as an exact Decimal.

    Everything but digits and the decimal point is stripped. There is
    no fallback value: unparseable money is an error.
    """
    cleaned = _NOT_CURRENCY.sub("", raw)
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        raise MalformedValueError(row, field, raw, source) from None


def parse_quantity(raw: str, row: int, field: str, source: Optional[str] = None) -> float:
    """Parse a stock or weight quantity. Blank text is zero; NaN and infinities are rejected."""
    text = raw.strip()
    if not text:
        return 0.0
    try:
        quantity = float(text)
    except ValueError:
        raise MalformedValueError(row, field, raw, source) from None
    if not math.isfinite(quantity):
        raise MalformedValueError(row, field, raw, source)
    return quantity


def parse_last_sold(raw: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD date permissively; anything else is absent."""
    if not raw:
        return None
    try:
        return datetime.strptime(raw.strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


def parse_barcodes(raw: Optional[str]) -> list[Ean13]:
    """
    Split a comma-joined barcode field and repair each token.

    Tokens the codec rejects are dropped. Order is preserved.
    """
    barcodes = []
    if not raw:
        return barcodes
    for token in raw.split(","):
        code = repair_or_reject(token)
        if code is None:
            if token.strip():
                logger.debug(f"Dropped unrepairable barcode token {token.strip()!r}")
            continue
        barcodes.append(code)
    return barcodes


def _parse_item_row(
    row: Row,
    row_num: int,
    columns: ItemColumns,
    source: Optional[str],
) -> CatalogProduct:
    sku = _cell(row, columns.sku)
    if sku is None or not sku.strip():
        raise MissingFieldError(row_num, "sku", source)

    fields = {
        "sku": sku.strip(),
        "description": _cell(row, columns.description),
        "barcodes": parse_barcodes(_cell(row, columns.barcodes)),
    }
    if fields["description"] is not None:
        fields["description"] = fields["description"].strip()

    list_raw = _cell(row, columns.list_price)
    if list_raw is not None:
        fields["list_price"] = parse_currency(list_raw, row_num, "list_price", source)

    cost_raw = _cell(row, columns.cost)
    if cost_raw is not None:
        fields["cost"] = parse_currency(cost_raw, row_num, "cost", source)

    weight_raw = _cell(row, columns.weight)
    if weight_raw is not None:
        fields["weight"] = parse_quantity(weight_raw, row_num, "weight", source)

    # Stock comes from the posted file; items never posted hold none
    fields["stock"] = 0.0

    try:
        return CatalogProduct.from_fields(**fields)
    except IncompleteRecordError as e:
        raise MissingFieldError(row_num, e.field, source) from e


def parse_item_rows(
    rows: list[Row],
    columns: Optional[ItemColumns] = None,
    source: Optional[str] = None,
) -> dict[str, CatalogProduct]:
    """
    Build catalog products from item rows.

    Row numbers in errors are 1-indexed. A sku seen twice keeps the
    later row.
    """
    columns = columns or ItemColumns()
    products: dict[str, CatalogProduct] = {}

    for row_num, row in enumerate(rows, start=1):
        if _is_blank(row):
            continue
        product = _parse_item_row(row, row_num, columns, source)
        if product.sku in products:
            logger.warning(f"Duplicate sku {product.sku} at row {row_num}, keeping the later row")
        products[product.sku] = product

    logger.debug(f"Parsed {len(products)} item records")
    return products


def merge_posted_rows(
    products: dict[str, CatalogProduct],
    rows: list[Row],
    columns: Optional[PostedColumns] = None,
    source: Optional[str] = None,
) -> dict[str, CatalogProduct]:
    """
    Merge stock and last-sold data into the item records.

    Every posted row must reference an existing item sku exactly. Merged
    records are re-keyed by their upper-cased sku; a sku posted twice
    keeps the later row.

    Raises:
        MissingBaseRecordError: no item record has the posted sku
        SkuCollisionError: the upper-cased sku belongs to another item record
    """
    columns = columns or PostedColumns()
    pending = dict(products)
    merged: dict[str, CatalogProduct] = {}
    # upper-cased key -> item sku it was merged from
    origins: dict[str, str] = {}

    for row_num, row in enumerate(rows, start=1):
        if _is_blank(row):
            continue

        sku = _cell(row, columns.sku)
        if sku is None or not sku.strip():
            raise MissingFieldError(row_num, "sku", source)
        sku = sku.strip()

        stock_raw = _cell(row, columns.stock)
        if stock_raw is None:
            raise MissingFieldError(row_num, "stock", source)

        key = sku.upper()
        if sku in pending:
            if key in origins:
                raise SkuCollisionError(sku, origins[key], row_num, source)
            if key != sku and key in pending:
                raise SkuCollisionError(sku, key, row_num, source)
            base = pending.pop(sku)
        elif origins.get(key) == sku:
            base = merged.pop(key)
        else:
            raise MissingBaseRecordError(sku, row_num, source)

        stock = parse_quantity(stock_raw, row_num, "stock", source)
        last_sold = parse_last_sold(_cell(row, columns.last_sold))
        merged[key] = base.merge_posted(stock, last_sold)
        origins[key] = sku

    merged.update(pending)
    return merged


def ingest(
    item_rows: list[Row],
    posted_rows: list[Row],
    config: Optional[Config] = None,
    item_source: Optional[str] = None,
    posted_source: Optional[str] = None,
) -> Catalog:
    """
    Merge item and posted rows into a Catalog.

    Raises:
        MissingFieldError: a required column is absent at a row
        MalformedValueError: a price or quantity cannot be parsed
        MissingBaseRecordError: a posted row has no matching item row
        SkuCollisionError: two item skus differ only by case and one is posted
    """
    config = config or Config()
    products = parse_item_rows(item_rows, config.item_columns, item_source)
    products = merge_posted_rows(products, posted_rows, config.posted_columns, posted_source)
    return Catalog(products=products)


def load_catalog(
    item_path: str | Path,
    posted_path: str | Path,
    config: Optional[Config] = None,
) -> Catalog:
    """Read both legacy files and ingest them into a Catalog."""
    config = config or Config()
    item_path = Path(item_path)
    posted_path = Path(posted_path)

    item_rows = read_rows(item_path, config.encoding)
    posted_rows = read_rows(posted_path, config.encoding)

    catalog = ingest(
        item_rows,
        posted_rows,
        config,
        item_source=item_path.name,
        posted_source=posted_path.name,
    )
    logger.info(f"Loaded {len(catalog)} catalog products from {item_path.name} and {posted_path.name}")
    return catalog
