"""
Shared fixtures for the upc_crossref test suite.

Provides:
- Line builders for the fixed-column legacy files
- Factories for catalog and vendor products
"""
from decimal import Decimal
from pathlib import Path
from typing import Optional

import pytest

from upc_crossref.barcode import Ean13
from upc_crossref.models import Catalog, CatalogProduct, VendorProduct


# ---------------------------------------------------------------------------
# Legacy file builders
# ---------------------------------------------------------------------------

def _fixed_columns(values: dict[int, str], width: int) -> str:
    cells = [""] * width
    for index, value in values.items():
        if index < width:
            cells[index] = value
    return "\t".join(cells)


@pytest.fixture
def item_line():
    """Build one item-file line with the default column layout."""
    def _make(
        sku: str,
        description: str = "Widget",
        list_price: str = "12.00",
        cost: str = "8.00",
        barcodes: str = "",
        weight: str = "1.5",
        width: int = 46,
    ) -> str:
        return _fixed_columns(
            {0: sku, 1: description, 6: list_price, 8: cost, 43: barcodes, 45: weight},
            width,
        )
    return _make


@pytest.fixture
def posted_line():
    """Build one posted-file line with the default column layout."""
    def _make(sku: str, last_sold: str = "2024-01-10", stock: str = "5", width: int = 20) -> str:
        return _fixed_columns({0: sku, 1: last_sold, 19: stock}, width)
    return _make


@pytest.fixture
def write_lines(tmp_path):
    """Write lines to a file under tmp_path and return its path."""
    def _write(name: str, lines: list[str]) -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write


def rows_of(lines: list[str]) -> list[list[str]]:
    return [line.split("\t") if line else [] for line in lines]


@pytest.fixture
def to_rows():
    """Split lines into raw rows the way read_rows does."""
    return rows_of


# ---------------------------------------------------------------------------
# Product factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_product():
    def _make(
        sku: str,
        barcodes: tuple[str, ...] = (),
        cost: str = "8.00",
        list_price: str = "12.00",
        description: Optional[str] = None,
    ) -> CatalogProduct:
        return CatalogProduct(
            sku=sku,
            description=description or f"Product {sku}",
            list_price=Decimal(list_price),
            cost=Decimal(cost),
            stock=5.0,
            weight=1.5,
            barcodes=tuple(Ean13(code) for code in barcodes),
        )
    return _make


@pytest.fixture
def make_vendor():
    def _make(
        sku: str,
        upc: str,
        cost: str = "8.00",
        retail: Optional[str] = None,
        weight: Optional[float] = None,
        description: str = "Vendor item",
    ) -> VendorProduct:
        return VendorProduct(
            sku=sku,
            upc=Ean13(upc),
            description=description,
            cost=Decimal(cost),
            weight=weight,
            retail=Decimal(retail) if retail is not None else None,
        )
    return _make


@pytest.fixture
def make_catalog():
    def _make(*products: CatalogProduct) -> Catalog:
        return Catalog(products={p.sku: p for p in products})
    return _make
