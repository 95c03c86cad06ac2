"""
Barcode Index - Barcode lookups over the catalog.

A barcode is not a unique key: legacy data lets two skus claim the same
code. The index is built once per run by folding over the catalog in
ascending sku order and records, per barcode:
- representative: the most recently folded product (the highest sku)
- group: every product with a different sku that claims the barcode
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .barcode import Ean13
from .models import Catalog, CatalogProduct, DuplicateGroup, DuplicateReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexEntry:
    """What the index knows about one barcode."""
    representative: CatalogProduct
    group: DuplicateGroup = ()

    @property
    def is_duplicate(self) -> bool:
        return bool(self.group)


@dataclass(frozen=True)
class BarcodeIndex:
    """
    Indexed catalog for barcode lookups. Immutable for a run; rebuild it
    if the catalog changes.

    Attributes:
        entries: Dict mapping barcode -> IndexEntry
        product_count: Number of catalog products folded in
    """
    entries: dict[Ean13, IndexEntry] = field(default_factory=dict)
    product_count: int = 0

    def lookup(self, barcode: Ean13) -> Optional[IndexEntry]:
        """Look up the entry for a barcode."""
        return self.entries.get(barcode)

    def representative(self, barcode: Ean13) -> Optional[CatalogProduct]:
        entry = self.entries.get(barcode)
        return entry.representative if entry else None

    def duplicate_groups(self) -> list[DuplicateReport]:
        """Every barcode claimed by more than one sku, ordered by barcode."""
        return [
            DuplicateReport(barcode=code, products=entry.group)
            for code, entry in sorted(self.entries.items())
            if entry.is_duplicate
        ]


def _add_to_group(group: DuplicateGroup, *products: CatalogProduct) -> DuplicateGroup:
    """Return group with products added once each, ordered by sku."""
    by_sku = {p.sku: p for p in group}
    for product in products:
        by_sku.setdefault(product.sku, product)
    return tuple(by_sku[sku] for sku in sorted(by_sku))


def fold_barcodes(
    products: Iterable[CatalogProduct],
) -> tuple[dict[Ean13, CatalogProduct], dict[Ean13, DuplicateGroup]]:
    """
    Fold products into (representatives, duplicates).

    Each incoming product becomes the representative of its barcodes.
    A barcode already held by a different sku records both products in
    its duplicate group; the same sku claiming a barcode again does not.
    """
    representatives: dict[Ean13, CatalogProduct] = {}
    duplicates: dict[Ean13, DuplicateGroup] = {}

    for product in products:
        for code in product.barcodes:
            previous = representatives.get(code)
            if previous is not None and previous.sku != product.sku:
                duplicates[code] = _add_to_group(duplicates.get(code, ()), product, previous)
            representatives[code] = product

    return representatives, duplicates


def build_index(catalog: Catalog) -> BarcodeIndex:
    """
    Build the barcode index for a catalog.

    Args:
        catalog: Catalog from the catalog loader

    Returns:
        BarcodeIndex with a representative and duplicate group per barcode
    """
    ordered = sorted(catalog, key=lambda p: p.sku)
    representatives, duplicates = fold_barcodes(ordered)

    entries = {
        code: IndexEntry(representative=product, group=duplicates.get(code, ()))
        for code, product in representatives.items()
    }

    if duplicates:
        logger.info(f"Found {len(duplicates)} barcodes shared across skus")
    return BarcodeIndex(entries=entries, product_count=len(ordered))
