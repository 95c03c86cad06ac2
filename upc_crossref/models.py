"""
Data models for UPC cross-referencing.

All structured data uses dataclasses for type hints, __eq__, and __repr__.
Money values use Decimal for precision; quantities and weights are floats.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterator, Optional

from .barcode import Ean13
from .errors import IncompleteRecordError


class Disposition(Enum):
    """
    Outcome of cross-referencing one vendor product against the catalog.

    DUPLICATE is a catalog-level report (barcodes shared across skus);
    every vendor product lands in exactly one of the other three.
    """
    DUPLICATE = "DUPLICATE"        # Barcode shared by catalog products with different skus
    NEW = "NEW"                    # Barcode not in the catalog - enter manually
    NEEDS_REVIEW = "NEEDS_REVIEW"  # Barcode matched but price moved beyond policy
    MATCHED = "MATCHED"            # Barcode matched, prices within policy - safe to fix up


CATALOG_REQUIRED_FIELDS = ("sku", "description", "list_price", "cost", "stock", "weight")


@dataclass(frozen=True)
class CatalogProduct:
    """
    A single inventory record built from the legacy item and posted files.

    Barcode order is meaningful: the last barcode is the primary one.
    """
    sku: str
    description: str
    list_price: Decimal
    cost: Decimal
    stock: float
    weight: float
    barcodes: tuple[Ean13, ...] = ()
    last_sold: Optional[date] = None

    @classmethod
    def from_fields(cls, **fields) -> "CatalogProduct":
        """
        Build a product, validating every required attribute at once.

        Raises IncompleteRecordError naming the first missing field.
        Barcodes may be empty; last_sold defaults to absent.
        """
        for name in CATALOG_REQUIRED_FIELDS:
            if fields.get(name) is None:
                raise IncompleteRecordError(name)
        fields["barcodes"] = tuple(fields.get("barcodes") or ())
        return cls(**fields)

    def merge_posted(self, stock: float, last_sold: Optional[date]) -> "CatalogProduct":
        """Return a copy with posted data applied and the sku upper-cased."""
        return replace(self, sku=self.sku.upper(), stock=stock, last_sold=last_sold)

    @property
    def primary_barcode(self) -> Optional[Ean13]:
        return self.barcodes[-1] if self.barcodes else None


@dataclass(frozen=True)
class VendorProduct:
    """A single item from a vendor export. The vendor is the source of truth."""
    sku: str
    upc: Ean13
    description: str
    cost: Decimal
    weight: Optional[float] = None
    retail: Optional[Decimal] = None


@dataclass
class Catalog:
    """Reconciled set of catalog products keyed by sku. Read-only once built."""
    products: dict[str, CatalogProduct] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.products)

    def __iter__(self) -> Iterator[CatalogProduct]:
        return iter(self.products.values())

    def __contains__(self, sku: str) -> bool:
        return sku in self.products

    def get(self, sku: str) -> Optional[CatalogProduct]:
        return self.products.get(sku)


# Catalog products that share one barcode value across different skus
DuplicateGroup = tuple[CatalogProduct, ...]


@dataclass(frozen=True)
class DuplicateReport:
    """One barcode and every catalog product that claims it."""
    barcode: Ean13
    products: DuplicateGroup

    @property
    def skus(self) -> list[str]:
        return [p.sku for p in self.products]


@dataclass(frozen=True)
class MatchResult:
    """
    Output of the classifier for a single vendor product.

    catalog_product is the index representative for NEEDS_REVIEW and
    MATCHED results and None for NEW.
    """
    vendor_product: VendorProduct
    disposition: Disposition
    reason: str = ""
    catalog_product: Optional[CatalogProduct] = None


@dataclass
class Reconciliation:
    """The four output partitions of one reconciliation run."""
    duplicates: list[DuplicateReport] = field(default_factory=list)
    new: list[MatchResult] = field(default_factory=list)
    needs_review: list[MatchResult] = field(default_factory=list)
    matched: list[MatchResult] = field(default_factory=list)

    @property
    def classified_count(self) -> int:
        return len(self.new) + len(self.needs_review) + len(self.matched)

    def results(self) -> list[MatchResult]:
        """All per-vendor results, in partition order."""
        return [*self.new, *self.needs_review, *self.matched]
