"""
Vendor Matcher - Core classification engine.

Cross-references each vendor product against the catalog by barcode.

Decision Matrix:
| Barcode in index? | Cost/retail within policy? | Result       |
|-------------------|----------------------------|--------------|
| ✗                 | -                          | NEW          |
| ✓                 | ✗                          | NEEDS_REVIEW |
| ✓                 | ✓                          | MATCHED      |

DUPLICATE is reported separately: it is a scan of the index for
barcodes shared across skus, not a per-vendor-item result.
"""

import logging
from typing import Optional

from .config import PricePolicy
from .index import BarcodeIndex
from .models import CatalogProduct, Disposition, MatchResult, Reconciliation, VendorProduct

logger = logging.getLogger(__name__)


def classify(
    vendor_products: list[VendorProduct],
    index: BarcodeIndex,
    policy: Optional[PricePolicy] = None,
) -> Reconciliation:
    """
    Partition vendor products by disposition.

    Args:
        vendor_products: Items from the vendor export
        index: Barcode index over the catalog
        policy: Price-delta policy (defaults to PricePolicy())

    Returns:
        Reconciliation with duplicates, new, needs_review and matched.
        Every vendor product lands in exactly one of the last three.
    """
    policy = policy or PricePolicy()
    reconciliation = Reconciliation(duplicates=index.duplicate_groups())

    for product in vendor_products:
        result = classify_one(product, index, policy)
        if result.disposition == Disposition.NEW:
            reconciliation.new.append(result)
        elif result.disposition == Disposition.NEEDS_REVIEW:
            reconciliation.needs_review.append(result)
        else:
            reconciliation.matched.append(result)

    logger.info(
        f"Classified {len(vendor_products)} vendor products: "
        f"{len(reconciliation.new)} new, {len(reconciliation.needs_review)} to review, "
        f"{len(reconciliation.matched)} matched"
    )
    return reconciliation


def classify_one(product: VendorProduct, index: BarcodeIndex, policy: PricePolicy) -> MatchResult:
    """Classify a single vendor product against the index."""
    catalog_product = index.representative(product.upc)
    if catalog_product is None:
        return MatchResult(
            vendor_product=product,
            disposition=Disposition.NEW,
            reason="Barcode not found in catalog",
        )

    drift = price_drift(catalog_product, product, policy)
    if drift:
        return MatchResult(
            vendor_product=product,
            disposition=Disposition.NEEDS_REVIEW,
            reason="; ".join(drift),
            catalog_product=catalog_product,
        )

    return MatchResult(
        vendor_product=product,
        disposition=Disposition.MATCHED,
        reason=f"Barcode matches {catalog_product.sku}",
        catalog_product=catalog_product,
    )


def price_drift(catalog: CatalogProduct, vendor: VendorProduct, policy: PricePolicy) -> list[str]:
    """
    Describe every price that moved beyond policy.

    Cost is always compared; list price only when the vendor supplies a
    retail price.
    """
    drift = []
    if policy.exceeds(catalog.cost, vendor.cost):
        drift.append(f"cost {catalog.cost} -> {vendor.cost}")
    if vendor.retail is not None and policy.exceeds(catalog.list_price, vendor.retail):
        drift.append(f"list {catalog.list_price} -> {vendor.retail}")
    return drift


def summarize(reconciliation: Reconciliation) -> dict:
    """Generate summary counts for a reconciliation."""
    counts = {
        "total": reconciliation.classified_count,
        "duplicates": len(reconciliation.duplicates),
        "new": len(reconciliation.new),
        "needs_review": len(reconciliation.needs_review),
        "matched": len(reconciliation.matched),
    }
    counts["actionable"] = counts["new"] + counts["needs_review"]
    return counts
