"""
Fix-ups - Corrective writes for matched catalog records.

Each fixer drives the edit screen for one concern. They run in a fixed
order per item, and an item's sequence runs to completion (or to its
first failure) before the next item starts.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from .config import Config, EditFields
from .edit_port import EditSession, InventoryEditPort
from .errors import AutomationError, FixupError
from .models import CatalogProduct, MatchResult, VendorProduct

logger = logging.getLogger(__name__)


def fix_upc(session: EditSession, catalog: CatalogProduct, vendor: VendorProduct, fields: EditFields):
    """
    Reorder barcodes so the vendor's barcode is the primary (last) one.

    Clears every barcode, re-adds the catalog's other barcodes in their
    original order, then adds the vendor's.
    """
    session.clear_barcodes()
    for code in catalog.barcodes:
        if code != vendor.upc:
            session.add_barcode(code)
    session.add_barcode(vendor.upc)


def fix_weight(session: EditSession, catalog: CatalogProduct, vendor: VendorProduct, fields: EditFields):
    if vendor.weight is not None:
        session.write_field(fields.weight, str(vendor.weight))


def fix_cost(session: EditSession, catalog: CatalogProduct, vendor: VendorProduct, fields: EditFields):
    session.write_field(fields.cost, str(vendor.cost))


def fix_retail(session: EditSession, catalog: CatalogProduct, vendor: VendorProduct, fields: EditFields):
    if vendor.retail is not None:
        session.write_field(fields.retail, str(vendor.retail))


def fix_group(session: EditSession, catalog: CatalogProduct, vendor: VendorProduct, fields: EditFields):
    session.write_field(fields.group, fields.group_marker)


def fix_alt_sku(session: EditSession, catalog: CatalogProduct, vendor: VendorProduct, fields: EditFields):
    """
    Write the vendor sku into the first empty alternate-sku slot.

    No-op when every slot is taken or a slot already holds the vendor sku.
    """
    for slot in fields.alt_sku_slots:
        current = session.read_field(slot)
        if current.strip() == vendor.sku:
            return
        if not current:
            session.write_field(slot, vendor.sku)
            return
    logger.debug(f"{catalog.sku}: no free alternate-sku slot for {vendor.sku}")


Fixer = Callable[[EditSession, CatalogProduct, VendorProduct, EditFields], None]

FIXUP_STEPS: list[tuple[str, Fixer]] = [
    ("barcodes", fix_upc),
    ("weight", fix_weight),
    ("cost", fix_cost),
    ("retail", fix_retail),
    ("group", fix_group),
    ("alt_sku", fix_alt_sku),
]


def apply_fixups(session: EditSession, result: MatchResult, fields: EditFields) -> None:
    """
    Run every fix-up step for one matched item.

    Raises:
        FixupError: naming the item's sku and the step that failed; the
            remaining steps for the item are not run
    """
    catalog = result.catalog_product
    vendor = result.vendor_product
    if catalog is None:
        raise ValueError(f"{vendor.sku} has no catalog record to fix")

    try:
        session.open_item(catalog.sku)
    except AutomationError as e:
        raise FixupError(catalog.sku, "open", e) from e

    for step, fixer in FIXUP_STEPS:
        try:
            fixer(session, catalog, vendor, fields)
        except AutomationError as e:
            raise FixupError(catalog.sku, step, e) from e


@dataclass
class FixupFailure:
    result: MatchResult
    error: FixupError


@dataclass
class FixupOutcome:
    """What happened to each matched item during a fix-up batch."""
    fixed: list[MatchResult] = field(default_factory=list)
    failed: list[FixupFailure] = field(default_factory=list)
    skipped: list[MatchResult] = field(default_factory=list)


def run_fixups(
    matched: list[MatchResult],
    port: InventoryEditPort,
    config: Optional[Config] = None,
) -> FixupOutcome:
    """
    Apply fix-ups to matched items one at a time through a single session.

    On failure the item is recorded and, under the "continue" policy, the
    batch moves on; under "abort" the remaining items are skipped.
    """
    config = config or Config()
    outcome = FixupOutcome()

    with EditSession(port) as session:
        for position, result in enumerate(matched):
            try:
                apply_fixups(session, result, config.edit_fields)
            except FixupError as e:
                logger.error(str(e))
                outcome.failed.append(FixupFailure(result=result, error=e))
                if config.abort_on_failure:
                    outcome.skipped.extend(matched[position + 1:])
                    logger.warning(f"Aborting fix-ups, {len(outcome.skipped)} items skipped")
                    break
                continue
            outcome.fixed.append(result)

    logger.info(
        f"Fix-ups: {len(outcome.fixed)} fixed, {len(outcome.failed)} failed, "
        f"{len(outcome.skipped)} skipped"
    )
    return outcome
