"""
Configuration for UPC cross-referencing.

Handles the price-delta policy, the fixed column layouts of the legacy
export, the field map of the inventory edit screen and the fix-up
failure policy. Config is declarative JSON - edit the file, not the code.
"""

import json
import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

from .errors import ConfigError, FileIOError

DEFAULT_CONFIG_PATH = Path(__file__).parent / "crossref_config.json"
CONFIG_ENV_VAR = "UPC_CROSSREF_CONFIG"

FAILURE_POLICIES = ("continue", "abort")


@dataclass
class PricePolicy:
    """
    Relative-or-absolute tolerance for price deltas.

    A pair is within policy when the delta is no larger than the greater
    of the absolute tolerance and the percentage of the catalog price.
    """
    tolerance_percent: Decimal = Decimal("50")
    tolerance_absolute: Decimal = Decimal("1.00")

    def threshold(self, catalog_price: Decimal) -> Decimal:
        relative = abs(catalog_price) * self.tolerance_percent / Decimal(100)
        return max(self.tolerance_absolute, relative)

    def exceeds(self, catalog_price: Decimal, vendor_price: Decimal) -> bool:
        """Return True if vendor_price moved beyond the threshold."""
        return abs(vendor_price - catalog_price) > self.threshold(catalog_price)


@dataclass
class ItemColumns:
    """0-indexed columns of the legacy item file."""
    sku: int = 0
    description: int = 1
    list_price: int = 6
    cost: int = 8
    barcodes: int = 43
    weight: int = 45


@dataclass
class PostedColumns:
    """0-indexed columns of the legacy posted file."""
    sku: int = 0
    last_sold: int = 1
    stock: int = 19


@dataclass
class EditFields:
    """Field indices on the inventory edit screen."""
    weight: int = 15
    retail: int = 25
    cost: int = 26
    alt_sku_slots: tuple[int, ...] = (35, 36, 37)
    group: int = 39
    group_marker: str = "Z"


@dataclass
class ReportFiles:
    duplicates: str = "duplicate_products.txt"
    new: str = "new_products.txt"
    needs_review: str = "double_check.txt"
    matched: str = "matched_products.txt"


@dataclass
class Config:
    """Full configuration for a cross-reference run."""
    price_policy: PricePolicy = field(default_factory=PricePolicy)
    item_columns: ItemColumns = field(default_factory=ItemColumns)
    posted_columns: PostedColumns = field(default_factory=PostedColumns)
    edit_fields: EditFields = field(default_factory=EditFields)
    reports: ReportFiles = field(default_factory=ReportFiles)
    on_fixup_failure: str = "continue"
    encoding: str = "utf-8"

    def __post_init__(self):
        if self.on_fixup_failure not in FAILURE_POLICIES:
            raise ConfigError(
                f"on_fixup_failure must be one of {FAILURE_POLICIES}, got {self.on_fixup_failure!r}"
            )

    @property
    def abort_on_failure(self) -> bool:
        return self.on_fixup_failure == "abort"


def _decimal(value, name: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ConfigError(f"{name} must be numeric, got {value!r}") from None
    if not amount.is_finite():
        raise ConfigError(f"{name} must be a finite number, got {value!r}")
    return amount


def _section(data: dict, name: str, cls):
    """Build a section dataclass, rejecting keys it does not define."""
    values = data.get(name, {})
    known = cls.__dataclass_fields__
    unknown = sorted(set(values) - set(known))
    if unknown:
        raise ConfigError(f"Unknown keys in '{name}': {unknown}")
    return cls(**values)


def load_config(config_path: Optional[str | Path] = None) -> Config:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to config JSON. Falls back to the
            UPC_CROSSREF_CONFIG environment variable, then the shipped
            crossref_config.json.

    Returns:
        Config object with policy, layouts, edit fields and reports
    """
    path = Path(config_path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except OSError as e:
        raise FileIOError(path, e.strerror or str(e)) from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    policy_data = data.get("price_policy", {})
    price_policy = PricePolicy(
        tolerance_percent=_decimal(policy_data.get("tolerance_percent", 50), "tolerance_percent"),
        tolerance_absolute=_decimal(policy_data.get("tolerance_absolute", "1.00"), "tolerance_absolute"),
    )

    edit_data = dict(data.get("edit_fields", {}))
    if "alt_sku_slots" in edit_data:
        edit_data["alt_sku_slots"] = tuple(edit_data["alt_sku_slots"])

    return Config(
        price_policy=price_policy,
        item_columns=_section(data, "item_columns", ItemColumns),
        posted_columns=_section(data, "posted_columns", PostedColumns),
        edit_fields=_section({"edit_fields": edit_data}, "edit_fields", EditFields),
        reports=_section(data, "reports", ReportFiles),
        on_fixup_failure=data.get("on_fixup_failure", "continue"),
        encoding=data.get("encoding", "utf-8"),
    )
