"""
Tests for edit ports, edit sessions and the fix-up sequence.

Run with: pytest upc_crossref/tests/test_fixers.py -v
"""

import pytest

from upc_crossref.config import Config, EditFields
from upc_crossref.edit_port import DryRunEditPort, EditSession, InMemoryEditPort, ScreenRecord
from upc_crossref.errors import FixupError, SessionBusyError
from upc_crossref.fixers import FIXUP_STEPS, apply_fixups, run_fixups
from upc_crossref.models import Disposition, MatchResult

# Valid EAN-13 codes
UPC_A = "0123456789012"
UPC_B = "4006381333931"
UPC_C = "5901234123457"


@pytest.fixture
def fields():
    return EditFields()


@pytest.fixture
def match(make_product, make_vendor):
    """SKU1 carries UPC_A then UPC_B; the vendor says UPC_A is primary."""
    def _make(sku="SKU1", vendor_sku="V-100", weight=2.25, retail="13.99"):
        return MatchResult(
            vendor_product=make_vendor(vendor_sku, UPC_A, cost="8.25", retail=retail, weight=weight),
            disposition=Disposition.MATCHED,
            catalog_product=make_product(sku, (UPC_A, UPC_B)),
        )
    return _make


class TestEditSession:
    def test_second_session_on_busy_port_fails(self):
        port = InMemoryEditPort()
        with EditSession(port):
            with pytest.raises(SessionBusyError):
                with EditSession(port):
                    pass

    def test_port_released_after_session(self):
        port = InMemoryEditPort()
        with EditSession(port):
            pass
        with EditSession(port) as session:
            session.open_item("SKU1")
        assert port.operations == [("SKU1", "open_item", "")]

    def test_closed_session_refuses_operations(self):
        session = EditSession(InMemoryEditPort())
        with pytest.raises(SessionBusyError):
            session.open_item("SKU1")


class TestApplyFixups:
    def test_full_sequence(self, match, fields):
        port = InMemoryEditPort()
        with EditSession(port) as session:
            apply_fixups(session, match(), fields)

        record = port.records["SKU1"]
        assert record.barcodes == [UPC_B, UPC_A]
        assert record.fields[15] == "2.25"
        assert record.fields[26] == "8.25"
        assert record.fields[25] == "13.99"
        assert record.fields[39] == "Z"
        assert record.fields[35] == "V-100"

    def test_vendor_barcode_added_last_even_if_new(self, make_product, make_vendor, fields):
        result = MatchResult(
            vendor_product=make_vendor("V-1", UPC_C),
            disposition=Disposition.MATCHED,
            catalog_product=make_product("SKU1", (UPC_A, UPC_B)),
        )
        port = InMemoryEditPort(records={"SKU1": ScreenRecord(barcodes=[UPC_A, UPC_B])})
        with EditSession(port) as session:
            apply_fixups(session, result, fields)
        assert port.records["SKU1"].barcodes == [UPC_A, UPC_B, UPC_C]

    def test_optional_fields_skipped(self, match, fields):
        port = InMemoryEditPort()
        with EditSession(port) as session:
            apply_fixups(session, match(weight=None, retail=None), fields)

        record = port.records["SKU1"]
        assert 15 not in record.fields
        assert 25 not in record.fields
        assert record.fields[26] == "8.25"

    def test_alt_sku_uses_first_empty_slot(self, match, fields):
        port = InMemoryEditPort(records={"SKU1": ScreenRecord(fields={35: "OLD-1"})})
        with EditSession(port) as session:
            apply_fixups(session, match(), fields)

        record = port.records["SKU1"]
        assert record.fields[35] == "OLD-1"
        assert record.fields[36] == "V-100"
        assert 37 not in record.fields

    def test_alt_sku_full_is_noop(self, match, fields):
        full = {35: "A", 36: "B", 37: "C"}
        port = InMemoryEditPort(records={"SKU1": ScreenRecord(fields=dict(full))})
        with EditSession(port) as session:
            apply_fixups(session, match(), fields)

        record = port.records["SKU1"]
        assert {i: record.fields[i] for i in (35, 36, 37)} == full

    def test_repeat_run_is_idempotent(self, match, fields):
        port = InMemoryEditPort()
        with EditSession(port) as session:
            apply_fixups(session, match(), fields)
        first = ScreenRecord(
            barcodes=list(port.records["SKU1"].barcodes),
            fields=dict(port.records["SKU1"].fields),
        )
        with EditSession(port) as session:
            apply_fixups(session, match(vendor_sku="V-100"), fields)

        assert port.records["SKU1"].barcodes == first.barcodes
        assert port.records["SKU1"].fields == first.fields
        assert 36 not in port.records["SKU1"].fields

    def test_failure_names_sku_and_step(self, match, fields):
        port = InMemoryEditPort(failures={("SKU1", "write_field")})
        with EditSession(port) as session:
            with pytest.raises(FixupError) as exc_info:
                apply_fixups(session, match(), fields)

        err = exc_info.value
        assert err.sku == "SKU1"
        assert err.step == "weight"
        # Barcodes were fixed before the failing step; nothing after it ran
        assert port.records["SKU1"].barcodes == [UPC_B, UPC_A]
        assert port.records["SKU1"].fields == {}

    def test_open_failure(self, match, fields):
        port = InMemoryEditPort(failures={("SKU1", "open_item")})
        with EditSession(port) as session:
            with pytest.raises(FixupError) as exc_info:
                apply_fixups(session, match(), fields)
        assert exc_info.value.step == "open"

    def test_step_order(self):
        assert [name for name, _ in FIXUP_STEPS] == [
            "barcodes", "weight", "cost", "retail", "group", "alt_sku",
        ]


class TestRunFixups:
    def test_continue_policy_processes_remaining_items(self, match):
        port = InMemoryEditPort(failures={("SKU2", "clear_barcodes")})
        items = [match("SKU1"), match("SKU2"), match("SKU3")]

        outcome = run_fixups(items, port, Config(on_fixup_failure="continue"))

        assert [r.catalog_product.sku for r in outcome.fixed] == ["SKU1", "SKU3"]
        assert [f.result.catalog_product.sku for f in outcome.failed] == ["SKU2"]
        assert outcome.failed[0].error.step == "barcodes"
        assert outcome.skipped == []
        # Earlier item untouched by the later failure
        assert port.records["SKU1"].fields[39] == "Z"

    def test_abort_policy_skips_remaining_items(self, match):
        port = InMemoryEditPort(failures={("SKU2", "clear_barcodes")})
        items = [match("SKU1"), match("SKU2"), match("SKU3")]

        outcome = run_fixups(items, port, Config(on_fixup_failure="abort"))

        assert [r.catalog_product.sku for r in outcome.fixed] == ["SKU1"]
        assert len(outcome.failed) == 1
        assert [r.catalog_product.sku for r in outcome.skipped] == ["SKU3"]
        assert "SKU3" not in port.records

    def test_items_never_interleave(self, match):
        port = InMemoryEditPort()
        run_fixups([match("SKU1"), match("SKU2")], port)

        skus = [sku for sku, _, _ in port.operations]
        boundary = skus.index("SKU2")
        assert set(skus[:boundary]) == {"SKU1"}
        assert set(skus[boundary:]) == {"SKU2"}

    def test_port_released_after_failure(self, match):
        port = InMemoryEditPort(failures={("SKU1", "open_item")})
        run_fixups([match("SKU1")], port, Config(on_fixup_failure="abort"))
        with EditSession(port):
            pass

    def test_dry_run_port(self, match):
        port = DryRunEditPort()
        outcome = run_fixups([match("SKU1")], port)
        assert len(outcome.fixed) == 1
        # open, clear, 2 barcodes, weight, cost, retail, group, alt sku
        assert port.operation_count == 9
