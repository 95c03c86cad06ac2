"""
Tests for the barcode index and duplicate detection.

Run with: pytest upc_crossref/tests/test_index.py -v
"""

from upc_crossref.barcode import Ean13
from upc_crossref.index import build_index, fold_barcodes
from upc_crossref.models import Catalog

# Valid EAN-13 codes
UPC_A = "0123456789012"
UPC_B = "4006381333931"
UPC_C = "5901234123457"


class TestBuildIndex:
    def test_lookup_by_barcode(self, make_product, make_catalog):
        index = build_index(make_catalog(make_product("SKU1", (UPC_A, UPC_B))))

        assert index.product_count == 1
        assert index.representative(Ean13(UPC_A)).sku == "SKU1"
        assert index.representative(Ean13(UPC_B)).sku == "SKU1"
        assert index.lookup(Ean13(UPC_C)) is None

    def test_empty_catalog(self):
        index = build_index(Catalog())
        assert index.product_count == 0
        assert index.entries == {}
        assert index.duplicate_groups() == []

    def test_product_without_barcodes(self, make_product, make_catalog):
        index = build_index(make_catalog(make_product("SKU1")))
        assert index.product_count == 1
        assert index.entries == {}


class TestDuplicateDetection:
    def test_shared_barcode_groups_both_skus(self, make_product, make_catalog):
        catalog = make_catalog(make_product("SKU1", (UPC_A,)), make_product("SKU2", (UPC_A,)))
        index = build_index(catalog)

        entry = index.lookup(Ean13(UPC_A))
        assert entry.is_duplicate
        assert [p.sku for p in entry.group] == ["SKU1", "SKU2"]

        reports = index.duplicate_groups()
        assert len(reports) == 1
        assert reports[0].barcode == Ean13(UPC_A)
        assert reports[0].skus == ["SKU1", "SKU2"]

    def test_detection_is_symmetric(self, make_product, make_catalog):
        a = make_product("SKU1", (UPC_A,))
        b = make_product("SKU2", (UPC_A,))

        forward = build_index(make_catalog(a, b)).lookup(Ean13(UPC_A))
        backward = build_index(make_catalog(b, a)).lookup(Ean13(UPC_A))

        assert {p.sku for p in forward.group} == {"SKU1", "SKU2"}
        assert forward == backward

    def test_representative_is_deterministic(self, make_product, make_catalog):
        a = make_product("SKU1", (UPC_A,))
        b = make_product("SKU2", (UPC_A,))

        assert build_index(make_catalog(a, b)).representative(Ean13(UPC_A)).sku == "SKU2"
        assert build_index(make_catalog(b, a)).representative(Ean13(UPC_A)).sku == "SKU2"

    def test_three_way_collision_lists_each_once(self, make_product, make_catalog):
        catalog = make_catalog(
            make_product("SKU3", (UPC_A,)),
            make_product("SKU1", (UPC_A,)),
            make_product("SKU2", (UPC_A,)),
        )
        entry = build_index(catalog).lookup(Ean13(UPC_A))
        assert [p.sku for p in entry.group] == ["SKU1", "SKU2", "SKU3"]

    def test_same_sku_repeated_barcode_not_duplicate(self, make_product, make_catalog):
        index = build_index(make_catalog(make_product("SKU1", (UPC_A, UPC_A))))
        assert not index.lookup(Ean13(UPC_A)).is_duplicate
        assert index.duplicate_groups() == []

    def test_unshared_barcodes_stay_clean(self, make_product, make_catalog):
        catalog = make_catalog(
            make_product("SKU1", (UPC_A, UPC_B)),
            make_product("SKU2", (UPC_B, UPC_C)),
        )
        index = build_index(catalog)
        assert not index.lookup(Ean13(UPC_A)).is_duplicate
        assert index.lookup(Ean13(UPC_B)).is_duplicate
        assert not index.lookup(Ean13(UPC_C)).is_duplicate


class TestFoldBarcodes:
    def test_returns_representatives_and_duplicates(self, make_product):
        a = make_product("SKU1", (UPC_A,))
        b = make_product("SKU2", (UPC_A, UPC_B))

        representatives, duplicates = fold_barcodes([a, b])

        assert representatives == {Ean13(UPC_A): b, Ean13(UPC_B): b}
        assert duplicates == {Ean13(UPC_A): (a, b)}
