"""
Unit tests for cart and wishlist reconciliation helpers
"""
import pytest

from urbansprout.utils.cart import (
    LARGE_DATA_PLACEHOLDER,
    cart_total,
    clean_gateway_notes,
    compute_order_totals,
    item_id,
    merge_cart_items,
    merge_wishlist_items,
    normalize_cart_items,
    normalize_wishlist_items,
)


class TestItemId:
    """Test product id extraction from the accepted item shapes"""

    @pytest.mark.parametrize("item", [
        {"product_id": "p1"},
        {"product": "p1"},
        {"productId": "p1"},
        {"id": "p1"},
        {"_id": "p1"},
        {"product": {"_id": "p1", "name": "Fern"}},
    ])
    def test_accepted_shapes(self, item):
        assert item_id(item) == "p1"

    def test_product_id_wins_over_other_keys(self):
        assert item_id({"product_id": "a", "id": "b"}) == "a"

    def test_missing_id(self):
        assert item_id({"quantity": 2}) is None


class TestNormalizeCartItems:

    def test_quantity_defaults_to_one(self):
        assert normalize_cart_items([{"id": "p1"}]) == [{"product_id": "p1", "quantity": 1}]

    def test_duplicates_are_summed(self):
        items = [{"id": "p1", "quantity": 2}, {"product": "p1", "quantity": 3}, {"id": "p2"}]
        assert normalize_cart_items(items) == [
            {"product_id": "p1", "quantity": 5},
            {"product_id": "p2", "quantity": 1},
        ]

    def test_entries_without_id_are_dropped(self):
        assert normalize_cart_items([{"quantity": 4}, {"id": "p1", "quantity": "2"}]) == [
            {"product_id": "p1", "quantity": 2}
        ]

    def test_invalid_quantity_becomes_one(self):
        assert normalize_cart_items([{"id": "p1", "quantity": "lots"}, {"id": "p2", "quantity": -3}]) == [
            {"product_id": "p1", "quantity": 1},
            {"product_id": "p2", "quantity": 1},
        ]


class TestNormalizeWishlistItems:

    def test_deduplicates_and_keeps_order(self):
        items = [{"id": "b"}, {"_id": "a"}, {"productId": "b"}]
        assert normalize_wishlist_items(items) == [{"product_id": "b"}, {"product_id": "a"}]


class TestMergeCartItems:
    """Guest cart merge on sign-in"""

    def test_quantities_are_summed(self):
        current = [{"product_id": "p1", "quantity": 2, "name": "Fern"}]
        guest = [{"id": "p1", "quantity": 3}]

        merged = merge_cart_items(current, guest)

        assert merged == [{"product_id": "p1", "quantity": 5, "name": "Fern"}]

    def test_new_products_are_appended_in_order(self):
        current = [{"product_id": "p1", "quantity": 1}]
        guest = [{"id": "p3"}, {"id": "p2", "quantity": 2}]

        merged = merge_cart_items(current, guest)

        assert [item_id(i) for i in merged] == ["p1", "p3", "p2"]
        assert merged[1]["quantity"] == 1
        assert merged[2]["quantity"] == 2

    def test_inputs_are_not_mutated(self):
        current = [{"product_id": "p1", "quantity": 1}]
        guest = [{"product_id": "p1", "quantity": 1}]

        merge_cart_items(current, guest)

        assert current == [{"product_id": "p1", "quantity": 1}]
        assert guest == [{"product_id": "p1", "quantity": 1}]

    def test_empty_guest_cart_keeps_current(self):
        current = [{"product_id": "p1", "quantity": 4}]
        assert merge_cart_items(current, []) == current


class TestMergeWishlistItems:

    def test_union_by_id(self):
        current = [{"product_id": "a"}, {"product_id": "b"}]
        guest = [{"id": "b"}, {"id": "c"}]

        merged = merge_wishlist_items(current, guest)

        assert [item_id(i) for i in merged] == ["a", "b", "c"]


class TestTotals:

    def test_cart_total(self):
        items = [{"price": 100.0, "quantity": 2}, {"price": 49.5, "quantity": 1}, {"quantity": 3}]
        assert cart_total(items) == pytest.approx(249.5)

    def test_wishlist_pricing_below_threshold(self):
        totals = compute_order_totals(40.0, tax_rate=0.08, shipping_fee=9.99, free_shipping_threshold=50.0)

        assert totals == {"subtotal": 40.0, "tax": 3.2, "shipping": 9.99, "total": 53.19}

    def test_free_shipping_above_threshold(self):
        totals = compute_order_totals(120.0, tax_rate=0.08, shipping_fee=9.99, free_shipping_threshold=50.0)

        assert totals["shipping"] == 0.0
        assert totals["total"] == pytest.approx(129.6)

    def test_shipping_charged_at_exact_threshold(self):
        totals = compute_order_totals(50.0, shipping_fee=9.99, free_shipping_threshold=50.0)
        assert totals["shipping"] == 9.99

    def test_checkout_defaults_charge_subtotal(self):
        assert compute_order_totals(1298.0)["total"] == 1298.0


class TestCleanGatewayNotes:
    """Razorpay note cleaning"""

    def test_long_strings_are_replaced(self):
        notes = {"image": "x" * 1001, "user": "asha@example.com"}

        cleaned = clean_gateway_notes(notes)

        assert cleaned == {"image": LARGE_DATA_PLACEHOLDER, "user": "asha@example.com"}

    def test_limit_is_inclusive(self):
        assert clean_gateway_notes({"note": "x" * 1000})["note"] == "x" * 1000

    def test_nested_values_are_cleaned(self):
        notes = {
            "shipping": {"address": "12 MG Road", "photo": "y" * 2000},
            "items": [{"name": "Fern", "image": "z" * 5000}, "short"],
        }

        cleaned = clean_gateway_notes(notes)

        assert cleaned["shipping"] == {"address": "12 MG Road", "photo": LARGE_DATA_PLACEHOLDER}
        assert cleaned["items"] == [{"name": "Fern", "image": LARGE_DATA_PLACEHOLDER}, "short"]

    def test_custom_limit(self):
        assert clean_gateway_notes({"a": "abcdef"}, limit=5) == {"a": LARGE_DATA_PLACEHOLDER}

    def test_none(self):
        assert clean_gateway_notes(None) == {}
