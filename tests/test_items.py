"""Tests for sale item extraction."""

import pytest

from moloja.printing.items import (
    DEFAULT_ITEM_NAME,
    ItemsShape,
    LineItem,
    classify_items,
    extract_items,
    normalize_entry,
)


class TestClassifyItems:
    def test_cart_entries(self):
        shape, entries = classify_items({"items": [{"name": "a"}]})
        assert shape is ItemsShape.CART_ENTRIES
        assert len(entries) == 1

    def test_products_wrapper(self):
        shape, _ = classify_items({"items": {"products": [{"name": "a"}]}})
        assert shape is ItemsShape.PRODUCTS_WRAPPER

    def test_legacy_products_when_items_is_a_count(self):
        shape, _ = classify_items({"items": 3, "products": [{"name": "a"}]})
        assert shape is ItemsShape.LEGACY_PRODUCTS

    def test_items_list_wins_over_legacy_products(self):
        shape, entries = classify_items({
            "items": [{"name": "novo"}],
            "products": [{"name": "antigo"}],
        })
        assert shape is ItemsShape.CART_ENTRIES
        assert entries[0]["name"] == "novo"

    @pytest.mark.parametrize("sale", [
        {"items": 5},
        {"items": None},
        {"items": "Pão"},
        {"items": {"count": 2}},
        {},
    ])
    def test_unsupported(self, sale):
        shape, entries = classify_items(sale)
        assert shape is ItemsShape.UNSUPPORTED
        assert list(entries) == []


class TestNormalizeEntry:
    def test_nested_product(self):
        item = normalize_entry({"product": {"name": "Pão", "price": 500}, "quantity": 2})
        assert item == LineItem("Pão", 500.0, 2)
        assert item.line_total == 1000.0

    def test_flat_product_name(self):
        item = normalize_entry({"productName": "Leite", "price": "350,50", "quantity": "3"})
        assert item == LineItem("Leite", 350.5, 3)

    def test_snake_case_product_name(self):
        item = normalize_entry({"product_name": "Água", "price": 100})
        assert item.name == "Água"
        assert item.quantity == 1

    def test_plain_product(self):
        assert normalize_entry({"name": "Ovos", "price": 80}) == LineItem("Ovos", 80.0, 1)

    def test_missing_name_uses_default(self):
        assert normalize_entry({"price": 10}).name == DEFAULT_ITEM_NAME
        assert normalize_entry({"name": "   "}).name == DEFAULT_ITEM_NAME

    @pytest.mark.parametrize("price,quantity,expected", [
        (-5, 2, (0.0, 2)),
        ("abc", 0, (0.0, 1)),
        (None, -4, (0.0, 1)),
        (12.5, "2", (12.5, 2)),
    ])
    def test_price_and_quantity_floors(self, price, quantity, expected):
        item = normalize_entry({"name": "x", "price": price, "quantity": quantity})
        assert (item.unit_price, item.quantity) == expected

    def test_as_tuple(self):
        assert LineItem("Pão", 500.0, 2).as_tuple() == ("Pão", 2, 500.0, 1000.0)


class TestExtractItems:
    def test_minimal_sale(self, minimal_sale):
        assert extract_items(minimal_sale) == [LineItem("Pão", 500.0, 2)]

    def test_order_is_preserved(self, sale_factory):
        items = extract_items(sale_factory(5))
        assert [i.name for i in items] == [f"Produto {i}" for i in range(5)]

    def test_products_wrapper(self):
        sale = {"items": {"products": [{"name": "Sumo", "price": 250, "quantity": 4}]}}
        assert extract_items(sale) == [LineItem("Sumo", 250.0, 4)]

    def test_legacy_products(self):
        sale = {"items": 2, "products": [{"name": "Arroz", "price": 900}, {"name": "Feijão", "price": 700}]}
        assert [i.name for i in extract_items(sale)] == ["Arroz", "Feijão"]

    def test_bare_count_gives_no_items(self):
        assert extract_items({"items": 5}) == []

    def test_malformed_entries_are_skipped(self):
        sale = {"items": [None, "Pão", 3, {"name": "Ovos", "price": 80}]}
        assert extract_items(sale) == [LineItem("Ovos", 80.0, 1)]

    def test_input_is_not_modified(self, minimal_sale, frozen):
        extract_items(minimal_sale)
        assert minimal_sale == frozen
