"""Tests for PDF height estimation."""

import pytest

from moloja.printing.config import ReceiptConfig, resolve_config
from moloja.printing.content import build_content
from moloja.printing.estimate import (
    BASE_ALLOWANCE,
    STANDARD_PAGE_HEIGHT,
    TOTALS_ALLOWANCE,
    estimate_height,
    item_height,
    page_height,
)
from moloja.printing.pdf import render_pdf

LONG_NAME = "abcdefg " * 9 + "abcdefgh"


def _single_item_sale(name):
    return {"id": "s1", "total": 10, "items": [{"name": name, "price": 10}]}


class TestEstimateHeight:
    def test_empty_sale_is_base_plus_totals(self):
        assert estimate_height({"items": []}) >= BASE_ALLOWANCE + TOTALS_ALLOWANCE

    def test_non_decreasing_in_item_count(self, sale_factory):
        heights = [estimate_height(sale_factory(n)) for n in range(0, 30)]
        assert heights == sorted(heights)
        assert heights[-1] > heights[0]

    @pytest.mark.parametrize("word", ["x", "ab ", "palavra "])
    def test_non_decreasing_in_name_length(self, word):
        heights = [estimate_height(_single_item_sale(word * k)) for k in range(1, 60)]
        assert heights == sorted(heights)

    def test_long_name_takes_more_room(self):
        short = estimate_height(_single_item_sale("abcdefgh"))
        long = estimate_height(_single_item_sale(LONG_NAME))
        assert long > short

    def test_item_height_counts_wrapped_lines(self):
        assert item_height(LONG_NAME) - item_height("abcdefgh") == pytest.approx(2 * 5.0)

    def test_profile_fields_add_lines(self, minimal_sale, full_profile):
        assert estimate_height(minimal_sale, full_profile) > estimate_height(minimal_sale)

    def test_accepts_resolved_config(self, minimal_sale):
        assert estimate_height(minimal_sale, ReceiptConfig()) == estimate_height(minimal_sale, None)

    def test_line_spacing_scales(self, sale_factory):
        sale = sale_factory(10)
        assert estimate_height(sale, line_spacing=6.0) > estimate_height(sale, line_spacing=5.0)


class TestPageHeight:
    def test_short_receipts_use_standard_page(self):
        assert page_height(120.0) == STANDARD_PAGE_HEIGHT

    def test_long_receipts_grow(self):
        assert page_height(400.2) == 411


def _logo(tmp_path):
    from PIL import Image

    path = tmp_path / "logo.png"
    Image.new("RGB", (120, 60), (200, 30, 30)).save(path)
    return str(path)


class TestEstimateCoversRenderedContent:
    @pytest.mark.parametrize("count", [0, 1, 20, 50])
    @pytest.mark.parametrize("name", ["Pão", LONG_NAME, "x" * 200, "Sabão em pó " * 12])
    def test_default_profile(self, sale_factory, count, name):
        config = ReceiptConfig()
        content = build_content(sale_factory(count, name=name), config)
        receipt = render_pdf(content, config)
        assert receipt.consumed_height <= receipt.estimated_height
        assert receipt.height >= receipt.consumed_height

    @pytest.mark.parametrize("count", [0, 1, 20, 50])
    def test_full_profile_with_logo(self, sale_factory, full_profile, tmp_path, count):
        full_profile.update(receipt_show_logo=True, receipt_logo=_logo(tmp_path))
        config = resolve_config(full_profile)
        sale = sale_factory(
            count,
            name="Arroz agulha extra longo " * 4,
            customer={"name": "Cliente com um nome muito comprido " * 3, "nif": "0" * 50},
            amountPaid=999999,
            notes="Entregar na portaria do prédio, bloco B, depois das 18h. " * 3,
        )
        content = build_content(sale, config)
        receipt = render_pdf(content, config)
        assert receipt.consumed_height <= receipt.estimated_height

    def test_pathological_profile_text(self, minimal_sale):
        config = resolve_config({
            "companyName": "Supermercado " * 10,
            "companyAddress": "Avenida " * 30,
            "receiptTitle": "FACTURA " * 12,
            "thankYouMessage": "Obrigado " * 20,
            "systemInfo": "x" * 150,
            "additionalInfo": "Isento " * 25,
            "showSignature": True,
            "showBarcode": True,
        })
        receipt = render_pdf(build_content(minimal_sale, config), config)
        assert receipt.consumed_height <= receipt.estimated_height
