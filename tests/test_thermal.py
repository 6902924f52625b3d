"""Tests for the thermal text renderer and its layout engine."""

import re

import pytest

from moloja.printing.config import ReceiptConfig, resolve_config
from moloja.printing.content import build_content
from moloja.printing.layout import Alignment, LayoutEngine, ReceiptLayout, TextSize
from moloja.printing.pdf import render_pdf
from moloja.printing.thermal import ThermalReceiptRenderer, item_row_text, render_thermal

ROW = re.compile(r"^(\d+) x (.+) = (.+)$")


def _thermal(sale, profile=None):
    config = resolve_config(profile)
    return render_thermal(build_content(sale, config), config)


class TestLayoutEngine:
    def test_alignment(self):
        layout = (
            ReceiptLayout()
            .add_text("esq")
            .add_text("meio", Alignment.CENTER)
            .add_text("dir", Alignment.RIGHT)
        )
        lines = LayoutEngine(10).render_lines(layout)
        assert lines == ["esq", "   meio   ", "       dir"]

    def test_large_text_is_uppercased(self):
        layout = ReceiptLayout().add_text("Moloja", size=TextSize.LARGE)
        assert LayoutEngine().render_lines(layout) == ["MOLOJA"]

    def test_separators_and_spacing(self):
        layout = ReceiptLayout().add_separator().add_separator("double").add_space(2).add_separator("dashes")
        lines = LayoutEngine(6).render_lines(layout)
        assert lines == ["------", "======", "", "", "- - - "]

    def test_unknown_separator_style(self):
        layout = ReceiptLayout().add_separator("wavy")
        assert LayoutEngine(4).render_lines(layout) == ["----"]

    def test_long_text_is_wrapped(self):
        layout = ReceiptLayout().add_text("um dois tres quatro cinco", Alignment.CENTER)
        lines = LayoutEngine(10).render_lines(layout)
        assert len(lines) > 1
        assert all(len(line) == 10 for line in lines)

    def test_render_text_ends_with_newline(self):
        assert LayoutEngine().render_text(ReceiptLayout().add_text("a")) == "a\n"


class TestThermalReceipt:
    def test_minimal_sale(self, minimal_sale):
        lines = _thermal(minimal_sale).splitlines()
        stripped = [line.strip() for line in lines]
        assert "MOLOJA" in stripped
        assert "Pão" in stripped
        assert "2 x AOA 500,00 = AOA 1000,00" in stripped
        assert "TOTAL: AOA 1000,00" in stripped
        assert "Cliente: Cliente não" in stripped
        assert "identificado" in stripped
        assert "Data: 10-01-2025 10:00:00" in stripped

    def test_section_order(self, minimal_sale):
        text = _thermal(minimal_sale)
        order = ["MOLOJA", "FACTURA-RECIBO", "Cliente:", "Artigo", "Pão", "TOTAL:", "Obrigado"]
        positions = [text.index(marker) for marker in order]
        assert positions == sorted(positions)

    @pytest.mark.parametrize("count", [0, 1, 25])
    def test_no_line_exceeds_width(self, sale_factory, full_profile, count):
        sale = sale_factory(
            count,
            name="Sabão em pó concentrado para máquina de lavar",
            customer={"name": "Maria da Conceição dos Santos Fernandes"},
            notes="Entregar ao porteiro do edifício principal",
        )
        for line in _thermal(sale, full_profile).splitlines():
            assert len(line) <= 32, line

    def test_item_rows_match_pdf(self, sale_factory):
        config = ReceiptConfig()
        content = build_content(sale_factory(20), config)
        thermal_rows = [
            ROW.match(line).groups()
            for line in render_thermal(content, config).splitlines()
            if ROW.match(line)
        ]
        pdf_rows = render_pdf(content, config).item_rows
        assert len(thermal_rows) == len(pdf_rows) == 20
        for (qty, price, total), (_, pdf_qty, pdf_price, pdf_total) in zip(thermal_rows, pdf_rows):
            assert int(qty) == pdf_qty
            assert price == content.money(pdf_price)
            assert total == content.money(pdf_total)

    def test_total_matches_pdf(self, minimal_sale):
        config = ReceiptConfig()
        content = build_content(minimal_sale, config)
        assert f"TOTAL: {render_pdf(content, config).total_text}" in render_thermal(content, config)

    def test_legacy_item_count(self, minimal_sale):
        minimal_sale["items"] = 5
        text = _thermal(minimal_sale)
        assert not any(ROW.match(line) for line in text.splitlines())
        assert "TOTAL: AOA 1000,00" in text

    def test_optional_blocks(self, minimal_sale, full_profile):
        stripped = [line.strip() for line in _thermal(minimal_sale, full_profile).splitlines()]
        assert "MERCEARIA KIANDA" in stripped
        assert "NIF: 5417012345" in stripped
        assert "Assinatura" in stripped
        assert "Ref: s1" in stripped
        assert "Qtd x Preço = Total (IVA 14%)" in stripped

    def test_item_row_text(self, minimal_sale):
        content = build_content(minimal_sale, ReceiptConfig())
        assert item_row_text(content, 3, 10, 30) == "3 x AOA 10,00 = AOA 30,00"

    def test_renderer_width(self, minimal_sale):
        config = ReceiptConfig()
        text = ThermalReceiptRenderer(chars_per_line=48).render(build_content(minimal_sale, config), config)
        assert max(len(line) for line in text.splitlines()) == 48
