"""Shared fixtures for receipt tests."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pytest

from moloja.printing.errors import ShareUnavailableError
from moloja.printing.receipt import ReceiptService
from moloja.printing.sinks import OutputSink


class RecordingSink(OutputSink):
    """Output sink double that records everything it receives."""

    def __init__(self, share_available: bool = True, accept: bool = True):
        self.share_available = share_available
        self.accept = accept
        self.persisted: Dict[str, bytes] = {}
        self.presented: List[str] = []
        self.shared: List[Tuple[bytes, str, str]] = []

    def persist(self, data: bytes, filename: str) -> Path:
        self.persisted[filename] = data
        return Path("/virtual") / filename

    async def present(self, text: str) -> bool:
        self.presented.append(text)
        return self.accept

    async def share(self, data: bytes, filename: str, caption: str) -> bool:
        if not self.share_available:
            raise ShareUnavailableError("no share channel in tests")
        if not self.accept:
            return False
        self.shared.append((data, filename, caption))
        return True


@pytest.fixture
def minimal_sale() -> Dict[str, Any]:
    return {
        "id": "s1",
        "date": "2025-01-10T10:00:00Z",
        "total": 1000,
        "items": [{"product": {"name": "Pão", "price": 500}, "quantity": 2}],
        "paymentMethod": "Dinheiro",
    }


@pytest.fixture
def full_profile() -> Dict[str, Any]:
    """Backend profile row with every optional receipt field filled."""
    return {
        "name": "Mercearia Kianda",
        "tax_id": "5417012345",
        "address": "Rua Comandante Gika, n.º 112, Edifício Kianda, 3.º andar",
        "company_neighborhood": "Alvalade",
        "company_city": "Luanda",
        "phone": "+244 923 456 789",
        "email": "vendas@kianda.co.ao",
        "company_social_media": "@merceariakianda",
        "currency": "aoa",
        "tax_rate": 14,
        "receipt_message": "Obrigado e volte sempre!",
        "receipt_footer_text": "Documento processado em",
        "receipt_additional_info": "IVA - Regime de Exclusão",
        "receipt_show_signature": True,
        "receipt_show_barcode": True,
    }


def make_sale(item_count: int, name: str = "Produto", **extra: Any) -> Dict[str, Any]:
    sale = {
        "id": "a1b2c3d4-e5f6-7890-abcd-ef0123456789",
        "date": "2025-03-02T15:30:45Z",
        "total": 0,
        "paymentMethod": "Multicaixa",
        "items": [
            {"product": {"id": str(i), "name": f"{name} {i}", "price": 150 + i}, "quantity": 1 + i % 3}
            for i in range(item_count)
        ],
    }
    sale["total"] = sum(e["product"]["price"] * e["quantity"] for e in sale["items"])
    sale.update(extra)
    return sale


@pytest.fixture
def sale_factory():
    return make_sale


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def service(sink: RecordingSink) -> ReceiptService:
    return ReceiptService(sink)


@pytest.fixture
def frozen(minimal_sale):
    """Deep copy used to assert inputs are left untouched."""
    return copy.deepcopy(minimal_sale)


@pytest.fixture
def sink_factory():
    return RecordingSink
