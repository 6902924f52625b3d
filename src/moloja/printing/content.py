"""Logical receipt content.

Both renderers draw from the same ReceiptContent, built once per call,
so the PDF and the thermal text always agree on items and totals.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Mapping, Optional, Tuple

from moloja.printing.config import ReceiptConfig
from moloja.printing.items import LineItem, extract_items
from moloja.printing.text import (
    format_currency,
    format_datetime,
    format_percent,
    parse_sale_date,
    to_float,
)

UNKNOWN_CUSTOMER = "Cliente não identificado"
FINAL_CONSUMER = "Consumidor final"
UNKNOWN_PAYMENT = "Não especificado"
INVOICE_PREFIX = "FR MLJ/"


@dataclass(frozen=True)
class ReceiptContent:
    """Everything a receipt shows, resolved and formatted."""

    sale_id: str
    issued_at: datetime
    customer_name: str
    customer_nif: str
    payment_method: str
    currency: str
    tax_rate: float
    total: float
    items: List[LineItem] = field(default_factory=list)
    amount_paid: Optional[float] = None
    change: Optional[float] = None
    notes: Optional[str] = None

    @property
    def issued_text(self) -> str:
        return format_datetime(self.issued_at)

    @property
    def invoice_number(self) -> str:
        return f"{INVOICE_PREFIX}{self.sale_id[:8] if self.sale_id else 'S/N'}"

    @property
    def tax_text(self) -> str:
        return format_percent(self.tax_rate)

    @property
    def total_text(self) -> str:
        return self.money(self.total)

    def money(self, amount: float) -> str:
        return format_currency(amount, self.currency)

    def footer_sentence(self, config: ReceiptConfig) -> str:
        return f"{config.footer_text} {self.issued_text}"


def _field(sale: Any, *keys: str) -> Any:
    for key in keys:
        if isinstance(sale, Mapping):
            value = sale.get(key)
        else:
            value = getattr(sale, key, None)
        if value is not None:
            return value
    return None


def resolve_customer(customer: Any) -> Tuple[str, str]:
    """Customer display name and tax id.

    A structured record's ``name`` wins, then a plain string, then the
    "not identified" literal. The tax id falls back to "final consumer".
    """
    name = None
    nif = None
    if isinstance(customer, Mapping):
        name = customer.get("name")
        nif = customer.get("nif") or customer.get("tax_id")
    elif isinstance(customer, str):
        name = customer

    name = str(name).strip() if name is not None else ""
    nif = str(nif).strip() if nif is not None else ""
    return name or UNKNOWN_CUSTOMER, nif or FINAL_CONSUMER


def build_content(sale: Any, config: ReceiptConfig) -> ReceiptContent:
    """Resolve a sale into receipt content.

    Args:
        sale: Sale mapping (camelCase or snake_case keys)
        config: Resolved receipt configuration

    Returns:
        ReceiptContent ready for either renderer
    """
    customer_name, customer_nif = resolve_customer(_field(sale, "customer"))

    raw_paid = _field(sale, "amountPaid", "amount_paid")
    amount_paid = to_float(raw_paid) if raw_paid is not None else None

    total = to_float(_field(sale, "total"))

    raw_change = _field(sale, "change")
    change = to_float(raw_change) if raw_change is not None else None
    if change is None and amount_paid is not None:
        change = max(0.0, amount_paid - total)

    notes = _field(sale, "notes")
    notes = str(notes).strip() if notes is not None else ""

    payment = _field(sale, "paymentMethod", "payment_method")
    payment = str(payment).strip() if payment is not None else ""

    sale_id = _field(sale, "id")

    return ReceiptContent(
        sale_id=str(sale_id) if sale_id is not None else "",
        issued_at=parse_sale_date(_field(sale, "date", "created_at")),
        customer_name=customer_name,
        customer_nif=customer_nif,
        payment_method=payment or UNKNOWN_PAYMENT,
        currency=config.currency,
        tax_rate=config.tax_rate,
        total=total,
        items=extract_items(sale),
        amount_paid=amount_paid,
        change=change,
        notes=notes or None,
    )
