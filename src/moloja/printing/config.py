"""Receipt configuration.

The business profile stored by the backend (snake_case columns) and the
camelCase receipt config used by the web pages are both merged over the
defaults here, once, before any renderer runs. Renderers only ever see a
fully resolved ReceiptConfig.
"""

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from moloja.printing.text import to_float

logger = logging.getLogger(__name__)


DEFAULT_COMPANY_NAME = "Moloja"
DEFAULT_CURRENCY = "AOA"
DEFAULT_RECEIPT_TITLE = "FACTURA-RECIBO"
DEFAULT_THANK_YOU = "Obrigado pela sua preferência!"
DEFAULT_FOOTER = "Documento emitido em"
DEFAULT_EXEMPTION = "Isento nos termos do Regime Simplificado"
DEFAULT_SYSTEM_INFO = "Processado por programa validado n.º 0000/AGT/2025"
DEFAULT_CERTIFICATE = "Certificado n.º 0000/AGT/2025"


@dataclass(frozen=True)
class FontSizes:
    """Font sizes in points for each receipt section."""

    title: float = 14
    header: float = 10
    normal: float = 9
    table: float = 8
    footer: float = 7


@dataclass(frozen=True)
class ReceiptConfig:
    """Fully resolved business profile for receipts."""

    company_name: str = DEFAULT_COMPANY_NAME
    company_logo: Optional[str] = None
    address: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    social_media: Optional[str] = None
    tax_id: Optional[str] = None

    currency: str = DEFAULT_CURRENCY
    tax_rate: float = 0.0

    receipt_title: str = DEFAULT_RECEIPT_TITLE
    thank_you_message: str = DEFAULT_THANK_YOU
    footer_text: str = DEFAULT_FOOTER
    additional_info: Optional[str] = None
    tax_exemption_reason: str = DEFAULT_EXEMPTION
    system_info: str = DEFAULT_SYSTEM_INFO
    certificate_number: str = DEFAULT_CERTIFICATE

    show_logo: bool = False
    show_signature: bool = False
    show_barcode: bool = False

    font_sizes: FontSizes = field(default_factory=FontSizes)

    @property
    def exemption_clause(self) -> str:
        """Tax exemption sentence (additional info takes precedence)."""
        return self.additional_info or self.tax_exemption_reason

    def header_fields(self) -> List[Tuple[str, str]]:
        """Optional company lines in print order, only those present.

        Returns:
            List of (field name, printed text)
        """
        candidates = [
            ("tax_id", f"NIF: {self.tax_id}" if self.tax_id else None),
            ("address", self.address),
            ("neighborhood", self.neighborhood),
            ("city", self.city),
            ("phone", f"Tel: {self.phone}" if self.phone else None),
            ("email", self.email),
            ("social_media", self.social_media),
        ]
        return [(name, text) for name, text in candidates if text]


# Accepted spellings per field, camelCase config first then profile columns
_ALIASES: Dict[str, Tuple[str, ...]] = {
    "company_name": ("companyName", "company_name", "name"),
    "company_logo": ("companyLogo", "company_logo", "receipt_logo"),
    "address": ("companyAddress", "company_address", "address"),
    "neighborhood": ("companyNeighborhood", "company_neighborhood"),
    "city": ("companyCity", "company_city"),
    "phone": ("companyPhone", "company_phone", "phone"),
    "email": ("companyEmail", "company_email", "email"),
    "website": ("companyWebsite", "company_website"),
    "social_media": ("companySocialMedia", "company_social_media"),
    "tax_id": ("taxId", "tax_id"),
    "currency": ("currency",),
    "tax_rate": ("taxRate", "tax_rate"),
    "receipt_title": ("receiptTitle", "receipt_title"),
    "thank_you_message": ("thankYouMessage", "thank_you_message", "receipt_message"),
    "footer_text": ("footerText", "footer_text", "receipt_footer_text"),
    "additional_info": ("additionalInfo", "additional_info", "receipt_additional_info"),
    "tax_exemption_reason": ("taxExemptionReason", "tax_exemption_reason"),
    "system_info": ("systemInfo", "system_info"),
    "certificate_number": ("certificateNumber", "certificate_number"),
    "show_logo": ("showLogo", "show_logo", "receipt_show_logo"),
    "show_signature": ("showSignature", "show_signature", "receipt_show_signature"),
    "show_barcode": ("showBarcode", "show_barcode", "receipt_show_barcode"),
}

_BOOL_FIELDS = {"show_logo", "show_signature", "show_barcode"}


def _lookup(profile: Mapping[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        value = profile.get(key)
        if isinstance(value, str):
            value = value.strip()
        if value not in (None, ""):
            return value
    return None


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() in ("1", "true", "yes", "sim")
    return bool(value)


def _resolve_font_sizes(raw: Any) -> FontSizes:
    if not isinstance(raw, Mapping):
        return FontSizes()
    defaults = FontSizes()
    sizes = {}
    for f in fields(FontSizes):
        size = to_float(raw.get(f.name), getattr(defaults, f.name))
        sizes[f.name] = size if size > 0 else getattr(defaults, f.name)
    return FontSizes(**sizes)


def resolve_config(
    profile: Union[ReceiptConfig, Mapping[str, Any], None] = None,
) -> ReceiptConfig:
    """Merge a provided config or business profile over the defaults.

    Pure function: the input is never modified. Unknown keys are ignored
    and unusable values fall back to the default for that field.

    Args:
        profile: ReceiptConfig, camelCase config mapping, snake_case
            profile row, or None

    Returns:
        Resolved ReceiptConfig
    """
    if isinstance(profile, ReceiptConfig):
        return profile
    if not isinstance(profile, Mapping):
        if profile is not None:
            logger.warning(f"Ignoring receipt profile of type {type(profile).__name__}")
        return ReceiptConfig()

    values: Dict[str, Any] = {}
    for name, keys in _ALIASES.items():
        value = _lookup(profile, keys)
        if value is None:
            continue
        if name in _BOOL_FIELDS:
            values[name] = _to_bool(value)
        elif name == "tax_rate":
            values[name] = max(0.0, to_float(value))
        elif name == "currency":
            values[name] = str(value).upper()
        else:
            values[name] = str(value)

    font_raw = profile.get("fontSize", profile.get("font_size"))
    values["font_sizes"] = _resolve_font_sizes(font_raw)

    return replace(ReceiptConfig(), **values)
