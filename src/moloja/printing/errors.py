"""Exceptions raised by the receipt printing package."""


class ReceiptError(Exception):
    """Base class for receipt errors."""


class DocumentConstructionError(ReceiptError):
    """The PDF document could not be built or serialized."""


class ShareUnavailableError(ReceiptError):
    """The output sink has no sharing channel, or the channel refused."""
