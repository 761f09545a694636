from __future__ import annotations


class RelayError(Exception):
    """Base class for failures confined to a single relayed message."""


class ConversionError(RelayError):
    pass


class DeliveryError(RelayError):
    pass
