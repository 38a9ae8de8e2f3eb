"""Error taxonomy shared by channels, stores and the HTTP layer."""
from __future__ import annotations


class ConduitError(Exception):
    """Base class for all conduit errors."""

    pass


class ConfigurationError(ConduitError):
    """Required setup fields are missing. Fatal at startup."""

    pass


class ResolutionError(ConduitError):
    """A tenant, channel or conversation identifier could not be resolved."""

    pass


class DeliveryError(ConduitError):
    """A sender's platform call failed. Aborts the remaining senders."""

    def __init__(self, channel: str, message: str):
        super().__init__(f"[{channel}] {message}")
        self.channel = channel


class MalformedEventError(ConduitError):
    """An inbound event does not match any known shape. The event is discarded."""

    pass
