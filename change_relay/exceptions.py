# change_relay/exceptions.py


class RelayError(RuntimeError):
    """Base class for errors raised while running a polling cycle."""


class ConfigurationError(RelayError):
    """Required settings (e.g. Current RMS credentials) are missing."""


class UpstreamError(RelayError):
    """The upstream fetch failed: transport, timeout, auth or a malformed body."""


class DeliveryError(RelayError):
    """The outbound webhook could not be reached or did not return 2xx."""
