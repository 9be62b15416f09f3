"""Error taxonomy for the exporter.

Every failure that can end a scrape derives from ``ExporterError`` so the
HTTP layer can turn it into a 500 response with ``str(exc)`` as body.
"""


class ExporterError(Exception):
    """Base class for all exporter errors."""


class ConfigurationError(ExporterError):
    """Startup configuration is missing or invalid."""


class TransportError(ExporterError):
    """Fetching the raw payload from the bridge failed."""


class DecodeError(ExporterError):
    """The byte stream could not be split into valid SML frames."""


class ParseError(ExporterError):
    """A frame was well formed but its SML structure is not."""


class NoConsumptionDataError(ExporterError):
    """The payload parsed cleanly but carried no usable meter readings."""

    def __init__(self, message: str = "Could not find consumption data in response"):
        super().__init__(message)
