"""Exception types shared across the exporter."""


class ExporterError(Exception):
    """Base class for everything the exporter raises on purpose."""


class ConfigurationError(ExporterError):
    """The query configuration could not be turned into selectors."""


class ExchangeError(ExporterError):
    """A request to the management server did not produce usable JSON."""


class NotAuthorizedError(ExchangeError):
    """The management server refused the forwarded credentials (HTTP 403)."""


class AuthenticationChallengeError(ExchangeError):
    """The management server asked for credentials (HTTP 401)."""

    def __init__(self, realm: str):
        super().__init__(f"authentication required for realm '{realm}'")
        self.realm = realm


class TransportError(ExchangeError):
    """Connection failure, timeout, unexpected status or a body that is not JSON."""


class ResponseFormatError(ExchangeError):
    """The JSON response does not have the nesting the query asked for."""
