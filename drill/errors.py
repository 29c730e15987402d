"""Exception types shared by the drill session and the content provider."""


class DrillError(Exception):
    """Base class for all drill errors."""

    pass


class ConfigurationError(DrillError):
    """Raised when provider credentials are missing at startup."""

    pass


class ProviderError(DrillError):
    """Raised when the content provider fails to return a usable response."""

    pass


class ProviderConnectionError(ProviderError):
    """Raised when the provider is unreachable or answers with an error status."""

    pass


class ProviderParseError(ProviderError):
    """Raised when the provider response cannot be parsed."""

    pass


class ProviderSchemaError(ProviderError):
    """Raised when the provider response does not match the expected schema."""

    pass


class PreconditionViolation(DrillError):
    """Raised on an invalid internal call, e.g. an out-of-range slot index."""

    pass
