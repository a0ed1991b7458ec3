"""Exception hierarchy shared by loaders, providers, and clients."""


class AccumulatorError(Exception):
    """Base class for all wallet-accumulator errors."""


class ConfigError(AccumulatorError):
    """Raised when token configuration or settings are missing or malformed."""


class ProviderConfigError(AccumulatorError):
    """Raised when a balance provider is misconfigured and cannot run at all."""


class StatementFormatError(ProviderConfigError):
    """Raised when an offline statement file is missing, empty, or has no header row."""


class PriceServiceError(AccumulatorError):
    """Raised when the price service cannot be reached or returns an unusable payload."""


class RateLimitError(AccumulatorError):
    """Raised when a remote source signals that the caller is being rate limited."""
