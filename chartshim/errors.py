"""Exception hierarchy for the chart shim."""


class ChartShimError(Exception):
    """Base exception for all shim-specific errors."""


class ConfigError(ChartShimError):
    """Raised when the settings file or provider selection is invalid."""


class ProviderError(ChartShimError):
    """Raised when an upstream payload cannot be interpreted.

    Adapters convert it into an empty candle sequence before returning.
    """
