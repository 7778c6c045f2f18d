"""Error types raised by the scoring core."""


class ConfigurationError(ValueError):
    """Invalid setup, such as an operation the data source lacks or a zero-width score range.

    Never retried. Raised straight to the caller.
    """
