class OutageTrackerError(Exception):
    """Base class for errors raised by the outage tracker."""


class FetchError(OutageTrackerError):
    """The upstream outage feed was unreachable or returned something unusable."""


class StorageError(OutageTrackerError):
    """The snapshot database could not be reached or a query failed."""


class ConfigError(OutageTrackerError):
    """Required configuration is missing or invalid."""
