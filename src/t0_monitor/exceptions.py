"""Error types raised by t0-monitor."""


class ConfigurationError(ValueError):
    """Raised when configuration values are inconsistent."""


class UnsortedReferenceError(ValueError):
    """
    Raised when the reference stream or the cluster sequence is not in time
    order. The matcher cursor only moves forward, so out-of-order input would
    otherwise lose matches without notice.
    """
