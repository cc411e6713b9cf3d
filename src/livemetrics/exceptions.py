"""Error taxonomy for the dashboard."""


class LiveMetricsError(Exception):
    """Base class for all dashboard errors."""


class SnapshotError(LiveMetricsError):
    """A snapshot could not be obtained. Recoverable: the next tick retries."""


class SnapshotFetchError(SnapshotError):
    """Network failure, timeout or non-2xx response from the snapshot source."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class MalformedSnapshotError(SnapshotError):
    """The snapshot body was not valid JSON or did not have the expected shape."""


class InvalidSampleError(LiveMetricsError, ValueError):
    """A sample had a non-numeric timestamp or a non-finite value."""


class OutOfOrderSampleError(InvalidSampleError):
    """A sample is older than the newest sample already held by its series."""
