"""Domain-specific exceptions — framework-independent."""


class WorkLogClientError(Exception):
    """Base class for every error raised by the work-log client."""


class ValidationError(WorkLogClientError):
    """Raised when user input is rejected before any network call."""

    def __init__(self, field: str, value: str, message: str):
        self.field = field
        self.value = value
        self.message = message
        super().__init__(f"{field}={value!r}: {message}")


class TransportError(WorkLogClientError):
    """Raised on a network failure or a non-2xx response from the backend.

    ``status_code`` is None when no response was received at all.
    """

    def __init__(
        self,
        method: str,
        url: str,
        message: str,
        status_code: int | None = None,
    ):
        self.method = method
        self.url = url
        self.message = message
        self.status_code = status_code
        status = status_code if status_code is not None else "no response"
        super().__init__(f"{method} {url} [{status}]: {message}")


class BatchDeleteError(TransportError):
    """Raised when at least one request of a batch delete failed.

    The server may already have applied some of the deletions; they are
    listed in ``succeeded_ids``.
    """

    def __init__(self, failed_ids: list[int], succeeded_ids: list[int], message: str):
        self.failed_ids = failed_ids
        self.succeeded_ids = succeeded_ids
        super().__init__(
            method="DELETE",
            url="/api/worklogs/{id}",
            message=message,
        )


class ChannelError(WorkLogClientError):
    """Raised when the push connection drops or cannot be opened."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)
