"""Remote-call failure classes shared by all LLM providers."""


class RemoteFailure(Exception):
    """Base class: the model call produced no reply."""

    retryable = False


class ConfigurationMissing(RemoteFailure):
    """No credential or provider configured. Operator must fix the deployment."""


class RemoteUnavailable(RemoteFailure):
    """Transport failure, timeout, throttling or server-side error."""

    retryable = True


class RemoteRejected(RemoteFailure):
    """Endpoint reachable but refused the request at the application level."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def is_transient_status(status_code: int | None) -> bool:
    """HTTP statuses that mean 'try again later' rather than 'bad request'."""
    return status_code is None or status_code == 429 or status_code >= 500
