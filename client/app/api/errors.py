"""Error taxonomy for boundary calls to the PDF API."""

NETWORK_ERROR_MESSAGE = "Network error"


class SyncError(Exception):
    """Base class for failed boundary calls."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TransportError(SyncError):
    """Call never reached the server or never got a response."""

    def __init__(self, message: str = NETWORK_ERROR_MESSAGE) -> None:
        super().__init__(message)


class RemoteError(SyncError):
    """Server responded but the response indicates failure."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
