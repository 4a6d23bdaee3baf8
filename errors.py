"""Error taxonomy for search and playback."""


class NetworkError(Exception):
    """A search request that did not produce a usable response."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def describe(self) -> str:
        return self.message


class HttpError(NetworkError):
    """The server answered with a non-2xx status."""

    def __init__(self, status: int, message: str) -> None:
        self.status = status
        super().__init__(message)

    def describe(self) -> str:
        return f"HTTP {self.status} {self.message}".rstrip()


class TransportError(NetworkError):
    """Timeout, DNS or connection failure, or an unreadable body."""

    def describe(self) -> str:
        return f"Network failure: {self.message}"


class PlaybackError(Exception):
    """A preview could not be acquired or started."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


__all__ = ["NetworkError", "HttpError", "TransportError", "PlaybackError"]
