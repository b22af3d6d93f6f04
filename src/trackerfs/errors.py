class TrackerFSError(Exception):
    """Base class for everything the client raises."""


class TrackerConnectionError(TrackerFSError, ConnectionError):
    """No tracker could be reached, or the tracker socket failed mid-request."""

    def __init__(self, message, last_error=None):
        if last_error is not None:
            message = f"{message}: {last_error}"
        super().__init__(message)
        self.last_error = last_error


class ProtocolError(TrackerFSError):
    """The tracker reply did not follow the line protocol."""


class ApplicationError(TrackerFSError):
    """The tracker answered ERR <code> <message>."""

    def __init__(self, code, message=""):
        super().__init__(f"{code}: {message}" if message else code)
        self.code = code
        self.message = message


class StorageHTTPError(TrackerFSError):
    """A PUT or GET against a storage node failed.

    ``status`` is None when the request never got an HTTP answer.
    """

    def __init__(self, url, status=None, reason=""):
        if status is None:
            text = f"storage request to {url} failed"
        else:
            text = f"invalid HTTP status code of storage daemon: {status} ({url})"
        if reason:
            text += f": {reason}"
        super().__init__(text)
        self.url = url
        self.status = status
