"""Client for a tracker-coordinated distributed file store.

    >>> from trackerfs import Client
    >>> client = Client("media", ["tracker1:7001", "tracker2:7001"])
    >>> client.create("new-key", "", open("photo.jpg", "rb"))
    >>> client.get_paths("new-key")
"""
from .client import MAX_PATHS, Client
from .config import DEFAULT_GET_PATHS_OPTIONS, ClientConfig, GetPathsOptions
from .errors import (
    ApplicationError,
    ProtocolError,
    StorageHTTPError,
    TrackerConnectionError,
    TrackerFSError,
)
from .tracker_pool import BLACKLIST_DURATION, TrackerPool

__version__ = "0.1.0"

__all__ = [
    "Client",
    "ClientConfig",
    "GetPathsOptions",
    "DEFAULT_GET_PATHS_OPTIONS",
    "TrackerPool",
    "BLACKLIST_DURATION",
    "MAX_PATHS",
    "TrackerFSError",
    "TrackerConnectionError",
    "ProtocolError",
    "ApplicationError",
    "StorageHTTPError",
]
