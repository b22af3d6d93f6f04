import os
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_TRACKER = "localhost:7001"
DEFAULT_DIAL_TIMEOUT = 1.0


def split_host_port(tracker: str) -> Tuple[str, int]:
    """Split "host:port" (or "[v6addr]:port") into a socket address."""
    host, sep, port = tracker.strip().rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"tracker {tracker!r} is not of the form host:port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, int(port)


class ClientConfig(BaseModel):
    """Settings for one client session.

    dial_timeout bounds the TCP connect to each tracker. io_timeout bounds the
    tracker reply read and every storage HTTP exchange; None waits forever.
    """

    model_config = ConfigDict(frozen=True)

    domain: str
    trackers: List[str]
    dial_timeout: float = DEFAULT_DIAL_TIMEOUT
    io_timeout: Optional[float] = None

    @field_validator("trackers")
    @classmethod
    def _check_trackers(cls, trackers):
        trackers = [t.strip() for t in trackers if t.strip()]
        if not trackers:
            raise ValueError("at least one tracker is required")
        for tracker in trackers:
            split_host_port(tracker)
        return trackers

    @field_validator("dial_timeout", "io_timeout")
    @classmethod
    def _check_timeout(cls, value):
        if value is not None and value <= 0:
            raise ValueError("timeouts must be positive")
        return value

    @classmethod
    def from_env(cls, **overrides):
        values = {
            "domain": os.getenv("TRACKERFS_DOMAIN", ""),
            "trackers": os.getenv("TRACKERFS_TRACKERS", DEFAULT_TRACKER).split(","),
            "dial_timeout": float(os.getenv("TRACKERFS_DIAL_TIMEOUT", DEFAULT_DIAL_TIMEOUT)),
        }
        io_timeout = os.getenv("TRACKERFS_IO_TIMEOUT")
        if io_timeout:
            values["io_timeout"] = float(io_timeout)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class GetPathsOptions(BaseModel):
    """Options for get_paths.

    no_verify asks the tracker to answer from its database without checking
    that the copies exist. path_count is raised to 2 when lower.
    """

    model_config = ConfigDict(frozen=True)

    no_verify: bool = True
    path_count: int = 2


DEFAULT_GET_PATHS_OPTIONS = GetPathsOptions()
