import io
import logging
from typing import Dict, List, Optional

import requests

from .config import DEFAULT_DIAL_TIMEOUT, DEFAULT_GET_PATHS_OPTIONS, ClientConfig, GetPathsOptions
from .errors import ApplicationError, StorageHTTPError, TrackerConnectionError
from .protocol import (
    CMD_CREATE_CLOSE,
    CMD_CREATE_OPEN,
    CMD_DEBUG,
    CMD_DELETE,
    CMD_GET_PATHS,
    CMD_RENAME,
    decode_reply,
    encode_request,
)
from .tracker_pool import TrackerPool
from .transfer import CountingReader

logger = logging.getLogger(__name__)

# get_paths never looks past path254
MAX_PATHS = 254


def _check_key(key):
    if not key:
        raise ValueError("key must not be empty")


class Client:
    """Client for one domain of a tracker cluster.

    Tracker requests each use their own connection from the TrackerPool,
    which is safe to share between threads. The requests.Session used for
    storage nodes is not, so give each thread its own Client.
    """

    def __init__(self, domain: str, trackers: List[str], dial_timeout: float = DEFAULT_DIAL_TIMEOUT,
                 io_timeout: Optional[float] = None, session: Optional[requests.Session] = None,
                 pool: Optional[TrackerPool] = None):
        self.domain = domain
        self.io_timeout = io_timeout
        self.pool = pool or TrackerPool(trackers, dial_timeout=dial_timeout, io_timeout=io_timeout)
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs):
        return cls(config.domain, config.trackers, dial_timeout=config.dial_timeout,
                   io_timeout=config.io_timeout, **kwargs)

    @property
    def last_tracker(self) -> str:
        return self.pool.last_tracker

    def do_request(self, command: str, args: Dict[str, str]) -> Dict[str, str]:
        """Send one command to a tracker and return the decoded OK values."""
        request = encode_request(command, args)
        sock, host = self.pool.acquire()
        try:
            sock.sendall(request)
        except OSError as e:
            self.pool.release(sock)
            raise TrackerConnectionError(f"write to tracker {host} failed", e) from e

        logger.debug("%s <- %r", host, request)
        try:
            with sock.makefile("rb") as reader:
                line = reader.readline()
        except OSError as e:
            raise TrackerConnectionError(f"read from tracker {host} failed", e) from e
        finally:
            self.pool.release(sock)

        logger.debug("%s -> %r", host, line)
        return decode_reply(line)

    def get_paths(self, key: str, options: GetPathsOptions = DEFAULT_GET_PATHS_OPTIONS) -> List[str]:
        """Return the storage URLs of key, best first. An empty list is a miss."""
        _check_key(key)
        values = self.do_request(CMD_GET_PATHS, {
            "domain": self.domain,
            "key": key,
            "pathcount": str(max(2, options.path_count)),
            "noverify": "1" if options.no_verify else "0",
        })

        paths = []
        for i in range(1, MAX_PATHS + 1):
            path = values.get(f"path{i}")
            if not path:
                break
            paths.append(path)
        return paths

    def create(self, key: str, klass: str, stream) -> Dict[str, str]:
        """Upload stream as key and return the create_close reply.

        klass may be empty to use the domain's default class.
        """
        _check_key(key)
        if isinstance(stream, (bytes, bytearray)):
            stream = io.BytesIO(stream)

        opened = self.do_request(CMD_CREATE_OPEN, {
            "domain": self.domain,
            "key": key,
            "class": klass,
            "fid": "0",
            "multi_dest": "0",
        })
        path = opened.get("path")
        if not path:
            raise ApplicationError("no_path", f"create_open for {key!r} returned no path")

        body = CountingReader(stream)
        try:
            resp = self.session.put(path, data=body, timeout=self.io_timeout)
        except requests.RequestException as e:
            raise StorageHTTPError(path, reason=str(e)) from e
        with resp:
            if resp.status_code != 200:
                raise StorageHTTPError(path, resp.status_code)

        closed = self.do_request(CMD_CREATE_CLOSE, {
            "domain": self.domain,
            "key": key,
            "fid": opened.get("fid", ""),
            "devid": opened.get("devid", ""),
            "path": path,
            "size": str(body.nbytes),
        })
        logger.info("stored %s (%d bytes) at %s", key, body.nbytes, path)
        return closed

    def fetch(self, key: str):
        """Open key for reading from the first storage node that answers 200.

        Returns the raw response stream; the caller must close() it.
        """
        paths = self.get_paths(key)
        if not paths:
            raise ApplicationError("no_paths", f"no paths for key {key!r}")

        error = None
        for path in paths:
            try:
                resp = self.session.get(path, stream=True, timeout=self.io_timeout)
            except requests.RequestException as e:
                logger.warning("fetch of %s failed: %s", path, e)
                error = StorageHTTPError(path, reason=str(e))
                continue
            if resp.status_code == 200:
                resp.raw.decode_content = True
                return resp.raw
            resp.close()
            logger.warning("fetch of %s returned %d", path, resp.status_code)
            error = StorageHTTPError(path, resp.status_code)
        raise error

    def rename(self, from_key: str, to_key: str) -> None:
        _check_key(from_key)
        _check_key(to_key)
        self.do_request(CMD_RENAME, {"domain": self.domain, "from_key": from_key, "to_key": to_key})

    def delete(self, key: str) -> None:
        _check_key(key)
        self.do_request(CMD_DELETE, {"domain": self.domain, "key": key})

    def debug(self, key: str) -> Dict[str, str]:
        _check_key(key)
        return self.do_request(CMD_DEBUG, {"domain": self.domain, "key": key})
