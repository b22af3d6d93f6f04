import logging
import socket
import threading
import time
from typing import Dict, List, Optional, Tuple

from .config import DEFAULT_DIAL_TIMEOUT, split_host_port
from .errors import TrackerConnectionError

logger = logging.getLogger(__name__)

# seconds a tracker is skipped after a failed connect
BLACKLIST_DURATION = 60.0


class TrackerPool:
    """Hands out one fresh TCP connection per request.

    Trackers are tried in the configured order. A tracker that refuses or
    times out is blacklisted for BLACKLIST_DURATION seconds; the entry is
    dropped the first time it is checked after it expired.

    The blacklist and last_tracker are guarded by a lock so one pool can be
    shared between threads. Connects happen outside the lock.
    """

    def __init__(self, trackers: List[str], dial_timeout: float = DEFAULT_DIAL_TIMEOUT,
                 io_timeout: Optional[float] = None, clock=time.monotonic,
                 connect=socket.create_connection):
        if not trackers:
            raise ValueError("no trackers configured")
        self.trackers = list(trackers)
        self.dial_timeout = dial_timeout
        self.io_timeout = io_timeout
        self._clock = clock
        self._connect = connect
        self._lock = threading.Lock()
        self._dead: Dict[str, float] = {}
        self._last_tracker = ""

    @property
    def last_tracker(self) -> str:
        with self._lock:
            return self._last_tracker

    def blacklist(self) -> Dict[str, float]:
        with self._lock:
            return dict(self._dead)

    def is_blacklisted(self, host: str) -> bool:
        with self._lock:
            return self._is_bad(host)

    def _is_bad(self, host):
        expiry = self._dead.get(host)
        if expiry is None:
            return False
        if expiry <= self._clock():
            del self._dead[host]
            logger.info("tracker %s left the blacklist", host)
            return False
        return True

    def mark_bad(self, host: str) -> None:
        with self._lock:
            if not self._is_bad(host):
                self._dead[host] = self._clock() + BLACKLIST_DURATION

    def mark_alive(self, host: str) -> None:
        with self._lock:
            self._dead.pop(host, None)

    def acquire(self) -> Tuple[socket.socket, str]:
        last_error = None
        for host in self.trackers:
            if self.is_blacklisted(host):
                logger.debug("skipping blacklisted tracker %s", host)
                continue
            try:
                sock = self._connect(split_host_port(host), timeout=self.dial_timeout)
            except (OSError, ValueError) as e:
                # ValueError covers unparseable entries and hostnames idna rejects
                logger.warning("tracker %s unreachable, blacklisting for %ds: %s",
                               host, BLACKLIST_DURATION, e)
                last_error = e
                self.mark_bad(host)
                continue
            # create_connection leaves the dial timeout on the socket
            sock.settimeout(self.io_timeout)
            with self._lock:
                self._last_tracker = host
            return sock, host

        if last_error is None:
            raise TrackerConnectionError("all trackers are blacklisted")
        raise TrackerConnectionError("no tracker available", last_error)

    def release(self, sock: socket.socket) -> None:
        sock.close()
