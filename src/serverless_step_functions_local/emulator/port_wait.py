"""
Port readiness polling for the local emulator.
"""

import logging
import socket
import time

from ..exceptions import PortWaitTimeoutError

logger = logging.getLogger(__name__)


def is_port_in_use(port: int, host: str = "127.0.0.1", connect_timeout: float = 0.5) -> bool:
    """Return True when something accepts TCP connections on host:port."""
    try:
        with socket.create_connection((host, port), timeout=connect_timeout):
            return True
    except OSError:
        return False


def wait_until_used(port: int, host: str = "127.0.0.1", interval: float = 0.2, timeout: float = 10.0) -> None:
    """
    Block until host:port accepts connections.

    Args:
        port: TCP port to poll
        host: Host to connect to
        interval: Seconds between attempts
        timeout: Ceiling in seconds before giving up

    Raises:
        PortWaitTimeoutError: If the port is still closed after ``timeout`` seconds
    """
    deadline = time.monotonic() + timeout
    attempts = 0
    while True:
        attempts += 1
        if is_port_in_use(port, host, connect_timeout=max(interval, 0.1)):
            logger.debug("Port %s:%s in use after %d attempt(s)", host, port, attempts)
            return
        if time.monotonic() + interval > deadline:
            raise PortWaitTimeoutError(host, port, timeout)
        time.sleep(interval)
