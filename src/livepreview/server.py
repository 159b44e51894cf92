"""Server handles usable from outside the preview server's own process."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from .logging import get_logger

DEFAULT_PROBE_TIMEOUT = 2.0

logger = get_logger(__name__)


@dataclass
class HttpProbeServer:
    """Reports the server as running when anything answers HTTP on its address.

    Any HTTP response, including error statuses, counts as running.
    """

    address: str
    port: int
    webroot: str | None = None
    timeout: float = DEFAULT_PROBE_TIMEOUT
    transport: httpx.BaseTransport | None = None

    @property
    def url(self) -> str:
        host = f"[{self.address}]" if ":" in self.address else self.address
        return f"http://{host}:{self.port}/"

    def is_running(self) -> bool:
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                client.get(self.url)
        except httpx.TransportError as exc:
            logger.debug("Probe of %s failed: %s", self.url, exc)
            return False
        return True
