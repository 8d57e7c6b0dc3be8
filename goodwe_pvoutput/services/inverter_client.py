# goodwe_pvoutput/services/inverter_client.py

from __future__ import annotations

import socket
import time
from typing import Any, Callable, Optional

from goodwe_pvoutput.config import InverterConfig
from goodwe_pvoutput.models.telemetry import TelemetrySnapshot
from goodwe_pvoutput.protocol.errors import AttemptError, RetriesExhaustedError, SocketError
from goodwe_pvoutput.protocol.frame import build_request, extract_payload, parse_payload
from goodwe_pvoutput.protocol.layouts import FrameLayout, get_layout


# Large enough to notice oversized datagrams instead of silently truncating them.
RECV_BUFFER = 1024


# ============================================================================
# UDP inverter client
# ============================================================================

class InverterClient:
    """
    Single-inverter UDP client: one request, one datagram, bounded retries.

    Every attempt opens its own socket and closes it before returning, so a
    client instance carries configuration only and can be reused freely.
    """

    def __init__(
        self,
        cfg: InverterConfig,
        log: Any,
        *,
        layout: Optional[FrameLayout] = None,
        socket_factory: Callable[..., Any] = socket.socket,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        cfg: InverterConfig
            .host / .port      → target address
            .timeout           → per-operation socket deadline (seconds)
            .retries           → default number of attempts
            .retry_delay       → constant pause between attempts (seconds)

        log: logger interface
        """
        self.cfg = cfg
        self.log = log
        self.layout = layout or get_layout(cfg.model)
        self._socket_factory = socket_factory
        self._sleep = sleep

    @property
    def address(self) -> tuple[str, int]:
        return (self.cfg.host, self.cfg.port)

    # ----------------------------------------------------------------------

    def _receive(self, sock: Any) -> bytes:
        try:
            sock.settimeout(self.cfg.timeout)
            sock.connect(self.address)
            sock.send(build_request(self.layout))
            # settimeout() applies per call, so the receive deadline starts at send.
            return sock.recv(RECV_BUFFER)
        except OSError as exc:
            raise SocketError(f"{self.cfg.host}:{self.cfg.port}: {exc}") from exc

    def exchange(self) -> TelemetrySnapshot:
        """Run one request/response attempt.

        Raises:
            SocketError, FramingError, IntegrityError, ValidationError
        """
        try:
            sock = self._socket_factory(socket.AF_INET, socket.SOCK_DGRAM)
        except OSError as exc:
            raise SocketError(f"cannot create socket: {exc}") from exc

        try:
            datagram = self._receive(sock)
        finally:
            sock.close()

        self.log.debug("Received %d bytes from %s:%s", len(datagram), *self.address)
        payload = extract_payload(datagram, self.layout)
        return parse_payload(payload, self.layout)

    # ----------------------------------------------------------------------

    def fetch_snapshot(self, max_attempts: Optional[int] = None) -> TelemetrySnapshot:
        """
        Poll the inverter, retrying every attempt-level failure identically.

        Sleeps ``cfg.retry_delay`` between attempts but not after the last
        one, then raises :class:`RetriesExhaustedError`.
        """
        attempts = self.cfg.retries if max_attempts is None else max_attempts
        if attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {attempts}")

        last_error: Optional[AttemptError] = None
        for attempt in range(1, attempts + 1):
            try:
                snapshot = self.exchange()
            except AttemptError as exc:
                last_error = exc
                self.log.warning(
                    "Inverter poll attempt %d/%d failed (%s): %s",
                    attempt,
                    attempts,
                    type(exc).__name__,
                    exc,
                )
                if attempt < attempts:
                    self._sleep(self.cfg.retry_delay)
                continue

            self.log.debug("Inverter poll succeeded on attempt %d/%d", attempt, attempts)
            return snapshot

        raise RetriesExhaustedError(attempts, last_error)
