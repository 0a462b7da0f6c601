from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

from rri.protocol import framing
from rri.protocol.errors import FramingError, NetworkError

logger = logging.getLogger(__name__)


def parse_address(address: str) -> Tuple[str, int]:
    """Split ``host:port`` (or ``[v6-host]:port``) into its parts."""
    host, sep, port_text = address.strip().rpartition(":")
    if not sep or not host or not port_text:
        raise NetworkError(f"Invalid address {address!r}, expected host:port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port = int(port_text)
    except ValueError as exc:
        raise NetworkError(f"Invalid port in address {address!r}") from exc
    if not (1 <= port <= 65535):
        raise NetworkError(f"Port {port} out of range in address {address!r}")
    return host, port


class NetworkClient:
    """Plain TCP transport exchanging length-prefixed frames."""

    def __init__(
        self,
        host: str,
        port: int,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout or None
        self.read_timeout = read_timeout or None

        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None
        self.connected: bool = False
        self._closed: bool = False

    @classmethod
    def from_address(cls, address: str, config: Optional[Dict[str, Any]] = None) -> "NetworkClient":
        config = config or {}
        host, port = parse_address(address)
        return cls(
            host,
            port,
            connect_timeout=config.get("connect_timeout"),
            read_timeout=config.get("read_timeout"),
        )

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    async def connect(self) -> None:
        if self.connected:
            return
        if self._closed:
            raise NetworkError("Connection already closed")
        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port), timeout=self.connect_timeout
            )
        except asyncio.TimeoutError as exc:
            raise NetworkError(f"Timed out connecting to {self.address}") from exc
        except OSError as exc:
            raise NetworkError(f"Cannot connect to {self.address}: {exc}") from exc
        self.connected = True
        logger.info("Connected to %s", self.address)

    async def send(self, payload: str) -> None:
        if not self.connected or self.writer is None:
            raise NetworkError("Not connected")
        data = framing.encode_frame(payload)
        try:
            self.writer.write(data)
            await self.writer.drain()
        except (ConnectionResetError, BrokenPipeError, ConnectionAbortedError, OSError) as exc:
            logger.warning("Connection lost during send: %s", exc)
            self.connected = False
            raise NetworkError(f"Connection lost: {exc}") from exc
        logger.debug("Sent frame of %d bytes", len(data))

    async def receive(self) -> str:
        if not self.connected or self.reader is None:
            raise NetworkError("Not connected")
        try:
            payload = await asyncio.wait_for(framing.read_frame(self.reader), timeout=self.read_timeout)
        except asyncio.TimeoutError as exc:
            self.connected = False
            raise NetworkError(f"No response from {self.address} within {self.read_timeout}s") from exc
        except FramingError:
            self.connected = False
            raise
        except OSError as exc:
            self.connected = False
            raise NetworkError(f"Receive failed: {exc}") from exc
        logger.debug("Received frame with %d characters", len(payload))
        return payload

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.connected = False
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except OSError as exc:
                logger.debug("Error during writer cleanup: %s", exc)
        logger.info("Connection to %s closed", self.address)


__all__ = ["NetworkClient", "parse_address"]
