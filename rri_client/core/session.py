from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any, Dict, Optional

from rri.protocol.errors import NetworkError, RRIError
from rri.protocol.messages import Query, Response, parse_response

from .network import NetworkClient

logger = logging.getLogger(__name__)


class SessionState(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


class Direction(StrEnum):
    OUTBOUND = "outbound"
    INBOUND = "inbound"


RawTrafficObserver = Callable[[Direction, str], None]


class ClientSession:
    """
    One RRI session over one connection.

    Exchanges are strictly request-then-response; concurrent callers are
    serialized so frames on the connection never interleave. The optional
    observer sees the raw outbound and inbound text, uncensored.
    """

    def __init__(self, network: NetworkClient, observer: Optional[RawTrafficObserver] = None) -> None:
        self.network = network
        self.observer = observer
        self.state: SessionState = SessionState.CONNECTED if network.connected else SessionState.DISCONNECTED
        self.user: Optional[str] = None
        self._lock = asyncio.Lock()
        self._closing = False

    @classmethod
    async def open(
        cls,
        address: str,
        observer: Optional[RawTrafficObserver] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> "ClientSession":
        network = NetworkClient.from_address(address, config)
        await network.connect()
        return cls(network, observer)

    @property
    def authenticated(self) -> bool:
        return self.state == SessionState.AUTHENTICATED

    @property
    def closed(self) -> bool:
        return self.state == SessionState.CLOSED

    async def login(self, user: str, password: str) -> Response:
        """Authenticate; raises QueryFailed with the server message when rejected."""
        response = await self.send_query(Query.login(user, password))
        response.raise_for_status()
        self.state = SessionState.AUTHENTICATED
        self.user = user
        logger.info("Logged in as %s", user)
        return response

    async def logout(self) -> Response:
        response = await self.send_query(Query.logout())
        response.raise_for_status()
        if self.state == SessionState.AUTHENTICATED:
            self.state = SessionState.CONNECTED
        logger.info("Logged out %s", self.user)
        self.user = None
        return response

    async def send_query(self, query: Query) -> Response:
        """Send one query and wait for its response. Failed responses are returned, not raised."""
        if self.state in (SessionState.CLOSED, SessionState.DISCONNECTED):
            raise NetworkError(f"Session is {self.state.value}")
        async with self._lock:
            outbound = query.serialize()
            self._notify(Direction.OUTBOUND, outbound)
            try:
                await self.network.send(outbound)
                inbound = await self.network.receive()
            except BaseException:
                # a half-finished exchange leaves the reply stream out of step
                self.network.connected = False
                raise
            self._notify(Direction.INBOUND, inbound)
        response = parse_response(inbound)
        logger.debug("Query %s -> %s", query.action, "success" if response.successful else "failed")
        return response

    def _notify(self, direction: Direction, raw: str) -> None:
        if self.observer is not None:
            self.observer(direction, raw)

    async def close(self) -> None:
        if self.state == SessionState.CLOSED or self._closing:
            return
        self._closing = True
        try:
            if self.state == SessionState.AUTHENTICATED and self.network.connected:
                try:
                    await self.logout()
                except (RRIError, OSError) as exc:
                    logger.warning("Logout on close failed: %s", exc)
        finally:
            self.state = SessionState.CLOSED
            self.user = None
            await self.network.close()

    async def __aenter__(self) -> "ClientSession":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


async def connect(
    address: str,
    observer: Optional[RawTrafficObserver] = None,
    config: Optional[Dict[str, Any]] = None,
) -> ClientSession:
    """Open a TCP connection to ``address`` and return a connected session."""
    return await ClientSession.open(address, observer=observer, config=config)


__all__ = ["ClientSession", "Direction", "RawTrafficObserver", "SessionState", "connect"]
