from __future__ import annotations

import asyncio
from typing import Callable, List, Optional, Set

import pytest

from rri.protocol import encode_frame, read_frame
from rri.protocol.errors import FramingError
from rri.protocol.messages import Query

Handler = Callable[[Query], Optional[str]]

SUCCESS = "RESULT: success"


def default_handler(query: Query) -> str:
    """Accept user/secret, reject anything else, answer every other action with success."""
    fields = {f.name: f.value for f in query.fields}
    if query.action == "LOGIN":
        if fields.get("user") == "user" and fields.get("password") == "secret":
            return SUCCESS
        return "RESULT: failed\nINFO: 83000000 Login failed"
    if query.action == "INFO" and fields.get("domain") == "missing.de":
        return "RESULT: failed\nINFO: 53000 Domain not found"
    return f"{SUCCESS}\nSTID: {len(query.fields)}"


class FakeRRIServer:
    """In-process RRI server answering each frame via ``handler``; None closes the connection."""

    def __init__(self, handler: Handler = default_handler) -> None:
        self.handler = handler
        self.received: List[Query] = []
        self._writers: Set[asyncio.StreamWriter] = set()
        self._server: Optional[asyncio.AbstractServer] = None

    @property
    def address(self) -> str:
        assert self._server is not None
        host, port = self._server.sockets[0].getsockname()[:2]
        return f"{host}:{port}"

    def actions(self) -> List[Optional[str]]:
        return [q.action for q in self.received]

    async def __aenter__(self) -> "FakeRRIServer":
        self._server = await asyncio.start_server(self._handle_client, "127.0.0.1", 0)
        return self

    async def __aexit__(self, *exc_info) -> None:
        assert self._server is not None
        self._server.close()
        for writer in list(self._writers):
            writer.close()
        await self._server.wait_closed()

    async def _handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._writers.add(writer)
        try:
            while True:
                try:
                    payload = await read_frame(reader)
                except FramingError:
                    break
                query = Query.parse(payload)
                self.received.append(query)
                answer = self.handler(query)
                if answer is None:
                    break
                writer.write(encode_frame(answer))
                await writer.drain()
        finally:
            self._writers.discard(writer)
            writer.close()


@pytest.fixture
def fake_server() -> Callable[..., FakeRRIServer]:
    return FakeRRIServer
