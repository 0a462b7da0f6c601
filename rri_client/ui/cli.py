from __future__ import annotations

import asyncio
import getpass
import logging
from typing import List

from rri.protocol import censor
from rri.protocol.documents import load_query_document
from rri.protocol.errors import DocumentParseError, ProtocolError, QueryFailed
from rri.protocol.messages import Query, Response

from rri_client.core.session import ClientSession, Direction
from rri_client.features.batch import BatchRunner

logger = logging.getLogger(__name__)

ARROWS = {Direction.OUTBOUND: ">>>", Direction.INBOUND: "<<<"}


class TrafficPrinter:
    """Session observer that prints censored raw traffic while enabled."""

    def __init__(self, enabled: bool = False) -> None:
        self.enabled = enabled

    def __call__(self, direction: Direction, raw: str) -> None:
        if not self.enabled:
            return
        print(ARROWS[direction])
        print(censor(raw))
        print()


def print_response(response: Response) -> None:
    if response.successful:
        print(response.raw.strip())
    else:
        print(f"Query failed: {response.error_message}")


class RRIShell:
    """Line oriented shell sending queries over one session."""

    def __init__(self, session: ClientSession, printer: TrafficPrinter) -> None:
        self.session = session
        self.printer = printer

    async def run(self) -> None:
        logger.info("Shell ready. Type 'help' for commands.")
        while True:
            try:
                cmd = await self._prompt("> ")
            except EOFError:
                break
            parts = cmd.strip().split()
            if not parts:
                continue
            try:
                match parts[0].lower():
                    case "help":
                        self._show_help()
                    case "login":
                        await self._handle_login(parts)
                    case "logout":
                        await self.session.logout()
                        print("Logged out.")
                    case "check" | "info":
                        await self._handle_domain_query(parts)
                    case "raw":
                        await self._handle_raw()
                    case "file":
                        await self._handle_file(parts)
                    case "verbose":
                        self._handle_verbose(parts)
                    case "quit" | "exit":
                        break
                    case _:
                        print("Unknown command")
            except QueryFailed as exc:
                print(f"Query failed: {exc.message}")

    async def _prompt(self, text: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, input, text)

    def _show_help(self) -> None:
        print(
            "Commands: login <user> [password], logout, check <domain>, info <domain>, "
            "raw (enter query lines, finish with an empty line), file <path>, "
            "verbose [on|off], quit"
        )

    async def _handle_login(self, parts: List[str]) -> None:
        if len(parts) < 2:
            print("Usage: login <user> [password]")
            return
        user = parts[1]
        if len(parts) > 2:
            password = parts[2]
        else:
            loop = asyncio.get_running_loop()
            password = await loop.run_in_executor(None, getpass.getpass, f"Password for {user}: ")
        await self.session.login(user, password)
        print(f"Logged in as {user}")

    async def _handle_domain_query(self, parts: List[str]) -> None:
        if len(parts) != 2:
            print(f"Usage: {parts[0]} <domain>")
            return
        factory = Query.check if parts[0].lower() == "check" else Query.info
        print_response(await self.session.send_query(factory(parts[1])))

    async def _handle_raw(self) -> None:
        lines: List[str] = []
        while True:
            line = await self._prompt("  ")
            if not line.strip():
                break
            lines.append(line)
        if not lines:
            return
        try:
            query = Query.parse("\n".join(lines))
        except ProtocolError as exc:
            print(f"Invalid query: {exc.message}")
            return
        print_response(await self.session.send_query(query))

    async def _handle_file(self, parts: List[str]) -> None:
        if len(parts) != 2:
            print("Usage: file <path>")
            return
        try:
            queries = load_query_document(parts[1])
        except OSError as exc:
            print(f"Cannot read {parts[1]}: {exc}")
            return
        except DocumentParseError as exc:
            print(f"Invalid query file: {exc.message}")
            return
        report = await BatchRunner(self.session, on_query=print_query).run(queries)
        if report.successful:
            print(f"Executed {len(report.executed)} queries.")
        else:
            print(f"Query {report.failed_index} failed: {report.error_message}")

    def _handle_verbose(self, parts: List[str]) -> None:
        if len(parts) > 1:
            self.printer.enabled = parts[1].lower() in {"1", "true", "yes", "on"}
        else:
            self.printer.enabled = not self.printer.enabled
        print(f"Verbose output {'on' if self.printer.enabled else 'off'}.")


def print_query(index: int, query: Query) -> None:
    print(f"Exec query {index}: {query.action or '<no action>'}")


__all__ = ["RRIShell", "TrafficPrinter", "print_query", "print_response"]
