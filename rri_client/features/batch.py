from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import List, Optional

from rri.protocol.errors import RRIError
from rri.protocol.messages import Query, Response

from rri_client.core.session import ClientSession

logger = logging.getLogger(__name__)

QueryCallback = Callable[[int, Query], None]


@dataclass
class BatchReport:
    """Outcome of a batch: every response received plus the failing query, if any."""

    total: int
    executed: List[Response] = field(default_factory=list)
    failed_index: Optional[int] = None
    error_message: Optional[str] = None

    @property
    def successful(self) -> bool:
        return self.failed_index is None


class BatchRunner:
    """Run queries in order, stopping at the first rejected query."""

    def __init__(self, session: ClientSession, on_query: Optional[QueryCallback] = None) -> None:
        self.session = session
        self.on_query = on_query

    async def run(self, queries: Sequence[Query]) -> BatchReport:
        report = BatchReport(total=len(queries))
        for index, query in enumerate(queries):
            if self.on_query:
                self.on_query(index, query)
            try:
                response = await self.session.send_query(query)
            except RRIError as exc:
                logger.error("Batch aborted at query %d (%s): %s", index, query.action, exc)
                raise
            report.executed.append(response)
            if not response.successful:
                report.failed_index = index
                report.error_message = response.error_message
                logger.warning("Query %d (%s) failed: %s", index, query.action, response.error_message)
                break
        return report


__all__ = ["BatchReport", "BatchRunner", "QueryCallback"]
