from __future__ import annotations

from pathlib import Path
from typing import List, Union

from .constants import ENCODING, QUERY_DELIMITER
from .errors import DocumentParseError, ProtocolError
from .messages import Query


def split_query_document(text: str) -> List[str]:
    """Split a document into raw blocks on lines that equal the delimiter."""
    blocks: List[str] = []
    current: List[str] = []
    for line in text.split("\n"):
        if line.rstrip("\r") == QUERY_DELIMITER:
            blocks.append("\n".join(current))
            current = []
        else:
            current.append(line)
    blocks.append("\n".join(current))
    return blocks


def parse_query_document(text: str) -> List[Query]:
    """
    Parse every block of a query document. Blank blocks are skipped; the first
    malformed block aborts the whole parse so nothing is sent from a broken file.
    """
    queries: List[Query] = []
    for index, block in enumerate(split_query_document(text)):
        block = block.strip()
        if not block:
            continue
        try:
            queries.append(Query.parse(block))
        except ProtocolError as exc:
            raise DocumentParseError(index, exc.message) from exc
    return queries


def load_query_document(path: Union[str, Path]) -> List[Query]:
    with Path(path).open("r", encoding=ENCODING) as fp:
        return parse_query_document(fp.read())


__all__ = ["split_query_document", "parse_query_document", "load_query_document"]
