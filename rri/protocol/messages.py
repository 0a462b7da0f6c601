from __future__ import annotations

from enum import StrEnum
from typing import Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .constants import PROTOCOL_VERSION
from .errors import ProtocolError, QueryFailed


class Action(StrEnum):
    """RRI actions the client knows by name. Any other action text is still sendable."""

    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    CHECK = "CHECK"
    INFO = "INFO"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    RESTORE = "RESTORE"
    TRANSIT = "TRANSIT"
    CHPROV = "CHPROV"
    CREATE_AUTHINFO1 = "CREATE-AUTHINFO1"
    DELETE_AUTHINFO1 = "DELETE-AUTHINFO1"
    QUEUE_READ = "QUEUE-READ"
    QUEUE_DELETE = "QUEUE-DELETE"


RESULT_SUCCESS = "success"
RESULT_FAILED = "failed"


def _split_line(line: str, separators: str) -> Optional[Tuple[str, str]]:
    cuts = [line.find(sep) for sep in separators if sep in line]
    if not cuts:
        return None
    cut = min(cuts)
    return line[:cut].strip(), line[cut + 1 :].strip()


class QueryField(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    value: str = ""

    def __str__(self) -> str:
        return f"{self.name}: {self.value}"


class Query(BaseModel):
    """Ordered key/value lines forming one outbound request."""

    model_config = ConfigDict(frozen=True)

    fields: Tuple[QueryField, ...] = Field(default_factory=tuple)

    @classmethod
    def new(cls, action: Union[Action, str], *pairs: Tuple[str, str]) -> "Query":
        """Build a query with the protocol version and action in front of ``pairs``."""
        return cls.from_pairs([("version", PROTOCOL_VERSION), ("action", str(action)), *pairs])

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, str]]) -> "Query":
        return cls(fields=tuple(QueryField(name=name, value=value) for name, value in pairs))

    @classmethod
    def login(cls, user: str, password: str) -> "Query":
        return cls.new(Action.LOGIN, ("user", user), ("password", password))

    @classmethod
    def logout(cls) -> "Query":
        return cls.new(Action.LOGOUT)

    @classmethod
    def check(cls, domain: str) -> "Query":
        return cls.new(Action.CHECK, ("domain", domain))

    @classmethod
    def info(cls, domain: str) -> "Query":
        return cls.new(Action.INFO, ("domain", domain))

    @classmethod
    def parse(cls, text: str) -> "Query":
        """Parse ``name: value`` or ``name=value`` lines, split at the first separator."""
        pairs: List[Tuple[str, str]] = []
        for lineno, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.strip()
            if not line:
                continue
            pair = _split_line(line, ":=")
            if pair is None:
                raise ProtocolError(f"Line {lineno} is not a key/value pair: {line!r}")
            if not pair[0]:
                raise ProtocolError(f"Line {lineno} has an empty key")
            pairs.append(pair)
        if not pairs:
            raise ProtocolError("Query contains no fields")
        return cls.from_pairs(pairs)

    @property
    def action(self) -> Optional[str]:
        for field in self.fields:
            if field.name.lower() == "action":
                return field.value
        return None

    def serialize(self) -> str:
        return "\n".join(str(field) for field in self.fields)

    def __str__(self) -> str:
        return self.serialize()


class Response(BaseModel):
    """Parsed reply: success flag, error message on failure, and every result field."""

    model_config = ConfigDict(frozen=True)

    successful: bool
    error_message: Optional[str] = None
    fields: Dict[str, List[str]] = Field(default_factory=dict)
    raw: str = ""

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        values = self.fields.get(key.lower())
        return values[0] if values else default

    def values(self, key: str) -> List[str]:
        return list(self.fields.get(key.lower(), []))

    def raise_for_status(self) -> "Response":
        if not self.successful:
            raise QueryFailed(self)
        return self


def parse_response(text: str) -> Response:
    """Parse a raw response payload into a Response."""
    fields: Dict[str, List[str]] = {}
    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue
        pair = _split_line(line, ":")
        if pair is None or not pair[0]:
            raise ProtocolError(f"Malformed response line {lineno}: {line!r}")
        key, value = pair
        fields.setdefault(key.lower(), []).append(value)

    results = fields.get("result")
    if not results:
        raise ProtocolError("Response carries no RESULT field")
    result = results[0].lower()
    if result == RESULT_SUCCESS:
        return Response(successful=True, fields=fields, raw=text)
    if result != RESULT_FAILED:
        raise ProtocolError(f"Unknown RESULT value {results[0]!r}")

    messages = fields.get("error") or fields.get("info") or []
    error_message = "; ".join(m for m in messages if m) or "unknown error"
    return Response(successful=False, error_message=error_message, fields=fields, raw=text)


__all__ = ["Action", "QueryField", "Query", "Response", "parse_response"]
