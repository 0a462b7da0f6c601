"""
Protocol package: frame codec, query/response models, query documents and the
censor used for printing raw traffic.
"""

from .censoring import censor
from .constants import (
    CENSOR_MASK,
    ENCODING,
    LENGTH_PREFIX_SIZE,
    MAX_FRAME_SIZE,
    PROTOCOL_VERSION,
    QUERY_DELIMITER,
)
from .documents import load_query_document, parse_query_document, split_query_document
from .errors import (
    DocumentParseError,
    ErrorKind,
    FramingError,
    NetworkError,
    ProtocolError,
    QueryFailed,
    RRIError,
)
from .framing import encode_frame, read_exact, read_frame
from .messages import Action, Query, QueryField, Response, parse_response

__all__ = [
    "censor",
    "CENSOR_MASK",
    "ENCODING",
    "LENGTH_PREFIX_SIZE",
    "MAX_FRAME_SIZE",
    "PROTOCOL_VERSION",
    "QUERY_DELIMITER",
    "load_query_document",
    "parse_query_document",
    "split_query_document",
    "DocumentParseError",
    "ErrorKind",
    "FramingError",
    "NetworkError",
    "ProtocolError",
    "QueryFailed",
    "RRIError",
    "encode_frame",
    "read_exact",
    "read_frame",
    "Action",
    "Query",
    "QueryField",
    "Response",
    "parse_response",
]
