"""Protocol-wide constants for the RRI wire format."""

PROTOCOL_VERSION = "3.0"
ENCODING = "utf-8"
LENGTH_PREFIX_SIZE = 4  # bytes, unsigned big-endian
MAX_FRAME_SIZE = 65535  # upper bound for a received payload
QUERY_DELIMITER = "=-="
CENSOR_MASK = "******"

__all__ = [
    "PROTOCOL_VERSION",
    "ENCODING",
    "LENGTH_PREFIX_SIZE",
    "MAX_FRAME_SIZE",
    "QUERY_DELIMITER",
    "CENSOR_MASK",
]
