"""Machine-output protocol package."""

from vidyeet_bridge.infrastructure.protocol.decoder import (
    DecodedOutput,
    DecodeError,
    LineDecoder,
    RawEvent,
    decode,
    parse_line,
)
from vidyeet_bridge.infrastructure.protocol.payloads import (
    PayloadError,
    parse_failure,
    parse_progress_event,
    to_response,
)

__all__ = [
    "DecodedOutput",
    "DecodeError",
    "LineDecoder",
    "RawEvent",
    "decode",
    "parse_line",
    "PayloadError",
    "parse_failure",
    "parse_progress_event",
    "to_response",
]
