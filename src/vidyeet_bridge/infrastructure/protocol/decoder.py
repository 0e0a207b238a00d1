"""Line protocol decoder for ``--machine`` output.

The CLI writes one JSON object per line: zero or more progress events
followed by a single terminal object. Lines that are not JSON objects are
diagnostic noise and are skipped; objects that parse but lack the
expected discriminator are protocol violations.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from vidyeet_bridge.domain.models import ProgressPhase

RawEvent = Dict[str, Any]

SUCCESS_FIELD = "success"
PHASE_FIELD = "phase"


@dataclass(frozen=True)
class DecodeError:
    """Why the output could not be turned into a terminal result."""

    reason: str
    line: Optional[str] = None


@dataclass
class DecodedOutput:
    """Decoded stdout: events in arrival order plus the terminal object."""

    events: List[RawEvent] = field(default_factory=list)
    terminal: Optional[RawEvent] = None
    error: Optional[DecodeError] = None
    skipped_lines: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None and self.terminal is not None


def parse_line(line: Union[bytes, str]) -> Optional[RawEvent]:
    """Parse one output line; None means the line is noise."""
    if isinstance(line, bytes):
        line = line.decode('utf-8', errors='replace')
    text = line.strip()
    if not text:
        return None
    try:
        value = json.loads(text)
    except ValueError:
        return None
    if not isinstance(value, dict):
        return None
    return value


def is_event_shaped(obj: RawEvent) -> bool:
    """True for objects that carry a phase and no success flag."""
    return PHASE_FIELD in obj and SUCCESS_FIELD not in obj


def event_phase(obj: RawEvent) -> Optional[str]:
    """Return the phase name of an event in flat or nested form."""
    phase = obj.get(PHASE_FIELD)
    if isinstance(phase, dict):
        phase = phase.get(PHASE_FIELD)
    return phase if isinstance(phase, str) else None


def has_terminal_shape(obj: RawEvent) -> bool:
    return isinstance(obj.get(SUCCESS_FIELD), bool)


class LineDecoder:
    """Incremental decoder fed one stdout line at a time."""

    def __init__(self):
        self._objects: List[RawEvent] = []
        self._skipped = 0

    def feed_line(self, line: Union[bytes, str]) -> Optional[RawEvent]:
        """Parse ``line`` and keep it if it is a JSON object.

        Returns:
            The parsed object, or None if the line was skipped
        """
        obj = parse_line(line)
        if obj is None:
            if line.strip():
                self._skipped += 1
            return None
        self._objects.append(obj)
        return obj

    @property
    def objects(self) -> List[RawEvent]:
        return list(self._objects)

    def finish(self) -> DecodedOutput:
        """
        Split the parsed objects into events and the terminal result.

        The last object is always the terminal one. Every earlier object must
        be an event with a known phase, whatever the operation; a stray
        object or an early terminal object is a protocol violation.
        """
        if not self._objects:
            return DecodedOutput(
                error=DecodeError("no JSON object in CLI output"),
                skipped_lines=self._skipped,
            )

        *events, terminal = self._objects
        output = DecodedOutput(events=events, terminal=terminal, skipped_lines=self._skipped)

        known = ProgressPhase.values()
        for event in events:
            if SUCCESS_FIELD in event:
                output.error = DecodeError(
                    "terminal object followed by further output",
                    line=json.dumps(event),
                )
                return output
            phase = event_phase(event)
            if phase not in known:
                output.error = DecodeError(
                    f"unrecognised progress event (phase={phase!r})",
                    line=json.dumps(event),
                )
                return output

        if not has_terminal_shape(terminal):
            output.error = DecodeError(
                f"terminal object has no boolean '{SUCCESS_FIELD}' field",
                line=json.dumps(terminal),
            )
        return output


def decode(data: Union[bytes, str]) -> DecodedOutput:
    """Decode a complete stdout capture."""
    if isinstance(data, bytes):
        data = data.decode('utf-8', errors='replace')
    decoder = LineDecoder()
    for line in data.splitlines():
        decoder.feed_line(line)
    return decoder.finish()
