"""Error classification for CLI invocations.

Pure mapping from how the process ended (and what its output decoded to)
onto exactly one BridgeError kind, or None when the call succeeded.
"""

from typing import Any, Dict, Optional

from vidyeet_bridge.domain.exceptions import (
    BridgeError,
    ProcessNotFoundError,
    NonZeroExitError,
    MalformedOutputError,
    BridgeTimeoutError,
    NotAuthenticatedError,
    UnknownBridgeError,
)
from vidyeet_bridge.infrastructure.process.launcher import (
    LaunchOutcome,
    Completed,
    LaunchFailed,
    TimedOut,
    Cancelled,
)
from vidyeet_bridge.infrastructure.protocol.decoder import DecodedOutput, decode
from vidyeet_bridge.infrastructure.protocol.payloads import (
    FailurePayload,
    PayloadError,
    parse_failure,
)
from vidyeet_bridge.shared.logging import get_logger, tail

logger = get_logger(__name__)


def diagnostics(outcome: LaunchOutcome) -> Dict[str, Any]:
    """Raw process output worth attaching to an error."""
    details: Dict[str, Any] = {}
    if isinstance(outcome, Completed):
        details["exit_code"] = outcome.exit_code
    stdout = getattr(outcome, "stdout", b"")
    stderr = getattr(outcome, "stderr", b"")
    if stdout:
        details["stdout"] = tail(stdout)
    if stderr:
        details["stderr"] = tail(stderr)
    return details


def _failure_in(decoded: Optional[DecodedOutput]) -> Optional[FailurePayload]:
    if decoded is None or decoded.terminal is None:
        return None
    if decoded.terminal.get("success") is not False:
        return None
    try:
        return parse_failure(decoded.terminal)
    except PayloadError as e:
        logger.warning(f"Unreadable failure payload: {e}")
        return None


def _stderr_message(stderr: bytes, exit_code: int) -> str:
    lines = [line.strip() for line in stderr.decode('utf-8', errors='replace').splitlines()]
    lines = [line for line in lines if line]
    if lines:
        return lines[-1]
    return f"CLI exited with code {exit_code}"


def _failure_error(failure: FailurePayload, outcome: Completed) -> BridgeError:
    details = diagnostics(outcome)
    details.update(failure.diagnostics())
    message = failure.failure_message or f"CLI reported failure (exit code {outcome.exit_code})"
    if failure.is_not_authenticated:
        return NotAuthenticatedError(message, details)
    return NonZeroExitError(message, details)


def classify(outcome: LaunchOutcome, decoded: Optional[DecodedOutput] = None) -> Optional[BridgeError]:
    """
    Classify one finished invocation.

    Args:
        outcome: What the launcher reported
        decoded: Decoded stdout, for Completed outcomes

    Returns:
        The error to raise, or None if the terminal result is a success
    """
    if isinstance(outcome, LaunchFailed):
        return ProcessNotFoundError(
            f"CLI is not available: {outcome.reason}",
            {"executable": outcome.executable, "reason": outcome.reason},
        )

    if isinstance(outcome, Cancelled):
        return BridgeTimeoutError("CLI invocation was cancelled", diagnostics(outcome), cancelled=True)

    if isinstance(outcome, TimedOut):
        details = diagnostics(outcome)
        details["timeout"] = outcome.timeout
        return BridgeTimeoutError(f"CLI did not finish within {outcome.timeout:g}s", details)

    if not isinstance(outcome, Completed):
        return UnknownBridgeError(f"Unrecognised launch outcome: {outcome!r}")

    terminal = decoded.terminal if decoded is not None else None
    if terminal is not None and terminal.get("success") is False:
        try:
            return _failure_error(parse_failure(terminal), outcome)
        except PayloadError as e:
            if outcome.exit_code == 0:
                return malformed(str(e), outcome)
            logger.warning(f"Unreadable failure payload: {e}")

    if outcome.exit_code != 0:
        # Some CLI builds report failures as JSON on stderr
        stderr_failure = _failure_in(decode(outcome.stderr))
        if stderr_failure is not None:
            return _failure_error(stderr_failure, outcome)
        logger.warning(
            f"CLI exited with code {outcome.exit_code}; stderr: {tail(outcome.stderr)!r}"
        )
        return NonZeroExitError(_stderr_message(outcome.stderr, outcome.exit_code), diagnostics(outcome))

    if decoded is None:
        return MalformedOutputError("CLI output was not decoded", diagnostics(outcome))

    if decoded.error is not None:
        return malformed(decoded.error.reason, outcome, line=decoded.error.line)

    if decoded.terminal is not None and decoded.terminal.get("success") is True:
        return None

    return UnknownBridgeError(
        f"Unclassified CLI result (exit code {outcome.exit_code})",
        dict(diagnostics(outcome), diagnostic=tail(outcome.stdout) or tail(outcome.stderr)),
    )


def malformed(reason: str, outcome: LaunchOutcome, line: Optional[str] = None) -> MalformedOutputError:
    """Build the protocol-violation error for ``outcome``."""
    details = diagnostics(outcome)
    if line is not None:
        details["line"] = tail(line)
    logger.warning(f"Malformed CLI output: {reason}; stdout: {details.get('stdout', '')!r}")
    return MalformedOutputError(f"CLI output violates the machine protocol: {reason}", details)


def observer_failure(error: Exception, stdout: bytes = b"") -> UnknownBridgeError:
    """Build the error reported when the caller's progress observer raised."""
    details: Dict[str, Any] = {"diagnostic": repr(getattr(error, "cause", error))}
    if stdout:
        details["stdout"] = tail(stdout)
    return UnknownBridgeError(str(error), details)


def supervision_failure(error: Exception) -> UnknownBridgeError:
    """Build the error reported when running or watching the process itself failed."""
    return UnknownBridgeError(f"CLI supervision failed: {error!r}", {"diagnostic": repr(error)})
