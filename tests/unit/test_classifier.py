"""Tests for error classification."""

import json

import pytest

from vidyeet_bridge.application.classifier import classify, malformed, observer_failure
from vidyeet_bridge.application.relay import ProgressObserverError
from vidyeet_bridge.domain.exceptions import (
    ErrorKind,
    BridgeTimeoutError,
    NonZeroExitError,
    NotAuthenticatedError,
    UnknownBridgeError,
)
from vidyeet_bridge.domain.models import ProgressEvent, ProgressPhase
from vidyeet_bridge.infrastructure.process.launcher import Completed, LaunchFailed, TimedOut, Cancelled
from vidyeet_bridge.infrastructure.protocol.decoder import decode


def completed(exit_code: int, stdout=b"", stderr=b"") -> Completed:
    if isinstance(stdout, dict):
        stdout = json.dumps(stdout).encode()
    return Completed(exit_code=exit_code, stdout=stdout, stderr=stderr, duration=0.1)


def run(outcome):
    decoded = decode(outcome.stdout) if isinstance(outcome, Completed) else None
    return classify(outcome, decoded)


class TestClassify:
    def test_success(self):
        assert run(completed(0, {"success": True})) is None

    def test_launch_failure(self):
        error = run(LaunchFailed(reason="executable not found: /x", executable="/x"))
        assert error.kind is ErrorKind.PROCESS_NOT_FOUND
        assert error.details["executable"] == "/x"

    def test_timeout(self):
        error = run(TimedOut(timeout=5.0, stdout=b"partial", stderr=b"", duration=5.1))
        assert isinstance(error, BridgeTimeoutError)
        assert error.kind is ErrorKind.TIMEOUT
        assert not error.cancelled
        assert error.details["timeout"] == 5.0
        assert error.details["stdout"] == "partial"

    def test_cancelled(self):
        error = run(Cancelled(stdout=b"", stderr=b"", duration=0.2))
        assert error.kind is ErrorKind.TIMEOUT
        assert error.cancelled

    def test_structured_failure_with_non_zero_exit(self):
        error = run(completed(1, {"success": False, "message": "invalid token"}))
        assert isinstance(error, NonZeroExitError)
        assert error.message == "invalid token"
        assert error.details["exit_code"] == 1

    def test_structured_failure_with_zero_exit(self):
        error = run(completed(0, {"success": False, "error": {"message": "quota exceeded", "hint": "upgrade"}}))
        assert error.kind is ErrorKind.NON_ZERO_EXIT
        assert error.details["hint"] == "upgrade"

    @pytest.mark.parametrize("exit_code", [0, 1])
    def test_not_authenticated_regardless_of_exit_code(self, exit_code):
        error = run(completed(exit_code, {"success": False, "error": {"code": "NOT_AUTHENTICATED", "message": "login first"}}))
        assert isinstance(error, NotAuthenticatedError)
        assert error.message == "login first"

    def test_unstructured_non_zero_exit_uses_stderr(self):
        error = run(completed(2, b"panic!\n", b"thread main panicked\nconnection refused\n"))
        assert error.kind is ErrorKind.NON_ZERO_EXIT
        assert error.message == "connection refused"
        assert "panicked" in error.details["stderr"]

    def test_non_zero_exit_without_any_output(self):
        error = run(completed(3))
        assert error.message == "CLI exited with code 3"

    def test_non_zero_exit_with_json_failure_on_stderr(self):
        stderr = json.dumps({"success": False, "error": {"exit_code": 1, "message": "File not found: a.mp4"}}).encode()
        error = run(completed(1, b"", stderr))
        assert error.kind is ErrorKind.NON_ZERO_EXIT
        assert error.message == "File not found: a.mp4"

    def test_success_payload_with_non_zero_exit(self):
        error = run(completed(1, {"success": True}))
        assert error.kind is ErrorKind.NON_ZERO_EXIT

    def test_zero_exit_with_garbage(self):
        error = run(completed(0, b"hello world\n"))
        assert error.kind is ErrorKind.MALFORMED_OUTPUT
        assert error.details["stdout"] == "hello world\n"

    def test_zero_exit_with_unknown_event_phase(self):
        stdout = b'{"phase": "mystery"}\n{"success": true, "asset_id": "a"}\n'
        error = run(completed(0, stdout))
        assert error.kind is ErrorKind.MALFORMED_OUTPUT
        assert "mystery" in error.details["line"]

    def test_unreadable_failure_payload_with_zero_exit(self):
        error = run(completed(0, {"success": False, "error": 42}))
        assert error.kind is ErrorKind.MALFORMED_OUTPUT

    def test_unrecognised_outcome_is_unknown(self):
        error = classify(object())
        assert isinstance(error, UnknownBridgeError)
        assert error.details["diagnostic"]

    def test_every_error_serialises(self):
        error = run(completed(1, {"success": False, "message": "nope"}))
        payload = error.to_dict()
        assert payload["kind"] == "non-zero-exit"
        assert payload["message"] == "nope"
        assert payload["details"]["exit_code"] == 1


class TestHelpers:
    def test_malformed_carries_line(self):
        error = malformed("bad", completed(0, b"x"), line='{"a": 1}')
        assert error.kind is ErrorKind.MALFORMED_OUTPUT
        assert error.details["line"] == '{"a": 1}'

    def test_observer_failure_is_unknown_with_diagnostic(self):
        event = ProgressEvent(phase=ProgressPhase.VALIDATING_FILE)
        error = observer_failure(ProgressObserverError(event, RuntimeError("ui gone")))
        assert error.kind is ErrorKind.UNKNOWN
        assert "ui gone" in error.details["diagnostic"]
