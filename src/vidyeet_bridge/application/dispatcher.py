"""Command dispatcher: the bridge's entry point for CLI operations."""

import time
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from vidyeet_bridge.domain.models import Operation, OperationSpec, OPERATION_SPECS
from vidyeet_bridge.domain.exceptions import BridgeError
from vidyeet_bridge.domain.protocols import ILauncher, IMetricsCollector, ProgressObserver
from vidyeet_bridge.application.classifier import classify, malformed, observer_failure, supervision_failure
from vidyeet_bridge.application.relay import ProgressRelay, ProgressObserverError
from vidyeet_bridge.infrastructure.config.loader import BridgeConfig
from vidyeet_bridge.infrastructure.process.launcher import (
    ProcessLauncher,
    CancellationToken,
    Completed,
    LaunchOutcome,
)
from vidyeet_bridge.infrastructure.protocol.decoder import (
    DecodedOutput,
    DecodeError,
    LineDecoder,
    is_event_shaped,
)
from vidyeet_bridge.infrastructure.protocol.payloads import (
    PayloadError,
    parse_progress_event,
    to_response,
)
from vidyeet_bridge.shared.logging import get_logger

logger = get_logger(__name__)

MACHINE_FLAG = "--machine"


def build_command(operation: Operation, params: Optional[Mapping[str, Any]] = None) -> Tuple[List[str], Optional[bytes]]:
    """
    Build the argument vector and stdin payload for ``operation``.

    Credentials travel on stdin so they never appear in the process table.

    Raises:
        ValueError: If a required parameter is missing or empty
    """
    spec = OPERATION_SPECS[operation]
    if spec.local:
        raise ValueError(f"{operation.value} does not run the CLI")

    params = dict(params or {})
    args = [MACHINE_FLAG]
    for part in spec.command:
        if part.startswith("{") and part.endswith("}"):
            args.append(_required(params, part[1:-1], operation))
        else:
            args.append(part)

    stdin_data = None
    if operation is Operation.LOGIN:
        token_id = _required(params, "token_id", operation)
        token_secret = _required(params, "token_secret", operation)
        stdin_data = f"{token_id}\n{token_secret}".encode('utf-8')

    return args, stdin_data


def _required(params: Dict[str, Any], name: str, operation: Operation) -> str:
    value = params.get(name)
    if value is None or not str(value).strip():
        raise ValueError(f"{operation.value} requires a non-empty {name}")
    return str(value)


class PendingInvocation:
    """State of one in-flight CLI call.

    Owned by the ``execute`` call that created it and discarded once its
    outcome is settled; the outcome can be settled only once.
    """

    def __init__(self, operation: Operation, args: List[str], relay: ProgressRelay):
        self.operation = operation
        self.spec: OperationSpec = OPERATION_SPECS[operation]
        self.args = args
        self.relay = relay
        self.started_at = time.monotonic()
        self.decoder = LineDecoder()
        self.protocol_error: Optional[DecodeError] = None
        self._settled = False
        self._response: Any = None
        self._error: Optional[BridgeError] = None

    def on_stdout_line(self, line: bytes) -> None:
        """Decode one stdout line and relay it if it is a progress event."""
        obj = self.decoder.feed_line(line)
        if obj is None or not self.spec.streaming or not is_event_shaped(obj):
            return
        if self.protocol_error is not None:
            return
        try:
            event = parse_progress_event(obj)
        except PayloadError as e:
            self.protocol_error = DecodeError(str(e), line=line.decode('utf-8', errors='replace').strip())
            logger.warning(f"Stopped relaying progress for {self.operation.value}: {e}")
            return
        self.relay.deliver(event)

    def finish_decoding(self) -> DecodedOutput:
        decoded = self.decoder.finish()
        if decoded.error is None and self.protocol_error is not None:
            decoded.error = self.protocol_error
        return decoded

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at

    @property
    def settled(self) -> bool:
        return self._settled

    @property
    def error(self) -> Optional[BridgeError]:
        return self._error

    def resolve(self, response: Any) -> None:
        self._settle(response, None)

    def reject(self, error: BridgeError) -> None:
        self._settle(None, error)

    def _settle(self, response: Any, error: Optional[BridgeError]) -> None:
        if self._settled:
            raise RuntimeError(f"{self.operation.value} invocation already settled")
        self._settled = True
        self._response = response
        self._error = error

    def result(self) -> Any:
        """Return the response or raise the error."""
        if not self._settled:
            raise RuntimeError(f"{self.operation.value} invocation has not settled")
        if self._error is not None:
            raise self._error
        return self._response


class CommandDispatcher:
    """Runs CLI operations and turns their output into responses or errors.

    Holds only read-only configuration; every call builds its own
    PendingInvocation, so concurrent calls from different threads do not
    interact.
    """

    def __init__(
        self,
        config: BridgeConfig,
        launcher: Optional[ILauncher] = None,
        metrics: Optional[IMetricsCollector] = None
    ):
        self.config = config
        self._launcher = launcher or ProcessLauncher(
            poll_interval=config.poll_interval,
            kill_grace=config.kill_grace,
        )
        self._metrics = metrics

    @property
    def cli_path(self) -> Path:
        return self.config.cli_path

    def timeout_for(self, operation: Operation) -> float:
        if OPERATION_SPECS[operation].extended_timeout:
            return self.config.upload_timeout
        return self.config.default_timeout

    def execute(
        self,
        operation: Operation,
        params: Optional[Mapping[str, Any]] = None,
        on_progress: Optional[ProgressObserver] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> Any:
        """
        Run ``operation`` through the CLI.

        Progress events (streaming operations only) reach ``on_progress``
        in arrival order before this method returns or raises.

        Args:
            operation: Operation to run
            params: Operation parameters (asset_id, file_path, token_id, token_secret)
            on_progress: Optional progress observer
            cancel_token: Optional token to stop the call early

        Returns:
            The operation's response object

        Raises:
            BridgeError: Exactly one, when the call does not succeed
            ValueError: If parameters are invalid (nothing is spawned)
        """
        args, stdin_data = build_command(operation, params)
        pending = PendingInvocation(operation, args, ProgressRelay(on_progress))
        timeout = self.timeout_for(operation)

        logger.info(f"Running CLI {operation.value} (timeout {timeout:g}s)")
        try:
            outcome = self._launcher.launch(
                self.cli_path,
                args,
                timeout,
                stdin_data=stdin_data,
                on_stdout_line=pending.on_stdout_line,
                cancel_token=cancel_token,
            )
        except ProgressObserverError as e:
            logger.error(f"{operation.value} aborted: {e}")
            pending.reject(observer_failure(e))
        except Exception as e:
            logger.exception(f"{operation.value} aborted: launcher failed")
            pending.reject(supervision_failure(e))
        else:
            self._settle(pending, outcome)

        self._record(pending)
        return pending.result()

    def _settle(self, pending: PendingInvocation, outcome: LaunchOutcome) -> None:
        decoded = pending.finish_decoding() if isinstance(outcome, Completed) else None
        error = classify(outcome, decoded)
        if error is not None:
            pending.reject(error)
            return

        try:
            response = to_response(pending.operation, decoded.terminal)
        except PayloadError as e:
            pending.reject(malformed(str(e), outcome))
            return

        if decoded.skipped_lines:
            logger.debug(f"{pending.operation.value}: skipped {decoded.skipped_lines} non-JSON line(s)")
        pending.resolve(response)

    def _record(self, pending: PendingInvocation) -> None:
        op = pending.operation.value
        error = pending.error
        if error is None:
            label = "ok"
            logger.info(f"CLI {op} succeeded in {pending.elapsed:.2f}s")
        else:
            label = error.kind.value
            logger.info(f"CLI {op} failed [{label}]: {error.message}")

        if self._metrics is not None:
            self._metrics.record_metric(f"{op}_duration", pending.elapsed)
            self._metrics.increment_counter(f"{op}.{label}")
