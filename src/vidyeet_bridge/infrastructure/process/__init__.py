"""Subprocess supervision package."""

from vidyeet_bridge.infrastructure.process.launcher import (
    ProcessLauncher,
    CancellationToken,
    Completed,
    LaunchFailed,
    TimedOut,
    Cancelled,
    LaunchOutcome,
    check_executable,
    terminate_tree,
)

__all__ = [
    "ProcessLauncher",
    "CancellationToken",
    "Completed",
    "LaunchFailed",
    "TimedOut",
    "Cancelled",
    "LaunchOutcome",
    "check_executable",
    "terminate_tree",
]
