"""Bridge between a desktop UI and the vidyeet command-line tool."""

from vidyeet_bridge.application import VidyeetClient, CommandDispatcher
from vidyeet_bridge.domain import (
    Operation,
    ProgressEvent,
    ProgressPhase,
    ErrorKind,
    BridgeError,
)
from vidyeet_bridge.infrastructure.config import BridgeConfig, ConfigLoader
from vidyeet_bridge.infrastructure.process import CancellationToken

__version__ = "0.1.0"

__all__ = [
    "VidyeetClient",
    "CommandDispatcher",
    "Operation",
    "ProgressEvent",
    "ProgressPhase",
    "ErrorKind",
    "BridgeError",
    "BridgeConfig",
    "ConfigLoader",
    "CancellationToken",
]
