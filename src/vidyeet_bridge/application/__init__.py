"""Application layer package."""

from vidyeet_bridge.application.client import VidyeetClient
from vidyeet_bridge.application.dispatcher import CommandDispatcher, PendingInvocation, build_command
from vidyeet_bridge.application.relay import ProgressRelay, ProgressObserverError, deliver
from vidyeet_bridge.application.classifier import classify
from vidyeet_bridge.application.file_selection import FileSelector, VIDEO_EXTENSIONS

__all__ = [
    "VidyeetClient",
    "CommandDispatcher",
    "PendingInvocation",
    "build_command",
    "ProgressRelay",
    "ProgressObserverError",
    "deliver",
    "classify",
    "FileSelector",
    "VIDEO_EXTENSIONS",
]
