"""Shared utilities package."""

from vidyeet_bridge.shared.logging import setup_logger, get_logger, tail
from vidyeet_bridge.shared.metrics import MetricsCollector
from vidyeet_bridge.shared.types import PathLike

__all__ = [
    "setup_logger",
    "get_logger",
    "tail",
    "MetricsCollector",
    "PathLike",
]
