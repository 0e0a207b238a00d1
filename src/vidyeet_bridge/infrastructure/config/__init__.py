"""Configuration package."""

from vidyeet_bridge.infrastructure.config.loader import (
    ConfigLoader,
    BridgeConfig,
    resolve_cli_path,
    CLI_EXECUTABLE,
)

__all__ = ["ConfigLoader", "BridgeConfig", "resolve_cli_path", "CLI_EXECUTABLE"]
