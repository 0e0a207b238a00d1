import sys
import textwrap
from pathlib import Path

import pytest

from vidyeet_bridge.infrastructure.config import BridgeConfig


@pytest.fixture
def make_cli(tmp_path):
    """Write a fake CLI: a POSIX shell wrapper that runs a Python body.

    The body sees the CLI arguments in ``sys.argv[1:]``.
    """
    if sys.platform.startswith("win"):
        pytest.skip("fake CLI wrapper needs a POSIX shell")

    def _make(body: str, name: str = "vidyeet-cli") -> Path:
        script = tmp_path / f"{name}.py"
        script.write_text(textwrap.dedent(body), encoding="utf-8")
        wrapper = tmp_path / name
        wrapper.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{script}" "$@"\n', encoding="utf-8")
        wrapper.chmod(0o755)
        return wrapper

    return _make


@pytest.fixture
def make_config():
    def _make(cli_path: Path, **kwargs) -> BridgeConfig:
        kwargs.setdefault("default_timeout", 10.0)
        kwargs.setdefault("upload_timeout", 10.0)
        kwargs.setdefault("poll_interval", 0.01)
        kwargs.setdefault("kill_grace", 2.0)
        return BridgeConfig(cli_path=cli_path, **kwargs)

    return _make
