"""Tests for the operation-level client."""

from pathlib import Path
from unittest.mock import Mock

import pytest

from vidyeet_bridge.application.client import VidyeetClient
from vidyeet_bridge.application.file_selection import FileSelector
from vidyeet_bridge.domain.exceptions import BridgeTimeoutError, NonZeroExitError
from vidyeet_bridge.domain.models import (
    Operation,
    AssetItem,
    CommandResponse,
    ListResponse,
    ProgressPhase,
)
from vidyeet_bridge.infrastructure.config import BridgeConfig
from vidyeet_bridge.infrastructure.process.launcher import CancellationToken


@pytest.fixture
def dispatcher():
    mock = Mock()
    mock.config = BridgeConfig(cli_path=Path("/x"))
    return mock


def test_operations_map_to_dispatcher(dispatcher):
    client = VidyeetClient(dispatcher=dispatcher)
    token = CancellationToken()

    client.status()
    client.login("id", "secret")
    client.logout()
    client.list()
    client.delete("asset-1", cancel_token=token)

    calls = [c.args for c in dispatcher.execute.call_args_list]
    assert calls == [
        (Operation.STATUS,),
        (Operation.LOGIN, {"token_id": "id", "token_secret": "secret"}),
        (Operation.LOGOUT,),
        (Operation.LIST,),
        (Operation.DELETE, {"asset_id": "asset-1"}),
    ]
    assert dispatcher.execute.call_args.kwargs["cancel_token"] is token
    assert client.config is dispatcher.config


def test_upload_passes_observer(dispatcher):
    observer = Mock()
    VidyeetClient(dispatcher=dispatcher).upload(Path("/v/a.mp4"), on_progress=observer)

    args, kwargs = dispatcher.execute.call_args
    assert args == (Operation.UPLOAD, {"file_path": "/v/a.mp4"})
    assert kwargs["on_progress"] is observer


def test_select_file_is_local(dispatcher, tmp_path):
    video = tmp_path / "a.mkv"
    video.write_bytes(b"")
    client = VidyeetClient(dispatcher=dispatcher, file_selector=FileSelector(lambda d, e: str(video)))

    assert client.select_file().file_path == str(video)
    dispatcher.execute.assert_not_called()


def test_from_config_file(tmp_path, monkeypatch):
    for var in ("VIDYEET_CLI_PATH", "VIDYEET_TIMEOUT", "VIDYEET_UPLOAD_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)
    path = tmp_path / "vidyeet.yaml"
    path.write_text("upload_timeout: 60\n")

    client = VidyeetClient.from_config_file(path, cli_path=tmp_path / "cli")

    assert client.config.upload_timeout == 60
    assert client.dispatcher.cli_path == tmp_path / "cli"
    assert client.dispatcher.timeout_for(Operation.UPLOAD) == 60
    assert client.dispatcher.timeout_for(Operation.LIST) == 30


class TestAgainstFakeCli:
    def test_list_and_delete(self, make_cli, make_config):
        cli = make_cli("""
            import json, sys
            args = sys.argv[2:]
            if args == ["list"]:
                print(json.dumps({"success": True, "data": [
                    {"id": "a1", "playback_ids": [{"id": "p1"}], "duration": 3.5, "status": "ready"}
                ]}))
            elif args[:1] == ["delete"] and args[-1] == "--force":
                print(json.dumps({"command": "delete", "success": True}))
            else:
                print(json.dumps({"success": False, "message": "unexpected " + " ".join(args)}))
                sys.exit(2)
        """)
        client = VidyeetClient(config=make_config(cli))

        assert client.list() == ListResponse(items=[
            AssetItem(asset_id="a1", playback_id="p1", duration=3.5, status="ready")
        ])
        assert client.delete("a1") == CommandResponse(success=True)

    def test_cancelled_upload(self, make_cli, make_config):
        cli = make_cli("""
            import json, time
            print(json.dumps({"phase": "uploading_file"}), flush=True)
            time.sleep(60)
        """)
        client = VidyeetClient(config=make_config(cli, upload_timeout=30))
        token = CancellationToken()
        seen = []

        def observer(event):
            seen.append(event)
            token.cancel()

        with pytest.raises(BridgeTimeoutError) as excinfo:
            client.upload("clip.mp4", on_progress=observer, cancel_token=token)
        assert excinfo.value.cancelled
        assert [e.phase for e in seen] == [ProgressPhase.UPLOADING_FILE]

    def test_error_is_raised_once_per_call(self, make_cli, make_config):
        cli = make_cli("""
            import sys
            sys.stderr.write("network unreachable\\n")
            sys.exit(7)
        """)
        client = VidyeetClient(config=make_config(cli))
        with pytest.raises(NonZeroExitError, match="network unreachable"):
            client.status()
