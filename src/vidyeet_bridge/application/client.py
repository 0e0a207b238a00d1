"""Operation-level API consumed by the UI."""

from pathlib import Path
from typing import Optional

from vidyeet_bridge.domain.models import (
    Operation,
    StatusResponse,
    CommandResponse,
    ListResponse,
    UploadResponse,
    SelectFileResponse,
)
from vidyeet_bridge.domain.protocols import FileChooser, IMetricsCollector, ProgressObserver
from vidyeet_bridge.application.dispatcher import CommandDispatcher
from vidyeet_bridge.application.file_selection import FileSelector
from vidyeet_bridge.infrastructure.config.loader import BridgeConfig, ConfigLoader
from vidyeet_bridge.infrastructure.process.launcher import CancellationToken
from vidyeet_bridge.shared.types import PathLike


class VidyeetClient:
    """
    One method per operation. Each returns its response or raises a
    single BridgeError; safe to call from several threads at once.
    """

    def __init__(
        self,
        config: Optional[BridgeConfig] = None,
        dispatcher: Optional[CommandDispatcher] = None,
        file_selector: Optional[FileSelector] = None,
        metrics: Optional[IMetricsCollector] = None
    ):
        self.config = config or (dispatcher.config if dispatcher else BridgeConfig())
        self._dispatcher = dispatcher or CommandDispatcher(self.config, metrics=metrics)
        self._file_selector = file_selector or FileSelector()

    @classmethod
    def from_config_file(cls, config_path: Optional[PathLike] = None, **overrides) -> "VidyeetClient":
        config = ConfigLoader(Path(config_path) if config_path else None).load(overrides=overrides)
        return cls(config=config)

    @property
    def dispatcher(self) -> CommandDispatcher:
        return self._dispatcher

    def status(self, cancel_token: Optional[CancellationToken] = None) -> StatusResponse:
        return self._dispatcher.execute(Operation.STATUS, cancel_token=cancel_token)

    def login(
        self,
        token_id: str,
        token_secret: str,
        cancel_token: Optional[CancellationToken] = None
    ) -> CommandResponse:
        return self._dispatcher.execute(
            Operation.LOGIN,
            {"token_id": token_id, "token_secret": token_secret},
            cancel_token=cancel_token,
        )

    def logout(self, cancel_token: Optional[CancellationToken] = None) -> CommandResponse:
        return self._dispatcher.execute(Operation.LOGOUT, cancel_token=cancel_token)

    def list(self, cancel_token: Optional[CancellationToken] = None) -> ListResponse:
        return self._dispatcher.execute(Operation.LIST, cancel_token=cancel_token)

    def delete(self, asset_id: str, cancel_token: Optional[CancellationToken] = None) -> CommandResponse:
        return self._dispatcher.execute(
            Operation.DELETE, {"asset_id": asset_id}, cancel_token=cancel_token
        )

    def upload(
        self,
        file_path: PathLike,
        on_progress: Optional[ProgressObserver] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> UploadResponse:
        """Upload a video; progress reaches ``on_progress`` before this returns."""
        return self._dispatcher.execute(
            Operation.UPLOAD,
            {"file_path": str(file_path) if file_path else ""},
            on_progress=on_progress,
            cancel_token=cancel_token,
        )

    def select_file(self, chooser: Optional[FileChooser] = None) -> SelectFileResponse:
        return self._file_selector.select(chooser)
