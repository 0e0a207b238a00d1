"""Wire schemas for CLI payloads.

The CLI has emitted both snake_case and camelCase keys over time, so every
schema accepts either spelling.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from vidyeet_bridge.domain.models import (
    Operation,
    ProgressPhase,
    ProgressEvent,
    StatusResponse,
    CommandResponse,
    AssetItem,
    ListResponse,
    UploadResponse,
)

NOT_AUTHENTICATED_CODE = "not_authenticated"


class PayloadError(ValueError):
    """Raised when a decoded object does not match its schema."""
    pass


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class StatusPayload(WireModel):
    success: bool
    is_authenticated: bool = False
    token_id: Optional[str] = None


class AckPayload(WireModel):
    success: bool
    command: Optional[str] = None


class PlaybackIdPayload(WireModel):
    id: str
    policy: Optional[str] = None


class AssetPayload(WireModel):
    id: str
    playback_ids: Optional[List[PlaybackIdPayload]] = None
    duration: Optional[float] = None
    status: Optional[str] = None
    resolution_tier: Optional[str] = None
    aspect_ratio: Optional[str] = None
    max_stored_frame_rate: Optional[float] = None
    created_at: Optional[Union[str, int]] = None

    def to_item(self) -> AssetItem:
        playback_id = self.playback_ids[0].id if self.playback_ids else None
        created_at = str(self.created_at) if self.created_at is not None else None
        return AssetItem(
            asset_id=self.id,
            playback_id=playback_id,
            duration=self.duration,
            status=self.status,
            resolution_tier=self.resolution_tier,
            aspect_ratio=self.aspect_ratio,
            max_frame_rate=self.max_stored_frame_rate,
            created_at=created_at,
        )


class ListPayload(WireModel):
    success: bool
    data: List[AssetPayload]


class UploadPayload(WireModel):
    success: bool
    asset_id: str


class FailureDetail(WireModel):
    message: Optional[str] = None
    hint: Optional[str] = None
    code: Optional[str] = None
    exit_code: Optional[int] = None


class FailurePayload(WireModel):
    """``{"success": false, ...}`` in either the flat or the nested form."""

    success: bool
    message: Optional[str] = None
    code: Optional[str] = None
    error: Optional[Union[FailureDetail, str]] = None

    @property
    def detail(self) -> Optional[FailureDetail]:
        return self.error if isinstance(self.error, FailureDetail) else None

    @property
    def failure_message(self) -> Optional[str]:
        if self.detail is not None and self.detail.message:
            return self.detail.message
        if isinstance(self.error, str) and self.error:
            return self.error
        return self.message

    @property
    def failure_code(self) -> Optional[str]:
        code = self.detail.code if self.detail is not None and self.detail.code else self.code
        if not code:
            return None
        return code.strip().lower().replace("-", "_")

    @property
    def is_not_authenticated(self) -> bool:
        return self.failure_code == NOT_AUTHENTICATED_CODE

    def diagnostics(self) -> Dict[str, Any]:
        details: Dict[str, Any] = {}
        if self.failure_code:
            details["code"] = self.failure_code
        if self.detail is not None:
            if self.detail.hint:
                details["hint"] = self.detail.hint
            if self.detail.exit_code is not None:
                details["cli_exit_code"] = self.detail.exit_code
        return details


class ProgressPayload(WireModel):
    phase: ProgressPhase
    file_name: Optional[str] = None
    file_path: Optional[str] = None
    size_bytes: Optional[int] = None
    format: Optional[str] = None
    upload_id: Optional[str] = None
    percent: Optional[float] = None
    current_chunk: Optional[int] = None
    total_chunks: Optional[int] = None
    bytes_sent: Optional[int] = None
    total_bytes: Optional[int] = None
    elapsed_secs: Optional[float] = None
    asset_id: Optional[str] = None


def _validate(model, obj: Dict[str, Any]):
    try:
        return model.model_validate(obj)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        raise PayloadError(f"{model.__name__} rejected CLI payload: {problems}") from e


def parse_failure(obj: Dict[str, Any]) -> FailurePayload:
    return _validate(FailurePayload, obj)


def parse_progress_event(obj: Dict[str, Any]) -> ProgressEvent:
    """Turn a raw event (flat or nested under ``phase``) into a ProgressEvent."""
    if isinstance(obj.get("phase"), dict):
        obj = obj["phase"]
    payload = _validate(ProgressPayload, obj)
    return ProgressEvent(**payload.model_dump())


def to_response(operation: Operation, terminal: Dict[str, Any]):
    """
    Map a successful terminal object to the operation's response type.

    Raises:
        PayloadError: If the object does not match the operation's schema
    """
    if operation is Operation.STATUS:
        status = _validate(StatusPayload, terminal)
        return StatusResponse(
            is_authenticated=status.success and status.is_authenticated,
            token_id=status.token_id,
        )

    if operation in (Operation.LOGIN, Operation.LOGOUT, Operation.DELETE):
        _validate(AckPayload, terminal)
        return CommandResponse(success=True)

    if operation is Operation.LIST:
        listing = _validate(ListPayload, terminal)
        return ListResponse(items=[asset.to_item() for asset in listing.data])

    if operation is Operation.UPLOAD:
        upload = _validate(UploadPayload, terminal)
        return UploadResponse(asset_id=upload.asset_id)

    raise PayloadError(f"No CLI payload schema for operation {operation.value!r}")
