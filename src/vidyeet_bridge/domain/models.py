"""Domain models for the CLI bridge."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Tuple, Dict


class Operation(str, Enum):
    """Logical requests the bridge can serve."""

    STATUS = "status"
    LOGIN = "login"
    LOGOUT = "logout"
    LIST = "list"
    DELETE = "delete"
    SELECT_FILE = "select-file"
    UPLOAD = "upload"


@dataclass(frozen=True)
class OperationSpec:
    """Static description of how an operation is run."""

    operation: Operation
    command: Tuple[str, ...] = ()
    streaming: bool = False
    extended_timeout: bool = False
    local: bool = False


OPERATION_SPECS: Dict[Operation, OperationSpec] = {
    Operation.STATUS: OperationSpec(Operation.STATUS, ("status",)),
    Operation.LOGIN: OperationSpec(Operation.LOGIN, ("login", "--stdin")),
    Operation.LOGOUT: OperationSpec(Operation.LOGOUT, ("logout",)),
    Operation.LIST: OperationSpec(Operation.LIST, ("list",)),
    Operation.DELETE: OperationSpec(Operation.DELETE, ("delete", "{asset_id}", "--force")),
    Operation.SELECT_FILE: OperationSpec(Operation.SELECT_FILE, local=True),
    Operation.UPLOAD: OperationSpec(
        Operation.UPLOAD,
        ("upload", "{file_path}", "--progress"),
        streaming=True,
        extended_timeout=True,
    ),
}


class ProgressPhase(str, Enum):
    """Upload phases, in the order the CLI reports them."""

    VALIDATING_FILE = "validating_file"
    FILE_VALIDATED = "file_validated"
    CREATING_DIRECT_UPLOAD = "creating_direct_upload"
    DIRECT_UPLOAD_CREATED = "direct_upload_created"
    UPLOADING_FILE = "uploading_file"
    UPLOADING_CHUNK = "uploading_chunk"
    FILE_UPLOADED = "file_uploaded"
    WAITING_FOR_ASSET = "waiting_for_asset"
    COMPLETED = "completed"

    @classmethod
    def values(cls) -> Tuple[str, ...]:
        return tuple(member.value for member in cls)


@dataclass(frozen=True)
class ProgressEvent:
    """One validated upload progress report.

    Which optional fields are present depends on the phase: chunk counters
    only accompany ``uploading_chunk``, ``elapsed_secs`` only
    ``waiting_for_asset`` and so on.
    """

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


@dataclass(frozen=True)
class StatusResponse:
    """Authentication state reported by ``status``."""

    is_authenticated: bool
    token_id: Optional[str] = None


@dataclass(frozen=True)
class CommandResponse:
    """Acknowledgement for login, logout and delete."""

    success: bool = True


@dataclass(frozen=True)
class AssetItem:
    """A video asset as shown in the asset list."""

    asset_id: str
    playback_id: Optional[str] = None
    duration: Optional[float] = None
    status: Optional[str] = None
    resolution_tier: Optional[str] = None
    aspect_ratio: Optional[str] = None
    max_frame_rate: Optional[float] = None
    created_at: Optional[str] = None


@dataclass(frozen=True)
class ListResponse:
    items: List[AssetItem] = field(default_factory=list)


@dataclass(frozen=True)
class UploadResponse:
    asset_id: str


@dataclass(frozen=True)
class SelectFileResponse:
    """Result of a local file selection; ``None`` when the user cancelled."""

    file_path: Optional[str] = None
