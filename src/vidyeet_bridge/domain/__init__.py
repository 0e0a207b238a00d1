"""Domain layer package."""

from .models import (
    Operation,
    OperationSpec,
    OPERATION_SPECS,
    ProgressPhase,
    ProgressEvent,
    StatusResponse,
    CommandResponse,
    AssetItem,
    ListResponse,
    UploadResponse,
    SelectFileResponse,
)
from .exceptions import (
    DomainException,
    ConfigurationError,
    ErrorKind,
    BridgeError,
    ProcessNotFoundError,
    NonZeroExitError,
    MalformedOutputError,
    BridgeTimeoutError,
    NotAuthenticatedError,
    UnknownBridgeError,
)
from .protocols import (
    ProgressObserver,
    ILauncher,
    FileChooser,
    IMetricsCollector,
)

__all__ = [
    # Models
    "Operation",
    "OperationSpec",
    "OPERATION_SPECS",
    "ProgressPhase",
    "ProgressEvent",
    "StatusResponse",
    "CommandResponse",
    "AssetItem",
    "ListResponse",
    "UploadResponse",
    "SelectFileResponse",
    # Exceptions
    "DomainException",
    "ConfigurationError",
    "ErrorKind",
    "BridgeError",
    "ProcessNotFoundError",
    "NonZeroExitError",
    "MalformedOutputError",
    "BridgeTimeoutError",
    "NotAuthenticatedError",
    "UnknownBridgeError",
    # Protocols
    "ProgressObserver",
    "ILauncher",
    "FileChooser",
    "IMetricsCollector",
]
