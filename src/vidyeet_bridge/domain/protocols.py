"""Protocol definitions for dependency inversion."""

from pathlib import Path
from typing import Protocol, Callable, Optional, Sequence, List, Any, TYPE_CHECKING

from .models import ProgressEvent

if TYPE_CHECKING:
    from vidyeet_bridge.infrastructure.process.launcher import CancellationToken, LaunchOutcome


ProgressObserver = Callable[[ProgressEvent], None]


class ILauncher(Protocol):
    """Interface for running the external CLI once."""

    def launch(
        self,
        executable: Path,
        args: Sequence[str],
        timeout: float,
        *,
        stdin_data: Optional[bytes] = None,
        on_stdout_line: Optional[Callable[[bytes], None]] = None,
        cancel_token: Optional["CancellationToken"] = None
    ) -> "LaunchOutcome":
        """Run the executable and report how it ended."""
        ...


class FileChooser(Protocol):
    """Interface for the UI's open-file dialog."""

    def __call__(self, initial_dir: Optional[Path], extensions: Sequence[str]) -> Optional[str]:
        """Ask the user for a file; return None when cancelled."""
        ...


class IMetricsCollector(Protocol):
    """Interface for collecting metrics."""

    def record_metric(self, name: str, value: Any) -> None:
        """Record a metric value."""
        ...

    def increment_counter(self, name: str, amount: int = 1) -> None:
        """Increment a counter."""
        ...

    def get_metric(self, name: str) -> List[Any]:
        """Get all values for a metric."""
        ...

    def get_summary(self) -> dict:
        """Get summary of all metrics."""
        ...
