"""Local video file selection (no CLI involved)."""

from pathlib import Path
from typing import Optional

from vidyeet_bridge.domain.models import SelectFileResponse
from vidyeet_bridge.domain.protocols import FileChooser
from vidyeet_bridge.shared.logging import get_logger

logger = get_logger(__name__)

VIDEO_EXTENSIONS = ('mp4', 'mov', 'avi', 'mkv', 'webm', 'wmv', 'flv', 'm4v')


class FileSelector:
    """Asks the UI's chooser for a video file and remembers where it was."""

    def __init__(self, chooser: Optional[FileChooser] = None):
        self._chooser = chooser
        self.last_directory: Optional[Path] = None

    def select(self, chooser: Optional[FileChooser] = None) -> SelectFileResponse:
        chooser = chooser or self._chooser
        if chooser is None:
            raise ValueError("No file chooser available for select-file")

        chosen = chooser(self.last_directory, VIDEO_EXTENSIONS)
        if not chosen:
            return SelectFileResponse(file_path=None)

        path = Path(chosen)
        if path.suffix.lower().lstrip('.') not in VIDEO_EXTENSIONS:
            logger.warning(f"Ignoring non-video selection: {path}")
            return SelectFileResponse(file_path=None)
        if not path.is_file():
            logger.warning(f"Selected file does not exist: {path}")
            return SelectFileResponse(file_path=None)

        self.last_directory = path.parent
        return SelectFileResponse(file_path=str(path))
