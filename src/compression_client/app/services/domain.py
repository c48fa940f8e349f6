import io
import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from PIL import Image, UnidentifiedImageError


class WorkflowState(str, Enum):
    IDLE = "idle"
    FILE_SELECTED = "file_selected"
    COMPRESSING = "compressing"
    COMPLETED = "completed"
    FAILED = "failed"


class AnalysisStatus(str, Enum):
    UNSTARTED = "unstarted"
    PENDING = "pending"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class NoticeKind(str, Enum):
    ERROR = "error"
    SUCCESS = "success"


@dataclass(frozen=True)
class Notice:
    kind: NoticeKind
    message: str

    @classmethod
    def error(cls, message: str) -> "Notice":
        return cls(kind=NoticeKind.ERROR, message=message)

    @classmethod
    def success(cls, message: str) -> "Notice":
        return cls(kind=NoticeKind.SUCCESS, message=message)

    @property
    def is_error(self) -> bool:
        return self.kind == NoticeKind.ERROR


@dataclass(frozen=True)
class SourceFile:
    filename: str
    content: bytes
    content_type: str | None = None

    def __str__(self) -> str:
        return f"SourceFile(filename={self.filename}, size={self.size})"

    @classmethod
    def from_path(cls, path: str | Path) -> "SourceFile":
        file_path = Path(path)
        content_type, _ = mimetypes.guess_type(file_path.name)
        return cls(
            filename=file_path.name,
            content=file_path.read_bytes(),
            content_type=content_type,
        )

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def size_mb(self) -> float:
        return self.size / (1024 * 1024)

    @property
    def is_image(self) -> bool:
        if self.content_type:
            return self.content_type.startswith("image/")
        return self._sniff_image()

    def _sniff_image(self) -> bool:
        try:
            with Image.open(io.BytesIO(self.content)) as img:
                return img.format is not None
        except (UnidentifiedImageError, OSError):
            return False


@dataclass(frozen=True)
class DownloadedArtifact:
    filename: str
    content: bytes
    location: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)


class WorkflowError(Exception):
    pass


class SelectionError(WorkflowError):
    pass


class ResultUnavailableError(SelectionError):
    pass


class AnalysisError(WorkflowError):
    pass


class CompressionError(WorkflowError):
    pass


class DownloadError(WorkflowError):
    pass
