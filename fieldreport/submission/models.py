from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class UploadedPhoto:
    """One uploaded photo; ``data`` may be empty when the bytes live at ``temp_path``."""

    original_filename: str
    temp_path: Path | None = None
    data: bytes = b""


@dataclass(frozen=True)
class SubmissionRequest:
    """A validated submission."""

    user_id: int
    description: str
    files: tuple[UploadedPhoto, ...]


@dataclass(frozen=True)
class PhotoOutcome:
    """Result of processing one photo, at its upload position.

    ``staged_path`` is the not yet promoted artifact of a successful photo.
    """

    index: int
    original_filename: str
    staged_path: Path | None = None
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class PhotoFailure:
    index: int
    original_filename: str
    error: Exception


@dataclass(frozen=True)
class SubmissionResult:
    report_id: int
    image_paths: list[str] = field(default_factory=list)
    failures: list[PhotoFailure] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failures

    def to_response(self) -> dict[str, object]:
        """Entrypoint payload: ``{"reportId": ...}`` plus failed files, if any."""
        response: dict[str, object] = {"reportId": str(self.report_id)}
        if self.failures:
            response["failedFiles"] = [
                {"index": f.index, "filename": f.original_filename, "error": str(f.error)}
                for f in self.failures
            ]
        return response
