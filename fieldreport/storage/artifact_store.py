import os
import tempfile
from pathlib import Path, PurePath

from fieldreport.logging.logger import Log
from fieldreport.storage.exceptions import StorageError


def artifact_file_name(original_filename: str) -> str:
    """Basename of the upload, extension included; directories are dropped.

    Raises:
        ValueError: if nothing usable remains.
    """
    # Uploads may come from Windows clients.
    name = PurePath(original_filename.replace("\\", "/")).name
    if name in ("", ".", ".."):
        raise ValueError(f"Unusable upload filename: {original_filename!r}")
    return name


class ArtifactStore:
    """Durable storage for stamped photos under a single reports directory.

    Photos are first staged under a hidden unique name, then promoted to
    their final name once the submission has decided to keep them. Final
    files are named after the original upload, so two uploads with the same
    name overwrite each other; a final file is never deleted.
    """

    def __init__(self, reports_root: Path) -> None:
        self._reports_root = reports_root

    def path_for(self, original_filename: str) -> Path:
        return self._reports_root / artifact_file_name(original_filename)

    def stage(self, original_filename: str, data: bytes) -> Path:
        """Write ``data`` to a unique staging file next to its final path and fsync it."""
        target = self.path_for(original_filename)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, staged_name = tempfile.mkstemp(
                dir=target.parent, prefix=f".{target.name}.", suffix=".staged"
            )
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(data)
                    handle.flush()
                    os.fsync(handle.fileno())
            except BaseException:
                Path(staged_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Cannot write artifact {target}: {exc}") from exc
        Log.debug(f"Staged {len(data)} bytes for {target} at {staged_name}")
        return Path(staged_name)

    def promote(self, staged_path: Path, original_filename: str) -> Path:
        """Atomically move a staged file to its final path and return that path."""
        target = self.path_for(original_filename)
        try:
            os.replace(staged_path, target)
        except OSError as exc:
            raise StorageError(f"Cannot promote artifact {staged_path} to {target}: {exc}") from exc
        return target

    def read(self, stored_path: str | Path) -> bytes:
        try:
            return Path(stored_path).read_bytes()
        except OSError as exc:
            raise StorageError(f"Cannot read artifact {stored_path}: {exc}") from exc

    def discard_staged(self, staged_path: Path) -> None:
        """Delete a staged file that was not promoted; a missing file is not an error."""
        try:
            staged_path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot delete staged artifact {staged_path}: {exc}") from exc


def read_upload(temp_path: Path) -> bytes:
    """Read a temporary upload from disk.

    Raises:
        FileNotFoundError: if the temporary file does not exist.
    """
    if not temp_path.exists():
        raise FileNotFoundError(f"Upload not found: {temp_path}")
    return temp_path.read_bytes()


def discard_upload(temp_path: Path | None) -> None:
    """Delete a temporary upload; a missing file is not an error."""
    if temp_path is None:
        return
    try:
        temp_path.unlink(missing_ok=True)
    except OSError as exc:
        Log.warning(f"Could not delete temporary upload {temp_path}: {exc}")
