"""Validates a raw submission before anything is written."""

import unicodedata
from collections.abc import Sequence
from typing import Any

from fieldreport.storage.artifact_store import artifact_file_name
from fieldreport.submission.exceptions import InvalidInputError
from fieldreport.submission.models import SubmissionRequest, UploadedPhoto

_WHITESPACE_CONTROLS = str.maketrans({"\r": " ", "\n": " ", "\t": " "})


def validate_submission(
    user_id: Any,
    description: Any,
    files: Sequence[Any],
    max_description_length: int,
) -> SubmissionRequest:
    """Check the raw inputs and build a SubmissionRequest.

    Raises:
        InvalidInputError: on any validation failure.
    """
    return SubmissionRequest(
        user_id=_build_user_id(user_id),
        description=_build_description(description, max_description_length),
        files=_build_files(files),
    )


def _build_user_id(raw: Any) -> int:
    if isinstance(raw, bool):
        raise InvalidInputError("'user_id' must be a positive integer")
    if isinstance(raw, str):
        raw = raw.strip()
        if not (raw.isascii() and raw.isdigit()):
            raise InvalidInputError(f"'user_id' must be a positive integer, got {raw!r}")
        raw = int(raw)
    if not isinstance(raw, int) or raw <= 0:
        raise InvalidInputError(f"'user_id' must be a positive integer, got {raw!r}")
    return raw


def _build_description(raw: Any, max_length: int) -> str:
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raise InvalidInputError("'description' must be a string")
    # \r\n becomes two spaces, keeping the character count the stamp wraps on.
    description = raw.translate(_WHITESPACE_CONTROLS)
    if len(description) > max_length:
        raise InvalidInputError(
            f"'description' is too long: {len(description)} chars (max {max_length})"
        )
    if any(unicodedata.category(ch) == "Cc" for ch in description):
        raise InvalidInputError("'description' contains control characters")
    return description


def _build_files(raw: Sequence[Any]) -> tuple[UploadedPhoto, ...]:
    if not raw:
        raise InvalidInputError("At least one photo is required")
    files: list[UploadedPhoto] = []
    for i, item in enumerate(raw):
        if not isinstance(item, UploadedPhoto):
            raise InvalidInputError(f"File at index {i} is not an uploaded photo")
        try:
            artifact_file_name(item.original_filename)
        except ValueError as exc:
            raise InvalidInputError(f"File at index {i}: {exc}") from exc
        if not item.data and item.temp_path is None:
            raise InvalidInputError(
                f"File at index {i} ({item.original_filename!r}) has neither data nor temp_path"
            )
        files.append(item)
    return tuple(files)
