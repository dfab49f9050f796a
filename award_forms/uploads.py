"""Storage for documents attached to award applications."""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from award_forms.defaults import (
    DEFAULT_ALLOWED_UPLOAD_TYPES,
    DEFAULT_MAX_UPLOAD_MB,
    UPLOAD_TYPE_EXTENSIONS,
)

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


class UploadRejected(ValueError):
    """Raised when a file breaks the size or media type rules."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


@dataclass(frozen=True)
class UploadPolicy:
    """Limits applied to every uploaded document."""

    max_size_bytes: int = DEFAULT_MAX_UPLOAD_MB * BYTES_PER_MB
    allowed_types: Tuple[str, ...] = field(default=DEFAULT_ALLOWED_UPLOAD_TYPES)

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> "UploadPolicy":
        max_size_mb = settings.get("max_size_mb", DEFAULT_MAX_UPLOAD_MB)
        try:
            max_size_bytes = int(float(max_size_mb) * BYTES_PER_MB)
        except (TypeError, ValueError):
            max_size_bytes = DEFAULT_MAX_UPLOAD_MB * BYTES_PER_MB
        allowed = settings.get("allowed_types")
        if isinstance(allowed, Sequence) and not isinstance(allowed, (str, bytes)):
            allowed_types = tuple(str(item).strip() for item in allowed if str(item).strip())
        else:
            allowed_types = DEFAULT_ALLOWED_UPLOAD_TYPES
        return cls(max_size_bytes=max_size_bytes, allowed_types=allowed_types or DEFAULT_ALLOWED_UPLOAD_TYPES)


@dataclass(frozen=True)
class StoredFile:
    """What an answer needs to know about an uploaded document."""

    file_id: str
    filename: str
    size: int
    mimetype: str


def validate_upload(size: int, mimetype: str, policy: UploadPolicy) -> Optional[str]:
    """Return the reason a file would be rejected, or ``None`` if it is fine."""

    if size > policy.max_size_bytes:
        return f"File size must be less than {policy.max_size_bytes / BYTES_PER_MB:.1f}MB"
    if mimetype not in policy.allowed_types:
        return f"Invalid file type. Allowed types: {', '.join(policy.allowed_types)}"
    return None


def _safe_segment(value: str) -> str:
    cleaned = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in value.strip())
    return cleaned or "anonymous"


def _extension(filename: str, mimetype: str) -> str:
    if mimetype in UPLOAD_TYPE_EXTENSIONS:
        return UPLOAD_TYPE_EXTENSIONS[mimetype]
    suffix = Path(filename).suffix.lstrip(".")
    return suffix or "bin"


def store_upload(
    data: bytes,
    filename: str,
    mimetype: str,
    *,
    directory: Path,
    uploaded_by: str,
    policy: Optional[UploadPolicy] = None,
    award_key: Optional[str] = None,
    field_key: Optional[str] = None,
) -> StoredFile:
    """Validate and write ``data`` under ``directory``, returning its record.

    Files land at ``<directory>/<uploaded_by>/<file_id>.<ext>`` next to a
    ``<file_id>.json`` file holding the metadata.
    """

    policy = policy or UploadPolicy()
    reason = validate_upload(len(data), mimetype, policy)
    if reason:
        raise UploadRejected(reason)

    file_id = uuid.uuid4().hex
    target_dir = directory / _safe_segment(uploaded_by)
    target_dir.mkdir(parents=True, exist_ok=True)
    content_path = target_dir / f"{file_id}.{_extension(filename, mimetype)}"
    content_path.write_bytes(data)

    stored = StoredFile(file_id=file_id, filename=filename, size=len(data), mimetype=mimetype)
    metadata = {
        **asdict(stored),
        "content_path": content_path.name,
        "uploaded_by": uploaded_by,
        "uploaded_at": datetime.now(timezone.utc).isoformat(),
        "award_key": award_key or "",
        "field_key": field_key or "",
    }
    with (target_dir / f"{file_id}.json").open("w", encoding="utf-8") as handle:
        json.dump(metadata, handle, indent=2)

    logger.info("Stored upload %s (%s bytes) for %s", file_id, len(data), uploaded_by)
    return stored


def _metadata_paths(file_id: str, directory: Path) -> List[Path]:
    normalized_id = str(file_id or "").strip()
    if not normalized_id or not directory.exists():
        return []
    return sorted(directory.glob(f"*/{normalized_id}.json"))


def load_file_metadata(file_id: str, directory: Path) -> Optional[Dict[str, Any]]:
    """Return the stored metadata for ``file_id`` or ``None`` when unknown."""

    for metadata_path in _metadata_paths(file_id, directory):
        try:
            with metadata_path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError):
            logger.warning("Unreadable upload metadata: %s", metadata_path)
            continue
        if isinstance(payload, dict):
            return payload
    return None


def delete_uploaded_file(file_id: str, directory: Path) -> Tuple[List[Path], List[Path]]:
    """Delete the content and metadata files stored for ``file_id``.

    Returns the paths that were removed and the ones that raised ``OSError``.
    """

    removed: List[Path] = []
    failed: List[Path] = []

    for metadata_path in _metadata_paths(file_id, directory):
        candidates = [metadata_path]
        candidates.extend(
            path for path in metadata_path.parent.glob(f"{metadata_path.stem}.*") if path != metadata_path
        )
        for candidate in candidates:
            try:
                candidate.unlink()
            except OSError:
                failed.append(candidate)
            else:
                removed.append(candidate)

    if removed:
        logger.info("Deleted upload %s", file_id)
    return removed, failed
