"""Answers to award application forms and the submissions that carry them."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from award_forms.questions import (
    CHECKBOX,
    DATE,
    DATE_RANGE,
    DROPDOWN,
    FILE_UPLOAD,
    MULTIPLE_CHOICE,
    PARAGRAPH,
    SHORT_ANSWER,
    Question,
)
from award_forms.rendering import preview_questions

logger = logging.getLogger(__name__)

ANSWER_KEY_PREFIX = "question_"

STATUS_DRAFT = "draft"
STATUS_SUBMITTED = "submitted"
STATUS_UNDER_REVIEW = "under_review"
STATUS_ACCEPTED = "accepted"
STATUS_REJECTED = "rejected"
STATUS_LABELS: Dict[str, str] = {
    STATUS_DRAFT: "Draft",
    STATUS_SUBMITTED: "Submitted",
    STATUS_UNDER_REVIEW: "Under review",
    STATUS_ACCEPTED: "Accepted",
    STATUS_REJECTED: "Rejected",
}


class AlreadyApplied(ValueError):
    """Raised when an applicant tries to apply for the same award twice."""


def answer_key(question: Question) -> str:
    """Return the answers-dict key used for ``question``."""

    return f"{ANSWER_KEY_PREFIX}{question.order}"


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status.replace("_", " ").capitalize() or "Unknown")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def has_answer(question: Question, value: Any) -> bool:
    """Check whether ``value`` counts as a response to ``question``."""

    option_values = [option.value for option in question.options]

    if question.type in {MULTIPLE_CHOICE, DROPDOWN}:
        return isinstance(value, str) and value in option_values

    if question.type == CHECKBOX:
        return isinstance(value, list) and any(item in option_values for item in value)

    if question.type in {SHORT_ANSWER, PARAGRAPH}:
        return isinstance(value, str) and value.strip() != ""

    if question.type == FILE_UPLOAD:
        if isinstance(value, Mapping):
            return not _is_blank(value.get("file_id"))
        return isinstance(value, str) and value.strip() != ""

    if question.type == DATE:
        return not _is_blank(value)

    if question.type == DATE_RANGE:
        if isinstance(value, Mapping):
            return not _is_blank(value.get("from")) and not _is_blank(value.get("to"))
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return not _is_blank(value[0]) and not _is_blank(value[1])
        return False

    return not _is_blank(value)


def collect_missing_required(questions: Iterable[Question], answers: Mapping[str, Any]) -> List[str]:
    """Return titles of required questions that have no usable answer."""

    missing: List[str] = []
    for question in preview_questions(questions):
        if not question.required:
            continue
        if not has_answer(question, answers.get(answer_key(question))):
            missing.append(question.title or f"Question {question.order + 1}")
    return missing


def _serialisable(value: Any) -> Any:
    """Return ``value`` with dates turned into ISO strings."""

    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(key): _serialisable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialisable(item) for item in value]
    return value


def build_submission(
    award_key: str,
    answers: Mapping[str, Any],
    *,
    submitted_by: str = "",
    status: str = STATUS_SUBMITTED,
    applicant: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Return the payload stored for one application.

    Drafts carry no ``submitted_at``; ``updated_at`` records the last save.
    ``applicant`` is a snapshot of the applicant's profile, if they have one.
    """

    status = status if status in STATUS_LABELS else STATUS_SUBMITTED
    now = datetime.now(timezone.utc).isoformat()
    payload: Dict[str, Any] = {
        "id": uuid.uuid4().hex,
        "award_key": award_key,
        "submitted_by": submitted_by,
        "submitted_at": "" if status == STATUS_DRAFT else now,
        "updated_at": now,
        "status": status,
        "answers": json.loads(json.dumps(_serialisable(dict(answers)))),
    }
    if applicant:
        payload["applicant"] = dict(applicant)
    return payload


def store_submission_locally(payload: Mapping[str, Any], directory: Path) -> Path:
    """Write ``payload`` to ``<directory>/<id>.json`` and return the path."""

    submission_id = str(payload.get("id") or "").strip()
    if not submission_id:
        raise ValueError("Submission payload is missing an id.")
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{submission_id}.json"
    with path.open("w", encoding="utf-8") as handle:
        json.dump(dict(payload), handle, indent=2)
    logger.info("Stored application %s for award %s", submission_id, payload.get("award_key", ""))
    return path


def _parse_timestamp(value: Any) -> Tuple[str, float]:
    """Return a normalised timestamp string and sort key."""

    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return text, 0.0
        return parsed.isoformat(), parsed.timestamp()
    return "", 0.0


def load_submissions(directory: Path, *, award_key: Optional[str] = None) -> List[Dict[str, Any]]:
    """Return stored submissions, newest first, optionally for one award only."""

    if not directory.exists():
        return []

    records: List[Tuple[float, Dict[str, Any]]] = []
    for submission_file in sorted(directory.glob("*.json")):
        try:
            with submission_file.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError):
            logger.warning("Skipping invalid submission file: %s", submission_file.name)
            continue
        if not isinstance(payload, dict):
            continue
        if award_key and payload.get("award_key") != award_key:
            continue
        payload.setdefault("id", submission_file.stem)
        timestamp, sort_key = _parse_timestamp(payload.get("submitted_at"))
        payload["submitted_at"] = timestamp
        if not sort_key:
            _, sort_key = _parse_timestamp(payload.get("updated_at"))
        records.append((sort_key, payload))

    records.sort(key=lambda item: item[0], reverse=True)
    return [payload for _, payload in records]


def _same_applicant(left: Any, right: Any) -> bool:
    return str(left or "").strip().lower() == str(right or "").strip().lower()


def find_application(directory: Path, award_key: str, submitted_by: str) -> Optional[Dict[str, Any]]:
    """Return the newest application ``submitted_by`` holds for ``award_key``."""

    if not str(submitted_by or "").strip():
        return None
    for payload in load_submissions(directory, award_key=award_key):
        if _same_applicant(payload.get("submitted_by"), submitted_by):
            return payload
    return None


def has_applied(directory: Path, award_key: str, submitted_by: str) -> bool:
    """Check whether ``submitted_by`` already sent in an application for ``award_key``.

    Drafts don't count.
    """

    if not str(submitted_by or "").strip():
        return False
    return any(
        _same_applicant(payload.get("submitted_by"), submitted_by) and payload.get("status") != STATUS_DRAFT
        for payload in load_submissions(directory, award_key=award_key)
    )


def _store_for_applicant(
    award_key: str,
    answers: Mapping[str, Any],
    submitted_by: str,
    directory: Path,
    status: str,
    applicant: Optional[Mapping[str, Any]],
) -> Dict[str, Any]:
    if has_applied(directory, award_key, submitted_by):
        raise AlreadyApplied(f"{submitted_by} has already applied for {award_key}.")
    payload = build_submission(
        award_key,
        answers,
        submitted_by=submitted_by,
        status=status,
        applicant=applicant,
    )
    draft = find_application(directory, award_key, submitted_by)
    if draft is not None:
        payload["id"] = draft["id"]
    store_submission_locally(payload, directory)
    return payload


def save_draft(
    award_key: str,
    answers: Mapping[str, Any],
    submitted_by: str,
    directory: Path,
    *,
    applicant: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Store ``answers`` as the applicant's draft, overwriting an earlier draft.

    Raises :class:`AlreadyApplied` once the application has been submitted.
    """

    return _store_for_applicant(award_key, answers, submitted_by, directory, STATUS_DRAFT, applicant)


def submit_answers(
    award_key: str,
    answers: Mapping[str, Any],
    submitted_by: str,
    directory: Path,
    *,
    applicant: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Store a submitted application, turning the applicant's draft into it if one exists.

    Each applicant can submit once per award; a second attempt raises
    :class:`AlreadyApplied`.
    """

    return _store_for_applicant(award_key, answers, submitted_by, directory, STATUS_SUBMITTED, applicant)


def _parse_date(value: Any) -> Any:
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return value
    return value


def restore_answers(questions: Iterable[Question], answers: Mapping[str, Any]) -> Dict[str, Any]:
    """Return stored ``answers`` ready to seed the answer widgets again.

    Dates come back from ISO strings; everything else is kept as stored.
    """

    restored = dict(answers)
    for question in questions:
        key = answer_key(question)
        value = restored.get(key)
        if question.type == DATE:
            restored[key] = _parse_date(value)
        elif question.type == DATE_RANGE and isinstance(value, Mapping):
            restored[key] = {"from": _parse_date(value.get("from")), "to": _parse_date(value.get("to"))}
    return restored


def uploaded_file_ids(questions: Sequence[Question], answers: Mapping[str, Any]) -> List[str]:
    """Return the file identifiers referenced by file-upload answers."""

    file_ids: List[str] = []
    for question in questions:
        if question.type != FILE_UPLOAD:
            continue
        value = answers.get(answer_key(question))
        if isinstance(value, Mapping):
            value = value.get("file_id")
        if isinstance(value, str) and value.strip():
            file_ids.append(value.strip())
    return file_ids


def update_submission_status(submission_id: str, status: str, directory: Path) -> Optional[Dict[str, Any]]:
    """Set the review status of a stored submission and return the updated payload."""

    if status not in STATUS_LABELS:
        raise ValueError(f"Unknown application status: {status}")
    path = directory / f"{str(submission_id or '').strip()}.json"
    if not path.exists():
        return None
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    payload["status"] = status
    payload["status_updated_at"] = datetime.now(timezone.utc).isoformat()
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)
    logger.info("Application %s marked %s", submission_id, status)
    return payload


def delete_submission(submission_id: str, directory: Path) -> bool:
    """Remove the stored file for ``submission_id``; ``False`` if it wasn't there."""

    normalized_id = str(submission_id or "").strip()
    if not normalized_id:
        return False
    path = directory / f"{normalized_id}.json"
    if not path.exists():
        return False
    path.unlink()
    logger.info("Deleted application %s", normalized_id)
    return True
