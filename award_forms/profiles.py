"""Applicant profiles stored as local JSON files, one per email address."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from award_forms.applications import answer_key
from award_forms.questions import SHORT_ANSWER, Question
from award_forms.uploads import _safe_segment

logger = logging.getLogger(__name__)

ROLE_STUDENT = "student"
ROLE_FACULTY = "faculty"
ROLE_ADMIN = "admin"
ROLE_INSTITUTION = "institution"
ROLES: Dict[str, str] = {
    ROLE_STUDENT: "Student users",
    ROLE_FACULTY: "Faculty and teachers",
    ROLE_ADMIN: "Administrators",
    ROLE_INSTITUTION: "Educational institutions",
}

# Normalised question titles and the profile field that answers them.
PREFILL_FIELDS: Dict[str, str] = {
    "name": "full_name",
    "full name": "full_name",
    "applicant name": "full_name",
    "email": "email",
    "email address": "email",
    "e mail": "email",
    "contact": "contact",
    "contact number": "contact",
    "phone": "contact",
    "phone number": "contact",
    "university": "university",
    "institution": "university",
    "department": "department",
}


@dataclass(frozen=True)
class ApplicantProfile:
    email: str
    full_name: str
    role: str = ROLE_STUDENT
    contact: str = ""
    university: str = ""
    department: str = ""
    bio: str = ""
    created_at: str = ""
    updated_at: str = ""


def get_roles() -> Dict[str, str]:
    return dict(ROLES)


def normalise_email(email: str) -> str:
    return str(email or "").strip().lower()


def profile_path(email: str, directory: Path) -> Path:
    return directory / f"{_safe_segment(normalise_email(email))}.json"


def profile_to_payload(profile: ApplicantProfile) -> Dict[str, Any]:
    return asdict(profile)


def profile_from_payload(payload: Mapping[str, Any]) -> ApplicantProfile:
    """Build a profile from stored JSON, ignoring unknown keys."""

    role = str(payload.get("role") or ROLE_STUDENT)
    return ApplicantProfile(
        email=normalise_email(str(payload.get("email") or "")),
        full_name=str(payload.get("full_name") or "").strip(),
        role=role if role in ROLES else ROLE_STUDENT,
        contact=str(payload.get("contact") or ""),
        university=str(payload.get("university") or ""),
        department=str(payload.get("department") or ""),
        bio=str(payload.get("bio") or ""),
        created_at=str(payload.get("created_at") or ""),
        updated_at=str(payload.get("updated_at") or ""),
    )


def validate_profile(profile: ApplicantProfile) -> List[str]:
    """Return the problems that stop ``profile`` from being saved."""

    problems: List[str] = []
    if not profile.full_name.strip():
        problems.append("Full name is required.")
    if not re.fullmatch(r"[^@\s]+@[^@\s]+", normalise_email(profile.email)):
        problems.append("A valid email address is required.")
    if profile.role not in ROLES:
        problems.append(f"Unknown role: {profile.role}")
    return problems


def load_profile(email: str, directory: Path) -> Optional[ApplicantProfile]:
    """Return the stored profile for ``email``, or ``None``."""

    if not normalise_email(email):
        return None
    path = profile_path(email, directory)
    if not path.exists():
        return None
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, json.JSONDecodeError):
        logger.warning("Skipping unreadable profile file: %s", path.name)
        return None
    if not isinstance(payload, Mapping):
        return None
    return profile_from_payload(payload)


def save_profile(profile: ApplicantProfile, directory: Path) -> ApplicantProfile:
    """Create or update the profile file and return what was written.

    ``created_at`` is kept from the existing file; ``updated_at`` is always
    refreshed. Raises ``ValueError`` when the profile doesn't validate.
    """

    problems = validate_profile(profile)
    if problems:
        raise ValueError(" ".join(problems))

    now = datetime.now(timezone.utc).isoformat()
    existing = load_profile(profile.email, directory)
    stored = replace(
        profile,
        email=normalise_email(profile.email),
        full_name=profile.full_name.strip(),
        created_at=existing.created_at if existing and existing.created_at else now,
        updated_at=now,
    )

    path = profile_path(stored.email, directory)
    directory.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(profile_to_payload(stored), handle, indent=2)
    logger.info("%s profile for %s", "Updated" if existing else "Created", stored.email)
    return stored


def applicant_snapshot(profile: ApplicantProfile) -> Dict[str, Any]:
    """Return the profile details copied into an application."""

    return {
        "email": profile.email,
        "full_name": profile.full_name,
        "role": profile.role,
        "university": profile.university,
        "department": profile.department,
    }


def _normalise_title(title: str) -> str:
    return " ".join(re.sub(r"[^a-z0-9]+", " ", title.lower()).split())


def profile_prefill(
    questions: Iterable[Question],
    profile: ApplicantProfile,
    answers: Mapping[str, Any],
) -> Dict[str, Any]:
    """Return ``answers`` with short-answer questions filled from ``profile``.

    Only questions whose title names a profile field are touched, and answers
    the applicant already typed are left alone.
    """

    filled = dict(answers)
    for question in questions:
        if question.type != SHORT_ANSWER:
            continue
        field_name = PREFILL_FIELDS.get(_normalise_title(question.title))
        if field_name is None:
            continue
        key = answer_key(question)
        current = filled.get(key)
        if isinstance(current, str) and current.strip():
            continue
        value = getattr(profile, field_name)
        if value:
            filled[key] = value
    return filled


def role_matches_category(profile: ApplicantProfile, category: str) -> bool:
    """Check whether the applicant's role fits an award aimed at ``category``."""

    return profile.role == ROLE_ADMIN or profile.role == category
