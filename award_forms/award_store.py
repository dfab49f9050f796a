"""Helpers for working with award configuration files."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from award_forms.defaults import (
    AWARD_CATEGORIES,
    DEFAULT_AWARD_CATEGORY,
    DEFAULT_AWARD_NAME,
    ELIGIBILITY_LEVELS,
)
from award_forms.questions import Question, questions_from_records, questions_to_records
from award_forms.reorder import reindex

logger = logging.getLogger(__name__)

AWARD_FILENAME = "award.json"
AWARDS_ROOT = Path("awards")
DEADLINE_KEYS = ("submission", "evaluation", "result")


@dataclass(frozen=True)
class AwardConfig:
    """Everything the platform stores about one award."""

    key: str
    name: str = DEFAULT_AWARD_NAME
    description: str = ""
    category: str = DEFAULT_AWARD_CATEGORY
    levels: Tuple[str, ...] = ()
    states: Tuple[str, ...] = ()
    branches: Tuple[str, ...] = ()
    max_age: Optional[int] = None
    deadlines: Dict[str, str] = field(default_factory=dict)
    special_requirements: Tuple[str, ...] = ()
    custom_fields: Tuple[Question, ...] = ()
    is_published: bool = False
    meta: Dict[str, Any] = field(default_factory=dict)


def _ensure_mapping(value: Any) -> Dict[str, Any]:
    """Return ``value`` if it is a mapping, otherwise an empty dict."""

    return dict(value) if isinstance(value, Mapping) else {}


def _ensure_strings(value: Any) -> Tuple[str, ...]:
    """Return the non-blank strings in ``value`` if it is a list."""

    if not isinstance(value, list):
        return ()
    return tuple(str(item).strip() for item in value if str(item).strip())


def _optional_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def award_from_payload(award_key: str, payload: Mapping[str, Any]) -> AwardConfig:
    """Convert a stored award payload into an :class:`AwardConfig`.

    Custom fields are sorted by their stored ``order`` and re-indexed so the
    builder always starts from contiguous positions. The award keeps
    ``award_key`` (its directory name) whatever key the payload records.
    """

    entry = _ensure_mapping(payload.get("award")) or _ensure_mapping(payload)
    eligibility = _ensure_mapping(entry.get("eligibility"))
    deadlines = _ensure_mapping(entry.get("deadlines"))

    category = str(entry.get("category") or DEFAULT_AWARD_CATEGORY)
    if category not in AWARD_CATEGORIES:
        category = DEFAULT_AWARD_CATEGORY

    name = str(entry.get("name") or "").strip() or award_key.replace("-", " ").title() or DEFAULT_AWARD_NAME

    raw_fields = entry.get("custom_fields")
    questions = questions_from_records(raw_fields if isinstance(raw_fields, list) else [])
    questions = reindex(sorted(questions, key=lambda question: question.order))

    meta = payload.get("meta")
    return AwardConfig(
        key=award_key,
        name=name,
        description=str(entry.get("description") or ""),
        category=category,
        levels=tuple(level for level in _ensure_strings(eligibility.get("levels")) if level in ELIGIBILITY_LEVELS),
        states=_ensure_strings(eligibility.get("states")),
        branches=_ensure_strings(eligibility.get("branches")),
        max_age=_optional_int(eligibility.get("max_age")),
        deadlines={key: str(deadlines[key]) for key in DEADLINE_KEYS if deadlines.get(key)},
        special_requirements=_ensure_strings(entry.get("special_requirements")),
        custom_fields=questions,
        is_published=bool(entry.get("is_published", False)),
        meta=dict(meta) if isinstance(meta, Mapping) else {},
    )


def award_to_payload(award: AwardConfig) -> Dict[str, Any]:
    """Return the JSON payload stored for ``award``."""

    eligibility: Dict[str, Any] = {
        "levels": list(award.levels),
        "states": list(award.states),
        "branches": list(award.branches),
    }
    if award.max_age is not None:
        eligibility["max_age"] = award.max_age

    payload: Dict[str, Any] = {
        "award": {
            "key": award.key,
            "name": award.name,
            "description": award.description,
            "category": award.category,
            "eligibility": eligibility,
            "deadlines": {key: award.deadlines[key] for key in DEADLINE_KEYS if award.deadlines.get(key)},
            "special_requirements": list(award.special_requirements),
            "custom_fields": questions_to_records(award.custom_fields),
            "is_published": award.is_published,
        }
    }
    if award.meta:
        payload["meta"] = dict(award.meta)
    return payload


def with_custom_fields(award: AwardConfig, questions: Iterable[Question]) -> AwardConfig:
    return replace(award, custom_fields=tuple(questions))


def discover_local_awards(root: Path = AWARDS_ROOT) -> Dict[str, Path]:
    """Return a mapping of ``award_key -> path`` for local award files."""

    awards: Dict[str, Path] = {}
    if root.exists():
        for entry in sorted(root.iterdir()):
            if not entry.is_dir():
                continue
            award_path = entry / AWARD_FILENAME
            if award_path.exists():
                awards[entry.name] = award_path
    return awards


def load_local_awards(root: Path = AWARDS_ROOT) -> Tuple[Dict[str, AwardConfig], List[str]]:
    """Load every local award, returning the awards and the keys that failed to parse."""

    awards: Dict[str, AwardConfig] = {}
    skipped: List[str] = []

    for award_key, path in discover_local_awards(root).items():
        try:
            with path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError):
            logger.warning("Skipping unreadable award file: %s", path)
            skipped.append(award_key)
            continue
        if not isinstance(payload, Mapping):
            logger.warning("Skipping award file without an object payload: %s", path)
            skipped.append(award_key)
            continue
        awards[award_key] = award_from_payload(award_key, payload)

    return awards, skipped


def award_path(award_key: str, root: Path = AWARDS_ROOT) -> Path:
    """Return the on-disk path used for ``award_key``."""

    return root / award_key / AWARD_FILENAME


def save_local_award(award: AwardConfig, root: Path = AWARDS_ROOT) -> Path:
    """Write ``award`` to its local JSON file and return the path."""

    path = award_path(award.key, root)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(award_to_payload(award), handle, indent=2)
    logger.info("Saved award %s with %s custom fields", award.key, len(award.custom_fields))
    return path


def delete_local_award(award_key: str, root: Path = AWARDS_ROOT) -> bool:
    """Remove the local file for ``award_key``; ``False`` if there wasn't one.

    The award's directory goes too once nothing else is left in it.
    """

    if not award_key.strip():
        return False
    path = award_path(award_key, root)
    if not path.exists():
        return False
    path.unlink()
    if not any(path.parent.iterdir()):
        path.parent.rmdir()
    logger.info("Deleted award %s", award_key)
    return True


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "award"


def new_award_key(name: str, existing: Iterable[str]) -> str:
    """Return a slug for ``name`` that doesn't clash with ``existing`` keys."""

    used = set(existing)
    base = slugify(name)
    candidate = base
    suffix = 2
    while candidate in used:
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate


def resolve_remote_award_path(base_path: str, award_key: str) -> str:
    """Return the remote path for ``award_key`` using ``base_path`` template."""

    if "{award_key}" in base_path:
        return base_path.format(award_key=award_key)
    if "{award}" in base_path:
        return base_path.format(award=award_key)
    if base_path.endswith(".json"):
        return base_path
    return f"{base_path.rstrip('/')}/{award_key}/{AWARD_FILENAME}"


def published_awards(awards: Mapping[str, AwardConfig]) -> Dict[str, AwardConfig]:
    return {key: award for key, award in awards.items() if award.is_published}
