"""Configuration read from Streamlit secrets."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, Optional

import streamlit as st

from award_forms.award_store import resolve_remote_award_path
from award_forms.defaults import DEFAULT_UPLOAD_DIRECTORY
from award_forms.github_backend import GitHubBackend
from award_forms.uploads import UploadPolicy

DEFAULT_REMOTE_AWARD_PATH = "awards/{award_key}/award.json"
DEFAULT_SUBMISSIONS_DIRECTORY = "applications/submissions"
DEFAULT_PROFILES_DIRECTORY = "profiles"


def _secrets_dict(name: str) -> Dict[str, Any]:
    """Return a mapping stored under ``name`` in Streamlit secrets."""

    try:
        value = st.secrets.get(name, {})  # type: ignore[arg-type]
    except FileNotFoundError:
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    return {}


def _secret(name: str, default: Any = None) -> Any:
    try:
        return st.secrets.get(name, default)
    except FileNotFoundError:
        return default


def get_github_config() -> Optional[Dict[str, Any]]:
    """Return GitHub publishing settings, or ``None`` when not configured."""

    secrets = _secrets_dict("github")
    token = secrets.get("token") or _secret("github_token")
    repo = secrets.get("repo") or _secret("github_repo")
    path = secrets.get("path") or _secret("github_award_path", DEFAULT_REMOTE_AWARD_PATH)
    branch = secrets.get("branch") or _secret("github_branch", "main")
    api_url = secrets.get("api_url") or _secret("github_api_url", "https://api.github.com")

    if token and repo and path:
        return {
            "token": token,
            "repo": repo,
            "path": path,
            "branch": branch,
            "api_url": api_url,
        }
    return None


def get_backend(award_key: str) -> Optional[GitHubBackend]:
    """Instantiate a GitHub backend for ``award_key`` if configuration is available."""

    config = get_github_config()
    if config is None:
        return None

    return GitHubBackend(
        token=config["token"],
        repo=config["repo"],
        path=resolve_remote_award_path(config["path"], award_key),
        branch=config.get("branch", "main"),
        api_url=config.get("api_url", "https://api.github.com"),
    )


def upload_policy() -> UploadPolicy:
    return UploadPolicy.from_settings(_secrets_dict("uploads"))


def upload_directory() -> Path:
    return Path(_secrets_dict("uploads").get("directory") or DEFAULT_UPLOAD_DIRECTORY)


def submissions_directory() -> Path:
    return Path(_secret("submissions_directory") or DEFAULT_SUBMISSIONS_DIRECTORY)


def profiles_directory() -> Path:
    return Path(_secret("profiles_directory") or DEFAULT_PROFILES_DIRECTORY)


def builder_password_hash() -> str:
    return str(_secret("builder_password_hash", "") or "")
