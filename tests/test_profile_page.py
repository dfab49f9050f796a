"""Tests for saving profiles from the Profile page."""

from __future__ import annotations

import importlib.util
from pathlib import Path
import sys
from typing import List

import streamlit as st

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from award_forms.profiles import ApplicantProfile, load_profile

MODULE_PATH = REPO_ROOT / "pages" / "04_Profile.py"
SPEC = importlib.util.spec_from_file_location("profile_page", MODULE_PATH)
if SPEC is None or SPEC.loader is None:  # pragma: no cover - defensive
    raise RuntimeError("Could not load the profile page for testing.")
PROFILE = importlib.util.module_from_spec(SPEC)
SPEC.loader.exec_module(PROFILE)


def test_valid_profile_is_saved(monkeypatch, tmp_path: Path):
    """A complete profile is stored under the profiles directory."""

    monkeypatch.setattr(PROFILE, "profiles_directory", lambda: tmp_path)

    saved = PROFILE.save_applicant_profile(
        ApplicantProfile(email="asha@example.edu", full_name="Asha Rao", role="faculty")
    )

    assert saved is not None
    assert load_profile("asha@example.edu", tmp_path) == saved


def test_invalid_profile_lists_problems(monkeypatch, tmp_path: Path):
    """Problems are listed on the page and nothing is written."""

    errors: List[str] = []
    bullets: List[str] = []
    monkeypatch.setattr(PROFILE, "profiles_directory", lambda: tmp_path)
    monkeypatch.setattr(st, "error", errors.append)
    monkeypatch.setattr(st, "markdown", lambda body, **kwargs: bullets.append(body))

    saved = PROFILE.save_applicant_profile(ApplicantProfile(email="asha", full_name=""))

    assert saved is None
    assert errors == ["Please fix the following before saving:"]
    assert bullets == ["- Full name is required.\n- A valid email address is required."]
    assert list(tmp_path.iterdir()) == []
