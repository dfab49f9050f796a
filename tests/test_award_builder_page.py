"""Tests for the award builder page's session wiring."""

from __future__ import annotations

import hashlib
import importlib.util
from pathlib import Path
import sys
from typing import List

import pytest
import streamlit as st

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from award_forms import applications
from award_forms.award_store import AwardConfig, delete_local_award, save_local_award, with_custom_fields
from award_forms.questions import DATE, FILE_UPLOAD, MULTIPLE_CHOICE, SHORT_ANSWER, new_question, with_title

MODULE_PATH = REPO_ROOT / "pages" / "02_Award_Builder.py"
SPEC = importlib.util.spec_from_file_location("award_builder_page", MODULE_PATH)
if SPEC is None or SPEC.loader is None:  # pragma: no cover - defensive
    raise RuntimeError("Could not load the award builder page for testing.")
BUILDER = importlib.util.module_from_spec(SPEC)
SPEC.loader.exec_module(BUILDER)


def _clear_session_state() -> None:
    """Remove all keys from Streamlit's session state."""

    for key in list(st.session_state.keys()):
        del st.session_state[key]


@pytest.fixture(autouse=True)
def clean_session():
    _clear_session_state()
    yield
    _clear_session_state()


def _award() -> AwardConfig:
    return with_custom_fields(
        AwardConfig(key="young-innovator", name="Young Innovator"),
        [with_title(new_question(SHORT_ANSWER, 0), "Full name"), with_title(new_question(FILE_UPLOAD, 1), "CV")],
    )


def test_verify_password_matches_sha256_hash(monkeypatch):
    """The builder password is checked against its SHA-256 hash."""

    digest = hashlib.sha256(b"s3cret").hexdigest()
    monkeypatch.setattr(BUILDER, "builder_password_hash", lambda: digest)

    assert BUILDER.verify_password("s3cret")
    assert not BUILDER.verify_password("guess")


def test_verify_password_fails_without_configured_hash(monkeypatch):
    """Without a configured hash no password is accepted."""

    monkeypatch.setattr(BUILDER, "builder_password_hash", lambda: "")

    assert not BUILDER.verify_password("")


def test_new_award_starts_with_default_question():
    """A new award opens with one multiple-choice question."""

    controller = BUILDER.start_session(AwardConfig(key="fresh"))

    draft = st.session_state[BUILDER.AWARD_STATE_KEY]
    assert len(controller.questions) == 1
    assert controller.questions[0].type == MULTIPLE_CHOICE
    assert draft.custom_fields == controller.questions
    assert st.session_state[BUILDER.REVISION_STATE_KEY] == 1


def test_builder_edits_flow_into_the_award_draft():
    """Every committed builder edit replaces the session's award draft."""

    controller = BUILDER.start_session(_award())

    controller.add_question(DATE)
    controller.reorder(2, 0)

    draft = st.session_state[BUILDER.AWARD_STATE_KEY]
    assert [question.title for question in draft.custom_fields] == ["Untitled Question", "Full name", "CV"]
    assert [question.order for question in draft.custom_fields] == [0, 1, 2]
    assert st.session_state[BUILDER.REVISION_STATE_KEY] == 2


def test_widget_keys_change_after_each_edit():
    """Card widget keys move on after an edit so stale values are dropped."""

    controller = BUILDER.start_session(_award())
    before = BUILDER._key("title", 0)

    controller.delete_question(0)

    assert BUILDER._key("title", 0) != before


def test_get_controller_adopts_draft_changes_without_notifying():
    """An externally changed draft is adopted silently."""

    controller = BUILDER.start_session(_award())
    notified: List[int] = []
    controller.subscribe(lambda questions: notified.append(len(questions)))
    replaced = (with_title(new_question(SHORT_ANSWER, 0), "Institution"),)
    st.session_state[BUILDER.AWARD_STATE_KEY] = with_custom_fields(_award(), replaced)

    assert BUILDER.get_controller() is controller
    assert controller.questions == replaced
    assert notified == []
    assert st.session_state[BUILDER.REVISION_STATE_KEY] == 1


def test_get_controller_starts_a_session_when_missing():
    """A controller is created when the session has none."""

    controller = BUILDER.get_controller()

    assert st.session_state[BUILDER.CONTROLLER_STATE_KEY] is controller
    assert st.session_state[BUILDER.AWARD_STATE_KEY].key == "untitled-award"


def test_arrow_moves_are_single_drags():
    """The up and down arrows each perform exactly one reorder."""

    controller = BUILDER.start_session(_award())

    BUILDER._drop(controller, 1, 0)

    assert [question.title for question in controller.questions] == ["CV", "Full name"]
    assert not controller.gesture.is_dragging


def test_split_lines_drops_blanks():
    """Eligibility lists ignore blank lines."""

    assert BUILDER._split_lines("Karnataka\n\n  Kerala  \n") == ("Karnataka", "Kerala")


class _UncachedAwards:
    """Replaces the cached award loader so saving doesn't touch Streamlit's cache."""

    def clear(self) -> None:
        pass


def test_save_award_without_publishing(monkeypatch, tmp_path: Path):
    """Saving writes the award locally and refreshes the cache."""

    saved: List[str] = []
    messages: List[str] = []

    def fake_save(award):
        saved.append(award.key)
        return tmp_path / award.key / "award.json"

    monkeypatch.setattr(BUILDER, "save_local_award", fake_save)
    monkeypatch.setattr(BUILDER, "load_awards", _UncachedAwards())
    monkeypatch.setattr(st, "success", messages.append)
    monkeypatch.setattr(BUILDER, "get_backend", lambda key: pytest.fail("publishing was not requested"))

    BUILDER.save_award(_award(), publish=False)

    assert saved == ["young-innovator"]
    assert st.session_state[BUILDER.SELECTED_AWARD_STATE_KEY] == "young-innovator"
    assert len(messages) == 1


def test_save_award_reports_missing_github_config(monkeypatch, tmp_path: Path):
    """Publishing without GitHub settings shows an error."""

    warnings: List[str] = []
    monkeypatch.setattr(BUILDER, "save_local_award", lambda award: tmp_path / "award.json")
    monkeypatch.setattr(BUILDER, "load_awards", _UncachedAwards())
    monkeypatch.setattr(st, "success", lambda body: None)
    monkeypatch.setattr(st, "warning", warnings.append)
    monkeypatch.setattr(BUILDER, "get_backend", lambda key: None)

    BUILDER.save_award(_award(), publish=True)

    assert warnings == ["GitHub publishing is not configured."]


def test_save_award_publishes_payload(monkeypatch, tmp_path: Path):
    """Publishing sends the award payload to GitHub."""

    commits = []

    class DummyBackend:
        def write_json(self, data, message):
            commits.append((data, message))
            return {}

    monkeypatch.setattr(BUILDER, "save_local_award", lambda award: tmp_path / "award.json")
    monkeypatch.setattr(BUILDER, "load_awards", _UncachedAwards())
    monkeypatch.setattr(st, "success", lambda body: None)
    monkeypatch.setattr(BUILDER, "get_backend", lambda key: DummyBackend())

    BUILDER.save_award(_award(), publish=True)

    data, message = commits[0]
    assert message == "Update award young-innovator"
    assert [field["title"] for field in data["award"]["custom_fields"]] == ["Full name", "CV"]


def _install_award(monkeypatch, tmp_path: Path) -> Path:
    awards_root = tmp_path / "awards"
    save_local_award(_award(), awards_root)
    monkeypatch.setattr(BUILDER, "delete_local_award", lambda key: delete_local_award(key, awards_root))
    monkeypatch.setattr(BUILDER, "submissions_directory", lambda: tmp_path / "submissions")
    monkeypatch.setattr(BUILDER, "load_awards", _UncachedAwards())
    st.session_state[BUILDER.AWARD_STATE_KEY] = _award()
    st.session_state[BUILDER.SELECTED_AWARD_STATE_KEY] = "young-innovator"
    return awards_root


def test_delete_award_removes_it_and_resets_the_session(monkeypatch, tmp_path: Path):
    """Deleting an award without applications removes it and clears the builder."""

    awards_root = _install_award(monkeypatch, tmp_path)

    assert BUILDER.delete_award("young-innovator")

    assert not (awards_root / "young-innovator").exists()
    assert BUILDER.AWARD_STATE_KEY not in st.session_state
    assert BUILDER.SELECTED_AWARD_STATE_KEY not in st.session_state


def test_award_with_applications_is_not_deleted(monkeypatch, tmp_path: Path):
    """Awards that already have applications stay put."""

    errors: List[str] = []
    awards_root = _install_award(monkeypatch, tmp_path)
    monkeypatch.setattr(st, "error", errors.append)
    applications.submit_answers("young-innovator", {}, "asha@example.edu", tmp_path / "submissions")

    assert not BUILDER.delete_award("young-innovator")

    assert errors == ["This award has applications and can't be deleted."]
    assert (awards_root / "young-innovator" / "award.json").exists()
    assert st.session_state[BUILDER.SELECTED_AWARD_STATE_KEY] == "young-innovator"


def test_deleting_an_unsaved_award_warns(monkeypatch, tmp_path: Path):
    """An award that was never saved can't be deleted."""

    warnings: List[str] = []
    _install_award(monkeypatch, tmp_path)
    monkeypatch.setattr(st, "warning", warnings.append)

    assert not BUILDER.delete_award("never-saved")

    assert warnings == ["This award hasn't been saved yet."]
