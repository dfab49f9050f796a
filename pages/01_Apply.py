"""Streamlit page where applicants fill out an award's application form."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, Optional

import streamlit as st

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from Home import APPLY_SELECTED_STATE_KEY, load_awards
from award_forms.applications import (
    STATUS_DRAFT,
    AlreadyApplied,
    answer_key,
    collect_missing_required,
    find_application,
    has_applied,
    restore_answers,
    save_draft,
    submit_answers,
)
from award_forms.award_store import AwardConfig, published_awards
from award_forms.defaults import DEFAULT_SUBMIT_LABEL, DEFAULT_SUBMIT_SUCCESS_MESSAGE
from award_forms.preview import render_form_preview, reset_preview_widgets
from award_forms.profiles import (
    ApplicantProfile,
    applicant_snapshot,
    load_profile,
    profile_prefill,
    role_matches_category,
)
from award_forms.questions import Question
from award_forms.settings import (
    profiles_directory,
    submissions_directory,
    upload_directory,
    upload_policy,
)
from award_forms.ui_theme import apply_app_theme, page_header, section_card
from award_forms.uploads import StoredFile, store_upload

ANSWERS_STATE_KEY = "application_answers"
APPLICANT_STATE_KEY = "applicant_email"


def _widget_prefix(award_key: str) -> str:
    return f"apply_{award_key}"


def _answers_for(award_key: str) -> Dict[str, Any]:
    answers_state: Dict[str, Dict[str, Any]] = st.session_state.setdefault(ANSWERS_STATE_KEY, {})
    return answers_state.setdefault(award_key, {})


def _replace_answers(award_key: str, answers: Dict[str, Any]) -> None:
    st.session_state.setdefault(ANSWERS_STATE_KEY, {})[award_key] = answers
    reset_preview_widgets(_widget_prefix(award_key))


def make_upload_handler(award_key: str, applicant: str):
    """Return the callback that stores files picked in ``file_upload`` questions."""

    def handle(question: Question, uploaded: Any) -> StoredFile:
        return store_upload(
            uploaded.getvalue(),
            uploaded.name,
            uploaded.type or "application/octet-stream",
            directory=upload_directory(),
            uploaded_by=applicant or "anonymous",
            policy=upload_policy(),
            award_key=award_key,
            field_key=answer_key(question),
        )

    return handle


def submit_application(
    award: AwardConfig,
    answers: Dict[str, Any],
    applicant: str,
    profile: Optional[ApplicantProfile] = None,
) -> Optional[str]:
    """Validate ``answers`` and store the application, returning its ID."""

    missing = collect_missing_required(award.custom_fields, answers)
    if missing:
        st.error("Please fill in all required fields before submitting.")
        st.markdown("\n".join(f"- {title}" for title in missing))
        return None

    try:
        payload = submit_answers(
            award.key,
            answers,
            applicant,
            submissions_directory(),
            applicant=applicant_snapshot(profile) if profile else None,
        )
    except AlreadyApplied:
        st.error("You have already applied for this award.")
        return None
    except (OSError, TypeError, ValueError) as exc:
        st.error(f"Failed to store the application: {exc}")
        return None

    # The next visit starts from an empty form.
    st.session_state.get(ANSWERS_STATE_KEY, {}).pop(award.key, None)
    reset_preview_widgets(_widget_prefix(award.key))
    return payload["id"]


def save_application_draft(
    award: AwardConfig,
    answers: Dict[str, Any],
    applicant: str,
    profile: Optional[ApplicantProfile] = None,
) -> Optional[str]:
    """Store ``answers`` as the applicant's draft, returning its ID."""

    try:
        payload = save_draft(
            award.key,
            answers,
            applicant,
            submissions_directory(),
            applicant=applicant_snapshot(profile) if profile else None,
        )
    except AlreadyApplied:
        st.error("You have already applied for this award.")
        return None
    except (OSError, TypeError, ValueError) as exc:
        st.error(f"Failed to save the draft: {exc}")
        return None
    return payload["id"]


def resume_draft(award: AwardConfig, applicant: str) -> bool:
    """Load the applicant's saved draft into the form."""

    draft = find_application(submissions_directory(), award.key, applicant)
    if draft is None or draft.get("status") != STATUS_DRAFT:
        return False
    stored = draft.get("answers")
    _replace_answers(award.key, restore_answers(award.custom_fields, stored if isinstance(stored, dict) else {}))
    return True


def fill_from_profile(award: AwardConfig, profile: ApplicantProfile) -> None:
    """Fill empty short answers whose titles match profile details."""

    _replace_answers(award.key, profile_prefill(award.custom_fields, profile, _answers_for(award.key)))


def render_award_summary(award: AwardConfig) -> None:
    with section_card(award.name, award.description or None):
        details = []
        if award.levels:
            details.append(f"**Levels:** {', '.join(award.levels)}")
        if award.states:
            details.append(f"**States:** {', '.join(award.states)}")
        if award.branches:
            details.append(f"**Branches:** {', '.join(award.branches)}")
        if award.max_age:
            details.append(f"**Maximum age:** {award.max_age}")
        if award.deadlines.get("submission"):
            details.append(f"**Submission deadline:** {award.deadlines['submission']}")
        if details:
            st.markdown("  \n".join(details))
        if award.special_requirements:
            st.markdown("\n".join(f"- {item}" for item in award.special_requirements))


def render_applicant_profile(award: AwardConfig, profile: Optional[ApplicantProfile]) -> None:
    if profile is None:
        st.caption("No profile found for this email. Create one on the Profile page to prefill your details.")
        return
    st.caption(f"Applying as **{profile.full_name}** ({profile.role.title()})")
    if not role_matches_category(profile, award.category):
        st.warning(f"This award is meant for {award.category} applicants; your profile role is {profile.role}.")
    st.button("Fill from profile", on_click=fill_from_profile, args=(award, profile))


def main() -> None:
    """Render the application page."""

    apply_app_theme(page_title="Apply for an award", page_icon="📝")
    page_header("Apply for an award", "Answer the award's questions and attach your documents.", icon="📝")

    awards, _ = load_awards()
    open_awards = published_awards(awards)
    if not open_awards:
        st.info("No awards are open for applications right now.")
        return

    keys = list(open_awards.keys())
    initial = st.session_state.get(APPLY_SELECTED_STATE_KEY)
    if initial not in open_awards:
        initial = keys[0]
    selected_key = st.selectbox(
        "Award",
        options=keys,
        index=keys.index(initial),
        format_func=lambda key: open_awards[key].name,
    )
    st.session_state[APPLY_SELECTED_STATE_KEY] = selected_key
    award = open_awards[selected_key]

    render_award_summary(award)

    applicant = st.text_input(
        "Your email",
        key=APPLICANT_STATE_KEY,
        help="Used to link uploaded documents and the application to you.",
    ).strip()

    profile = load_profile(applicant, profiles_directory()) if applicant else None
    if applicant:
        render_applicant_profile(award, profile)
        if has_applied(submissions_directory(), selected_key, applicant):
            st.success("You have already applied for this award. Track its status on the Applications page.")
            return

    if not award.custom_fields:
        st.info("This award has no application questions yet.")
        return

    if applicant:
        existing = find_application(submissions_directory(), selected_key, applicant)
        if existing is not None and existing.get("status") == STATUS_DRAFT:
            saved_on = str(existing.get("updated_at") or "")[:10]
            st.info(f"You have a saved draft from {saved_on}." if saved_on else "You have a saved draft.")
            st.button("Resume saved draft", on_click=resume_draft, args=(award, applicant))

    answers = _answers_for(selected_key)
    render_form_preview(
        award.custom_fields,
        answers,
        prefix=_widget_prefix(selected_key),
        on_upload=make_upload_handler(selected_key, applicant) if applicant else None,
    )
    if not applicant:
        st.caption("Enter your email to save drafts, upload documents and submit.")

    draft_col, submit_col = st.columns(2)
    if draft_col.button("Save draft", disabled=not applicant, use_container_width=True):
        draft_id = save_application_draft(award, answers, applicant, profile)
        if draft_id:
            st.success("Draft saved. You can come back and finish it later.")

    if submit_col.button(DEFAULT_SUBMIT_LABEL, type="primary", disabled=not applicant, use_container_width=True):
        submission_id = submit_application(award, answers, applicant, profile)
        if submission_id:
            st.success(DEFAULT_SUBMIT_SUCCESS_MESSAGE)
            st.info(f"Application saved with ID `{submission_id}`.")


if __name__ == "__main__":
    main()
