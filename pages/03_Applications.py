"""Streamlit page listing submitted award applications."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping

import pandas as pd
import streamlit as st

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from Home import load_awards
from award_forms.applications import (
    STATUS_LABELS,
    answer_key,
    delete_submission,
    load_submissions,
    status_label,
    update_submission_status,
    uploaded_file_ids,
)
from award_forms.award_store import AwardConfig
from award_forms.questions import FILE_UPLOAD
from award_forms.rendering import display_title, preview_questions
from award_forms.settings import submissions_directory, upload_directory
from award_forms.ui_theme import apply_app_theme, page_header
from award_forms.uploads import delete_uploaded_file, load_file_metadata

ALL_AWARDS_OPTION = "__all__"
SUBMISSION_COLUMNS = ("Application ID", "Award", "Applicant", "Submitted at", "Status")


def submission_rows(submissions: List[Dict[str, Any]], awards: Mapping[str, AwardConfig]) -> List[Dict[str, Any]]:
    """Return one table row per stored application."""

    rows: List[Dict[str, Any]] = []
    for submission in submissions:
        award_key = str(submission.get("award_key", ""))
        award = awards.get(award_key)
        profile = submission.get("applicant")
        name = profile.get("full_name") if isinstance(profile, Mapping) else ""
        applicant = submission.get("submitted_by") or "—"
        rows.append(
            {
                "Application ID": submission.get("id", ""),
                "Award": award.name if award else award_key or "—",
                "Applicant": f"{name} <{applicant}>" if name else applicant,
                "Submitted at": submission.get("submitted_at") or "—",
                "Status": status_label(str(submission.get("status", ""))),
            }
        )
    return rows


def _format_answer(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(str(item) for item in value) or "—"
    if isinstance(value, dict):
        if "from" in value or "to" in value:
            return f"{value.get('from') or '—'} → {value.get('to') or '—'}"
        return ", ".join(f"{key}: {item}" for key, item in value.items())
    if value is None or value == "":
        return "—"
    return str(value)


def render_answers(submission: Mapping[str, Any], award: AwardConfig | None) -> None:
    """Show the answers of ``submission`` next to the question titles."""

    answers = submission.get("answers", {})
    if not isinstance(answers, dict):
        answers = {}
    if award is None:
        st.warning("The award for this application no longer exists; showing raw answers.")
        st.json(answers)
        return

    for question in preview_questions(award.custom_fields):
        value = answers.get(answer_key(question))
        st.markdown(f"**{display_title(question)}**")
        if question.type == FILE_UPLOAD and isinstance(value, str) and value:
            metadata = load_file_metadata(value, upload_directory())
            if metadata:
                st.write(f"📎 {metadata.get('filename', value)} ({metadata.get('size', 0)} bytes)")
            else:
                st.write(f"📎 `{value}` (file not found)")
            continue
        st.write(_format_answer(value))


def main() -> None:
    """Render the applications list."""

    apply_app_theme(page_title="Applications", page_icon="📋")
    page_header("Applications", "Follow the status of submitted award applications.", icon="📋")

    awards, _ = load_awards()
    directory = submissions_directory()

    award_options = [ALL_AWARDS_OPTION, *awards.keys()]
    selected_award = st.selectbox(
        "Award",
        options=award_options,
        format_func=lambda key: "All awards" if key == ALL_AWARDS_OPTION else awards[key].name,
    )
    submissions = load_submissions(
        directory,
        award_key=None if selected_award == ALL_AWARDS_OPTION else selected_award,
    )
    if not submissions:
        st.info("No applications submitted yet.")
        return

    st.dataframe(
        pd.DataFrame(submission_rows(submissions, awards), columns=list(SUBMISSION_COLUMNS)),
        hide_index=True,
        use_container_width=True,
    )

    by_id = {str(submission.get("id")): submission for submission in submissions}
    selected_id = st.selectbox("Application", options=list(by_id.keys()))
    submission = by_id[selected_id]
    award = awards.get(str(submission.get("award_key", "")))

    st.caption(f"Status: {status_label(str(submission.get('status', '')))}")
    render_answers(submission, award)

    st.markdown("---")
    status_keys = list(STATUS_LABELS.keys())
    current_status = str(submission.get("status", ""))
    status_col, delete_col = st.columns([3, 1])
    new_status = status_col.selectbox(
        "Update status",
        options=status_keys,
        index=status_keys.index(current_status) if current_status in status_keys else 0,
        format_func=status_label,
    )
    if status_col.button("Save status") and new_status != current_status:
        try:
            update_submission_status(selected_id, new_status, directory)
        except (OSError, ValueError) as exc:
            st.error(f"Could not update the status: {exc}")
        else:
            st.rerun()

    if delete_col.button("Delete application", type="secondary"):
        answers = submission.get("answers", {})
        file_ids = uploaded_file_ids(award.custom_fields, answers) if award and isinstance(answers, dict) else []
        failures = []
        for file_id in file_ids:
            _, failed = delete_uploaded_file(file_id, upload_directory())
            failures.extend(failed)
        try:
            delete_submission(selected_id, directory)
        except OSError as exc:
            st.error(f"Could not delete the application: {exc}")
            return
        if failures:
            st.warning("Some uploaded documents could not be removed: " + ", ".join(str(path) for path in failures))
        st.rerun()


if __name__ == "__main__":
    main()
