"""Streamlit home screen listing the awards open for applications."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Tuple

import pandas as pd
import streamlit as st

from award_forms.applications import load_submissions, status_label
from award_forms.award_store import AwardConfig, load_local_awards, published_awards
from award_forms.settings import submissions_directory
from award_forms.ui_theme import apply_app_theme, page_header

APPLY_SELECTED_STATE_KEY = "apply_selected_award"
AWARD_TABLE_COLUMNS = ("Award", "Category", "Levels", "Submission deadline", "Questions", "Published")


# The application and builder pages import ``load_awards`` from this module.
@st.cache_data(show_spinner=False)
def load_awards() -> Tuple[Dict[str, AwardConfig], List[str]]:
    """Load all award configurations from the local ``awards`` directory."""

    return load_local_awards()


def award_rows(awards: Iterable[AwardConfig]) -> List[Dict[str, Any]]:
    """Return one table row per award."""

    rows: List[Dict[str, Any]] = []
    for award in awards:
        rows.append(
            {
                "Key": award.key,
                "Award": award.name,
                "Category": award.category.title(),
                "Levels": ", ".join(award.levels) or "All",
                "Submission deadline": award.deadlines.get("submission", "—"),
                "Questions": len(award.custom_fields),
                "Published": "Yes" if award.is_published else "No",
            }
        )
    rows.sort(key=lambda row: (row["Published"] != "Yes", row["Award"].lower()))
    return rows


def _switch_to_application(award_key: str) -> None:
    """Open the application page with ``award_key`` preselected."""

    st.session_state[APPLY_SELECTED_STATE_KEY] = award_key
    try:
        st.switch_page("pages/01_Apply.py")
    except Exception:  # pragma: no cover - streamlit navigation fallback
        st.info("Use the navigation menu to open the Apply page.")


def main() -> None:
    """Render the home screen."""

    apply_app_theme(page_title="Awards portal", page_icon="🏆")
    page_header(
        "Awards portal",
        "Browse awards, apply with supporting documents and follow your applications.",
        icon="🏆",
    )

    awards, skipped = load_awards()
    for award_key in skipped:
        st.warning(f"Skipping invalid award file for '{award_key}'.")

    open_awards = published_awards(awards)
    submissions = load_submissions(submissions_directory())
    status_counts: Dict[str, int] = {}
    for submission in submissions:
        label = status_label(str(submission.get("status", "")))
        status_counts[label] = status_counts.get(label, 0) + 1

    metric_col1, metric_col2, metric_col3 = st.columns(3)
    metric_col1.metric("Open awards", len(open_awards) or "0")
    metric_col2.metric("Custom questions", sum(len(award.custom_fields) for award in awards.values()) or "0")
    metric_col3.metric("Applications", len(submissions) or "0")
    if status_counts:
        st.caption(" · ".join(f"{label}: {count}" for label, count in sorted(status_counts.items())))

    st.markdown("---")

    if not awards:
        st.info("No awards configured yet. Use the Award Builder page to create one.")
        st.page_link("pages/02_Award_Builder.py", label="Open the award builder", icon="🛠️")
        return

    table_df = pd.DataFrame(award_rows(awards.values()))
    st.dataframe(
        table_df,
        hide_index=True,
        column_order=list(AWARD_TABLE_COLUMNS),
        use_container_width=True,
    )

    if not open_awards:
        st.info("None of the configured awards are published yet.")
        return

    selected_key = st.selectbox(
        "Apply for",
        options=list(open_awards.keys()),
        format_func=lambda key: open_awards[key].name,
    )
    selected = open_awards[selected_key]
    if selected.description:
        st.write(selected.description)
    if selected.special_requirements:
        st.markdown("\n".join(f"- {item}" for item in selected.special_requirements))
    if st.button("Start application", type="primary"):
        _switch_to_application(selected_key)

    st.page_link("pages/03_Applications.py", label="Track applications", icon="📋")


if __name__ == "__main__":
    main()
