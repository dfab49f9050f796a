"""Streamlit page where applicants keep the profile used to prefill applications."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import streamlit as st

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from award_forms.profiles import ROLES, ApplicantProfile, load_profile, save_profile, validate_profile
from award_forms.settings import profiles_directory
from award_forms.ui_theme import apply_app_theme, page_header, section_card

PROFILE_EMAIL_STATE_KEY = "profile_email"


def save_applicant_profile(profile: ApplicantProfile) -> Optional[ApplicantProfile]:
    """Validate and store ``profile``, reporting problems on the page."""

    problems = validate_profile(profile)
    if problems:
        st.error("Please fix the following before saving:")
        st.markdown("\n".join(f"- {problem}" for problem in problems))
        return None
    try:
        return save_profile(profile, profiles_directory())
    except (OSError, ValueError) as exc:
        st.error(f"Could not save the profile: {exc}")
        return None


def main() -> None:
    """Render the profile page."""

    apply_app_theme(page_title="Applicant profile", page_icon="👤")
    page_header("Applicant profile", "Your details are used to prefill award applications.", icon="👤")

    email = st.text_input("Email", key=PROFILE_EMAIL_STATE_KEY).strip()
    if not email:
        st.info("Enter your email to create or update your profile.")
        return

    existing = load_profile(email, profiles_directory())
    if existing is None:
        st.caption("No profile yet for this email. Fill in the form to create one.")
    elif existing.updated_at:
        st.caption(f"Last updated {existing.updated_at[:10]}.")

    roles = list(ROLES)
    current_role = existing.role if existing else roles[0]
    with section_card("Details"):
        with st.form("profile_form"):
            full_name = st.text_input("Full name", value=existing.full_name if existing else "")
            role = st.selectbox(
                "Role",
                options=roles,
                index=roles.index(current_role),
                format_func=lambda key: f"{key.title()} ({ROLES[key]})",
            )
            contact = st.text_input("Contact number", value=existing.contact if existing else "")
            university = st.text_input("University or institution", value=existing.university if existing else "")
            department = st.text_input("Department", value=existing.department if existing else "")
            bio = st.text_area("Bio", value=existing.bio if existing else "")
            submitted = st.form_submit_button("Save profile", type="primary")

    if submitted:
        profile = ApplicantProfile(
            email=email,
            full_name=full_name,
            role=role,
            contact=contact,
            university=university,
            department=department,
            bio=bio,
        )
        if save_applicant_profile(profile) is not None:
            st.success("Profile saved.")


if __name__ == "__main__":
    main()
