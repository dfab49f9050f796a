"""Password-protected builder for award details and application questions."""

from __future__ import annotations

import hashlib
import hmac
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import requests
import streamlit as st

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from Home import load_awards
from award_forms.applications import load_submissions
from award_forms.award_store import (
    AwardConfig,
    award_to_payload,
    delete_local_award,
    new_award_key,
    save_local_award,
    with_custom_fields,
)
from award_forms.builder import EDIT_MODE, PREVIEW_MODE, BuilderController
from award_forms.defaults import AWARD_CATEGORIES, DEFAULT_AWARD_NAME, ELIGIBILITY_LEVELS
from award_forms.preview import render_form_preview
from award_forms.questions import QUESTION_TYPES, Question, question_type_label
from award_forms.rendering import EDIT_PLACEHOLDERS, edit_affordance, option_marker
from award_forms.settings import builder_password_hash, get_backend, submissions_directory
from award_forms.ui_theme import apply_app_theme, page_header, section_card

AUTH_STATE_KEY = "builder_auth"
AWARD_STATE_KEY = "builder_award"
CONTROLLER_STATE_KEY = "builder_controller"
REVISION_STATE_KEY = "builder_revision"
SELECTED_AWARD_STATE_KEY = "builder_selected_award"
NEW_AWARD_OPTION = "__new__"
MODE_LABELS = {EDIT_MODE: "Edit Form", PREVIEW_MODE: "Preview"}


def verify_password(password: str) -> bool:
    """Validate a plaintext password against the configured hash."""

    stored_hash = builder_password_hash()
    if not stored_hash:
        return False

    digest = hashlib.sha256(password.encode("utf-8")).hexdigest()
    return hmac.compare_digest(digest, stored_hash)


def require_authentication() -> None:
    """Only let award administrators past this point."""

    if st.session_state.get(AUTH_STATE_KEY):
        return

    if not builder_password_hash():
        st.error("Builder password is not configured.")
        st.stop()

    password = st.text_input("Password", type="password")
    if not password:
        st.stop()

    if verify_password(password):
        st.session_state[AUTH_STATE_KEY] = True
        return

    st.error("Incorrect password.")
    st.stop()


def _revision() -> int:
    return int(st.session_state.get(REVISION_STATE_KEY, 0))


def _key(*parts: Any) -> str:
    """Widget key that changes whenever the question list changes."""

    return "_".join(["builder", str(_revision()), *(str(part) for part in parts)])


def record_fields(questions: Tuple[Question, ...]) -> None:
    """Copy the builder's latest questions into the award draft."""

    award: Optional[AwardConfig] = st.session_state.get(AWARD_STATE_KEY)
    if award is not None:
        st.session_state[AWARD_STATE_KEY] = with_custom_fields(award, questions)
    st.session_state[REVISION_STATE_KEY] = _revision() + 1


def start_session(award: AwardConfig) -> BuilderController:
    """Load ``award`` into a fresh builder session."""

    st.session_state[AWARD_STATE_KEY] = award
    controller = BuilderController(award.custom_fields or None, on_change=record_fields)
    st.session_state[CONTROLLER_STATE_KEY] = controller
    if not award.custom_fields:
        record_fields(controller.questions)
    return controller


def get_controller() -> BuilderController:
    controller: Optional[BuilderController] = st.session_state.get(CONTROLLER_STATE_KEY)
    award: Optional[AwardConfig] = st.session_state.get(AWARD_STATE_KEY)
    if controller is None or award is None:
        return start_session(AwardConfig(key=new_award_key(DEFAULT_AWARD_NAME, [])))
    if controller.sync(award.custom_fields):
        st.session_state[REVISION_STATE_KEY] = _revision() + 1
    return controller


def _split_lines(raw: str) -> Tuple[str, ...]:
    return tuple(line.strip() for line in raw.splitlines() if line.strip())


def _apply_widget(key: str, apply: Any, *args: Any) -> None:
    """``on_change`` helper passing the widget's new value to ``apply``."""

    apply(*args, st.session_state[key])


def _drop(controller: BuilderController, source: int, target: int) -> None:
    """Move a card in one step: pick it up at ``source`` and drop it on ``target``."""

    controller.cancel_drag()
    if controller.begin_drag(source):
        controller.drop_on(target)


def _choose_type(controller: BuilderController, key: str) -> None:
    question_type = st.session_state.get(key)
    if question_type:
        controller.choose_type(question_type)
    else:
        controller.close_type_selector()


def render_award_details(award: AwardConfig, existing_keys: List[str]) -> AwardConfig:
    """Render the award metadata inputs and return the edited award."""

    with section_card("Award details", "Shown to applicants before they start the form."):
        name = st.text_input("Award name", value=award.name)
        description = st.text_area("Description", value=award.description)
        category = st.selectbox(
            "Category",
            options=list(AWARD_CATEGORIES),
            index=list(AWARD_CATEGORIES).index(award.category),
            format_func=str.title,
        )
        levels = st.multiselect(
            "Eligible levels",
            options=list(ELIGIBILITY_LEVELS),
            default=[level for level in award.levels if level in ELIGIBILITY_LEVELS],
        )
        col_states, col_branches = st.columns(2)
        states = col_states.text_area("Eligible states (one per line)", value="\n".join(award.states))
        branches = col_branches.text_area("Eligible branches (one per line)", value="\n".join(award.branches))
        max_age_raw = st.number_input(
            "Maximum age (0 for no limit)",
            min_value=0,
            max_value=120,
            value=award.max_age or 0,
            step=1,
        )
        deadline_cols = st.columns(3)
        deadlines: Dict[str, str] = {}
        for column, (deadline_key, label) in zip(
            deadline_cols,
            (("submission", "Submission deadline"), ("evaluation", "Evaluation deadline"), ("result", "Result date")),
        ):
            value = column.text_input(label, value=award.deadlines.get(deadline_key, ""), placeholder="YYYY-MM-DD")
            if value.strip():
                deadlines[deadline_key] = value.strip()
        requirements = st.text_area(
            "Special requirements (one per line)",
            value="\n".join(award.special_requirements),
        )
        is_published = st.toggle("Published", value=award.is_published)

    key = award.key
    if key not in existing_keys and name.strip() and name.strip() != award.name:
        key = new_award_key(name, existing_keys)

    return replace(
        award,
        key=key,
        name=name.strip() or DEFAULT_AWARD_NAME,
        description=description.strip(),
        category=category,
        levels=tuple(levels),
        states=_split_lines(states),
        branches=_split_lines(branches),
        max_age=int(max_age_raw) or None,
        deadlines=deadlines,
        special_requirements=_split_lines(requirements),
        is_published=is_published,
    )


def render_options_editor(controller: BuilderController, question: Question) -> None:
    """Render the option rows of a choice question."""

    for index, option in enumerate(question.options):
        marker_col, value_col, remove_col = st.columns([0.4, 6, 0.8])
        marker_col.markdown(option_marker(question.type, index))
        option_key = _key("q", question.order, "option", index)
        value_col.text_input(
            "Option text",
            value=option.value,
            key=option_key,
            label_visibility="collapsed",
            placeholder="Option text",
            on_change=_apply_widget,
            args=(option_key, controller.set_option, question.order, index),
        )
        remove_col.button(
            "✕",
            key=_key("q", question.order, "remove_option", index),
            disabled=len(question.options) <= 1,
            help="Remove option",
            on_click=controller.remove_option,
            args=(question.order, index),
        )
    st.button(
        "➕ Add Option",
        key=_key("q", question.order, "add_option"),
        on_click=controller.add_option,
        args=(question.order,),
    )


def render_question_card(controller: BuilderController, question: Question, total: int) -> None:
    """Render one editable question card."""

    gesture = controller.gesture
    with st.container(border=True):
        header = st.columns([0.5, 0.5, 0.9, 3, 0.9, 0.9])
        header[0].button(
            "▲",
            key=_key("q", question.order, "up"),
            disabled=question.order == 0 or gesture.is_dragging,
            help="Move question up",
            on_click=_drop,
            args=(controller, question.order, question.order - 1),
        )
        header[1].button(
            "▼",
            key=_key("q", question.order, "down"),
            disabled=question.order >= total - 1 or gesture.is_dragging,
            help="Move question down",
            on_click=_drop,
            args=(controller, question.order, question.order + 1),
        )
        if gesture.is_dragging and gesture.source == question.order:
            header[2].button(
                "Cancel",
                key=_key("q", question.order, "cancel_drag"),
                on_click=controller.cancel_drag,
            )
        elif gesture.is_dragging:
            header[2].button(
                "Drop here",
                key=_key("q", question.order, "drop"),
                type="primary",
                on_click=controller.drop_on,
                args=(question.order,),
            )
        else:
            header[2].button(
                "✥ Move",
                key=_key("q", question.order, "drag"),
                help="Pick up this question, then choose where to drop it",
                on_click=controller.begin_drag,
                args=(question.order,),
            )

        type_key = _key("q", question.order, "type")
        header[3].selectbox(
            "Question type",
            options=list(QUESTION_TYPES),
            index=list(QUESTION_TYPES).index(question.type) if question.type in QUESTION_TYPES else 0,
            format_func=question_type_label,
            key=type_key,
            label_visibility="collapsed",
            on_change=_apply_widget,
            args=(type_key, controller.set_type, question.order),
        )
        header[4].button(
            "⧉",
            key=_key("q", question.order, "duplicate"),
            help="Duplicate question",
            disabled=gesture.is_dragging,
            on_click=controller.duplicate_question,
            args=(question.order,),
        )
        header[5].button(
            "🗑",
            key=_key("q", question.order, "delete"),
            help="Delete question",
            disabled=gesture.is_dragging,
            on_click=controller.delete_question,
            args=(question.order,),
        )

        title_key = _key("q", question.order, "title")
        st.text_input(
            "Question text",
            value=question.title,
            key=title_key,
            placeholder="Question text",
            on_change=_apply_widget,
            args=(title_key, controller.set_title, question.order),
        )

        if edit_affordance(question.type) == "options":
            render_options_editor(controller, question)
        else:
            st.caption(EDIT_PLACEHOLDERS.get(question.type, "Answer field"))

        required_key = _key("q", question.order, "required")
        st.toggle(
            "Required",
            value=question.required,
            key=required_key,
            on_change=_apply_widget,
            args=(required_key, controller.set_required, question.order),
        )


def render_add_field(controller: BuilderController) -> None:
    """Render the add-field control and type selector."""

    if not controller.is_selecting_type:
        st.button(
            "➕ Add Field",
            key=_key("add_field"),
            use_container_width=True,
            on_click=controller.open_type_selector,
        )
        return

    selector_key = _key("new_field_type")
    select_col, cancel_col = st.columns([5, 1])
    select_col.selectbox(
        "Select field type",
        options=list(QUESTION_TYPES),
        index=None,
        placeholder="Select field type",
        format_func=question_type_label,
        key=selector_key,
        on_change=_choose_type,
        args=(controller, selector_key),
    )
    cancel_col.button("Cancel", key=_key("cancel_add_field"), on_click=controller.close_type_selector)


def render_editor(controller: BuilderController) -> None:
    questions = controller.questions
    if controller.gesture.is_dragging:
        st.info(f"Moving question {controller.gesture.source + 1}. Choose “Drop here” on the target card or cancel.")
    if not questions:
        st.info("No questions yet. Add a field to get started.")
    for question in questions:
        render_question_card(controller, question, len(questions))
    render_add_field(controller)


def save_award(award: AwardConfig, *, publish: bool) -> None:
    """Persist ``award`` locally and optionally commit it to GitHub."""

    try:
        path = save_local_award(award)
    except OSError as exc:
        st.error(f"Could not save the award locally: {exc}")
        return
    load_awards.clear()
    st.session_state[SELECTED_AWARD_STATE_KEY] = award.key
    st.success(f"Saved to `{path}`.")

    if not publish:
        return
    backend = get_backend(award.key)
    if backend is None:
        st.warning("GitHub publishing is not configured.")
        return
    try:
        backend.write_json(award_to_payload(award), message=f"Update award {award.key}")
    except (requests.RequestException, ValueError) as exc:
        st.error(f"Failed to publish the award to GitHub: {exc}")
        return
    st.success("Published to GitHub.")


def delete_award(award_key: str) -> bool:
    """Delete a saved award and drop it from the builder session.

    Awards that already have applications on file are kept.
    """

    if load_submissions(submissions_directory(), award_key=award_key):
        st.error("This award has applications and can't be deleted.")
        return False
    try:
        removed = delete_local_award(award_key)
    except OSError as exc:
        st.error(f"Could not delete the award: {exc}")
        return False
    if not removed:
        st.warning("This award hasn't been saved yet.")
        return False
    load_awards.clear()
    for state_key in (AWARD_STATE_KEY, CONTROLLER_STATE_KEY, SELECTED_AWARD_STATE_KEY):
        st.session_state.pop(state_key, None)
    return True


def main() -> None:
    """Render the award builder."""

    apply_app_theme(page_title="Award builder", page_icon="🛠️")
    page_header(
        "Award builder",
        "Configure award details and the questions applicants answer.",
        icon="🛠️",
    )
    require_authentication()

    awards, skipped = load_awards()
    for award_key in skipped:
        st.warning(f"Skipping invalid award file for '{award_key}'.")

    options = [NEW_AWARD_OPTION, *awards.keys()]
    current = st.session_state.get(SELECTED_AWARD_STATE_KEY, NEW_AWARD_OPTION)
    if current not in options:
        current = NEW_AWARD_OPTION
    selected = st.selectbox(
        "Award",
        options=options,
        index=options.index(current),
        format_func=lambda key: "➕ New award" if key == NEW_AWARD_OPTION else awards[key].name,
    )
    if selected != st.session_state.get(SELECTED_AWARD_STATE_KEY) or CONTROLLER_STATE_KEY not in st.session_state:
        st.session_state[SELECTED_AWARD_STATE_KEY] = selected
        if selected == NEW_AWARD_OPTION:
            start_session(AwardConfig(key=new_award_key(DEFAULT_AWARD_NAME, awards.keys())))
        else:
            start_session(awards[selected])

    controller = get_controller()
    award: AwardConfig = st.session_state[AWARD_STATE_KEY]
    award = render_award_details(award, list(awards.keys()))
    st.session_state[AWARD_STATE_KEY] = award

    mode = st.radio(
        "Mode",
        options=list(MODE_LABELS.keys()),
        index=list(MODE_LABELS.keys()).index(controller.mode),
        format_func=MODE_LABELS.get,
        horizontal=True,
        label_visibility="collapsed",
    )
    controller.set_mode(mode)

    if controller.mode == EDIT_MODE:
        render_editor(controller)
    else:
        render_form_preview(controller.questions, {}, prefix="builder_preview")

    st.markdown("---")
    save_col, publish_col, reset_col = st.columns(3)
    if save_col.button("Save", type="primary", use_container_width=True):
        save_award(award, publish=False)
    if publish_col.button("Save and publish to GitHub", use_container_width=True):
        save_award(award, publish=True)
    if reset_col.button("Discard changes", use_container_width=True):
        original = awards.get(award.key)
        if original is not None:
            st.session_state[AWARD_STATE_KEY] = replace(award, custom_fields=original.custom_fields)
            get_controller()
            st.rerun()

    if award.key in awards:
        with st.expander("Delete award"):
            confirmed = st.checkbox(f"Delete '{award.name}' permanently", key=_key("confirm_delete"))
            if st.button("Delete award", type="secondary", disabled=not confirmed) and delete_award(award.key):
                st.rerun()


if __name__ == "__main__":
    main()
