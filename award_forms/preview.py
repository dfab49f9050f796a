"""Streamlit widgets for read-only previews and applicant answers."""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional

import streamlit as st

from award_forms.applications import answer_key
from award_forms.defaults import UNSELECTED_LABEL, UPLOAD_TYPE_EXTENSIONS
from award_forms.questions import DROPDOWN, MULTIPLE_CHOICE, Question
from award_forms.rendering import display_title, preview_control, preview_questions
from award_forms.uploads import StoredFile, UploadRejected

UPLOADS_STATE_KEY = "preview_stored_uploads"

UploadHandler = Callable[[Question, Any], StoredFile]


def _widget_key(prefix: str, question: Question, suffix: str = "") -> str:
    base = f"{prefix}_q{question.order}" if prefix else f"q{question.order}"
    return f"{base}_{suffix}" if suffix else base


def _date_or_none(value: Any) -> Optional[date]:
    return value if isinstance(value, date) else None


def _choice_value(question: Question, current: Any, prefix: str, label: str) -> Any:
    options = [option.value for option in question.options]

    if question.type == MULTIPLE_CHOICE:
        index = options.index(current) if current in options else None
        return st.radio(label, options, index=index, key=_widget_key(prefix, question))

    if question.type == DROPDOWN:
        choices = [UNSELECTED_LABEL, *options]
        index = choices.index(current) if current in options else 0
        selection = st.selectbox(label, choices, index=index, key=_widget_key(prefix, question))
        return None if selection == UNSELECTED_LABEL else selection

    st.markdown(f"**{label}**")
    previous = current if isinstance(current, list) else []
    selected: List[str] = []
    for index, option in enumerate(options):
        if st.checkbox(option, value=option in previous, key=_widget_key(prefix, question, f"o{index}")):
            selected.append(option)
    return selected or None


def _file_value(
    question: Question,
    current: Any,
    prefix: str,
    label: str,
    on_upload: Optional[UploadHandler],
) -> Optional[str]:
    widget_key = _widget_key(prefix, question)
    uploaded = st.file_uploader(
        label,
        type=sorted(set(UPLOAD_TYPE_EXTENSIONS.values())),
        key=widget_key,
        help="PDF, DOC, DOCX up to 10MB",
    )
    stored_uploads: Dict[str, Dict[str, Any]] = st.session_state.setdefault(UPLOADS_STATE_KEY, {})
    if uploaded is None:
        removed = stored_uploads.pop(widget_key, None)
        if removed is None and isinstance(current, str) and current:
            # Restored from a draft: the file is stored already, nothing in the widget.
            st.caption("A previously uploaded document is attached. Upload a new file to replace it.")
            return current
        return None
    if on_upload is None:
        return None

    # Streamlit hands back the same file on every rerun; store it only once.
    fingerprint = f"{getattr(uploaded, 'name', '')}:{getattr(uploaded, 'size', '')}"
    remembered = stored_uploads.get(widget_key)
    if remembered and remembered.get("fingerprint") == fingerprint:
        return remembered.get("file_id")

    try:
        stored = on_upload(question, uploaded)
    except UploadRejected as exc:
        st.error(exc.reason)
        return None
    stored_uploads[widget_key] = {"fingerprint": fingerprint, "file_id": stored.file_id}
    st.caption(f"Uploaded `{stored.filename}` ({stored.size} bytes)")
    return stored.file_id


def render_preview_question(
    question: Question,
    answers: Dict[str, Any],
    *,
    prefix: str = "",
    on_upload: Optional[UploadHandler] = None,
) -> None:
    """Render the answer control for ``question`` and record the value in ``answers``.

    ``answers`` is keyed by ``question_<order>``. The question itself is never
    modified. File uploads are only stored when ``on_upload`` is given; the
    returned file identifier becomes the answer.
    """

    key = answer_key(question)
    label = display_title(question)
    current = answers.get(key)
    control = preview_control(question.type)
    value: Any

    if control in {"radio", "checkboxes", "select"}:
        if not question.options:
            st.warning(f"Question '{question.title}' has no options configured.")
            return
        value = _choice_value(question, current, prefix, label)
    elif control == "text":
        value = st.text_input(
            label,
            value=current if isinstance(current, str) else "",
            placeholder="Your answer",
            key=_widget_key(prefix, question),
        )
    elif control == "textarea":
        value = st.text_area(
            label,
            value=current if isinstance(current, str) else "",
            placeholder="Your answer",
            key=_widget_key(prefix, question),
        )
    elif control == "file":
        value = _file_value(question, current, prefix, label, on_upload)
    elif control == "date":
        value = st.date_input(label, value=_date_or_none(current), key=_widget_key(prefix, question))
    elif control == "date_range":
        st.markdown(f"**{label}**")
        from_col, to_col = st.columns(2)
        previous = current if isinstance(current, dict) else {}
        start = from_col.date_input(
            "From Date", value=_date_or_none(previous.get("from")), key=_widget_key(prefix, question, "from")
        )
        end = to_col.date_input(
            "To Date", value=_date_or_none(previous.get("to")), key=_widget_key(prefix, question, "to")
        )
        value = {"from": start, "to": end} if start is not None or end is not None else None
    else:
        st.warning(f"Unsupported question type: {question.type}")
        return

    if value is None or value == "":
        answers.pop(key, None)
    else:
        answers[key] = value


def render_form_preview(
    questions: Iterable[Question],
    answers: Optional[Dict[str, Any]] = None,
    *,
    prefix: str = "preview",
    on_upload: Optional[UploadHandler] = None,
) -> Dict[str, Any]:
    """Render every question in ascending ``order`` and return the answers."""

    answers = {} if answers is None else answers
    ordered = preview_questions(questions)
    if not ordered:
        st.info("This form has no questions yet.")
        return answers

    for question in ordered:
        with st.container():
            render_preview_question(question, answers, prefix=prefix, on_upload=on_upload)
    return answers


def reset_preview_widgets(prefix: str) -> None:
    """Forget widget values and remembered uploads for questions rendered under ``prefix``.

    The next render seeds every widget from the answers passed in again.
    """

    marker = f"{prefix}_q"
    for key in [key for key in st.session_state.keys() if str(key).startswith(marker)]:
        del st.session_state[key]
    stored_uploads = st.session_state.get(UPLOADS_STATE_KEY)
    if isinstance(stored_uploads, dict):
        for key in [key for key in stored_uploads if str(key).startswith(marker)]:
            del stored_uploads[key]
