"""Framework-neutral description of how each question type is displayed."""

from __future__ import annotations

from typing import Dict, Iterable, List

from award_forms.questions import (
    CHECKBOX,
    DATE,
    DATE_RANGE,
    DROPDOWN,
    FILE_UPLOAD,
    MULTIPLE_CHOICE,
    PARAGRAPH,
    SHORT_ANSWER,
    Question,
)

EDIT_AFFORDANCES: Dict[str, str] = {
    MULTIPLE_CHOICE: "options",
    CHECKBOX: "options",
    DROPDOWN: "options",
    SHORT_ANSWER: "title",
    PARAGRAPH: "title",
    FILE_UPLOAD: "title",
    DATE: "title",
    DATE_RANGE: "title",
}

PREVIEW_CONTROLS: Dict[str, str] = {
    MULTIPLE_CHOICE: "radio",
    CHECKBOX: "checkboxes",
    DROPDOWN: "select",
    SHORT_ANSWER: "text",
    PARAGRAPH: "textarea",
    FILE_UPLOAD: "file",
    DATE: "date",
    DATE_RANGE: "date_range",
}

# Placeholder copy shown on edit cards for types without options.
EDIT_PLACEHOLDERS: Dict[str, str] = {
    SHORT_ANSWER: "Short answer text field",
    PARAGRAPH: "Paragraph text field",
    FILE_UPLOAD: "File upload area",
    DATE: "Date picker",
    DATE_RANGE: "From and to date pickers",
}


def preview_questions(questions: Iterable[Question]) -> List[Question]:
    """Return ``questions`` sorted by ``order`` for read-only display.

    Storage order is not trusted here; the sort is stable so equal positions
    keep their stored sequence.
    """

    return sorted(questions, key=lambda question: question.order)


def preview_control(question_type: str) -> str:
    return PREVIEW_CONTROLS.get(question_type, "unsupported")


def edit_affordance(question_type: str) -> str:
    return EDIT_AFFORDANCES.get(question_type, "title")


def option_marker(question_type: str, index: int) -> str:
    """Return the marker shown beside option ``index`` on an edit card."""

    if question_type == MULTIPLE_CHOICE:
        return "○"
    if question_type == CHECKBOX:
        return "☐"
    if question_type == DROPDOWN:
        return chr(65 + index) if index < 26 else str(index + 1)
    return ""


def display_title(question: Question) -> str:
    """Return the question title with a required marker."""

    title = question.title or "Untitled"
    return f"{title} *" if question.required else title
