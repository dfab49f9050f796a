"""Tests for the per-type display tables."""

from __future__ import annotations

from award_forms import rendering
from award_forms.questions import (
    CHECKBOX,
    DROPDOWN,
    MULTIPLE_CHOICE,
    QUESTION_TYPES,
    SHORT_ANSWER,
    Question,
    with_required,
    with_title,
)


def test_preview_sorts_by_order():
    """Preview questions are sorted by order."""

    first = Question(type=SHORT_ANSWER, title="First", order=0)
    second = Question(type=SHORT_ANSWER, title="Second", order=1)

    ordered = rendering.preview_questions([second, first])

    assert [question.title for question in ordered] == ["First", "Second"]


def test_preview_keeps_stored_sequence_for_equal_orders():
    """Equal orders keep their stored sequence."""

    questions = [Question(title=title, order=0) for title in ("x", "y", "z")]

    assert [question.title for question in rendering.preview_questions(questions)] == ["x", "y", "z"]


def test_every_type_has_a_preview_control_and_edit_affordance():
    """Every type maps to a preview control and an edit affordance."""

    for question_type in QUESTION_TYPES:
        assert rendering.preview_control(question_type) != "unsupported"
        assert question_type in rendering.EDIT_AFFORDANCES

    assert rendering.preview_control("signature") == "unsupported"
    assert rendering.edit_affordance(DROPDOWN) == "options"
    assert rendering.edit_affordance(SHORT_ANSWER) == "title"


def test_option_markers_per_type():
    """Option markers depend on the question type."""

    assert rendering.option_marker(MULTIPLE_CHOICE, 3) == "○"
    assert rendering.option_marker(CHECKBOX, 0) == "☐"
    assert [rendering.option_marker(DROPDOWN, index) for index in range(3)] == ["A", "B", "C"]
    assert rendering.option_marker(SHORT_ANSWER, 0) == ""


def test_display_title_marks_required_questions():
    """Required questions get an asterisk."""

    question = with_title(Question(), "Project abstract")

    assert rendering.display_title(question) == "Project abstract"
    assert rendering.display_title(with_required(question, True)) == "Project abstract *"
