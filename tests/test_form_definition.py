"""Tests for the ordered question store."""

from __future__ import annotations

from award_forms.form_definition import FormDefinition
from award_forms.questions import (
    CHECKBOX,
    DATE,
    DROPDOWN,
    MULTIPLE_CHOICE,
    PARAGRAPH,
    SHORT_ANSWER,
    new_question,
    with_option_value,
    with_title,
    with_type,
)


def _form(*titles: str) -> FormDefinition:
    return FormDefinition(
        with_title(new_question(CHECKBOX, index), title) for index, title in enumerate(titles)
    )


def _titles(form: FormDefinition):
    return [question.title for question in form.questions]


def _orders(form: FormDefinition):
    return [question.order for question in form.questions]


def test_new_form_starts_with_one_multiple_choice_question():
    """A form without questions starts with a default multiple-choice question."""

    form = FormDefinition()

    assert len(form) == 1
    question = form.questions[0]
    assert question.type == MULTIPLE_CHOICE
    assert question.order == 0
    assert [option.value for option in question.options] == ["Option 1", "Option 2"]


def test_empty_initial_questions_are_kept_empty():
    """An explicitly empty list stays empty."""

    assert FormDefinition([]).questions == ()


def test_orders_stay_contiguous_through_mixed_edits():
    """Orders stay 0..n-1 through adds, duplicates, deletes and moves."""

    form = FormDefinition()
    edits = [
        lambda: form.add_question(SHORT_ANSWER),
        lambda: form.add_question(DROPDOWN),
        lambda: form.duplicate_question(0),
        lambda: form.reorder(3, 0),
        lambda: form.delete_question(1),
        lambda: form.add_question(DATE),
        lambda: form.reorder(0, 3),
        lambda: form.duplicate_question(2),
        lambda: form.delete_question(0),
        lambda: form.delete_question(9),
        lambda: form.reorder(2, 2),
    ]

    for edit in edits:
        edit()
        assert sorted(_orders(form)) == list(range(len(form)))
        assert _orders(form) == list(range(len(form)))


def test_reorder_moves_one_question():
    """Reordering moves exactly one question."""

    form = _form("A", "B", "C", "D")

    assert form.reorder(0, 2)
    assert _titles(form) == ["B", "C", "A", "D"]
    assert _orders(form) == [0, 1, 2, 3]


def test_reorder_onto_same_position_changes_nothing():
    """Reordering onto the same position is a no-op."""

    form = _form("A", "B", "C")
    before = form.questions

    assert not form.reorder(1, 1)
    assert form.questions is before


def test_reorder_out_of_range_changes_nothing():
    """Reordering outside the list is a no-op."""

    form = _form("A", "B")
    before = form.questions

    assert not form.reorder(0, 2)
    assert form.questions is before


def test_duplicate_appends_independent_copy():
    """A duplicate is appended and shares nothing with its source."""

    form = _form("A", "B", "C")

    assert form.duplicate_question(1)
    assert _titles(form) == ["A", "B", "C", "B (Copy)"]
    copy = form.questions[3]
    assert copy.order == 3

    form.update_question(with_option_value(copy, 0, "Changed"))

    assert form.questions[3].options[0].value == "Changed"
    assert form.questions[1].options[0].value == "Option 1"


def test_duplicate_missing_question_is_ignored():
    """Duplicating a missing position is a no-op."""

    form = _form("A")
    before = form.questions

    assert not form.duplicate_question(4)
    assert form.questions is before


def test_delete_reindexes_remaining_questions():
    """Deleting renumbers the remaining questions."""

    form = _form("A", "B", "C")

    assert form.delete_question(1)
    assert _titles(form) == ["A", "C"]
    assert _orders(form) == [0, 1]


def test_delete_missing_position_is_ignored():
    """Deleting a missing position is a no-op."""

    form = _form("A", "B")
    before = form.questions

    assert not form.delete_question(7)
    assert form.questions is before


def test_update_replaces_question_at_position():
    """Updates replace the question at the given order."""

    form = _form("A", "B")

    assert form.update_question(with_title(form.questions[1], "Renamed"))
    assert _titles(form) == ["A", "Renamed"]


def test_update_fixes_options_on_type_flip():
    """Updates that change type get consistent options."""

    form = FormDefinition([new_question(SHORT_ANSWER, 0), new_question(MULTIPLE_CHOICE, 1)])

    form.update_question(form.questions[0].__class__(type=DROPDOWN, title="Pick", order=0))
    form.update_question(with_type(form.questions[1], PARAGRAPH))

    assert [option.value for option in form.questions[0].options] == ["Option 1", "Option 2"]
    assert form.questions[1].options == ()


def test_update_with_stale_position_is_ignored():
    """Updates for a position that no longer exists are ignored."""

    form = _form("A")
    before = form.questions

    assert not form.update_question(with_title(new_question(CHECKBOX, 3), "Ghost"))
    assert form.questions is before


def test_every_change_swaps_the_snapshot():
    """Each committed change produces a new snapshot."""

    form = FormDefinition()
    snapshots = [form.questions]

    form.add_question(PARAGRAPH)
    snapshots.append(form.questions)
    form.reorder(0, 1)
    snapshots.append(form.questions)
    form.delete_question(0)
    snapshots.append(form.questions)

    assert len({id(snapshot) for snapshot in snapshots}) == len(snapshots)
    assert all(isinstance(snapshot, tuple) for snapshot in snapshots)
