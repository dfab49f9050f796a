"""Tests for the builder controller and its change notifications."""

from __future__ import annotations

from typing import List, Tuple

import pytest

from award_forms.builder import EDIT_MODE, PREVIEW_MODE, BuilderController
from award_forms.questions import (
    CHECKBOX,
    DATE_RANGE,
    DROPDOWN,
    FILE_UPLOAD,
    MULTIPLE_CHOICE,
    PARAGRAPH,
    SHORT_ANSWER,
    Question,
    new_question,
    with_title,
)


def _recording_controller(questions=None) -> Tuple[BuilderController, List[Tuple[Question, ...]]]:
    received: List[Tuple[Question, ...]] = []
    controller = BuilderController(questions, on_change=received.append)
    return controller, received


def test_each_add_emits_the_cumulative_list():
    """Every add notifies subscribers with the whole list."""

    controller, received = _recording_controller([])

    controller.add_question(SHORT_ANSWER)
    controller.add_question(DROPDOWN)
    controller.add_question(FILE_UPLOAD)

    assert [len(snapshot) for snapshot in received] == [1, 2, 3]
    assert [question.type for question in received[-1]] == [SHORT_ANSWER, DROPDOWN, FILE_UPLOAD]
    assert [question.order for question in received[-1]] == [0, 1, 2]


def test_failed_edits_emit_nothing():
    """Edits on stale positions don't notify."""

    controller, received = _recording_controller()

    assert not controller.delete_question(4)
    assert not controller.duplicate_question(4)
    assert not controller.reorder(0, 0)
    assert not controller.reorder(0, 9)
    assert not controller.set_title(3, "Nobody")

    assert received == []


def test_sync_adopts_new_value_without_notifying():
    """Syncing a different list replaces the questions silently."""

    controller, received = _recording_controller()
    incoming = (with_title(new_question(PARAGRAPH, 0), "Statement of purpose"),)

    assert controller.sync(incoming)
    assert controller.questions == incoming
    assert received == []


def test_sync_ignores_equal_value():
    """Syncing an equal list or nothing keeps the current snapshot."""

    controller, _ = _recording_controller()
    before = controller.questions

    assert not controller.sync(tuple(before))
    assert not controller.sync(None)
    assert controller.questions is before


def test_sync_cancels_pending_drag():
    """Syncing a new list ends any pending drag."""

    controller = BuilderController()
    controller.add_question(DATE_RANGE)
    controller.begin_drag(1)

    controller.sync((new_question(SHORT_ANSWER, 0),))

    assert not controller.gesture.is_dragging


def test_unsubscribe_stops_notifications():
    """An unsubscribed listener stops receiving changes."""

    controller = BuilderController()
    first: List[int] = []
    second: List[int] = []
    unsubscribe = controller.subscribe(lambda snapshot: first.append(len(snapshot)))
    controller.subscribe(lambda snapshot: second.append(len(snapshot)))

    controller.add_question(CHECKBOX)
    unsubscribe()
    controller.add_question(CHECKBOX)

    assert first == [2]
    assert second == [2, 3]


def test_card_edits_update_the_question_in_place():
    """Card edits replace the question at its position."""

    controller, received = _recording_controller()

    controller.set_title(0, "Which category?")
    controller.set_required(0, True)
    controller.set_option(0, 1, "Faculty")
    controller.add_option(0)

    question = controller.questions[0]
    assert question.title == "Which category?"
    assert question.required is True
    assert [option.value for option in question.options] == ["Option 1", "Faculty", "Option 3"]
    assert len(received) == 4


def test_unchanged_card_edits_emit_nothing():
    """Setting a value to what it already is doesn't notify."""

    controller, received = _recording_controller([new_question(DROPDOWN, 0)])
    controller.remove_option(0, 0)
    received.clear()

    assert not controller.remove_option(0, 0)
    assert not controller.set_required(0, False)
    assert not controller.set_type(0, DROPDOWN)
    assert received == []


def test_set_type_seeds_or_clears_options():
    """Changing type seeds or clears options as needed."""

    controller = BuilderController([new_question(SHORT_ANSWER, 0), new_question(MULTIPLE_CHOICE, 1)])

    controller.set_type(0, CHECKBOX)
    controller.set_type(1, PARAGRAPH)

    assert len(controller.questions[0].options) == 2
    assert controller.questions[1].options == ()


def test_type_selector_adds_and_closes():
    """Picking a type adds a question and closes the selector."""

    controller, received = _recording_controller()

    controller.open_type_selector()
    assert controller.is_selecting_type

    assert controller.choose_type(FILE_UPLOAD)
    assert not controller.is_selecting_type
    assert controller.questions[-1].type == FILE_UPLOAD
    assert len(received) == 1


def test_closing_type_selector_changes_nothing():
    """Closing the selector without a pick leaves the form alone."""

    controller, received = _recording_controller()

    controller.open_type_selector()
    controller.close_type_selector()

    assert not controller.is_selecting_type
    assert len(controller.questions) == 1
    assert received == []


def test_mode_toggle_keeps_questions():
    """Switching between edit and preview never touches the questions."""

    controller = BuilderController()
    before = controller.questions

    assert controller.mode == EDIT_MODE
    assert controller.toggle_mode() == PREVIEW_MODE
    assert controller.toggle_mode() == EDIT_MODE
    controller.set_mode(PREVIEW_MODE)

    assert controller.mode == PREVIEW_MODE
    assert controller.questions is before


def test_unknown_mode_is_rejected():
    """Only edit and preview modes are accepted."""

    with pytest.raises(ValueError):
        BuilderController().set_mode("publish")


def test_drop_on_target_reorders_once():
    """Dropping on a card moves the dragged question there with one notification."""

    questions = [with_title(new_question(SHORT_ANSWER, index), title) for index, title in enumerate("ABCD")]
    controller, received = _recording_controller(questions)

    assert controller.begin_drag(0)
    assert controller.drop_on(2)

    assert [question.title for question in controller.questions] == ["B", "C", "A", "D"]
    assert len(received) == 1
    assert not controller.gesture.is_dragging


def test_drop_outside_any_target_changes_nothing():
    """Dropping without a target leaves the order as it was."""

    controller, received = _recording_controller()
    controller.add_question(PARAGRAPH)
    received.clear()
    before = controller.questions

    controller.begin_drag(0)
    assert not controller.drop_on(None)

    assert controller.questions is before
    assert received == []
    assert controller.begin_drag(1)


def test_cancelled_drag_changes_nothing():
    """A cancelled drag can't be dropped afterwards."""

    controller, received = _recording_controller()
    controller.add_question(PARAGRAPH)
    received.clear()

    controller.begin_drag(1)
    controller.cancel_drag()

    assert not controller.drop_on(0)
    assert received == []


def test_delete_during_drag_drops_the_pickup():
    """Deleting a card while another is picked up ends the drag without moving anything."""

    questions = [with_title(new_question(SHORT_ANSWER, index), title) for index, title in enumerate("ABCD")]
    controller, received = _recording_controller(questions)

    assert controller.begin_drag(2)
    assert controller.delete_question(0)

    assert not controller.gesture.is_dragging
    assert not controller.drop_on(0)
    assert [question.title for question in controller.questions] == ["B", "C", "D"]
    assert len(received) == 1


@pytest.mark.parametrize("edit", ["add", "duplicate"])
def test_reshaping_edits_cancel_the_drag(edit):
    """Adding or duplicating a card cancels a pending drag."""

    questions = [with_title(new_question(SHORT_ANSWER, index), title) for index, title in enumerate("ABC")]
    controller, _ = _recording_controller(questions)
    controller.begin_drag(1)

    if edit == "add":
        controller.add_question(PARAGRAPH)
    else:
        controller.duplicate_question(0)

    assert not controller.gesture.is_dragging
    assert not controller.drop_on(0)


def test_card_edits_keep_the_drag():
    """Renaming a card leaves a pending drag in place."""

    questions = [with_title(new_question(SHORT_ANSWER, index), title) for index, title in enumerate("ABC")]
    controller, _ = _recording_controller(questions)
    controller.begin_drag(2)

    controller.set_title(0, "Alpha")

    assert controller.gesture.is_dragging
    assert controller.drop_on(0)
    assert [question.title for question in controller.questions] == ["C", "Alpha", "B"]
