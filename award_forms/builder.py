"""Session-scoped controller behind the award form builder."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Tuple

from award_forms.form_definition import FormDefinition
from award_forms.questions import (
    Question,
    with_added_option,
    with_option_value,
    with_required,
    with_title,
    with_type,
    without_option,
)
from award_forms.reorder import DragGesture

logger = logging.getLogger(__name__)

EDIT_MODE = "edit"
PREVIEW_MODE = "preview"
MODES = (EDIT_MODE, PREVIEW_MODE)

Subscriber = Callable[[Tuple[Question, ...]], None]


class BuilderController:
    """Translate builder actions into form edits and publish the results.

    Every edit that changes the form is announced to each subscriber exactly
    once, with the full question tuple as it stands after that edit. Edits
    that refer to a position which no longer exists do nothing and announce
    nothing.
    """

    def __init__(
        self,
        questions: Optional[Iterable[Question]] = None,
        on_change: Optional[Subscriber] = None,
    ) -> None:
        self.form = FormDefinition(questions)
        self.mode = EDIT_MODE
        self.is_selecting_type = False
        self.gesture = DragGesture()
        self._subscribers: List[Subscriber] = []
        if on_change is not None:
            self.subscribe(on_change)

    @property
    def questions(self) -> Tuple[Question, ...]:
        return self.form.questions

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register ``subscriber`` and return a callable that removes it again."""

        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def _emit(self) -> None:
        snapshot = self.form.questions
        for subscriber in list(self._subscribers):
            subscriber(snapshot)

    def _commit(self, changed: bool, *, reshaped: bool = False) -> bool:
        if changed:
            if reshaped:
                # Positions shifted under the picked-up card; its source is stale.
                self.gesture.cancel()
            self._emit()
        return changed

    def sync(self, questions: Optional[Iterable[Question]]) -> bool:
        """Adopt ``questions`` pushed from outside unless they match current state.

        The value came from the consumer, so nothing is announced back.
        """

        if questions is None:
            return False
        incoming = tuple(questions)
        if incoming == self.form.questions:
            return False
        logger.debug("Builder state replaced from outside (%s questions)", len(incoming))
        self.form.replace_all(incoming)
        self.gesture.cancel()
        return True

    # Structural edits

    def add_question(self, question_type: str) -> bool:
        return self._commit(self.form.add_question(question_type), reshaped=True)

    def update_question(self, updated: Question) -> bool:
        return self._commit(self.form.update_question(updated))

    def delete_question(self, order: int) -> bool:
        return self._commit(self.form.delete_question(order), reshaped=True)

    def duplicate_question(self, order: int) -> bool:
        return self._commit(self.form.duplicate_question(order), reshaped=True)

    def reorder(self, from_position: int, to_position: int) -> bool:
        return self._commit(self.form.reorder(from_position, to_position))

    # Question card edits

    def _edit(self, order: int, change: Callable[[Question], Question]) -> bool:
        question = self.form.question_at(order)
        if question is None:
            return False
        updated = change(question)
        if updated == question:
            return False
        return self.update_question(updated)

    def set_title(self, order: int, title: str) -> bool:
        return self._edit(order, lambda question: with_title(question, title))

    def set_type(self, order: int, question_type: str) -> bool:
        return self._edit(order, lambda question: with_type(question, question_type))

    def set_required(self, order: int, required: bool) -> bool:
        return self._edit(order, lambda question: with_required(question, required))

    def set_option(self, order: int, index: int, value: str) -> bool:
        return self._edit(order, lambda question: with_option_value(question, index, value))

    def add_option(self, order: int) -> bool:
        return self._edit(order, with_added_option)

    def remove_option(self, order: int, index: int) -> bool:
        return self._edit(order, lambda question: without_option(question, index))

    # Add-field selector

    def open_type_selector(self) -> None:
        self.is_selecting_type = True

    def close_type_selector(self) -> None:
        self.is_selecting_type = False

    def choose_type(self, question_type: str) -> bool:
        added = self.add_question(question_type)
        self.is_selecting_type = False
        return added

    # Display mode

    def set_mode(self, mode: str) -> None:
        if mode not in MODES:
            raise ValueError(f"Unknown builder mode: {mode}")
        self.mode = mode

    def toggle_mode(self) -> str:
        self.mode = PREVIEW_MODE if self.mode == EDIT_MODE else EDIT_MODE
        return self.mode

    # Drag and drop

    def begin_drag(self, order: int) -> bool:
        return self.gesture.start(order)

    def drop_on(self, order: Optional[int]) -> bool:
        """Finish the current drag over ``order`` (``None`` for no target)."""

        instruction = self.gesture.drop(order)
        if instruction is None:
            return False
        source, target = instruction
        try:
            return self.reorder(source, target)
        finally:
            self.gesture.reset()

    def cancel_drag(self) -> None:
        self.gesture.cancel()
