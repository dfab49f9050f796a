"""The ordered list of questions that makes up one application form."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

from award_forms.questions import (
    Question,
    adjust_options_for_type,
    default_question,
    duplicate,
    new_question,
)
from award_forms.reorder import move, reindex

logger = logging.getLogger(__name__)


class FormDefinition:
    """Own the question sequence for one form and apply structural edits.

    ``questions`` is always a tuple whose ``order`` fields read ``0..n-1``.
    Every successful edit swaps in a new tuple, so callers can spot changes
    with ``is``. Each edit returns ``True`` when it changed something and
    ``False`` when the position it referred to no longer exists.
    """

    def __init__(self, questions: Optional[Iterable[Question]] = None) -> None:
        if questions is None:
            self._questions: Tuple[Question, ...] = (default_question(),)
        else:
            self._questions = tuple(questions)

    @property
    def questions(self) -> Tuple[Question, ...]:
        return self._questions

    def __len__(self) -> int:
        return len(self._questions)

    def replace_all(self, questions: Iterable[Question]) -> None:
        """Swap the whole sequence for ``questions`` as given."""

        self._questions = tuple(questions)

    def question_at(self, order: int) -> Optional[Question]:
        """Return the question whose ``order`` equals ``order``, if any."""

        return next((question for question in self._questions if question.order == order), None)

    def add_question(self, question_type: str) -> bool:
        question = new_question(question_type, len(self._questions))
        self._questions = self._questions + (question,)
        logger.debug("Added %s question at position %s", question_type, question.order)
        return True

    def update_question(self, updated: Question) -> bool:
        """Replace the question sitting at index ``updated.order``.

        Matching is positional: the question stored at that index is replaced
        whatever its own fields say.
        """

        if not 0 <= updated.order < len(self._questions):
            return False
        updated = adjust_options_for_type(updated)
        questions = list(self._questions)
        questions[updated.order] = updated
        self._questions = tuple(questions)
        return True

    def delete_question(self, order: int) -> bool:
        remaining = [question for question in self._questions if question.order != order]
        if len(remaining) == len(self._questions):
            return False
        self._questions = reindex(remaining)
        logger.debug("Deleted question at position %s", order)
        return True

    def duplicate_question(self, order: int) -> bool:
        source = self.question_at(order)
        if source is None:
            return False
        self._questions = self._questions + (duplicate(source, len(self._questions)),)
        logger.debug("Duplicated question %s to position %s", order, len(self._questions) - 1)
        return True

    def reorder(self, from_position: int, to_position: int) -> bool:
        size = len(self._questions)
        if from_position == to_position:
            return False
        if not 0 <= from_position < size or not 0 <= to_position < size:
            return False
        self._questions = move(self._questions, from_position, to_position)
        logger.debug("Moved question from %s to %s", from_position, to_position)
        return True
