"""Moving questions around inside a form."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence, Tuple

from award_forms.questions import Question

logger = logging.getLogger(__name__)

IDLE = "idle"
DRAGGING = "dragging"
DROPPED = "dropped"


def reindex(questions: Sequence[Question]) -> Tuple[Question, ...]:
    """Return ``questions`` with every ``order`` rewritten to its index."""

    return tuple(
        question if question.order == index else replace(question, order=index)
        for index, question in enumerate(questions)
    )


def move(questions: Sequence[Question], from_position: int, to_position: int) -> Tuple[Question, ...]:
    """Move the question at ``from_position`` so it ends up at ``to_position``.

    Splice semantics: the question is removed first and then inserted at
    ``to_position`` of the remaining sequence, so every other question keeps
    its relative order and shifts by at most one slot. Positions outside the
    sequence, or a move onto itself, return the input unchanged.
    """

    current = tuple(questions)
    if from_position == to_position:
        return current
    if not 0 <= from_position < len(current) or not 0 <= to_position < len(current):
        return current

    remaining = list(current)
    moved = remaining.pop(from_position)
    remaining.insert(to_position, moved)
    return reindex(remaining)


class DragGesture:
    """Track one drag of a question card from pick-up to drop.

    The gesture goes ``idle`` -> ``dragging`` on :meth:`start` and
    ``dragging`` -> ``dropped`` on :meth:`drop` with a target. Dropping
    without a target or calling :meth:`cancel` goes back to ``idle`` and
    produces no move. Calls that don't fit the current state are ignored.
    """

    def __init__(self) -> None:
        self.state = IDLE
        self.source: Optional[int] = None
        self.target: Optional[int] = None

    def start(self, source: int) -> bool:
        if self.state != IDLE:
            return False
        self.state = DRAGGING
        self.source = source
        self.target = None
        return True

    def drop(self, target: Optional[int]) -> Optional[Tuple[int, int]]:
        """Finish the drag and return the ``(source, target)`` move, if any."""

        if self.state != DRAGGING or self.source is None:
            return None
        if target is None:
            self.cancel()
            return None
        self.state = DROPPED
        self.target = target
        logger.debug("Question dragged from %s to %s", self.source, target)
        return self.source, target

    def cancel(self) -> None:
        if self.state == DRAGGING:
            logger.debug("Drag from %s cancelled", self.source)
        self.state = IDLE
        self.source = None
        self.target = None

    def reset(self) -> None:
        self.cancel()

    @property
    def is_dragging(self) -> bool:
        return self.state == DRAGGING
