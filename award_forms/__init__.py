"""Library helpers for the awards application portal."""

from .builder import BuilderController  # noqa: F401
from .form_definition import FormDefinition  # noqa: F401
from .questions import (  # noqa: F401
    QUESTION_TYPES,
    Option,
    Question,
    question_from_dict,
    question_to_dict,
)
from .reorder import DragGesture, move  # noqa: F401
