"""Question records used by award application forms."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Tuple

MULTIPLE_CHOICE = "multiple_choice"
CHECKBOX = "checkbox"
DROPDOWN = "dropdown"
SHORT_ANSWER = "short_answer"
PARAGRAPH = "paragraph"
FILE_UPLOAD = "file_upload"
DATE = "date"
DATE_RANGE = "date_range"

QUESTION_TYPES: Tuple[str, ...] = (
    MULTIPLE_CHOICE,
    CHECKBOX,
    DROPDOWN,
    SHORT_ANSWER,
    PARAGRAPH,
    FILE_UPLOAD,
    DATE,
    DATE_RANGE,
)
QUESTION_TYPE_LABELS: Dict[str, str] = {
    MULTIPLE_CHOICE: "Multiple Choice",
    CHECKBOX: "Checkbox",
    DROPDOWN: "Dropdown",
    SHORT_ANSWER: "Short Answer",
    PARAGRAPH: "Paragraph",
    FILE_UPLOAD: "File Upload",
    DATE: "Date",
    DATE_RANGE: "Date Range",
}
CHOICE_TYPES = frozenset({MULTIPLE_CHOICE, CHECKBOX, DROPDOWN})

DEFAULT_TITLE = "Untitled Question"
COPY_SUFFIX = " (Copy)"


@dataclass(frozen=True)
class Option:
    """A selectable answer for a choice question."""

    value: str


@dataclass(frozen=True)
class Question:
    """One field of an award application form.

    ``order`` is the zero-based position of the question inside its form and
    is also how the builder addresses it.
    """

    type: str = MULTIPLE_CHOICE
    title: str = DEFAULT_TITLE
    required: bool = False
    options: Tuple[Option, ...] = field(default_factory=tuple)
    order: int = 0

    @property
    def is_choice(self) -> bool:
        return is_choice_type(self.type)


def is_choice_type(question_type: str) -> bool:
    """Return ``True`` if ``question_type`` offers selectable options."""

    return question_type in CHOICE_TYPES


def question_type_label(question_type: str) -> str:
    """Return a human-friendly label for ``question_type``."""

    return QUESTION_TYPE_LABELS.get(question_type, question_type.replace("_", " ").title())


def default_options(question_type: str) -> Tuple[Option, ...]:
    """Return the placeholder options a new question of ``question_type`` starts with."""

    if is_choice_type(question_type):
        return (Option("Option 1"), Option("Option 2"))
    return ()


def new_question(question_type: str, order: int) -> Question:
    """Build a fresh question of ``question_type`` at position ``order``."""

    return Question(
        type=question_type,
        title=DEFAULT_TITLE,
        required=False,
        options=default_options(question_type),
        order=order,
    )


def default_question() -> Question:
    return new_question(MULTIPLE_CHOICE, 0)


def adjust_options_for_type(question: Question) -> Question:
    """Make ``question.options`` consistent with ``question.type``.

    Non-choice questions never carry options. Choice questions with no options
    get the two placeholders back.
    """

    if not question.is_choice:
        if question.options:
            return replace(question, options=())
        return question
    if not question.options:
        return replace(question, options=default_options(question.type))
    return question


def with_title(question: Question, title: str) -> Question:
    return replace(question, title=title)


def with_required(question: Question, required: bool) -> Question:
    return replace(question, required=bool(required))


def with_type(question: Question, question_type: str) -> Question:
    """Return ``question`` switched to ``question_type`` with matching options."""

    return adjust_options_for_type(replace(question, type=question_type))


def with_option_value(question: Question, index: int, value: str) -> Question:
    """Return ``question`` with the option at ``index`` renamed to ``value``."""

    if not 0 <= index < len(question.options):
        return question
    options = list(question.options)
    options[index] = Option(value)
    return replace(question, options=tuple(options))


def with_added_option(question: Question) -> Question:
    """Append an ``Option N`` placeholder numbered after the existing options."""

    label = f"Option {len(question.options) + 1}"
    return replace(question, options=question.options + (Option(label),))


def without_option(question: Question, index: int) -> Question:
    """Return ``question`` minus the option at ``index``.

    The last remaining option can never be removed.
    """

    if len(question.options) <= 1 or not 0 <= index < len(question.options):
        return question
    options = question.options[:index] + question.options[index + 1 :]
    return replace(question, options=options)


def duplicate(question: Question, order: int) -> Question:
    """Return a copy of ``question`` titled as a copy and placed at ``order``."""

    return Question(
        type=question.type,
        title=f"{question.title}{COPY_SUFFIX}",
        required=question.required,
        options=tuple(Option(option.value) for option in question.options),
        order=order,
    )


def _coerce_order(value: Any, fallback: int) -> int:
    if isinstance(value, bool):
        return fallback
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def _coerce_options(value: Any) -> Tuple[Option, ...]:
    if not isinstance(value, list):
        return ()
    options: List[Option] = []
    for item in value:
        if isinstance(item, Mapping):
            options.append(Option(str(item.get("value", ""))))
        elif isinstance(item, str):
            options.append(Option(item))
    return tuple(options)


def question_from_dict(payload: Mapping[str, Any], *, fallback_order: int = 0) -> Question:
    """Build a :class:`Question` from its stored JSON record."""

    title = payload.get("title")
    required = payload.get("required")
    return Question(
        type=str(payload.get("type") or MULTIPLE_CHOICE),
        title=title if isinstance(title, str) else DEFAULT_TITLE,
        required=required if isinstance(required, bool) else False,
        options=_coerce_options(payload.get("options")),
        order=_coerce_order(payload.get("order"), fallback_order),
    )


def question_to_dict(question: Question) -> Dict[str, Any]:
    """Return the JSON record for ``question``."""

    return {
        "type": question.type,
        "title": question.title,
        "required": question.required,
        "options": [{"value": option.value} for option in question.options],
        "order": question.order,
    }


def questions_from_records(records: Iterable[Any]) -> Tuple[Question, ...]:
    """Convert stored records into questions, skipping anything that isn't a mapping."""

    questions: List[Question] = []
    for index, record in enumerate(records):
        if isinstance(record, Mapping):
            questions.append(question_from_dict(record, fallback_order=index))
    return tuple(questions)


def questions_to_records(questions: Iterable[Question]) -> List[Dict[str, Any]]:
    return [question_to_dict(question) for question in questions]
