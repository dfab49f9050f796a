"""Default values shared between the builder, application and admin pages."""

from __future__ import annotations

DEFAULT_AWARD_NAME = "Untitled Award"
DEFAULT_AWARD_CATEGORY = "student"
AWARD_CATEGORIES: tuple[str, ...] = ("student", "faculty", "institution")
ELIGIBILITY_LEVELS: tuple[str, ...] = ("UG", "PG", "Diploma", "All")

DEFAULT_MAX_UPLOAD_MB = 10
DEFAULT_ALLOWED_UPLOAD_TYPES: tuple[str, ...] = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)
UPLOAD_TYPE_EXTENSIONS = {
    "application/pdf": "pdf",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
}
DEFAULT_UPLOAD_DIRECTORY = "uploads"

DEFAULT_SUBMIT_LABEL = "Submit application"
DEFAULT_SUBMIT_SUCCESS_MESSAGE = "Application submitted. You can track its status on the Applications page."
UNSELECTED_LABEL = "— Select an option —"
