"""Sanitization, validation and spam scoring for contact form submissions.

Everything in this package is pure: no I/O and no shared state.
"""

from contactme.core.results import (
    ContactPriority,
    ContactStatus,
    ContactSubmission,
    ContactValidation,
    SpamResult,
    ValidationResult,
)
from contactme.core.sanitizers import sanitize_contact_form, sanitize_for_logging
from contactme.core.validators import check_spam, validate_contact_form

__all__ = [
    "ContactPriority",
    "ContactStatus",
    "ContactSubmission",
    "ContactValidation",
    "SpamResult",
    "ValidationResult",
    "check_spam",
    "sanitize_contact_form",
    "sanitize_for_logging",
    "validate_contact_form",
]
