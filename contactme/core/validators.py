"""
Field validators and spam heuristic for contact form submissions

Validators report failures as ValidationResult values and never raise.
"""
import re
from typing import Any, List, Mapping, Optional, Union

import email_validator
from email_validator import EmailNotValidError, validate_email as _parse_email

from contactme.core.results import (
    ContactPriority,
    ContactStatus,
    ContactSubmission,
    ContactValidation,
    SpamResult,
    ValidationResult,
)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
SUBJECT_MIN_LENGTH = 5
SUBJECT_MAX_LENGTH = 100
MESSAGE_MIN_LENGTH = 10
MESSAGE_MAX_LENGTH = 1000
PHONE_MIN_DIGITS = 10
PHONE_MAX_DIGITS = 15
PAGE_LIMIT_MAX = 100

SPAM_THRESHOLD = 3
LINK_WEIGHT = 2

SPAM_KEYWORDS = (
    "casino",
    "lottery",
    "winner",
    "congratulations",
    "viagra",
    "cialis",
    "penis",
    "enlargement",
    "weight loss",
    "make money",
    "work from home",
    "free money",
    "click here",
    "act now",
    "limited time",
    "urgent",
    "immediate",
    "bitcoin",
    "cryptocurrency",
)

VALID_STATUSES = tuple(status.value for status in ContactStatus)
VALID_PRIORITIES = tuple(priority.value for priority in ContactPriority)

# addresses on reserved names such as .test or .local are accepted
email_validator.SPECIAL_USE_DOMAIN_NAMES.clear()

_NAME_PATTERN = re.compile(r"^[a-zA-Z\s\-']+$")
_OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")
_NON_DIGIT = re.compile(r"[^0-9]")
_LINK_PATTERN = re.compile(r"https?://")


def _text(value: Any) -> Optional[str]:
    """Return value if it is non-empty text, else None"""
    if isinstance(value, str) and value:
        return value
    return None


def _check_length(
    value: str, label: str, min_length: int, max_length: int
) -> Optional[ValidationResult]:
    if len(value) < min_length:
        return ValidationResult(False, f"{label} must be at least {min_length} characters long")
    if len(value) > max_length:
        return ValidationResult(False, f"{label} cannot exceed {max_length} characters")
    return None


def validate_email(email: Any) -> ValidationResult:
    email = _text(email)
    if email is None:
        return ValidationResult(False, "Email is required")

    # the domain must contain a dot
    try:
        parsed = _parse_email(email, check_deliverability=False, globally_deliverable=False)
    except EmailNotValidError:
        return ValidationResult(False, "Please provide a valid email address")
    if "." not in parsed.ascii_domain.strip("."):
        return ValidationResult(False, "Please provide a valid email address")

    return ValidationResult(True, "Valid email")


def validate_phone(phone: Any, required: bool = False) -> ValidationResult:
    """Validate a phone number by its digit count.

    Args:
        phone: Phone number in any punctuation style
        required: Whether an absent phone number is a failure

    Returns:
        ValidationResult
    """
    phone = _text(phone)
    if phone is None:
        if required:
            return ValidationResult(False, "Phone number is required")
        return ValidationResult(True, "Phone number is optional")

    digits = _NON_DIGIT.sub("", phone)
    if not PHONE_MIN_DIGITS <= len(digits) <= PHONE_MAX_DIGITS:
        return ValidationResult(
            False,
            f"Phone number must be between {PHONE_MIN_DIGITS}-{PHONE_MAX_DIGITS} digits",
        )

    return ValidationResult(True, "Valid phone number")


def validate_name(name: Any, field_name: str = "Name") -> ValidationResult:
    """Validate a first, last or full name.

    Args:
        name: Name to validate
        field_name: Label used in the failure message

    Returns:
        ValidationResult
    """
    name = _text(name)
    if name is None:
        return ValidationResult(False, f"{field_name} is required")

    trimmed = name.strip()
    failure = _check_length(trimmed, field_name, NAME_MIN_LENGTH, NAME_MAX_LENGTH)
    if failure:
        return failure

    if not _NAME_PATTERN.match(trimmed):
        return ValidationResult(False, f"{field_name} contains invalid characters")

    return ValidationResult(True, f"Valid {field_name.lower()}")


def validate_subject(subject: Any) -> ValidationResult:
    subject = _text(subject)
    if subject is None:
        return ValidationResult(False, "Subject is required")

    failure = _check_length(subject.strip(), "Subject", SUBJECT_MIN_LENGTH, SUBJECT_MAX_LENGTH)
    return failure or ValidationResult(True, "Valid subject")


def validate_message(message: Any) -> ValidationResult:
    message = _text(message)
    if message is None:
        return ValidationResult(False, "Message is required")

    failure = _check_length(message.strip(), "Message", MESSAGE_MIN_LENGTH, MESSAGE_MAX_LENGTH)
    return failure or ValidationResult(True, "Valid message")


def validate_status(status: Any) -> ValidationResult:
    status = _text(status)
    if status is None:
        return ValidationResult(False, "Status is required")

    if status not in VALID_STATUSES:
        return ValidationResult(False, f"Status must be one of: {', '.join(VALID_STATUSES)}")

    return ValidationResult(True, "Valid status")


def validate_priority(priority: Any) -> ValidationResult:
    """Priority is optional; absence means the stored default applies"""
    if priority is None or priority == "":
        return ValidationResult(True, "Priority is optional, defaults to medium")

    if priority not in VALID_PRIORITIES:
        return ValidationResult(
            False, f"Priority must be one of: {', '.join(VALID_PRIORITIES)}"
        )

    return ValidationResult(True, "Valid priority")


def validate_object_id(record_id: Any) -> ValidationResult:
    """Check a record identifier against the storage id format (24 hex chars)"""
    record_id = _text(record_id)
    if record_id is None:
        return ValidationResult(False, "ID is required")

    if not _OBJECT_ID_PATTERN.match(record_id):
        return ValidationResult(False, "Invalid ID format")

    return ValidationResult(True, "Valid ID")


def as_integer(value: Any) -> Optional[int]:
    """Interpret a query value as an integer, or None if it is not one.

    Integral text is parsed exactly, so large page numbers keep every digit.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if not isinstance(value, str):
        return None

    text = value.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    if not number.is_integer():
        return None
    return int(number)


def validate_pagination(page: Any = None, limit: Any = None) -> ValidationResult:
    """Validate optional page/limit query parameters.

    Both are checked independently and their messages joined.
    """
    errors: List[str] = []

    if page is not None and page != "":
        number = as_integer(page)
        if number is None or number < 1:
            errors.append("Page must be a positive integer")

    if limit is not None and limit != "":
        number = as_integer(limit)
        if number is None or not 1 <= number <= PAGE_LIMIT_MAX:
            errors.append(f"Limit must be a positive integer between 1 and {PAGE_LIMIT_MAX}")

    if errors:
        return ValidationResult(False, ", ".join(errors))

    return ValidationResult(True, "Valid pagination parameters")


def check_spam(data: Union[Mapping[str, Any], ContactSubmission]) -> SpamResult:
    """Score a submission for spam.

    The score is the number of spam keyword occurrences in the subject,
    message and email, plus two points per http(s) link. Keywords are
    matched as plain substrings.

    Args:
        data: Form-keyed mapping or ContactSubmission

    Returns:
        SpamResult; ``is_spam`` is set when the score reaches SPAM_THRESHOLD
    """
    if isinstance(data, ContactSubmission):
        data = data.to_dict()
    elif not isinstance(data, Mapping):
        data = {}

    parts = [_text(data.get(key)) or "" for key in ("subject", "message", "email")]
    content = " ".join(parts).lower()

    keyword_hits = sum(content.count(keyword) for keyword in SPAM_KEYWORDS)
    link_hits = len(_LINK_PATTERN.findall(content))
    score = keyword_hits + link_hits * LINK_WEIGHT

    is_spam = score >= SPAM_THRESHOLD
    message = "Content flagged as potential spam" if is_spam else "Content appears legitimate"
    return SpamResult(is_spam=is_spam, score=score, message=message)


def validate_contact_form(
    data: Union[Mapping[str, Any], ContactSubmission]
) -> ContactValidation:
    """Validate a whole contact form, collecting every failing field.

    Errors keep field order: first name, last name, email, subject, message,
    phone. The spam check is attached but does not affect ``is_valid``.

    Args:
        data: Form-keyed mapping or ContactSubmission

    Returns:
        ContactValidation
    """
    if isinstance(data, ContactSubmission):
        data = data.to_dict()
    elif not isinstance(data, Mapping):
        data = {}

    results = [
        validate_name(data.get("firstName"), "First name"),
        validate_name(data.get("lastName"), "Last name"),
        validate_email(data.get("email")),
        validate_subject(data.get("subject")),
        validate_message(data.get("message")),
    ]
    if data.get("phone"):
        results.append(validate_phone(data.get("phone")))

    errors = [result.message for result in results if not result.is_valid]
    return ContactValidation(
        is_valid=not errors,
        errors=errors,
        spam_check=check_spam(data),
    )
