"""
Input sanitizers for contact form fields

Every function here is total: absent or non-text input produces an empty
string instead of an exception.
"""
import html
import ipaddress
import re
from typing import Any, Dict, Mapping

from contactme.core.results import ContactSubmission

USER_AGENT_MAX_LENGTH = 500

_SCRIPT_BLOCK = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_UNCLOSED_SCRIPT = re.compile(r"<script\b[^>]*>.*\Z", re.IGNORECASE | re.DOTALL)
_TAG = re.compile(r"<!--.*?-->|</?[a-zA-Z!][^>]*>", re.DOTALL)
_WHITESPACE = re.compile(r"\s+")
_NAME_DISALLOWED = re.compile(r"[^a-zA-Z\s\-']")
_WORD_START = re.compile(r"(^|\s)([a-z])")
_PHONE_DISALLOWED = re.compile(r"[^0-9+]")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")

# Provider domain aliases. Local parts are never rewritten: no dot removal
# and no "+tag" subaddress removal for any provider.
_DOMAIN_ALIASES: Dict[str, str] = {
    "googlemail.com": "gmail.com",
}


def strip_markup(text: str) -> str:
    """Remove every tag, dropping the body of script elements entirely.

    Stray angle brackets that are not part of a tag are escaped so that the
    output never contains markup.
    """
    text = _SCRIPT_BLOCK.sub("", text)
    text = _UNCLOSED_SCRIPT.sub("", text)
    text = _TAG.sub("", text)
    return text.replace("<", "&lt;").replace(">", "&gt;")


def sanitize_string(
    value: Any,
    *,
    trim: bool = True,
    strip_markup_tags: bool = True,
    escape: bool = False,
    lowercase: bool = False,
    normalize_spaces: bool = True,
) -> str:
    """Sanitize free text.

    Steps run in a fixed order: trim, strip markup, escape, lowercase,
    collapse whitespace. Each step can be switched off.

    Args:
        value: Raw input
        trim: Strip leading and trailing whitespace
        strip_markup_tags: Remove HTML tags and script bodies
        escape: HTML-escape the remaining text
        lowercase: Convert to lowercase
        normalize_spaces: Collapse whitespace runs to a single space

    Returns:
        Sanitized text, or "" for empty or non-text input
    """
    if not value or not isinstance(value, str):
        return ""

    sanitized = value
    if trim:
        sanitized = sanitized.strip()
    if strip_markup_tags:
        sanitized = strip_markup(sanitized)
        if trim:
            # removed tags can expose surrounding whitespace
            sanitized = sanitized.strip()
    if escape:
        sanitized = html.escape(sanitized)
    if lowercase:
        sanitized = sanitized.lower()
    if normalize_spaces:
        sanitized = _WHITESPACE.sub(" ", sanitized)
    return sanitized


def sanitize_email(value: Any) -> str:
    """Trim, lowercase and normalize an email address.

    Returns:
        Normalized address, or "" when it cannot be split into a local part
        and a domain
    """
    if not value or not isinstance(value, str):
        return ""

    local, sep, domain = value.strip().lower().rpartition("@")
    if not sep or not local or not domain:
        return ""

    domain = _DOMAIN_ALIASES.get(domain, domain)
    return f"{local}@{domain}"


def sanitize_phone(value: Any) -> str:
    """Keep digits and a single leading '+' international marker"""
    if not value or not isinstance(value, str):
        return ""

    sanitized = _PHONE_DISALLOWED.sub("", value.strip())
    if not sanitized.startswith("+"):
        sanitized = sanitized.replace("+", "")
    return sanitized


def sanitize_name(value: Any) -> str:
    """Sanitize a person's name.

    Only letters, whitespace, hyphens and apostrophes survive, and the first
    letter of each whitespace-delimited word is uppercased.
    """
    if not value or not isinstance(value, str):
        return ""

    sanitized = sanitize_string(value)
    sanitized = _NAME_DISALLOWED.sub("", sanitized)
    return _WORD_START.sub(lambda m: m.group(1) + m.group(2).upper(), sanitized)


def sanitize_subject(value: Any) -> str:
    return sanitize_string(value)


def sanitize_message(value: Any) -> str:
    """Sanitize message content, keeping the user's line breaks.

    Runs of three or more newlines are reduced to a single blank line.
    """
    if not value or not isinstance(value, str):
        return ""

    sanitized = sanitize_string(value, normalize_spaces=False)
    return _EXCESS_NEWLINES.sub("\n\n", sanitized)


def sanitize_ip(value: Any) -> str:
    """Return the first address of a forwarded chain if it is a valid IP"""
    if not value or not isinstance(value, str):
        return ""

    candidate = value.split(",")[0].strip()
    try:
        ipaddress.ip_address(candidate)
    except ValueError:
        return ""
    return candidate


def sanitize_user_agent(value: Any) -> str:
    return sanitize_string(value)[:USER_AGENT_MAX_LENGTH]


def _sanitize_choice(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip().lower()


_FIELD_SANITIZERS = {
    "first_name": sanitize_name,
    "last_name": sanitize_name,
    "email": sanitize_email,
    "phone": sanitize_phone,
    "subject": sanitize_subject,
    "message": sanitize_message,
    "ip_address": sanitize_ip,
    "user_agent": sanitize_user_agent,
    "status": _sanitize_choice,
    "priority": _sanitize_choice,
}


def sanitize_contact_form(data: Any) -> ContactSubmission:
    """Sanitize every recognized field of a submitted contact form.

    Fields that are absent or empty in ``data`` stay unset on the result;
    unrecognized keys are dropped.

    Args:
        data: Form-keyed mapping (``firstName``, ``email``, ``ipAddress``...)

    Returns:
        ContactSubmission holding the sanitized values
    """
    if not isinstance(data, Mapping):
        return ContactSubmission()

    raw = ContactSubmission.from_dict(data)
    submission = ContactSubmission()
    for attr, sanitizer in _FIELD_SANITIZERS.items():
        value = getattr(raw, attr)
        if value:
            setattr(submission, attr, sanitizer(value))
    return submission


def sanitize_for_logging(data: Any) -> Dict[str, Any]:
    """Shallow copy of ``data`` with personal details masked.

    Only meant for log records; never store or validate the result.
    """
    if not isinstance(data, Mapping):
        return {}

    masked = dict(data)

    email = masked.get("email")
    if email and isinstance(email, str):
        local, sep, domain = email.partition("@")
        masked["email"] = f"{local[:2]}***@{domain}" if sep else f"{local[:2]}***"

    phone = masked.get("phone")
    if phone and isinstance(phone, str):
        masked["phone"] = f"***{phone[-4:]}"

    ip = masked.get("ipAddress")
    if ip and isinstance(ip, str):
        parts = ip.split(".")
        if len(parts) == 4:
            masked["ipAddress"] = f"{parts[0]}.{parts[1]}.***.***"

    return masked
