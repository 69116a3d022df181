"""
Value types shared by the sanitizer and the validator
"""
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class ContactStatus(str, Enum):
    """Lifecycle state of a stored contact"""

    NEW = "new"
    READ = "read"
    REPLIED = "replied"
    ARCHIVED = "archived"


class ContactPriority(str, Enum):
    """Triage priority of a stored contact"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a single field check"""

    is_valid: bool
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"isValid": self.is_valid, "message": self.message}


@dataclass(frozen=True)
class SpamResult:
    """Outcome of the spam heuristic"""

    is_spam: bool
    score: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"isSpam": self.is_spam, "score": self.score, "message": self.message}


@dataclass(frozen=True)
class ContactValidation:
    """Aggregated outcome of validating a whole contact form"""

    is_valid: bool
    errors: List[str]
    spam_check: SpamResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "spamCheck": self.spam_check.to_dict(),
        }


# Python attribute -> submitted form key
FIELD_KEYS: Dict[str, str] = {
    "first_name": "firstName",
    "last_name": "lastName",
    "email": "email",
    "phone": "phone",
    "subject": "subject",
    "message": "message",
    "ip_address": "ipAddress",
    "user_agent": "userAgent",
    "status": "status",
    "priority": "priority",
}


@dataclass
class ContactSubmission:
    """A contact form submission.

    Every field is optional: a field left as ``None`` was absent from the
    submitted form and is omitted from :meth:`to_dict`.
    """

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    def to_dict(self) -> Dict[str, Any]:
        """Form-keyed mapping with unset fields left out"""
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                data[FIELD_KEYS[f.name]] = value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ContactSubmission":
        """Build from a form-keyed mapping without transforming values"""
        known = {attr: data[key] for attr, key in FIELD_KEYS.items() if key in data}
        return cls(**known)
