"""Data models for API endpoints.

This module defines Pydantic models for request bodies, stored records and
response envelopes.
"""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from contactme.core.results import ContactPriority, ContactStatus, ContactSubmission


def utc_now() -> str:
    """ISO 8601 UTC timestamp"""
    return datetime.now(timezone.utc).isoformat()


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContactFormRequest(CamelModel):
    """Contact form submission request model.

    Fields are deliberately loose: sanitization and validation happen in
    :mod:`contactme.core`, which reports every problem at once instead of
    failing on the first one.

    Attributes:
        first_name: Given name (2-50 letters, spaces, hyphens, apostrophes)
        last_name: Family name (same rules as first_name)
        email: Email address
        phone: Optional phone number (10-15 digits)
        subject: Subject line (5-100 characters)
        message: Message content (10-1000 characters)
        priority: Optional priority (low, medium, high)
    """

    model_config = ConfigDict(extra="ignore")

    first_name: Any = Field(default=None, examples=["Jane"])
    last_name: Any = Field(default=None, examples=["Doe"])
    email: Any = Field(default=None, examples=["jane.doe@example.com"])
    phone: Any = Field(default=None, examples=["555-123-4567"])
    subject: Any = Field(default=None, examples=["Question about your services"])
    message: Any = Field(default=None, examples=["I would like to know more about..."])
    priority: Any = Field(default=None, examples=["medium"])

    def to_form(self) -> dict[str, Any]:
        """Form-keyed mapping of the fields that were sent."""
        return self.model_dump(by_alias=True, exclude_none=True)


class StatusUpdateRequest(CamelModel):
    """Body of a status update."""

    status: Any = Field(default=None, examples=["replied"])


class ContactEntry(CamelModel):
    """Stored contact form entry.

    Attributes:
        id: 24 hexadecimal character identifier
        first_name: Submitter's given name
        last_name: Submitter's family name
        email: Submitter's email
        phone: Optional phone number
        subject: Subject line
        message: Message content
        status: Handling status
        priority: Triage priority
        ip_address: IP address of the submitter, if known
        user_agent: Browser user agent, if sent
        is_spam: Spam flag set by an administrator
        created_at: ISO 8601 creation timestamp
        updated_at: ISO 8601 timestamp of the last change
    """

    id: str = Field(..., description="Unique identifier")
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    subject: str
    message: str
    status: ContactStatus = ContactStatus.NEW
    priority: ContactPriority = ContactPriority.MEDIUM
    ip_address: str | None = None
    user_agent: str | None = None
    is_spam: bool = False
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def from_submission(cls, contact_id: str, submission: ContactSubmission) -> "ContactEntry":
        """Build a new record from a sanitized, validated submission."""
        return cls(
            id=contact_id,
            first_name=submission.first_name,
            last_name=submission.last_name,
            email=submission.email,
            phone=submission.phone or None,
            subject=submission.subject,
            message=submission.message,
            priority=submission.priority or ContactPriority.MEDIUM,
            ip_address=submission.ip_address or None,
            user_agent=submission.user_agent or None,
        )

    def to_public(self) -> dict[str, Any]:
        """JSON-ready camelCase representation."""
        return self.model_dump(mode="json", by_alias=True)


class ContactStats(BaseModel):
    """Contact counts by status plus the spam-flagged count."""

    total: int = 0
    new: int = 0
    read: int = 0
    replied: int = 0
    archived: int = 0
    spam: int = 0

    @classmethod
    def from_entries(cls, entries: list[ContactEntry]) -> "ContactStats":
        stats = cls(total=len(entries))
        for entry in entries:
            setattr(stats, entry.status.value, getattr(stats, entry.status.value) + 1)
            if entry.is_spam:
                stats.spam += 1
        return stats


class Pagination(CamelModel):
    """Pagination metadata for list responses."""

    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = (total + limit - 1) // limit if limit else 0
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class ApiResponse(BaseModel):
    """Response envelope shared by every endpoint.

    Attributes:
        status: "success" or "error"
        message: Human-readable message about the result
        timestamp: ISO 8601 formatted timestamp of the response
        data: Payload, when there is one
        meta: Extra metadata such as pagination
        errors: Error details for failed requests
    """

    status: Literal["success", "error"]
    message: str
    timestamp: str = Field(default_factory=utc_now)
    data: Any = None
    meta: dict[str, Any] | None = None
    errors: list[str] | None = None
