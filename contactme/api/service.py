"""Contact handling service.

Runs each submission through sanitization, validation and spam scoring
before handing it to the storage backend, and implements the administrator
operations (listing, reading, status updates, deletion, statistics).
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from contactme.api.models import ContactEntry, ContactStats, Pagination
from contactme.api.storage import ContactFilters, StorageBackend, generate_contact_id
from contactme.core.results import ContactStatus, SpamResult
from contactme.core.sanitizers import sanitize_contact_form, sanitize_for_logging
from contactme.core.validators import (
    as_integer,
    validate_contact_form,
    validate_object_id,
    validate_pagination,
    validate_priority,
    validate_status,
)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


class ContactValidationError(Exception):
    """Raised when a request fails validation.

    Attributes:
        errors: Every validation message, in field order
        spam_check: Spam result for submissions, None otherwise
    """

    def __init__(self, errors: list[str], spam_check: SpamResult | None = None) -> None:
        super().__init__(", ".join(errors))
        self.errors = errors
        self.spam_check = spam_check


@dataclass
class ContactPage:
    """One page of contacts plus its pagination metadata."""

    contacts: list[ContactEntry]
    pagination: Pagination


class ContactService:
    """Contact form operations on top of a storage backend.

    Attributes:
        storage: Backend holding contact entries
        logger: Logger for audit messages
    """

    def __init__(self, storage: StorageBackend, logger: logging.Logger | None = None) -> None:
        self.storage = storage
        self.logger = logger or logging.getLogger(__name__)

    async def create_contact(
        self,
        data: Mapping[str, Any],
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> tuple[ContactEntry, SpamResult]:
        """Sanitize, validate and store a submission.

        Args:
            data: Submitted form fields
            ip_address: Client address supplied by the transport layer
            user_agent: User-Agent header supplied by the transport layer

        Returns:
            The stored entry and its spam check. The spam result is only
            reported; it does not set ``is_spam`` on the entry.

        Raises:
            ContactValidationError: If any field is invalid
        """
        form = {**data, "ipAddress": ip_address, "userAgent": user_agent}
        submission = sanitize_contact_form(form)
        validation = validate_contact_form(submission)

        errors = list(validation.errors)
        priority = validate_priority(submission.priority)
        if not priority.is_valid:
            errors.append(priority.message)

        if errors:
            self.logger.warning(
                "Contact form rejected: %s",
                "; ".join(errors),
                extra={"contact": sanitize_for_logging(submission.to_dict())},
            )
            raise ContactValidationError(errors, validation.spam_check)

        entry = ContactEntry.from_submission(generate_contact_id(), submission)
        await self.storage.save(entry)

        masked = sanitize_for_logging(submission.to_dict())
        self.logger.info(
            "New contact created: %s (email=%s, ip=%s)",
            entry.id,
            masked.get("email"),
            masked.get("ipAddress"),
        )
        if validation.spam_check.is_spam:
            self.logger.warning(
                "Contact %s flagged as potential spam (score=%d)",
                entry.id,
                validation.spam_check.score,
            )

        return entry, validation.spam_check

    async def list_contacts(
        self,
        page: Any = None,
        limit: Any = None,
        status: str | None = None,
        priority: str | None = None,
        is_spam: bool | None = None,
    ) -> ContactPage:
        """List contacts newest first.

        Raises:
            ContactValidationError: If page or limit is not acceptable
        """
        pagination_check = validate_pagination(page, limit)
        if not pagination_check.is_valid:
            raise ContactValidationError([pagination_check.message])

        page_number = as_integer(page) if page not in (None, "") else DEFAULT_PAGE
        page_size = as_integer(limit) if limit not in (None, "") else DEFAULT_LIMIT

        filters = ContactFilters(
            status=status.strip().lower() if status else None,
            priority=priority.strip().lower() if priority else None,
            is_spam=is_spam,
        )
        contacts, total = await self.storage.list_page(page_number, page_size, filters)
        return ContactPage(contacts, Pagination.build(page_number, page_size, total))

    def _require_id(self, contact_id: str) -> None:
        check = validate_object_id(contact_id)
        if not check.is_valid:
            raise ContactValidationError([check.message])

    async def get_contact(self, contact_id: str) -> ContactEntry | None:
        """Fetch a contact; opening a new contact marks it as read.

        Raises:
            ContactValidationError: If the id is malformed
        """
        self._require_id(contact_id)
        entry = await self.storage.get(contact_id)
        if entry is not None and entry.status == ContactStatus.NEW:
            entry = entry.model_copy(
                update={
                    "status": ContactStatus.READ,
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                }
            )
            await self.storage.save(entry)
        return entry

    async def update_status(self, contact_id: str, status: Any) -> ContactEntry | None:
        """Change the handling status of a contact.

        Raises:
            ContactValidationError: If the id or status is invalid
        """
        errors: list[str] = []
        id_check = validate_object_id(contact_id)
        if not id_check.is_valid:
            errors.append(id_check.message)

        normalized = status.strip().lower() if isinstance(status, str) else status
        status_check = validate_status(normalized)
        if not status_check.is_valid:
            errors.append(status_check.message)

        if errors:
            raise ContactValidationError(errors)

        entry = await self.storage.get(contact_id)
        if entry is None:
            return None

        entry = entry.model_copy(
            update={
                "status": ContactStatus(normalized),
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }
        )
        await self.storage.save(entry)
        self.logger.info("Contact %s status updated to %s", contact_id, normalized)
        return entry

    async def delete_contact(self, contact_id: str) -> bool:
        """Delete a contact.

        Raises:
            ContactValidationError: If the id is malformed
        """
        self._require_id(contact_id)
        deleted = await self.storage.delete(contact_id)
        if deleted:
            self.logger.info("Contact deleted: %s", contact_id)
        return deleted

    async def get_stats(self) -> ContactStats:
        return await self.storage.stats()
