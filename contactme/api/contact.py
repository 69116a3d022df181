"""Contact form API endpoints.

This module implements the public submission endpoint and the administrator
endpoints for listing, reading, updating, deleting and counting contacts.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from contactme.api import responses
from contactme.api.models import ContactFormRequest, StatusUpdateRequest
from contactme.api.rate_limit import SubmissionRateLimiter
from contactme.api.service import ContactService
from contactme.core.sanitizers import sanitize_for_logging, sanitize_ip

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/contact", tags=["contact"])

CREATED = "Contact message sent successfully"
RETRIEVED = "Contact retrieved successfully"
LISTED = "Contacts retrieved successfully"
UPDATED = "Contact updated successfully"
DELETED = "Contact deleted successfully"
NOT_FOUND = "Contact not found"
STATS_RETRIEVED = "Contact statistics retrieved successfully"


def get_contact_service(request: Request) -> ContactService:
    return request.app.state.contact_service


def get_rate_limiter(request: Request) -> SubmissionRateLimiter | None:
    return getattr(request.app.state, "rate_limiter", None)


def get_client_ip(request: Request) -> str:
    """Get the client IP address, preferring proxy headers.

    Returns:
        The first valid address from X-Forwarded-For, X-Real-IP or the
        socket peer, or "" when none is a valid IP literal
    """
    for header in ("X-Forwarded-For", "X-Real-IP"):
        ip = sanitize_ip(request.headers.get(header))
        if ip:
            return ip
    if request.client:
        return sanitize_ip(request.client.host)
    return ""


def masked_ip(ip: str) -> str:
    """Client address in the masked form used in log records."""
    return sanitize_for_logging({"ipAddress": ip or "unknown"})["ipAddress"]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "Contact form submitted successfully"},
        422: {"description": "Validation failed; every error is listed"},
        429: {"description": "Too many submissions from this address"},
    },
    summary="Submit a contact form",
    description="""
    Submit a contact form. Input is sanitized (markup stripped, whitespace
    and casing normalized) and then validated.

    **Validation Rules:**
    - firstName / lastName: 2-50 characters, letters, spaces, hyphens, apostrophes
    - email: Valid email address
    - phone: Optional, 10-15 digits
    - subject: 5-100 characters
    - message: 10-1000 characters

    The response includes a spam check for information; it never rejects
    a submission on its own.
    """,
)
async def submit_contact_form(
    request: Request,
    form_data: ContactFormRequest,
    service: ContactService = Depends(get_contact_service),
    rate_limiter: SubmissionRateLimiter | None = Depends(get_rate_limiter),
) -> JSONResponse:
    client_ip = get_client_ip(request)

    if rate_limiter is not None and not rate_limiter.is_allowed(client_ip or "unknown"):
        logger.warning("Contact form rate limit exceeded for %s", masked_ip(client_ip))
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many contact form submissions, please try again later",
            headers={"Retry-After": str(rate_limiter.retry_after(client_ip or "unknown"))},
        )

    entry, spam_check = await service.create_contact(
        form_data.to_form(),
        ip_address=client_ip,
        user_agent=request.headers.get("User-Agent"),
    )
    return responses.created(
        {"contact": entry.to_public(), "spamCheck": spam_check.to_dict()},
        CREATED,
    )


@router.get(
    "",
    summary="List contact form submissions",
    description="List submissions newest first, with optional status, priority and spam filters.",
)
async def list_contacts(
    page: str | None = Query(default=None, description="1-based page number"),
    limit: str | None = Query(default=None, description="Page size (1-100)"),
    status_filter: str | None = Query(default=None, alias="status"),
    priority: str | None = Query(default=None),
    is_spam: bool | None = Query(default=None, alias="isSpam"),
    service: ContactService = Depends(get_contact_service),
) -> JSONResponse:
    result = await service.list_contacts(page, limit, status_filter, priority, is_spam)
    return responses.paginated(
        [entry.to_public() for entry in result.contacts],
        result.pagination,
        LISTED,
    )


@router.get(
    "/stats",
    summary="Contact statistics",
    description="Count submissions by status, plus the number flagged as spam.",
)
async def get_contact_stats(
    service: ContactService = Depends(get_contact_service),
) -> JSONResponse:
    stats = await service.get_stats()
    return responses.success(stats.model_dump(), STATS_RETRIEVED)


@router.get(
    "/{contact_id}",
    summary="Get a contact by ID",
    description="Retrieve one submission. Reading a new submission marks it as read.",
)
async def get_contact(
    contact_id: str,
    service: ContactService = Depends(get_contact_service),
) -> JSONResponse:
    entry = await service.get_contact(contact_id)
    if entry is None:
        return responses.not_found(NOT_FOUND)
    return responses.success(entry.to_public(), RETRIEVED)


@router.patch(
    "/{contact_id}/status",
    summary="Update contact status",
    description="Set the status to one of: new, read, replied, archived.",
)
async def update_contact_status(
    contact_id: str,
    body: StatusUpdateRequest,
    service: ContactService = Depends(get_contact_service),
) -> JSONResponse:
    entry = await service.update_status(contact_id, body.status)
    if entry is None:
        return responses.not_found(NOT_FOUND)
    return responses.success(entry.to_public(), UPDATED)


@router.delete(
    "/{contact_id}",
    summary="Delete a contact",
)
async def delete_contact(
    contact_id: str,
    service: ContactService = Depends(get_contact_service),
) -> JSONResponse:
    deleted = await service.delete_contact(contact_id)
    if not deleted:
        return responses.not_found(NOT_FOUND)
    return responses.success(message=DELETED)
