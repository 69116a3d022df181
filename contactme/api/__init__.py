"""API module for contactme.

This module provides the HTTP API for contact form submissions.
"""

from contactme.api.app import create_app
from contactme.api.contact import router as contact_router

__all__ = ["create_app", "contact_router"]
