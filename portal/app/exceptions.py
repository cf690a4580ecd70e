"""
Custom exceptions for the applicant portal service.
"""

from typing import Optional


class PortalError(Exception):
    """Base class for portal errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ApplicantNotFoundError(PortalError):
    """Raised when no applicant record has the requested id."""

    status_code = 404

    def __init__(self, applicant_id: str):
        self.applicant_id = applicant_id
        super().__init__("Document not found")


class InvalidSessionError(PortalError):
    """Raised when an admin route is called without a live session."""

    status_code = 401

    def __init__(self, message: str = "Admin session is missing or has expired"):
        super().__init__(message)


class IntakeServiceError(PortalError):
    """Raised when the file intake service did not confirm a stored file."""

    status_code = 502


class RecordStoreError(PortalError):
    """Raised when the applicant record store cannot be reached."""

    status_code = 503


class InvalidInputError(PortalError):
    """Raised when a form is missing fields or has malformed values."""

    status_code = 400

    def __init__(self, message: str, errors: Optional[dict] = None):
        self.errors = errors
        super().__init__(message)
