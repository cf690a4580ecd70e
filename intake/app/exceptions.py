"""
Error taxonomy for the file intake service.
"""


class IntakeError(Exception):
    """Base class for intake errors. Carries an error kind and an HTTP status."""

    kind = "IntakeError"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class IntakeValidationError(IntakeError):
    """Raised for client-caused problems with an upload. Never retried."""

    status_code = 400

    def __init__(self, kind: str, message: str):
        self.kind = kind
        super().__init__(message)


class IntakeFailed(IntakeError):
    """Raised when the blob store could not take the file (directory, move, disk)."""

    kind = "IntakeFailed"
    status_code = 500
    public_message = "Upload failed. Please try again."


class OriginRejected(IntakeError):
    """Raised when a browser origin is outside the configured allow-list."""

    kind = "OriginRejected"
    status_code = 403

    def __init__(self, origin: str):
        self.origin = origin
        super().__init__("CORS policy: Origin not allowed")


def invalid_file_type() -> IntakeValidationError:
    return IntakeValidationError(
        "InvalidFileType",
        "Invalid file type. Only JPG, PNG, PDF allowed.",
    )


def file_too_large(max_mb: int) -> IntakeValidationError:
    return IntakeValidationError(
        "FileTooLarge",
        f"File too large. Maximum size is {max_mb} MB.",
    )


def missing_file() -> IntakeValidationError:
    return IntakeValidationError("MissingFile", "No file uploaded")


def missing_identifier() -> IntakeValidationError:
    return IntakeValidationError("MissingIdentifier", "Passport number is required")


def invalid_identifier() -> IntakeValidationError:
    return IntakeValidationError(
        "InvalidIdentifier",
        "Passport number must contain at least one letter or digit",
    )
