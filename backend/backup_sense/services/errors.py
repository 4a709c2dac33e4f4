"""Failure kinds raised by the intake steps.

Each upload fails on its own; none of these are fatal to the process.
"""


class IntakeError(Exception):
    """Base class for categorized upload failures."""
    kind = "IntakeError"
    status = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PayloadTooLarge(IntakeError):
    """Declared or actual size is above the configured maximum."""
    kind = "PayloadTooLarge"
    status = 413

    def __init__(self, size: int, max_bytes: int):
        super().__init__(f"file too large: {size} bytes (max {max_bytes} bytes)")
        self.size = size
        self.max_bytes = max_bytes


class MissingFile(IntakeError):
    kind = "MissingFile"


class MalformedUpload(IntakeError):
    """Request body is not a parseable multipart form."""
    kind = "MalformedUpload"


class UnsupportedDialect(IntakeError):
    kind = "UnsupportedDialect"


class MalformedConfig(IntakeError):
    kind = "MalformedConfig"


class MissingHostname(IntakeError):
    kind = "MissingHostname"


class InvalidHostname(IntakeError):
    """Hostname cannot be used as a path component."""
    kind = "InvalidHostname"


class DirectoryCreateFailed(IntakeError):
    kind = "DirectoryCreateFailed"
    status = 500


class WriteFailed(IntakeError):
    kind = "WriteFailed"
    status = 500
