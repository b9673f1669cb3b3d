"""
Error types raised by the directory services.

Only ``NoPrimaryKeyError`` is a client fault. Database and serialization
failures are reported to callers as a generic internal error; their cause
is logged server-side only.
"""

from typing import Any, Dict


class DirectoryAPIError(Exception):
    """Base class for errors raised by the directory services."""

    code = "INTERNAL_ERROR"
    status_code = 500
    public_message = "Unexpected error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.public_message,
        }


class DatabaseError(DirectoryAPIError):
    """Raised when the database, driver or connection pool fails."""

    code = "DATABASE_ERROR"


class SerializationError(DirectoryAPIError):
    """Raised when a row cannot be converted to its JSON wire form."""

    code = "SERIALIZATION_ERROR"


class NoPrimaryKeyError(DirectoryAPIError):
    """Raised when updating or deleting in a directory with no primary key."""

    code = "NO_PRIMARY_KEY"
    status_code = 400
    public_message = "no primary key found for table"

    def __init__(self, directory: str):
        self.directory = directory
        super().__init__(self.public_message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "directory": self.directory,
            "message": self.message,
        }
