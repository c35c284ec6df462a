"""Error taxonomy for content persistence."""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    IO = "IoError"
    DESERIALIZATION = "DeserializationError"
    SERIALIZATION = "SerializationError"


class ContentError(Exception):
    """Base class for content store failures.

    Callers that need to branch on the failure use ``kind``; everyone else
    just renders ``str(err)``.
    """

    kind: ErrorKind = ErrorKind.IO

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class ContentIoError(ContentError):
    """Reading, writing or creating directories failed."""

    kind = ErrorKind.IO


class ContentDeserializationError(ContentError):
    """Existing file contents are not valid JSON."""

    kind = ErrorKind.DESERIALIZATION


class ContentSerializationError(ContentError):
    """Document could not be rendered to JSON text."""

    kind = ErrorKind.SERIALIZATION
