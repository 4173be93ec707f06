"""Custom exceptions and outcome codes for catalog resolution."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Recoverable outcomes surfaced by the resolution layer."""

    NOT_FOUND = "NOT_FOUND"
    MANIFEST_INVALID = "MANIFEST_INVALID"
    TABLE_EMPTY = "TABLE_EMPTY"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"


class TransportError(Exception):
    """Raised when a fetch fails at the network level or returns non-2xx."""

    def __init__(self, message: str, *, url: str, status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class ImageDecodeError(Exception):
    """Raised when image bytes cannot be decoded to learn natural dimensions."""


class DiagramNotFoundError(Exception):
    """Raised when no naming convention resolves a manifest for a folder."""

    def __init__(
        self,
        message: str,
        *,
        folder_key: str,
        error_code: ErrorCode = ErrorCode.NOT_FOUND,
    ) -> None:
        super().__init__(message)
        self.folder_key = folder_key
        self.error_code = error_code
