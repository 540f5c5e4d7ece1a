"""
A6Cutter - Operation Results

Error classification and result records shared by the tile renderer and
the file-level cutting operations.
"""

from dataclasses import dataclass
from enum import Enum, auto

import pikepdf

from a6cutter.utils.exceptions import EmptyResultError, InvalidPdfError
from a6cutter.utils.i18n import _


class ErrorCode(Enum):
    """Error classification for cutting operations."""

    NONE = auto()
    FILE_NOT_FOUND = auto()
    PERMISSION_DENIED = auto()
    CORRUPT_PDF = auto()
    PASSWORD_PROTECTED = auto()
    DEGENERATE_CROP = auto()
    EMPTY_RESULT = auto()
    DISK_FULL = auto()
    UNKNOWN = auto()


def classify_error(e: Exception) -> ErrorCode:
    """Classify an exception into an ErrorCode."""
    if isinstance(e, FileNotFoundError):
        return ErrorCode.FILE_NOT_FOUND
    if isinstance(e, PermissionError):
        return ErrorCode.PERMISSION_DENIED
    if isinstance(e, pikepdf.PasswordError):
        return ErrorCode.PASSWORD_PROTECTED
    if isinstance(e, InvalidPdfError):
        if e.reason == "password-protected":
            return ErrorCode.PASSWORD_PROTECTED
        return ErrorCode.CORRUPT_PDF
    if isinstance(e, pikepdf.PdfError):
        return ErrorCode.CORRUPT_PDF
    if isinstance(e, EmptyResultError):
        return ErrorCode.EMPTY_RESULT
    if isinstance(e, OSError) and e.errno == 28:
        return ErrorCode.DISK_FULL
    return ErrorCode.UNKNOWN


def friendly_error(e: Exception) -> str:
    """Map common exceptions to user-friendly messages."""
    code = classify_error(e)
    if code == ErrorCode.FILE_NOT_FOUND:
        return _("Could not find the file. Was it moved or deleted?")
    if code == ErrorCode.PERMISSION_DENIED:
        return _("Cannot write to this folder. Choose a different location.")
    if code == ErrorCode.PASSWORD_PROTECTED:
        return _("This PDF is password-protected. Remove the password first.")
    if code == ErrorCode.CORRUPT_PDF:
        return _("The PDF file appears to be damaged or invalid: {error}").format(error=e)
    if code == ErrorCode.EMPTY_RESULT:
        return _("Could not process document: no pages were produced.")
    return str(e)


@dataclass
class OperationResult:
    """Generic result for file-level operations."""

    success: bool
    message: str = ""
    output_path: str = ""
    pages_affected: int = 0
    error_code: ErrorCode = ErrorCode.NONE


def fail(e: Exception) -> OperationResult:
    """Create a failed OperationResult from an exception."""
    return OperationResult(
        success=False,
        message=friendly_error(e),
        error_code=classify_error(e),
    )
