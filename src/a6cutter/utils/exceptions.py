"""
A6Cutter - Custom Exceptions Module

This module defines custom exception classes for specific error cases
in the A6Cutter application.
"""


class A6CutterError(Exception):
    """Base exception for all A6Cutter errors.

    All custom exceptions should inherit from this class to allow
    catching any A6Cutter-specific error.
    """

    def __init__(self, message: str, details: str | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional technical details for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


class InvalidPdfError(A6CutterError):
    """Raised when a PDF file is invalid or corrupted."""

    def __init__(self, file_path: str, reason: str | None = None) -> None:
        """Initialize the exception.

        Args:
            file_path: Path to the invalid PDF file
            reason: Optional reason why the PDF is invalid
        """
        self.file_path = file_path
        self.reason = reason
        msg = f"Invalid PDF file: {file_path}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg, details=f"path={file_path}")


class EmptyResultError(A6CutterError):
    """Raised when a cutting run produces no output pages at all."""

    def __init__(self, source_pages: int, failed_tiles: int = 0, skipped_tiles: int = 0) -> None:
        """Initialize the exception.

        Args:
            source_pages: Number of pages in the source document
            failed_tiles: Number of tiles that failed to render
            skipped_tiles: Number of tiles removed by the skip filter
        """
        self.source_pages = source_pages
        self.failed_tiles = failed_tiles
        self.skipped_tiles = skipped_tiles

        super().__init__(
            "Could not process document: no output pages were produced",
            details=(
                f"source_pages={source_pages}, failed={failed_tiles}, skipped={skipped_tiles}"
            ),
        )


class InvalidTileSpecError(A6CutterError):
    """Raised when a tile specification has a zero or negative dimension.

    This is a programming error, not bad input data.
    """

    def __init__(self, width: float, height: float) -> None:
        self.width = width
        self.height = height
        super().__init__(
            "Tile dimensions must be positive",
            details=f"width={width}, height={height}",
        )


class ConfigurationError(A6CutterError):
    """Raised when there's a configuration-related error."""

    def __init__(self, setting_name: str | None = None, reason: str | None = None) -> None:
        """Initialize the exception.

        Args:
            setting_name: Optional name of the problematic setting
            reason: Optional reason for the error
        """
        self.setting_name = setting_name
        self.reason = reason

        if setting_name:
            msg = f"Configuration error for '{setting_name}'"
        else:
            msg = "Configuration error"

        if reason:
            msg += f": {reason}"

        super().__init__(msg)


class ValidationError(A6CutterError):
    """Raised when input validation fails."""

    def __init__(
        self,
        field: str,
        value: str | None = None,
        reason: str | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            field: Name of the field that failed validation
            value: Optional value that failed validation
            reason: Optional reason for the validation failure
        """
        self.field = field
        self.value = value
        self.reason = reason

        msg = f"Validation error for '{field}'"
        if reason:
            msg += f": {reason}"

        super().__init__(msg)


class PresetError(A6CutterError):
    """Raised when a preset operation is not allowed."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Preset '{name}': {reason}")


class ThumbnailError(A6CutterError):
    """Raised when preview thumbnails cannot be rendered."""

    def __init__(self, reason: str, exit_code: int | None = None) -> None:
        """Initialize the exception.

        Args:
            reason: Reason for the failure
            exit_code: Optional exit code from the rasterizer process
        """
        self.reason = reason
        self.exit_code = exit_code

        details = None
        if exit_code is not None:
            details = f"exit_code={exit_code}"

        super().__init__(f"Thumbnail rendering failed: {reason}", details=details)


# Exception hierarchy summary:
# A6CutterError (base)
# ├── InvalidPdfError
# ├── EmptyResultError
# ├── InvalidTileSpecError
# ├── ConfigurationError
# ├── ValidationError
# ├── PresetError
# └── ThumbnailError
