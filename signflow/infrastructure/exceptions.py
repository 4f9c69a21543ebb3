"""Infrastructure exceptions for storage and PDF rendering.

These extend ExternalDependencyException so presentation maps them to a
502 response consistently.
"""

from signflow.domain.exceptions import ExternalDependencyException


class StorageException(ExternalDependencyException):
    """Base exception for storage operations."""


class StorageNotFoundError(StorageException):
    """File not found in storage."""

    def __init__(self, file_path: str) -> None:
        super().__init__(
            f"File not found: {file_path}",
            "STORAGE_NOT_FOUND",
            {"file_path": file_path},
        )


class StorageUploadError(StorageException):
    """File write failed."""

    def __init__(self, file_path: str, reason: str) -> None:
        super().__init__(
            f"Failed to write file: {file_path}",
            "STORAGE_UPLOAD_ERROR",
            {"file_path": file_path, "reason": reason},
        )


class StorageDownloadError(StorageException):
    """File read failed."""

    def __init__(self, file_path: str, reason: str) -> None:
        super().__init__(
            f"Failed to read file: {file_path}",
            "STORAGE_DOWNLOAD_ERROR",
            {"file_path": file_path, "reason": reason},
        )


class StorageDeleteError(StorageException):
    """File deletion failed."""

    def __init__(self, file_path: str, reason: str) -> None:
        super().__init__(
            f"Failed to delete file: {file_path}",
            "STORAGE_DELETE_ERROR",
            {"file_path": file_path, "reason": reason},
        )


class StoragePermissionError(StorageException):
    """Storage ref escapes the storage root or the file system refused access."""

    def __init__(self, file_path: str, operation: str) -> None:
        super().__init__(
            f"Storage access denied: {file_path}",
            "STORAGE_PERMISSION_ERROR",
            {"file_path": file_path, "operation": operation},
        )


class StampRenderError(ExternalDependencyException):
    """The PDF could not be read or the stamp overlay could not be merged."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            "Failed to render signature stamp",
            "STAMP_RENDER_ERROR",
            {"reason": reason},
        )
