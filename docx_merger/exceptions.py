"""Custom exceptions for DOCX Merger."""

from typing import Optional


class DocxMergerError(Exception):
    """Base exception for DOCX Merger errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class MergeError(DocxMergerError):
    """Exception raised when merging source packages fails."""

    pass


class SaveError(DocxMergerError):
    """Exception raised when generating the merged package fails."""

    pass


class PackageLoadError(MergeError):
    """Exception raised when an input is not a readable DOCX (zip) package."""

    pass


class MissingPartError(DocxMergerError):
    """Exception raised when a required XML part is absent from a package."""

    def __init__(self, part_name: str, details: Optional[str] = None):
        super().__init__(f"Required part missing: {part_name}", details)
        self.part_name = part_name


class ParseError(DocxMergerError):
    """Exception raised when a present XML part is malformed."""

    def __init__(self, part_name: str, details: Optional[str] = None):
        super().__init__(f"Malformed XML in part: {part_name}", details)
        self.part_name = part_name


class DanglingMediaReferenceError(DocxMergerError):
    """Exception raised when a media file has no matching relationship."""

    def __init__(self, media_path: str, details: Optional[str] = None):
        super().__init__(f"No relationship targets media file: {media_path}", details)
        self.media_path = media_path


class ConfigurationError(DocxMergerError):
    """Exception raised for invalid merge options."""

    pass
