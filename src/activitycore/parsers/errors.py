"""Decode errors surfaced to uploaders as a single readable message."""


class ActivityFileError(Exception):
    """Base class: the uploaded file could not be turned into an activity."""


class UnsupportedFileFormatError(ActivityFileError):
    """Raised when the file is neither FIT nor GPX."""
