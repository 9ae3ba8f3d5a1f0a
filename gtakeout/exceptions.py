"""
Custom exception hierarchy for the Takeout date fixer.

Every per-file failure is one of these; the reconciliation worker converts
them into Error outcomes so that a single bad file never stops a run.
"""
from typing import Optional


class GTakeoutError(Exception):
    """Base exception for all Takeout date fixer errors."""
    pass


class NoMatchError(GTakeoutError):
    """Raised when a path does not carry the supplemental-metadata suffix."""
    pass


class MissingMediaError(GTakeoutError):
    """Raised when the media file paired with a sidecar does not exist."""
    pass


class ProbeError(GTakeoutError):
    """Raised when the presence of an embedded date cannot be determined."""
    pass


class JsonParseError(GTakeoutError):
    """Raised when a sidecar file is unreadable, malformed, or holds a bad timestamp."""
    pass


class TimestampMissingError(GTakeoutError):
    """Raised when a valid sidecar has no usable photoTakenTime timestamp."""
    pass


class DuplicateTargetError(GTakeoutError):
    """Raised when a sidecar resolves to a media file already claimed by another sidecar."""
    pass


class WriteError(GTakeoutError):
    """Raised when exiftool fails to write the date tags."""

    def __init__(self, message: str, returncode: Optional[int] = None, output: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.output = output

    def __str__(self):
        base = super().__str__()
        details = []
        if self.returncode is not None:
            details.append(f"exit status {self.returncode}")
        if self.output:
            details.append(self.output.strip())
        return f"{base} ({'; '.join(details)})" if details else base
