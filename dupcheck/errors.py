"""Exceptions raised by the duplicate detection engine.

Storage failures are not wrapped: whatever the candidate source or audit
store raises reaches the caller unchanged.
"""


class DuplicateDetectionError(Exception):
    """Base class for errors raised by dupcheck itself."""


class NotFoundError(DuplicateDetectionError):
    """A session or duplicate check id did not resolve."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class InvalidInputError(DuplicateDetectionError):
    """Input rejected before any candidate lookup (empty content, bad limit)."""
