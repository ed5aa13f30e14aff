"""
Exceptions raised while converting source data into Items.

Every error here is fatal to the file or run that raised it; nothing
is retried and nothing is partially committed.
"""

from typing import Optional


class ConversionError(Exception):
    """Base class for all conversion failures."""


class MalformedRecordError(ConversionError):
    """A line or row could not be parsed into a record."""

    def __init__(
        self,
        reason: str,
        raw_line: str = "",
        source: Optional[str] = None,
        line_number: Optional[int] = None,
    ):
        self.reason = reason
        self.raw_line = raw_line
        self.source = source
        self.line_number = line_number
        where = source or "<input>"
        if line_number is not None:
            where = f"{where}:{line_number}"
        super().__init__(f"{where}: {reason}\n{raw_line}")


class MissingContextError(ConversionError):
    """A data row arrived before a prerequisite header value was seen."""

    def __init__(self, missing: str, source: Optional[str] = None):
        self.missing = missing
        self.source = source
        location = f" in {source}" if source else ""
        super().__init__(f"{missing} not set before data rows{location}")


class UnresolvableLookupError(ConversionError):
    """A lookup table had no entry for the requested key."""


class ConflictingLinkError(ConversionError):
    """A single-valued reference would be re-pointed to a different Item."""


class FlushError(ConversionError):
    """The registry was flushed more than once."""


class CollaboratorError(ConversionError):
    """An external collaborator (network service, object store) failed."""


class PublicationLookupError(CollaboratorError):
    """PubMed lookup failed."""


class PersistenceError(CollaboratorError):
    """The sink refused an Item."""
