"""
Record parser contract.

A RecordParser turns one raw line into a typed record, or returns SKIP
for blank lines, comments and column-header lines. A line that cannot
be parsed raises MalformedRecordError carrying the raw line and its
position; callers treat that as fatal to the file.
"""

from typing import Any, Optional

from legfed.conversion.errors import MalformedRecordError


class _Skip:
    """Sentinel returned for lines that carry no record."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SKIP"

    def __bool__(self) -> bool:
        return False


SKIP = _Skip()


def parse_int(value: str, name: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} is not an integer: {value!r}") from None


def parse_float(value: str, name: str) -> float:
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} is not a number: {value!r}") from None


def format_number(value: float) -> str:
    """Format a number so that parse_float gives it back."""
    if isinstance(value, float) and value.is_integer():
        return f"{value:.1f}"
    return str(value)


def optional(fields: list[str], index: int) -> Optional[str]:
    """Field at index, or None when missing or empty."""
    if index < len(fields):
        value = fields[index].strip()
        if value:
            return value
    return None


class RecordParser:
    """
    Base class for line parsers.

    Subclasses set record_type (a dataclass with from_fields()/to_line()),
    the accepted field counts, and optionally column_header, the first
    field of a column-header line to skip.
    """

    record_type: Any = None
    min_fields = 1
    max_fields: Optional[int] = None
    column_header: Optional[str] = None

    def split(self, line: str) -> list[str]:
        return line.split("\t")

    def is_skippable(self, line: str) -> bool:
        if not line.strip() or line.startswith("#"):
            return True
        if self.column_header is not None:
            return line.split("\t", 1)[0].strip() == self.column_header
        return False

    def parse(self, line: str, line_number: Optional[int] = None, source: Optional[str] = None):
        """
        Parse one line.

        Args:
            line: Raw line, with or without its terminator
            line_number: 1-based line number, for error reports
            source: File or query name, for error reports

        Returns:
            A record, or SKIP

        Raises:
            MalformedRecordError: wrong field count or unparseable value
        """
        line = line.rstrip("\n\r")
        if self.is_skippable(line):
            return SKIP
        fields = self.split(line)
        if len(fields) < self.min_fields or (
            self.max_fields is not None and len(fields) > self.max_fields
        ):
            expected = (
                str(self.min_fields)
                if self.max_fields == self.min_fields
                else f"{self.min_fields}-{self.max_fields or 'n'}"
            )
            raise MalformedRecordError(
                f"expected {expected} fields, found {len(fields)}",
                raw_line=line,
                source=source,
                line_number=line_number,
            )
        try:
            return self.build(fields)
        except ValueError as e:
            raise MalformedRecordError(
                str(e), raw_line=line, source=source, line_number=line_number
            ) from e

    def build(self, fields: list[str]):
        return self.record_type.from_fields(fields)
