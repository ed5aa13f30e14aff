"""
GFF3 line parser.

Nine tab-separated columns; column 9 holds key=value pairs separated
by ";", multi-valued fields comma-separated, with reserved characters
percent-encoded.
"""

import re
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import unquote

from legfed.parsers.records import RecordParser, format_number, parse_float, parse_int

GFF_COLUMNS = ("seqid", "source", "type", "start", "end", "score", "strand", "phase", "attributes")

_ENCODE = {"%": "%25", ";": "%3B", "=": "%3D", ",": "%2C", "&": "%26", "\t": "%09"}
_TARGET = re.compile(r"^(?P<seqid>[^:\s]+):(?P<start>\d+)\.\.(?P<end>\d+)$")


def strand_value(strand: Optional[str]) -> Optional[str]:
    """GFF strand character to the warehouse value: "1", "-1" or None."""
    if strand == "+":
        return "1"
    if strand == "-":
        return "-1"
    return None


def encode_value(value: str) -> str:
    return "".join(_ENCODE.get(char, char) for char in value)


def parse_attributes(attr_string: str) -> dict[str, list[str]]:
    """
    Parse GFF column 9 into a dict of decoded value lists.

    Args:
        attr_string: key=value;key=value1,value2

    Returns:
        Dict mapping attribute names to their values, in file order
    """
    attrs: dict[str, list[str]] = {}
    if attr_string.strip() in ("", "."):
        return attrs
    for item in attr_string.strip().split(";"):
        if not item.strip():
            continue
        if "=" not in item:
            raise ValueError(f"attribute without '=': {item!r}")
        key, value = item.split("=", 1)
        attrs.setdefault(unquote(key.strip()), []).extend(
            unquote(part) for part in value.split(",")
        )
    return attrs


def format_attributes(attrs: dict[str, list[str]]) -> str:
    if not attrs:
        return "."
    return ";".join(
        f"{encode_value(key)}={','.join(encode_value(v) for v in values)}"
        for key, values in attrs.items()
    )


@dataclass
class Target:
    """A Target=seqid:start..end cross-reference."""

    seqid: str
    start: int
    end: int

    @classmethod
    def parse(cls, value: str) -> "Target":
        match = _TARGET.match(value.strip())
        if not match:
            raise ValueError(f"Target is not seqid:start..end: {value!r}")
        return cls(match.group("seqid"), int(match.group("start")), int(match.group("end")))

    @property
    def name(self) -> str:
        return f"{self.seqid}:{self.start}-{self.end}"

    def __str__(self) -> str:
        return f"{self.seqid}:{self.start}..{self.end}"


@dataclass
class GFFRecord:
    seqid: str
    source: str
    type: str
    start: int
    end: int
    score: Optional[float] = None
    strand: Optional[str] = None
    phase: Optional[int] = None
    attributes: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_fields(cls, fields: list[str]) -> "GFFRecord":
        start = parse_int(fields[3], "start")
        end = parse_int(fields[4], "end")
        if start > end:
            raise ValueError(f"start {start} is after end {end}")
        return cls(
            seqid=fields[0],
            source=fields[1],
            type=fields[2],
            start=start,
            end=end,
            score=None if fields[5] == "." else parse_float(fields[5], "score"),
            strand=None if fields[6] == "." else fields[6],
            phase=None if fields[7] == "." else parse_int(fields[7], "phase"),
            attributes=parse_attributes(fields[8]),
        )

    def to_line(self) -> str:
        return "\t".join([
            self.seqid,
            self.source,
            self.type,
            str(self.start),
            str(self.end),
            "." if self.score is None else format_number(self.score),
            self.strand or ".",
            "." if self.phase is None else str(self.phase),
            format_attributes(self.attributes),
        ])

    def get(self, name: str) -> Optional[str]:
        """First value of an attribute, or None."""
        values = self.attributes.get(name)
        return values[0] if values else None

    @property
    def id(self) -> Optional[str]:
        return self.get("ID")

    @property
    def name(self) -> Optional[str]:
        return self.get("Name")

    @property
    def target(self) -> Optional[Target]:
        """
        The parsed Target attribute.

        Raises:
            ValueError: Target is present but not seqid:start..end
        """
        value = self.get("Target")
        if value is None:
            return None
        return Target.parse(value)


class GFFParser(RecordParser):
    record_type = GFFRecord
    min_fields = 9
    max_fields = 9
