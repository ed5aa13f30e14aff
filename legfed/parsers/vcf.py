"""
VCF data line parser.

Only the eight fixed columns are read; sample columns, when present,
are ignored. Meta lines ("##") and the "#CHROM" column header are
comments.
"""

from dataclasses import dataclass
from typing import Optional

from legfed.parsers.records import RecordParser, format_number, parse_float, parse_int


@dataclass
class VCFRecord:
    chrom: str
    pos: int
    id: Optional[str]
    ref: str
    alt: str
    qual: Optional[float] = None
    filter: Optional[str] = None
    info: Optional[str] = None

    @classmethod
    def from_fields(cls, fields: list[str]) -> "VCFRecord":
        return cls(
            chrom=fields[0],
            pos=parse_int(fields[1], "POS"),
            id=None if fields[2] == "." else fields[2],
            ref=fields[3],
            alt=fields[4],
            qual=None if fields[5] == "." else parse_float(fields[5], "QUAL"),
            filter=None if fields[6] == "." else fields[6],
            info=None if fields[7] == "." else fields[7],
        )

    def to_line(self) -> str:
        return "\t".join([
            self.chrom,
            str(self.pos),
            self.id or ".",
            self.ref,
            self.alt,
            "." if self.qual is None else format_number(self.qual),
            self.filter or ".",
            self.info or ".",
        ])


class VCFParser(RecordParser):
    record_type = VCFRecord
    min_fields = 8
