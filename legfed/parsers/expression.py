"""
Expression file rows.

After the header block, "Samples N" is followed by N sample lines
(num, name, description) and then one row per gene or transcript with
one value per sample.
"""

from dataclasses import dataclass, field
from typing import Optional

from legfed.parsers.records import RecordParser, format_number, optional, parse_float


def gene_identifier(identifier: str) -> str:
    """
    Strip a transcript suffix of one or two characters.

    "Glyma.01G000100.11" and "Glyma.01G000100.1" both give
    "Glyma.01G000100"; an identifier without such a suffix is returned
    unchanged.
    """
    if len(identifier) >= 3 and identifier[-3] == ".":
        return identifier[:-3]
    if len(identifier) >= 2 and identifier[-2] == ".":
        return identifier[:-2]
    return identifier


@dataclass
class ExpressionSampleRecord:
    num: str
    name: str
    description: Optional[str] = None

    @classmethod
    def from_fields(cls, fields: list[str]) -> "ExpressionSampleRecord":
        return cls(fields[0].strip(), fields[1].strip(), optional(fields, 2))

    def to_line(self) -> str:
        fields = [self.num, self.name]
        if self.description is not None:
            fields.append(self.description)
        return "\t".join(fields)


class ExpressionSampleParser(RecordParser):
    record_type = ExpressionSampleRecord
    min_fields = 2
    max_fields = 3


@dataclass
class ExpressionValueRecord:
    identifier: str
    values: list[float] = field(default_factory=list)

    @property
    def gene_identifier(self) -> str:
        return gene_identifier(self.identifier)

    @classmethod
    def from_fields(cls, fields: list[str]) -> "ExpressionValueRecord":
        return cls(
            fields[0].strip(),
            [parse_float(value, f"value {i}") for i, value in enumerate(fields[1:], start=1)],
        )

    def to_line(self) -> str:
        return "\t".join([self.identifier] + [format_number(value) for value in self.values])


class ExpressionValueParser(RecordParser):
    """Value rows must carry exactly one value per sample."""

    record_type = ExpressionValueRecord

    def __init__(self, sample_count: int):
        self.min_fields = sample_count + 1
        self.max_fields = sample_count + 1
