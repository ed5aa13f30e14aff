"""
Strain and organism file rows.

Strain file:     identifier  [origin]  [comment]
Organism file:   organism.<attribute>  value
                 strain.<n>.<attribute>  value
"""

from dataclasses import dataclass
from typing import Optional

from legfed.parsers.records import RecordParser, optional, parse_int


@dataclass
class StrainRecord:
    identifier: str
    origin: Optional[str] = None
    comment: Optional[str] = None

    @classmethod
    def from_fields(cls, fields: list[str]) -> "StrainRecord":
        identifier = fields[0].strip()
        if not identifier:
            raise ValueError("strain identifier is empty")
        return cls(identifier, optional(fields, 1), optional(fields, 2))

    def to_line(self) -> str:
        fields = [self.identifier]
        if self.origin is not None or self.comment is not None:
            fields.append(self.origin or "")
        if self.comment is not None:
            fields.append(self.comment)
        return "\t".join(fields)


class StrainParser(RecordParser):
    record_type = StrainRecord
    min_fields = 1
    max_fields = 3


@dataclass
class OrganismFileRecord:
    """One attribute of the organism, or of its strain number strain_number."""

    attribute: str
    value: str
    strain_number: Optional[int] = None

    @property
    def is_strain(self) -> bool:
        return self.strain_number is not None

    @classmethod
    def from_fields(cls, fields: list[str]) -> "OrganismFileRecord":
        path = fields[0].strip().split(".")
        value = fields[1].strip()
        if path[0] == "organism" and len(path) == 2:
            return cls(path[1], value)
        if path[0] == "strain" and len(path) == 3:
            return cls(path[2], value, parse_int(path[1], "strain number"))
        raise ValueError(
            f"expected organism.<attribute> or strain.<n>.<attribute>, found {fields[0]!r}"
        )

    def to_line(self) -> str:
        if self.is_strain:
            return f"strain.{self.strain_number}.{self.attribute}\t{self.value}"
        return f"organism.{self.attribute}\t{self.value}"


class OrganismFileParser(RecordParser):
    record_type = OrganismFileRecord
    min_fields = 2
    max_fields = 2
