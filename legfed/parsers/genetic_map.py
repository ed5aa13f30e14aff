"""
Genetic map and linkage group file rows.

Genetic map file:     Marker  LG  Type  Pos  [QTL]  [Traits]
Linkage group file:   LinkageGroup  Number  GeneticMap  [Length]

Column-header lines starting with "Marker" or "LinkageGroup" are skipped.
"""

from dataclasses import dataclass
from typing import Optional

from legfed.parsers.records import RecordParser, format_number, optional, parse_float, parse_int


@dataclass
class GeneticMapRecord:
    marker: str
    lg: int
    type: str
    position: float
    qtl: Optional[str] = None
    traits: Optional[str] = None

    @classmethod
    def from_fields(cls, fields: list[str]) -> "GeneticMapRecord":
        return cls(
            marker=fields[0].strip(),
            lg=parse_int(fields[1], "LG"),
            type=fields[2].strip(),
            position=parse_float(fields[3], "position"),
            qtl=optional(fields, 4),
            traits=optional(fields, 5),
        )

    def to_line(self) -> str:
        fields = [self.marker, str(self.lg), self.type, format_number(self.position)]
        if self.qtl is not None or self.traits is not None:
            fields.append(self.qtl or "")
        if self.traits is not None:
            fields.append(self.traits)
        return "\t".join(fields)


class GeneticMapParser(RecordParser):
    record_type = GeneticMapRecord
    min_fields = 4
    max_fields = 6
    column_header = "Marker"


@dataclass
class LinkageGroupRecord:
    identifier: str
    number: int
    genetic_map: str
    length: Optional[float] = None

    @classmethod
    def from_fields(cls, fields: list[str]) -> "LinkageGroupRecord":
        genetic_map = fields[2].strip()
        if not genetic_map:
            raise ValueError("genetic map name is empty")
        length = optional(fields, 3)
        return cls(
            identifier=fields[0].strip(),
            number=parse_int(fields[1], "number"),
            genetic_map=genetic_map,
            length=None if length is None else parse_float(length, "length"),
        )

    def to_line(self) -> str:
        fields = [self.identifier, str(self.number), self.genetic_map]
        if self.length is not None:
            fields.append(format_number(self.length))
        return "\t".join(fields)


class LinkageGroupParser(RecordParser):
    record_type = LinkageGroupRecord
    min_fields = 3
    max_fields = 4
    column_header = "LinkageGroup"
