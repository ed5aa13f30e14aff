"""
CMap export parser.

Columns:
    map_acc map_name map_start map_stop feature_acc feature_name
    feature_aliases feature_start feature_stop feature_type_acc [is_landmark]

Lines are tab-separated; a line without any tab is split on whitespace.
"""

from dataclasses import dataclass
from typing import Optional

from legfed.parsers.records import RecordParser, format_number, parse_float, parse_int

CMAP_COLUMNS = (
    "map_acc", "map_name", "map_start", "map_stop", "feature_acc", "feature_name",
    "feature_aliases", "feature_start", "feature_stop", "feature_type_acc", "is_landmark",
)


@dataclass
class CMapRecord:
    map_acc: str
    map_name: str
    map_start: float
    map_stop: float
    feature_acc: str
    feature_name: str
    feature_aliases: str
    feature_start: float
    feature_stop: float
    feature_type_acc: str
    is_landmark: Optional[bool] = None

    @property
    def is_qtl(self) -> bool:
        return self.feature_type_acc.startswith("QTL")

    @property
    def is_marker(self) -> bool:
        return not self.is_qtl

    @classmethod
    def from_fields(cls, fields: list[str]) -> "CMapRecord":
        landmark = None
        if len(fields) > 10 and fields[10].strip():
            landmark = parse_int(fields[10], "is_landmark") == 1
        return cls(
            map_acc=fields[0],
            map_name=fields[1],
            map_start=parse_float(fields[2], "map_start"),
            map_stop=parse_float(fields[3], "map_stop"),
            feature_acc=fields[4].replace('"', ""),
            feature_name=fields[5].replace('"', ""),
            feature_aliases=fields[6],
            feature_start=parse_float(fields[7], "feature_start"),
            feature_stop=parse_float(fields[8], "feature_stop"),
            feature_type_acc=fields[9],
            is_landmark=landmark,
        )

    def to_line(self) -> str:
        fields = [
            self.map_acc, self.map_name,
            format_number(self.map_start), format_number(self.map_stop),
            self.feature_acc, self.feature_name, self.feature_aliases,
            format_number(self.feature_start), format_number(self.feature_stop),
            self.feature_type_acc,
        ]
        if self.is_landmark is not None:
            fields.append("1" if self.is_landmark else "0")
        return "\t".join(fields)


class CMapParser(RecordParser):
    record_type = CMapRecord
    min_fields = 10
    max_fields = 11
    column_header = "map_acc"

    def split(self, line: str) -> list[str]:
        if "\t" in line:
            return line.split("\t")
        return line.split()

    def is_skippable(self, line: str) -> bool:
        if not line.strip() or line.startswith("#"):
            return True
        return line.split(None, 1)[0] == self.column_header
