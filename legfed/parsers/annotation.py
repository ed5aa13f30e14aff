"""
LIS data store info_annot rows.

    pacId  locusName  transcriptName  peptideName  Pfam  Panther  KOG  ec  KO  GO
    Best-hit-arabi-name  arabi-symbol  arabi-defline

The descriptor columns (Pfam through GO) may hold several
comma-separated values. The column-header line starts with "#pacId".
"""

from dataclasses import dataclass, field
from typing import Optional

from legfed.parsers.records import RecordParser, optional

DESCRIPTOR_COLUMNS = ("pfam", "panther", "kog", "ec", "ko", "go")


def split_values(fields: list[str], index: int) -> list[str]:
    value = optional(fields, index)
    if value is None:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass
class AnnotInfoRecord:
    pac_id: str
    locus_name: str
    transcript_name: str
    peptide_name: str
    pfam: list[str] = field(default_factory=list)
    panther: list[str] = field(default_factory=list)
    kog: list[str] = field(default_factory=list)
    ec: list[str] = field(default_factory=list)
    ko: list[str] = field(default_factory=list)
    go: list[str] = field(default_factory=list)
    best_hit_name: Optional[str] = None
    best_hit_symbol: Optional[str] = None
    best_hit_defline: Optional[str] = None

    @classmethod
    def from_fields(cls, fields: list[str]) -> "AnnotInfoRecord":
        names = [fields[i].strip() for i in range(4)]
        if not all(names[1:]):
            raise ValueError("locus, transcript and peptide names are required")
        descriptors = {
            name: split_values(fields, index)
            for index, name in enumerate(DESCRIPTOR_COLUMNS, start=4)
        }
        return cls(
            *names,
            **descriptors,
            best_hit_name=optional(fields, 10),
            best_hit_symbol=optional(fields, 11),
            best_hit_defline=optional(fields, 12),
        )

    def to_line(self) -> str:
        fields = [self.pac_id, self.locus_name, self.transcript_name, self.peptide_name]
        fields += [",".join(getattr(self, name)) for name in DESCRIPTOR_COLUMNS]
        fields += [self.best_hit_name or "", self.best_hit_symbol or "", self.best_hit_defline or ""]
        return "\t".join(fields).rstrip("\t")


class AnnotInfoParser(RecordParser):
    record_type = AnnotInfoRecord
    min_fields = 4
    max_fields = 13
