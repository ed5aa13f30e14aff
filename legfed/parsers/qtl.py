"""
QTL table rows.

QTL file:           QTLName  Phenotype
QTL-marker file:    Marker  QTL  [Trait]  [TO terms, comma-separated]
QTL-ontology file:  QTL  TermID  [Phenotype]
"""

from dataclasses import dataclass, field
from typing import Optional

from legfed.parsers.records import RecordParser, optional


@dataclass
class QTLPhenotypeRecord:
    qtl: str
    phenotype: Optional[str] = None

    @classmethod
    def from_fields(cls, fields: list[str]) -> "QTLPhenotypeRecord":
        return cls(fields[0].strip(), optional(fields, 1))

    def to_line(self) -> str:
        return f"{self.qtl}\t{self.phenotype or ''}"


class QTLPhenotypeParser(RecordParser):
    record_type = QTLPhenotypeRecord
    min_fields = 1
    max_fields = 2


@dataclass
class QTLMarkerRecord:
    marker: str
    qtl: str
    trait: Optional[str] = None
    terms: list[str] = field(default_factory=list)

    @classmethod
    def from_fields(cls, fields: list[str]) -> "QTLMarkerRecord":
        terms = []
        raw_terms = optional(fields, 3)
        if raw_terms:
            terms = [term.strip() for term in raw_terms.split(",") if term.strip()]
        return cls(fields[0].strip(), fields[1].strip(), optional(fields, 2), terms)

    def to_line(self) -> str:
        fields = [self.marker, self.qtl]
        if self.trait is not None or self.terms:
            fields.append(self.trait or "")
        if self.terms:
            fields.append(",".join(self.terms))
        return "\t".join(fields)


class QTLMarkerParser(RecordParser):
    record_type = QTLMarkerRecord
    min_fields = 2
    max_fields = 4


@dataclass
class QTLOntologyRecord:
    qtl: str
    term: str
    phenotype: Optional[str] = None

    @classmethod
    def from_fields(cls, fields: list[str]) -> "QTLOntologyRecord":
        term = fields[1].strip()
        if not term:
            raise ValueError("term identifier is empty")
        return cls(fields[0].strip(), term, optional(fields, 2))

    def to_line(self) -> str:
        fields = [self.qtl, self.term]
        if self.phenotype is not None:
            fields.append(self.phenotype)
        return "\t".join(fields)


class QTLOntologyParser(RecordParser):
    record_type = QTLOntologyRecord
    min_fields = 2
    max_fields = 3
