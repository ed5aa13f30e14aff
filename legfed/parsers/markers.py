"""Marker table rows: marker-chromosome, marker-linkage-group, marker-QTL and SNP marker files."""

from dataclasses import dataclass, field
from typing import Optional

from legfed.parsers.records import RecordParser, format_number, optional, parse_float, parse_int


@dataclass
class MarkerChromosomeRecord:
    """primaryId  secondaryId  Type  Chromosome  Start  End  Motif"""

    primary_identifier: str
    secondary_identifier: Optional[str]
    type: Optional[str]
    chromosome: str
    start: int
    end: int
    motif: Optional[str] = None

    @classmethod
    def from_fields(cls, fields: list[str]) -> "MarkerChromosomeRecord":
        start = parse_int(fields[4], "start")
        end = parse_int(fields[5], "end")
        if start > end:
            raise ValueError(f"start {start} is after end {end}")
        return cls(
            primary_identifier=fields[0].strip(),
            secondary_identifier=optional(fields, 1),
            type=optional(fields, 2),
            chromosome=fields[3].strip(),
            start=start,
            end=end,
            motif=optional(fields, 6),
        )

    def to_line(self) -> str:
        fields = [
            self.primary_identifier,
            self.secondary_identifier or "",
            self.type or "",
            self.chromosome,
            str(self.start),
            str(self.end),
        ]
        if self.motif is not None:
            fields.append(self.motif)
        return "\t".join(fields)


class MarkerChromosomeParser(RecordParser):
    record_type = MarkerChromosomeRecord
    min_fields = 6
    max_fields = 7


@dataclass
class MarkerLinkageGroupRecord:
    marker: str
    linkage_group: str
    position: float

    @classmethod
    def from_fields(cls, fields: list[str]) -> "MarkerLinkageGroupRecord":
        return cls(fields[0].strip(), fields[1].strip(), parse_float(fields[2], "position"))

    def to_line(self) -> str:
        return f"{self.marker}\t{self.linkage_group}\t{format_number(self.position)}"


class MarkerLinkageGroupParser(RecordParser):
    record_type = MarkerLinkageGroupRecord
    min_fields = 3
    max_fields = 3


@dataclass
class MarkerQTLRecord:
    marker: str
    qtl: str
    phenotype: Optional[str] = None

    @classmethod
    def from_fields(cls, fields: list[str]) -> "MarkerQTLRecord":
        return cls(fields[0].strip(), fields[1].strip(), optional(fields, 2))

    def to_line(self) -> str:
        fields = [self.marker, self.qtl]
        if self.phenotype is not None:
            fields.append(self.phenotype)
        return "\t".join(fields)


class MarkerQTLParser(RecordParser):
    record_type = MarkerQTLRecord
    min_fields = 2
    max_fields = 3


@dataclass
class SNPMarkerRecord:
    """ID  DesignSequence  Alleles  Source  BeadType  StepDescription  [AssociatedGene ...]"""

    marker: str
    design_sequence: str
    alleles: Optional[str] = None
    source: Optional[str] = None
    bead_type: Optional[int] = None
    step_description: Optional[str] = None
    associated_genes: list[str] = field(default_factory=list)

    @classmethod
    def from_fields(cls, fields: list[str]) -> "SNPMarkerRecord":
        bead_type = optional(fields, 4)
        return cls(
            marker=fields[0].strip(),
            design_sequence=fields[1].strip(),
            alleles=optional(fields, 2),
            source=optional(fields, 3),
            bead_type=None if bead_type is None else parse_int(bead_type, "bead type"),
            step_description=optional(fields, 5),
            associated_genes=[gene.strip() for gene in fields[6:] if gene.strip()],
        )

    def to_line(self) -> str:
        fields = [
            self.marker,
            self.design_sequence,
            self.alleles or "",
            self.source or "",
            "" if self.bead_type is None else str(self.bead_type),
            self.step_description or "",
        ]
        return "\t".join(fields + self.associated_genes).rstrip("\t")


class SNPMarkerParser(RecordParser):
    record_type = SNPMarkerRecord
    min_fields = 2
    column_header = "ID"
