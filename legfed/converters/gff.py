"""
GFF3 converters: genetic markers and synteny blocks.

Genetic marker GFF files carry the organism in comment headers:

    #TaxonID    3847
    #Variety    Williams82

Synteny GFF files (DAGchainer output) name both organisms:

    #SourceTaxonID  3847
    #SourceVariety  Williams82
    #TargetTaxonID  3885
    #TargetVariety  G19833

and only their syntenic_region lines are read. Each line is one
SyntenyBlock holding a source region (the GFF coordinates) and a target
region (its Target=seqid:start..end attribute). A source interval that
DAGchainer pairs with several targets gives one block per target.
"""

import logging

from legfed.conversion.pipeline import Converter
from legfed.parsers.gff import GFFParser, GFFRecord, strand_value
from legfed.parsers.header import HeaderConfig

logger = logging.getLogger(__name__)

SYNTENIC_REGION = "syntenic_region"


class GeneticMarkerGFFConverter(Converter):
    name = "genetic-marker-gff"
    description = "Genetic marker GFF3 with #TaxonID/#Variety headers"
    parser_class = GFFParser
    header_fields = {"taxon_id", "variety"}
    required_headers = ("taxon_id",)

    def start_data(self, header: HeaderConfig) -> None:
        super().start_data(header)
        self.organism = self.header_organism(header)
        self.organism_key = header.taxon_id + (f"_{header.variety}" if header.variety else "")

    def process_record(self, record: GFFRecord) -> None:
        name = record.name or record.id
        if name is None:
            raise self.malformed("marker has neither Name nor ID", record)
        self.assembler.placed_feature(
            "GeneticMarker",
            f"{self.organism_key}:{name}",
            record.seqid,
            record.start,
            record.end,
            strand=strand_value(record.strand),
            organism=self.organism,
            primary_identifier=name,
            type=record.type,
        )


class SyntenyGFFConverter(Converter):
    name = "synteny-gff"
    description = "DAGchainer synteny GFF3 (syntenic_region lines with Target=)"
    parser_class = GFFParser
    header_fields = {"source_taxon_id", "source_variety", "target_taxon_id", "target_variety"}
    required_headers = ("source_taxon_id", "target_taxon_id")

    def start_data(self, header: HeaderConfig) -> None:
        super().start_data(header)
        self.source_organism = self.assembler.organism(header.source_taxon_id, header.source_variety)
        self.target_organism = self.assembler.organism(header.target_taxon_id, header.target_variety)

    def process_record(self, record: GFFRecord) -> None:
        if record.type != SYNTENIC_REGION:
            return
        try:
            target = record.target
        except ValueError as e:
            raise self.malformed(str(e), record) from e
        if target is None:
            raise self.malformed("syntenic_region is missing Target=", record)

        median_ks = record.get("median_Ks")
        if median_ks is not None:
            try:
                median_ks = float(median_ks)
            except ValueError:
                raise self.malformed(f"median_Ks is not a number: {median_ks!r}", record) from None

        source_name = f"{record.seqid}:{record.start}-{record.end}"
        block, created = self.assembler.synteny_block(source_name, target.name, medianKs=median_ks)
        if not created:
            return
        self.assembler.syntenic_region(
            block,
            "source",
            record.seqid,
            record.start,
            record.end,
            strand=strand_value(record.strand),
            organism=self.source_organism,
            score=record.score,
        )
        self.assembler.syntenic_region(
            block,
            "target",
            target.seqid,
            target.start,
            target.end,
            strand=self.target_strand(record),
            organism=self.target_organism,
            score=record.score,
        )

    @staticmethod
    def target_strand(record: GFFRecord):
        """DAGchainer puts the target strand at the end of the Name attribute."""
        name = record.name
        if not name:
            return None
        if name[-1] in ("+", " "):
            return "1"
        if name[-1] == "-":
            return "-1"
        return None
