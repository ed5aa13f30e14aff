"""
Marker table converters.

marker-chromosome:     primaryId  secondaryId  Type  Chromosome  Start  End  Motif
marker-linkage-group:  Marker  LG  Position
marker-qtl:            Marker  QTL  [Phenotype]
snp-marker:            ID  DesignSequence  Alleles  Source  BeadType  StepDescription  [Gene ...]

All four need a TaxonID header (Variety and Strain are optional). SNP
marker files also take ArrayName, MarkerType and PMID headers.
"""

import logging

from legfed.conversion.pipeline import Converter
from legfed.parsers.header import HeaderConfig
from legfed.parsers.markers import (
    MarkerChromosomeParser,
    MarkerChromosomeRecord,
    MarkerLinkageGroupParser,
    MarkerLinkageGroupRecord,
    MarkerQTLParser,
    MarkerQTLRecord,
    SNPMarkerParser,
    SNPMarkerRecord,
)

logger = logging.getLogger(__name__)


class MarkerChromosomeConverter(Converter):
    name = "marker-chromosome"
    description = "Marker genomic positions (primaryId secondaryId Type Chromosome Start End Motif)"
    parser_class = MarkerChromosomeParser
    header_fields = {"taxon_id", "variety", "strain"}
    required_headers = ("taxon_id",)

    def start_data(self, header: HeaderConfig) -> None:
        super().start_data(header)
        self.organism = self.header_organism(header)
        self.strain = None
        if header.strain:
            self.strain = self.assembler.strain(header.strain, self.organism)

    def process_record(self, record: MarkerChromosomeRecord) -> None:
        marker, applied = self.assembler.placed_feature(
            "GeneticMarker",
            record.primary_identifier,
            record.chromosome,
            record.start,
            record.end,
            strand="1",
            organism=self.organism,
            primary_identifier=record.primary_identifier,
            secondary_identifier=record.secondary_identifier,
            type=record.type,
            motif=record.motif,
        )
        if applied and self.strain is not None:
            marker.set_reference("strain", self.strain)


class MarkerLinkageGroupConverter(Converter):
    name = "marker-linkage-group"
    description = "Marker positions on linkage groups (Marker LG Position)"
    parser_class = MarkerLinkageGroupParser
    header_fields = {"taxon_id", "variety", "genetic_map"}
    required_headers = ("taxon_id",)

    def start_data(self, header: HeaderConfig) -> None:
        super().start_data(header)
        self.organism = self.header_organism(header)
        self.genetic_map = None
        if header.genetic_map:
            self.genetic_map = self.assembler.genetic_map(header.genetic_map, self.organism)

    def process_record(self, record: MarkerLinkageGroupRecord) -> None:
        marker = self.assembler.genetic_marker(record.marker, organism=self.organism)
        linkage_group = self.assembler.linkage_group(
            record.linkage_group, genetic_map=self.genetic_map, organism=self.organism
        )
        self.assembler.linkage_group_position(marker, linkage_group, record.position)
        if self.genetic_map is not None:
            self.assembler.link(self.genetic_map, "markers", marker)


class MarkerQTLConverter(Converter):
    name = "marker-qtl"
    description = "Marker to QTL associations (Marker QTL [Phenotype])"
    parser_class = MarkerQTLParser
    header_fields = {"taxon_id", "variety"}
    required_headers = ("taxon_id",)

    def start_data(self, header: HeaderConfig) -> None:
        super().start_data(header)
        self.organism = self.header_organism(header)

    def process_record(self, record: MarkerQTLRecord) -> None:
        phenotype = None
        if record.phenotype:
            phenotype = self.assembler.phenotype(record.phenotype)
        qtl = self.assembler.qtl(record.qtl, organism=self.organism, phenotype=phenotype)
        marker = self.assembler.genetic_marker(record.marker, organism=self.organism)
        self.assembler.link(qtl, "markers", marker)


class SNPMarkerFileConverter(Converter):
    """
    SNP array markers.

    Markers are merged on their ID. The associated gene columns name
    genes by primary identifier.
    """

    name = "snp-marker"
    description = "SNP array markers (ID DesignSequence Alleles Source BeadType StepDescription [Gene ...])"
    parser_class = SNPMarkerParser
    header_fields = {"taxon_id", "variety", "array_name", "marker_type", "pmids", "dois"}
    required_headers = ("taxon_id",)

    def start_data(self, header: HeaderConfig) -> None:
        super().start_data(header)
        self.organism = self.header_organism(header)
        self.publications = self.header_publications(header)

    def process_record(self, record: SNPMarkerRecord) -> None:
        marker, _ = self.assembler.feature(
            "GeneticMarker",
            record.marker,
            organism=self.organism,
            type=self.header.marker_type,
            arrayName=self.header.array_name,
            designSequence=record.design_sequence,
            alleles=record.alleles,
            source=record.source,
            beadType=record.bead_type,
            stepDescription=record.step_description,
        )
        for publication in self.publications:
            self.assembler.link(marker, "publications", publication)
        for gene_identifier in record.associated_genes:
            gene = self.assembler.gene(gene_identifier)
            self.assembler.link(marker, "associatedGenes", gene)
