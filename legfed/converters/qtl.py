"""
QTL table converters.

qtl:           QTLName  Phenotype, after a header block naming the
               organism, the publication and the mapping populations
qtl-marker:    Marker  QTL  [Trait]  [TO terms]
qtl-ontology:  QTL  TermID  [Phenotype]
"""

import logging

from legfed.conversion.pipeline import Converter
from legfed.parsers.header import HeaderConfig
from legfed.parsers.qtl import (
    QTLMarkerParser,
    QTLMarkerRecord,
    QTLOntologyParser,
    QTLOntologyRecord,
    QTLPhenotypeParser,
    QTLPhenotypeRecord,
)

logger = logging.getLogger(__name__)


class QTLFileConverter(Converter):
    """
    QTL file converter.

    Every QTL of a file is linked to the file's publication, mapping
    populations and genotyping study. A MappingPopulation named
    "A_x_B" gets parent Strains A and B.
    """

    name = "qtl"
    description = "QTL/phenotype table with publication and mapping population headers"
    parser_class = QTLPhenotypeParser
    header_fields = {
        "taxon_id", "variety", "pmids", "dois", "title", "journal", "year", "volume",
        "pages", "mapping_populations", "genotyping_study", "description",
    }
    required_headers = ("taxon_id",)

    def start_data(self, header: HeaderConfig) -> None:
        super().start_data(header)
        self.organism = self.header_organism(header)
        self.publications = self.header_publications(header)

        self.mapping_populations = []
        for name in header.mapping_populations:
            population = self.assembler.mapping_population(name, self.organism)
            if header.description and not population.has_attribute("description"):
                population.set_attribute("description", header.description)
            for publication in self.publications:
                self.assembler.link(population, "publications", publication)
            self.mapping_populations.append(population)

        self.genotyping_study = None
        if header.genotyping_study:
            self.genotyping_study = self.assembler.genotyping_study(
                header.genotyping_study, self.organism
            )
            for publication in self.publications:
                self.assembler.link(self.genotyping_study, "publications", publication)

    def process_record(self, record: QTLPhenotypeRecord) -> None:
        phenotype = None
        if record.phenotype:
            phenotype = self.assembler.phenotype(record.phenotype)
        qtl = self.assembler.qtl(record.qtl, organism=self.organism, phenotype=phenotype)
        for publication in self.publications:
            self.assembler.link(qtl, "publications", publication)
        for population in self.mapping_populations:
            self.assembler.link(qtl, "mappingPopulations", population)
        if self.genotyping_study is not None:
            self.assembler.link(qtl, "genotypingStudies", self.genotyping_study)


class QTLMarkerConverter(Converter):
    """
    QTL-marker file converter.

    Links markers to QTLs through QTL.associatedGeneticMarkers and
    annotates each QTL with the listed trait ontology terms, once per
    (term, QTL) pair.
    """

    name = "qtl-marker"
    description = "QTL to marker associations (Marker QTL [Trait] [TO terms])"
    parser_class = QTLMarkerParser
    header_fields = {"taxon_id", "variety", "pmids", "dois", "mapping_populations"}

    def start_data(self, header: HeaderConfig) -> None:
        super().start_data(header)
        self.organism = self.header_organism(header)
        self.publications = self.header_publications(header)
        self.mapping_populations = [
            self.assembler.mapping_population(name, self.organism)
            for name in header.mapping_populations
        ]

    def process_record(self, record: QTLMarkerRecord) -> None:
        created = not self.registry.contains("QTL", record.qtl)
        qtl = self.assembler.qtl(
            record.qtl, organism=self.organism, secondary_identifier=record.trait
        )
        if created:
            for publication in self.publications:
                self.assembler.link(qtl, "publications", publication)
            for population in self.mapping_populations:
                self.assembler.link(qtl, "mappingPopulations", population)

        marker = self.assembler.genetic_marker(record.marker, organism=self.organism)
        self.assembler.link(qtl, "associatedGeneticMarkers", marker)
        logger.debug(f"QTL {record.qtl} associated with marker {record.marker}")

        for term in record.terms:
            self.assembler.annotate(qtl, term)


class QTLOntologyConverter(Converter):
    name = "qtl-ontology"
    description = "QTL ontology annotations (QTL TermID [Phenotype])"
    parser_class = QTLOntologyParser
    header_fields = {"taxon_id", "variety"}
    required_headers = ("taxon_id",)

    def start_data(self, header: HeaderConfig) -> None:
        super().start_data(header)
        self.organism = self.header_organism(header)

    def process_record(self, record: QTLOntologyRecord) -> None:
        phenotype = None
        if record.phenotype:
            phenotype = self.assembler.phenotype(record.phenotype)
        qtl = self.assembler.qtl(record.qtl, organism=self.organism, phenotype=phenotype)
        self.assembler.annotate(qtl, record.term)
