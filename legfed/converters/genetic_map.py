"""
Genetic map and linkage group file converters.

Header lines:
    GeneticMap  <name>
    PMID        <pmid>
    Parents     <taxon ID>  <parent A>  <parent B>

Data rows: Marker  LG  Type  Pos  [QTL]  [Traits]

Linkage groups are named "<map name>_<LG number>"; their length is the
largest marker position. A QTL's range spans the positions of all its
markers.

Linkage group files list the linkage groups of one or more maps:

    TaxonID  3847
    Variety  Williams82
    PMID     123456
    GmComposite2003_D1a  1  GmComposite2003  120.89

The length column is optional; a length of 0 is treated as absent.
"""

import logging

from legfed.conversion.pipeline import Converter
from legfed.parsers.genetic_map import (
    GeneticMapParser,
    GeneticMapRecord,
    LinkageGroupParser,
    LinkageGroupRecord,
)
from legfed.parsers.header import HeaderConfig

logger = logging.getLogger(__name__)


class GeneticMapConverter(Converter):
    name = "genetic-map"
    description = "Genetic map file (Marker LG Type Pos [QTL] [Traits])"
    parser_class = GeneticMapParser
    header_fields = {"genetic_map", "pmids", "dois", "parents", "taxon_id", "variety"}
    required_headers = ("genetic_map",)

    def start_data(self, header: HeaderConfig) -> None:
        super().start_data(header)
        if header.taxon_id is None and header.parents is not None:
            header.taxon_id = header.parents.taxon_id
        self.organism = self.header_organism(header)
        self.genetic_map = self.assembler.genetic_map(header.genetic_map, self.organism)

        publications = self.header_publications(header)
        for publication in publications:
            self.assembler.link(self.genetic_map, "publications", publication)
        if header.parents is not None:
            population = self.assembler.mapping_population(
                header.parents.mapping_population, self.organism
            )
            self.assembler.link(self.genetic_map, "mappingPopulations", population)
            for publication in publications:
                self.assembler.link(population, "publications", publication)
        logger.info(f"Loading genetic map {header.genetic_map}")

    def process_record(self, record: GeneticMapRecord) -> None:
        lg_key = f"{self.header.genetic_map}_{record.lg}"
        linkage_group = self.assembler.linkage_group(
            lg_key,
            genetic_map=self.genetic_map,
            organism=self.organism,
            number=record.lg,
            length=0.0,
        )
        marker = self.assembler.genetic_marker(
            record.marker, organism=self.organism, marker_type=record.type
        )
        self.assembler.link(self.genetic_map, "markers", marker)
        self.assembler.linkage_group_position(marker, linkage_group, record.position)

        if record.qtl is not None:
            qtl = self.assembler.qtl(
                record.qtl, organism=self.organism, secondary_identifier=record.traits
            )
            self.assembler.link(self.genetic_map, "QTLs", qtl)
            self.assembler.link(qtl, "markers", marker)
            self.assembler.linkage_group_range(qtl, linkage_group, record.position)


class LinkageGroupFileConverter(Converter):
    name = "linkage-group"
    description = "Linkage groups and their maps (LinkageGroup Number GeneticMap [Length])"
    parser_class = LinkageGroupParser
    header_fields = {"taxon_id", "variety", "pmids", "dois"}

    def start_data(self, header: HeaderConfig) -> None:
        super().start_data(header)
        self.organism = self.header_organism(header)
        self.publications = self.header_publications(header)

    def process_record(self, record: LinkageGroupRecord) -> None:
        genetic_map = self.assembler.genetic_map(record.genetic_map, self.organism)
        for publication in self.publications:
            self.assembler.link(genetic_map, "publications", publication)
        linkage_group = self.assembler.linkage_group(
            record.identifier,
            genetic_map=genetic_map,
            organism=self.organism,
            number=record.number,
            length=record.length or None,
        )
        if linkage_group.get_reference("geneticMap") is not genetic_map:
            logger.warning(
                f"{linkage_group!r} already belongs to "
                f"{linkage_group.get_reference('geneticMap')!r}; not moved to {record.genetic_map}"
            )
