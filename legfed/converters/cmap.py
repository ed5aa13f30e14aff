"""
CMap export converter.

Loads linkage groups, QTLs (feature_type_acc starting with "QTL") and
genetic markers from CMap tab exports. The genetic map name and taxon ID
come from the command line, or from a file name of the form
"<MapName>_<TaxonID>_<anything>".
"""

import logging
from pathlib import Path
from typing import Optional

from legfed.conversion.pipeline import Converter
from legfed.parsers.cmap import CMapParser, CMapRecord
from legfed.parsers.header import HeaderConfig

logger = logging.getLogger(__name__)

SOYBEAN_TAXON_ID = "3847"
# SoyBase QTLs without a measured interval were given this length
ARBITRARY_QTL_LENGTH = 2.0


class CMapConverter(Converter):
    name = "cmap"
    description = "CMap linkage group export (map_acc ... is_landmark)"
    parser_class = CMapParser
    required_headers = ("taxon_id", "genetic_map")

    def begin_file(self, path: Optional[Path], header: HeaderConfig) -> None:
        if path is None:
            return
        chunks = path.name.split("_")
        if header.genetic_map is None and len(chunks) > 1:
            header.genetic_map = chunks[0]
        if header.taxon_id is None and len(chunks) > 1:
            header.taxon_id = chunks[1].split(".")[0]

    def start_data(self, header: HeaderConfig) -> None:
        super().start_data(header)
        self.organism = self.header_organism(header)
        self.genetic_map = self.assembler.genetic_map(header.genetic_map, self.organism)

    def process_record(self, record: CMapRecord) -> None:
        linkage_group = self.assembler.linkage_group(
            record.map_acc,
            genetic_map=self.genetic_map,
            organism=self.organism,
            secondary_identifier=record.map_name,
            length=record.map_stop,
        )
        if record.is_qtl:
            self._add_qtl(record, linkage_group)
        else:
            self._add_marker(record, linkage_group)

    def _add_qtl(self, record: CMapRecord, linkage_group) -> None:
        secondary = record.feature_acc
        if ":" in secondary:
            secondary = secondary.split(":", 1)[1]
        qtl = self.assembler.qtl(
            record.feature_acc,
            organism=self.organism,
            primary_identifier=record.feature_name.split(":")[0],
            secondary_identifier=secondary,
        )
        self.assembler.link(self.genetic_map, "QTLs", qtl)
        self.assembler.linkage_group_range(
            qtl, linkage_group, record.feature_start, record.feature_stop
        )
        if (
            self.header.taxon_id == SOYBEAN_TAXON_ID
            and record.feature_stop - record.feature_start == ARBITRARY_QTL_LENGTH
            and not qtl.has_attribute("description")
        ):
            qtl.set_attribute("description", "Length on linkage group arbitrarily set to 2.0 cM.")

    def _add_marker(self, record: CMapRecord, linkage_group) -> None:
        marker = self.assembler.genetic_marker(
            record.feature_acc,
            primary_identifier=record.feature_name,
            secondary_identifier=record.feature_acc,
            organism=self.organism,
            marker_type=record.feature_type_acc,
        )
        self.assembler.link(self.genetic_map, "markers", marker)
        self.assembler.linkage_group_position(marker, linkage_group, record.feature_start)
