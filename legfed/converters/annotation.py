"""
LIS data store info_annot converter.

File names follow the data store convention
"<gensp>.<strain>.<assembly>.<annotation>.<key>.info_annot.txt", e.g.
"phavu.G19833.gnm2.ann1.PB8d.info_annot.txt": the first part gives the
organism and the second the strain. A --taxon-id given on the command
line takes precedence over the prefix.

Each row links its gene to its protein and annotates the gene with
every GO term of the row.
"""

import logging

from legfed.conversion.pipeline import Converter
from legfed.conversion.policies import taxon_id_for_prefix
from legfed.parsers.annotation import AnnotInfoParser, AnnotInfoRecord
from legfed.parsers.header import HeaderConfig

logger = logging.getLogger(__name__)


class AnnotInfoFileConverter(Converter):
    name = "annot-info"
    description = "LIS info_annot files (genes, proteins and GO annotations)"
    parser_class = AnnotInfoParser

    def start_data(self, header: HeaderConfig) -> None:
        super().start_data(header)
        parts = (header.source or "").split(".")
        if header.taxon_id is None:
            header.taxon_id = taxon_id_for_prefix(parts[0])
        self.organism = self.header_organism(header)
        if len(parts) > 2:
            self.assembler.strain(parts[1], self.organism)
            logger.info(f"Loading annotations of strain {parts[1]} (taxon {header.taxon_id})")

    def process_record(self, record: AnnotInfoRecord) -> None:
        gene = self.assembler.gene(record.locus_name, organism=self.organism)
        protein = self.assembler.protein(record.peptide_name, organism=self.organism)
        self.assembler.link(gene, "proteins", protein)
        for term in record.go:
            self.assembler.annotate(gene, term)
