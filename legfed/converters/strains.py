"""
Strain and organism file converters.

strain:    TaxonID header, then  identifier  [origin]  [comment]
organism:  organism.<attribute>  value
           strain.<n>.<attribute>  value
"""

import logging
from typing import Optional

from legfed.conversion.errors import MissingContextError
from legfed.conversion.pipeline import Converter
from legfed.parsers.header import HeaderConfig
from legfed.parsers.strains import (
    OrganismFileParser,
    OrganismFileRecord,
    StrainParser,
    StrainRecord,
)

logger = logging.getLogger(__name__)


class StrainFileConverter(Converter):
    name = "strain"
    description = "Strains of one organism (identifier [origin] [comment])"
    parser_class = StrainParser
    header_fields = {"taxon_id", "variety"}
    required_headers = ("taxon_id",)

    def start_data(self, header: HeaderConfig) -> None:
        super().start_data(header)
        self.organism = self.header_organism(header)

    def process_record(self, record: StrainRecord) -> None:
        self.assembler.strain(
            record.identifier,
            self.organism,
            origin=record.origin,
            comment=record.comment,
        )


class OrganismFileConverter(Converter):
    """
    Organism file converter.

    Attribute rows may come in any order, so the organism and its strains
    are built at the end of the file, once organism.taxonId is known.
    """

    name = "organism"
    description = "Organism and strain attributes (organism.attr / strain.N.attr value)"
    parser_class = OrganismFileParser

    def begin_file(self, path, header: HeaderConfig) -> None:
        self.organism_attributes: dict[str, str] = {}
        self.strain_attributes: dict[int, dict[str, str]] = {}

    def process_record(self, record: OrganismFileRecord) -> None:
        if record.is_strain:
            self.strain_attributes.setdefault(record.strain_number, {})[record.attribute] = record.value
        else:
            self.organism_attributes[record.attribute] = record.value

    def end_file(self, header: HeaderConfig) -> None:
        if not self.organism_attributes and not self.strain_attributes:
            logger.warning(f"{header.source}: no organism rows")
            return
        taxon_id: Optional[str] = self.organism_attributes.get("taxonId") or header.taxon_id
        if taxon_id is None:
            raise MissingContextError("organism.taxonId", header.source)

        organism = self.assembler.organism(taxon_id, self.organism_attributes.get("variety"))
        for attribute, value in self.organism_attributes.items():
            organism.set_attribute(attribute, value)

        for number in sorted(self.strain_attributes):
            attributes = dict(self.strain_attributes[number])
            identifier = attributes.pop("identifier", None) or attributes.pop("primaryIdentifier", None)
            if identifier is None:
                raise MissingContextError(f"strain.{number}.identifier", header.source)
            self.assembler.strain(identifier, organism, **attributes)
