"""
SNP VCF converter.

Each data line becomes a GeneticMarker of type SNP, length 1, located at
POS on CHROM. The organism comes from a "##TaxonID" meta line or the
command line.
"""

from legfed.conversion.pipeline import Converter
from legfed.parsers.header import HeaderConfig
from legfed.parsers.vcf import VCFParser, VCFRecord


class SNPVCFConverter(Converter):
    name = "snp-vcf"
    description = "SNP markers from VCF (CHROM POS ID REF ALT QUAL FILTER INFO)"
    parser_class = VCFParser
    header_fields = {"taxon_id", "variety"}
    required_headers = ("taxon_id",)

    def start_data(self, header: HeaderConfig) -> None:
        super().start_data(header)
        self.organism = self.header_organism(header)

    def process_record(self, record: VCFRecord) -> None:
        identifier = record.id or f"{record.chrom}_{record.pos}"
        self.assembler.placed_feature(
            "GeneticMarker",
            identifier,
            record.chrom,
            record.pos,
            record.pos,
            organism=self.organism,
            primary_identifier=identifier,
            type="SNP",
            alleles=f"{record.ref}/{record.alt}",
        )
