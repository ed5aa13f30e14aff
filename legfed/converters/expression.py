"""
Expression file converter.

    ID          <source identifier>
    Description <text>
    PMID        <pmid>
    BioProject / SRA / GEO / Unit / URL  <value>
    Samples     <N>
    <num>  <name>  <description>        (N sample lines)
    <gene or transcript>  <value 1> ... <value N>

Consecutive transcript rows ("Gene.1", "Gene.12") are summed into their
gene, and the sum is stored once when the next gene (or the end of the
file) is reached.
"""

import logging

from legfed.conversion.pipeline import Converter
from legfed.parsers.expression import (
    ExpressionSampleParser,
    ExpressionValueParser,
    ExpressionValueRecord,
)
from legfed.parsers.header import HeaderConfig
from legfed.parsers.records import SKIP

logger = logging.getLogger(__name__)


class ExpressionConverter(Converter):
    name = "expression"
    description = "Gene expression matrix with source and sample headers"
    header_fields = {
        "identifier", "description", "pmids", "bio_project", "sra", "geo", "unit",
        "url", "sample_count", "taxon_id", "variety",
    }
    required_headers = ("identifier", "sample_count")

    def start_data(self, header: HeaderConfig) -> None:
        super().start_data(header)
        self.organism = self.header_organism(header)
        self.source = self.assembler.expression_source(
            header.identifier,
            description=header.description,
            bioProject=header.bio_project,
            sra=header.sra,
            geo=header.geo,
            unit=header.unit,
            url=header.url,
        )
        publications = self.header_publications(header)
        if publications and self.source.get_reference("publication") is None:
            self.source.set_reference("publication", publications[0])

        self.samples = []
        self.samples_remaining = header.sample_count
        self.sample_parser = ExpressionSampleParser()
        self.parser = ExpressionValueParser(header.sample_count)
        logger.info(f"Loading expression source {header.identifier} with {header.sample_count} samples")

    def begin_file(self, path, header: HeaderConfig) -> None:
        # (gene identifier, per-sample sums) of the transcript rows read so far
        self.pending = None

    def handle_line(self, line: str, line_number: int, source: str) -> None:
        if self.samples_remaining > 0:
            record = self.sample_parser.parse(line, line_number, source)
            if record is SKIP:
                return
            self.samples.append(
                self.assembler.expression_sample(
                    self.source, record.name, num=record.num, description=record.description
                )
            )
            self.samples_remaining -= 1
            return
        super().handle_line(line, line_number, source)

    def process_record(self, record: ExpressionValueRecord) -> None:
        gene_identifier = record.gene_identifier
        if self.pending is not None and self.pending[0] == gene_identifier:
            sums = [total + value for total, value in zip(self.pending[1], record.values)]
            self.pending = (gene_identifier, sums)
            return
        self.store_pending()
        self.pending = (gene_identifier, list(record.values))

    def end_file(self, header: HeaderConfig) -> None:
        self.store_pending()

    def store_pending(self) -> None:
        if self.pending is None:
            return
        gene_identifier, sums = self.pending
        self.pending = None
        gene = self.assembler.gene(gene_identifier, organism=self.organism)
        for sample, value in zip(self.samples, sums):
            self.assembler.expression_value(sample, gene, value)
