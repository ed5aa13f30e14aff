"""
Generic conversion pipeline.

    Record Source -> Record Parser -> Graph Assembler (+ registry) -> Sink

A Converter owns one registry, one assembler and one sink for a run.
process_file() may be called for several files; they share the
registry, so an entity named in two files is created once. close()
flushes everything to the sink.
"""

import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from legfed.conversion.assembler import GraphAssembler
from legfed.conversion.errors import MalformedRecordError
from legfed.conversion.registry import EntityRegistry
from legfed.conversion.sink import MemorySink, Sink, SinkAdapter
from legfed.core.settings import settings
from legfed.models.item import Item
from legfed.parsers.header import HeaderConfig, apply_header_line
from legfed.parsers.records import SKIP, RecordParser
from legfed.utils.file_io import is_readme, open_file

logger = logging.getLogger(__name__)


class FileRecordSource:
    """Lazy line stream over a plain or gzipped file; each iteration reopens it."""

    def __init__(self, path: Path):
        self.path = Path(path)

    @property
    def name(self) -> str:
        return self.path.name

    def __iter__(self) -> Iterator[tuple[int, str]]:
        with open_file(self.path) as fh:
            for line_number, line in enumerate(fh, start=1):
                yield line_number, line


class QueryRecordSource:
    """Lazy row stream over a SQL query; rows are column-name mappings."""

    def __init__(self, session: Session, sql: str, params: Optional[dict] = None, name: str = "query"):
        self.session = session
        self.sql = sql
        self.params = params or {}
        self.name = name

    def __iter__(self) -> Iterator[tuple[int, Any]]:
        result = self.session.execute(text(self.sql), self.params)
        for row_number, row in enumerate(result, start=1):
            yield row_number, row._mapping


class Converter:
    """
    Base class for converters.

    Subclasses set:
        name: format name used on the command line
        parser_class: RecordParser subclass for data lines
        header_fields: HeaderConfig fields the file header may set, or
            None when the format has no header block
        required_headers: HeaderConfig fields that must be set before
            the first data line
    and implement process_record().
    """

    name = ""
    description = ""
    parser_class: Optional[type] = None
    header_fields: Optional[set[str]] = None
    required_headers: tuple[str, ...] = ()

    def __init__(
        self,
        sink: Optional[Sink] = None,
        registry: Optional[EntityRegistry] = None,
        taxon_id: Optional[str] = None,
        variety: Optional[str] = None,
        genetic_map: Optional[str] = None,
        supercontig_patterns: Optional[Iterable[str]] = None,
        enricher=None,
    ):
        self.registry = registry if registry is not None else EntityRegistry()
        if supercontig_patterns is None:
            supercontig_patterns = settings.supercontig_patterns
        self.assembler = GraphAssembler(
            self.registry,
            supercontig_patterns=supercontig_patterns,
            enricher=enricher,
        )
        self.sink = sink if sink is not None else MemorySink()
        self.defaults = HeaderConfig(taxon_id=taxon_id, variety=variety, genetic_map=genetic_map)
        self.header: Optional[HeaderConfig] = None
        self.parser: Optional[RecordParser] = None
        self.line_number: Optional[int] = None
        self.stats = {"files": 0, "records": 0, "skipped": 0}
        self._adapter = SinkAdapter(self.registry, self.sink)

    # ------------------------------------------------------------------
    # Driving
    # ------------------------------------------------------------------

    def process_file(self, path: Path) -> None:
        """
        Convert one file into the run's registry.

        Raises:
            MalformedRecordError: a line could not be parsed
            MissingContextError: data before a required header value
        """
        path = Path(path)
        if is_readme(path):
            logger.info(f"Skipping {path.name}")
            return

        logger.info(f"Processing {path.name}...")
        before = len(self.registry)
        self.process_source(FileRecordSource(path), path)
        self.stats["files"] += 1
        logger.info(f"{path.name}: {len(self.registry) - before} new items")

    def process_source(self, source: FileRecordSource, path: Optional[Path] = None) -> None:
        header = HeaderConfig(source=source.name)
        header.update(self.defaults)
        self.header = header
        self.begin_file(path, header)

        in_header = self.header_fields is not None
        started = False
        for line_number, line in source:
            if in_header:
                stripped = line.rstrip("\n\r")
                if not stripped.strip():
                    continue
                if apply_header_line(header, stripped, line_number, self.header_fields):
                    continue
                if stripped.startswith("#"):
                    continue
                in_header = False
            if not started:
                self.start_data(header)
                started = True
            self.handle_line(line, line_number, source.name)

        self.end_file(header)

    def handle_line(self, line: str, line_number: int, source: str) -> None:
        self.line_number = line_number
        record = self.parser.parse(line, line_number, source)
        if record is SKIP:
            self.stats["skipped"] += 1
            return
        self.process_record(record)
        self.stats["records"] += 1

    def close(self) -> int:
        """
        Flush every Item of the run to the sink.

        Returns:
            Number of Items stored

        Raises:
            FlushError: the converter was already closed
        """
        stored = self._adapter.flush_all()
        for kind, count in self.registry.summary().items():
            logger.info(f"{kind}: {count}")
        for kind, count in self.assembler.duplicates.items():
            logger.info(f"Duplicate {kind} rows: {count}")
        logger.info(f"Stored {stored} items from {self.stats['files']} file(s)")
        return stored

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def begin_file(self, path: Optional[Path], header: HeaderConfig) -> None:
        """Called before the first line of a file."""

    def start_data(self, header: HeaderConfig) -> None:
        """Called once the header block is complete; resolves per-file context."""
        header.require(*self.required_headers)
        self.parser = self.make_parser(header)

    def make_parser(self, header: HeaderConfig) -> Optional[RecordParser]:
        return self.parser_class() if self.parser_class is not None else None

    def process_record(self, record) -> None:
        raise NotImplementedError

    def malformed(self, reason: str, record) -> MalformedRecordError:
        """Error for a record that parsed but cannot be converted."""
        return MalformedRecordError(
            reason,
            raw_line=record.to_line(),
            source=self.header.source if self.header else None,
            line_number=self.line_number,
        )

    def end_file(self, header: HeaderConfig) -> None:
        """Called after the last line of a file."""

    # ------------------------------------------------------------------
    # Shared context helpers
    # ------------------------------------------------------------------

    def header_organism(self, header: HeaderConfig) -> Optional[Item]:
        if header.taxon_id is None:
            return None
        return self.assembler.organism(header.taxon_id, header.variety)

    def header_publications(self, header: HeaderConfig) -> list[Item]:
        """Publications named by PMID, DOI or title/journal header values."""
        citation = {
            "journal": header.journal,
            "year": header.year,
            "volume": header.volume,
            "pages": header.pages,
        }
        keys = [{"pmid": pmid} for pmid in header.pmids] + [{"doi": doi} for doi in header.dois]
        if len(keys) == 1:
            # a lone PMID or DOI is the publication the citation lines describe
            return [self.assembler.publication(title=header.title, **keys[0], **citation)]
        publications = [self.assembler.publication(**key) for key in keys]
        if not publications and header.title:
            publications.append(self.assembler.publication(title=header.title, **citation))
        return publications
