"""
Metadata header block.

Tab-delimited inputs open with "Key<TAB>Value" lines, optionally
prefixed with "#" in GFF files. The block is parsed once into a
HeaderConfig with named optional fields; the first line that is not a
known header key, a comment or blank ends it.
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Optional

from legfed.conversion.errors import MalformedRecordError, MissingContextError

logger = logging.getLogger(__name__)


@dataclass
class Parents:
    """The "Parents" line of a genetic map file."""

    taxon_id: str
    first: str
    second: str

    @property
    def mapping_population(self) -> str:
        return f"{self.first}_x_{self.second}"


@dataclass
class HeaderConfig:
    """Resolved header values of one file."""

    taxon_id: Optional[str] = None
    variety: Optional[str] = None
    strain: Optional[str] = None
    pmids: list[str] = field(default_factory=list)
    dois: list[str] = field(default_factory=list)
    title: Optional[str] = None
    journal: Optional[str] = None
    year: Optional[str] = None
    volume: Optional[str] = None
    pages: Optional[str] = None
    genetic_map: Optional[str] = None
    mapping_populations: list[str] = field(default_factory=list)
    parents: Optional[Parents] = None
    genotyping_study: Optional[str] = None
    description: Optional[str] = None
    source_taxon_id: Optional[str] = None
    source_variety: Optional[str] = None
    target_taxon_id: Optional[str] = None
    target_variety: Optional[str] = None
    # expression source
    identifier: Optional[str] = None
    bio_project: Optional[str] = None
    sra: Optional[str] = None
    geo: Optional[str] = None
    unit: Optional[str] = None
    url: Optional[str] = None
    sample_count: Optional[int] = None
    # SNP array
    array_name: Optional[str] = None
    marker_type: Optional[str] = None

    source: Optional[str] = None

    def require(self, *names: str) -> None:
        """
        Check that header values were given.

        Raises:
            MissingContextError: naming the first missing value
        """
        for name in names:
            value = getattr(self, name)
            if value is None or value == []:
                raise MissingContextError(HEADER_KEY_NAMES.get(name, name), self.source)

    def update(self, other: "HeaderConfig") -> None:
        """Take every value set in other."""
        for f in fields(self):
            value = getattr(other, f.name)
            if value is not None and value != []:
                setattr(self, f.name, value)


# Header key (lowercase) -> HeaderConfig field
HEADER_KEYS = {
    "taxonid": "taxon_id",
    "variety": "variety",
    "strain": "strain",
    "pmid": "pmids",
    "doi": "dois",
    "title": "title",
    "journal": "journal",
    "year": "year",
    "volume": "volume",
    "pages": "pages",
    "geneticmap": "genetic_map",
    "mappingpopulation": "mapping_populations",
    "parents": "parents",
    "genotypingstudy": "genotyping_study",
    "description": "description",
    "sourcetaxonid": "source_taxon_id",
    "sourcevariety": "source_variety",
    "targettaxonid": "target_taxon_id",
    "targetvariety": "target_variety",
    "id": "identifier",
    "bioproject": "bio_project",
    "sra": "sra",
    "geo": "geo",
    "unit": "unit",
    "url": "url",
    "samples": "sample_count",
    "arrayname": "array_name",
    "markertype": "marker_type",
}

HEADER_KEY_NAMES = {
    "taxon_id": "TaxonID",
    "variety": "Variety",
    "genetic_map": "GeneticMap",
    "source_taxon_id": "SourceTaxonID",
    "target_taxon_id": "TargetTaxonID",
    "identifier": "ID",
    "sample_count": "Samples",
    "mapping_populations": "MappingPopulation",
}


def header_field(line: str, accepted: Optional[set[str]] = None) -> Optional[str]:
    """
    Return the HeaderConfig field a line sets, or None for a data line.

    Args:
        line: Raw line
        accepted: Field names this format accepts; None accepts all
    """
    key = line.lstrip("#").split("\t", 1)[0].strip().lower()
    name = HEADER_KEYS.get(key)
    if name is None or (accepted is not None and name not in accepted):
        return None
    return name


def apply_header_line(
    config: HeaderConfig,
    line: str,
    line_number: Optional[int] = None,
    accepted: Optional[set[str]] = None,
) -> bool:
    """
    Apply one header line to a HeaderConfig.

    Returns:
        True if the line was a header line

    Raises:
        MalformedRecordError: header key without a value
    """
    line = line.rstrip("\n\r")
    name = header_field(line, accepted)
    if name is None:
        return False
    parts = [part.strip() for part in line.lstrip("#").split("\t")]
    values = [part for part in parts[1:] if part]
    if not values:
        raise MalformedRecordError(
            f"header {parts[0]} has no value", raw_line=line,
            source=config.source, line_number=line_number,
        )

    if name == "parents":
        if len(values) < 3:
            raise MalformedRecordError(
                "Parents needs a taxon ID and two parent names", raw_line=line,
                source=config.source, line_number=line_number,
            )
        config.parents = Parents(values[0], values[1], values[2])
    elif name == "sample_count":
        try:
            config.sample_count = int(values[0])
        except ValueError:
            raise MalformedRecordError(
                f"Samples is not an integer: {values[0]!r}", raw_line=line,
                source=config.source, line_number=line_number,
            ) from None
    elif isinstance(getattr(config, name), list):
        getattr(config, name).append(values[0])
    else:
        if getattr(config, name) is not None:
            logger.warning(f"{config.source}: header {parts[0]} given twice, using {values[0]}")
        setattr(config, name, values[0])
    return True


def parse_header(lines, source: Optional[str] = None, accepted: Optional[set[str]] = None) -> HeaderConfig:
    """
    Parse a header block given as a sequence of lines.

    Lines after the first data line are not read.
    """
    config = HeaderConfig(source=source)
    for line_number, line in enumerate(lines, start=1):
        stripped = line.rstrip("\n\r")
        if not stripped.strip():
            continue
        if apply_header_line(config, stripped, line_number, accepted):
            continue
        if stripped.startswith("#"):
            continue
        break
    return config
