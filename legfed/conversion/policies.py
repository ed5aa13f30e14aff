"""
Domain policies used by the assembler.

These encode informal but real conventions of the source data: how to
tell a supercontig from a chromosome by its name, which Item classes an
ontology identifier maps to, and what to do with a duplicate row.
"""

import re
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable

from legfed.conversion.errors import UnresolvableLookupError

DEFAULT_SUPERCONTIG_PATTERNS = ("scaffold", "contig")

CHROMOSOME = "Chromosome"
SUPERCONTIG = "Supercontig"

# Two-letter ontology prefix -> (term class, annotation class)
ONTOLOGY_CLASSES = {
    "GO": ("GOTerm", "GOAnnotation"),
    "PO": ("POTerm", "POAnnotation"),
    "TO": ("TOTerm", "TOAnnotation"),
    "SO": ("SOTerm", "SOAnnotation"),
    "CO": ("COTerm", "COAnnotation"),
}

_ONTOLOGY_ID = re.compile(r"^([A-Z]{2}):\S+$")


def classify_sequence_region(
    name: str,
    patterns: Iterable[str] = DEFAULT_SUPERCONTIG_PATTERNS,
) -> str:
    """
    Decide whether a sequence name denotes a supercontig or a chromosome.

    Args:
        name: Sequence identifier, e.g. "glyma.Chr01" or "phavu.scaffold_12"
        patterns: Substrings marking a supercontig (matched case-insensitively)

    Returns:
        "Supercontig" or "Chromosome"
    """
    lowered = name.lower()
    for pattern in patterns:
        if pattern.lower() in lowered:
            return SUPERCONTIG
    return CHROMOSOME


def ontology_term_classes(identifier: str) -> tuple[str, str]:
    """
    Map an ontology identifier to its term and annotation classes.

    Args:
        identifier: Prefixed identifier such as "TO:0002626"

    Returns:
        Tuple of (term class, annotation class)

    Raises:
        UnresolvableLookupError: prefix is missing or not supported
    """
    match = _ONTOLOGY_ID.match(identifier.strip())
    if not match:
        raise UnresolvableLookupError(f"Not an ontology identifier: {identifier!r}")
    prefix = match.group(1)
    try:
        return ONTOLOGY_CLASSES[prefix]
    except KeyError:
        raise UnresolvableLookupError(
            f"Unsupported ontology prefix {prefix!r} in {identifier!r}"
        ) from None


class DuplicatePolicy(str, Enum):
    """What to do when a row re-defines an already placed entity."""

    IGNORE = "ignore"  # log it, keep the first row's values


# Kinds whose rows define the entity (its location or its own attributes).
# Kinds not listed here are only ever enriched, never re-defined.
DUPLICATE_POLICIES = {
    "GeneticMarker": DuplicatePolicy.IGNORE,
    "Strain": DuplicatePolicy.IGNORE,
    "SyntenyBlock": DuplicatePolicy.IGNORE,
    "Gene": DuplicatePolicy.IGNORE,
    "Protein": DuplicatePolicy.IGNORE,
}


def duplicate_policy(kind: str) -> DuplicatePolicy:
    return DUPLICATE_POLICIES.get(kind, DuplicatePolicy.IGNORE)


def round_half_up(value: float, places: int = 2) -> float:
    """Round like the warehouse does: half away from zero on the decimal value."""
    if places < 0:
        raise ValueError("places must be non-negative")
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


# (genus, species) -> NCBI taxon ID for the organisms held in the LegFed Chado databases
TAXON_IDS = {
    ("Arachis", "duranensis"): "130453",
    ("Arachis", "hypogaea"): "3818",
    ("Arachis", "ipaensis"): "130454",
    ("Cajanus", "cajan"): "3821",
    ("Cicer", "arietinum"): "3827",
    ("Glycine", "max"): "3847",
    ("Lotus", "japonicus"): "34305",
    ("Lupinus", "angustifolius"): "3871",
    ("Medicago", "truncatula"): "3880",
    ("Phaseolus", "vulgaris"): "3885",
    ("Vigna", "radiata"): "157791",
    ("Vigna", "unguiculata"): "3917",
}


def taxon_id_for(genus: str, species: str) -> str:
    """
    Look up the taxon ID of a genus and species.

    Raises:
        UnresolvableLookupError: the organism is not in TAXON_IDS
    """
    try:
        return TAXON_IDS[(genus.strip().capitalize(), species.strip().lower())]
    except KeyError:
        raise UnresolvableLookupError(f"No taxon ID for {genus} {species}") from None


# LIS data store file name prefix (gensp) -> NCBI taxon ID
LIS_PREFIX_TAXON_IDS = {
    "aradu": "130453",
    "araip": "130454",
    "arahy": "3818",
    "cajca": "3821",
    "cicar": "3827",
    "glyma": "3847",
    "lotja": "34305",
    "lupan": "3871",
    "medtr": "3880",
    "phavu": "3885",
    "tripr": "57577",
    "vigan": "3914",
    "vigra": "157791",
    "vigun": "3920",
}


def taxon_id_for_prefix(prefix: str) -> str:
    """
    Look up the taxon ID of an LIS file name prefix such as "phavu".

    Raises:
        UnresolvableLookupError: the prefix is not in LIS_PREFIX_TAXON_IDS
    """
    try:
        return LIS_PREFIX_TAXON_IDS[prefix.strip().lower()]
    except KeyError:
        raise UnresolvableLookupError(f"No taxon ID for file prefix {prefix!r}") from None
