"""
Item model.

An Item is a typed record with attributes (scalar values), references
(single-valued links to other Items) and collections (multi-valued
links). Items are what the converters build and what the sinks store.

RELATIONS lists the bidirectional relation pairs of the warehouse model.
Linking through one end of a pair always updates the other end too.
"""

from typing import Any, Iterator, NamedTuple, Optional


class Item:
    """A warehouse object under construction."""

    __slots__ = (
        "class_name", "identifier", "attributes", "references", "collections", "_member_ids",
    )

    def __init__(self, class_name: str, identifier: str):
        self.class_name = class_name
        self.identifier = identifier
        self.attributes: dict[str, Any] = {}
        self.references: dict[str, "Item"] = {}
        self.collections: dict[str, list["Item"]] = {}
        # id() of every member, per collection
        self._member_ids: dict[str, set[int]] = {}

    def __repr__(self) -> str:
        key = self.attributes.get("primaryIdentifier") or self.attributes.get("identifier")
        if key is None:
            return f"<{self.class_name} {self.identifier}>"
        return f"<{self.class_name} {self.identifier} {key}>"

    def set_attribute(self, name: str, value: Any) -> None:
        self.attributes[name] = value

    def get_attribute(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def set_reference(self, name: str, item: "Item") -> None:
        self.references[name] = item

    def get_reference(self, name: str) -> Optional["Item"]:
        return self.references.get(name)

    def add_to_collection(self, name: str, item: "Item") -> bool:
        """
        Add an Item to a named collection.

        Args:
            name: Collection name
            item: Item to add

        Returns:
            True if added, False if the Item was already in the collection
        """
        member_ids = self._member_ids.setdefault(name, set())
        if id(item) in member_ids:
            return False
        member_ids.add(id(item))
        self.collections.setdefault(name, []).append(item)
        return True

    def get_collection(self, name: str) -> list["Item"]:
        return list(self.collections.get(name, []))

    def iter_references(self) -> Iterator["Item"]:
        return iter(self.references.values())

    def to_dict(self) -> dict:
        """Serialize with references and collections given as identifiers."""
        return {
            "class": self.class_name,
            "identifier": self.identifier,
            "attributes": dict(self.attributes),
            "references": {
                name: ref.identifier for name, ref in self.references.items()
            },
            "collections": {
                name: [member.identifier for member in members]
                for name, members in self.collections.items()
            },
        }


class ItemFactory:
    """
    Creates Items with run-unique identifiers.

    Identifiers are "<class index>_<counter>", the class index being
    assigned in order of first use.
    """

    def __init__(self):
        self._class_index: dict[str, int] = {}
        self._counter = 0

    def create(self, class_name: str) -> Item:
        index = self._class_index.setdefault(class_name, len(self._class_index) + 1)
        self._counter += 1
        return Item(class_name, f"{index}_{self._counter}")

    @property
    def created(self) -> int:
        return self._counter


class RelationEnd(NamedTuple):
    class_name: str  # "*" matches any class
    name: str
    many: bool


# Pairs of (end, end). The first end of each pair is the side converters
# usually link from, but either end may be used.
_RELATION_PAIRS: list[tuple[RelationEnd, RelationEnd]] = [
    (RelationEnd("QTL", "markers", True), RelationEnd("GeneticMarker", "QTLs", True)),
    (RelationEnd("QTL", "associatedGeneticMarkers", True),
     RelationEnd("GeneticMarker", "associatedQTLs", True)),
    (RelationEnd("GeneticMarker", "associatedGenes", True),
     RelationEnd("Gene", "associatedGeneticMarkers", True)),
    (RelationEnd("GeneticMarker", "publications", True),
     RelationEnd("Publication", "geneticMarkers", True)),
    (RelationEnd("LinkageGroup", "markers", True),
     RelationEnd("GeneticMarker", "linkageGroups", True)),
    (RelationEnd("LinkageGroup", "QTLs", True), RelationEnd("QTL", "linkageGroups", True)),
    (RelationEnd("GeneticMap", "linkageGroups", True),
     RelationEnd("LinkageGroup", "geneticMap", False)),
    (RelationEnd("GeneticMap", "markers", True),
     RelationEnd("GeneticMarker", "geneticMaps", True)),
    (RelationEnd("GeneticMap", "QTLs", True), RelationEnd("QTL", "geneticMaps", True)),
    (RelationEnd("GeneticMap", "publications", True),
     RelationEnd("Publication", "geneticMaps", True)),
    (RelationEnd("GeneticMap", "mappingPopulations", True),
     RelationEnd("MappingPopulation", "geneticMaps", True)),
    (RelationEnd("QTL", "linkageGroupRanges", True),
     RelationEnd("LinkageGroupRange", "QTL", False)),
    (RelationEnd("GeneticMarker", "linkageGroupPositions", True),
     RelationEnd("LinkageGroupPosition", "marker", False)),
    (RelationEnd("QTL", "mappingPopulations", True),
     RelationEnd("MappingPopulation", "QTLs", True)),
    (RelationEnd("QTL", "genotypingStudies", True),
     RelationEnd("GenotypingStudy", "QTLs", True)),
    (RelationEnd("QTL", "publications", True), RelationEnd("Publication", "QTLs", True)),
    (RelationEnd("Phenotype", "QTLs", True), RelationEnd("QTL", "phenotype", False)),
    (RelationEnd("MappingPopulation", "parents", True),
     RelationEnd("Strain", "mappingPopulations", True)),
    (RelationEnd("MappingPopulation", "publications", True),
     RelationEnd("Publication", "mappingPopulations", True)),
    (RelationEnd("GenotypingStudy", "publications", True),
     RelationEnd("Publication", "genotypingStudies", True)),
    (RelationEnd("Publication", "authors", True), RelationEnd("Author", "publications", True)),
    (RelationEnd("Organism", "strains", True), RelationEnd("Strain", "organism", False)),
    (RelationEnd("SyntenyBlock", "syntenicRegions", True),
     RelationEnd("SyntenicRegion", "syntenyBlock", False)),
    (RelationEnd("*", "ontologyAnnotations", True), RelationEnd("*", "subject", False)),
    (RelationEnd("ExpressionSource", "samples", True),
     RelationEnd("ExpressionSample", "source", False)),
    (RelationEnd("ExpressionSample", "values", True),
     RelationEnd("ExpressionValue", "sample", False)),
    (RelationEnd("Gene", "expressionValues", True),
     RelationEnd("ExpressionValue", "gene", False)),
    (RelationEnd("Gene", "proteins", True), RelationEnd("Protein", "genes", True)),
]


def _build_relations() -> dict[tuple[str, str], tuple[RelationEnd, RelationEnd]]:
    relations = {}
    for left, right in _RELATION_PAIRS:
        relations[(left.class_name, left.name)] = (left, right)
        relations[(right.class_name, right.name)] = (right, left)
    return relations


RELATIONS = _build_relations()


def find_relation(class_name: str, name: str) -> Optional[tuple[RelationEnd, RelationEnd]]:
    """
    Look up the relation a field belongs to.

    Args:
        class_name: Class of the Item owning the field
        name: Reference or collection name

    Returns:
        (this end, mirror end), or None for a one-way field
    """
    return RELATIONS.get((class_name, name)) or RELATIONS.get(("*", name))
