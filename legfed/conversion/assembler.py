"""
Graph assembler.

Turns parsed field values into Items held in an EntityRegistry. Every
operation follows the same sequence:

1. compute the natural key
2. get-or-create the Item in the registry
3. set immutable attributes only when the Item was just created
4. fold monotonic attributes (lengths, ranges) with max/min
5. link both ends of every relation the record implies

Converters call these operations in referential order (organism before
linkage group before marker before QTL before range).
"""

import logging
from typing import Any, Iterable, Optional

from legfed.conversion.errors import ConflictingLinkError
from legfed.conversion.policies import (
    DEFAULT_SUPERCONTIG_PATTERNS,
    classify_sequence_region,
    duplicate_policy,
    ontology_term_classes,
    round_half_up,
)
from legfed.conversion.registry import EntityRegistry
from legfed.models.item import Item, ItemFactory, RelationEnd, find_relation

logger = logging.getLogger(__name__)

LOCATION_REFERENCES = {
    "Chromosome": ("chromosome", "chromosomeLocation"),
    "Supercontig": ("supercontig", "supercontigLocation"),
}


class GraphAssembler:
    """
    Create-or-reuse, link and fold operations over one registry.

    Args:
        registry: Registry for this run
        factory: Item factory; a fresh one is made when omitted
        supercontig_patterns: Name substrings that mark a supercontig
        enricher: Optional publication enricher, called once per new Publication
    """

    def __init__(
        self,
        registry: Optional[EntityRegistry] = None,
        factory: Optional[ItemFactory] = None,
        supercontig_patterns: Iterable[str] = DEFAULT_SUPERCONTIG_PATTERNS,
        enricher=None,
    ):
        self.registry = registry if registry is not None else EntityRegistry()
        self.factory = factory if factory is not None else ItemFactory()
        self.supercontig_patterns = tuple(supercontig_patterns)
        self.enricher = enricher
        self.duplicates: dict[str, int] = {}
        # alternate publication key (PMID/DOI/title) -> registry key
        self._publication_keys: dict[str, str] = {}

    def _resolve(self, kind: str, key: str, class_name: Optional[str] = None) -> tuple[Item, bool]:
        return self.registry.resolve(
            kind, key, lambda: self.factory.create(class_name or kind)
        )

    # ------------------------------------------------------------------
    # Linking
    # ------------------------------------------------------------------

    def link(self, source: Item, name: str, target: Item) -> None:
        """
        Link two Items through a bidirectional relation.

        Both ends are updated. A reference end that already points at a
        different Item is never re-pointed.

        Raises:
            KeyError: name is not a relation of the source's class
            ConflictingLinkError: a reference end is already set elsewhere
        """
        relation = find_relation(source.class_name, name)
        if relation is None:
            raise KeyError(f"{source.class_name}.{name} is not a bidirectional relation")
        this_end, mirror_end = relation
        self._check_reference(source, this_end, target)
        self._check_reference(target, mirror_end, source)
        self._attach(source, this_end, target)
        self._attach(target, mirror_end, source)

    @staticmethod
    def _check_reference(owner: Item, end: RelationEnd, target: Item) -> None:
        if end.many:
            return
        current = owner.get_reference(end.name)
        if current is not None and current is not target:
            raise ConflictingLinkError(
                f"{owner!r}.{end.name} already references {current!r}, not {target!r}"
            )

    @staticmethod
    def _attach(owner: Item, end: RelationEnd, target: Item) -> None:
        if end.many:
            owner.add_to_collection(end.name, target)
        else:
            owner.set_reference(end.name, target)

    # ------------------------------------------------------------------
    # Monotonic folds
    # ------------------------------------------------------------------

    @staticmethod
    def extend_length(item: Item, extent: float) -> None:
        """length = max(length, extent); an unset length takes the extent."""
        current = item.get_attribute("length")
        if current is None or extent > current:
            item.set_attribute("length", extent)

    @staticmethod
    def expand_range(range_item: Item, begin: float, end: Optional[float] = None) -> None:
        """
        Widen a [begin, end] interval to cover new observations.

        Args:
            range_item: Item carrying begin/end/length attributes
            begin: Observed position, or the low end of an observed interval
            end: High end of the observed interval (defaults to begin)
        """
        if end is None:
            end = begin
        low, high = min(begin, end), max(begin, end)
        current_begin = range_item.get_attribute("begin")
        current_end = range_item.get_attribute("end")
        new_begin = low if current_begin is None else min(current_begin, low)
        new_end = high if current_end is None else max(current_end, high)
        range_item.set_attribute("begin", new_begin)
        range_item.set_attribute("end", new_end)
        range_item.set_attribute("length", round_half_up(new_end - new_begin, 2))

    # ------------------------------------------------------------------
    # Organisms and sequences
    # ------------------------------------------------------------------

    def organism(self, taxon_id: str, variety: Optional[str] = None) -> Item:
        key = f"{taxon_id}_{variety}" if variety else str(taxon_id)
        item, created = self._resolve("Organism", key)
        if created:
            item.set_attribute("taxonId", str(taxon_id))
            if variety:
                item.set_attribute("variety", variety)
        return item

    def strain(self, identifier: str, organism: Optional[Item] = None, **attributes) -> Item:
        item, created = self._resolve("Strain", identifier)
        if created:
            item.set_attribute("identifier", identifier)
            self._set_present(item, attributes)
            if organism is not None:
                self.link(organism, "strains", item)
        elif attributes:
            self._note_duplicate("Strain", identifier)
        return item

    def sequence_region(
        self,
        name: str,
        organism: Optional[Item] = None,
        kind: Optional[str] = None,
    ) -> Item:
        """
        Get or create a Chromosome or Supercontig.

        The kind is inferred from the name with the assembler's supercontig
        patterns unless given.
        """
        if kind is None:
            kind = classify_sequence_region(name, self.supercontig_patterns)
        item, created = self._resolve(kind, name)
        if created:
            item.set_attribute("primaryIdentifier", name)
            if organism is not None:
                item.set_reference("organism", organism)
        return item

    def locate(
        self,
        feature: Item,
        region: Item,
        start: int,
        end: int,
        strand: Optional[str] = None,
    ) -> Item:
        """
        Place a feature on a sequence region.

        A feature has at most one Location per region kind; locating it
        again on the same kind moves that Location.

        Args:
            feature: Located feature
            region: Chromosome or Supercontig
            start: 1-based start
            end: 1-based inclusive end
            strand: "1", "-1" or None

        Returns:
            The Location Item
        """
        location, _ = self._resolve("Location", f"{feature.identifier}:{region.class_name}")
        location.set_attribute("start", start)
        location.set_attribute("end", end)
        if strand is not None:
            location.set_attribute("strand", strand)
        location.set_reference("locatedOn", region)
        location.set_reference("feature", feature)

        region_ref, location_ref = LOCATION_REFERENCES.get(
            region.class_name, ("sequence", "sequenceLocation")
        )
        feature.set_reference(region_ref, region)
        feature.set_reference(location_ref, location)
        feature.set_attribute("length", end - start + 1)
        return location

    # ------------------------------------------------------------------
    # Located features
    # ------------------------------------------------------------------

    def feature(
        self,
        kind: str,
        key: str,
        primary_identifier: Optional[str] = None,
        secondary_identifier: Optional[str] = None,
        organism: Optional[Item] = None,
        **attributes,
    ) -> tuple[Item, bool]:
        """Get or create a feature; attributes are only set on creation."""
        item, created = self._resolve(kind, key)
        if created:
            if primary_identifier is None and secondary_identifier is None:
                primary_identifier = key
            if primary_identifier is not None:
                item.set_attribute("primaryIdentifier", primary_identifier)
            if secondary_identifier is not None:
                item.set_attribute("secondaryIdentifier", secondary_identifier)
            if organism is not None:
                item.set_reference("organism", organism)
            self._set_present(item, attributes)
        return item, created

    def placed_feature(
        self,
        kind: str,
        key: str,
        region_name: str,
        start: int,
        end: int,
        strand: Optional[str] = None,
        organism: Optional[Item] = None,
        primary_identifier: Optional[str] = None,
        secondary_identifier: Optional[str] = None,
        region_kind: Optional[str] = None,
        **attributes,
    ) -> tuple[Item, bool]:
        """
        Get or create a feature and give it a Location.

        A row naming an already placed feature is handled by the kind's
        DuplicatePolicy: IGNORE logs and counts it, and the first row's
        attributes and Location are kept.

        Returns:
            Tuple of (item, applied); applied is False for an ignored row
        """
        item, created = self.feature(
            kind,
            key,
            primary_identifier=primary_identifier,
            secondary_identifier=secondary_identifier,
            organism=organism,
            **attributes,
        )
        if not created:
            self._note_duplicate(kind, key)
            return item, False

        region = self.sequence_region(region_name, organism, kind=region_kind)
        self.locate(item, region, start, end, strand)
        return item, True

    def genetic_marker(
        self,
        key: str,
        primary_identifier: Optional[str] = None,
        secondary_identifier: Optional[str] = None,
        organism: Optional[Item] = None,
        marker_type: Optional[str] = None,
    ) -> Item:
        item, _ = self.feature(
            "GeneticMarker",
            key,
            primary_identifier=primary_identifier,
            secondary_identifier=secondary_identifier,
            organism=organism,
            type=marker_type,
        )
        return item

    def gene(self, key: str, organism: Optional[Item] = None, **attributes) -> Item:
        item, _ = self.feature("Gene", key, organism=organism, **attributes)
        return item

    def protein(self, key: str, organism: Optional[Item] = None, **attributes) -> Item:
        item, _ = self.feature("Protein", key, organism=organism, **attributes)
        return item

    # ------------------------------------------------------------------
    # Genetic maps
    # ------------------------------------------------------------------

    def genetic_map(self, name: str, organism: Optional[Item] = None, **attributes) -> Item:
        item, created = self._resolve("GeneticMap", name)
        if created:
            item.set_attribute("primaryIdentifier", name)
            if organism is not None:
                item.set_reference("organism", organism)
            self._set_present(item, attributes)
        return item

    def linkage_group(
        self,
        key: str,
        genetic_map: Optional[Item] = None,
        organism: Optional[Item] = None,
        identifier: Optional[str] = None,
        secondary_identifier: Optional[str] = None,
        number: Optional[int] = None,
        length: Optional[float] = None,
    ) -> Item:
        """
        Get or create a LinkageGroup and fold in an observed length.

        Args:
            key: Accession, or "<map name>_<number>"
            genetic_map: Owning map, linked on first sight
            organism: Organism, set on creation
            identifier: primaryIdentifier when it differs from the key
            secondary_identifier: e.g. the map name of a CMap linkage group
            number: Linkage group number
            length: Observed extent, folded with max
        """
        item, created = self._resolve("LinkageGroup", key)
        if created:
            item.set_attribute("primaryIdentifier", identifier or key)
            if secondary_identifier is not None:
                item.set_attribute("secondaryIdentifier", secondary_identifier)
            if number is not None:
                item.set_attribute("number", number)
            if organism is not None:
                item.set_reference("organism", organism)
        if genetic_map is not None and item.get_reference("geneticMap") is None:
            self.link(genetic_map, "linkageGroups", item)
        if length is not None:
            self.extend_length(item, length)
        return item

    def linkage_group_position(self, marker: Item, linkage_group: Item, position: float) -> Item:
        """
        Record a marker's position on a linkage group.

        The first position seen for a (marker, linkage group) pair is kept.
        The linkage group's length grows to cover the position.
        """
        key = f"{marker.identifier}|{linkage_group.identifier}"
        item, created = self._resolve("LinkageGroupPosition", key)
        if created:
            item.set_attribute("position", position)
            item.set_reference("linkageGroup", linkage_group)
            self.link(marker, "linkageGroupPositions", item)
        elif item.get_attribute("position") != position:
            logger.warning(
                f"{marker!r} already at {item.get_attribute('position')} on "
                f"{linkage_group!r}; ignoring position {position}"
            )
        self.link(linkage_group, "markers", marker)
        self.extend_length(linkage_group, position)
        return item

    def qtl(
        self,
        key: str,
        organism: Optional[Item] = None,
        primary_identifier: Optional[str] = None,
        secondary_identifier: Optional[str] = None,
        phenotype: Optional[Item] = None,
    ) -> Item:
        """Get or create a QTL keyed by name (or accession), linking its phenotype once."""
        item, created = self._resolve("QTL", key)
        if created:
            item.set_attribute("primaryIdentifier", primary_identifier or key)
            if secondary_identifier is not None:
                item.set_attribute("secondaryIdentifier", secondary_identifier)
            if organism is not None:
                item.set_reference("organism", organism)
        if phenotype is not None and item.get_reference("phenotype") is None:
            self.link(phenotype, "QTLs", item)
        return item

    def linkage_group_range(
        self,
        qtl: Item,
        linkage_group: Item,
        begin: float,
        end: Optional[float] = None,
    ) -> Item:
        """
        Get or create the range of a QTL on a linkage group and widen it.

        Links QTL.linkageGroupRanges and LinkageGroup.QTLs, and grows the
        linkage group's length to cover the range.
        """
        key = f"{qtl.identifier}|{linkage_group.identifier}"
        item, created = self._resolve("LinkageGroupRange", key)
        if created:
            item.set_reference("linkageGroup", linkage_group)
            self.link(qtl, "linkageGroupRanges", item)
        self.link(linkage_group, "QTLs", qtl)
        self.expand_range(item, begin, end)
        self.extend_length(linkage_group, item.get_attribute("end"))
        return item

    def phenotype(self, name: str, description: Optional[str] = None) -> Item:
        item, created = self._resolve("Phenotype", name)
        if created:
            item.set_attribute("primaryIdentifier", name)
        if description and not item.has_attribute("description"):
            item.set_attribute("description", description)
        return item

    def mapping_population(self, name: str, organism: Optional[Item] = None) -> Item:
        """
        Get or create a MappingPopulation.

        A name of the form "A_x_B" creates parent Strains A and B.
        """
        item, created = self._resolve("MappingPopulation", name)
        if created:
            item.set_attribute("primaryIdentifier", name)
            if organism is not None:
                item.set_reference("organism", organism)
            if "_x_" in name:
                for parent_name in name.split("_x_"):
                    if parent_name:
                        parent = self.strain(parent_name, organism)
                        self.link(item, "parents", parent)
        return item

    def genotyping_study(self, name: str, organism: Optional[Item] = None) -> Item:
        item, created = self._resolve("GenotypingStudy", name)
        if created:
            item.set_attribute("primaryIdentifier", name)
            if organism is not None:
                item.set_reference("organism", organism)
        return item

    # ------------------------------------------------------------------
    # Publications
    # ------------------------------------------------------------------

    def publication(
        self,
        pmid: Optional[str] = None,
        doi: Optional[str] = None,
        title: Optional[str] = None,
        **attributes,
    ) -> Item:
        """
        Get or create a Publication.

        Publications are keyed by PMID, DOI or title, whichever is seen
        first; later calls carrying any known key return the same Item and
        fill in attributes it does not have yet. A new Publication is
        passed to the enricher once.

        Raises:
            ValueError: no key given
        """
        aliases = [
            f"PMID:{pmid}" if pmid else None,
            f"DOI:{doi}" if doi else None,
            f"title:{title}" if title else None,
        ]
        aliases = [alias for alias in aliases if alias]
        if not aliases:
            raise ValueError("A publication needs a PMID, a DOI or a title")

        key = next(
            (self._publication_keys[alias] for alias in aliases if alias in self._publication_keys),
            aliases[0],
        )
        item, created = self._resolve("Publication", key)
        for alias in aliases:
            self._publication_keys.setdefault(alias, key)

        self._set_missing(item, {"pubMedId": pmid, "doi": doi, "title": title})
        self._set_missing(item, attributes)
        if created and self.enricher is not None:
            self.enricher.enrich(item, self)
            self.register_publication_aliases(item, key)
        return item

    def register_publication_aliases(self, item: Item, key: str) -> None:
        """Make the PMID, DOI and title a Publication now carries find it under its key."""
        for prefix, name in (("PMID", "pubMedId"), ("DOI", "doi"), ("title", "title")):
            value = item.get_attribute(name)
            if value:
                self._publication_keys.setdefault(f"{prefix}:{value}", key)

    def author(self, name: str) -> Item:
        item, created = self._resolve("Author", name)
        if created:
            item.set_attribute("name", name)
        return item

    # ------------------------------------------------------------------
    # Ontologies
    # ------------------------------------------------------------------

    def ontology_term(self, identifier: str) -> Item:
        """
        Get or create the ontology term for a prefixed identifier.

        Raises:
            UnresolvableLookupError: unknown prefix
        """
        term_class, _ = ontology_term_classes(identifier)
        item, created = self._resolve(term_class, identifier)
        if created:
            item.set_attribute("identifier", identifier)
        return item

    def annotate(self, subject: Item, term_identifier: str) -> Item:
        """Annotate a subject with a term, once per (term, subject) pair."""
        _, annotation_class = ontology_term_classes(term_identifier)
        term = self.ontology_term(term_identifier)
        key = f"{term_identifier}|{subject.identifier}"
        item, created = self._resolve(annotation_class, key)
        if created:
            item.set_reference("ontologyTerm", term)
            self.link(subject, "ontologyAnnotations", item)
        return item

    # ------------------------------------------------------------------
    # Synteny and expression
    # ------------------------------------------------------------------

    def synteny_block(self, source_name: str, target_name: str, **attributes) -> tuple[Item, bool]:
        """
        Get or create the block pairing a source and a target interval.

        Blocks are keyed "<source>|<target>" on the "seqid:start-end"
        interval names and are found in either orientation.

        Returns:
            Tuple of (block, created)
        """
        reverse = f"{target_name}|{source_name}"
        if self.registry.contains("SyntenyBlock", reverse):
            self._note_duplicate("SyntenyBlock", reverse)
            return self.registry.get("SyntenyBlock", reverse), False

        key = f"{source_name}|{target_name}"
        item, created = self._resolve("SyntenyBlock", key)
        if created:
            item.set_attribute("primaryIdentifier", key)
            self._set_present(item, attributes)
        else:
            self._note_duplicate("SyntenyBlock", key)
        return item, created

    def syntenic_region(
        self,
        block: Item,
        role: str,
        region_name: str,
        start: int,
        end: int,
        strand: Optional[str] = None,
        organism: Optional[Item] = None,
        **attributes,
    ) -> Item:
        """
        Place one side of a synteny block.

        Regions belong to exactly one block, so they are keyed
        "<block key>|<role>"; the same interval paired with two targets
        gives two regions.

        Args:
            block: Owning SyntenyBlock
            role: "source" or "target"
            region_name: Sequence the region lies on
        """
        key = f"{block.get_attribute('primaryIdentifier')}|{role}"
        item, _ = self.placed_feature(
            "SyntenicRegion",
            key,
            region_name,
            start,
            end,
            strand=strand,
            organism=organism,
            primary_identifier=f"{region_name}:{start}-{end}",
            **attributes,
        )
        self.link(block, "syntenicRegions", item)
        return item

    def expression_source(self, identifier: str, **attributes) -> Item:
        item, created = self._resolve("ExpressionSource", identifier)
        if created:
            item.set_attribute("primaryIdentifier", identifier)
        self._set_missing(item, attributes)
        return item

    def expression_sample(
        self,
        source: Item,
        name: str,
        num: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Item:
        key = f"{source.get_attribute('primaryIdentifier')}|{name}"
        item, created = self._resolve("ExpressionSample", key)
        if created:
            item.set_attribute("primaryIdentifier", name)
            self._set_present(item, {"num": num, "description": description})
            self.link(source, "samples", item)
        return item

    def expression_value(self, sample: Item, gene: Item, value: float) -> Item:
        """Record a gene's value in a sample; the first value seen is kept."""
        key = f"{sample.identifier}|{gene.identifier}"
        item, created = self._resolve("ExpressionValue", key)
        if created:
            item.set_attribute("value", value)
            self.link(sample, "values", item)
            self.link(gene, "expressionValues", item)
        elif item.get_attribute("value") != value:
            logger.warning(
                f"{gene!r} already has value {item.get_attribute('value')} in "
                f"{sample!r}; ignoring {value}"
            )
        return item

    # ------------------------------------------------------------------

    def _note_duplicate(self, kind: str, key: str) -> None:
        self.duplicates[kind] = self.duplicates.get(kind, 0) + 1
        logger.info(f"Duplicate {kind} {key} ignored ({duplicate_policy(kind).value})")

    @staticmethod
    def _set_present(item: Item, attributes: dict[str, Any]) -> None:
        for name, value in attributes.items():
            if value is not None:
                item.set_attribute(name, value)

    @staticmethod
    def _set_missing(item: Item, attributes: dict[str, Any]) -> None:
        for name, value in attributes.items():
            if value is not None and not item.has_attribute(name):
                item.set_attribute(name, value)
