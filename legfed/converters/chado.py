"""
Chado database converter.

Reads organisms, genes and proteins from a Chado schema. Organisms are
resolved from genus and species to a taxon ID; a species of the form
"arietinum_desi" names the strain "desi". Feature locations come from
featureloc, whose fmin is 0-based, so start = fmin + 1.
"""

import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from legfed.conversion.pipeline import Converter, QueryRecordSource
from legfed.conversion.policies import taxon_id_for
from legfed.db.engine import table_name
from legfed.models.item import Item

logger = logging.getLogger(__name__)

ORGANISM_QUERY = "SELECT organism_id, abbreviation, genus, species FROM {organism}"

FEATURE_QUERY = """
    SELECT f.feature_id, f.uniquename, f.name, src.uniquename AS srcname,
           fl.fmin, fl.fmax, fl.strand
    FROM {feature} f
    JOIN {cvterm} t ON t.cvterm_id = f.type_id
    LEFT JOIN {featureloc} fl ON fl.feature_id = f.feature_id
    LEFT JOIN {feature} src ON src.feature_id = fl.srcfeature_id
    WHERE t.name = :type_name AND f.organism_id = :organism_id
    ORDER BY f.feature_id
"""

NOTE_QUERY = """
    SELECT f.uniquename, fp.value
    FROM {feature} f
    JOIN {cvterm} t ON t.cvterm_id = f.type_id
    JOIN {featureprop} fp ON fp.feature_id = f.feature_id
    JOIN {cvterm} pt ON pt.cvterm_id = fp.type_id
    WHERE t.name = 'gene' AND pt.name = 'Note' AND f.organism_id = :organism_id
    ORDER BY f.feature_id, fp.rank
"""

# polypeptide -derives_from-> mRNA -part_of-> gene
PROTEIN_GENE_QUERY = """
    SELECT p.uniquename AS protein, g.uniquename AS gene
    FROM {feature_relationship} r1
    JOIN {feature} p ON p.feature_id = r1.subject_id
    JOIN {feature} m ON m.feature_id = r1.object_id
    JOIN {feature_relationship} r2 ON r2.subject_id = m.feature_id
    JOIN {feature} g ON g.feature_id = r2.object_id
    JOIN {cvterm} pt ON pt.cvterm_id = p.type_id
    JOIN {cvterm} gt ON gt.cvterm_id = g.type_id
    WHERE pt.name = 'polypeptide' AND gt.name = 'gene' AND p.organism_id = :organism_id
"""

CHADO_TABLES = ("organism", "feature", "featureloc", "featureprop", "feature_relationship", "cvterm")


def chado_sql(query: str) -> str:
    return query.format(**{table: table_name(table) for table in CHADO_TABLES})


def strand_value(strand: Optional[int]) -> Optional[str]:
    if strand is None or strand == 0:
        return None
    return "1" if strand > 0 else "-1"


class ChadoConverter(Converter):
    """
    Chado converter.

    Args:
        taxon_ids: Only convert organisms with these taxon IDs; all when empty
    """

    name = "chado"
    description = "Genes and proteins from a Chado database"

    def __init__(self, *args, taxon_ids: Iterable[str] = (), **kwargs):
        super().__init__(*args, **kwargs)
        self.taxon_ids = set(taxon_ids)

    def process_database(self, session: Session) -> None:
        """
        Convert every selected organism's genes and proteins.

        Raises:
            UnresolvableLookupError: an organism has no known taxon ID
        """
        organisms = self.load_organisms(session)
        for organism_id, organism in organisms.items():
            taxon_id = organism.get_attribute("taxonId")
            if self.taxon_ids and taxon_id not in self.taxon_ids:
                continue
            logger.info(f"Loading features of Chado organism {organism_id} (taxon {taxon_id})")
            genes = self.load_features(session, organism_id, organism, "gene", "Gene")
            proteins = self.load_features(session, organism_id, organism, "polypeptide", "Protein")
            self.load_notes(session, organism_id, genes)
            self.link_proteins(session, organism_id, genes, proteins)
            logger.info(f"Loaded {len(genes)} genes and {len(proteins)} proteins")
        self.stats["files"] += 1

    def load_organisms(self, session: Session) -> dict[int, Item]:
        organisms = {}
        source = QueryRecordSource(session, chado_sql(ORGANISM_QUERY), name="organism")
        for _, row in source:
            genus = row["genus"]
            species = row["species"]
            strain_name = None
            if "_" in species:
                species, strain_name = species.split("_", 1)
            taxon_id = taxon_id_for(genus, species)
            organism = self.assembler.organism(taxon_id)
            if not organism.has_attribute("genus"):
                organism.set_attribute("genus", genus)
                organism.set_attribute("species", species)
            if strain_name:
                self.assembler.strain(strain_name, organism, abbreviation=row["abbreviation"])
            organisms[row["organism_id"]] = organism
            logger.info(f"{row['organism_id']}:{row['abbreviation']}:{genus}:{species}:{taxon_id}")
        return organisms

    def load_features(
        self,
        session: Session,
        organism_id: int,
        organism: Item,
        type_name: str,
        kind: str,
    ) -> dict[str, Item]:
        features = {}
        source = QueryRecordSource(
            session,
            chado_sql(FEATURE_QUERY),
            {"type_name": type_name, "organism_id": organism_id},
            name=f"{type_name} features",
        )
        for _, row in source:
            uniquename = row["uniquename"]
            attributes = {"symbol": row["name"]} if row["name"] and row["name"] != uniquename else {}
            if row["srcname"] is not None:
                item, _ = self.assembler.placed_feature(
                    kind,
                    uniquename,
                    row["srcname"],
                    row["fmin"] + 1,
                    row["fmax"],
                    strand=strand_value(row["strand"]),
                    organism=organism,
                    primary_identifier=uniquename,
                    **attributes,
                )
            else:
                item, _ = self.assembler.feature(
                    kind, uniquename, organism=organism, **attributes
                )
            features[uniquename] = item
            self.stats["records"] += 1
        return features

    def load_notes(self, session: Session, organism_id: int, genes: dict[str, Item]) -> None:
        source = QueryRecordSource(session, chado_sql(NOTE_QUERY), {"organism_id": organism_id})
        for _, row in source:
            gene = genes.get(row["uniquename"])
            if gene is not None and not gene.has_attribute("description"):
                gene.set_attribute("description", row["value"])

    def link_proteins(
        self,
        session: Session,
        organism_id: int,
        genes: dict[str, Item],
        proteins: dict[str, Item],
    ) -> None:
        source = QueryRecordSource(session, chado_sql(PROTEIN_GENE_QUERY), {"organism_id": organism_id})
        for _, row in source:
            gene = genes.get(row["gene"])
            protein = proteins.get(row["protein"])
            if gene is not None and protein is not None:
                self.assembler.link(gene, "proteins", protein)
