"""
Tests for ChadoConverter against a minimal Chado schema in SQLite.
"""

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session

from legfed.conversion.errors import UnresolvableLookupError
from legfed.converters.chado import ChadoConverter, strand_value
from legfed.core.settings import settings

SCHEMA = [
    "CREATE TABLE organism (organism_id INTEGER PRIMARY KEY, abbreviation TEXT, genus TEXT, species TEXT)",
    "CREATE TABLE cvterm (cvterm_id INTEGER PRIMARY KEY, name TEXT)",
    "CREATE TABLE feature (feature_id INTEGER PRIMARY KEY, organism_id INTEGER, name TEXT, uniquename TEXT, type_id INTEGER)",
    "CREATE TABLE featureloc (featureloc_id INTEGER PRIMARY KEY, feature_id INTEGER, srcfeature_id INTEGER, fmin INTEGER, fmax INTEGER, strand INTEGER)",
    "CREATE TABLE featureprop (featureprop_id INTEGER PRIMARY KEY, feature_id INTEGER, type_id INTEGER, value TEXT, rank INTEGER)",
    "CREATE TABLE feature_relationship (feature_relationship_id INTEGER PRIMARY KEY, subject_id INTEGER, object_id INTEGER, type_id INTEGER)",
]

ROWS = [
    "INSERT INTO organism VALUES (1, 'cicar.desi', 'Cicer', 'arietinum_desi')",
    "INSERT INTO organism VALUES (2, 'glyma', 'Glycine', 'max')",
    "INSERT INTO cvterm VALUES (1, 'chromosome'), (2, 'gene'), (3, 'mRNA'), (4, 'polypeptide'), (5, 'Note'), (6, 'part_of'), (7, 'derives_from')",
    "INSERT INTO feature VALUES (10, 1, 'Ca1', 'cicar.Ca1', 1)",
    "INSERT INTO feature VALUES (11, 1, 'Ca_00001', 'cicar.Ca_00001', 2)",
    "INSERT INTO feature VALUES (12, 1, NULL, 'cicar.Ca_00001.1', 3)",
    "INSERT INTO feature VALUES (13, 1, NULL, 'cicar.Ca_00001.1.p', 4)",
    "INSERT INTO feature VALUES (14, 1, NULL, 'cicar.Ca_00002', 2)",
    "INSERT INTO featureloc VALUES (1, 11, 10, 999, 2000, -1)",
    "INSERT INTO featureloc VALUES (2, 13, 10, 1099, 1900, -1)",
    "INSERT INTO featureprop VALUES (1, 11, 5, 'Pentatricopeptide repeat protein', 0)",
    "INSERT INTO feature_relationship VALUES (1, 12, 11, 6)",
    "INSERT INTO feature_relationship VALUES (2, 13, 12, 7)",
]


@pytest.fixture
def chado_session(monkeypatch):
    monkeypatch.setattr(settings, "db_schema", None)
    engine = create_engine("sqlite://")
    with Session(engine) as session:
        for statement in SCHEMA + ROWS:
            session.execute(text(statement))
        session.commit()
        yield session


class TestStrandValue:
    """Tests for strand_value function."""

    def test_values(self):
        """Test featureloc strand conversion."""
        assert strand_value(1) == "1"
        assert strand_value(-1) == "-1"
        assert strand_value(0) is None
        assert strand_value(None) is None


class TestChadoConverter:
    """Tests for ChadoConverter.process_database."""

    def test_genes_and_proteins(self, chado_session):
        """Test organisms, located genes, proteins and their links."""
        converter = ChadoConverter()
        converter.process_database(chado_session)
        registry = converter.registry

        chickpea = registry.get("Organism", "3827")
        assert chickpea.get_attribute("genus") == "Cicer"
        assert chickpea.get_attribute("species") == "arietinum"
        assert chickpea.get_collection("strains")[0].get_attribute("identifier") == "desi"
        assert registry.get("Organism", "3847") is not None

        gene = registry.get("Gene", "cicar.Ca_00001")
        location = gene.get_reference("chromosomeLocation")
        assert location.get_attribute("start") == 1000
        assert location.get_attribute("end") == 2000
        assert location.get_attribute("strand") == "-1"
        assert gene.get_attribute("length") == 1001
        assert gene.get_attribute("symbol") == "Ca_00001"
        assert gene.get_attribute("description") == "Pentatricopeptide repeat protein"

        protein = registry.get("Protein", "cicar.Ca_00001.1.p")
        assert gene.get_collection("proteins") == [protein]
        assert protein.get_collection("genes") == [gene]

        unplaced = registry.get("Gene", "cicar.Ca_00002")
        assert unplaced.get_reference("chromosome") is None
        assert unplaced.get_reference("organism") is chickpea

    def test_taxon_filter(self, chado_session):
        """Test that only the selected organisms' features are loaded."""
        converter = ChadoConverter(taxon_ids=["3847"])
        converter.process_database(chado_session)
        assert converter.registry.count("Gene") == 0

    def test_unknown_organism(self, chado_session):
        """Test that an organism missing from the taxon table is unresolvable."""
        chado_session.execute(text("INSERT INTO organism VALUES (3, 'pissa', 'Pisum', 'sativum')"))
        with pytest.raises(UnresolvableLookupError, match="Pisum sativum"):
            ChadoConverter().process_database(chado_session)
