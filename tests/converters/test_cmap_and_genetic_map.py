"""
Tests for the CMap, genetic map and linkage group converters.
"""

import pytest

from legfed.conversion.errors import MalformedRecordError, MissingContextError
from legfed.converters.cmap import CMapConverter
from legfed.converters.genetic_map import GeneticMapConverter, LinkageGroupFileConverter


class TestCMapConverter:
    """Tests for CMapConverter."""

    def test_linkage_group_qtl_and_marker(self, temp_file, sample_cmap_content):
        """Test the LG length, QTL range, marker position and their links."""
        path = temp_file("GmComposite2003_3847_cmap.txt", sample_cmap_content)
        converter = CMapConverter()
        converter.process_file(path)
        registry = converter.registry

        lg = registry.get("LinkageGroup", "LG1")
        qtl = registry.get("QTL", "QTL001")
        marker = registry.get("GeneticMarker", "MRK001")
        gm = registry.get("GeneticMap", "GmComposite2003")

        assert lg.get_attribute("length") == 120.5
        assert lg.get_attribute("secondaryIdentifier") == "GmComposite2003_A1"
        assert qtl.get_attribute("primaryIdentifier") == "Seed weight 1-1"

        lgr = registry.get("LinkageGroupRange", f"{qtl.identifier}|{lg.identifier}")
        assert lgr.get_attribute("begin") == 10.0
        assert lgr.get_attribute("end") == 15.0
        assert lgr.get_attribute("length") == 5.0

        lgp = registry.get("LinkageGroupPosition", f"{marker.identifier}|{lg.identifier}")
        assert lgp.get_attribute("position") == 12.0

        assert lg.get_reference("geneticMap") is gm
        assert gm.get_collection("linkageGroups") == [lg]
        assert gm.get_collection("QTLs") == [qtl]
        assert gm.get_collection("markers") == [marker]
        assert lg.get_collection("QTLs") == [qtl]
        assert qtl.get_collection("linkageGroups") == [lg]
        assert lg.get_collection("markers") == [marker]
        assert marker.get_collection("linkageGroups") == [lg]
        assert gm.get_reference("organism").get_attribute("taxonId") == "3847"

    def test_second_file_reuses_entities(self, temp_file, sample_cmap_content):
        """Test that two files in one run share the registry."""
        first = temp_file("GmComposite2003_3847_a.txt", sample_cmap_content)
        second = temp_file("GmComposite2003_3847_b.txt", sample_cmap_content)
        converter = CMapConverter()
        converter.process_file(first)
        count = len(converter.registry)
        converter.process_file(second)

        assert len(converter.registry) == count
        assert converter.stats["files"] == 2

    def test_soybean_arbitrary_length(self, temp_file):
        """Test the description on soybean QTLs with a 2.0 cM interval."""
        content = "LG1\tA1\t0.0\t50.0\tQTL9\tSW 9-1\t\t20.0\t22.0\tQTL\n"
        converter = CMapConverter()
        converter.process_file(temp_file("Map_3847_x.txt", content))

        qtl = converter.registry.get("QTL", "QTL9")
        assert "arbitrarily" in qtl.get_attribute("description")

    def test_missing_taxon(self, temp_file, sample_cmap_content):
        """Test that a map without a taxon ID is a MissingContextError."""
        converter = CMapConverter()
        with pytest.raises(MissingContextError):
            converter.process_file(temp_file("cmap.txt", sample_cmap_content))

    def test_malformed_line_reports_line_number(self, temp_file):
        """Test that the failing line number is reported."""
        content = (
            "LG1\tA1\t0.0\t50.0\tM1\tSatt1\t\t1.0\t1.0\tSSR\n"
            "LG1\tA1\t0.0\n"
        )
        converter = CMapConverter(taxon_id="3847", genetic_map="Map")
        with pytest.raises(MalformedRecordError) as exc_info:
            converter.process_file(temp_file("map.txt", content))
        assert exc_info.value.line_number == 2

    def test_readme_skipped(self, temp_file):
        """Test that README files are not converted."""
        converter = CMapConverter()
        converter.process_file(temp_file("README.md", "not a map"))
        assert len(converter.registry) == 0


class TestGeneticMapConverter:
    """Tests for GeneticMapConverter."""

    CONTENT = (
        "GeneticMap\tBAT93_x_JaloEEP558\n"
        "PMID\t15798208\n"
        "Parents\t3885\tBAT93\tJaloEEP558\n"
        "Marker\tLG\tType\tPos\tQTL\tTraits\n"
        "Bng125\t1\tRFLP\t20.5\tSW1.1\tSeed weight\n"
        "D1861\t1\tSSR\t35.0\tSW1.1\tSeed weight\n"
        "BM200\t2\tSSR\t90.0\n"
    )

    def test_map_linkage_groups_and_qtl(self, temp_file):
        """Test LG lengths, QTL range and the mapping population."""
        converter = GeneticMapConverter()
        converter.process_file(temp_file("bat93.txt", self.CONTENT))
        registry = converter.registry

        lg1 = registry.get("LinkageGroup", "BAT93_x_JaloEEP558_1")
        lg2 = registry.get("LinkageGroup", "BAT93_x_JaloEEP558_2")
        qtl = registry.get("QTL", "SW1.1")

        assert lg1.get_attribute("length") == 35.0
        assert lg2.get_attribute("length") == 90.0
        assert lg1.get_attribute("number") == 1

        lgr = registry.get("LinkageGroupRange", f"{qtl.identifier}|{lg1.identifier}")
        assert (lgr.get_attribute("begin"), lgr.get_attribute("end")) == (20.5, 35.0)
        assert len(qtl.get_collection("markers")) == 2

        gm = registry.get("GeneticMap", "BAT93_x_JaloEEP558")
        population = registry.get("MappingPopulation", "BAT93_x_JaloEEP558")
        assert gm.get_collection("mappingPopulations") == [population]
        assert len(population.get_collection("parents")) == 2
        assert gm.get_reference("organism").get_attribute("taxonId") == "3885"
        assert gm.get_collection("publications")[0].get_attribute("pubMedId") == "15798208"

    def test_requires_genetic_map(self, temp_file):
        """Test that data before a GeneticMap header is rejected."""
        converter = GeneticMapConverter()
        with pytest.raises(MissingContextError, match="GeneticMap"):
            converter.process_file(temp_file("map.txt", "Bng125\t1\tRFLP\t20.5\n"))


class TestLinkageGroupFileConverter:
    """Tests for LinkageGroupFileConverter."""

    CONTENT = (
        "TaxonID\t3847\n"
        "Variety\tWilliams82\n"
        "PMID\t12345\n"
        "#LinkageGroup\tNumber\tGeneticMap\tLength\n"
        "GmComposite2003_D1a\t1\tGmComposite2003\t120.89\n"
        "GmComposite2003_D1b\t2\tGmComposite2003\n"
        "GmConsensus40_A1\t1\tGmConsensus40\t0\n"
    )

    def test_linkage_groups_and_maps(self, temp_file):
        """Test maps created once, numbers and optional lengths."""
        converter = LinkageGroupFileConverter()
        converter.process_file(temp_file("lg.txt", self.CONTENT))
        registry = converter.registry

        assert registry.count("GeneticMap") == 2
        composite = registry.get("GeneticMap", "GmComposite2003")
        groups = composite.get_collection("linkageGroups")
        assert [lg.get_attribute("primaryIdentifier") for lg in groups] == [
            "GmComposite2003_D1a", "GmComposite2003_D1b",
        ]
        assert groups[0].get_attribute("number") == 1
        assert groups[0].get_attribute("length") == 120.89
        assert groups[1].has_attribute("length") is False
        assert registry.get("LinkageGroup", "GmConsensus40_A1").has_attribute("length") is False
        assert composite.get_reference("organism").get_attribute("variety") == "Williams82"

    def test_publication_on_every_map(self, temp_file):
        """Test that the header publication is linked to each map."""
        converter = LinkageGroupFileConverter()
        converter.process_file(temp_file("lg.txt", self.CONTENT))

        publication = converter.registry.get("Publication", "PMID:12345")
        names = [m.get_attribute("primaryIdentifier") for m in publication.get_collection("geneticMaps")]
        assert names == ["GmComposite2003", "GmConsensus40"]

    def test_length_folds_with_marker_positions(self, temp_file):
        """Test that a later, longer extent grows the listed length."""
        converter = LinkageGroupFileConverter()
        converter.process_file(temp_file("lg.txt", self.CONTENT))
        linkage_group = converter.registry.get("LinkageGroup", "GmComposite2003_D1a")
        converter.assembler.extend_length(linkage_group, 100.0)
        converter.assembler.extend_length(linkage_group, 130.0)
        assert linkage_group.get_attribute("length") == 130.0

    def test_bad_number(self, temp_file):
        """Test that a non-integer number is malformed."""
        content = "TaxonID\t3847\nGmComposite2003_D1a\tD1a\tGmComposite2003\n"
        with pytest.raises(MalformedRecordError, match="number"):
            LinkageGroupFileConverter().process_file(temp_file("lg.txt", content))
