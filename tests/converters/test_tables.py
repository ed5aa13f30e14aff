"""
Tests for the marker, QTL, strain, organism, expression and annotation converters.
"""

import pytest

from legfed.conversion.errors import (
    MalformedRecordError,
    MissingContextError,
    UnresolvableLookupError,
)
from legfed.converters.annotation import AnnotInfoFileConverter
from legfed.converters.expression import ExpressionConverter
from legfed.converters.markers import (
    MarkerChromosomeConverter,
    MarkerLinkageGroupConverter,
    MarkerQTLConverter,
    SNPMarkerFileConverter,
)
from legfed.converters.qtl import QTLFileConverter, QTLMarkerConverter, QTLOntologyConverter
from legfed.converters.strains import OrganismFileConverter, StrainFileConverter


class TestMarkerConverters:
    """Tests for the marker table converters."""

    def test_marker_chromosome(self, temp_file):
        """Test marker placement with the header strain."""
        content = (
            "TaxonID\t3827\n"
            "Strain\tCDCFrontier\n"
            "CaM0001\tTA1\tSSR\tCa1\t1000\t1250\t(TA)12\n"
        )
        converter = MarkerChromosomeConverter()
        converter.process_file(temp_file("markers.txt", content))

        marker = converter.registry.get("GeneticMarker", "CaM0001")
        assert marker.get_attribute("secondaryIdentifier") == "TA1"
        assert marker.get_attribute("motif") == "(TA)12"
        assert marker.get_attribute("length") == 251
        assert marker.get_reference("chromosomeLocation").get_attribute("strand") == "1"
        assert marker.get_reference("strain").get_attribute("identifier") == "CDCFrontier"

    def test_marker_linkage_group(self, temp_file):
        """Test marker positions on linkage groups of the header map."""
        content = (
            "TaxonID\t3827\n"
            "GeneticMap\tICCV2_x_JG62\n"
            "CaM0001\tLG1\t45.2\n"
            "CaM0002\tLG1\t88.0\n"
        )
        converter = MarkerLinkageGroupConverter()
        converter.process_file(temp_file("lg.txt", content))

        lg = converter.registry.get("LinkageGroup", "LG1")
        gm = converter.registry.get("GeneticMap", "ICCV2_x_JG62")
        assert lg.get_attribute("length") == 88.0
        assert lg.get_reference("geneticMap") is gm
        assert len(gm.get_collection("markers")) == 2

    def test_marker_qtl(self, temp_file):
        """Test marker to QTL links with the QTL phenotype."""
        content = "TaxonID\t3827\nCaM0001\tQTL-SW-1\tSeed weight\n"
        converter = MarkerQTLConverter()
        converter.process_file(temp_file("mq.txt", content))

        qtl = converter.registry.get("QTL", "QTL-SW-1")
        marker = converter.registry.get("GeneticMarker", "CaM0001")
        assert qtl.get_collection("markers") == [marker]
        assert qtl.get_reference("phenotype").get_attribute("primaryIdentifier") == "Seed weight"


class TestQTLConverters:
    """Tests for the QTL table converters."""

    def test_qtl_file(self, temp_file):
        """Test QTLs linked to the file's publication and populations."""
        content = (
            "TaxonID\t3885\n"
            "PMID\t22187453\n"
            "Journal\tTheor Appl Genet\n"
            "Year\t2012\n"
            "MappingPopulation\tBAT93_x_JaloEEP558\n"
            "GenotypingStudy\tBJ-2012\n"
            "Description\tRIL population\n"
            "SW1.1\tSeed weight\n"
            "SW1.2\tSeed weight\n"
        )
        converter = QTLFileConverter()
        converter.process_file(temp_file("qtl.txt", content))
        registry = converter.registry

        publication = registry.all("Publication")[0]
        population = registry.get("MappingPopulation", "BAT93_x_JaloEEP558")
        phenotype = registry.get("Phenotype", "Seed weight")

        assert publication.get_attribute("journal") == "Theor Appl Genet"
        assert len(publication.get_collection("QTLs")) == 2
        assert population.get_attribute("description") == "RIL population"
        assert population.get_collection("publications") == [publication]
        assert len(phenotype.get_collection("QTLs")) == 2
        qtl = registry.get("QTL", "SW1.1")
        assert qtl.get_collection("genotypingStudies")[0].get_attribute("primaryIdentifier") == "BJ-2012"

    def test_qtl_marker(self, temp_file):
        """Test associated markers and trait ontology annotations."""
        content = (
            "TaxonID\t3847\n"
            "Satt300\tSW 1-1\tSeed weight\tTO:0000181,TO:0000182\n"
            "Satt431\tSW 1-1\tSeed weight\tTO:0000181\n"
        )
        converter = QTLMarkerConverter()
        converter.process_file(temp_file("qm.txt", content))
        registry = converter.registry

        qtl = registry.get("QTL", "SW 1-1")
        assert len(qtl.get_collection("associatedGeneticMarkers")) == 2
        assert qtl.get_attribute("secondaryIdentifier") == "Seed weight"
        assert registry.count("TOAnnotation") == 2
        assert len(qtl.get_collection("ontologyAnnotations")) == 2

    def test_qtl_ontology_unknown_prefix(self, temp_file):
        """Test that an unsupported ontology prefix is unresolvable."""
        content = "TaxonID\t3847\nSW 1-1\tXX:0000181\n"
        with pytest.raises(UnresolvableLookupError):
            QTLOntologyConverter().process_file(temp_file("qo.txt", content))


class TestStrainConverters:
    """Tests for the strain and organism file converters."""

    def test_strain_file(self, temp_file):
        """Test strains of the header organism."""
        content = "TaxonID\t3885\nG19833\tPeru\tAndean landrace\nBAT93\n"
        converter = StrainFileConverter()
        converter.process_file(temp_file("strains.txt", content))

        organism = converter.registry.get("Organism", "3885")
        strains = organism.get_collection("strains")
        assert [s.get_attribute("identifier") for s in strains] == ["G19833", "BAT93"]
        assert strains[0].get_attribute("origin") == "Peru"

    def test_organism_file_any_order(self, temp_file):
        """Test that strain rows may precede organism.taxonId."""
        content = (
            "strain.1.identifier\tG19833\n"
            "strain.1.origin\tPeru\n"
            "organism.genus\tPhaseolus\n"
            "organism.taxonId\t3885\n"
        )
        converter = OrganismFileConverter()
        converter.process_file(temp_file("organism.txt", content))

        organism = converter.registry.get("Organism", "3885")
        assert organism.get_attribute("genus") == "Phaseolus"
        strain = organism.get_collection("strains")[0]
        assert strain.get_attribute("origin") == "Peru"

    def test_organism_file_without_taxon(self, temp_file):
        """Test that an organism file without taxonId is rejected."""
        with pytest.raises(MissingContextError, match="organism.taxonId"):
            OrganismFileConverter().process_file(
                temp_file("organism.txt", "organism.genus\tPhaseolus\n")
            )


class TestExpressionConverter:
    """Tests for ExpressionConverter."""

    CONTENT = (
        "ID\tsoybean-atlas\n"
        "Description\tSoybean tissue atlas\n"
        "Unit\tTPM\n"
        "TaxonID\t3847\n"
        "Samples\t2\n"
        "1\tleaf\tyoung leaf\n"
        "2\troot\n"
        "Glyma.01G000100.1\t1.5\t0.5\n"
        "Glyma.01G000100.2\t2.0\t0.0\n"
        "Glyma.01G000200.1\t4.0\t8.0\n"
    )

    def test_transcripts_summed_into_genes(self, temp_file):
        """Test samples, and values summed over a gene's transcripts."""
        converter = ExpressionConverter()
        converter.process_file(temp_file("atlas.txt", self.CONTENT))
        registry = converter.registry

        source = registry.get("ExpressionSource", "soybean-atlas")
        assert source.get_attribute("unit") == "TPM"
        samples = source.get_collection("samples")
        assert [s.get_attribute("primaryIdentifier") for s in samples] == ["leaf", "root"]

        gene = registry.get("Gene", "Glyma.01G000100")
        values = {
            v.get_reference("sample").get_attribute("primaryIdentifier"): v.get_attribute("value")
            for v in gene.get_collection("expressionValues")
        }
        assert values == {"leaf": 3.5, "root": 0.5}
        assert registry.count("Gene") == 2

    def test_same_file_twice_changes_nothing(self, temp_file):
        """Test that a second pass over the file leaves every value as it was."""
        path = temp_file("atlas.txt", self.CONTENT)
        converter = ExpressionConverter()
        converter.process_file(path)
        before = len(converter.registry)
        converter.process_file(path)

        assert len(converter.registry) == before
        values = [v.get_attribute("value") for v in converter.registry.all("ExpressionValue")]
        assert values == [3.5, 0.5, 4.0, 8.0]

    def test_last_gene_stored(self, temp_file):
        """Test that the transcript rows at the end of the file are stored."""
        converter = ExpressionConverter()
        converter.process_file(temp_file("atlas.txt", self.CONTENT))
        gene = converter.registry.get("Gene", "Glyma.01G000200")
        assert [v.get_attribute("value") for v in gene.get_collection("expressionValues")] == [4.0, 8.0]

    def test_value_count_mismatch(self, temp_file):
        """Test that a row with too few values is malformed."""
        content = self.CONTENT + "Glyma.01G000300.1\t1.0\n"
        with pytest.raises(MalformedRecordError) as exc_info:
            ExpressionConverter().process_file(temp_file("atlas.txt", content))
        assert exc_info.value.line_number == 11

    def test_requires_samples(self, temp_file):
        """Test that a file without a Samples header is rejected."""
        content = "ID\tsoybean-atlas\nGlyma.01G000100.1\t1.5\n"
        with pytest.raises(MissingContextError, match="Samples"):
            ExpressionConverter().process_file(temp_file("atlas.txt", content))


class TestSNPMarkerFileConverter:
    """Tests for SNPMarkerFileConverter."""

    CONTENT = (
        "TaxonID\t3917\n"
        "ArrayName\tIllumina Cowpea iSelect Consortium Array\n"
        "PMID\t27775877\n"
        "MarkerType\tSNP\n"
        "ID\tDesignSequence\tAlleles\tSource\tBeadType\tStepDescription\t3702\t3885\n"
        "1_0002\tTAC[A/G]AGA\tA/G\tCOPA\t0\tList 1 inside\tAT1G53750\tPhvul.010G122200\n"
        "1_0003\tGGC[C/T]TTA\n"
    )

    def test_array_markers(self, temp_file):
        """Test marker attributes from the header and the row."""
        converter = SNPMarkerFileConverter()
        converter.process_file(temp_file("cowpea_array.txt", self.CONTENT))
        registry = converter.registry

        marker = registry.get("GeneticMarker", "1_0002")
        assert marker.get_attribute("type") == "SNP"
        assert marker.get_attribute("arrayName") == "Illumina Cowpea iSelect Consortium Array"
        assert marker.get_attribute("alleles") == "A/G"
        assert marker.get_attribute("beadType") == 0
        assert marker.get_reference("organism").get_attribute("taxonId") == "3917"
        bare = registry.get("GeneticMarker", "1_0003")
        assert bare.get_attribute("designSequence") == "GGC[C/T]TTA"
        assert bare.has_attribute("alleles") is False

    def test_genes_and_publication(self, temp_file):
        """Test associated genes and the header publication."""
        converter = SNPMarkerFileConverter()
        converter.process_file(temp_file("cowpea_array.txt", self.CONTENT))
        registry = converter.registry

        marker = registry.get("GeneticMarker", "1_0002")
        genes = marker.get_collection("associatedGenes")
        assert [g.get_attribute("primaryIdentifier") for g in genes] == [
            "AT1G53750", "Phvul.010G122200",
        ]
        assert genes[1].get_collection("associatedGeneticMarkers") == [marker]
        publication = registry.get("Publication", "PMID:27775877")
        assert len(publication.get_collection("geneticMarkers")) == 2

    def test_requires_taxon(self, temp_file):
        """Test that markers before TaxonID are rejected."""
        with pytest.raises(MissingContextError, match="TaxonID"):
            SNPMarkerFileConverter().process_file(temp_file("a.txt", "1_0002\tTAC[A/G]AGA\n"))


class TestAnnotInfoFileConverter:
    """Tests for AnnotInfoFileConverter."""

    CONTENT = (
        "#pacId\tlocusName\ttranscriptName\tpeptideName\tPfam\tPanther\tKOG\tec\tKO\tGO\n"
        "37170591\tPhvul.001G000400\tPhvul.001G000400.1\tPhvul.001G000400.1.p\tPF00504\t"
        "PTHR21649,PTHR21649:SF24\t\t1.10.3.9\tK14172\tGO:0016020,GO:0009765\t"
        "AT1G76570.1\t\tChlorophyll A-B binding family protein\n"
        "37170592\tPhvul.001G000400\tPhvul.001G000400.2\tPhvul.001G000400.2.p\t\t\t\t\t\tGO:0016020\n"
        "37170600\tPhvul.001G000500\tPhvul.001G000500.1\tPhvul.001G000500.1.p\n"
    )
    FILE_NAME = "phavu.G19833.gnm2.ann1.PB8d.info_annot.txt"

    def test_genes_proteins_and_go_terms(self, temp_file):
        """Test gene-protein links and GO annotations once per (term, gene)."""
        converter = AnnotInfoFileConverter()
        converter.process_file(temp_file(self.FILE_NAME, self.CONTENT))
        registry = converter.registry

        gene = registry.get("Gene", "Phvul.001G000400")
        assert len(gene.get_collection("proteins")) == 2
        annotations = gene.get_collection("ontologyAnnotations")
        assert [a.class_name for a in annotations] == ["GOAnnotation", "GOAnnotation"]
        assert registry.count("GOTerm") == 2
        assert registry.get("GOTerm", "GO:0016020").get_attribute("identifier") == "GO:0016020"
        assert registry.count("Gene") == 2
        assert registry.count("Protein") == 3

    def test_organism_and_strain_from_file_name(self, temp_file):
        """Test taxon from the file prefix and strain from the second part."""
        converter = AnnotInfoFileConverter()
        converter.process_file(temp_file(self.FILE_NAME, self.CONTENT))
        registry = converter.registry

        gene = registry.get("Gene", "Phvul.001G000400")
        assert gene.get_reference("organism").get_attribute("taxonId") == "3885"
        strain = registry.get("Strain", "G19833")
        assert strain.get_reference("organism") is gene.get_reference("organism")

    def test_taxon_id_option_wins(self, temp_file):
        """Test that a command-line taxon ID overrides the prefix."""
        converter = AnnotInfoFileConverter(taxon_id="3886")
        converter.process_file(temp_file(self.FILE_NAME, self.CONTENT))
        assert converter.registry.get("Organism", "3886") is not None

    def test_unknown_prefix(self, temp_file):
        """Test that an unknown file prefix cannot be resolved."""
        with pytest.raises(UnresolvableLookupError, match="xxxxx"):
            AnnotInfoFileConverter().process_file(
                temp_file("xxxxx.A1.gnm1.ann1.info_annot.txt", self.CONTENT)
            )
