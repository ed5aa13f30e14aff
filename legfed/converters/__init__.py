"""
Format converters, keyed by the name used on the command line.
"""

from legfed.converters.annotation import AnnotInfoFileConverter
from legfed.converters.chado import ChadoConverter
from legfed.converters.cmap import CMapConverter
from legfed.converters.expression import ExpressionConverter
from legfed.converters.genetic_map import GeneticMapConverter, LinkageGroupFileConverter
from legfed.converters.gff import GeneticMarkerGFFConverter, SyntenyGFFConverter
from legfed.converters.markers import (
    MarkerChromosomeConverter,
    MarkerLinkageGroupConverter,
    MarkerQTLConverter,
    SNPMarkerFileConverter,
)
from legfed.converters.qtl import QTLFileConverter, QTLMarkerConverter, QTLOntologyConverter
from legfed.converters.strains import OrganismFileConverter, StrainFileConverter
from legfed.converters.vcf import SNPVCFConverter

CONVERTERS = {
    cls.name: cls
    for cls in (
        CMapConverter,
        GeneticMapConverter,
        LinkageGroupFileConverter,
        GeneticMarkerGFFConverter,
        SyntenyGFFConverter,
        SNPVCFConverter,
        MarkerChromosomeConverter,
        MarkerLinkageGroupConverter,
        MarkerQTLConverter,
        SNPMarkerFileConverter,
        QTLFileConverter,
        QTLMarkerConverter,
        QTLOntologyConverter,
        StrainFileConverter,
        OrganismFileConverter,
        ExpressionConverter,
        AnnotInfoFileConverter,
        ChadoConverter,
    )
}
