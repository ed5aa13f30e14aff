"""
Pytest fixtures for the LegFed loader tests.

Provides:
- Temporary directories and files
- A fresh registry, assembler and in-memory sink
- Sample input file contents
"""
import tempfile
from pathlib import Path

import pytest

from legfed.conversion.assembler import GraphAssembler
from legfed.conversion.registry import EntityRegistry
from legfed.conversion.sink import MemorySink


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_file(temp_dir):
    """Create a temporary file."""
    def _create_file(name: str, content: str = "") -> Path:
        file_path = temp_dir / name
        file_path.write_text(content)
        return file_path
    return _create_file


@pytest.fixture
def registry():
    return EntityRegistry()


@pytest.fixture
def assembler(registry):
    return GraphAssembler(registry)


@pytest.fixture
def memory_sink():
    return MemorySink()


@pytest.fixture
def sample_cmap_content():
    """CMap export with one linkage group, one QTL and one marker."""
    return (
        "map_acc\tmap_name\tmap_start\tmap_stop\tfeature_acc\tfeature_name\t"
        "feature_aliases\tfeature_start\tfeature_stop\tfeature_type_acc\tis_landmark\n"
        "LG1\tGmComposite2003_A1\t0.0\t120.5\tQTL001\tSeed weight 1-1\t\t10.0\t15.0\tQTL\t0\n"
        "LG1\tGmComposite2003_A1\t0.0\t120.5\tMRK001\tSatt300\t\t12.0\t12.0\tSSR\t1\n"
    )


@pytest.fixture
def sample_synteny_gff_content():
    """DAGchainer synteny GFF with two blocks on the same target chromosome."""
    return (
        "##gff-version 3\n"
        "#SourceTaxonID\t3847\n"
        "#TargetTaxonID\t3885\n"
        "glyma.Chr01\tDAGchainer\tsyntenic_region\t1000\t5000\t250.0\t+\t.\t"
        "Name=glyma.Chr01.1+;Target=phavu.Chr02:2000..6000;median_Ks=0.12\n"
        "glyma.Chr01\tDAGchainer\tsyntenic_region\t8000\t9000\t120.0\t-\t.\t"
        "Name=glyma.Chr01.2-;Target=phavu.Chr02:7000..9000;median_Ks=0.30\n"
    )
