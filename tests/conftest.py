"""
pytest configuration and shared fixtures for catalog tests.
"""

import shutil
import sys
from pathlib import Path

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config.settings import LoggingConfig, PipelineConfig, SourceConfig  # noqa: E402
from src.pipeline import load_catalog  # noqa: E402

SAMPLE_DATA_DIR = project_root / "data"


@pytest.fixture
def data_dir(tmp_path) -> Path:
    """A writable copy of the sample data sources."""
    target = tmp_path / "data"
    shutil.copytree(SAMPLE_DATA_DIR, target)
    return target


@pytest.fixture
def pipeline_config(data_dir) -> PipelineConfig:
    return PipelineConfig(
        sources=SourceConfig(data_dir=data_dir, base_url=None),
        logging=LoggingConfig(log_level="WARNING"),
    )


@pytest.fixture
def snapshot(pipeline_config):
    return load_catalog(pipeline_config)
