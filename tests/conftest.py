"""
Pytest configuration and fixtures.
"""
import pytest
from pathlib import Path
from center_finder import create_app
from center_finder.center_data import CenterDirectory
from center_finder.config import TestingConfig

FIXTURE_DATASET = Path(__file__).parent / 'fixtures' / 'centers.json'

@pytest.fixture
def app(tmp_path):
    """Create application for testing."""
    class Config(TestingConfig):
        LOG_DIR = str(tmp_path / 'logs')
        CENTERS_DATA_FILE = str(FIXTURE_DATASET)

    app = create_app(Config)
    app.config['TESTING'] = True
    app.config['WTF_CSRF_ENABLED'] = False  # Disable CSRF for testing
    return app

@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()

@pytest.fixture
def directory():
    """Center directory loaded from the fixture dataset."""
    return CenterDirectory.from_file(FIXTURE_DATASET, catch_all_region='INDIA')
