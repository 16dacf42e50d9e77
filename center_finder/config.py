"""
Configuration classes for Flask application.
Read-only directory: no database, no email, no authentication.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Values that ship in .env templates and must never be treated as real keys
PLACEHOLDER_API_KEYS = {'', 'your_api_key', 'your-google-maps-api-key', 'YOUR_API_KEY', 'changeme'}

class Config:
    """Base configuration class."""
    # Flask core settings
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR', 'logs')

    # Center dataset (static, read-only)
    CENTERS_DATA_FILE = os.environ.get('CENTERS_DATA_FILE', str(PROJECT_ROOT / 'data' / 'centers.json'))

    # Region that stands in for states without a regional classification.
    # Region mismatches are never redirected when a state resolves to it.
    CATCH_ALL_REGION = os.environ.get('CATCH_ALL_REGION', 'INDIA')

    # Google Maps configuration
    GOOGLE_MAPS_API_KEY = os.environ.get('GOOGLE_MAPS_API_KEY', '')
    GOOGLE_MAPS_API_BASE_URL = os.environ.get('GOOGLE_MAPS_API_BASE_URL', 'https://maps.googleapis.com/maps/api')
    GOOGLE_MAPS_API_TIMEOUT = int(os.environ.get('GOOGLE_MAPS_API_TIMEOUT', 10))  # seconds

    # Location search
    SEARCH_COUNTRY = os.environ.get('SEARCH_COUNTRY', 'in')
    SEARCH_FIELDS = ['geometry', 'formatted_address']
    SEARCH_RADIUS_KM = float(os.environ.get('SEARCH_RADIUS_KM', 50))
    SEARCH_MAX_RESULTS = int(os.environ.get('SEARCH_MAX_RESULTS', 20))

    # Passed to navigator.geolocation.getCurrentPosition by the search bar script
    GEOLOCATION_OPTIONS = {
        'enableHighAccuracy': True,
        'timeout': 10000,  # milliseconds
        'maximumAge': 0
    }

    @staticmethod
    def has_valid_maps_key(api_key):
        """
        Check whether a Google Maps API key looks usable.

        Args:
            api_key: Key from configuration (may be None)

        Returns:
            bool: False for missing keys and known placeholders
        """
        if api_key is None:
            return False
        return api_key.strip() not in PLACEHOLDER_API_KEYS

class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True

class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False

class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    WTF_CSRF_ENABLED = False
    GOOGLE_MAPS_API_KEY = 'test-key'
    CENTERS_DATA_FILE = str(PROJECT_ROOT / 'tests' / 'fixtures' / 'centers.json')

config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
