"""
Google Maps API Client.
Place autocomplete, place details and reverse geocoding over the public web services.
"""
import requests
import logging
from flask import current_app

logger = logging.getLogger(__name__)

class MapsServiceError(Exception):
    """Raised when the mapping service rejects or fails a request."""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status

class MapsServiceLoadError(MapsServiceError):
    """Raised when the mapping service cannot be used at all (bad or missing key)."""

class GoogleMapsClient:
    """Client for the Google Maps Places and Geocoding web services."""

    def __init__(self, api_key=None, base_url=None, timeout=None, country=None):
        config = GoogleMapsClient._get_config()
        self.api_key = api_key if api_key is not None else config['api_key']
        self.base_url = (base_url or config['base_url']).rstrip('/')
        self.timeout = timeout or config['timeout']
        self.country = country or config['country']

    @staticmethod
    def _get_config():
        """Get current config values, with fallback defaults."""
        from center_finder.config import Config

        try:
            # Try to get from Flask app context
            if current_app:
                return {
                    'api_key': current_app.config.get('GOOGLE_MAPS_API_KEY', Config.GOOGLE_MAPS_API_KEY),
                    'base_url': current_app.config.get('GOOGLE_MAPS_API_BASE_URL', Config.GOOGLE_MAPS_API_BASE_URL),
                    'timeout': current_app.config.get('GOOGLE_MAPS_API_TIMEOUT', Config.GOOGLE_MAPS_API_TIMEOUT),
                    'country': current_app.config.get('SEARCH_COUNTRY', Config.SEARCH_COUNTRY),
                }
        except RuntimeError:
            # Not in Flask app context, use defaults
            pass

        return {
            'api_key': Config.GOOGLE_MAPS_API_KEY,
            'base_url': Config.GOOGLE_MAPS_API_BASE_URL,
            'timeout': Config.GOOGLE_MAPS_API_TIMEOUT,
            'country': Config.SEARCH_COUNTRY,
        }

    @property
    def has_valid_key(self):
        from center_finder.config import Config
        return Config.has_valid_maps_key(self.api_key)

    def _get(self, path, params, label):
        """
        Issue a GET against the Maps API and return the decoded payload.

        Args:
            path: Path below the base URL (e.g. '/geocode/json')
            params: Query parameters, without the key
            label: Short description for log lines

        Returns:
            dict: Response body with status 'OK' or 'ZERO_RESULTS'

        Raises:
            MapsServiceLoadError: If the key is missing or the request is denied
            MapsServiceError: For any other non-OK status
            requests.RequestException: If the HTTP request fails
        """
        if not self.has_valid_key:
            raise MapsServiceLoadError("Google Maps API key is missing or invalid")

        url = f"{self.base_url}{path}"
        try:
            # Never log the key
            logger.info(f"API Call: GET {url} ({label})")
            response = requests.get(url, params={**params, 'key': self.api_key}, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout:
            logger.error(f"Timeout calling Google Maps ({label})")
            raise
        except requests.exceptions.RequestException as e:
            logger.error(f"Error calling Google Maps ({label}): {e}")
            raise
        except ValueError as e:
            logger.error(f"Invalid JSON from Google Maps ({label}): {e}")
            raise MapsServiceError("Invalid response from Google Maps") from e

        status = data.get('status', 'UNKNOWN_ERROR')
        logger.info(f"API Response: Status {response.status_code}, Maps status {status} ({label})")

        if status in ('OK', 'ZERO_RESULTS'):
            return data
        message = data.get('error_message') or f"Google Maps returned {status}"
        if status == 'REQUEST_DENIED':
            raise MapsServiceLoadError(message, status=status)
        raise MapsServiceError(message, status=status)

    def autocomplete(self, text, session_token=None):
        """
        Fetch place predictions for free text, restricted to the search country.

        Args:
            text: Partial address typed by the user
            session_token: Optional autocomplete session token

        Returns:
            list: [{'place_id': ..., 'description': ...}, ...]
        """
        text = (text or '').strip()
        if not text:
            return []

        params = {'input': text, 'components': f"country:{self.country}"}
        if session_token:
            params['sessiontoken'] = session_token

        data = self._get('/place/autocomplete/json', params, 'autocomplete')
        return [
            {'place_id': p.get('place_id'), 'description': p.get('description', '')}
            for p in data.get('predictions', [])
            if p.get('place_id')
        ]

    def place_details(self, place_id, fields=('geometry', 'formatted_address')):
        """
        Fetch details for one place.

        Args:
            place_id: Place ID from an autocomplete prediction
            fields: Place fields to request

        Returns:
            dict or None: Place result ({'geometry': ..., 'formatted_address': ...}), None if not found
        """
        if not place_id:
            return None
        try:
            data = self._get('/place/details/json', {'place_id': place_id, 'fields': ','.join(fields)}, 'place details')
        except MapsServiceError as e:
            if e.status in ('NOT_FOUND', 'INVALID_REQUEST'):
                logger.warning(f"No place found for place_id {place_id}: {e.status}")
                return None
            raise
        return data.get('result') or None

    def reverse_geocode(self, lat, lng):
        """
        Look up a human-readable address for coordinates.

        Args:
            lat: Latitude
            lng: Longitude

        Returns:
            str or None: Formatted address of the first result, None if nothing was found
        """
        data = self._get('/geocode/json', {'latlng': f"{lat},{lng}"}, 'reverse geocode')
        results = data.get('results', [])
        if not results:
            logger.warning(f"No address found for coordinates {lat},{lng}")
            return None
        return results[0].get('formatted_address')
