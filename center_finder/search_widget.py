"""
Location search box state.

Turns an autocomplete selection or the device position into a
(latitude, longitude, address) triple. The triple is passed to an
on_search_result callback when one is given; otherwise the widget navigates
to the results page with the triple in the query string.

Failures never propagate: they become a plain-text message on the widget
and the flow stops without navigating.
"""
import logging
from urllib.parse import quote

from center_finder.location_service import GeolocationError
from center_finder.maps_client import MapsServiceError, MapsServiceLoadError

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER = 'Enter your location to find centers near you...'
MISSING_KEY_PLACEHOLDER = 'Location search unavailable (API key missing)'
CURRENT_LOCATION_LABEL = 'Current Location'

MISSING_KEY_MESSAGE = 'Google Maps API key is missing or invalid. Please add a valid key to enable location search.'
LOAD_FAILURE_MESSAGE = 'Failed to load Google Maps. Please try again later.'
UNSUPPORTED_MESSAGE = 'Geolocation is not supported by your browser'
ADDRESS_LOOKUP_MESSAGE = 'Could not determine your address'
GENERIC_LOCATION_MESSAGE = 'Failed to get your location'

GEOLOCATION_MESSAGES = {
    GeolocationError.PERMISSION_DENIED: 'Location access denied. Please allow location access in your browser.',
    GeolocationError.POSITION_UNAVAILABLE: 'Location information is unavailable',
    GeolocationError.TIMEOUT: 'Location request timed out',
}

DEFAULT_GEOLOCATION_OPTIONS = {'enableHighAccuracy': True, 'timeout': 10000, 'maximumAge': 0}

def build_results_url(lat, lng, address):
    """Results page URL for a searched position; the address is percent-encoded."""
    return f"/centers?lat={lat}&lng={lng}&address={quote(address or '', safe='')}"

class SearchWidget:
    """
    One search box and the two ways of filling it.

    Args:
        service: LocationService the widget talks to
        on_search_result: Optional callback(lat, lng, address); replaces navigation
        navigate: Callback(url) used when on_search_result is not given
        value: Initial input value (e.g. from the 'address' query parameter)
        placeholder: Placeholder shown when search is available
        country: Country restriction for autocomplete
        fields: Place fields requested on selection
        geolocation_options: Options passed to get_current_position
    """

    def __init__(self, service, on_search_result=None, navigate=None, value=None,
                 placeholder=DEFAULT_PLACEHOLDER, country='in', fields=('geometry', 'formatted_address'),
                 geolocation_options=None):
        self.service = service
        self.on_search_result = on_search_result
        self.navigate = navigate
        self.input_value = value or ''
        self._placeholder = placeholder
        self.country = country
        self.fields = tuple(fields)
        self.geolocation_options = dict(geolocation_options or DEFAULT_GEOLOCATION_OPTIONS)

        self.has_valid_key = service.has_credentials
        self.is_loaded = False
        self.is_loading = self.has_valid_key
        self.is_locating = False
        self.load_error = None
        self.location_error = None
        self.result = None

    def initialize(self):
        """
        Load the mapping service and attach autocomplete.

        Does nothing without credentials. A load failure is permanent for this
        widget: later calls do not retry.
        """
        if not self.has_valid_key or self.is_loaded or self.load_error:
            return

        try:
            self.service.load()
        except MapsServiceError as e:
            self.mark_load_failed(e)
            return

        self.is_loaded = True
        self.is_loading = False
        try:
            self.service.attach_autocomplete(self.handle_place_changed, self.country, self.fields)
        except MapsServiceError as e:
            logger.error(f"Error initializing place autocomplete: {e}")

    def mark_load_failed(self, error):
        """The mapping service refused this site; search stays disabled for this widget."""
        logger.error(f"Error loading mapping service: {error}")
        self.load_error = LOAD_FAILURE_MESSAGE
        self.is_loaded = False
        self.is_loading = False

    @property
    def disabled(self):
        return self.is_loading or not self.has_valid_key or bool(self.load_error)

    @property
    def placeholder(self):
        return self._placeholder if self.has_valid_key else MISSING_KEY_PLACEHOLDER

    @property
    def status_message(self):
        """Static configuration message shown under the input, if any."""
        if not self.has_valid_key:
            return MISSING_KEY_MESSAGE
        return self.load_error

    def handle_place_changed(self, place):
        """Autocomplete selection: report the chosen place."""
        location = (place or {}).get('geometry', {}).get('location')
        if not location or location.get('lat') is None or location.get('lng') is None:
            logger.error("No details available for the place you searched")
            return

        address = place.get('formatted_address', '')
        self.input_value = address
        self._report(location['lat'], location['lng'], address)

    def use_current_location(self):
        """Geolocation button: obtain the device position, then report it."""
        self.is_locating = True
        self.location_error = None

        if not self.service.supports_geolocation:
            self._fail(UNSUPPORTED_MESSAGE)
            return

        self.service.get_current_position(self._on_position, self._on_position_error, self.geolocation_options)

    def _on_position(self, position):
        latitude, longitude = position.latitude, position.longitude
        address = CURRENT_LOCATION_LABEL

        if self.is_loaded:
            try:
                resolved = self.service.reverse_geocode(latitude, longitude)
            except MapsServiceLoadError as e:
                self.mark_load_failed(e)
                self.is_locating = False
                return
            except MapsServiceError as e:
                logger.error(f"Error getting location address: {e}")
                self._fail(ADDRESS_LOOKUP_MESSAGE)
                return
            if resolved:
                address = resolved
                self.input_value = address

        self._report(latitude, longitude, address)
        self.is_locating = False

    def _on_position_error(self, error):
        logger.warning(f"Error getting location: {error}")
        self._fail(GEOLOCATION_MESSAGES.get(getattr(error, 'code', None), GENERIC_LOCATION_MESSAGE))

    def _fail(self, message):
        self.location_error = message
        self.is_locating = False

    def _report(self, lat, lng, address):
        self.result = (lat, lng, address)
        if self.on_search_result:
            self.on_search_result(lat, lng, address)
        elif self.navigate:
            self.navigate(build_results_url(lat, lng, address))
