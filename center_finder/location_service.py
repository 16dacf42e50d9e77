"""
Mapping and geolocation service used by the location search widget.

The widget never talks to Google Maps or the browser directly; it receives a
LocationService when it is constructed. WebLocationService is the
implementation used by the Flask routes: place lookups and reverse geocoding
go through GoogleMapsClient, and the device position is the one the browser
reported with the submitted search form.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from center_finder.maps_client import GoogleMapsClient, MapsServiceError, MapsServiceLoadError

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class Position:
    latitude: float
    longitude: float

class GeolocationError(Exception):
    """Device position could not be obtained. Codes follow the W3C Geolocation API."""

    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3

    def __init__(self, code, message=''):
        super().__init__(message or f"Geolocation error {code}")
        self.code = code

class LocationService(ABC):
    """Mapping service and device position, as seen by the search widget."""

    @property
    @abstractmethod
    def has_credentials(self) -> bool:
        """Whether service credentials are configured at all."""

    @property
    def supports_geolocation(self) -> bool:
        return True

    @abstractmethod
    def load(self) -> None:
        """
        Initialize the mapping service.

        Raises:
            MapsServiceError: If the service cannot be initialized
        """

    @abstractmethod
    def attach_autocomplete(self, on_place_changed: Callable[[dict], None], country: str, fields) -> None:
        """Register the callback fired with the selected place."""

    @abstractmethod
    def get_current_position(self, on_success: Callable[[Position], None],
                             on_error: Callable[[GeolocationError], None], options: dict) -> None:
        """Obtain the device position once and report it to exactly one callback."""

    @abstractmethod
    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[str]:
        """
        Address for coordinates, None if nothing was found.

        Raises:
            MapsServiceError: If the lookup failed
        """

class WebLocationService(LocationService):
    """
    LocationService for one search request.

    Args:
        client: GoogleMapsClient used for place details and geocoding
        position: Position reported by the browser, if any
        geolocation_error: W3C error code reported by the browser, if any
        geolocation_supported: False when the browser has no geolocation API
    """

    def __init__(self, client: GoogleMapsClient, position: Optional[Position] = None,
                 geolocation_error: Optional[int] = None, geolocation_supported: bool = True):
        self.client = client
        self.position = position
        self.geolocation_error = geolocation_error
        self.geolocation_supported = geolocation_supported
        self._on_place_changed = None
        self._fields = ('geometry', 'formatted_address')

    @property
    def has_credentials(self):
        return self.client.has_valid_key

    @property
    def supports_geolocation(self):
        return self.geolocation_supported

    def load(self):
        # The web services need no script bootstrap; a usable key is the only precondition
        if not self.client.has_valid_key:
            raise MapsServiceLoadError("Google Maps API key is missing or invalid")

    def attach_autocomplete(self, on_place_changed, country, fields):
        self.client.country = country
        self._fields = tuple(fields)
        self._on_place_changed = on_place_changed

    def select_place(self, place_id, description=''):
        """
        Resolve a selected autocomplete prediction and fire the place-changed callback.

        Args:
            place_id: Place ID of the chosen prediction
            description: Prediction text, used when details carry no address

        Raises:
            MapsServiceError: If the details lookup failed
        """
        if self._on_place_changed is None:
            logger.warning("Place selected before autocomplete was attached")
            return

        try:
            place = self.client.place_details(place_id, fields=self._fields) or {}
        except requests.exceptions.RequestException as e:
            raise MapsServiceError(f"Place details request failed: {e}") from e

        if description and not place.get('formatted_address'):
            place = {**place, 'formatted_address': description}
        self._on_place_changed(place)

    def get_current_position(self, on_success, on_error, options):
        if self.geolocation_error is not None:
            on_error(GeolocationError(self.geolocation_error))
        elif self.position is None:
            on_error(GeolocationError(GeolocationError.POSITION_UNAVAILABLE))
        else:
            on_success(self.position)

    def reverse_geocode(self, latitude, longitude):
        try:
            return self.client.reverse_geocode(latitude, longitude)
        except requests.exceptions.RequestException as e:
            raise MapsServiceError(f"Reverse geocoding request failed: {e}") from e
