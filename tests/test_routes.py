"""
Tests for application routes.
"""
import json
import pytest
from unittest.mock import Mock, patch
from center_finder.maps_client import MapsServiceError

def _response(payload, status_code=200):
    mock_response = Mock()
    mock_response.json.return_value = payload
    mock_response.status_code = status_code
    mock_response.raise_for_status.return_value = None
    return mock_response

class TestDistrictRoutes:
    """Test cases for /<region>/<state>/<district>."""

    def test_wrong_region_renders_holding_page(self, client):
        """Test a region mismatch renders the redirect page instead of listings."""
        response = client.get('/india/maharashtra/pune')

        assert response.status_code == 200
        assert response.headers['Refresh'] == '0; url=/west-zone/maharashtra/pune'
        assert b'Redirecting to correct region...' in response.data
        assert b'The state Maharashtra belongs to region West Zone, not INDIA.' in response.data
        assert b'href="/west-zone/maharashtra/pune"' in response.data
        assert b'Brahma Kumaris Kothrud' not in response.data

    def test_correct_region_renders_listing(self, client):
        response = client.get('/west-zone/maharashtra/pune')

        assert response.status_code == 200
        assert 'Refresh' not in response.headers
        assert b'Brahma Kumaris Pune Main' in response.data
        assert b'Brahma Kumaris Kothrud' in response.data
        assert b'<title>Pune - Rajyog Meditation Centers - Maharashtra, INDIA - Brahma Kumaris</title>' in response.data
        # Other districts of the state are linked
        assert b'href="/west-zone/maharashtra/mumbai"' in response.data

    def test_catch_all_region_renders_for_any_region(self, client):
        response = client.get('/north-zone/sikkim/east-sikkim')

        assert response.status_code == 200
        assert 'Refresh' not in response.headers
        assert b'Brahma Kumaris Gangtok' in response.data

    def test_unknown_state_renders_without_error(self, client):
        response = client.get('/west-zone/xyz123/pune')

        assert response.status_code == 200
        assert b'xyz123' in response.data
        assert b'No centers found in pune' in response.data

    def test_district_scoped_by_state(self, client):
        response = client.get('/east-zone/bihar/aurangabad')

        assert response.status_code == 200
        assert b'Brahma Kumaris Aurangabad Bihar' in response.data
        assert b'Brahma Kumaris Aurangabad Cidco' not in response.data

    def test_encoded_segments(self, client):
        response = client.get('/east%20zone/bihar/patna')

        assert response.status_code == 200
        assert b'Brahma Kumaris Patna' in response.data

    def test_non_ascii_district_redirect_resolves(self, client, app, tmp_path):
        """Test the redirect target for a district with no ASCII slug is a working page."""
        dataset = tmp_path / 'centers.json'
        dataset.write_text(json.dumps({
            'regions': [{'name': 'West Zone', 'states': ['Maharashtra']}],
            'centers': [{'name': 'Brahma Kumaris Pune Hindi', 'state': 'Maharashtra',
                         'district': 'पुणे', 'region': 'West Zone'}]
        }), encoding='utf-8')
        app.config['CENTERS_DATA_FILE'] = str(dataset)
        target = '/west-zone/maharashtra/%E0%A4%AA%E0%A5%81%E0%A4%A3%E0%A5%87'

        response = client.get('/india/maharashtra/%E0%A4%AA%E0%A5%81%E0%A4%A3%E0%A5%87')

        assert response.headers['Refresh'] == f'0; url={target}'

        followed = client.get(target)

        assert followed.status_code == 200
        assert 'Refresh' not in followed.headers
        assert b'Brahma Kumaris Pune Hindi' in followed.data

    def test_configured_catch_all_region(self, client, app):
        """Test the catch-all region comes from CATCH_ALL_REGION."""
        app.config['CATCH_ALL_REGION'] = 'West Zone'

        response = client.get('/east-zone/maharashtra/pune')

        assert response.status_code == 200
        assert 'Refresh' not in response.headers
        assert b'Brahma Kumaris Kothrud' in response.data

class TestBrowseRoutes:
    """Test cases for home, region and state pages."""

    def test_index(self, client):
        response = client.get('/')

        assert response.status_code == 200
        assert b'West Zone' in response.data
        assert b'href="/west-zone/maharashtra"' in response.data
        assert b'Enter your location to find centers near you...' in response.data

    def test_index_prefills_address(self, client):
        response = client.get('/?address=Pune')
        assert b'value="Pune"' in response.data

    def test_region_page(self, client):
        response = client.get('/west-zone')

        assert response.status_code == 200
        assert b'Maharashtra' in response.data
        assert b'Bihar' not in response.data

    def test_unknown_region_page(self, client):
        response = client.get('/atlantis')
        assert response.status_code == 404

    def test_state_page(self, client):
        response = client.get('/west-zone/maharashtra')

        assert response.status_code == 200
        assert b'href="/west-zone/maharashtra/aurangabad"' in response.data
        assert b'href="/west-zone/maharashtra/pune"' in response.data

    def test_state_page_wrong_region_redirects(self, client):
        response = client.get('/east-zone/maharashtra')

        assert response.headers['Refresh'] == '0; url=/west-zone/maharashtra'
        assert b'Redirecting to correct region...' in response.data

    def test_missing_dataset(self, client, app):
        app.config['CENTERS_DATA_FILE'] = '/nonexistent/centers.json'

        response = client.get('/')

        assert response.status_code == 500
        assert b'Center listings are unavailable' in response.data

    def test_missing_maps_key_disables_search(self, client, app):
        app.config['GOOGLE_MAPS_API_KEY'] = ''

        response = client.get('/')

        assert response.status_code == 200
        assert b'Location search unavailable (API key missing)' in response.data
        assert b'Google Maps API key is missing or invalid.' in response.data

class TestCenterSearchRoutes:
    """Test cases for /centers and the search submissions."""

    def test_centers_near_position(self, client):
        response = client.get('/centers?lat=18.52&lng=73.85&address=Pune%2C%20Maharashtra')

        assert response.status_code == 200
        assert b'Centers near Pune, Maharashtra' in response.data
        assert b'Brahma Kumaris Pune Main' in response.data
        assert b'Brahma Kumaris Patna' not in response.data

    def test_centers_without_position(self, client):
        response = client.get('/centers')

        assert response.status_code == 200
        assert b'Search for a location to find centers near you.' in response.data

    def test_centers_nothing_nearby(self, client):
        response = client.get('/centers?lat=12.97&lng=77.59&address=Bengaluru')

        assert response.status_code == 200
        assert b'No centers found within 50 km' in response.data

    @patch('center_finder.maps_client.GoogleMapsClient.reverse_geocode')
    def test_locate_redirects_to_results(self, mock_reverse, client):
        mock_reverse.return_value = 'Pune, Maharashtra, India'

        response = client.post('/search/locate', data={'latitude': '18.52', 'longitude': '73.85'})

        assert response.status_code == 302
        assert '/centers?lat=18.52&lng=73.85&address=Pune%2C%20Maharashtra%2C%20India' in response.location
        mock_reverse.assert_called_once_with(18.52, 73.85)

    @patch('center_finder.maps_client.GoogleMapsClient.reverse_geocode')
    def test_locate_permission_denied(self, mock_reverse, client):
        response = client.post('/search/locate', data={'error_code': '1'})

        assert response.status_code == 200
        assert b'Location access denied. Please allow location access in your browser.' in response.data
        mock_reverse.assert_not_called()

    def test_locate_unsupported(self, client):
        response = client.post('/search/locate', data={'supported': '0'})

        assert response.status_code == 200
        assert b'Geolocation is not supported by your browser' in response.data

    def test_locate_empty_submission_is_unsupported(self, client):
        """Test a submission without position or error code (no geolocation API, no script)."""
        response = client.post('/search/locate', data={})

        assert response.status_code == 200
        assert b'Geolocation is not supported by your browser' in response.data
        assert b'Location information is unavailable' not in response.data

    @patch('center_finder.maps_client.requests.get')
    def test_locate_request_denied_disables_search(self, mock_get, client):
        """Test a rejected key during reverse geocoding is reported as a load failure."""
        mock_get.return_value = _response({'status': 'REQUEST_DENIED',
                                           'error_message': 'The provided API key is invalid.'})

        response = client.post('/search/locate', data={'latitude': '18.52', 'longitude': '73.85'})

        assert response.status_code == 200
        assert b'Failed to load Google Maps. Please try again later.' in response.data
        assert b'Could not determine your address' not in response.data
        assert mock_get.call_count == 1

    @patch('center_finder.maps_client.requests.get')
    def test_place_selection_request_denied_disables_search(self, mock_get, client):
        mock_get.return_value = _response({'status': 'REQUEST_DENIED'})

        response = client.post('/search/place', data={'place_id': 'abc', 'address': 'Pune'})

        assert response.status_code == 200
        assert b'Failed to load Google Maps. Please try again later.' in response.data
        assert b'Unable to look up that location.' not in response.data
        assert b'No details available for that location.' not in response.data

    @patch('center_finder.maps_client.GoogleMapsClient.reverse_geocode')
    def test_locate_geocoder_error(self, mock_reverse, client):
        mock_reverse.side_effect = MapsServiceError('OVER_QUERY_LIMIT')

        response = client.post('/search/locate', data={'latitude': '18.52', 'longitude': '73.85'})

        assert response.status_code == 200
        assert b'Could not determine your address' in response.data

    @patch('center_finder.maps_client.GoogleMapsClient.place_details')
    def test_place_selection_redirects(self, mock_details, client):
        mock_details.return_value = {
            'geometry': {'location': {'lat': 18.5204, 'lng': 73.8567}},
            'formatted_address': 'Pune, Maharashtra, India'
        }

        response = client.post('/search/place', data={'place_id': 'abc', 'address': 'Pune'})

        assert response.status_code == 302
        assert '/centers?lat=18.5204&lng=73.8567&address=Pune%2C%20Maharashtra%2C%20India' in response.location

    @patch('center_finder.maps_client.GoogleMapsClient.place_details')
    def test_place_selection_without_geometry(self, mock_details, client):
        mock_details.return_value = {'formatted_address': 'Pune'}

        response = client.post('/search/place', data={'place_id': 'abc', 'address': 'Pune'})

        assert response.status_code == 200
        assert b'No details available for that location.' in response.data

    def test_place_selection_requires_place_id(self, client):
        response = client.post('/search/place', data={'address': 'Pune'})

        assert response.status_code == 400
        assert b'Please choose a location from the suggestions.' in response.data

class TestAutocompleteApi:
    """Test cases for /api/places/autocomplete."""

    @patch('center_finder.maps_client.GoogleMapsClient.autocomplete')
    def test_autocomplete_success(self, mock_autocomplete, client):
        mock_autocomplete.return_value = [{'place_id': 'abc', 'description': 'Pune, Maharashtra, India'}]

        response = client.get('/api/places/autocomplete?input=Pun')

        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['predictions'][0]['place_id'] == 'abc'
        mock_autocomplete.assert_called_once_with('Pun', session_token=None)

    @patch('center_finder.maps_client.GoogleMapsClient.autocomplete')
    def test_autocomplete_service_error(self, mock_autocomplete, client):
        mock_autocomplete.side_effect = MapsServiceError('OVER_QUERY_LIMIT')

        response = client.get('/api/places/autocomplete?input=Pun')

        assert response.status_code == 502
        assert 'error' in response.get_json()

    def test_autocomplete_missing_key(self, client, app):
        app.config['GOOGLE_MAPS_API_KEY'] = ''

        response = client.get('/api/places/autocomplete?input=Pun')

        assert response.status_code == 503
        assert response.get_json()['success'] is False
