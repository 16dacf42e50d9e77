"""
Main application routes.
Read-only directory: anonymous usage, no authentication required.
"""
from flask import Blueprint, abort, current_app, jsonify, make_response, redirect, render_template, request
import requests
from center_finder.canonical import NavigationCommand, decide_route, page_metadata, resolve_location
from center_finder.center_data import get_directory
from center_finder.forms import LocateForm, PlaceSearchForm
from center_finder.location_service import Position, WebLocationService
from center_finder.maps_client import GoogleMapsClient, MapsServiceError, MapsServiceLoadError
from center_finder.search_widget import MISSING_KEY_MESSAGE, SearchWidget
from center_finder.slugs import decode_segment, format_center_url, slug_key
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('main', __name__)

def _build_search_widget(service=None, value=None, navigate=None):
    """Search widget wired to a per-request location service, already initialized."""
    if service is None:
        service = WebLocationService(GoogleMapsClient())
    widget = SearchWidget(
        service,
        navigate=navigate,
        value=value if value is not None else request.args.get('address', ''),
        country=current_app.config['SEARCH_COUNTRY'],
        fields=current_app.config['SEARCH_FIELDS'],
        geolocation_options=current_app.config['GEOLOCATION_OPTIONS'],
    )
    widget.initialize()
    return widget

def _render_index(widget, status=200):
    directory = get_directory()
    regions = [
        {'region': r, 'states': directory.states_in_region(r.name)}
        for r in directory.regions()
    ]
    return render_template('index.html',
                           regions=regions,
                           widget=widget,
                           place_form=PlaceSearchForm(),
                           locate_form=LocateForm()), status

@bp.route('/')
def index():
    """Homepage - location search and browse by region."""
    return _render_index(_build_search_widget())

@bp.route('/centers')
def centers():
    """Centers near a searched position (lat, lng, address query parameters)."""
    lat = request.args.get('lat', type=float)
    lng = request.args.get('lng', type=float)
    address = request.args.get('address', '')
    widget = _build_search_widget(value=address)

    if lat is None or lng is None or not (-90 <= lat <= 90) or not (-180 <= lng <= 180):
        return render_template('centers.html',
                               widget=widget,
                               place_form=PlaceSearchForm(),
                               locate_form=LocateForm(),
                               centers=[],
                               address=address,
                               error="Search for a location to find centers near you."), 200

    radius_km = current_app.config['SEARCH_RADIUS_KM']
    nearby = get_directory().nearest_centers(lat, lng,
                                             radius_km=radius_km,
                                             limit=current_app.config['SEARCH_MAX_RESULTS'])
    logger.info(f"Center search at {lat},{lng}: {len(nearby)} centers within {radius_km} km")

    return render_template('centers.html',
                           widget=widget,
                           place_form=PlaceSearchForm(),
                           locate_form=LocateForm(),
                           centers=nearby,
                           address=address,
                           lat=lat,
                           lng=lng,
                           radius_km=radius_km,
                           error=None)

@bp.route('/search/place', methods=['POST'])
def search_place():
    """Autocomplete selection submitted by the search box."""
    form = PlaceSearchForm()
    targets = []
    service = WebLocationService(GoogleMapsClient())
    widget = _build_search_widget(service, value=form.address.data or '', navigate=targets.append)

    if not form.validate_on_submit():
        widget.location_error = "Please choose a location from the suggestions."
        return _render_index(widget, status=400)

    if widget.is_loaded:
        try:
            service.select_place(form.place_id.data, description=form.address.data or '')
        except MapsServiceLoadError as e:
            widget.mark_load_failed(e)
        except MapsServiceError as e:
            logger.error(f"Error resolving place {form.place_id.data}: {e}")
            widget.location_error = "Unable to look up that location. Please try again."

    if targets:
        return redirect(targets[0])
    if not widget.location_error and not widget.status_message:
        widget.location_error = "No details available for that location. Please choose another suggestion."
    return _render_index(widget)

@bp.route('/search/locate', methods=['POST'])
def search_locate():
    """Current position (or geolocation failure) reported by the browser."""
    form = LocateForm()
    if not form.validate_on_submit():
        if form.errors.get('csrf_token'):
            abort(400)
        logger.warning(f"Invalid position submitted: {form.errors}")

    position = None
    if form.latitude.data is not None and form.longitude.data is not None and not form.errors:
        position = Position(form.latitude.data, form.longitude.data)

    # A browser without the geolocation API (or without scripting) posts neither a position nor an error
    reported = bool(form.latitude.raw_data and form.latitude.raw_data[0]) or form.error_code.data is not None

    targets = []
    service = WebLocationService(
        GoogleMapsClient(),
        position=position,
        geolocation_error=form.error_code.data,
        geolocation_supported=reported and form.supported.data != '0',
    )
    widget = _build_search_widget(service, navigate=targets.append)
    widget.use_current_location()

    if targets:
        return redirect(targets[0])
    return _render_index(widget)

@bp.route('/api/places/autocomplete')
def places_autocomplete():
    """JSON place suggestions for the search box."""
    client = GoogleMapsClient()
    if not client.has_valid_key:
        return jsonify({'success': False, 'error': MISSING_KEY_MESSAGE}), 503

    text = request.args.get('input', '')
    try:
        predictions = client.autocomplete(text, session_token=request.args.get('session'))
    except (MapsServiceError, requests.exceptions.RequestException) as e:
        logger.error(f"Autocomplete failed for '{text}': {e}")
        return jsonify({'success': False, 'error': 'Location suggestions are unavailable right now.'}), 502

    return jsonify({'success': True, 'predictions': predictions})

@bp.route('/<region>')
def region_page(region):
    """States belonging to one region."""
    directory = get_directory()
    region_slug = decode_segment(region)
    region_name = directory.region_by_slug(region_slug)
    if region_name is None:
        abort(404)
    if region_slug != slug_key(region_name):
        return redirect(f"/{slug_key(region_name)}", code=301)

    return render_template('region.html',
                           region=region_name,
                           region_slug=slug_key(region_name),
                           states=directory.states_in_region(region_name))

def _render_redirect(resolved, decision):
    """Holding page for a region mismatch, followed by the navigation command."""
    response = make_response(render_template('redirecting.html',
                                              resolved=resolved,
                                              target_url=decision.target_url))
    return NavigationCommand(decision.target_url).apply(response)

@bp.route('/<region>/<state>')
def state_page(region, state):
    """Districts of one state."""
    directory = get_directory()
    resolved = resolve_location(directory, region, state)
    decision = decide_route(resolved, current_app.config['CATCH_ALL_REGION'])
    if decision.should_redirect:
        return _render_redirect(resolved, decision)

    districts = directory.districts_by_state(resolved.state)
    return render_template('state.html',
                           resolved=resolved,
                           region_url=f"/{slug_key(resolved.state_region)}",
                           districts=[
                               (d, format_center_url(resolved.region, resolved.state, d.name))
                               for d in districts
                           ])

@bp.route('/<region>/<state>/<district>')
def district_page(region, state, district):
    """Centers in one district, or a redirect when the region is wrong for the state."""
    directory = get_directory()
    resolved = resolve_location(directory, region, state, district)
    decision = decide_route(resolved, current_app.config['CATCH_ALL_REGION'])
    if decision.should_redirect:
        return _render_redirect(resolved, decision)

    other_districts = [
        (d, format_center_url(resolved.region, resolved.state, d.name))
        for d in directory.districts_by_state(resolved.state)
        if d.name != resolved.district
    ]
    return render_template('district.html',
                           resolved=resolved,
                           meta=page_metadata(resolved),
                           centers=resolved.centers,
                           other_districts=other_districts,
                           state_url=format_center_url(resolved.region, resolved.state))
