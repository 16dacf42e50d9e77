"""
Canonical names and region redirects for /{region}/{state}/{district} URLs.

A state belongs to exactly one region in the dataset. When a URL names a
different region, the page is not rendered; the visitor is sent to the
canonical URL instead. States in the catch-all region are always rendered.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from center_finder.center_data import Center, CenterDirectory
from center_finder.slugs import decode_segment, format_center_url

logger = logging.getLogger(__name__)

RENDER = 'render'
REDIRECT = 'redirect'

@dataclass
class ResolvedLocation:
    """Canonical names for one listing URL plus the centers it lists."""
    region: str
    state: str
    district: Optional[str]
    state_region: str
    centers: List[Center] = field(default_factory=list)
    url_region: str = ''

@dataclass(frozen=True)
class RouteDecision:
    action: str
    target_url: Optional[str] = None

    @property
    def should_redirect(self):
        return self.action == REDIRECT

@dataclass(frozen=True)
class NavigationCommand:
    """
    Forced client-side navigation, applied to an already rendered response.

    The Refresh header navigates browsers without scripting; the holding page
    also carries the URL for its script hook and a manual link.
    """
    url: str

    def apply(self, response):
        response.headers['Refresh'] = f"0; url={self.url}"
        response.headers['X-Canonical-Location'] = self.url
        return response

def resolve_location(directory: CenterDirectory, region_segment, state_segment, district_segment=None) -> ResolvedLocation:
    """
    Resolve raw URL segments to canonical names.

    The state is resolved first because district names are only unique
    within a state. Any segment that does not resolve is kept verbatim
    (after decoding).

    Args:
        directory: Center directory for this request
        region_segment: Region path segment, possibly percent-encoded
        state_segment: State path segment, possibly percent-encoded
        district_segment: District path segment, or None for state pages

    Returns:
        ResolvedLocation
    """
    region_slug = decode_segment(region_segment)
    state_slug = decode_segment(state_segment)
    district_slug = decode_segment(district_segment) if district_segment is not None else None

    state = directory.state_by_slug(state_slug) or state_slug
    district = None
    if district_slug is not None:
        district = directory.district_by_slug(state, district_slug) or district_slug
    region = directory.region_by_slug(region_slug) or region_slug

    state_region = directory.region_for_state(state)
    centers = directory.centers_by_district(state, district) if district is not None else []

    return ResolvedLocation(
        region=region,
        state=state,
        district=district,
        state_region=state_region,
        centers=centers,
        url_region=region_slug,
    )

def decide_route(resolved: ResolvedLocation, catch_all_region: str) -> RouteDecision:
    """
    Decide whether a resolved location is rendered or redirected.

    Redirects only when the URL region differs from the state's region and
    that region is not the catch-all region.
    """
    if resolved.region != resolved.state_region and resolved.state_region != catch_all_region:
        target = format_center_url(resolved.state_region, resolved.state, resolved.district)
        logger.info(
            f"Region mismatch: state {resolved.state} belongs to {resolved.state_region}, "
            f"not {resolved.region}; redirecting to {target}"
        )
        return RouteDecision(REDIRECT, target)
    return RouteDecision(RENDER)

def page_metadata(resolved: ResolvedLocation):
    """
    Title, description and keywords for a district listing page.

    The region shown is the first matching center's own region tag, falling
    back to the region segment from the URL when the district has no centers.
    """
    district, state = resolved.district, resolved.state
    region = resolved.centers[0].region if resolved.centers else resolved.url_region
    return {
        'title': f"{district} - Rajyog Meditation Centers - {state}, {region} - Brahma Kumaris",
        'description': (
            f"Find Brahma Kumaris Rajyog Meditation centers in {district}, {state}. "
            f"View locations, contact information, and more."
        ),
        'keywords': (
            f"Brahma Kumaris, Rajyog Meditation centers, {district}, {state}, "
            f"spiritual centers, 7 day courses, meditation retreats"
        ),
    }
