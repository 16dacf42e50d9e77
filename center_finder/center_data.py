"""
Center directory backed by a static JSON dataset.
Read-only: the file is loaded at most once per request and never written.

Dataset layout:
    {
      "regions": [{"name": "West Zone", "states": ["Maharashtra", ...]}, ...],
      "centers": [{"name": ..., "address": ..., "region": ..., "state": ...,
                   "district": ..., "lat": ..., "lng": ...}, ...]
    }
"""
import json
import logging
import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional

from flask import current_app, g

from center_finder.slugs import slug_key

logger = logging.getLogger(__name__)

R_EARTH_KM = 6_371.0

class DirectoryLoadError(Exception):
    """Raised when the center dataset is missing or malformed."""

@dataclass(frozen=True)
class Region:
    name: str
    states: tuple = ()

    @property
    def slug(self):
        return slug_key(self.name)

@dataclass(frozen=True)
class State:
    name: str
    region: str

    @property
    def slug(self):
        return slug_key(self.name)

@dataclass(frozen=True)
class District:
    name: str
    state: str
    center_count: int = 0

    @property
    def slug(self):
        return slug_key(self.name)

@dataclass
class Center:
    name: str
    address: str
    region: str
    state: str
    district: str
    lat: Optional[float] = None
    lng: Optional[float] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    distance_km: Optional[float] = field(default=None, compare=False)

    @property
    def has_coordinates(self):
        return self.lat is not None and self.lng is not None

def haversine_km(lat1, lng1, lat2, lng2):
    """Great-circle distance between two points in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lng2 - lng1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * R_EARTH_KM * math.asin(math.sqrt(a))

class CenterDirectory:
    """
    Lookup table over regions, states, districts and centers.

    States are keyed by slug. Districts are only unique inside their state, so
    every district lookup is scoped by the owning state.
    """

    def __init__(self, regions: List[Region], centers: List[Center], catch_all_region: str):
        self.catch_all_region = catch_all_region
        self._regions = list(regions)
        self._centers = list(centers)

        self._regions_by_slug: Dict[str, Region] = {r.slug: r for r in self._regions}
        self._states_by_slug: Dict[str, State] = {}
        for region in self._regions:
            for state_name in region.states:
                slug = slug_key(state_name)
                if slug in self._states_by_slug:
                    existing = self._states_by_slug[slug]
                    logger.warning(
                        f"State '{state_name}' listed under both '{existing.region}' and '{region.name}', "
                        f"keeping '{existing.region}'"
                    )
                    continue
                self._states_by_slug[slug] = State(name=state_name, region=region.name)

        # States that only appear on center records fall back to the catch-all region
        for center in self._centers:
            slug = slug_key(center.state)
            if slug and slug not in self._states_by_slug:
                self._states_by_slug[slug] = State(name=center.state, region=catch_all_region)

    @classmethod
    def from_dict(cls, data, catch_all_region):
        """
        Build a directory from parsed dataset JSON.

        Raises:
            DirectoryLoadError: If the structure is not the expected shape
        """
        if not isinstance(data, dict):
            raise DirectoryLoadError("Dataset root must be an object")

        try:
            regions = [
                Region(name=r['name'], states=tuple(r.get('states', [])))
                for r in data.get('regions', [])
            ]
            centers = [
                Center(
                    name=c['name'],
                    address=c.get('address', ''),
                    region=c.get('region', catch_all_region),
                    state=c['state'],
                    district=c['district'],
                    lat=float(c['lat']) if c.get('lat') is not None else None,
                    lng=float(c['lng']) if c.get('lng') is not None else None,
                    phone=c.get('phone'),
                    email=c.get('email'),
                )
                for c in data.get('centers', [])
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise DirectoryLoadError(f"Malformed center dataset: {e}") from e

        return cls(regions, centers, catch_all_region=catch_all_region)

    @classmethod
    def from_file(cls, path, catch_all_region):
        """
        Load a directory from a JSON file.

        Args:
            path: Path to the dataset file
            catch_all_region: Region assigned to states no region lists

        Returns:
            CenterDirectory

        Raises:
            DirectoryLoadError: If the file is missing or cannot be parsed
        """
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError as e:
            logger.error(f"Center dataset not found: {path}")
            raise DirectoryLoadError(f"Center dataset not found: {path}") from e
        except json.JSONDecodeError as e:
            logger.error(f"JSON decode error reading center dataset {path}: {e}")
            raise DirectoryLoadError(f"Invalid JSON in center dataset {path}") from e

        directory = cls.from_dict(data, catch_all_region=catch_all_region)
        logger.debug(f"Loaded center dataset {path}: {len(directory._regions)} regions, {len(directory._centers)} centers")
        return directory

    def regions(self):
        """All regions in dataset order."""
        return list(self._regions)

    def states_in_region(self, region_name):
        """States whose authoritative region is region_name, sorted by name."""
        return sorted(
            (s for s in self._states_by_slug.values() if s.region == region_name),
            key=lambda s: s.name
        )

    def region_by_slug(self, slug) -> Optional[str]:
        if not slug:
            return None
        region = self._regions_by_slug.get(slug_key(slug))
        return region.name if region else None

    def state_by_slug(self, slug) -> Optional[str]:
        if not slug:
            return None
        state = self._states_by_slug.get(slug_key(slug))
        return state.name if state else None

    def district_by_slug(self, state, slug) -> Optional[str]:
        """
        Resolve a district slug within one state.

        Args:
            state: State name or slug that scopes the lookup
            slug: District slug

        Returns:
            str: Canonical district name, or None if the state has no such district
        """
        if not state or not slug:
            return None
        wanted = slug_key(slug)
        for district in self.districts_by_state(state):
            if district.slug == wanted:
                return district.name
        return None

    def region_for_state(self, state) -> str:
        """Authoritative region for a state; the catch-all region when unclassified."""
        known = self._states_by_slug.get(slug_key(state))
        return known.region if known else self.catch_all_region

    def districts_by_state(self, state) -> List[District]:
        """Districts with at least one center in the given state, sorted by name."""
        state_slug = slug_key(state)
        counts: Dict[str, int] = {}
        names: Dict[str, str] = {}
        for center in self._centers:
            if slug_key(center.state) != state_slug:
                continue
            key = slug_key(center.district)
            names.setdefault(key, center.district)
            counts[key] = counts.get(key, 0) + 1

        state_name = self.state_by_slug(state) or state
        return sorted(
            (District(name=names[k], state=state_name, center_count=counts[k]) for k in names),
            key=lambda d: d.name
        )

    def centers_by_district(self, state, district) -> List[Center]:
        """Centers in one district of one state, in dataset order."""
        state_slug, district_slug = slug_key(state), slug_key(district)
        return [
            c for c in self._centers
            if slug_key(c.state) == state_slug and slug_key(c.district) == district_slug
        ]

    def nearest_centers(self, lat, lng, radius_km=50.0, limit=20) -> List[Center]:
        """
        Centers within radius_km of a point, nearest first.

        Centers without coordinates are skipped. Returned records are copies
        carrying distance_km.
        """
        results = []
        for center in self._centers:
            if not center.has_coordinates:
                continue
            distance = haversine_km(lat, lng, center.lat, center.lng)
            if distance <= radius_km:
                results.append((distance, center))

        results.sort(key=lambda pair: pair[0])
        return [replace(center, distance_km=round(distance, 1)) for distance, center in results[:limit]]

def get_directory():
    """
    Return the directory for the current request, loading the dataset once.

    Raises:
        DirectoryLoadError: If the configured dataset cannot be loaded
    """
    if 'center_directory' not in g:
        g.center_directory = CenterDirectory.from_file(
            current_app.config['CENTERS_DATA_FILE'],
            catch_all_region=current_app.config['CATCH_ALL_REGION']
        )
    return g.center_directory
