"""
SEO-friendly slugs for region-first center URLs.

URLs have the shape /{region}/{state}/{district}. Every segment is derived
from a display name with slugify(), so "West Zone" -> "west-zone". Names
with no ASCII letters or digits keep their own (lowercased) text, which
format_center_url() percent-encodes.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import quote, unquote


def slugify(name: Optional[str]) -> str:
    s = (name or "").strip().lower()
    s = re.sub(r"[^a-z0-9]+", "-", s)
    s = re.sub(r"-{2,}", "-", s).strip("-")
    return s


def slug_key(name: Optional[str]) -> str:
    """slugify(), or the lowercased name when it has no ASCII letters or digits."""
    return slugify(name) or (name or "").strip().lower()


def decode_segment(segment: Optional[str]) -> str:
    """Percent-decode one path segment; malformed escapes are left as-is."""
    if not segment:
        return ""
    try:
        return unquote(segment, errors="strict")
    except UnicodeDecodeError:
        return segment


def format_center_url(region: str, state: str, district: Optional[str] = None) -> str:
    """Canonical listing URL for a region/state(/district) triple."""
    parts = [slug_key(region), slug_key(state)]
    if district:
        parts.append(slug_key(district))
    return "/" + "/".join(quote(p, safe="") for p in parts)
