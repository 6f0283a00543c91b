"""Template filters for the panel."""

from typing import Mapping


def site_name(site_id: str, sites: Mapping[str, str]) -> str:
    """Get the display name of a site, matching its ID case-insensitively."""
    wanted = site_id.casefold()
    for known_id, name in sites.items():
        if known_id.casefold() == wanted:
            return name
    return site_id
