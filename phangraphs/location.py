"""Location parsing: state and country from setlist location strings.

Setlist locations come in two shapes:
    "New York, NY"                   → US show, two-letter state
    "Toronto, Ontario, Canada"       → international, country last
"""

from phangraphs.config import US_COUNTRY

# 50 US states + DC: abbreviation → full name
US_STATE_ABBREV = {
    "AL": "Alabama", "AK": "Alaska", "AZ": "Arizona", "AR": "Arkansas",
    "CA": "California", "CO": "Colorado", "CT": "Connecticut", "DE": "Delaware",
    "FL": "Florida", "GA": "Georgia", "HI": "Hawaii", "ID": "Idaho",
    "IL": "Illinois", "IN": "Indiana", "IA": "Iowa", "KS": "Kansas",
    "KY": "Kentucky", "LA": "Louisiana", "ME": "Maine", "MD": "Maryland",
    "MA": "Massachusetts", "MI": "Michigan", "MN": "Minnesota", "MS": "Mississippi",
    "MO": "Missouri", "MT": "Montana", "NE": "Nebraska", "NV": "Nevada",
    "NH": "New Hampshire", "NJ": "New Jersey", "NM": "New Mexico", "NY": "New York",
    "NC": "North Carolina", "ND": "North Dakota", "OH": "Ohio", "OK": "Oklahoma",
    "OR": "Oregon", "PA": "Pennsylvania", "RI": "Rhode Island", "SC": "South Carolina",
    "SD": "South Dakota", "TN": "Tennessee", "TX": "Texas", "UT": "Utah",
    "VT": "Vermont", "VA": "Virginia", "WA": "Washington", "WV": "West Virginia",
    "WI": "Wisconsin", "WY": "Wyoming", "DC": "District of Columbia",
}

# Reverse lookup: full name → abbreviation
_STATE_BY_NAME = {v: k for k, v in US_STATE_ABBREV.items()}


def normalize_state(raw):
    """Return the two-letter abbreviation for a US state, or None.

    Accepts abbreviations in any case ("ny", "N.Y.") and full names
    ("New York").  Anything else (provinces, countries) returns None.
    """
    if not raw:
        return None
    raw = raw.strip().rstrip(".,")
    if not raw:
        return None
    nodots = raw.upper().replace(".", "")
    if nodots in US_STATE_ABBREV:
        return nodots
    return _STATE_BY_NAME.get(raw)


def is_us_state(text):
    """Return True if text is a US state name or abbreviation."""
    return normalize_state(text) is not None


def parse_location(text):
    """Split a location string into (city, state, country).

    Handles:
        "New York, NY"              → ("New York", "NY", "USA")
        "Morrison, Colorado"        → ("Morrison", "CO", "USA")
        "Toronto, Ontario, Canada"  → ("Toronto", None, "Canada")
        "Mexico City, Mexico"       → ("Mexico City", None, "Mexico")
        "Philadelphia"              → ("Philadelphia", None, "")
        ""                          → (None, None, "")
    """
    if not text or not text.strip():
        return None, None, ""

    parts = [p.strip() for p in text.split(",")]
    city = parts[0] or None
    if len(parts) < 2:
        return city, None, ""

    if is_us_state(parts[-1]):
        return city, normalize_state(parts[-1]), US_COUNTRY
    # "City, ST, USA" style
    if parts[-1].upper() in (US_COUNTRY, "US", "UNITED STATES"):
        state = normalize_state(parts[-2]) if len(parts) >= 3 else None
        return city, state, US_COUNTRY
    return city, None, parts[-1]
