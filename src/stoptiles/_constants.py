"""Internal constants shared across the library."""

USER_AGENT = "stoptiles/1"

# ------------------------------------------------------------------
# Exclusion list key prefixes
# ------------------------------------------------------------------

LURE_EXCLUDE_PREFIX = "l"
INVASION_EXCLUDE_PREFIX = "i"

# ------------------------------------------------------------------
# Range circles (metres / leaflet path options)
# ------------------------------------------------------------------

INTERACTION_RANGE_M = 80.0
INTERACTION_RANGE_COLOR = "#0DA8E7"
LURE_RANGE_M = 40.0
LURE_RANGE_COLOR = "#32cd32"
CUSTOM_RANGE_COLOR = "purple"

DEFAULT_INTERACTION_RANGE_ZOOM = 15.0
TIMER_LABEL_OFFSET: tuple[int, int] = (0, 4)

# Threshold to distinguish seconds from milliseconds.
MS_THRESHOLD = 1e11


def lure_exclude_key(lure_id: object) -> str:
    """Exclusion list key for a lure type."""
    return f"{LURE_EXCLUDE_PREFIX}{lure_id}"


def invasion_exclude_key(grunt_type: object) -> str:
    """Exclusion list key for an invasion grunt type."""
    return f"{INVASION_EXCLUDE_PREFIX}{grunt_type}"
