"""Internal constants shared across the library."""

USER_AGENT = "pygamesync"
SCHEMA_VERSION = 1

DEFAULT_BUCKET = "game-config"
DEFAULT_MEDIA_PREFIX = "mediapool"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"

# ------------------------------------------------------------------
# Object-store layout
# ------------------------------------------------------------------

INDEX_FILE = "index.json"
CURRENT_FILE = "current.json"
VERSIONS_DIR = "versions"
LIVE_DIR = "live"
HEALTH_PROBE_PATH = "_health/ok.json"

# ------------------------------------------------------------------
# Spherical (Web) Mercator
# ------------------------------------------------------------------

EARTH_RADIUS_M = 6378137.0
#: Latitudes closer than this to a pole are clamped before projecting.
POLE_EPSILON_DEG = 1e-9
#: Distinct-pin precision (6 decimals is roughly 0.11 m).
COORDINATE_DEDUP_DECIMALS = 6
