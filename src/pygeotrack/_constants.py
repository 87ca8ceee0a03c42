"""Internal constants shared across the library."""

USER_AGENT = "pygeotrack/1.0"

# ------------------------------------------------------------------
# Geodesy
# ------------------------------------------------------------------

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE = 111.0
"""Flat-Earth approximation used by the simulation step."""

SIM_LATITUDE_LIMIT = 85.0

# ------------------------------------------------------------------
# Unit conversion
# ------------------------------------------------------------------

KNOTS_TO_KMH = 1.852
MPS_TO_KMH = 3.6
FEET_TO_METERS = 0.3048

# ------------------------------------------------------------------
# Anomaly detection thresholds
# ------------------------------------------------------------------

SPEED_CHANGE_RATIO = 1.8
ALTITUDE_DROP_RATIO = 0.4
ALTITUDE_MIN_METERS = 100.0
HEADING_CHANGE_DEGREES = 45.0
STATIONARY_SPEED_KMH = 1.0
STATIONARY_PREVIOUS_SPEED_KMH = 10.0
PROXIMITY_THRESHOLD_KM = 50.0
PROXIMITY_CRITICAL_KM = 20.0
PROXIMITY_ALERT_LIMIT = 5
HISTORY_SIZE = 10
ANOMALY_LOG_SIZE = 200

# ------------------------------------------------------------------
# Clustering
# ------------------------------------------------------------------

CLUSTER_RADIUS_KM = 100.0
MIN_CLUSTER_SIZE = 3

# ------------------------------------------------------------------
# Live feed sanity limits
# ------------------------------------------------------------------

AIRCRAFT_MAX_SPEED_KMH = 1200.0
AIRCRAFT_FALLBACK_SPEED_KMH = 800.0
SATELLITE_MIN_SPEED_KMH = 1000.0
SATELLITE_MAX_SPEED_KMH = 40000.0
SATELLITE_FALLBACK_SPEED_KMH = 27000.0

# ------------------------------------------------------------------
# Live source endpoints
# ------------------------------------------------------------------

OPENSKY_STATES_URL = "https://opensky-network.org/api/states/all"
ADSB_LOL_ALL_URL = "https://api.adsb.lol/v2/all"
ADSB_LOL_MILITARY_URL = "https://api.adsb.lol/v2/mil"
CELESTRAK_TLE_URL = "https://celestrak.org/NORAD/elements/gp.php?GROUP=visual&FORMAT=tle"
DIGITRAFFIC_AIS_URL = "https://meri.digitraffic.fi/api/ais/v1/locations"
