# Global knobs (display + layout/proximity thresholds)
SCREEN_W, SCREEN_H = 1200, 800

DT = 1/30.0                 # frame step (s)
SPEED_MULTIPLIER = 1.0

# Scope defaults
DEFAULT_RANGE_NM = 15.0
MIN_ALTITUDE_FT = 0
MAX_ALTITUDE_FT = 60000
DATABLOCK_FREQUENCY_S = 3   # seconds per datablock text phase
RADAR_TRACKS_DRAWN = 5
POINT_OUT_DURATION_S = 5.0

# Colors
BG_COLOR = (12, 12, 18)

# ---------------------------------------------------------------------
# Datablock layout
# ---------------------------------------------------------------------
DATABLOCK_PADDING = 5.0     # box expansion used for all overlap tests
EDGE_ANCHOR_NUDGE = 3.0     # extra slop for edge-midpoint anchors
RELAXATION_ITERATIONS = 20
RELAXATION_GAIN = 2.0
RELAXATION_MAX_STEP = 32.0
ATTRACTION_MIN_DISTANCE = 1.0
ONSCREEN_MARGIN = 100.0     # window units beyond the pane still laid out

# Default monospace text metrics (window units)
FONT_PX = 14
CHAR_W = max(6, int(round(FONT_PX * 0.6)))
LINE_SPACING = -2
LINE_H = FONT_PX + LINE_SPACING

# ---------------------------------------------------------------------
# Range warnings / violations
# Each row: (rules, warn_lateral_nm, warn_vertical_ft,
#            viol_lateral_nm, viol_vertical_ft)
# ---------------------------------------------------------------------

RANGE_LIMITS = [
    # rules, warn_lat, warn_vert, viol_lat, viol_vert
    ("IFR",    4.0,     1000,      3.0,      800),
    ("VFR",    0.5,      750,      0.3,      300),
]

ALERT_COOLDOWN_S = 3.0


def get_range_limits(rules: str):
    for rule_name, warn_lat, warn_vert, viol_lat, viol_vert in RANGE_LIMITS:
        if rule_name == rules:
            return {
                "warning_lateral_nm": warn_lat,
                "warning_vertical_ft": warn_vert,
                "violation_lateral_nm": viol_lat,
                "violation_vertical_ft": viol_vert,
            }

    # Fallback: most permissive row is the VFR one
    return get_range_limits("VFR")


# ---------------------------------------------------------------------
# Miles-in-trail
# ---------------------------------------------------------------------
MIT_HORIZON_S = 30.0          # extrapolation time for projected spacing
MIT_SEARCH_RADIUS_NM = 20.0
MIT_MAX_HEADING_DIFF_DEG = 150.0
MIT_MAX_ALT_DIFF_FT = 3000.0
MIT_SAFE_NM = 5.0             # > safe
MIT_CAUTION_NM = 3.0          # (3, 5] caution, <= 3 danger

# ---------------------------------------------------------------------
# Vector lines and CRDA
# ---------------------------------------------------------------------
VECTOR_LINE_MODE = "minutes"  # "nm" or "minutes"
VECTOR_LINE_EXTENT = 1.0

CRDA_LATERAL_SPREAD_DEG = 10.0
CRDA_RANGE_NM = 25.0

# Planar lat/long approximation
NM_PER_LATITUDE = 60.0
MAGNETIC_VARIATION = 0.0
