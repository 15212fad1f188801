"""Reference tuning for the balloon simulation."""

# Physics (per tick, dt = 1.0 at the nominal frame rate)
GRAVITY = 0.015
BUOYANCY_FACTOR = 0.00035
DRAG = 0.995
AIR_COOLING_RATE = 0.15
BURNER_HEAT_RATE = 0.8
AMBIENT_TEMP = 20.0
MAX_TEMP = 200.0
FUEL_CONSUMPTION_RATE = 0.03
MAX_FUEL = 100.0
SANDBAG_WEIGHT = 0.008

# Flight envelope
SCREEN_MAX_ALTITUDE = 800.0
SAFE_LANDING_SPEED = 0.8
GROUND_LEVEL = 0.0
COUNTDOWN_SECONDS = 30.0

# Scoring
MOUNTAIN_LINE_ALTITUDE = 100.0
MIDDLE_LINE_ALTITUDE = 400.0
TIME_SCORE_POINTS = 1
TIME_SCORE_INTERVAL = 5.0
MOUNTAIN_CROSS_SCORE = 10
MIDDLE_CROSS_SCORE = 5

# Popups
POPUP_WINDOW_TICKS = 90
POPUP_CAPACITY = 16
POPUP_NONE = 0
POPUP_TIME = 1
POPUP_MOUNTAIN = 2
POPUP_MIDDLE = 3

# Timing
TICKS_PER_SECOND = 60.0
FRAME_DURATION_MS = 16.67
MAX_FRAME_DT = 3.0
BURNER_RAMP_RATE = 3.0  # percent per tick while a burn control is held

# Ballast
DEFAULT_SANDBAGS = 4
DEFAULT_MAX_SANDBAGS = 6

# Readout
SPEED_DISPLAY_SCALE = 50.0
CLIMB_DEADBAND = 0.05
SAFE_LANDING_SUMMARY_ALTITUDE = 10.0
FUEL_LOW = 30.0
FUEL_CRITICAL = 10.0
