# constants.py
"""
Application-level constants.

These values are static and do not change between runs. They are
fundamental to the application's framework, such as rendering properties,
default window sizes, or the declared ranges of the control panel, and are
not part of the galaxy configuration.
"""

# Visualization settings
# Set to True to run in borderless fullscreen mode.
# Set to False to run in a fixed-size window (WINDOW_WIDTH x WINDOW_HEIGHT).
FULLSCREEN = False
WINDOW_WIDTH = 1280
WINDOW_HEIGHT = 760
UI_PANEL_WIDTH = 300
FPS = 60
BACKGROUND_COLOR = (0, 0, 0) # Black, so additive blending starts from zero

# Pixel density is capped to bound memory and fill cost on dense displays.
MAX_PIXEL_RATIO = 2.0

# --- Camera ---
CAMERA_FOV = 75.0
CAMERA_NEAR = 0.1
CAMERA_FAR = 100.0
CAMERA_POSITION = (3.0, 3.0, 3.0)
ORBIT_DAMPING_FACTOR = 0.05
ORBIT_ROTATE_SPEED = 1.0
ORBIT_ZOOM_SPEED = 0.95 # Distance scale per wheel notch
ORBIT_MIN_DISTANCE = 0.5
ORBIT_MAX_DISTANCE = 60.0

# Alpha for the UI panel background
UI_BACKGROUND_ALPHA = 160

# --- Control Panel ---
# Declared (min, max, step) for each numeric galaxy parameter. The panel
# clamps and snaps every committed value to these.
PARAMETER_RANGES = {
    "count": (100, 1000000, 100),
    "size": (0.001, 0.1, 0.001),
    "radius": (0.01, 20.0, 0.01),
    "branches": (2, 20, 1),
    "spin": (-5.0, 5.0, 0.001),
    "randomness": (0.0, 2.0, 0.001),
    "randomness_power": (1.0, 10.0, 0.001),
}
# Colour channels are edited on a 0-255 scale.
COLOR_CHANNEL_RANGE = (0, 255, 1)

# Defaults used when the config file omits a galaxy parameter.
DEFAULT_GALAXY = {
    "count": 100000,
    "size": 0.01,
    "radius": 5.0,
    "branches": 5,
    "spin": -2.0,
    "randomness": 0.2,
    "randomness_power": 3.0,
    "inside_color": "#ff6030",
    "outside_color": "#1b3984",
}
