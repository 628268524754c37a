"""Shared constants for the git-timelapse application.

For environment-based configuration (frame size, workers, etc.), use the env module:
    from common.env import env
    width = env.frame_width()
"""

# Rendering defaults (overridable through env and CLI flags)
DEFAULT_WIDTH = 1280
DEFAULT_HEIGHT = 720
DEFAULT_WINDOW_DAYS = 30
DEFAULT_MODE = "heat"

SECONDS_PER_MINUTE = 60
SECONDS_PER_DAY = 86_400

# Placeholder for commits without an author name
UNKNOWN_AUTHOR = "Unknown"

# Pixels with no data
BACKGROUND_COLOR: tuple[int, int, int] = (8, 8, 12)

# Heat count that reaches the hottest gradient stop
HEAT_SATURATION = 10

# Heat gradient stops in CIE LCh (lightness, chroma, hue in degrees), cold to hot
HEAT_STOPS_LCH: tuple[tuple[float, float, float], ...] = (
    (20.0, 30.0, 250.0),  # dark blue
    (40.0, 40.0, 260.0),  # blue
    (95.0, 35.0, 90.0),  # light yellow
    (75.0, 80.0, 50.0),  # orange
    (65.0, 100.0, 30.0),  # red-orange
)

# Committer colors: fixed seed, bright saturated LCh
COMMITTER_COLOR_SEED = 42
COMMITTER_LIGHTNESS = 70.0
COMMITTER_CHROMA = 80.0

FRAME_FILENAME = "frame_{index:06d}.png"
