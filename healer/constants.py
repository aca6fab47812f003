from __future__ import annotations

# ==============================================================================
# Observation normalization
# ==============================================================================

# Horizontal displacement components are clamped to +/- this (world units).
OBS_DISPLACEMENT_RANGE = 10.0

# Horizontal distance is clamped to [0, this].
OBS_DISTANCE_RANGE = 10.0

# Closing speed is clamped to +/- this (world units / s).
OBS_CLOSING_SPEED_RANGE = 5.0

# Path length is clamped to [0, this]; also reported when no path exists.
OBS_PATH_LENGTH_RANGE = 20.0

# HP fraction thresholds for the low-HP flags (inclusive).
ALLY_LOW_HP_FRACTION = 0.70
SELF_LOW_HP_FRACTION = 0.40

# HP maxima are floored at this before dividing.
MIN_HP_NORMALIZER = 1.0

# ==============================================================================
# Geometry tolerances
# ==============================================================================

# Slack added to the heal range for in-range tests.
RANGE_EPSILON = 1e-3

# Below this squared horizontal length the direction to the ally is undefined
# for observation purposes.
OBS_DIRECTION_EPS_SQ = 1e-6

# Below this horizontal distance the movement direction is treated as zero.
MOVE_DIRECTION_EPS = 1e-4

# ==============================================================================
# Movement planner
# ==============================================================================

# Margin placed beyond a violated band edge when holding.
HOLD_MARGIN = 0.1

# Approach target sits this fraction of the way from ideal_min to ideal_max.
APPROACH_BAND_FRACTION = 0.3

# Retreat moves at least this far, or band overshoot plus this margin.
RETREAT_MIN_STEP = 0.5
RETREAT_MARGIN = 0.5

# Scripted pursuit stops inside this fraction of ideal_min (floored below).
FOLLOW_STOP_FRACTION = 0.95
FOLLOW_STOP_FLOOR = 0.1

# ==============================================================================
# Debug readout
# ==============================================================================

# Moving-average sample count cap for the reward delta readout.
HUD_SMA_MAX_COUNT = 400
