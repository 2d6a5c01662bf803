# =============================================================================
# L3 World Model - Configuration
# =============================================================================
# All configurable parameters for the world simulation layer.
# Positions are in metres, pixel coordinates (y grows downward).
# Angles are in degrees, CCW from East.
# =============================================================================

# =============================================================================
# MAP DIMENSIONS
# =============================================================================
# Size of the simulated area in metres
MAP_WIDTH = 2.8
MAP_HEIGHT = 2.8

# Number of tiles of the discrete occupancy grid
NUM_TILES_X = 50
NUM_TILES_Y = 50

# =============================================================================
# GOAL CONDITION
# =============================================================================
# The run ends when |dx| + |dy| (true position to goal) falls under this (m)
GOAL_EPSILON = 0.2

# =============================================================================
# RAY MARCHING
# =============================================================================
# How far a simulated projectile moves per iteration (m)
RAY_NUDGE = 0.01

# Observed points are stored in integer millimetres
POINT_SCALE = 1000.0

# =============================================================================
# VEHICLE DEFAULTS
# =============================================================================
# Physical size (m)
DEFAULT_VEHICLE_WIDTH = 0.3
DEFAULT_VEHICLE_HEIGHT = 0.5

# Linear velocity (m/s) and rotational velocity (deg/s)
DEFAULT_LINEAR_VELOCITY = 0.5
DEFAULT_ROTATIONAL_VELOCITY = 60.0

# Maximum span of a LIDAR sweep (deg)
MAX_LIDAR_RANGE = 359.0

# =============================================================================
# SENSOR DEFAULTS
# =============================================================================
# LIDAR: sweep span (deg), angular increment (deg), max distance (m), period (s)
DEFAULT_LIDAR_RANGE = 180.0
DEFAULT_LIDAR_INCREMENT = 1.0
DEFAULT_LIDAR_DISTANCE = 8.0
DEFAULT_LIDAR_PERIOD = 1.0

# Camera: same shape as the LIDAR, detects lines instead of obstacles
DEFAULT_CAMERA_RANGE = 180.0
DEFAULT_CAMERA_INCREMENT = 1.0
DEFAULT_CAMERA_DISTANCE = 2.0
DEFAULT_CAMERA_PERIOD = 0.6

# GPS: 3-sigma position error (m) and update period (s)
DEFAULT_GPS_ERROR = 0.0
DEFAULT_GPS_PERIOD = 0.5

# IMU: 3-sigma heading error (deg) and update period (s)
DEFAULT_IMU_ERROR = 0.0
DEFAULT_IMU_PERIOD = 0.01

# =============================================================================
# ENVIRONMENT DEFAULTS
# =============================================================================
DEFAULT_START_POSITION = (0.1, 0.1)
DEFAULT_GOAL_POSITION = (2.0, 2.0)
DEFAULT_START_HEADING = 0.0

# =============================================================================
# OBSTACLE CONFIGURATION
# =============================================================================
# Diameter range (min, max) of randomly generated obstacle ellipses (m)
OBSTACLE_SIZE_RANGE = (0.15, 0.35)

# Minimum distance between random obstacle centres (m)
OBSTACLE_MIN_DISTANCE = 0.4

# Random obstacles keep this clearance from the start and goal points (m)
OBSTACLE_CLEARANCE = 0.3

# Attempts made to place each random obstacle before giving up
OBSTACLE_PLACEMENT_ATTEMPTS = 100

# Number of obstacles in the random scenario
SCENARIO_RANDOM_NUM_OBSTACLES = 8
