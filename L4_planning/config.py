# =============================================================================
# L4 Planning - Configuration
# =============================================================================
# Tunable constants of the planning strategies. Costs are fixed-point
# integers: one orthogonal tile step costs 10.
# =============================================================================

# =============================================================================
# STEP COSTS
# =============================================================================
ORTHOGONAL_COST = 10
DIAGONAL_COST = 14          # 10 * sqrt(2), rounded

# =============================================================================
# A* FAMILY
# =============================================================================
# Manhattan heuristic multiplier.
# 10 = same as distance, >10 favours nodes closer to the destination
HEURISTIC_WEIGHTING = 10

# Repulsion: 10 = avoiding a block directly next to a node is worth one tile
REPULSION_WEIGHTING = 30

# Size of each repulsion window (tiles checked in each quadrant)
REPULSION_DIST = 5

# Turn penalty per 45 degree heading change.
# 10 = turning 45 degrees costs the same as moving one tile
TURNING_WEIGHTING = 10

# =============================================================================
# PATH SMOOTHING
# =============================================================================
# Distance between samples along a candidate shortcut (tiles)
WALK_SAMPLE_STEP = 0.25

# Vehicle width used by the width-aware segment check (tiles).
# Larger than 4 and the side samples might jump over an obstacle.
VEHICLE_TILE_WIDTH = 4.0

# =============================================================================
# SAMPLING PLANNER (RRT)
# =============================================================================
# Maximum distance a new tree node may be from its nearest neighbour (tiles)
RRT_STEP = 4.0

# Samples drawn before the search gives up
RRT_MAX_SAMPLES = 200000

# =============================================================================
# POTENTIAL FIELD
# =============================================================================
# Magnitude of the attraction toward the destination
GOAL_FORCE = 0.5

# Obstacles further than sqrt(cutoff) tiles are ignored
REPULSION_CUTOFF_SQ = 32

# Lookahead steps of the plain and of the smoothed variants
FIELD_STEPS = 5
FIELD_SMOOTHED_STEPS = 8

# How many consecutive waypoints smoothing may cut
FIELD_MAX_CUT = 5
