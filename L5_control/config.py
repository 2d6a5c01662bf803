# =============================================================================
# L5 Control - Configuration
# =============================================================================
# Parameters of the motor loop that follows the planned path.
# =============================================================================

# =============================================================================
# MOTOR LOOP
# =============================================================================
# Time between two motion commands (s)
MOTOR_PERIOD = 0.005

# Seconds to wait for the motor thread to finish on shutdown
MOTOR_JOIN_TIMEOUT = 1.0

# =============================================================================
# WAYPOINT ACCEPTANCE
# =============================================================================
# A waypoint is reached when the vehicle tile lies within this distance (tiles)
DEST_ACCEPT_DIST = 0.3

# Heading error under which the vehicle drives instead of turning (deg)
DEST_ACCEPT_ANG = 2.0
