# =============================================================================
# L5 Control Package
# =============================================================================
# Motor loop that turns the planned path into pose changes.
#
# Usage:
#   from L5_control import MotionController
#   motion = MotionController(discrete, pose_estimator, 0.5, 60.0, stop_event)
#   motion.start()
# =============================================================================

from .motion import MotionController, MotionCommand

from .config import (
    MOTOR_PERIOD,
    DEST_ACCEPT_DIST,
    DEST_ACCEPT_ANG
)

__all__ = [
    'MotionController',
    'MotionCommand',

    # Config exports
    'MOTOR_PERIOD',
    'DEST_ACCEPT_DIST',
    'DEST_ACCEPT_ANG',
]

__version__ = '2.0.0'
