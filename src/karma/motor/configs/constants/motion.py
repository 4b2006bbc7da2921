# -----------------------------------------------------------------------------
# Motion Planning Constants
# -----------------------------------------------------------------------------

# Controller tweaks
PUSH_STRAIGHTNESS = 10.0
DRAW_STRAIGHTNESS = 30.0
ELBOW_TASK_NAME = "task_2"
ELBOW_TASK_DIM = 6
DEFAULT_ELBOW_HEIGHT = 0.4
DEFAULT_ELBOW_WEIGHT = 30.0

# Torso roll (index 1) disabled for actions; pitch and roll for exploration
ACTION_DISABLED_DOF = (1,)
EXPLORATION_DISABLED_DOF = (0, 1)

# Default duration of the pose-mode contact segment
DEFAULT_MOV_TIME = 1.0

# wait_motion_done polling period
MOTION_POLL_PERIOD = 0.1

# -----------------------------------------------------------------------------
# Push
# -----------------------------------------------------------------------------
PUSH_EPSILON = 0.05
PUSH_APPROACH_HEIGHT = 0.1
SINGULARITY_HALF_WIDTH = 45.0

# (duration, wait timeout) per segment
PUSH_APPROACH = (1.0, 4.0)
PUSH_REACH = (1.0, 4.0)
PUSH_CONTACT_TIMEOUT = 3.0
PUSH_RETREAT = (1.0, 2.0)

# Contact trajectory time, linear over the radius range
TRAJ_RADIUS_RANGE = (0.04, 0.18)
TRAJ_FAST_PROFILE = (0.40, 0.60)
TRAJ_SLOW_PROFILE = (0.50, 0.80)
TRAJ_FAST_HALF_WIDTH = 10.0
TRAJ_TOOL_SCALE = 1.3

# -----------------------------------------------------------------------------
# Draw
# -----------------------------------------------------------------------------
DRAW_APPROACH_HEIGHT = 0.05
DRAW_APPROACH = (2.0, 5.0)
DRAW_REACH = (1.5, 5.0)
DRAW_PULL_DURATION = 3.5
DRAW_PULL_TIMEOUT = 5.0
DRAW2_THETA_SHIFT = -90.0

# Simulate-mode scoring
NEARNESS_RADIUS = 0.15
NEARNESS_PENALTY = 10.0

# -----------------------------------------------------------------------------
# Tool exploration
# -----------------------------------------------------------------------------
EXPLORE_MOVE = (1.0, 5.0)
GAZE_NECK_TRAJ_TIME = 2.5
GAZE_EYES_TRAJ_TIME = 1.5
PIXEL_VERTICAL_OFFSET = 50.0
CONVERGENCE_WINDOW_S = 3.0
CONVERGENCE_MIN_SAMPLES = 20
CONVERGENCE_TARGET_V = 120.0
CONVERGENCE_TOLERANCE_PX = 30.0
CONVERGENCE_TICK_S = 0.02
COLLECTION_TICK_S = 0.1
