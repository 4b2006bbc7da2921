# -----------------------------------------------------------------------------
# Network Configuration Constants
# -----------------------------------------------------------------------------

# Host addresses
HOST_ADDRESS = "127.0.0.1"
BIND_ADDRESS = "*"

# Module identity
MODULE_NAME = "karmaMotor"
ROBOT_NAME = "icub"

# Command boundary
RPC_PORT = 9400
STOP_PORT = 9401
STOP_TOPIC = "stop"

# Collaborators
VISION_PORT = 9402
VISION_TOPIC = "tool_tip"
FINDER_PORT = 9403
GAZE_PORT = 9410
LEFT_ARM_PORT = 9411
RIGHT_ARM_PORT = 9412

# Request/reply timeouts (seconds)
ENDPOINT_TIMEOUT = 5.0
SOLVER_TIMEOUT = 5.0

# Service loop
RPC_POLL_MS = 100

# Reply vocabulary
ACK = "ack"
NACK = "nack"
