"""Application constants.

Operator-facing messages and fixed limits shared by the scan pipeline,
the HTTP layer and the station runner.
"""

# Scan outcome messages (shown on the station screen verbatim)
MSG_INVALID_TOKEN = "Invalid QR code"
MSG_SELECT_SESSION = "Please select a meal session"
MSG_SESSION_INACTIVE = "Meal session is not active"
MSG_ENTRY_RECORDED = "Entry Recorded"
MSG_EXIT_RECORDED = "Exit Recorded"
MSG_MEAL_GRANTED = "Meal Granted!"
MSG_ALREADY_CLAIMED = "Already claimed this meal!"
MSG_UPDATE_FAILED = "Failed to update status"
MSG_RECORD_FAILED = "Failed to record meal"
MSG_SCAN_FAILED = "Scan failed. Please try again."

# Camera errors
MSG_CAMERA_UNAVAILABLE = "Failed to start camera. Please ensure camera permissions are granted."
MSG_CAMERA_DEPENDENCIES = (
    "Missing QR scanner dependencies. Install OpenCV (cv2) and zxing-cpp to enable scanning."
)

# Storage-level name of the claim-once constraint on redemptions
REDEMPTION_UNIQUE_CONSTRAINT = "uq_redemption_participant_session"

# Field limits
MAX_TOKEN_LENGTH = 255
MAX_SESSION_KEY_LENGTH = 50
MAX_STAFF_ID_LENGTH = 64
MAX_STATION_ID_LENGTH = 64

# Characters of a scanned token that may appear in logs
TOKEN_LOG_PREFIX = 6

# Default number of rows returned by the recent activity feed
RECENT_ACTIVITY_LIMIT = 10
