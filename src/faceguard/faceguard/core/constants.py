"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

REGISTRY_SNAPSHOT = "faceguard_users"
LEDGER_SNAPSHOT = "faceguard_records"

DEFAULT_DISPLAY_INTERVAL_SECONDS = 5.0
DEFAULT_ORACLE_TIMEOUT_SECONDS = 30.0
DEFAULT_RECENT_ACTIVITY_LIMIT = 10
DEFAULT_GEMINI_MODEL = "gemini-3-flash-preview"
DEFAULT_GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"

REASON_NO_IDENTITIES = "no registered identities"
REASON_ORACLE_ERROR = "oracle error"

MATCH_INSTRUCTION = (
    "You are an automated attendance security system. Your task is to identify a person. "
    "Below are the 'Reference Images' of registered users, each followed by their ID. "
    "The final image is the 'Target Image' from the live camera. Compare the Target Image "
    "against the Reference Images based on facial features. If the person in the Target Image "
    "matches a Reference Image, return the User ID. If no match is found, return null."
)
