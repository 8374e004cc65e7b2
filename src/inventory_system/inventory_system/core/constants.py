"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_AUDIT_LIMIT = 100
MAX_AUDIT_LIMIT = 1000
MIN_PASSWORD_LENGTH = 6
DEFAULT_REGISTRATION_ROLE = "accountant"
