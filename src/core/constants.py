"""Core application constants."""

# Security
DEFAULT_HSTS_MAX_AGE = 31536000  # 1 year in seconds

# Logging
CORRELATION_ID_DISPLAY_LENGTH = 8
MAX_FIELD_VALUE_LENGTH = 100
