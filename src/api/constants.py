"""API-related constants."""

# HTTP Headers
CORRELATION_ID_HEADER = "X-Correlation-ID"

# Request handling
REQUEST_BODY_METHODS = {"POST", "PUT", "PATCH"}

# Error envelope messages
INTERNAL_ERROR_MESSAGE = "An internal server error occurred"
MALFORMED_JSON_MESSAGE = "Request body is not valid JSON"
