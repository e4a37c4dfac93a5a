"""HTTP constants for the request engine.

Centralizes all HTTP-related constants to avoid duplication across modules.
"""

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK = 200
HTTP_STATUS_REDIRECT_MAX = 400
HTTP_STATUS_BAD_REQUEST = 400
HTTP_STATUS_SERVER_ERROR_MIN = 500

# Client-side failures carry no HTTP status
CLIENT_ERROR_STATUS = -1

# Engine defaults (milliseconds)
DEFAULT_REQUEST_TIMEOUT_MS = 60_000
DEFAULT_REQUEST_ATTEMPTS = 5
DEFAULT_RETRY_DELAY_MS = 1_500
DEFAULT_DEDUP_POLL_MS = 100

# Identification banner
SDK_VERSION = "1.0.0"
DEFAULT_PRODUCT_NAME = "TagoIO-SDK|Python"
VENDOR_ANALYSIS_CONTEXT = "tago-io"

# Headers whose value identifies the caller, checked in order
DEFAULT_IDENTITY_HEADERS = ("token", "authorization")

# Endpoints whose 200 responses are not wrapped in {status, result}
DEFAULT_RAW_RESULT_PATHS = ("/data/export",)

# Fixed status texts for client-side failures
TIMEOUT_STATUS_TEXT = "Request timeout"
NETWORK_ERROR_STATUS_TEXT = "fetch failed"
UNKNOWN_STATUS_TEXT = "Unknown error"
