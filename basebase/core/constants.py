"""Shared constants for the basebase client."""

DEFAULT_BASE_URL = "https://app.basebase.us"
API_VERSION = "v1"

DEFAULT_APP_NAME = "[DEFAULT]"

DEFAULT_TIMEOUT_SECONDS = 30.0
AUTH_TIMEOUT_SECONDS = 10.0
HEALTH_CHECK_TIMEOUT_SECONDS = 5.0

# Page size requested when listing a collection (server may return fewer).
DEFAULT_LIST_PAGE_SIZE = 300

API_KEY_PREFIX = "bb_"
API_KEY_MIN_LENGTH = 10
