# Time conversion constants
SECONDS_PER_MINUTE = 60
SECONDS_PER_DAY = 86400

# Supported Language Codes
SUPPORTED_LANGUAGES = {
    "ko": "Korean",
    "en": "English",
    "ja": "Japanese",
    "fr": "French",
    "de": "German",
    "es": "Spanish",
}

# Translation Engine Defaults
DEFAULT_CACHE_TTL_SECONDS = 30 * SECONDS_PER_MINUTE
DEFAULT_CACHE_SWEEP_PROBABILITY = 0.1
DEFAULT_UNIT_TIMEOUT_SECONDS = 10.0
DEFAULT_MAX_UNIT_RETRIES = 2
DEFAULT_GLOSS_TIMEOUT_SECONDS = 3.0
DEFAULT_MAX_GLOSS_MEANINGS = 5

# Confidence of a successful result; zero marks a failed or filtered one
SUCCESS_CONFIDENCE = 0.9

# History aggregate markers
MULTIPLE_TARGETS_MARKER = "multiple"

# Quota & History
DEFAULT_DAILY_USAGE_LIMIT = 100
DEFAULT_MAX_HISTORY_ITEMS = 100
USAGE_KEY_TTL_SECONDS = 2 * SECONDS_PER_DAY

# Request Guards
DEFAULT_MAX_TEXT_LENGTH = 5000
DEFAULT_RATE_LIMIT_WINDOW_SECONDS = 15 * SECONDS_PER_MINUTE
DEFAULT_RATE_LIMIT_MAX_REQUESTS = 50

# Client identity
DEFAULT_DEVICE_ID = "anonymous"

# CORS Configuration (Development)
CORS_ALLOWED_ORIGINS_DEV = [
    "http://localhost:8081",
    "http://127.0.0.1:8081",
]
