"""Configuration for formula utilities.

Values that depend on the deployment are read from the environment once, at
import time.
"""

import os

from formula_utils import __version__

# Content API
CONTENT_BASE_URL = os.getenv("DRUPAL_BASE_URL", "http://localhost:8080").rstrip("/")
REQUEST_TIMEOUT = float(os.getenv("FORMULA_REQUEST_TIMEOUT", "30"))
USER_AGENT = f"formula-utils/{__version__}"

# Similarity defaults
DEFAULT_MIN_SIMILARITY = 10
DEFAULT_MAX_RESULTS = 10
DEFAULT_RESPONSE_MAX_RESULTS = 5

# Cache TTLs in seconds
CACHE_TTL = {
    "formulas_list": 300,  # formula pool fetched from the content API
    "similarities": 600,  # computed rankings
    "medium": 300,
}
CACHE_SWEEP_INTERVAL = 300
