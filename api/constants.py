"""
API Constants and Configuration
"""

# API Version
API_VERSION = "v1"

# Request limits
MAX_NAME_LENGTH = 512
MAX_PATH_LENGTH = 4096
MAX_URL_LENGTH = 2048
MIN_YEAR = 1800
MAX_YEAR = 9999
