"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MANUAL_CODE_PREFIX = "MANUAL_"
CODE_MIN = 100000
CODE_MAX = 999999
CODE_GENERATION_ATTEMPTS = 5
DEFAULT_RANDOM_SELECTION_SIZE = 3
