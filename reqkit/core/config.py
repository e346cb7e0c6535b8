import os
from dotenv import load_dotenv
from pathlib import Path

# load .env at import from project root
# Path(__file__) is reqkit/core/config.py, so we go up 2 levels to reach project root
project_root = Path(__file__).parent.parent.parent
load_dotenv(dotenv_path=project_root / ".env")

# Request defaults
DEFAULT_TIMEOUT = float(os.getenv("REQKIT_DEFAULT_TIMEOUT", "15"))  # seconds

# Retry configuration
DEFAULT_RETRY_ATTEMPTS = int(os.getenv("REQKIT_RETRY_ATTEMPTS", "3"))
DEFAULT_BASE_BACKOFF = float(os.getenv("REQKIT_BASE_BACKOFF", "0.2"))  # seconds

# Error formatting
ERROR_BODY_LIMIT = int(os.getenv("REQKIT_ERROR_BODY_LIMIT", "800"))  # characters

# Logging
LOG_LEVEL = os.getenv("REQKIT_LOG_LEVEL", "WARNING")


def validate_config():
    """Validate that numeric settings are usable."""
    invalid_vars = [
        name
        for name, value in [
            ("REQKIT_DEFAULT_TIMEOUT", DEFAULT_TIMEOUT),
            ("REQKIT_RETRY_ATTEMPTS", DEFAULT_RETRY_ATTEMPTS),
            ("REQKIT_BASE_BACKOFF", DEFAULT_BASE_BACKOFF),
            ("REQKIT_ERROR_BODY_LIMIT", ERROR_BODY_LIMIT),
        ]
        if value <= 0
    ]

    if invalid_vars:
        raise ValueError(
            f"Invalid reqkit settings (must be positive): {', '.join(invalid_vars)}\n"
            "Please check your .env file or environment variables."
        )


validate_config()
