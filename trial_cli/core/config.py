# trial_cli/core/config.py
from pathlib import Path
import os

from trialguard.errors import ConfigurationError

# License server URL
BASE_URL = os.environ.get("TRIALGUARD_URL", "http://127.0.0.1:8081")

# Local folder holding the grant artifacts and the last online check
APP_DIR = Path(os.environ.get("TRIALGUARD_HOME", str(Path.home() / ".trialguard")))

TOKEN_FILENAME = "trial.token"
SIGNATURE_FILENAME = "trial.signature"
LAST_CHECK_FILENAME = ".last_license_check"

# Authority public key (hex), provisioned out of band. Never fetched at verification time.
PUBLIC_KEY = os.environ.get("TRIALGUARD_PUBLIC_KEY")
PUBLIC_KEY_FILE = os.environ.get("TRIALGUARD_PUBLIC_KEY_FILE")

# Offline allowance in hours since the last successful online check (0 disables it)
GRACE_PERIOD_HOURS = os.environ.get("TRIALGUARD_GRACE_HOURS", "24")

# Seconds allowed for the revocation round trip
CHECK_TIMEOUT = os.environ.get("TRIALGUARD_CHECK_TIMEOUT", "5")


def grace_period_hours() -> int:
    try:
        hours = int(GRACE_PERIOD_HOURS)
    except (TypeError, ValueError):
        raise ConfigurationError(f"TRIALGUARD_GRACE_HOURS must be a whole number of hours, got {GRACE_PERIOD_HOURS!r}")
    if hours < 0:
        raise ConfigurationError(f"TRIALGUARD_GRACE_HOURS cannot be negative, got {hours}")
    return hours


def check_timeout() -> float:
    try:
        seconds = float(CHECK_TIMEOUT)
    except (TypeError, ValueError):
        raise ConfigurationError(f"TRIALGUARD_CHECK_TIMEOUT must be a number of seconds, got {CHECK_TIMEOUT!r}")
    if not seconds > 0:
        raise ConfigurationError(f"TRIALGUARD_CHECK_TIMEOUT must be positive, got {CHECK_TIMEOUT!r}")
    return seconds
